import logging
from typing import Any, Dict, Optional

from supabase import Client, create_client

from readrival.core.settings import settings

logger = logging.getLogger(__name__)


class SupabaseClient:
    """Thin wrapper over the hosted auth service, used when tokens cannot be verified locally."""

    def __init__(self):
        self.url = settings.SUPABASE_URL
        self.key = settings.SUPABASE_KEY
        self._client: Optional[Client] = None

    @property
    def is_configured(self) -> bool:
        return bool(self.url and self.key)

    @property
    def client(self) -> Client:
        if self._client is None:
            if not self.is_configured:
                raise ValueError(
                    "SUPABASE_URL and SUPABASE_KEY must be configured in settings"
                )
            self._client = create_client(self.url, self.key)
        return self._client

    def get_user(self, access_token: str) -> Optional[Dict[str, Any]]:
        """Resolve an access token to ``{"id", "email"}`` or None when rejected."""
        try:
            response = self.client.auth.get_user(access_token)
        except ValueError:
            raise
        except Exception as e:
            logger.warning(f"Supabase rejected access token: {str(e)}")
            return None

        user = getattr(response, "user", None)
        if user is None:
            return None
        return {"id": str(user.id), "email": getattr(user, "email", None)}


# Singleton instance
supabase_client = SupabaseClient()
