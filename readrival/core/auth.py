import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt
from sqlalchemy.orm import Session

from readrival.core.database import get_db
from readrival.core.exceptions import (
    ForbiddenException,
    ServiceUnavailableException,
    UnauthorizedException,
)
from readrival.core.settings import settings
from readrival.core.supabase_client import supabase_client
from readrival.crud.profile import crud_profile
from readrival.models.profile import Profile

logger = logging.getLogger(__name__)

security = HTTPBearer(auto_error=False)


def create_access_token(
    user_id: str,
    email: Optional[str] = None,
    expires_delta: Optional[timedelta] = None,
) -> str:
    """Issue a token shaped like the hosted auth service's access tokens."""
    if not settings.SUPABASE_JWT_SECRET:
        raise ServiceUnavailableException(detail="JWT secret is not configured")
    expire = datetime.now(timezone.utc) + (expires_delta or timedelta(hours=1))
    to_encode: Dict[str, Any] = {
        "sub": user_id,
        "aud": settings.SUPABASE_JWT_AUDIENCE,
        "role": "authenticated",
        "exp": expire,
    }
    if email:
        to_encode["email"] = email
    return jwt.encode(
        to_encode, settings.SUPABASE_JWT_SECRET, algorithm=settings.ALGORITHM
    )


def decode_access_token(token: str) -> Dict[str, Any]:
    try:
        payload = jwt.decode(
            token,
            settings.SUPABASE_JWT_SECRET,
            algorithms=[settings.ALGORITHM],
            audience=settings.SUPABASE_JWT_AUDIENCE,
        )
    except JWTError as e:
        logger.warning(f"JWT decode failed: {str(e)}")
        raise UnauthorizedException(detail="Could not validate credentials")

    if not payload.get("sub"):
        raise UnauthorizedException(detail="Token has no subject")
    return payload


def _resolve_claims(token: str) -> Dict[str, Any]:
    if settings.SUPABASE_JWT_SECRET:
        payload = decode_access_token(token)
        return {"id": payload["sub"], "email": payload.get("email")}

    if not supabase_client.is_configured:
        raise ServiceUnavailableException(detail="Authentication is not configured")
    user = supabase_client.get_user(token)
    if user is None:
        raise UnauthorizedException(detail="Could not validate credentials")
    return user


def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: Session = Depends(get_db),
) -> Profile:
    """Authenticate the bearer token and load (or create) the reader profile."""
    if credentials is None or not credentials.credentials:
        raise UnauthorizedException()

    claims = _resolve_claims(credentials.credentials)
    return crud_profile.get_or_create(db, user_id=claims["id"], email=claims.get("email"))


def get_current_admin_user(
    current_user: Profile = Depends(get_current_user),
) -> Profile:
    if not current_user.is_admin:
        raise ForbiddenException(detail="Admin privileges required")
    return current_user
