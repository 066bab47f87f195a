from typing import List, Optional

from pydantic_settings import BaseSettings as PydanticBaseSettings


class BaseSettings(PydanticBaseSettings):
    # ===============================
    # APPLICATION SETTINGS
    # ===============================
    PROJECT_NAME: str = "ReadRival API"
    VERSION: str = "1.0.0"
    DESCRIPTION: str = (
        "Social reading platform: catalog search, reading progress, "
        "challenges, leaderboards and feed"
    )

    # ===============================
    # API SETTINGS
    # ===============================
    API_V1_STR: str = "/api/v1"

    # ===============================
    # DATABASE SETTINGS
    # ===============================
    AUTO_CREATE_TABLES: bool = False

    # ===============================
    # SUPABASE AUTH
    # ===============================
    SUPABASE_URL: Optional[str] = None
    SUPABASE_KEY: Optional[str] = None
    SUPABASE_JWT_SECRET: Optional[str] = None
    SUPABASE_JWT_AUDIENCE: str = "authenticated"
    ALGORITHM: str = "HS256"

    # ===============================
    # PAGINATION SETTINGS
    # ===============================
    DEFAULT_PAGE_SIZE: int = 20
    MAX_PAGE_SIZE: int = 100

    # ===============================
    # BOOK METADATA PROVIDER
    # ===============================
    GOOGLE_BOOKS_API_URL: str = "https://www.googleapis.com/books/v1/volumes"
    GOOGLE_BOOKS_API_KEY: Optional[str] = None
    CATALOG_MAX_RESULTS: int = 20
    CATALOG_FALLBACK_LIMIT: int = 10

    # ===============================
    # AI RECOMMENDATIONS
    # ===============================
    OPENAI_API_KEY: Optional[str] = None
    OPENAI_BASE_URL: str = "https://api.openai.com/v1"
    OPENAI_MODEL: str = "gpt-4o-mini"
    OPENAI_TEMPERATURE: float = 0.7
    AI_MAX_TOKENS_FREE: int = 1000
    AI_MAX_TOKENS_PREMIUM: int = 2000

    # ===============================
    # PAYMENTS
    # ===============================
    STRIPE_SECRET_KEY: Optional[str] = None
    STRIPE_API_VERSION: str = "2023-10-16"
    CHECKOUT_CURRENCY: str = "usd"
    DEFAULT_FRONTEND_ORIGIN: str = "http://localhost:5173"

    # ===============================
    # OUTBOUND HTTP
    # ===============================
    HTTP_TIMEOUT_SECONDS: float = 10.0
    AI_TIMEOUT_SECONDS: float = 60.0

    # ===============================
    # LOGGING SETTINGS
    # ===============================
    LOG_LEVEL: str = "INFO"
    LOG_FILE: Optional[str] = None

    # ===============================
    # CORS SETTINGS
    # ===============================
    BACKEND_CORS_ORIGINS: List[str] = []

    # ===============================
    # COMPUTED PROPERTIES
    # ===============================
    @property
    def is_development(self) -> bool:
        return self.ENVIRONMENT == "development"

    @property
    def is_production(self) -> bool:
        return self.ENVIRONMENT == "production"

    @property
    def is_testing(self) -> bool:
        return self.ENVIRONMENT == "testing"

    model_config = {
        "case_sensitive": True,
        "env_file": ".env",
        "env_file_encoding": "utf-8",
    }
