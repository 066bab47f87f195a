from typing import List, Optional

from pydantic import Field

from .base import BaseSettings


class ProductionSettings(BaseSettings):
    # ===============================
    # ENVIRONMENT SETTINGS
    # ===============================
    ENVIRONMENT: str = "production"
    DEBUG: bool = False

    # ===============================
    # DATABASE SETTINGS - SUPABASE
    # ===============================
    DATABASE_URL: str = Field(..., description="Supabase PostgreSQL connection URL")
    DATABASE_ECHO: bool = False  # Never echo SQL in production

    # ===============================
    # SUPABASE AUTH
    # ===============================
    SUPABASE_URL: str = Field(..., description="Supabase project URL")
    SUPABASE_KEY: str = Field(..., description="Supabase anon key")
    SUPABASE_JWT_SECRET: Optional[str] = Field(
        default=None, description="JWT secret used to verify access tokens locally"
    )

    # ===============================
    # CORS SETTINGS
    # ===============================
    BACKEND_CORS_ORIGINS: List[str] = Field(
        default_factory=list, description="CORS origins for production frontends"
    )

    # ===============================
    # VENDOR KEYS
    # ===============================
    GOOGLE_BOOKS_API_KEY: Optional[str] = Field(
        default=None, description="Google Books API key"
    )
    OPENAI_API_KEY: Optional[str] = Field(default=None, description="OpenAI API key")
    STRIPE_SECRET_KEY: Optional[str] = Field(
        default=None, description="Stripe secret key"
    )

    # ===============================
    # LOGGING SETTINGS
    # ===============================
    LOG_LEVEL: str = Field(default="INFO", description="Logging level")
    LOG_FILE: Optional[str] = Field(default=None, description="Log file path")

    model_config = {
        "case_sensitive": True,
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
    }
