from typing import List, Optional

from .base import BaseSettings


class TestingSettings(BaseSettings):
    ENVIRONMENT: str = "testing"
    DEBUG: bool = True

    PROJECT_NAME: str = "ReadRival API - Testing"

    DATABASE_URL: str = "sqlite:///:memory:"
    DATABASE_ECHO: bool = False

    SUPABASE_JWT_SECRET: Optional[str] = "testing-jwt-secret-with-at-least-32-characters"

    # Vendor keys are fake; tests replace the transports
    GOOGLE_BOOKS_API_KEY: Optional[str] = "test-google-key"
    OPENAI_API_KEY: Optional[str] = "test-openai-key"
    STRIPE_SECRET_KEY: Optional[str] = "sk_test_readrival"

    BACKEND_CORS_ORIGINS: List[str] = ["http://localhost:3000"]

    LOG_LEVEL: str = "ERROR"
    LOG_FILE: Optional[str] = None

    model_config = {
        "case_sensitive": True,
        "env_prefix": "TEST_",
        "extra": "ignore",
    }
