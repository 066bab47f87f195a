"""
Database engine, session factory and declarative base.
"""
import json
import logging
import uuid

from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

from readrival.core.settings import settings

logger = logging.getLogger(__name__)


def _json_serializer(value):
    # Keep non-ASCII author names searchable with LIKE
    return json.dumps(value, ensure_ascii=False)


def build_engine(database_url: str, echo: bool = False):
    if database_url.startswith("sqlite"):
        kwargs = {"connect_args": {"check_same_thread": False}}
        if ":memory:" in database_url:
            kwargs["poolclass"] = StaticPool
        return create_engine(
            database_url, echo=echo, json_serializer=_json_serializer, **kwargs
        )
    return create_engine(
        database_url,
        echo=echo,
        pool_pre_ping=True,
        json_serializer=_json_serializer,
    )


engine = build_engine(settings.DATABASE_URL, echo=settings.DATABASE_ECHO)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()


def generate_uuid() -> str:
    return str(uuid.uuid4())


def init_db() -> None:
    """Create all tables registered on ``Base.metadata``."""
    import readrival.models  # noqa: F401

    Base.metadata.create_all(bind=engine)
    logger.info("Database tables ensured")


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
