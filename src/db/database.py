import logging
from typing import Iterator

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from config.settings import get_database_settings
from src.db.models import Base

logger = logging.getLogger(__name__)

settings = get_database_settings()

# SQLite needs check_same_thread disabled when sessions cross FastAPI's threadpool
_connect_args = {"check_same_thread": False} if settings.url.startswith("sqlite") else {}

engine = create_engine(settings.url, echo=settings.echo, connect_args=_connect_args)

# Create a configured "Session" class
SessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False)


def init_db(bind: Engine = engine) -> None:
    """Creates tables that do not exist yet."""
    Base.metadata.create_all(bind=bind)
    logger.info("Database tables ensured.")


def get_db() -> Iterator[Session]:
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
