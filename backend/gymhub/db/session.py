"""
Database engine and session factory for the training records store.
"""
from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker
import logging

from ..config import Config

logger = logging.getLogger(__name__)

Base = declarative_base()


def _connect_args(url: str) -> dict:
    # SQLite connections are used from worker threads via asyncio.to_thread
    if url.startswith("sqlite"):
        return {"check_same_thread": False}
    return {}


def make_engine(url: str | None = None):
    url = url or Config.DATABASE_URL
    return create_engine(url, pool_pre_ping=True, connect_args=_connect_args(url))


engine = make_engine()
SessionLocal = sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)


def init_db(bind=None) -> None:
    """Create tables that do not exist yet."""
    from . import models  # noqa: F401

    Base.metadata.create_all(bind=bind or engine)
    logger.info("Database tables ensured")
