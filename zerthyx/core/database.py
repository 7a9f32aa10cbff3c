import importlib.util
import logging
from urllib.parse import urlparse

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, DeclarativeBase

from zerthyx.core.config import Settings, get_settings

logger = logging.getLogger(__name__)


class Base(DeclarativeBase):
    pass


def resolve_database_url(url: str) -> str:
    """Fall back to the psycopg 3 driver when only it is installed."""
    if url.startswith("postgresql://") and importlib.util.find_spec("psycopg2") is None:
        if importlib.util.find_spec("psycopg") is not None:
            return "postgresql+psycopg://" + url[len("postgresql://"):]
    return url


def engine_options(url: str, settings: Settings) -> dict:
    parsed = urlparse(url)
    if not parsed.scheme.startswith("postgresql"):
        # SQLite and friends: default pool, no driver keepalives.
        return {}

    connect_args = {"keepalives": 1, "keepalives_idle": 30, "keepalives_interval": 10, "keepalives_count": 5}
    if parsed.hostname not in {"localhost", "127.0.0.1", "db"}:
        connect_args["sslmode"] = "require"

    # Approvals hold a wallet row lock across flush and debit; a pool smaller
    # than this starves the review screens first.
    pool_size = max(5, settings.db_pool_size)
    if pool_size != settings.db_pool_size:
        logger.warning("DB_POOL_SIZE=%s raised to %s", settings.db_pool_size, pool_size)

    return {
        "pool_pre_ping": settings.db_pool_pre_ping,
        "pool_recycle": settings.db_pool_recycle,
        "pool_size": pool_size,
        "max_overflow": max(5, settings.db_max_overflow),
        "pool_timeout": max(8, settings.db_pool_timeout),
        "pool_use_lifo": True,
        "connect_args": connect_args,
    }


settings = get_settings()
database_url = resolve_database_url(settings.database_url)
engine = create_engine(database_url, **engine_options(database_url, settings))
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
