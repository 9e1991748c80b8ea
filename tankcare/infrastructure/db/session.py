"""
Database session management (SQLAlchemy)

One engine per process. Request handlers get a session through get_db();
scheduler jobs open their own from get_session_factory().
"""
from typing import Any, Dict

import psycopg
from sqlalchemy import create_engine
from sqlalchemy.orm import DeclarativeBase, sessionmaker, Session

from tankcare.config import Settings, get_settings


class Base(DeclarativeBase):
    """
    SQLAlchemy declarative base for all ORM models
    """
    pass


# Singleton engine and session factory
_engine = None
_SessionLocal = None


def engine_options(settings: Settings) -> Dict[str, Any]:
    """
    create_engine() keyword arguments for the configured database

    On PostgreSQL every connection gets the server-side statement_timeout,
    so a hung due-scan query fails as a store error instead of blocking the
    job thread past its tick budget.
    """
    options: Dict[str, Any] = {"pool_pre_ping": True}
    if not settings.get_sqlalchemy_url().startswith("postgresql"):
        return options

    options["pool_size"] = settings.DB_POOL_SIZE
    if settings.DB_STATEMENT_TIMEOUT_MS > 0:
        options["connect_args"] = {
            "options": f"-c statement_timeout={settings.DB_STATEMENT_TIMEOUT_MS}",
        }
    return options


def get_engine():
    """Get or create SQLAlchemy engine (singleton)"""
    global _engine
    if _engine is None:
        settings = get_settings()
        _engine = create_engine(settings.get_sqlalchemy_url(), **engine_options(settings))
    return _engine


def get_session_factory():
    """Get or create session factory (singleton)"""
    global _SessionLocal
    if _SessionLocal is None:
        _SessionLocal = sessionmaker(bind=get_engine(), autoflush=False, autocommit=False)
    return _SessionLocal


def get_db() -> Session:
    """
    FastAPI dependency: one session per request, always closed

    Usage:
        @router.get("/schedules")
        def list_schedules(db: Session = Depends(get_db)):
            ...
    """
    db = get_session_factory()()
    try:
        yield db
    finally:
        db.close()


def check_db_connection() -> None:
    """
    Readiness probe for /ready: one round trip over raw psycopg

    Raises:
        psycopg.OperationalError: if the database is unreachable
    """
    settings = get_settings()
    with psycopg.connect(settings.DATABASE_URL, connect_timeout=3) as conn:
        with conn.cursor() as cur:
            cur.execute("SELECT 1;")
            cur.fetchone()
