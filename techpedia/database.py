# techpedia/database.py
from sqlalchemy.engine import Engine
from sqlmodel import SQLModel, create_engine, Session

from techpedia.core.config import get_settings

settings = get_settings()


def _with_ssl(url: str) -> str:
    if "sslmode=" in url:
        return url
    separator = "&" if "?" in url else "?"
    return f"{url}{separator}sslmode=require"


def build_engine(url: str) -> Engine:
    """
    Engine for the configured database.

    Postgres: SSL enforced, bounded pool (DB_POOL_SIZE + DB_MAX_OVERFLOW
    connections per worker), connections pinged before use.

    SQLite (local runs, tests): shared across FastAPI's worker threads.
    """
    if url.startswith("sqlite"):
        return create_engine(
            url,
            echo=settings.DB_ECHO,
            connect_args={"check_same_thread": False},
        )
    return create_engine(
        _with_ssl(url),
        echo=settings.DB_ECHO,
        pool_pre_ping=True,
        pool_size=settings.DB_POOL_SIZE,
        max_overflow=settings.DB_MAX_OVERFLOW,
    )


engine = build_engine(settings.DATABASE_URL)


def create_db_and_tables() -> None:
    """Create missing tables; called once on startup."""
    SQLModel.metadata.create_all(engine)


def get_session():
    """
    FastAPI dependency yielding one Session per request.

    Services decide when to commit; anything left uncommitted is rolled
    back when the session closes.
    """
    with Session(engine) as session:
        yield session
