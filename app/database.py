"""Engine, session factory and declarative base."""

from collections.abc import Generator

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker

from app.config import get_settings


def _enable_foreign_keys(dbapi_connection, connection_record) -> None:
    # SQLite ignores ON DELETE clauses unless this is set per connection.
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def configure_engine(bind: Engine) -> Engine:
    """Apply per-dialect connection setup. Returns the same engine."""
    if bind.dialect.name == "sqlite":
        event.listen(bind, "connect", _enable_foreign_keys)
    return bind


settings = get_settings()
engine = configure_engine(
    create_engine(
        settings.DATABASE_URL,
        echo=settings.DEBUG,
        connect_args={"check_same_thread": False} if settings.DATABASE_URL.startswith("sqlite") else {},
    )
)
SessionLocal = sessionmaker(bind=engine, autocommit=False, autoflush=False)


class Base(DeclarativeBase):
    """Declarative base shared by the user and blog models."""


def get_db() -> Generator[Session, None, None]:
    """Yield a request-scoped session, closed when the request ends."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
