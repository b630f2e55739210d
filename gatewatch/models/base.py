"""
SQLAlchemy base configuration and session management.

Uses SQLAlchemy 2.0 style with type hints and declarative base.
Designed to be portable between SQLite (dev) and PostgreSQL (prod).
"""

from typing import Optional

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import DeclarativeBase, sessionmaker

from gatewatch.config import config


class Base(DeclarativeBase):
    """Base class for all models."""
    pass


def _set_sqlite_pragma(dbapi_connection, connection_record):
    """
    Configure SQLite for concurrent access.

    WAL mode allows the schedulers to write while API requests read.
    """
    cursor = dbapi_connection.cursor()
    cursor.execute('PRAGMA journal_mode=WAL')
    cursor.execute('PRAGMA synchronous=NORMAL')
    cursor.execute('PRAGMA foreign_keys=ON')
    cursor.close()


def build_engine(url: str, echo: bool = False, **kwargs) -> Engine:
    """Create an engine with the options appropriate for the database type."""
    engine_kwargs = {'echo': echo, **kwargs}
    is_sqlite = url.startswith('sqlite')
    if is_sqlite:
        engine_kwargs.setdefault('connect_args', {'check_same_thread': False})

    new_engine = create_engine(url, **engine_kwargs)
    if is_sqlite:
        event.listen(new_engine, 'connect', _set_sqlite_pragma)
    return new_engine


def build_session_factory(bind: Engine) -> sessionmaker:
    """Session factory with the settings every repository expects."""
    return sessionmaker(
        bind=bind,
        autocommit=False,
        autoflush=False,
        expire_on_commit=False,  # Records outlive their session
    )


engine = build_engine(config.database.url, echo=config.debug)

SessionLocal = build_session_factory(engine)


def init_db(bind: Optional[Engine] = None) -> None:
    """
    Initialize database schema.

    Creates all tables if they don't exist. For production,
    use Alembic migrations instead.
    """
    Base.metadata.create_all(bind=bind or engine)
