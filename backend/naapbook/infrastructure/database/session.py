"""SQLAlchemy engine and session configuration (synchronous)."""

from pathlib import Path

from sqlalchemy import Engine, create_engine
from sqlalchemy.orm import Session, sessionmaker

from naapbook.infrastructure.database.base import Base
from naapbook.infrastructure.database import models  # noqa: F401  registers tables


def _ensure_sqlite_parent(url: str) -> None:
    """Create the directory of a file-backed SQLite database."""
    prefix = "sqlite:///"
    if url.startswith(prefix):
        path = url[len(prefix):]
        if path and path != ":memory:":
            Path(path).parent.mkdir(parents=True, exist_ok=True)


def create_db_engine(database_url: str, *, echo: bool = False) -> Engine:
    _ensure_sqlite_parent(database_url)
    return create_engine(database_url, echo=echo, future=True)


def create_session_factory(engine: Engine) -> sessionmaker[Session]:
    return sessionmaker(engine, class_=Session, expire_on_commit=False)


def init_db(engine: Engine) -> None:
    """Create missing tables."""
    Base.metadata.create_all(engine)
