"""Key-value adapter backed by a SQLAlchemy table (SQLite by default)."""

from sqlalchemy.orm import Session, sessionmaker

from naapbook.application.interfaces import KeyValueStore
from naapbook.infrastructure.database.models import KeyValueEntryModel


class SQLAlchemyKeyValueStore(KeyValueStore):
    """Implements the KeyValueStore port with one short session per call."""

    def __init__(self, session_factory: sessionmaker[Session]):
        self._session_factory = session_factory

    def get(self, namespace: str, key: str) -> str | None:
        with self._session_factory() as session:
            entry = session.get(KeyValueEntryModel, (namespace, key))
            return entry.value if entry else None

    def set(self, namespace: str, key: str, value: str) -> None:
        with self._session_factory.begin() as session:
            entry = session.get(KeyValueEntryModel, (namespace, key))
            if entry is None:
                session.add(KeyValueEntryModel(namespace=namespace, key=key, value=value))
            else:
                entry.value = value

    def delete(self, namespace: str, key: str) -> None:
        with self._session_factory.begin() as session:
            entry = session.get(KeyValueEntryModel, (namespace, key))
            if entry is not None:
                session.delete(entry)
