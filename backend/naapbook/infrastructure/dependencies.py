"""Dependency wiring: builds the key-value adapter and the client store from Settings."""

from functools import lru_cache

from naapbook.application.interfaces import KeyValueStore
from naapbook.application.services import ClientStore, RootDocumentStore
from naapbook.config import Settings, get_settings
from naapbook.infrastructure.database.session import (
    create_db_engine,
    create_session_factory,
    init_db,
)
from naapbook.infrastructure.storage import (
    InMemoryKeyValueStore,
    JsonFileKeyValueStore,
    SQLAlchemyKeyValueStore,
)


def build_key_value_store(settings: Settings) -> KeyValueStore:
    """Create the persistence adapter selected by ``settings.storage_backend``."""
    if settings.storage_backend == "memory":
        return InMemoryKeyValueStore()
    if settings.storage_backend == "file":
        return JsonFileKeyValueStore(settings.file_store_dir)

    engine = create_db_engine(
        settings.database_url,
        echo=(settings.app_env == "development" and settings.log_level_sql.upper() == "DEBUG"),
    )
    init_db(engine)
    return SQLAlchemyKeyValueStore(create_session_factory(engine))


def build_client_store(settings: Settings, kv: KeyValueStore | None = None) -> ClientStore:
    """Provides a ClientStore with its document store wired up."""
    documents = RootDocumentStore(
        kv if kv is not None else build_key_value_store(settings),
        namespace=settings.store_namespace,
        document_key=settings.root_document_key,
        data_version=settings.data_version,
    )
    return ClientStore(
        documents,
        legacy_key=settings.legacy_clients_key,
        default_page_size=settings.default_page_size,
    )


@lru_cache
def get_key_value_store() -> KeyValueStore:
    """Process-wide adapter instance."""
    return build_key_value_store(get_settings())


@lru_cache
def get_client_store() -> ClientStore:
    """Process-wide ClientStore bound to the shared adapter."""
    return build_client_store(get_settings(), get_key_value_store())
