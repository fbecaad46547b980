from .json_file_kv_store import JsonFileKeyValueStore
from .memory_kv_store import InMemoryKeyValueStore
from .sqlalchemy_kv_store import SQLAlchemyKeyValueStore

__all__ = [
    "InMemoryKeyValueStore",
    "JsonFileKeyValueStore",
    "SQLAlchemyKeyValueStore",
]
