"""Abstract key-value persistence interface (port)."""

from abc import ABC, abstractmethod


class KeyValueStore(ABC):
    """Port for blob persistence, implemented in the infrastructure layer.

    Synchronous, whole-value writes, no transactions. Namespacing keeps the
    client document apart from other blobs sharing the same engine.
    """

    @abstractmethod
    def get(self, namespace: str, key: str) -> str | None:
        """Return the stored string, or None when the key is absent."""
        ...

    @abstractmethod
    def set(self, namespace: str, key: str, value: str) -> None:
        """Store ``value`` under ``key``, replacing any previous value."""
        ...

    @abstractmethod
    def delete(self, namespace: str, key: str) -> None:
        """Remove ``key``. Deleting an absent key is a no-op."""
        ...
