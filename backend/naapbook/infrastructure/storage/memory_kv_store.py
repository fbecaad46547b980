"""Process-local key-value adapter backed by a dict."""

from naapbook.application.interfaces import KeyValueStore


class InMemoryKeyValueStore(KeyValueStore):
    """Keeps blobs for the lifetime of the process; nothing touches disk."""

    def __init__(self, initial: dict[tuple[str, str], str] | None = None):
        self._entries: dict[tuple[str, str], str] = dict(initial or {})

    def get(self, namespace: str, key: str) -> str | None:
        return self._entries.get((namespace, key))

    def set(self, namespace: str, key: str, value: str) -> None:
        self._entries[(namespace, key)] = value

    def delete(self, namespace: str, key: str) -> None:
        self._entries.pop((namespace, key), None)
