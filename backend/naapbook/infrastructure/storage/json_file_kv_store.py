"""Filesystem key-value adapter: one JSON object file per namespace.

Storage layout:
    <base_dir>/<namespace>.json   : {"<key>": "<value>", ...}
"""

import json
import logging
import re
from pathlib import Path

from naapbook.application.interfaces import KeyValueStore

logger = logging.getLogger(__name__)


def _sanitise(name: str, max_len: int = 80) -> str:
    """Replace non-word characters with underscores and truncate."""
    return re.sub(r"[^\w\-]", "_", name)[:max_len].strip("_") or "default"


class JsonFileKeyValueStore(KeyValueStore):
    """Rewrites the whole namespace file on every write (temp file + rename)."""

    def __init__(self, base_dir: str | Path):
        self._base_dir = Path(base_dir)
        self._base_dir.mkdir(parents=True, exist_ok=True)

    def _path(self, namespace: str) -> Path:
        return self._base_dir / f"{_sanitise(namespace)}.json"

    def _read(self, namespace: str) -> dict[str, str]:
        path = self._path(namespace)
        if not path.exists():
            return {}
        try:
            with path.open("r", encoding="utf-8") as f:
                entries = json.load(f)
        except json.JSONDecodeError as exc:
            logger.warning("Namespace file %s is not valid JSON (%s); treating it as empty", path, exc)
            return {}
        if not isinstance(entries, dict):
            logger.warning("Namespace file %s does not hold a JSON object; treating it as empty", path)
            return {}
        return entries

    def _write(self, namespace: str, entries: dict[str, str]) -> None:
        path = self._path(namespace)
        tmp_path = path.with_suffix(".json.tmp")
        tmp_path.write_text(json.dumps(entries, ensure_ascii=False, indent=2), encoding="utf-8")
        tmp_path.replace(path)

    def get(self, namespace: str, key: str) -> str | None:
        value = self._read(namespace).get(key)
        return value if isinstance(value, str) else None

    def set(self, namespace: str, key: str, value: str) -> None:
        entries = self._read(namespace)
        entries[key] = value
        self._write(namespace, entries)
        logger.debug("Stored %s/%s (%d chars)", namespace, key, len(value))

    def delete(self, namespace: str, key: str) -> None:
        entries = self._read(namespace)
        if entries.pop(key, None) is not None:
            self._write(namespace, entries)
            logger.debug("Deleted %s/%s", namespace, key)
