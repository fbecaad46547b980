"""Root document access: one JSON blob read and written whole per operation."""

import json
import logging
from dataclasses import dataclass

from naapbook.application.interfaces import KeyValueStore
from naapbook.domain.entities import RootDocument
from naapbook.domain.entities.root_document import DEFAULT_DATA_VERSION
from naapbook.domain.exceptions import DocumentParseError

logger = logging.getLogger(__name__)

DEFAULT_NAMESPACE = "naapbook"
DEFAULT_DOCUMENT_KEY = "naapbook_data"


@dataclass
class ParseOutcome:
    """Either a decoded document or the reason decoding failed."""

    document: RootDocument | None = None
    error: DocumentParseError | None = None

    @property
    def ok(self) -> bool:
        return self.document is not None


def parse_root_document(raw: str, key: str = DEFAULT_DOCUMENT_KEY) -> ParseOutcome:
    """Decode a stored blob without raising."""
    try:
        data = json.loads(raw)
    except (json.JSONDecodeError, TypeError) as exc:
        return ParseOutcome(error=DocumentParseError(key, f"invalid JSON ({exc})"))
    try:
        return ParseOutcome(document=RootDocument.from_dict(data))
    except ValueError as exc:
        return ParseOutcome(error=DocumentParseError(key, str(exc)))


def serialize_root_document(document: RootDocument, *, indent: int | None = None) -> str:
    return json.dumps(document.to_dict(), ensure_ascii=False, indent=indent)


class RootDocumentStore:
    """Binds a key-value adapter to the store's namespace and document key.

    No caching: every ``load()`` goes to the adapter, so each operation works
    on its own snapshot.
    """

    def __init__(
        self,
        kv: KeyValueStore,
        namespace: str = DEFAULT_NAMESPACE,
        document_key: str = DEFAULT_DOCUMENT_KEY,
        data_version: str = DEFAULT_DATA_VERSION,
    ):
        self._kv = kv
        self._namespace = namespace
        self._document_key = document_key
        self._data_version = data_version

    @property
    def namespace(self) -> str:
        return self._namespace

    @property
    def document_key(self) -> str:
        return self._document_key

    def default_document(self) -> RootDocument:
        return RootDocument.default(self._data_version)

    def load(self) -> RootDocument:
        """Read the root document. Never raises for bad data.

        Missing data, invalid JSON or a non-object root yields the default
        document. Individual unreadable client entries are skipped so the
        rest of the document, including the ID counter, survives.
        """
        raw = self._kv.get(self._namespace, self._document_key)
        if raw is None or raw == "":
            return self.default_document()

        outcome = parse_root_document(raw, self._document_key)
        if not outcome.ok:
            # Availability over strict durability: start from a clean document.
            logger.warning("%s; falling back to an empty document", outcome.error)
            return self.default_document()
        if outcome.document.skipped_users:
            logger.warning(
                "Skipped unreadable client entries in '%s': %s",
                self._document_key,
                ", ".join(outcome.document.skipped_users),
            )
        return outcome.document

    def save(self, document: RootDocument) -> None:
        """Write the whole document with a single adapter call."""
        self._kv.set(self._namespace, self._document_key, serialize_root_document(document))

    # ── Sibling blobs in the same namespace (legacy data) ───────────

    def read_blob(self, key: str) -> str | None:
        return self._kv.get(self._namespace, key)

    def delete_blob(self, key: str) -> None:
        self._kv.delete(self._namespace, key)
