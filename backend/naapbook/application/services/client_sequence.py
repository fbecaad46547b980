"""Sequential client ID assignment (``n-<k>``) backed by a persisted counter."""

import re

from naapbook.domain.entities import RootDocument

CLIENT_ID_PREFIX = "n-"
_CLIENT_ID_PATTERN = re.compile(r"n-([0-9]+)")


def format_client_id(seq: int) -> str:
    return f"{CLIENT_ID_PREFIX}{seq}"


def highest_sequence(document: RootDocument) -> int:
    """Largest ``k`` among keys shaped like ``n-<k>``; 0 when none match."""
    highest = 0
    for key in document.users:
        match = _CLIENT_ID_PATTERN.fullmatch(key)
        if match:
            highest = max(highest, int(match.group(1)))
    return highest


def ensure_next_sequence(document: RootDocument) -> int:
    """Return the next sequence number, repairing the metadata when it is missing.

    A stored positive counter is trusted as-is. Otherwise it is derived from
    existing ``n-<k>`` keys (max + 1), or from the record count when no key
    has that shape, and written back into the document.
    """
    seq = document.app_metadata.next_client_seq
    if isinstance(seq, int) and seq > 0:
        return seq

    highest = highest_sequence(document)
    seq = highest + 1 if highest > 0 else len(document.users) + 1
    document.app_metadata.next_client_seq = seq
    return seq


def bump_sequence(document: RootDocument) -> None:
    """Advance the counter by one. Never called on update or delete."""
    document.app_metadata.next_client_seq = ensure_next_sequence(document) + 1


def reconcile_sequence(document: RootDocument) -> int:
    """Like ensure_next_sequence, but also lift the counter past any copied-in ID.

    Used after bulk writes (legacy migration, import) that can bring in
    ``n-<k>`` keys at or above a counter that was already valid.
    """
    seq = max(ensure_next_sequence(document), highest_sequence(document) + 1)
    document.app_metadata.next_client_seq = seq
    return seq
