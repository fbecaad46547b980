"""Filter → sort → paginate engine behind the paged client listing.

The order is fixed: filtering first keeps page boundaries stable as the
query changes, and sorting the filtered set gives a deterministic order
(most recently updated first, then most recently created, then name).
"""

import re
from collections.abc import Iterable
from typing import Literal

from naapbook.application.schemas.client import ClientPageQuery
from naapbook.application.services.clock import parse_timestamp
from naapbook.domain.entities import ClientPage, ClientRecord, FilterMode

_NON_DIGITS = re.compile(r"[^0-9]+")


def _norm(value: str | None) -> str:
    return (value or "").strip().lower()


def _digits(value: str | None) -> str:
    return _NON_DIGITS.sub("", value or "")


def matches_name(record: ClientRecord, query: str) -> bool:
    return query in _norm(record.name)


def matches_phone(record: ClientRecord, query: str) -> bool:
    """Digit-only substring match; a query without digits matches nothing."""
    query_digits = _digits(query)
    return bool(query_digits) and query_digits in _digits(record.phone)


def matches_id(record: ClientRecord, query: str) -> bool:
    """Raw substring match on the ID, falling back to its numeric part ("7" → "n-7")."""
    client_id = _norm(record.id)
    if query in client_id:
        return True
    query_digits = _digits(query)
    id_digits = _digits(client_id)
    return bool(query_digits and id_digits) and query_digits in id_digits


def matches(record: ClientRecord, query: str, mode: FilterMode) -> bool:
    """Apply one filter mode; ``query`` must already be trimmed and lowercased."""
    if not query:
        return True
    if mode is FilterMode.NAME:
        return matches_name(record, query)
    if mode is FilterMode.PHONE:
        return matches_phone(record, query)
    if mode is FilterMode.ID:
        return matches_id(record, query)
    return (
        matches_name(record, query)
        or matches_phone(record, query)
        or matches_id(record, query)
    )


def recency_sort_key(record: ClientRecord) -> tuple[float, float, str]:
    return (
        -parse_timestamp(record.updated_at),
        -parse_timestamp(record.created_at),
        (record.name or "").casefold(),
    )


def build_page(records: Iterable[ClientRecord], options: ClientPageQuery) -> ClientPage:
    query = _norm(options.query)
    mode = FilterMode(options.mode)

    filtered = [record for record in records if matches(record, query, mode)]
    filtered.sort(key=recency_sort_key)

    total = len(filtered)
    items = filtered[options.offset : options.offset + options.limit]
    return ClientPage(
        items=items,
        total=total,
        has_more=options.offset + len(items) < total,
        offset=options.offset,
        limit=options.limit,
    )


def search_all_fields(records: Iterable[ClientRecord], query: str) -> list[ClientRecord]:
    """Unpaged case-insensitive search over name, phone and email."""
    q = _norm(query)
    return [
        record
        for record in records
        if q in _norm(record.name)
        or (record.phone is not None and q in record.phone)
        or (record.email is not None and q in record.email.lower())
    ]


def _name_key(record: ClientRecord) -> str:
    return (record.name or "").casefold()


def _created_key(record: ClientRecord) -> float:
    return parse_timestamp(record.created_at)


_SORT_KEYS = {"name": _name_key, "date": _created_key}


def sort_records(
    records: Iterable[ClientRecord],
    sort_by: Literal["name", "date"] = "name",
    order: Literal["asc", "desc"] = "asc",
) -> list[ClientRecord]:
    """Sort by name (case-insensitive) or by creation time."""
    if sort_by not in _SORT_KEYS:
        raise ValueError(f"Unknown sort field: {sort_by!r}")
    if order not in ("asc", "desc"):
        raise ValueError(f"Unknown sort order: {order!r}")
    return sorted(records, key=_SORT_KEYS[sort_by], reverse=order == "desc")
