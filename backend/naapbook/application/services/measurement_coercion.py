"""Measurement coercion: any accepted input shape → canonical partial Measurements.

Policy is "absence over empty": a slot or custom field that coerces to no
numeric value and no notes is left out entirely, never stored as ``{}`` or
defaulted to zero here. That is what makes the update merge safe: a patch
that did not touch a field does not mention it.
"""

import re
from collections.abc import Mapping
from typing import Any

from naapbook.application.schemas.client import (
    CustomFieldInput,
    MeasurementEntryInput,
    MeasurementsInput,
)
from naapbook.domain.entities import (
    MEASUREMENT_SLOTS,
    CustomField,
    MeasurementEntry,
    Measurements,
    parse_measurement_value,
)

_NON_WORD = re.compile(r"\W+")


def _clean_text(raw: Any) -> str | None:
    if not isinstance(raw, str):
        return None
    return raw.strip() or None


def coerce_entry(entry: MeasurementEntryInput | None) -> MeasurementEntry | None:
    """Coerce one slot input; None when nothing survives."""
    if entry is None:
        return None
    coerced = MeasurementEntry(
        value=parse_measurement_value(entry.value),
        notes=_clean_text(entry.notes),
    )
    return None if coerced.is_empty() else coerced


def custom_field_key(item: CustomFieldInput, index: int) -> str:
    """Stable key for a list-shaped custom field.

    Editor row key first, then a slug of the name, then ``custom_<index>``.
    """
    row_key = _clean_text(item.key if isinstance(item.key, str) else None)
    if row_key is None and item.key is not None and not isinstance(item.key, bool):
        row_key = str(item.key)
    if row_key:
        return row_key
    name = _clean_text(item.name)
    if name:
        slug = _NON_WORD.sub("_", name.lower()).strip("_")
        if slug:
            return slug
    return f"custom_{index}"


def _coerce_custom_list(items: list[CustomFieldInput | None]) -> dict[str, CustomField]:
    out: dict[str, CustomField] = {}
    for index, item in enumerate(items):
        if item is None:
            continue
        entry = coerce_entry(item)
        name = _clean_text(item.name) or ""
        if not name and entry is None:
            continue
        out[custom_field_key(item, index)] = CustomField(
            name=name,
            value=entry.value if entry else None,
            notes=entry.notes if entry else None,
        )
    return out


def _coerce_custom_map(items: Mapping[str, CustomFieldInput]) -> dict[str, CustomField]:
    out: dict[str, CustomField] = {}
    for key, item in items.items():
        entry = coerce_entry(item)
        name = _clean_text(item.name) or key
        if not name and entry is None:
            continue
        out[key] = CustomField(
            name=name,
            value=entry.value if entry else None,
            notes=entry.notes if entry else None,
        )
    return out


def coerce_measurements(payload: MeasurementsInput | Mapping[str, Any] | None) -> Measurements:
    """Normalize a measurements payload into a partial canonical set.

    Only slots and custom fields that carry something are present in the
    result; an empty payload yields an empty ``Measurements``.
    """
    if payload is None:
        return Measurements()
    if not isinstance(payload, MeasurementsInput):
        if not isinstance(payload, Mapping):
            return Measurements()
        payload = MeasurementsInput.model_validate(dict(payload))

    slots: dict[str, MeasurementEntry] = {}
    for slot in MEASUREMENT_SLOTS:
        entry = coerce_entry(getattr(payload, slot))
        if entry is not None:
            slots[slot] = entry

    custom_fields: dict[str, CustomField] = {}
    if isinstance(payload.custom_fields, list):
        custom_fields = _coerce_custom_list(payload.custom_fields)
    elif isinstance(payload.custom_fields, dict):
        custom_fields = _coerce_custom_map(payload.custom_fields)

    return Measurements(slots=slots, custom_fields=custom_fields)
