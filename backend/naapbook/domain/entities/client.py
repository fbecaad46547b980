"""Domain entities for client records and their measurement sets."""

import math
from dataclasses import dataclass, field
from typing import Any

# Canonical fixed measurement slots, in display order.
MEASUREMENT_SLOTS: tuple[str, ...] = (
    "chest",
    "shoulder",
    "arm_length",
    "collar",
    "shirt_length",
    "waist",
    "hips",
    "trouser_length",
    "inseam",
)

OPTIONAL_CLIENT_FIELDS: tuple[str, ...] = ("phone", "email", "address", "notes")


def parse_measurement_value(raw: Any) -> float | None:
    """Parse a number or numeric string (comma accepted as decimal separator).

    Returns None for missing, empty, non-numeric or non-finite input.
    """
    if raw is None or isinstance(raw, bool):
        return None
    if isinstance(raw, (int, float)):
        number = float(raw)
    elif isinstance(raw, str):
        text = raw.strip().replace(",", ".", 1)
        if not text or "_" in text:
            return None
        try:
            number = float(text)
        except ValueError:
            return None
    else:
        return None
    return number if math.isfinite(number) else None


def _stored_number(raw: Any) -> float | int | None:
    # Stored ints stay ints so untouched records serialize unchanged.
    if isinstance(raw, int) and not isinstance(raw, bool):
        return raw
    return parse_measurement_value(raw)


def _text_or_none(raw: Any) -> str | None:
    return raw if isinstance(raw, str) else None


@dataclass
class MeasurementEntry:
    """One measured value with optional free-text notes."""

    value: float | None = None
    notes: str | None = None

    def is_empty(self) -> bool:
        return self.value is None and not self.notes

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {}
        if self.value is not None:
            out["value"] = self.value
        if self.notes is not None:
            out["notes"] = self.notes
        return out

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "MeasurementEntry":
        return cls(
            value=_stored_number(data.get("value")),
            notes=_text_or_none(data.get("notes")),
        )


@dataclass
class CustomField:
    """A user-named measurement beyond the fixed slots."""

    name: str
    value: float | None = None
    notes: str | None = None

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {"name": self.name}
        if self.value is not None:
            out["value"] = self.value
        if self.notes is not None:
            out["notes"] = self.notes
        return out

    @classmethod
    def from_dict(cls, data: dict[str, Any], key: str = "") -> "CustomField":
        return cls(
            name=_text_or_none(data.get("name")) or key,
            value=_stored_number(data.get("value")),
            notes=_text_or_none(data.get("notes")),
        )


@dataclass
class Measurements:
    """Fixed measurement slots plus a map of custom fields.

    Only slots that are present in ``slots`` exist; an absent slot means
    "not mentioned", which is what lets a partial set act as a patch.
    Custom fields are keyed by a stable identifier so they can be renamed
    or edited in place. Stored keys outside the fixed slots (``unit``,
    localized slot names) are carried in ``extra`` and written back as found.
    """

    slots: dict[str, MeasurementEntry] = field(default_factory=dict)
    custom_fields: dict[str, CustomField] = field(default_factory=dict)
    extra: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def defaults(cls) -> "Measurements":
        """Every fixed slot present with a zero value and empty notes."""
        return cls(
            slots={slot: MeasurementEntry(value=0, notes="") for slot in MEASUREMENT_SLOTS},
            custom_fields={},
        )

    def is_empty(self) -> bool:
        return not self.slots and not self.custom_fields

    def merged_with(self, patch: "Measurements") -> "Measurements":
        """Return a new set where ``patch`` wins per slot and per custom field."""
        slots = dict(self.slots)
        slots.update(patch.slots)
        custom_fields = dict(self.custom_fields)
        custom_fields.update(patch.custom_fields)
        extra = dict(self.extra)
        extra.update(patch.extra)
        return Measurements(slots=slots, custom_fields=custom_fields, extra=extra)

    def filled_count(self) -> int:
        """Number of fixed slots holding a non-zero value, plus custom fields."""
        filled = sum(1 for entry in self.slots.values() if entry.value)
        return filled + len(self.custom_fields)

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {
            slot: self.slots[slot].to_dict() for slot in MEASUREMENT_SLOTS if slot in self.slots
        }
        out.update(self.extra)
        out["custom_fields"] = {
            key: custom.to_dict() for key, custom in self.custom_fields.items()
        }
        return out

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> "Measurements":
        """Decode a stored set; slot entries that hold nothing usable are left out."""
        data = data if isinstance(data, dict) else {}
        slots: dict[str, MeasurementEntry] = {}
        for slot in MEASUREMENT_SLOTS:
            if isinstance(data.get(slot), dict):
                entry = MeasurementEntry.from_dict(data[slot])
                if not entry.is_empty():
                    slots[slot] = entry
        raw_custom = data.get("custom_fields")
        custom_fields: dict[str, CustomField] = {}
        if isinstance(raw_custom, dict):
            for key, entry in raw_custom.items():
                if isinstance(entry, dict):
                    custom_fields[str(key)] = CustomField.from_dict(entry, key=str(key))
        extra = {
            str(key): value
            for key, value in data.items()
            if key not in MEASUREMENT_SLOTS and key != "custom_fields"
        }
        return cls(slots=slots, custom_fields=custom_fields, extra=extra)


@dataclass
class ClientRecord:
    """One client: contact details plus a measurement set.

    ``id`` and ``created_at`` are fixed at creation; ``updated_at`` is
    refreshed by every successful mutation. Timestamps are kept as the
    ISO-8601 strings found in the stored document.
    """

    id: str
    name: str
    created_at: str
    updated_at: str
    phone: str | None = None
    email: str | None = None
    address: str | None = None
    notes: str | None = None
    measurements: Measurements = field(default_factory=Measurements)

    def apply_patch(
        self,
        changes: dict[str, Any],
        measurements: Measurements | None,
        updated_at: str,
    ) -> None:
        """Merge a partial update into this record in place."""
        if "name" in changes and changes["name"] is not None:
            self.name = changes["name"]
        for field_name in OPTIONAL_CLIENT_FIELDS:
            if field_name in changes:
                setattr(self, field_name, changes[field_name])
        if measurements is not None:
            self.measurements = self.measurements.merged_with(measurements)
        self.updated_at = updated_at

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {"id": self.id, "name": self.name}
        for field_name in OPTIONAL_CLIENT_FIELDS:
            value = getattr(self, field_name)
            if value is not None:
                out[field_name] = value
        out["created_at"] = self.created_at
        out["updated_at"] = self.updated_at
        out["measurements"] = self.measurements.to_dict()
        return out

    @classmethod
    def from_dict(cls, data: dict[str, Any], key: str | None = None) -> "ClientRecord":
        record_id = data.get("id")
        if record_id is None or record_id == "":
            record_id = key
        if record_id is None:
            raise ValueError("client record has no id")
        return cls(
            id=str(record_id),
            name=_text_or_none(data.get("name")) or "",
            created_at=_text_or_none(data.get("created_at")) or "",
            updated_at=_text_or_none(data.get("updated_at")) or "",
            phone=_text_or_none(data.get("phone")),
            email=_text_or_none(data.get("email")),
            address=_text_or_none(data.get("address")),
            notes=_text_or_none(data.get("notes")),
            measurements=Measurements.from_dict(data.get("measurements")),
        )
