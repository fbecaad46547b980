"""Form-level validation rules for client fields and measurement values.

The store does not re-run these; callers validate before ``add_client`` /
``update_client`` and show the messages to the user.
"""

import re
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from pydantic import BaseModel

from naapbook.domain.entities import Measurements
from naapbook.domain.exceptions import ClientValidationError

NAME_MIN_LENGTH = 2
NAME_MAX_LENGTH = 50
ADDRESS_MAX_LENGTH = 200
NOTES_MAX_LENGTH = 300

# Inclusive (min, max) per fixed slot, in inches.
MEASUREMENT_RANGES: dict[str, tuple[float, float]] = {
    "chest": (20, 60),
    "shoulder": (10, 30),
    "arm_length": (15, 40),
    "collar": (10, 25),
    "shirt_length": (20, 50),
    "waist": (20, 60),
    "hips": (25, 70),
    "trouser_length": (25, 50),
    "inseam": (20, 40),
}
CUSTOM_FIELD_RANGE: tuple[float, float] = (0, 9999)

_EMAIL_PATTERN = re.compile(r"[^\s@]+@[^\s@]+\.[^\s@]+")
_PHONE_PATTERN = re.compile(r"\+?[0-9]{7,15}")
_PHONE_SEPARATORS = re.compile(r"[\s\-().]")


@dataclass
class ValidationResult:
    is_valid: bool
    errors: list[str] = field(default_factory=list)


@dataclass
class MeasurementCheck:
    is_valid: bool
    error: str | None = None


def _as_mapping(fields: BaseModel | Mapping[str, Any]) -> Mapping[str, Any]:
    if isinstance(fields, BaseModel):
        return fields.model_dump(exclude_unset=True)
    return fields


def validate_client(
    fields: BaseModel | Mapping[str, Any],
    *,
    partial: bool = False,
) -> ValidationResult:
    """Check contact fields. With ``partial=True`` an absent name is allowed (patches)."""
    data = _as_mapping(fields)
    errors: list[str] = []

    if not partial or "name" in data:
        name = (data.get("name") or "").strip()
        if not NAME_MIN_LENGTH <= len(name) <= NAME_MAX_LENGTH:
            errors.append(
                f"Name is required and must be {NAME_MIN_LENGTH}-{NAME_MAX_LENGTH} characters."
            )

    email = (data.get("email") or "").strip()
    if email and not _EMAIL_PATTERN.fullmatch(email):
        errors.append("Invalid email format.")

    phone = _PHONE_SEPARATORS.sub("", data.get("phone") or "")
    if phone and not _PHONE_PATTERN.fullmatch(phone):
        errors.append("Invalid phone number.")

    if len((data.get("address") or "").strip()) > ADDRESS_MAX_LENGTH:
        errors.append(f"Address max length is {ADDRESS_MAX_LENGTH} characters.")

    if len((data.get("notes") or "").strip()) > NOTES_MAX_LENGTH:
        errors.append(f"Notes max length is {NOTES_MAX_LENGTH} characters.")

    return ValidationResult(is_valid=not errors, errors=errors)


def _check_range(label: str, value: Any, bounds: tuple[float, float]) -> MeasurementCheck:
    low, high = bounds
    if isinstance(value, bool) or not isinstance(value, (int, float)) or not low <= value <= high:
        return MeasurementCheck(
            is_valid=False,
            error=f"Value for {label} must be between {low:g} and {high:g}.",
        )
    return MeasurementCheck(is_valid=True)


def validate_measurement(slot: str, value: Any) -> MeasurementCheck:
    """Range-check one value; unknown slot names use the custom-field range."""
    return _check_range(slot, value, MEASUREMENT_RANGES.get(slot, CUSTOM_FIELD_RANGE))


def validate_measurements(measurements: Measurements) -> list[str]:
    """Range-check every value present in a (coerced) measurement set."""
    errors: list[str] = []
    for slot, entry in measurements.slots.items():
        if entry.value is None:
            continue
        check = validate_measurement(slot, entry.value)
        if not check.is_valid:
            errors.append(check.error)
    for custom in measurements.custom_fields.values():
        if custom.value is None:
            continue
        check = _check_range(custom.name or "custom field", custom.value, CUSTOM_FIELD_RANGE)
        if not check.is_valid:
            errors.append(check.error)
    return errors


def ensure_valid_client(
    fields: BaseModel | Mapping[str, Any],
    measurements: Measurements | None = None,
    *,
    partial: bool = False,
) -> None:
    """Raise ClientValidationError when any rule fails."""
    errors = validate_client(fields, partial=partial).errors
    if measurements is not None:
        errors.extend(validate_measurements(measurements))
    if errors:
        raise ClientValidationError(errors)
