"""Pydantic DTOs for the client store boundary.

Measurement payloads arrive in whatever shape the form layer produced:
slot values as numbers or numeric-looking strings, custom fields as a map
keyed by stable ID or as an editable list. These models pin that down to
a small set of typed inputs consumed by the coercion step only.
"""

from typing import Any, Literal

from pydantic import BaseModel, Field, field_validator

from naapbook.domain.entities import FilterMode


class MeasurementEntryInput(BaseModel):
    """Fixed-slot input: value may be a number, a numeric string, or missing."""

    model_config = {"extra": "ignore"}

    value: Any = None
    notes: Any = None


class CustomFieldInput(MeasurementEntryInput):
    """Custom-field input, optionally carrying the editor's stable row key."""

    model_config = {"extra": "ignore", "populate_by_name": True}

    key: Any = Field(None, alias="_key")
    name: Any = None


def _mapping_or_none(value: Any) -> Any:
    return value if isinstance(value, (dict, BaseModel)) else None


class MeasurementsInput(BaseModel):
    """Any accepted measurements payload. Unknown keys (e.g. ``unit``) are ignored."""

    model_config = {"extra": "ignore"}

    chest: MeasurementEntryInput | None = None
    shoulder: MeasurementEntryInput | None = None
    arm_length: MeasurementEntryInput | None = None
    collar: MeasurementEntryInput | None = None
    shirt_length: MeasurementEntryInput | None = None
    waist: MeasurementEntryInput | None = None
    hips: MeasurementEntryInput | None = None
    trouser_length: MeasurementEntryInput | None = None
    inseam: MeasurementEntryInput | None = None

    custom_fields: dict[str, CustomFieldInput] | list[CustomFieldInput | None] | None = None

    @field_validator(
        "chest",
        "shoulder",
        "arm_length",
        "collar",
        "shirt_length",
        "waist",
        "hips",
        "trouser_length",
        "inseam",
        mode="before",
    )
    @classmethod
    def _drop_malformed_slot(cls, value: Any) -> Any:
        return _mapping_or_none(value)

    @field_validator("custom_fields", mode="before")
    @classmethod
    def _drop_malformed_custom_fields(cls, value: Any) -> Any:
        # List positions are kept (as None) because they feed the fallback key.
        if isinstance(value, dict):
            return {str(k): v for k, v in value.items() if _mapping_or_none(v) is not None}
        if isinstance(value, (list, tuple)):
            return [_mapping_or_none(item) for item in value]
        return None


class ClientCreate(BaseModel):
    """Fields for a new client. Strings are stripped; name must stay non-empty."""

    model_config = {"str_strip_whitespace": True}

    name: str = Field(..., min_length=1, examples=["Ali Khan"])
    phone: str | None = Field(None, examples=["0300-1234567"])
    email: str | None = None
    address: str | None = None
    notes: str | None = None
    measurements: MeasurementsInput | None = None


class ClientUpdate(BaseModel):
    """Partial update. Only fields that were explicitly set take part in the merge."""

    model_config = {"str_strip_whitespace": True}

    name: str | None = Field(None, min_length=1)
    phone: str | None = None
    email: str | None = None
    address: str | None = None
    notes: str | None = None
    measurements: MeasurementsInput | None = None


class ClientPageQuery(BaseModel):
    """Options for a filtered, sorted, paginated client listing."""

    offset: int = Field(0, ge=0)
    limit: int = Field(20, ge=1)
    query: str = ""
    mode: FilterMode = FilterMode.ALL


class AppSettingsUpdate(BaseModel):
    """Partial update of the stored user preferences."""

    preferred_unit: Literal["inches", "cm"] | None = None
    theme: Literal["light", "dark"] | None = None
    language: str | None = Field(None, min_length=2, max_length=10)
