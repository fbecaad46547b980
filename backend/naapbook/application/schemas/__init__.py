from .client import (
    AppSettingsUpdate,
    ClientCreate,
    ClientPageQuery,
    ClientUpdate,
    CustomFieldInput,
    MeasurementEntryInput,
    MeasurementsInput,
)

__all__ = [
    "AppSettingsUpdate",
    "ClientCreate",
    "ClientPageQuery",
    "ClientUpdate",
    "CustomFieldInput",
    "MeasurementEntryInput",
    "MeasurementsInput",
]
