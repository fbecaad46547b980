from .client import (
    MEASUREMENT_SLOTS,
    OPTIONAL_CLIENT_FIELDS,
    ClientRecord,
    CustomField,
    MeasurementEntry,
    Measurements,
    parse_measurement_value,
)
from .root_document import AppMetadata, AppSettings, RootDocument
from .query import ClientPage, FilterMode
from .store_reports import ImportResult, MigrationReport, StoreStatistics

__all__ = [
    "MEASUREMENT_SLOTS",
    "OPTIONAL_CLIENT_FIELDS",
    "ClientRecord",
    "CustomField",
    "MeasurementEntry",
    "Measurements",
    "parse_measurement_value",
    "AppMetadata",
    "AppSettings",
    "RootDocument",
    "ClientPage",
    "FilterMode",
    "ImportResult",
    "MigrationReport",
    "StoreStatistics",
]
