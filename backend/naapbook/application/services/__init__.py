from .client_store import ClientStore
from .document_store import ParseOutcome, RootDocumentStore, parse_root_document
from .legacy_migration import LegacyClientMigrator
from .measurement_coercion import coerce_measurements, parse_measurement_value
from .client_validation import (
    MeasurementCheck,
    ValidationResult,
    ensure_valid_client,
    validate_client,
    validate_measurement,
    validate_measurements,
)

__all__ = [
    "ClientStore",
    "ParseOutcome",
    "RootDocumentStore",
    "parse_root_document",
    "LegacyClientMigrator",
    "coerce_measurements",
    "parse_measurement_value",
    "MeasurementCheck",
    "ValidationResult",
    "ensure_valid_client",
    "validate_client",
    "validate_measurement",
    "validate_measurements",
]
