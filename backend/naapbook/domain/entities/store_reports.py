"""Value objects returned by whole-document store operations."""

from dataclasses import dataclass


@dataclass
class StoreStatistics:
    total_clients: int
    total_measurements: int
    last_backup: str


@dataclass
class ImportResult:
    success: bool
    message: str


@dataclass
class MigrationReport:
    """Outcome of one legacy-migration pass."""

    legacy_found: bool = False
    copied: int = 0
    skipped: int = 0  # already present, or unreadable entries
