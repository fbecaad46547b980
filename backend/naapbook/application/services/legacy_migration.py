"""One-time migration of the legacy flat client list into the root document.

Older builds kept clients as a JSON array under a separate key. ``run()``
copies every entry into ``users`` (skipping IDs already present), repairs
the ID sequence, then deletes the legacy key. Safe to call on every start-up:
once the key is gone it is a single adapter read.
"""

import json
import logging
from typing import Any

from naapbook.application.services.client_sequence import (
    bump_sequence,
    ensure_next_sequence,
    format_client_id,
    reconcile_sequence,
)
from naapbook.application.services.clock import Clock, format_timestamp, utc_now
from naapbook.application.services.document_store import RootDocumentStore
from naapbook.application.services.measurement_coercion import coerce_measurements
from naapbook.domain.entities import ClientRecord, MigrationReport
from naapbook.infrastructure.logging.colored_logger import StoreLogger, StoreStage

logger = logging.getLogger(__name__)
slog = StoreLogger("LegacyClientMigrator")

DEFAULT_LEGACY_KEY = "clients"


class LegacyClientMigrator:
    """Moves the legacy client array into the root document exactly once."""

    def __init__(
        self,
        documents: RootDocumentStore,
        legacy_key: str = DEFAULT_LEGACY_KEY,
        clock: Clock = utc_now,
    ):
        self._documents = documents
        self._legacy_key = legacy_key
        self._clock = clock

    def run(self) -> MigrationReport:
        raw = self._documents.read_blob(self._legacy_key)
        if raw is None:
            return MigrationReport()

        report = MigrationReport(legacy_found=True)
        entries = self._decode(raw)
        if entries is None:
            return report
        if not entries:
            self._documents.delete_blob(self._legacy_key)
            slog.detail("Legacy client list was empty, key removed", key=self._legacy_key)
            return report

        now = format_timestamp(self._clock())
        document = self._documents.load()
        without_id: list[dict[str, Any]] = []

        with slog.timed_step(StoreStage.MIGRATE, "Copying legacy clients", count=len(entries)):
            for raw_record in entries:
                if not isinstance(raw_record, dict):
                    report.skipped += 1
                    continue
                raw_id = raw_record.get("id")
                key = str(raw_id).strip() if raw_id is not None else ""
                if not key:
                    without_id.append(raw_record)
                    continue
                if key in document.users:
                    report.skipped += 1
                    slog.detail("Already present, skipped", id=key)
                    continue
                document.users[key] = self._to_record(raw_record, key, now)
                report.copied += 1

        with slog.timed_step(StoreStage.SEQUENCE, "Repairing client sequence"):
            reconcile_sequence(document)
            for raw_record in without_id:
                key = format_client_id(ensure_next_sequence(document))
                document.users[key] = self._to_record(raw_record, key, now)
                bump_sequence(document)
                report.copied += 1
            slog.detail("Next sequence", next_client_seq=document.app_metadata.next_client_seq)

        document.refresh_totals(now)
        self._documents.save(document)

        with slog.timed_step(StoreStage.CLEANUP, "Removing legacy client list", key=self._legacy_key):
            self._documents.delete_blob(self._legacy_key)

        logger.info(
            "Legacy migration finished: %d copied, %d skipped", report.copied, report.skipped
        )
        return report

    def _decode(self, raw: str) -> list[Any] | None:
        """Legacy payload as a list, or None when it cannot be used (key is then kept)."""
        try:
            entries = json.loads(raw) if raw else []
        except json.JSONDecodeError as exc:
            slog.step_error(StoreStage.MIGRATE, "Legacy client list is not valid JSON; left in place", error=exc)
            return None
        if not isinstance(entries, list):
            slog.step_error(StoreStage.MIGRATE, "Legacy client list is not an array; left in place")
            return None
        return entries

    @staticmethod
    def _to_record(raw_record: dict[str, Any], key: str, now: str) -> ClientRecord:
        record = ClientRecord.from_dict({**raw_record, "id": key, "measurements": None}, key=key)
        record.name = record.name.strip()
        record.measurements = coerce_measurements(raw_record.get("measurements"))
        record.created_at = record.created_at or now
        record.updated_at = record.updated_at or record.created_at
        return record
