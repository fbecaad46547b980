"""Client record store: CRUD, paged queries and ID sequencing over one root document.

Every operation loads the whole document from the key-value adapter,
mutates an in-memory copy, and writes the whole document back. Operations
never await one another mid-flight, so on a single event loop each
load → mutate → save sequence finishes before the next one starts.
"""

import logging
from collections.abc import Iterable, Mapping
from typing import Any, Literal

from naapbook.application.schemas.client import (
    AppSettingsUpdate,
    ClientCreate,
    ClientPageQuery,
    ClientUpdate,
    MeasurementsInput,
)
from naapbook.application.services.client_query import build_page, search_all_fields, sort_records
from naapbook.application.services.client_sequence import (
    bump_sequence,
    ensure_next_sequence,
    format_client_id,
    reconcile_sequence,
)
from naapbook.application.services.clock import Clock, format_timestamp, utc_now
from naapbook.application.services.document_store import (
    RootDocumentStore,
    parse_root_document,
    serialize_root_document,
)
from naapbook.application.services.legacy_migration import DEFAULT_LEGACY_KEY, LegacyClientMigrator
from naapbook.application.services.measurement_coercion import coerce_measurements
from naapbook.domain.entities import (
    OPTIONAL_CLIENT_FIELDS,
    AppSettings,
    ClientPage,
    ClientRecord,
    ImportResult,
    Measurements,
    MigrationReport,
    StoreStatistics,
)
from naapbook.domain.exceptions import EntityNotFoundError
from naapbook.infrastructure.logging.colored_logger import StoreLogger, StoreStage

logger = logging.getLogger(__name__)
slog = StoreLogger("ClientStore")


def _blank_to_none(value: str | None) -> str | None:
    if value is None:
        return None
    value = value.strip()
    return value or None


class ClientStore:
    """Owns the root document lifecycle and exposes the client API to the UI layer."""

    def __init__(
        self,
        documents: RootDocumentStore,
        *,
        legacy_key: str = DEFAULT_LEGACY_KEY,
        default_page_size: int = 20,
        clock: Clock = utc_now,
    ):
        self._documents = documents
        self._default_page_size = default_page_size
        self._clock = clock
        self._migrator = LegacyClientMigrator(documents, legacy_key=legacy_key, clock=clock)

    def _now(self) -> str:
        return format_timestamp(self._clock())

    # ── Create ───────────────────────────────────────────────────────

    async def add_client(
        self,
        fields: ClientCreate | Mapping[str, Any],
        measurements: MeasurementsInput | Mapping[str, Any] | None = None,
    ) -> ClientRecord:
        """Create a client with the next ``n-<k>`` ID and return the stored record.

        ``measurements`` wins over ``fields.measurements`` when both are given;
        either is coerced and overlaid on the full default slot set.
        """
        if not isinstance(fields, ClientCreate):
            fields = ClientCreate.model_validate(fields)
        source = measurements if measurements is not None else fields.measurements

        document = self._documents.load()
        seq = ensure_next_sequence(document)
        # Hand-edited documents can hold a key at the counter; never overwrite it.
        while format_client_id(seq) in document.users:
            seq += 1
        document.app_metadata.next_client_seq = seq
        client_id = format_client_id(seq)

        now = self._now()
        record = ClientRecord(
            id=client_id,
            name=fields.name.strip(),
            phone=_blank_to_none(fields.phone),
            email=_blank_to_none(fields.email),
            address=_blank_to_none(fields.address),
            notes=_blank_to_none(fields.notes),
            created_at=now,
            updated_at=now,
            measurements=Measurements.defaults().merged_with(coerce_measurements(source)),
        )

        document.users[client_id] = record
        document.refresh_totals(now)
        bump_sequence(document)
        self._documents.save(document)

        logger.info("Client created: %s", client_id)
        return record

    # ── Read ─────────────────────────────────────────────────────────

    async def get_client_by_id(self, client_id: str) -> ClientRecord | None:
        return self._documents.load().users.get(str(client_id))

    async def get_all_clients(self) -> list[ClientRecord]:
        """Every record in stored map order; use get_clients_page for a sorted view."""
        return list(self._documents.load().users.values())

    async def get_clients_page(
        self,
        options: ClientPageQuery | None = None,
        **kwargs: Any,
    ) -> ClientPage:
        """Filter, sort (most recently updated first) and slice the client list.

        Accepts either a ClientPageQuery or its fields as keyword arguments
        (``offset``, ``limit``, ``query``, ``mode``).
        """
        if options is None:
            options = ClientPageQuery.model_validate({"limit": self._default_page_size, **kwargs})
        records = self._documents.load().users.values()
        return build_page(records, options)

    async def search_clients(self, query: str) -> list[ClientRecord]:
        """Unpaged search across name, phone and email."""
        return search_all_fields(self._documents.load().users.values(), query)

    async def sort_clients(
        self,
        sort_by: Literal["name", "date"] = "name",
        order: Literal["asc", "desc"] = "asc",
        clients: Iterable[ClientRecord] | None = None,
    ) -> list[ClientRecord]:
        """Sort ``clients`` (every stored client when omitted) by name or creation time."""
        if clients is None:
            clients = self._documents.load().users.values()
        return sort_records(clients, sort_by, order)

    # ── Update ───────────────────────────────────────────────────────

    async def update_client(
        self,
        client_id: str,
        patch: ClientUpdate | Mapping[str, Any],
    ) -> ClientRecord:
        """Deep-merge a partial update into an existing client.

        Scalar fields present in the patch overwrite; measurements merge per
        slot and per custom field. ``id`` and ``created_at`` never change.

        Raises:
            EntityNotFoundError: no client with ``client_id``.
        """
        if not isinstance(patch, ClientUpdate):
            patch = ClientUpdate.model_validate(patch)

        changes = patch.model_dump(exclude_unset=True, exclude={"measurements"})
        for field_name in OPTIONAL_CLIENT_FIELDS:
            if field_name in changes:
                changes[field_name] = _blank_to_none(changes[field_name])

        measurements: Measurements | None = None
        if "measurements" in patch.model_fields_set and patch.measurements is not None:
            measurements = coerce_measurements(patch.measurements)

        document = self._documents.load()
        key = str(client_id)
        record = document.users.get(key)
        if record is None:
            raise EntityNotFoundError("Client", key)

        now = self._now()
        record.apply_patch(changes, measurements, updated_at=now)
        document.refresh_totals(now)
        self._documents.save(document)

        logger.debug("Client updated: %s (fields=%s)", key, sorted(changes))
        return record

    # ── Delete ───────────────────────────────────────────────────────

    async def delete_client(self, client_id: str) -> None:
        """Remove a client. Deleting an unknown ID is a silent no-op.

        The ID sequence is left untouched so deleted IDs are never reused.
        """
        document = self._documents.load()
        key = str(client_id)
        if key not in document.users:
            return
        del document.users[key]
        document.refresh_totals(self._now())
        self._documents.save(document)
        logger.info("Client deleted: %s", key)

    # ── Migration ────────────────────────────────────────────────────

    async def migrate(self) -> MigrationReport:
        """Fold the legacy client list into the root document (idempotent)."""
        return self._migrator.run()

    # ── App settings ─────────────────────────────────────────────────

    async def get_app_settings(self) -> AppSettings:
        return self._documents.load().app_settings or AppSettings()

    async def update_app_settings(self, patch: AppSettingsUpdate | Mapping[str, Any]) -> AppSettings:
        if not isinstance(patch, AppSettingsUpdate):
            patch = AppSettingsUpdate.model_validate(patch)

        document = self._documents.load()
        now = self._now()
        current = document.app_settings or AppSettings(created_at=now)
        for name, value in patch.model_dump(exclude_none=True).items():
            setattr(current, name, value)
        current.updated_at = now
        document.app_settings = current
        self._documents.save(document)
        return current

    async def reset_app_settings(self) -> AppSettings:
        document = self._documents.load()
        now = self._now()
        document.app_settings = AppSettings(created_at=now, updated_at=now)
        self._documents.save(document)
        return document.app_settings

    # ── Whole-document operations ────────────────────────────────────

    async def export_data(self) -> str:
        """Pretty-printed JSON of the whole root document."""
        return serialize_root_document(self._documents.load(), indent=2)

    async def import_data(self, payload: str) -> ImportResult:
        """Replace the whole document with ``payload`` if it decodes; otherwise keep the current one."""
        outcome = parse_root_document(payload, self._documents.document_key)
        if not outcome.ok:
            slog.step_error(StoreStage.IMPORT, "Import rejected", error=outcome.error)
            return ImportResult(success=False, message="Invalid JSON format.")

        document = outcome.document
        if document.skipped_users:
            slog.step_error(StoreStage.IMPORT, f"Skipped unreadable entries: {', '.join(document.skipped_users)}")
        with slog.timed_step(StoreStage.IMPORT, "Replacing root document", clients=len(document.users)):
            reconcile_sequence(document)
            document.refresh_totals(self._now())
            self._documents.save(document)
        return ImportResult(success=True, message="Data imported successfully.")

    async def clear_all_data(self) -> None:
        self._documents.save(self._documents.default_document())
        logger.info("All client data cleared")

    async def get_statistics(self) -> StoreStatistics:
        document = self._documents.load()
        return StoreStatistics(
            total_clients=len(document.users),
            total_measurements=sum(
                record.measurements.filled_count() for record in document.users.values()
            ),
            last_backup=document.app_metadata.last_backup,
        )
