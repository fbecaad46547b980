"""Unit tests for the ClientStore: CRUD, ID sequencing and patch merging."""

import json
from datetime import datetime, timedelta, timezone

import pytest
from pydantic import ValidationError

from naapbook.application.schemas import ClientCreate, ClientUpdate
from naapbook.application.services import ClientStore, RootDocumentStore
from naapbook.domain.entities import MEASUREMENT_SLOTS
from naapbook.domain.exceptions import EntityNotFoundError
from naapbook.infrastructure.storage import InMemoryKeyValueStore


NAMESPACE = "naapbook"
DOCUMENT_KEY = "naapbook_data"


class SteppingClock:
    """Fake clock that moves forward one second per call."""

    def __init__(self, start: datetime = datetime(2025, 1, 1, tzinfo=timezone.utc)):
        self._current = start

    def __call__(self) -> datetime:
        self._current += timedelta(seconds=1)
        return self._current


def stored_document(kv: InMemoryKeyValueStore) -> dict:
    return json.loads(kv.get(NAMESPACE, DOCUMENT_KEY))


def seed_document(kv: InMemoryKeyValueStore, document: dict) -> None:
    kv.set(NAMESPACE, DOCUMENT_KEY, json.dumps(document))


@pytest.fixture
def kv() -> InMemoryKeyValueStore:
    return InMemoryKeyValueStore()


@pytest.fixture
def store(kv: InMemoryKeyValueStore) -> ClientStore:
    return ClientStore(RootDocumentStore(kv), clock=SteppingClock())


# ── Create ───────────────────────────────────────────────────────────


@pytest.mark.asyncio
async def test_add_client_assigns_sequential_ids(store: ClientStore):
    first = await store.add_client(ClientCreate(name="Ali Khan"))
    second = await store.add_client({"name": "Sara"})
    assert first.id == "n-1"
    assert second.id == "n-2"


@pytest.mark.asyncio
async def test_add_client_overlays_measurements_on_defaults(store: ClientStore, kv):
    client = await store.add_client(
        {"name": "Ali"},
        {"chest": {"value": "40"}, "custom_fields": [{"name": "Sleeve", "value": "10"}]},
    )

    assert client.measurements.slots["chest"].value == 40
    for slot in MEASUREMENT_SLOTS:
        assert slot in client.measurements.slots
    assert client.measurements.slots["waist"].value == 0
    assert client.measurements.slots["waist"].notes == ""
    assert client.measurements.custom_fields["sleeve"].value == 10

    persisted = stored_document(kv)["users"]["n-1"]["measurements"]
    assert persisted["chest"] == {"value": 40}
    assert persisted["waist"] == {"value": 0, "notes": ""}
    assert persisted["custom_fields"]["sleeve"]["name"] == "Sleeve"


@pytest.mark.asyncio
async def test_add_client_trims_and_omits_blank_optionals(store: ClientStore, kv):
    client = await store.add_client(
        {"name": "  Ali  ", "phone": "   ", "email": " ali@example.com ", "notes": ""}
    )

    assert client.name == "Ali"
    assert client.phone is None
    assert client.email == "ali@example.com"
    assert client.notes is None

    persisted = stored_document(kv)["users"]["n-1"]
    assert "phone" not in persisted
    assert "notes" not in persisted
    assert persisted["email"] == "ali@example.com"


@pytest.mark.asyncio
async def test_add_client_measurements_argument_wins(store: ClientStore):
    client = await store.add_client(
        {"name": "Ali", "measurements": {"chest": {"value": 30}}},
        {"chest": {"value": 44}},
    )
    assert client.measurements.slots["chest"].value == 44


@pytest.mark.asyncio
async def test_add_client_uses_measurements_from_fields(store: ClientStore):
    client = await store.add_client({"name": "Ali", "measurements": {"hips": {"value": "38,5"}}})
    assert client.measurements.slots["hips"].value == 38.5


@pytest.mark.asyncio
async def test_add_client_stamps_timestamps_and_metadata(store: ClientStore, kv):
    client = await store.add_client({"name": "Ali"})

    assert client.created_at == client.updated_at
    assert client.created_at.endswith("Z")
    metadata = stored_document(kv)["app_metadata"]
    assert metadata["total_clients"] == 1
    assert metadata["next_client_seq"] == 2
    assert metadata["last_backup"] == client.created_at


@pytest.mark.asyncio
async def test_add_client_rejects_blank_name_at_boundary(store: ClientStore):
    with pytest.raises(ValidationError):
        await store.add_client({"name": "   "})


@pytest.mark.asyncio
async def test_add_client_skips_occupied_id(store: ClientStore, kv):
    seed_document(kv, {
        "users": {"n-2": {"id": "n-2", "name": "Hand edited"}},
        "app_metadata": {"total_clients": 1, "next_client_seq": 2},
    })

    client = await store.add_client({"name": "New"})

    assert client.id == "n-3"
    assert (await store.get_client_by_id("n-2")).name == "Hand edited"
    assert stored_document(kv)["app_metadata"]["next_client_seq"] == 4


# ── ID sequencing ────────────────────────────────────────────────────


@pytest.mark.asyncio
async def test_ids_are_never_reused_after_delete(store: ClientStore):
    ids = [(await store.add_client({"name": f"C{i}"})).id for i in range(3)]
    await store.delete_client("n-3")
    ids.append((await store.add_client({"name": "C3"})).id)
    await store.delete_client("n-1")
    ids.append((await store.add_client({"name": "C4"})).id)

    numbers = [int(client_id.split("-")[1]) for client_id in ids]
    assert numbers == [1, 2, 3, 4, 5]


@pytest.mark.asyncio
async def test_sequence_is_derived_from_existing_ids(store: ClientStore, kv):
    seed_document(kv, {
        "users": {
            "n-5": {"id": "n-5", "name": "Five"},
            "n-9": {"id": "n-9", "name": "Nine"},
            "walk-in": {"id": "walk-in", "name": "Other"},
        },
        "app_metadata": {"total_clients": 3},
    })

    client = await store.add_client({"name": "Ten"})

    assert client.id == "n-10"
    assert stored_document(kv)["app_metadata"]["next_client_seq"] == 11


@pytest.mark.asyncio
async def test_sequence_falls_back_to_record_count(store: ClientStore, kv):
    seed_document(kv, {
        "users": {
            "a": {"id": "a", "name": "A"},
            "b": {"id": "b", "name": "B"},
        },
        "app_metadata": {"next_client_seq": 0},
    })

    client = await store.add_client({"name": "C"})

    assert client.id == "n-3"


# ── Read ─────────────────────────────────────────────────────────────


@pytest.mark.asyncio
async def test_get_client_by_id_returns_none_when_missing(store: ClientStore):
    assert await store.get_client_by_id("n-42") is None


@pytest.mark.asyncio
async def test_get_all_clients(store: ClientStore):
    await store.add_client({"name": "A"})
    await store.add_client({"name": "B"})
    clients = await store.get_all_clients()
    assert sorted(c.name for c in clients) == ["A", "B"]


@pytest.mark.asyncio
async def test_malformed_document_falls_back_to_default(store: ClientStore, kv):
    kv.set(NAMESPACE, DOCUMENT_KEY, "{not json")

    assert await store.get_all_clients() == []
    client = await store.add_client({"name": "Fresh"})
    assert client.id == "n-1"
    assert list(stored_document(kv)["users"]) == ["n-1"]


@pytest.mark.asyncio
async def test_one_broken_entry_does_not_wipe_other_clients(store: ClientStore, kv):
    seed_document(kv, {
        "users": {
            "n-1": {"id": "n-1", "name": "Ali", "measurements": {}},
            "n-2": {"id": "n-2", "name": "Sara", "measurements": {}},
            "n-3": None,
        },
        "app_metadata": {"total_clients": 3, "next_client_seq": 4},
    })

    client = await store.add_client({"name": "New"})

    assert client.id == "n-4"
    document = stored_document(kv)
    assert list(document["users"]) == ["n-1", "n-2", "n-4"]
    assert document["app_metadata"]["next_client_seq"] == 5
    assert document["app_metadata"]["total_clients"] == 3


@pytest.mark.asyncio
async def test_unrelated_write_keeps_stored_measurements_intact(store: ClientStore, kv):
    seed_document(kv, {
        "users": {
            "n-1": {
                "id": "n-1",
                "name": "Ali",
                "created_at": "2025-01-01T00:00:00.000Z",
                "updated_at": "2025-01-01T00:00:00.000Z",
                "measurements": {
                    "chest": {"value": "40"},
                    "waist": {},
                    "kameez": {"value": 12},
                },
            }
        },
        "app_metadata": {"total_clients": 1, "next_client_seq": 2},
    })

    await store.add_client({"name": "Other"})

    measurements = stored_document(kv)["users"]["n-1"]["measurements"]
    assert measurements == {
        "chest": {"value": 40.0},
        "kameez": {"value": 12},
        "custom_fields": {},
    }


# ── Update───────────────────────────────────────────────────────────


@pytest.mark.asyncio
async def test_update_preserves_untouched_measurements(store: ClientStore):
    created = await store.add_client(
        {"name": "Ali"},
        {
            "waist": {"value": 30},
            "custom_fields": {"sleeve": {"name": "Sleeve", "value": 10}},
        },
    )

    updated = await store.update_client(created.id, {"measurements": {"chest": {"value": 40}}})

    assert updated.measurements.slots["chest"].value == 40
    assert updated.measurements.slots["waist"].value == 30
    sleeve = updated.measurements.custom_fields["sleeve"]
    assert (sleeve.name, sleeve.value) == ("Sleeve", 10)


@pytest.mark.asyncio
async def test_update_one_custom_field_keeps_the_others(store: ClientStore):
    created = await store.add_client(
        {"name": "Ali"},
        {"custom_fields": {
            "sleeve": {"name": "Sleeve", "value": 10},
            "neck": {"name": "Neck", "value": 15},
        }},
    )

    updated = await store.update_client(
        created.id,
        ClientUpdate(measurements={"custom_fields": [{"_key": "sleeve", "name": "Sleeve", "value": "11,5"}]}),
    )

    assert updated.measurements.custom_fields["sleeve"].value == 11.5
    assert updated.measurements.custom_fields["neck"].value == 15


@pytest.mark.asyncio
async def test_update_scalar_fields_and_timestamps(store: ClientStore):
    created = await store.add_client({"name": "Ali", "phone": "0300-1234567"})

    updated = await store.update_client(
        created.id,
        {"name": " Ali Raza ", "id": "n-99", "created_at": "1999-01-01T00:00:00Z"},
    )

    assert updated.id == created.id
    assert updated.name == "Ali Raza"
    assert updated.phone == "0300-1234567"
    assert updated.created_at == created.created_at
    assert updated.updated_at > created.updated_at
    assert await store.get_client_by_id("n-99") is None


@pytest.mark.asyncio
async def test_update_blank_optional_field_clears_it(store: ClientStore, kv):
    created = await store.add_client({"name": "Ali", "phone": "0300-1234567"})

    updated = await store.update_client(created.id, {"phone": "  "})

    assert updated.phone is None
    assert "phone" not in stored_document(kv)["users"][created.id]


@pytest.mark.asyncio
async def test_update_missing_client_raises_not_found(store: ClientStore):
    with pytest.raises(EntityNotFoundError) as exc_info:
        await store.update_client("n-404", {"name": "Ghost"})
    assert exc_info.value.entity_id == "n-404"


# ── Delete ───────────────────────────────────────────────────────────


@pytest.mark.asyncio
async def test_delete_is_idempotent(store: ClientStore, kv):
    await store.add_client({"name": "A"})
    await store.add_client({"name": "B"})

    await store.delete_client("n-1")
    after_first = kv.get(NAMESPACE, DOCUMENT_KEY)
    await store.delete_client("n-1")

    assert kv.get(NAMESPACE, DOCUMENT_KEY) == after_first
    assert await store.get_client_by_id("n-1") is None


@pytest.mark.asyncio
async def test_delete_unknown_id_on_empty_store_is_noop(store: ClientStore, kv):
    await store.delete_client("n-1")
    assert kv.get(NAMESPACE, DOCUMENT_KEY) is None


@pytest.mark.asyncio
async def test_total_clients_matches_users_after_mutations(store: ClientStore, kv):
    for name in ("A", "B", "C"):
        await store.add_client({"name": name})
    await store.update_client("n-2", {"notes": "VIP"})
    await store.delete_client("n-1")
    await store.delete_client("n-1")

    document = stored_document(kv)
    assert document["app_metadata"]["total_clients"] == len(document["users"]) == 2
    assert document["app_metadata"]["next_client_seq"] == 4


# ── Settings, export/import, statistics ──────────────────────────────


@pytest.mark.asyncio
async def test_app_settings_update_and_reset(store: ClientStore):
    assert (await store.get_app_settings()).preferred_unit == "inches"

    updated = await store.update_app_settings({"preferred_unit": "cm", "theme": "dark"})
    assert (updated.preferred_unit, updated.theme) == ("cm", "dark")
    assert (await store.get_app_settings()).theme == "dark"

    reset = await store.reset_app_settings()
    assert reset.preferred_unit == "inches"
    assert reset.theme == "light"


@pytest.mark.asyncio
async def test_app_settings_rejects_unknown_unit(store: ClientStore):
    with pytest.raises(ValidationError):
        await store.update_app_settings({"preferred_unit": "yards"})


@pytest.mark.asyncio
async def test_export_then_import_into_another_store(store: ClientStore):
    await store.add_client({"name": "Ali"}, {"chest": {"value": 40}})
    exported = await store.export_data()

    other = ClientStore(RootDocumentStore(InMemoryKeyValueStore()), clock=SteppingClock())
    result = await other.import_data(exported)

    assert result.success is True
    imported = await other.get_client_by_id("n-1")
    assert imported.name == "Ali"
    assert imported.measurements.slots["chest"].value == 40
    assert (await other.add_client({"name": "Next"})).id == "n-2"


@pytest.mark.asyncio
async def test_import_invalid_payload_keeps_current_document(store: ClientStore, kv):
    await store.add_client({"name": "Ali"})
    before = kv.get(NAMESPACE, DOCUMENT_KEY)

    result = await store.import_data("[1, 2, 3]")

    assert result.success is False
    assert result.message == "Invalid JSON format."
    assert kv.get(NAMESPACE, DOCUMENT_KEY) == before


@pytest.mark.asyncio
async def test_import_recomputes_totals_and_sequence(store: ClientStore, kv):
    payload = json.dumps({
        "users": {"n-4": {"id": "n-4", "name": "Four"}},
        "app_metadata": {"total_clients": 10, "next_client_seq": 2},
    })

    assert (await store.import_data(payload)).success

    metadata = stored_document(kv)["app_metadata"]
    assert metadata["total_clients"] == 1
    assert metadata["next_client_seq"] == 5


@pytest.mark.asyncio
async def test_clear_all_data_resets_document(store: ClientStore):
    await store.add_client({"name": "Ali"})
    await store.clear_all_data()

    assert await store.get_all_clients() == []
    assert (await store.add_client({"name": "Again"})).id == "n-1"


@pytest.mark.asyncio
async def test_statistics_count_filled_measurements(store: ClientStore):
    await store.add_client(
        {"name": "Ali"},
        {"chest": {"value": 40}, "custom_fields": [{"name": "Sleeve", "value": 10}]},
    )
    await store.add_client({"name": "Sara"})

    stats = await store.get_statistics()

    assert stats.total_clients == 2
    assert stats.total_measurements == 2
    assert stats.last_backup != ""
