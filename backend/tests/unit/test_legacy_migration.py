"""Unit tests for the one-time legacy client list migration."""

import json
from datetime import datetime, timezone

import pytest

from naapbook.application.services import ClientStore, LegacyClientMigrator, RootDocumentStore
from naapbook.infrastructure.storage import InMemoryKeyValueStore

NAMESPACE = "naapbook"
DOCUMENT_KEY = "naapbook_data"
LEGACY_KEY = "clients"


def fixed_clock() -> datetime:
    return datetime(2025, 6, 1, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def kv() -> InMemoryKeyValueStore:
    return InMemoryKeyValueStore()


@pytest.fixture
def migrator(kv: InMemoryKeyValueStore) -> LegacyClientMigrator:
    return LegacyClientMigrator(RootDocumentStore(kv), legacy_key=LEGACY_KEY, clock=fixed_clock)


def set_legacy(kv: InMemoryKeyValueStore, entries) -> None:
    kv.set(NAMESPACE, LEGACY_KEY, json.dumps(entries))


def stored_document(kv: InMemoryKeyValueStore) -> dict:
    return json.loads(kv.get(NAMESPACE, DOCUMENT_KEY))


def test_no_legacy_key_is_a_noop(migrator: LegacyClientMigrator, kv):
    report = migrator.run()

    assert report.legacy_found is False
    assert report.copied == 0
    assert kv.get(NAMESPACE, DOCUMENT_KEY) is None


def test_copies_records_and_removes_legacy_key(migrator: LegacyClientMigrator, kv):
    set_legacy(kv, [
        {
            "id": "n-3",
            "name": " Ali ",
            "phone": "0300-1234567",
            "created_at": "2024-01-01T00:00:00.000Z",
            "updated_at": "2024-02-01T00:00:00.000Z",
            "measurements": {"chest": {"value": "40"}, "unit": "in"},
        },
        {"id": "n-7", "name": "Sara"},
    ])

    report = migrator.run()

    assert (report.legacy_found, report.copied, report.skipped) == (True, 2, 0)
    assert kv.get(NAMESPACE, LEGACY_KEY) is None

    document = stored_document(kv)
    assert set(document["users"]) == {"n-3", "n-7"}
    ali = document["users"]["n-3"]
    assert ali["name"] == "Ali"
    assert ali["measurements"]["chest"] == {"value": 40}
    assert ali["updated_at"] == "2024-02-01T00:00:00.000Z"
    assert document["users"]["n-7"]["created_at"] == "2025-06-01T12:00:00.000Z"
    assert document["app_metadata"]["total_clients"] == 2
    assert document["app_metadata"]["next_client_seq"] == 8


def test_existing_ids_are_not_overwritten(migrator: LegacyClientMigrator, kv):
    kv.set(NAMESPACE, DOCUMENT_KEY, json.dumps({
        "users": {"n-1": {"id": "n-1", "name": "Current"}},
        "app_metadata": {"total_clients": 1, "next_client_seq": 2},
    }))
    set_legacy(kv, [{"id": "n-1", "name": "Legacy"}, {"id": "n-5", "name": "Five"}])

    report = migrator.run()

    assert (report.copied, report.skipped) == (1, 1)
    document = stored_document(kv)
    assert document["users"]["n-1"]["name"] == "Current"
    assert document["app_metadata"]["next_client_seq"] == 6


def test_records_without_id_get_fresh_ids(migrator: LegacyClientMigrator, kv):
    set_legacy(kv, [{"id": "n-2", "name": "Two"}, {"name": "No id"}, 42])

    report = migrator.run()

    assert (report.copied, report.skipped) == (2, 1)
    document = stored_document(kv)
    assert document["users"]["n-3"]["name"] == "No id"
    assert document["app_metadata"]["next_client_seq"] == 4


def test_empty_legacy_list_is_deleted(migrator: LegacyClientMigrator, kv):
    set_legacy(kv, [])

    report = migrator.run()

    assert report.legacy_found is True
    assert kv.get(NAMESPACE, LEGACY_KEY) is None
    assert kv.get(NAMESPACE, DOCUMENT_KEY) is None


def test_unreadable_legacy_list_is_left_in_place(migrator: LegacyClientMigrator, kv):
    kv.set(NAMESPACE, LEGACY_KEY, "{broken")

    report = migrator.run()

    assert report.legacy_found is True
    assert report.copied == 0
    assert kv.get(NAMESPACE, LEGACY_KEY) == "{broken"


def test_running_twice_matches_running_once(migrator: LegacyClientMigrator, kv):
    set_legacy(kv, [{"id": "n-1", "name": "A"}, {"name": "B"}])

    migrator.run()
    after_once = kv.get(NAMESPACE, DOCUMENT_KEY)
    second = migrator.run()

    assert second.legacy_found is False
    assert kv.get(NAMESPACE, DOCUMENT_KEY) == after_once


@pytest.mark.asyncio
async def test_store_migrate_then_add_continues_sequence(kv):
    set_legacy(kv, [{"id": "n-9", "name": "Legacy"}])
    store = ClientStore(RootDocumentStore(kv), legacy_key=LEGACY_KEY, clock=fixed_clock)

    report = await store.migrate()
    client = await store.add_client({"name": "New"})

    assert report.copied == 1
    assert client.id == "n-10"
    assert (await store.get_client_by_id("n-9")).name == "Legacy"
