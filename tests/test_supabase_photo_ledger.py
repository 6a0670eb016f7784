"""Tests for the Supabase photo ledger."""

from dataclasses import dataclass, field
from datetime import UTC, datetime

import pytest

from macrocoach_photos.adapters.supabase_photo_ledger import SupabasePhotoLedger
from macrocoach_photos.domain.photos import PhotoCategory, PhotoRecord


@dataclass
class FakeResponse:
    data: list[dict[str, object]] | None


@dataclass
class FakeTable:
    name: str
    response_queue: dict[str, list[list[dict[str, object]]]] = field(
        default_factory=lambda: {"select": [], "insert": [], "update": []}
    )
    last_payload: object | None = None
    last_filters: list[tuple[str, object]] = field(default_factory=list)
    last_order: tuple[str, bool] | None = None

    def queue(self, action: str, data: list[dict[str, object]]) -> None:
        self.response_queue[action].append(data)

    def select(self, *_args) -> "FakeTable":
        self._action = "select"
        return self

    def insert(self, payload) -> "FakeTable":  # type: ignore[no-untyped-def]
        self._action = "insert"
        self.last_payload = payload
        return self

    def update(self, payload) -> "FakeTable":  # type: ignore[no-untyped-def]
        self._action = "update"
        self.last_payload = payload
        return self

    def eq(self, column: str, value) -> "FakeTable":  # type: ignore[no-untyped-def]
        self.last_filters.append((column, value))
        return self

    def is_(self, column: str, value) -> "FakeTable":  # type: ignore[no-untyped-def]
        self.last_filters.append((column, value))
        return self

    def limit(self, _count: int) -> "FakeTable":
        return self

    def order(self, column: str, desc: bool = False) -> "FakeTable":
        self.last_order = (column, desc)
        return self

    def execute(self) -> FakeResponse:
        action = getattr(self, "_action", "select")
        queue = self.response_queue.get(action, [])
        data = queue.pop(0) if queue else []
        return FakeResponse(data=data)


@dataclass
class FakeSupabaseClient:
    tables: dict[str, FakeTable] = field(default_factory=dict)

    def table(self, name: str) -> FakeTable:
        if name not in self.tables:
            self.tables[name] = FakeTable(name=name)
        return self.tables[name]


def _row(**overrides: object) -> dict[str, object]:
    row: dict[str, object] = {
        "id": "photo-1",
        "owner_entity_id": "client-42",
        "category": "weight-check",
        "capture_date": "2024-03-01T08:30:00",
        "notes": None,
        "local_path": None,
        "remote_url": "https://i.ibb.co/abc/photo.jpg",
        "remote_backend": "imgbb",
        "uploading_device_id": "device_abc",
        "created_at": "2024-03-01T08:31:00+00:00",
    }
    row.update(overrides)
    return row


def _record(**overrides: object) -> PhotoRecord:
    now = datetime(2024, 3, 1, 8, 30, tzinfo=UTC)
    values: dict[str, object] = {
        "identity": "photo-1",
        "owner_entity_id": "client-42",
        "category": PhotoCategory.PROGRESS,
        "capture_date": now,
        "notes": "week 3",
        "created_at": now,
        "local_path": "/cache/client-42_progress_1.jpg",
        "remote_url": None,
        "remote_backend": None,
        "uploading_device_id": "device_abc",
    }
    values.update(overrides)
    return PhotoRecord(**values)  # type: ignore[arg-type]


def test_create_record_inserts_all_columns() -> None:
    client = FakeSupabaseClient()
    table = client.table("photo_metadata")
    table.queue("insert", [{"id": "photo-1"}])

    SupabasePhotoLedger(client).create_record(_record())

    payload = table.last_payload
    assert isinstance(payload, dict)
    assert payload["id"] == "photo-1"
    assert payload["category"] == "progress"
    assert payload["local_path"] == "/cache/client-42_progress_1.jpg"
    assert payload["remote_url"] is None
    assert payload["capture_date"] == "2024-03-01T08:30:00+00:00"


def test_create_record_rejects_record_without_location() -> None:
    client = FakeSupabaseClient()

    with pytest.raises(ValueError):
        SupabasePhotoLedger(client).create_record(_record(local_path=None))

    assert client.table("photo_metadata").last_payload is None


def test_create_record_raises_on_empty_response() -> None:
    with pytest.raises(RuntimeError):
        SupabasePhotoLedger(FakeSupabaseClient()).create_record(_record())


def test_get_record_maps_row_and_filters_deleted() -> None:
    client = FakeSupabaseClient()
    table = client.table("photo_metadata")
    table.queue("select", [_row()])

    record = SupabasePhotoLedger(client).get_record("photo-1")

    assert record is not None
    assert record.category is PhotoCategory.WEIGHT_CHECK
    assert record.capture_date == datetime(2024, 3, 1, 8, 30, tzinfo=UTC)
    assert record.remote_backend == "imgbb"
    assert ("deleted_at", "null") in table.last_filters


def test_get_record_missing_returns_none() -> None:
    assert SupabasePhotoLedger(FakeSupabaseClient()).get_record("missing") is None


def test_list_by_owner_orders_newest_first_and_filters_category() -> None:
    client = FakeSupabaseClient()
    table = client.table("photo_metadata")
    table.queue("select", [_row(id="photo-2"), _row()])

    records = SupabasePhotoLedger(client).list_by_owner(
        "client-42", PhotoCategory.WEIGHT_CHECK
    )

    assert [record.identity for record in records] == ["photo-2", "photo-1"]
    assert ("category", "weight-check") in table.last_filters
    assert table.last_order == ("created_at", True)


def test_patch_locations_only_touches_given_columns() -> None:
    client = FakeSupabaseClient()
    table = client.table("photo_metadata")
    table.queue("update", [_row(local_path="/cache/a.jpg")])

    patched = SupabasePhotoLedger(client).patch_locations(
        "photo-1", remote_url="https://i.ibb.co/abc/photo.jpg", remote_backend="imgbb"
    )

    assert patched is not None
    payload = table.last_payload
    assert isinstance(payload, dict)
    assert set(payload) == {"remote_url", "remote_backend", "updated_at"}


def test_soft_delete_stamps_deleted_at() -> None:
    client = FakeSupabaseClient()
    table = client.table("photo_metadata")

    SupabasePhotoLedger(client).soft_delete("photo-1")

    payload = table.last_payload
    assert isinstance(payload, dict)
    assert payload["deleted_at"] == payload["updated_at"]
    assert ("id", "photo-1") in table.last_filters


def test_custom_table_name() -> None:
    client = FakeSupabaseClient()
    client.table("photos_v2").queue("select", [_row()])

    ledger = SupabasePhotoLedger(client, table_name="photos_v2")

    assert ledger.get_record("photo-1") is not None
