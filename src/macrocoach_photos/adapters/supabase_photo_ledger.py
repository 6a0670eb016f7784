"""Supabase-backed photo metadata ledger."""

from dataclasses import dataclass
from datetime import UTC, datetime

from supabase import Client

from macrocoach_photos.domain.photos import PhotoCategory, PhotoRecord
from macrocoach_photos.services.ledger import UNSET, PhotoLedger

_COLUMNS = (
    "id, owner_entity_id, category, capture_date, notes, local_path, remote_url, "
    "remote_backend, uploading_device_id, created_at"
)


@dataclass
class SupabasePhotoLedger(PhotoLedger):
    """Supabase implementation of the photo metadata ledger."""

    client: Client
    table_name: str = "photo_metadata"

    def create_record(self, record: PhotoRecord) -> None:
        """Insert a photo metadata row."""
        if not record.has_location:
            raise ValueError(f"Photo {record.identity} has no storage location")
        response = (
            self.client.table(self.table_name)
            .insert(
                {
                    "id": record.identity,
                    "owner_entity_id": record.owner_entity_id,
                    "category": record.category.value,
                    "capture_date": record.capture_date.isoformat(),
                    "notes": record.notes,
                    "local_path": record.local_path,
                    "remote_url": record.remote_url,
                    "remote_backend": record.remote_backend,
                    "uploading_device_id": record.uploading_device_id,
                    "created_at": record.created_at.isoformat(),
                }
            )
            .execute()
        )
        if not response.data:
            raise RuntimeError("Failed to create photo metadata")

    def get_record(self, identity: str) -> PhotoRecord | None:
        """Return a live photo record by id, if present."""
        response = (
            self.client.table(self.table_name)
            .select(_COLUMNS)
            .eq("id", identity)
            .is_("deleted_at", "null")
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return _to_record(response.data[0])

    def list_by_owner(
        self, owner_entity_id: str, category: PhotoCategory | None = None
    ) -> list[PhotoRecord]:
        """Return live records for an owner, newest first."""
        query = (
            self.client.table(self.table_name)
            .select(_COLUMNS)
            .eq("owner_entity_id", owner_entity_id)
            .is_("deleted_at", "null")
        )
        if category is not None:
            query = query.eq("category", category.value)
        response = query.order("created_at", desc=True).execute()
        return [_to_record(row) for row in response.data or []]

    def patch_locations(
        self,
        identity: str,
        *,
        local_path: str | None | object = UNSET,
        remote_url: str | None | object = UNSET,
        remote_backend: str | None | object = UNSET,
    ) -> PhotoRecord | None:
        """Update storage location columns only."""
        changes: dict[str, object] = {}
        if local_path is not UNSET:
            changes["local_path"] = local_path
        if remote_url is not UNSET:
            changes["remote_url"] = remote_url
        if remote_backend is not UNSET:
            changes["remote_backend"] = remote_backend
        if not changes:
            return self.get_record(identity)
        changes["updated_at"] = datetime.now(tz=UTC).isoformat()
        response = (
            self.client.table(self.table_name)
            .update(changes)
            .eq("id", identity)
            .is_("deleted_at", "null")
            .execute()
        )
        if not response.data:
            return None
        return _to_record(response.data[0])

    def soft_delete(self, identity: str) -> None:
        """Stamp deleted_at so the row disappears from reads."""
        now = datetime.now(tz=UTC).isoformat()
        self.client.table(self.table_name).update(
            {"deleted_at": now, "updated_at": now}
        ).eq("id", identity).execute()


def _to_record(row: dict[str, object]) -> PhotoRecord:
    """Map a table row to a PhotoRecord."""
    return PhotoRecord(
        identity=str(row["id"]),
        owner_entity_id=str(row["owner_entity_id"]),
        category=PhotoCategory(row["category"]),
        capture_date=_parse_timestamp(row["capture_date"]),
        notes=row.get("notes"),
        created_at=_parse_timestamp(row["created_at"]),
        local_path=row.get("local_path"),
        remote_url=row.get("remote_url"),
        remote_backend=row.get("remote_backend"),
        uploading_device_id=str(row["uploading_device_id"]),
    )


def _parse_timestamp(value: object) -> datetime:
    """Parse an ISO timestamp, assuming UTC when no offset is present."""
    parsed = datetime.fromisoformat(str(value))
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=UTC)
    return parsed
