"""Supabase-backed photo repository."""

from dataclasses import dataclass
from datetime import UTC, datetime

from supabase import Client

from photobooth.domain.photos import Photo, StoredAsset
from photobooth.services.photos import PhotoRepository

_COLUMNS = "id, event_id, style_id, image_url, thumbnail_url, storage_path, created_at"


@dataclass
class SupabasePhotoRepository(PhotoRepository):
    """Supabase implementation for photo record persistence."""

    client: Client

    def create_photo(self, event_id: str, style_id: str, asset: StoredAsset) -> Photo:
        """Create a photo row and return it."""
        response = (
            self.client.table("photos")
            .insert(
                {
                    "event_id": event_id,
                    "style_id": style_id,
                    "image_url": asset.image_url,
                    "thumbnail_url": asset.thumbnail_url,
                    "storage_path": asset.storage_path,
                    "created_at": datetime.now(tz=UTC).isoformat(),
                }
            )
            .execute()
        )
        if not response.data:
            raise RuntimeError("Failed to create photo record")
        return _to_photo(response.data[0])

    def get_photo(self, photo_id: str) -> Photo | None:
        """Return a photo by id, if present."""
        response = (
            self.client.table("photos")
            .select(_COLUMNS)
            .eq("id", photo_id)
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return _to_photo(response.data[0])

    def delete_photo(self, photo_id: str) -> None:
        """Delete a photo row."""
        self.client.table("photos").delete().eq("id", photo_id).execute()

    def count_for_event(self, event_id: str) -> int:
        """Return the number of photo rows for an event."""
        response = (
            self.client.table("photos")
            .select("id", count="exact")
            .eq("event_id", event_id)
            .execute()
        )
        if response.count is not None:
            return response.count
        return len(response.data or [])


def _to_photo(row: dict[str, object]) -> Photo:
    created_at = row.get("created_at")
    return Photo(
        id=str(row["id"]),
        event_id=str(row["event_id"]),
        style_id=str(row["style_id"]),
        image_url=str(row["image_url"]),
        thumbnail_url=str(row["thumbnail_url"]),
        storage_path=str(row.get("storage_path") or ""),
        created_at=(
            datetime.fromisoformat(created_at)
            if isinstance(created_at, str)
            else datetime.now(tz=UTC)
        ),
    )
