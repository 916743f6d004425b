"""Supabase-backed event lookups."""

from dataclasses import dataclass

from supabase import Client

from photobooth.domain.events import EventRecord
from photobooth.services.pipeline import EventRepository


@dataclass
class SupabaseEventRepository(EventRepository):
    """Supabase implementation for reading kiosk events."""

    client: Client

    def get_event(self, event_id: str) -> EventRecord | None:
        """Return an event by id, if present."""
        response = (
            self.client.table("events")
            .select("id, name, is_active, max_photos")
            .eq("id", event_id)
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        row = response.data[0]
        max_photos = row.get("max_photos")
        return EventRecord(
            id=str(row["id"]),
            name=row.get("name") or "",
            is_active=bool(row.get("is_active")),
            max_photos=int(max_photos) if max_photos is not None else None,
        )
