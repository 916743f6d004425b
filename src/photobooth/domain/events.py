"""Domain models for kiosk events."""

from dataclasses import dataclass


@dataclass(frozen=True)
class EventRecord:
    """Represents an event as seen by the transform pipeline."""

    id: str
    name: str
    is_active: bool
    max_photos: int | None = None
