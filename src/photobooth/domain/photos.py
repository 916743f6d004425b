"""Domain models for stored photos and their storage layout."""

from dataclasses import dataclass
from datetime import datetime
from pathlib import PurePosixPath

PHOTOS_PREFIX = "photos"
THUMBS_DIR = "thumbs"
THUMB_SUFFIX = "_thumb"


@dataclass(frozen=True)
class StoredAsset:
    """Public references for a materialized result."""

    image_url: str
    thumbnail_url: str
    storage_path: str


@dataclass(frozen=True)
class Photo:
    """Represents a persisted photo record."""

    id: str
    event_id: str
    style_id: str
    image_url: str
    thumbnail_url: str
    storage_path: str
    created_at: datetime


def image_path_for(event_id: str, key: str) -> str:
    """Return the storage path of a full-size image."""
    return f"{PHOTOS_PREFIX}/{event_id}/{key}.jpg"


def thumbnail_path_for(storage_path: str) -> str:
    """Derive the thumbnail path from a full-size image path.

    ``photos/e1/169_abc.jpg`` becomes ``photos/e1/thumbs/169_abc_thumb.jpg``.
    """
    path = PurePosixPath(storage_path)
    return str(path.parent / THUMBS_DIR / f"{path.stem}{THUMB_SUFFIX}{path.suffix}")
