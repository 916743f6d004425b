"""Photo records and their best-effort removal."""

import asyncio
import logging
from dataclasses import dataclass
from typing import Protocol

from photobooth.domain.errors import InvalidArgumentError, NotFoundError
from photobooth.domain.photos import Photo, StoredAsset, thumbnail_path_for
from photobooth.services.materializer import ResultMaterializer

logger = logging.getLogger(__name__)

MAX_BULK_DELETE = 100
DELETE_BATCH_SIZE = 10


class PhotoRepository(Protocol):
    """Persistence interface for photo records."""

    def create_photo(self, event_id: str, style_id: str, asset: StoredAsset) -> Photo:
        """Create a photo record and return it."""

    def get_photo(self, photo_id: str) -> Photo | None:
        """Return a photo by id, if present."""

    def delete_photo(self, photo_id: str) -> None:
        """Delete a photo record."""

    def count_for_event(self, event_id: str) -> int:
        """Return the number of photos stored for an event."""


@dataclass(frozen=True)
class DeletionResult:
    """Counts reported by a bulk photo deletion."""

    deleted: int
    failed: int


@dataclass
class PhotoService:
    """Deletes photos along with their stored image and thumbnail."""

    repository: PhotoRepository
    materializer: ResultMaterializer
    batch_size: int = DELETE_BATCH_SIZE

    async def delete_photo(self, photo_id: str) -> None:
        """Delete one photo. Storage failures are logged, not raised."""
        photo = self.repository.get_photo(photo_id)
        if photo is None:
            raise NotFoundError("Photo not found")
        await self._remove(photo)
        logger.info("Deleted photo", extra={"photo_id": photo_id})

    async def delete_photos(self, photo_ids: list[str]) -> DeletionResult:
        """Delete photos in fixed-size concurrent batches."""
        if not photo_ids:
            raise InvalidArgumentError("photoIds array is required")
        if len(photo_ids) > MAX_BULK_DELETE:
            raise InvalidArgumentError(
                f"Maximum {MAX_BULK_DELETE} photos per request"
            )
        deleted = 0
        failed = 0
        for start in range(0, len(photo_ids), self.batch_size):
            batch = photo_ids[start : start + self.batch_size]
            outcomes = await asyncio.gather(
                *(self._delete_quietly(photo_id) for photo_id in batch)
            )
            deleted += sum(outcomes)
            failed += len(outcomes) - sum(outcomes)
        logger.info(
            "Bulk delete finished", extra={"deleted": deleted, "failed": failed}
        )
        return DeletionResult(deleted=deleted, failed=failed)

    async def _delete_quietly(self, photo_id: str) -> bool:
        try:
            photo = self.repository.get_photo(photo_id)
            if photo is None:
                return False
            await self._remove(photo)
        except Exception:
            logger.exception("Failed to delete photo", extra={"photo_id": photo_id})
            return False
        return True

    async def _remove(self, photo: Photo) -> None:
        if photo.storage_path:
            await self.materializer.delete_paths(
                [photo.storage_path, thumbnail_path_for(photo.storage_path)]
            )
        self.repository.delete_photo(photo.id)
