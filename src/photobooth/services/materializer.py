"""Download, thumbnail and publish finished generation results."""

import asyncio
import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Protocol
from uuid import uuid4

from photobooth.domain.errors import InternalError, UpstreamError
from photobooth.domain.jobs import UpstreamReply
from photobooth.domain.photos import StoredAsset, image_path_for, thumbnail_path_for
from photobooth.services.thumbnails import UNDECODABLE_IMAGE_ERRORS, make_thumbnail

logger = logging.getLogger(__name__)

JPEG_CONTENT_TYPE = "image/jpeg"
CACHE_MAX_AGE_SECONDS = 31_536_000


class AssetDownloader(Protocol):
    """Interface for fetching a generated asset from its result reference."""

    async def download(self, url: str) -> UpstreamReply:
        """GET the asset and return the raw reply."""


class ObjectStorage(Protocol):
    """Interface for the object store holding published photos."""

    async def upload(
        self, path: str, data: bytes, content_type: str, cache_max_age: int
    ) -> None:
        """Write an object at ``path``."""

    async def make_public(self, path: str) -> None:
        """Grant public read access to an object."""

    def public_url(self, path: str) -> str:
        """Return the public URL of an object."""

    async def delete(self, path: str) -> None:
        """Delete an object."""


@dataclass(frozen=True)
class CleanupResult:
    """Outcome of a best-effort deletion."""

    deleted: int
    failed: int


def default_storage_key() -> str:
    """Return a ``{epoch_ms}_{uuid}`` key for a new photo."""
    timestamp = int(datetime.now(tz=UTC).timestamp() * 1000)
    return f"{timestamp}_{uuid4()}"


@dataclass
class ResultMaterializer:
    """Turns a result reference into durably stored, public photos."""

    downloader: AssetDownloader
    storage: ObjectStorage
    key_factory: Callable[[], str] = field(default=default_storage_key)
    _cleanups: set[asyncio.Task[None]] = field(
        default_factory=set, init=False, repr=False
    )

    async def materialize(self, result_url: str, event_id: str) -> StoredAsset:
        """Store the full image and its thumbnail and return public references."""
        reply = await self.downloader.download(result_url)
        if not reply.ok:
            raise UpstreamError(
                "Failed to download processed image",
                upstream_status=reply.status_code,
                upstream_body=reply.text,
            )
        image_bytes = reply.content
        try:
            thumbnail_bytes = await asyncio.to_thread(make_thumbnail, image_bytes)
        except UNDECODABLE_IMAGE_ERRORS as exc:
            raise UpstreamError(
                "Generated asset is not a decodable image",
                upstream_status=reply.status_code,
            ) from exc

        image_path = image_path_for(event_id, self.key_factory())
        thumb_path = thumbnail_path_for(image_path)
        # Worker-thread writes outlive a cancelled caller.
        store = asyncio.ensure_future(
            self._store(image_path, image_bytes, thumb_path, thumbnail_bytes)
        )
        try:
            await asyncio.shield(store)
        except asyncio.CancelledError:
            logger.warning(
                "Materialization cancelled, removing stored objects",
                extra={"storage_path": image_path},
            )
            cleanup = asyncio.ensure_future(
                self._cleanup_after(store, [image_path, thumb_path])
            )
            self._cleanups.add(cleanup)
            cleanup.add_done_callback(self._cleanups.discard)
            raise
        except Exception as exc:
            logger.exception(
                "Failed to store processed image", extra={"storage_path": image_path}
            )
            await self.delete_paths([image_path, thumb_path])
            raise InternalError("Failed to store processed image") from exc

        logger.info("Stored processed image", extra={"storage_path": image_path})
        return StoredAsset(
            image_url=self.storage.public_url(image_path),
            thumbnail_url=self.storage.public_url(thumb_path),
            storage_path=image_path,
        )

    async def drain(self) -> None:
        """Wait for cleanups scheduled by cancelled materializations."""
        if self._cleanups:
            await asyncio.gather(*list(self._cleanups))

    async def _store(
        self,
        image_path: str,
        image_bytes: bytes,
        thumb_path: str,
        thumbnail_bytes: bytes,
    ) -> None:
        await asyncio.gather(
            self.storage.upload(
                image_path, image_bytes, JPEG_CONTENT_TYPE, CACHE_MAX_AGE_SECONDS
            ),
            self.storage.upload(
                thumb_path, thumbnail_bytes, JPEG_CONTENT_TYPE, CACHE_MAX_AGE_SECONDS
            ),
        )
        await asyncio.gather(
            self.storage.make_public(image_path),
            self.storage.make_public(thumb_path),
        )

    async def _cleanup_after(
        self, store: asyncio.Future[None], paths: list[str]
    ) -> None:
        await asyncio.wait([store])
        if not store.cancelled() and store.exception() is not None:
            logger.warning(
                "Storage write failed after cancellation",
                extra={"storage_path": paths[0], "error": str(store.exception())},
            )
        await self.delete_paths(paths)

    async def discard(self, asset: StoredAsset) -> CleanupResult:
        """Best-effort removal of a stored image and its thumbnail."""
        return await self.delete_paths(
            [asset.storage_path, thumbnail_path_for(asset.storage_path)]
        )

    async def delete_paths(self, paths: list[str]) -> CleanupResult:
        """Delete objects concurrently, logging failures instead of raising."""
        results = await asyncio.gather(
            *(self.storage.delete(path) for path in paths), return_exceptions=True
        )
        failed = 0
        for path, result in zip(paths, results, strict=True):
            if isinstance(result, Exception):
                failed += 1
                logger.warning(
                    "Failed to delete stored object",
                    extra={"storage_path": path, "error": str(result)},
                )
        return CleanupResult(deleted=len(paths) - failed, failed=failed)
