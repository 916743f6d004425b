"""Tests for result materialization."""

import asyncio
from dataclasses import dataclass, field
from io import BytesIO

import pytest
from PIL import Image

from photobooth.domain.errors import InternalError, UpstreamError
from photobooth.domain.jobs import UpstreamReply
from photobooth.domain.photos import StoredAsset, thumbnail_path_for
import photobooth.services.materializer as materializer_module
from photobooth.services.materializer import (
    CACHE_MAX_AGE_SECONDS,
    ResultMaterializer,
    default_storage_key,
)
from tests.conftest import (
    RESULT_URL,
    FakeObjectStorage,
    ScriptedFluxClient,
    make_jpeg,
)

IMAGE_PATH = "photos/e1/169_abc.jpg"
THUMB_PATH = "photos/e1/thumbs/169_abc_thumb.jpg"
BUCKET_URL = "https://storage.test/photos-bucket"


@dataclass
class GatedObjectStorage(FakeObjectStorage):
    """In-memory storage that records overlapping writes and grants."""

    release: asyncio.Event | None = None
    in_flight: int = 0
    peaks: dict[str, int] = field(default_factory=dict)

    async def upload(
        self, path: str, data: bytes, content_type: str, cache_max_age: int
    ) -> None:
        await self._enter("upload")
        await super().upload(path, data, content_type, cache_max_age)

    async def make_public(self, path: str) -> None:
        await self._enter("make_public")
        await super().make_public(path)

    async def _enter(self, operation: str) -> None:
        self.in_flight += 1
        self.peaks[operation] = max(self.peaks.get(operation, 0), self.in_flight)
        try:
            if self.release is None:
                await asyncio.sleep(0)
            else:
                await self.release.wait()
        finally:
            self.in_flight -= 1


def _materializer(
    flux_client: ScriptedFluxClient, storage: FakeObjectStorage
) -> ResultMaterializer:
    return ResultMaterializer(
        downloader=flux_client, storage=storage, key_factory=lambda: "169_abc"
    )


def _materialize(
    flux_client: ScriptedFluxClient, storage: FakeObjectStorage
) -> StoredAsset:
    return asyncio.run(
        _materializer(flux_client, storage).materialize(RESULT_URL, "e1")
    )


def test_materialize_uploads_image_and_thumbnail(
    flux_client: ScriptedFluxClient, storage: FakeObjectStorage
) -> None:
    asset = _materialize(flux_client, storage)

    assert asset == StoredAsset(
        image_url=f"{BUCKET_URL}/{IMAGE_PATH}",
        thumbnail_url=f"{BUCKET_URL}/{THUMB_PATH}",
        storage_path=IMAGE_PATH,
    )
    assert flux_client.downloaded == [RESULT_URL]
    assert storage.objects[IMAGE_PATH] == flux_client.download_reply.content
    assert storage.public == {IMAGE_PATH, THUMB_PATH}
    assert set(storage.metadata.values()) == {("image/jpeg", CACHE_MAX_AGE_SECONDS)}


def test_thumbnail_is_square_jpeg(
    flux_client: ScriptedFluxClient, storage: FakeObjectStorage
) -> None:
    flux_client.download_reply = UpstreamReply(
        status_code=200, content=make_jpeg(width=1600, height=1200)
    )

    _materialize(flux_client, storage)

    with Image.open(BytesIO(storage.objects[THUMB_PATH])) as thumb:
        assert thumb.size == (400, 400)
        assert thumb.format == "JPEG"


def test_download_failure_is_upstream_error(
    flux_client: ScriptedFluxClient, storage: FakeObjectStorage
) -> None:
    flux_client.download_reply = UpstreamReply(status_code=404, content=b"gone")

    with pytest.raises(UpstreamError, match="Failed to download"):
        _materialize(flux_client, storage)

    assert storage.objects == {}


def test_undecodable_asset_is_upstream_error(
    flux_client: ScriptedFluxClient, storage: FakeObjectStorage
) -> None:
    flux_client.download_reply = UpstreamReply(status_code=200, content=b"<html>")

    with pytest.raises(UpstreamError, match="not a decodable image"):
        _materialize(flux_client, storage)

    assert storage.objects == {}


def test_upload_failure_removes_partial_objects(
    flux_client: ScriptedFluxClient, storage: FakeObjectStorage
) -> None:
    storage.fail_uploads.add(THUMB_PATH)

    with pytest.raises(InternalError):
        _materialize(flux_client, storage)

    assert storage.objects == {}
    assert sorted(storage.deleted) == [IMAGE_PATH, THUMB_PATH]


def test_delete_paths_counts_failures_without_raising(
    flux_client: ScriptedFluxClient, storage: FakeObjectStorage
) -> None:
    storage.fail_deletes.add("photos/e1/b.jpg")

    result = asyncio.run(
        _materializer(flux_client, storage).delete_paths(
            ["photos/e1/a.jpg", "photos/e1/b.jpg"]
        )
    )

    assert result.deleted == 1
    assert result.failed == 1


def test_thumbnail_path_derivation() -> None:
    assert thumbnail_path_for(IMAGE_PATH) == THUMB_PATH


def test_default_storage_key_is_unique() -> None:
    first = default_storage_key()
    second = default_storage_key()

    assert first != second
    assert first.split("_", 1)[0].isdigit()


def test_uploads_and_grants_run_concurrently(
    flux_client: ScriptedFluxClient,
) -> None:
    storage = GatedObjectStorage()

    _materialize(flux_client, storage)

    assert storage.peaks == {"upload": 2, "make_public": 2}
    assert storage.public == {IMAGE_PATH, THUMB_PATH}


@pytest.mark.parametrize(
    "error",
    [Image.DecompressionBombError("too many pixels"), ValueError("bad mode")],
    ids=["decompression_bomb", "value_error"],
)
def test_thumbnail_failures_are_upstream_errors(
    flux_client: ScriptedFluxClient,
    storage: FakeObjectStorage,
    monkeypatch: pytest.MonkeyPatch,
    error: Exception,
) -> None:
    def fail(image_bytes: bytes) -> bytes:
        raise error

    monkeypatch.setattr(materializer_module, "make_thumbnail", fail)

    with pytest.raises(UpstreamError, match="not a decodable image"):
        _materialize(flux_client, storage)

    assert storage.objects == {}


def test_cancelled_materialization_removes_stored_objects(
    flux_client: ScriptedFluxClient,
) -> None:
    storage = GatedObjectStorage()

    async def run() -> None:
        storage.release = asyncio.Event()
        materializer = _materializer(flux_client, storage)
        task = asyncio.create_task(materializer.materialize(RESULT_URL, "e1"))
        while storage.in_flight < 2:
            await asyncio.sleep(0.01)

        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task
        storage.release.set()
        await materializer.drain()

    asyncio.run(run())

    assert storage.objects == {}
    assert sorted(storage.deleted) == [IMAGE_PATH, THUMB_PATH]
