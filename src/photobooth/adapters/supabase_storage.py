"""Supabase Storage adapter for published photos."""

import asyncio
from dataclasses import dataclass, field

from supabase import Client

from photobooth.services.materializer import ObjectStorage


@dataclass
class SupabaseObjectStorage(ObjectStorage):
    """Object storage backed by a Supabase Storage bucket.

    Supabase grants public reads per bucket, so ``make_public`` marks the
    bucket public once and then only checks that flag.
    """

    client: Client
    bucket: str
    _bucket_public: bool = field(default=False, init=False, repr=False)

    async def upload(
        self, path: str, data: bytes, content_type: str, cache_max_age: int
    ) -> None:
        """Upload an object without overwriting an existing one."""
        await asyncio.to_thread(
            self.client.storage.from_(self.bucket).upload,
            path,
            data,
            {
                "content-type": content_type,
                "cache-control": str(cache_max_age),
                "upsert": "false",
            },
        )

    async def make_public(self, path: str) -> None:
        """Ensure objects in the bucket are publicly readable."""
        if self._bucket_public:
            return
        await asyncio.to_thread(
            self.client.storage.update_bucket, self.bucket, {"public": True}
        )
        self._bucket_public = True

    def public_url(self, path: str) -> str:
        """Return the public URL for an object."""
        return self.client.storage.from_(self.bucket).get_public_url(path)

    async def delete(self, path: str) -> None:
        """Delete an object."""
        await asyncio.to_thread(self.client.storage.from_(self.bucket).remove, [path])
