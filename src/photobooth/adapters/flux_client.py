"""BFL FLUX API client for asynchronous image generation."""

from dataclasses import dataclass

import httpx

from photobooth.domain.errors import UpstreamError
from photobooth.domain.jobs import UpstreamReply
from photobooth.services.materializer import AssetDownloader
from photobooth.services.polling import JobStatusClient
from photobooth.services.submission import GenerationClient


@dataclass
class HttpxFluxClient(GenerationClient, JobStatusClient, AssetDownloader):
    """HTTPX-backed client for job submission, polling and result download."""

    api_key: str
    base_url: str
    model: str
    http_client: httpx.AsyncClient

    @classmethod
    def create(cls, api_key: str, base_url: str, model: str) -> "HttpxFluxClient":
        """Create a FLUX client with a managed httpx session."""
        return cls(
            api_key=api_key,
            base_url=base_url,
            model=model,
            http_client=httpx.AsyncClient(),
        )

    async def create_job(self, payload: dict[str, object]) -> UpstreamReply:
        """Submit a generation job."""
        url = f"{self.base_url}/{self.model}"
        return await self._send("POST", url, json=payload, timeout=30)

    async def get_status(self, polling_url: str) -> UpstreamReply:
        """Query a job's polling URL."""
        return await self._send("GET", polling_url, timeout=10)

    async def download(self, url: str) -> UpstreamReply:
        """Fetch a generated asset from its signed delivery URL."""
        try:
            response = await self.http_client.get(url, timeout=30)
        except httpx.TransportError as exc:
            raise UpstreamError(f"Result download failed: {exc}") from exc
        return UpstreamReply(status_code=response.status_code, content=response.content)

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.http_client.aclose()

    async def _send(
        self,
        method: str,
        url: str,
        json: dict[str, object] | None = None,
        timeout: float = 10,
    ) -> UpstreamReply:
        try:
            response = await self.http_client.request(
                method,
                url,
                headers={"x-key": self.api_key},
                json=json,
                timeout=timeout,
            )
        except httpx.TransportError as exc:
            raise UpstreamError(f"Generation service unreachable: {exc}") from exc
        return UpstreamReply(status_code=response.status_code, content=response.content)
