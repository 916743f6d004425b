"""Kiosk-side client for the transform endpoint with bounded retries."""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field

import httpx

from photobooth.domain.errors import (
    InternalError,
    InvalidArgumentError,
    PipelineError,
    PipelineTimeoutError,
    ResourceExhaustedError,
    UpstreamError,
    error_from_payload,
)

logger = logging.getLogger(__name__)

MAX_RETRIES = 2
RETRY_DELAY_SECONDS = 2.0


@dataclass
class HttpxBoothClient:
    """Calls ``POST /transform`` and retries transient failures.

    Only ``timeout``, ``upstream_error`` and ``internal`` failures are
    retried, sleeping ``retry_delay_seconds * attempt`` between tries.
    Every other failure is raised on first sight.
    """

    base_url: str
    http_client: httpx.AsyncClient
    max_retries: int = MAX_RETRIES
    retry_delay_seconds: float = RETRY_DELAY_SECONDS
    request_timeout: float = 130.0
    sleep: Callable[[float], Awaitable[None]] = field(default=asyncio.sleep)

    @classmethod
    def create(cls, base_url: str) -> "HttpxBoothClient":
        """Create a booth client with a managed httpx session."""
        return cls(base_url=base_url, http_client=httpx.AsyncClient())

    async def transform_image(self, image: str, style_id: str, event_id: str) -> str:
        """Return the public URL of the stylized photo."""
        last_error: PipelineError | None = None
        for attempt in range(self.max_retries + 1):
            try:
                return await self._transform_once(image, style_id, event_id)
            except PipelineError as exc:
                if not exc.retryable:
                    raise
                last_error = exc
            if attempt < self.max_retries:
                delay = self.retry_delay_seconds * (attempt + 1)
                logger.info(
                    "Transform attempt failed, retrying",
                    extra={"attempt": attempt + 1, "delay_seconds": delay},
                )
                await self.sleep(delay)
        raise last_error or InternalError(
            "Processing failed after multiple attempts. Please try again."
        )

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.http_client.aclose()

    async def _transform_once(self, image: str, style_id: str, event_id: str) -> str:
        try:
            response = await self.http_client.post(
                f"{self.base_url}/transform",
                json={"image": image, "styleId": style_id, "eventId": event_id},
                timeout=self.request_timeout,
            )
        except httpx.TransportError as exc:
            raise UpstreamError(
                "Service temporarily unavailable. Please try again."
            ) from exc
        if response.is_success:
            return _image_url_from_response(response)
        raise _error_from_response(response)


def _image_url_from_response(response: httpx.Response) -> str:
    try:
        image_url = response.json()["imageUrl"]
    except (ValueError, KeyError, TypeError):
        image_url = None
    if not isinstance(image_url, str) or not image_url:
        raise UpstreamError(
            "Malformed transform response",
            upstream_status=response.status_code,
            upstream_body=response.text,
        )
    return image_url


def _error_from_response(response: httpx.Response) -> PipelineError:
    try:
        body = response.json()
    except ValueError:
        body = None
    if isinstance(body, dict) and isinstance(body.get("error"), dict):
        return error_from_payload(body["error"])
    if response.status_code == 504:
        return PipelineTimeoutError("Processing took too long. Please try again.")
    if response.status_code == 429:
        return ResourceExhaustedError("Too many requests. Please try again later.")
    if response.is_client_error:
        return InvalidArgumentError(f"Request rejected: {response.status_code}")
    return UpstreamError(
        f"Unexpected response: {response.status_code}",
        upstream_status=response.status_code,
        upstream_body=response.text,
    )
