"""Transform pipeline orchestration."""

import asyncio
import logging
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Protocol

from photobooth.domain.errors import (
    FailedPreconditionError,
    InternalError,
    NotFoundError,
    PipelineError,
    PipelineTimeoutError,
    ResourceExhaustedError,
)
from photobooth.domain.events import EventRecord
from photobooth.domain.rate_limits import RATE_LIMITS, transform_identifier
from photobooth.domain.transform import TransformRequest, ValidatedTransform
from photobooth.services.materializer import ResultMaterializer
from photobooth.services.photos import PhotoRepository
from photobooth.services.polling import JobPoller
from photobooth.services.rate_limiter import RateLimiter
from photobooth.services.submission import JobSubmitter
from photobooth.services.validation import validate_transform_request

logger = logging.getLogger(__name__)


class EventRepository(Protocol):
    """Read access to kiosk events."""

    def get_event(self, event_id: str) -> EventRecord | None:
        """Return an event by id, if present."""


@dataclass
class TransformPipeline:
    """Runs one photo through validation, generation and publication.

    Stages run in this order: validation, the transform rate limit, the
    event lookup, the event photo quota, submission, polling,
    materialization and the photo record write.
    """

    style_prompts: Mapping[str, str]
    rate_limiter: RateLimiter
    event_repository: EventRepository
    photo_repository: PhotoRepository
    submitter: JobSubmitter
    poller: JobPoller
    materializer: ResultMaterializer
    poll_timeout_seconds: float = 60.0
    invocation_timeout_seconds: float = 120.0

    async def transform(self, request: TransformRequest, client_ip: str) -> str:
        """Return the public URL of the stylized image."""
        try:
            validated = validate_transform_request(request, self.style_prompts)
            async with asyncio.timeout(self.invocation_timeout_seconds):
                return await self._run(validated, client_ip)
        except PipelineError as exc:
            logger.warning(
                "Transform failed",
                extra={
                    "event_id": request.event_id,
                    "style_id": request.style_id,
                    "error_kind": exc.kind.value,
                    "reason": exc.message,
                },
            )
            raise
        except TimeoutError as exc:
            logger.warning(
                "Transform exceeded invocation budget",
                extra={"event_id": request.event_id},
            )
            raise PipelineTimeoutError("Image processing timed out") from exc
        except Exception as exc:
            logger.exception(
                "Transform error",
                extra={"event_id": request.event_id, "style_id": request.style_id},
            )
            raise InternalError("Failed to process image. Please try again.") from exc

    async def _run(self, validated: ValidatedTransform, client_ip: str) -> str:
        event_id = validated.event_id
        self.rate_limiter.check(
            transform_identifier(event_id, client_ip), RATE_LIMITS["transform"]
        )
        self._check_event(event_id)

        logger.info(
            "Processing image",
            extra={"event_id": event_id, "style_id": validated.style_id},
        )
        job = await self.submitter.submit(validated.prompt, validated.image)
        deadline = self.poller.clock() + self.poll_timeout_seconds
        result_url = await self.poller.poll_until_ready(job.polling_url, deadline)
        asset = await self.materializer.materialize(result_url, event_id)

        try:
            photo = self.photo_repository.create_photo(
                event_id=event_id, style_id=validated.style_id, asset=asset
            )
        except Exception:
            await self.materializer.discard(asset)
            raise
        logger.info(
            "Photo stored",
            extra={"photo_id": photo.id, "storage_path": asset.storage_path},
        )
        return asset.image_url

    def _check_event(self, event_id: str) -> None:
        event = self.event_repository.get_event(event_id)
        if event is None:
            raise NotFoundError("Event not found")
        if not event.is_active:
            raise FailedPreconditionError("Event is not active")
        if event.max_photos is not None:
            count = self.photo_repository.count_for_event(event_id)
            if count >= event.max_photos:
                raise ResourceExhaustedError("Event photo limit reached")
