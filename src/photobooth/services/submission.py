"""Job submission to the image-generation service."""

import logging
import re
from dataclasses import dataclass
from typing import Protocol

from pydantic import ValidationError

from photobooth.domain.errors import UpstreamError
from photobooth.domain.jobs import ExternalJob, SubmitResponse, UpstreamReply

logger = logging.getLogger(__name__)

_DATA_URI_PREFIX = re.compile(r"^data:image/\w+;base64,")


class GenerationClient(Protocol):
    """Interface for creating jobs on the generation service."""

    async def create_job(self, payload: dict[str, object]) -> UpstreamReply:
        """POST a job request and return the raw reply."""


@dataclass
class JobSubmitter:
    """Issues the single transform request and returns its poll handle."""

    client: GenerationClient
    aspect_ratio: str = "4:3"
    output_format: str = "jpeg"
    safety_tolerance: int = 2

    async def submit(self, prompt: str, image: str) -> ExternalJob:
        """Submit an image with a style prompt. Never retried here."""
        payload: dict[str, object] = {
            "prompt": prompt,
            "input_image": strip_data_uri(image),
            "output_format": self.output_format,
            "safety_tolerance": self.safety_tolerance,
            "aspect_ratio": self.aspect_ratio,
        }
        reply = await self.client.create_job(payload)
        if not reply.ok:
            logger.error(
                "Generation service rejected job",
                extra={"upstream_status": reply.status_code},
            )
            raise UpstreamError(
                f"Generation service error: {reply.status_code}",
                upstream_status=reply.status_code,
                upstream_body=reply.text,
            )
        try:
            body = SubmitResponse.model_validate_json(reply.content)
        except ValidationError as exc:
            raise UpstreamError(
                "Generation service returned a malformed submit response",
                upstream_status=reply.status_code,
                upstream_body=reply.text,
            ) from exc
        logger.info("Submitted generation job", extra={"job_id": body.id})
        return ExternalJob(id=body.id, polling_url=body.polling_url)


def strip_data_uri(image: str) -> str:
    """Return the bare base64 payload of a data URI."""
    return _DATA_URI_PREFIX.sub("", image, count=1)
