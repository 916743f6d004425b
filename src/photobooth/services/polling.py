"""Bounded polling of external generation jobs."""

import asyncio
import logging
import time
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from typing import Protocol

from pydantic import ValidationError

from photobooth.domain.errors import (
    PipelineTimeoutError,
    ProcessingFailedError,
    UpstreamError,
)
from photobooth.domain.jobs import (
    FAILED_STATUSES,
    JobStatus,
    PollResponse,
    UpstreamReply,
)

logger = logging.getLogger(__name__)


class JobStatusClient(Protocol):
    """Interface for querying a job's poll handle."""

    async def get_status(self, polling_url: str) -> UpstreamReply:
        """GET the poll handle and return the raw reply."""


@dataclass
class JobPoller:
    """Blocking state machine that waits for a job to reach a terminal status.

    ``clock`` returns monotonic seconds and ``sleep`` suspends the caller;
    both are injected so tests can drive the loop with a fake clock.
    """

    client: JobStatusClient
    interval_seconds: float = 1.0
    backoff_seconds: float = 2.0
    clock: Callable[[], float] = field(default=time.monotonic)
    sleep: Callable[[float], Awaitable[None]] = field(default=asyncio.sleep)

    async def poll_until_ready(self, polling_url: str, deadline: float) -> str:
        """Return the result URL once the job is ready.

        Raises ``ProcessingFailedError`` for failure and moderation verdicts,
        ``UpstreamError`` for non-transient errors or protocol violations and
        ``PipelineTimeoutError`` once ``deadline`` passes.
        """
        attempts = 0
        while self.clock() < deadline:
            attempts += 1
            try:
                reply = await self.client.get_status(polling_url)
            except UpstreamError as exc:
                if exc.upstream_status is not None:
                    raise
                logger.warning("Poll request failed, backing off", exc_info=True)
                await self._wait(self.backoff_seconds, deadline)
                continue

            if reply.is_transient:
                logger.warning(
                    "Transient poll error, backing off",
                    extra={"upstream_status": reply.status_code},
                )
                await self._wait(self.backoff_seconds, deadline)
                continue
            if not reply.ok:
                raise UpstreamError(
                    f"Failed to check result: {reply.status_code}",
                    upstream_status=reply.status_code,
                    upstream_body=reply.text,
                )

            body, status = _decode(reply)
            if status is JobStatus.PENDING:
                await self._wait(self.interval_seconds, deadline)
                continue
            if status in FAILED_STATUSES:
                logger.warning(
                    "Generation job failed",
                    extra={"job_status": status.value, "attempts": attempts},
                )
                raise ProcessingFailedError(status.value)
            sample = body.result.sample if body.result else None
            if not sample:
                raise UpstreamError(
                    "Job reported Ready without a result",
                    upstream_status=reply.status_code,
                    upstream_body=reply.text,
                )
            logger.info("Generation job ready", extra={"attempts": attempts})
            return sample

        raise PipelineTimeoutError("Image processing timed out")

    async def _wait(self, seconds: float, deadline: float) -> None:
        remaining = deadline - self.clock()
        await self.sleep(max(0.0, min(seconds, remaining)))


def _decode(reply: UpstreamReply) -> tuple[PollResponse, JobStatus]:
    try:
        body = PollResponse.model_validate_json(reply.content)
        return body, JobStatus(body.status)
    except (ValidationError, ValueError) as exc:
        raise UpstreamError(
            "Generation service returned an unexpected poll response",
            upstream_status=reply.status_code,
            upstream_body=reply.text,
        ) from exc
