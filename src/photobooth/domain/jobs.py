"""Models for jobs on the external generation service."""

import json
from dataclasses import dataclass
from enum import StrEnum

from pydantic import BaseModel


class JobStatus(StrEnum):
    """Status values reported by the generation service."""

    PENDING = "Pending"
    READY = "Ready"
    ERROR = "Error"
    MODERATED_ON_REQUEST = "Request Moderated"
    MODERATED_ON_CONTENT = "Content Moderated"

    @property
    def is_terminal(self) -> bool:
        return self is not JobStatus.PENDING


FAILED_STATUSES = frozenset(
    {
        JobStatus.ERROR,
        JobStatus.MODERATED_ON_REQUEST,
        JobStatus.MODERATED_ON_CONTENT,
    }
)


@dataclass(frozen=True)
class ExternalJob:
    """A submitted job and the handle used to poll it."""

    id: str
    polling_url: str


@dataclass(frozen=True)
class UpstreamReply:
    """Raw HTTP reply from the generation service or its delivery host."""

    status_code: int
    content: bytes = b""

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300

    @property
    def is_transient(self) -> bool:
        """Return true for overload responses worth waiting out."""
        return self.status_code == 429 or self.status_code >= 500

    @property
    def text(self) -> str:
        return self.content.decode("utf-8", errors="replace")

    def json(self) -> object:
        return json.loads(self.content)


class SubmitResponse(BaseModel):
    """Success body of a job submission."""

    id: str
    polling_url: str


class PollResult(BaseModel):
    sample: str | None = None


class PollResponse(BaseModel):
    """Body of a status query."""

    id: str | None = None
    status: str
    result: PollResult | None = None
