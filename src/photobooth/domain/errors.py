"""Error taxonomy shared by the transform pipeline and its callers."""

from enum import StrEnum


class ErrorKind(StrEnum):
    """Closed set of failure kinds a pipeline stage may raise."""

    INVALID_ARGUMENT = "invalid_argument"
    NOT_FOUND = "not_found"
    FAILED_PRECONDITION = "failed_precondition"
    RESOURCE_EXHAUSTED = "resource_exhausted"
    UPSTREAM_ERROR = "upstream_error"
    PROCESSING_FAILED = "processing_failed"
    TIMEOUT = "timeout"
    INTERNAL = "internal"


RETRYABLE_KINDS = frozenset(
    {ErrorKind.UPSTREAM_ERROR, ErrorKind.TIMEOUT, ErrorKind.INTERNAL}
)


class PipelineError(Exception):
    """Base class for every typed pipeline failure."""

    kind: ErrorKind = ErrorKind.INTERNAL

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    @property
    def retryable(self) -> bool:
        """Return true when the caller wrapper may re-run the pipeline."""
        return self.kind in RETRYABLE_KINDS

    def context(self) -> dict[str, object]:
        """Return structured context attached to this failure kind."""
        return {}

    def to_payload(self) -> dict[str, object]:
        """Serialize the error for an HTTP response body."""
        return {"code": self.kind.value, "message": self.message, **self.context()}


class InvalidArgumentError(PipelineError):
    kind = ErrorKind.INVALID_ARGUMENT


class NotFoundError(PipelineError):
    kind = ErrorKind.NOT_FOUND


class FailedPreconditionError(PipelineError):
    kind = ErrorKind.FAILED_PRECONDITION


class ResourceExhaustedError(PipelineError):
    kind = ErrorKind.RESOURCE_EXHAUSTED


class RateLimitedError(ResourceExhaustedError):
    """Raised when a sliding-window rate limit is already full."""

    def __init__(self, identifier: str) -> None:
        super().__init__("Too many requests. Please try again later.")
        self.identifier = identifier


class UpstreamError(PipelineError):
    """The generation service answered non-2xx or with a malformed body.

    ``upstream_status`` is ``None`` when the service could not be reached at all.
    """

    kind = ErrorKind.UPSTREAM_ERROR

    def __init__(
        self,
        message: str,
        upstream_status: int | None = None,
        upstream_body: str | None = None,
    ) -> None:
        super().__init__(message)
        self.upstream_status = upstream_status
        self.upstream_body = upstream_body

    def context(self) -> dict[str, object]:
        return {"upstream_status": self.upstream_status}


class ProcessingFailedError(PipelineError):
    """The external job reached a terminal failure or moderation verdict."""

    kind = ErrorKind.PROCESSING_FAILED

    def __init__(self, job_status: str) -> None:
        super().__init__(f"Processing failed: {job_status}")
        self.job_status = job_status

    def context(self) -> dict[str, object]:
        return {"status": self.job_status}


class PipelineTimeoutError(PipelineError):
    kind = ErrorKind.TIMEOUT


class InternalError(PipelineError):
    kind = ErrorKind.INTERNAL


_ERRORS_BY_KIND: dict[ErrorKind, type[PipelineError]] = {
    ErrorKind.INVALID_ARGUMENT: InvalidArgumentError,
    ErrorKind.NOT_FOUND: NotFoundError,
    ErrorKind.FAILED_PRECONDITION: FailedPreconditionError,
    ErrorKind.RESOURCE_EXHAUSTED: ResourceExhaustedError,
    ErrorKind.TIMEOUT: PipelineTimeoutError,
    ErrorKind.INTERNAL: InternalError,
}


def error_from_payload(payload: dict[str, object]) -> PipelineError:
    """Rebuild a typed error from the JSON body produced by ``to_payload``."""
    raw_code = str(payload.get("code", ""))
    message = str(payload.get("message") or "Something went wrong.")
    try:
        kind = ErrorKind(raw_code)
    except ValueError:
        return InternalError(message)
    if kind is ErrorKind.PROCESSING_FAILED:
        return ProcessingFailedError(str(payload.get("status", "Error")))
    if kind is ErrorKind.UPSTREAM_ERROR:
        status = payload.get("upstream_status")
        return UpstreamError(
            message, upstream_status=status if isinstance(status, int) else None
        )
    return _ERRORS_BY_KIND[kind](message)
