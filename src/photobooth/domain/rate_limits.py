"""Models for sliding-window rate limiting."""

from dataclasses import dataclass, field
from datetime import datetime, timedelta


@dataclass(frozen=True)
class RateLimitRecord:
    """Request timestamps recorded for one identifier."""

    identifier: str
    timestamps: list[datetime] = field(default_factory=list)
    updated_at: datetime | None = None


@dataclass(frozen=True)
class RateLimitRule:
    """Maximum number of requests allowed inside a trailing window."""

    max_requests: int
    window: timedelta


RATE_LIMITS: dict[str, RateLimitRule] = {
    "login": RateLimitRule(max_requests=5, window=timedelta(minutes=5)),
    "transform": RateLimitRule(max_requests=30, window=timedelta(minutes=1)),
    "admin": RateLimitRule(max_requests=30, window=timedelta(minutes=1)),
}


def transform_identifier(event_id: str, client_ip: str) -> str:
    return f"transform:{event_id}:{client_ip}"


def login_identifier(client_ip: str) -> str:
    return f"login:{client_ip}"


def admin_identifier(token: str) -> str:
    return f"admin:{token[-8:]}"
