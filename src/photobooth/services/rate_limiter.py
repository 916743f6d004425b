"""Sliding-window rate limiting over a transactional store."""

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta
from typing import Protocol

from photobooth.domain.errors import RateLimitedError
from photobooth.domain.rate_limits import RateLimitRecord, RateLimitRule

logger = logging.getLogger(__name__)


class RateLimitStore(Protocol):
    """Key-value store offering an atomic read-modify-write per identifier."""

    def transact(
        self,
        identifier: str,
        mutate: Callable[[RateLimitRecord | None], RateLimitRecord],
    ) -> RateLimitRecord:
        """Apply ``mutate`` to the current record and commit it atomically.

        Implementations re-run ``mutate`` on a compare-and-swap conflict.
        Exceptions raised by ``mutate`` abort the transaction unchanged.
        """


def _utc_now() -> datetime:
    return datetime.now(tz=UTC)


@dataclass
class RateLimiter:
    """Records requests per identifier and rejects those over the limit."""

    store: RateLimitStore
    now: Callable[[], datetime] = field(default=_utc_now)

    def check(self, identifier: str, rule: RateLimitRule) -> None:
        """Apply a configured rule to an identifier."""
        self.check_and_record(identifier, rule.max_requests, rule.window)

    def check_and_record(
        self, identifier: str, max_requests: int, window: timedelta
    ) -> None:
        """Record a request, raising ``RateLimitedError`` if the window is full.

        Store failures fail open: they are logged and the request is allowed.
        """
        now = self.now()
        window_start = now - window

        def mutate(current: RateLimitRecord | None) -> RateLimitRecord:
            existing = current.timestamps if current else []
            recent = [ts for ts in existing if ts > window_start]
            if len(recent) >= max_requests:
                raise RateLimitedError(identifier)
            recent.append(now)
            return RateLimitRecord(
                identifier=identifier, timestamps=recent, updated_at=now
            )

        try:
            self.store.transact(identifier, mutate)
        except RateLimitedError:
            logger.info("Rate limit exceeded", extra={"identifier": identifier})
            raise
        except Exception:
            logger.warning(
                "Rate limit check failed, allowing request",
                exc_info=True,
                extra={"identifier": identifier},
            )
