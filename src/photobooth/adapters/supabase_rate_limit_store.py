"""Supabase-backed rate-limit store with optimistic concurrency."""

import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime

from postgrest.exceptions import APIError
from supabase import Client

from photobooth.domain.rate_limits import RateLimitRecord
from photobooth.services.rate_limiter import RateLimitStore

logger = logging.getLogger(__name__)

_UNIQUE_VIOLATION = "23505"


class RateLimitConflictError(RuntimeError):
    """Raised when a record keeps changing under concurrent writers."""


@dataclass
class SupabaseRateLimitStore(RateLimitStore):
    """Compare-and-swap transactions on the ``rate_limits`` table.

    Every row carries a ``version`` counter. A write only succeeds when the
    version it read is still current; otherwise the read-modify-write is
    repeated with fresh data.
    """

    client: Client
    max_attempts: int = 5

    def transact(
        self,
        identifier: str,
        mutate: Callable[[RateLimitRecord | None], RateLimitRecord],
    ) -> RateLimitRecord:
        """Apply ``mutate`` atomically, retrying on version conflicts."""
        for attempt in range(1, self.max_attempts + 1):
            row = self._read(identifier)
            current = _to_record(row) if row else None
            updated = mutate(current)
            payload = {
                "timestamps": [ts.isoformat() for ts in updated.timestamps],
                "updated_at": (
                    updated.updated_at.isoformat() if updated.updated_at else None
                ),
            }
            if row is None:
                if self._insert(identifier, payload):
                    return updated
            elif self._compare_and_swap(identifier, int(row["version"]), payload):
                return updated
            logger.debug(
                "Rate limit write conflict",
                extra={"identifier": identifier, "attempt": attempt},
            )
        raise RateLimitConflictError(
            f"Rate limit record {identifier} changed {self.max_attempts} times"
        )

    def _read(self, identifier: str) -> dict[str, object] | None:
        response = (
            self.client.table("rate_limits")
            .select("identifier, timestamps, updated_at, version")
            .eq("identifier", identifier)
            .limit(1)
            .execute()
        )
        return response.data[0] if response.data else None

    def _insert(self, identifier: str, payload: dict[str, object]) -> bool:
        try:
            self.client.table("rate_limits").insert(
                {"identifier": identifier, "version": 1, **payload}
            ).execute()
        except APIError as exc:
            if exc.code == _UNIQUE_VIOLATION:
                return False
            raise
        return True

    def _compare_and_swap(
        self, identifier: str, version: int, payload: dict[str, object]
    ) -> bool:
        response = (
            self.client.table("rate_limits")
            .update({"version": version + 1, **payload})
            .eq("identifier", identifier)
            .eq("version", version)
            .execute()
        )
        return bool(response.data)


def _to_record(row: dict[str, object]) -> RateLimitRecord:
    raw_timestamps = row.get("timestamps") or []
    updated_at = row.get("updated_at")
    return RateLimitRecord(
        identifier=str(row["identifier"]),
        timestamps=[datetime.fromisoformat(str(ts)) for ts in raw_timestamps],
        updated_at=datetime.fromisoformat(updated_at)
        if isinstance(updated_at, str)
        else None,
    )
