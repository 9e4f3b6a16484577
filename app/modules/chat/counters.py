"""Per-day chat message counters."""

import datetime as dt
import time
from typing import Callable, Optional

from infrastructure.logging import get_module_logger
from infrastructure.persistence import DocumentStore

logger = get_module_logger()

COUNTERS_COLLECTION = "chat_daily_counters"

# Days a counter outlives its own day before purge_expired drops it
COUNTER_RETENTION_DAYS = 2


def counter_key(from_role: str, to_role: str, day: dt.date) -> str:
    """``from_role:to_role:YYYY-MM-DD``, shared by every sender of the pair."""
    return f"{from_role}:{to_role}:{day.isoformat()}"


def sender_counter_key(from_user_id: str, day: dt.date) -> str:
    """``sender:user:YYYY-MM-DD``, counting one user's chats across every pair."""
    return f"sender:{from_user_id}:{day.isoformat()}"


def counter_expiry(day: dt.date) -> int:
    """Epoch seconds after which the counters of ``day`` can be dropped."""
    midnight = dt.datetime.combine(day, dt.time.min, tzinfo=dt.timezone.utc)
    return int((midnight + dt.timedelta(days=COUNTER_RETENTION_DAYS)).timestamp())


class DailyMessageCounter:
    """Counts allowed chat initiations per day.

    Consumption is an atomic increment-and-compare in the document store,
    so concurrent requests can never push a counter past its limit.
    """

    def __init__(
        self, store: DocumentStore, clock: Callable[[], float] = time.time
    ):
        self._store = store
        self._clock = clock

    def current(self, key: str) -> int:
        document = self._store.get(COUNTERS_COLLECTION, key)
        return int(document.get("count", 0)) if document else 0

    def consume(
        self, key: str, limit: int, day: Optional[dt.date] = None
    ) -> Optional[int]:
        """Take one unit below ``limit``.

        Args:
            key: Counter key.
            limit: Maximum value of the counter.
            day: Day the counter belongs to, sets when it can be purged.

        Returns:
            The new count, or None when the limit was already reached.
        """
        expires_at = counter_expiry(day) if day else None
        count = self._store.increment_if_below(
            COUNTERS_COLLECTION, key, limit, expires_at=expires_at
        )
        if count is None:
            logger.info("chat_daily_limit_reached", key=key, limit=limit)
        return count

    def release(self, key: str) -> None:
        """Give back a unit taken by ``consume`` for a request that was denied later."""
        self._store.decrement(COUNTERS_COLLECTION, key)

    def purge_expired(self) -> int:
        removed = self._store.purge_expired(COUNTERS_COLLECTION, int(self._clock()))
        if removed:
            logger.info("chat_counters_purged", removed=removed)
        return removed
