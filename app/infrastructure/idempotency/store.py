"""Document store backed idempotency cache."""

import time
from typing import Any, Callable, Dict

from infrastructure.idempotency.cache import IdempotencyCache
from infrastructure.logging import get_module_logger
from infrastructure.persistence import (
    ConditionFailedError,
    DocumentNotFoundError,
    DocumentStore,
    DuplicateKeyError,
)

logger = get_module_logger()

IDEMPOTENCY_COLLECTION = "idempotency_claims"


class DocumentStoreIdempotencyCache(IdempotencyCache):
    """Idempotency claims stored as documents with an expiry timestamp.

    A claim is an insert guarded by the store's unique key constraint.
    An expired claim is taken over with a compare-and-set on its expiry,
    so two workers racing for the same stale key cannot both win.

    Args:
        store: Document store shared by every worker.
        clock: Returns the current epoch seconds (injectable for tests).
    """

    def __init__(
        self,
        store: DocumentStore,
        clock: Callable[[], float] = time.time,
    ):
        self._store = store
        self._clock = clock

    def claim(self, key: str, ttl_seconds: int) -> bool:
        now = int(self._clock())
        document = {"key": key, "claimed_at": now, "expires_at": now + ttl_seconds}
        try:
            self._store.insert(IDEMPOTENCY_COLLECTION, key, document)
            logger.debug("idempotency_key_claimed", key=key, ttl_seconds=ttl_seconds)
            return True
        except DuplicateKeyError:
            pass

        existing = self._store.get(IDEMPOTENCY_COLLECTION, key)
        if existing is None or existing.get("expires_at", 0) > now:
            logger.debug("idempotency_key_already_claimed", key=key)
            return False

        try:
            self._store.update(
                IDEMPOTENCY_COLLECTION,
                key,
                {"claimed_at": now, "expires_at": now + ttl_seconds},
                expected={"expires_at": existing["expires_at"]},
            )
        except (ConditionFailedError, DocumentNotFoundError):
            logger.debug("idempotency_key_takeover_lost", key=key)
            return False

        logger.info("idempotency_key_reclaimed", key=key)
        return True

    def release(self, key: str) -> None:
        self._store.delete(IDEMPOTENCY_COLLECTION, key)

    def purge_expired(self) -> int:
        removed = self._store.purge_expired(IDEMPOTENCY_COLLECTION, int(self._clock()))
        if removed:
            logger.info("idempotency_claims_purged", removed=removed)
        return removed

    def get_stats(self) -> Dict[str, Any]:
        return {
            "backend": type(self._store).__name__,
            "collection": IDEMPOTENCY_COLLECTION,
        }
