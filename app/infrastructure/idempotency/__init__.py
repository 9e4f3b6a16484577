"""Infrastructure idempotency claims.

Guards units of work that several workers may attempt concurrently, such
as releasing one scheduled notification occurrence.

Usage:

    from infrastructure.idempotency import IdempotencyKeyBuilder

    key = IdempotencyKeyBuilder("scheduled_notifications").build(
        "dispatch", notification_type_id=type_id, occurrence=occurrence
    )
    if cache.claim(key, ttl_seconds=86400):
        deliver()
"""

from infrastructure.idempotency.cache import IdempotencyCache
from infrastructure.idempotency.key_builder import IdempotencyKeyBuilder
from infrastructure.idempotency.store import DocumentStoreIdempotencyCache

__all__ = [
    "IdempotencyCache",
    "IdempotencyKeyBuilder",
    "DocumentStoreIdempotencyCache",
]
