"""Idempotency key builder for consistent key generation."""

import hashlib
from typing import Any


class IdempotencyKeyBuilder:
    """Build deterministic idempotency keys.

    Components are sorted by name before hashing, so keyword order never
    changes the key.

    Example:
        >>> builder = IdempotencyKeyBuilder(namespace="scheduled_notifications")
        >>> builder.build(
        ...     "dispatch",
        ...     notification_type_id="5f1c",
        ...     occurrence="2024-05-06T09:00:00+00:00",
        ...     emission_id="e-42",
        ... )
        'scheduled_notifications:dispatch:...'
    """

    def __init__(self, namespace: str):
        self.namespace = namespace

    def build(self, operation: str, **components: Any) -> str:
        """Build idempotency key from components.

        Args:
            operation: Operation type (e.g. "dispatch")
            **components: Values identifying the unit of work

        Returns:
            ``namespace:operation:<16 hex chars>``
        """
        parts = [self.namespace, operation]
        parts.extend(f"{name}={value}" for name, value in sorted(components.items()))
        digest = hashlib.sha256("|".join(str(p) for p in parts).encode()).hexdigest()
        return f"{self.namespace}:{operation}:{digest[:16]}"
