"""Idempotency infrastructure settings."""

from pydantic import Field

from infrastructure.configuration.base import InfrastructureSettings


class IdempotencySettings(InfrastructureSettings):
    """Idempotency claims used to guard scheduled dispatch occurrences.

    Environment Variables:
        IDEMPOTENCY_TTL_SECONDS: How long a claimed key blocks other workers
            (default: 86400s = 24h)

    Example:
        ```python
        from infrastructure.services import get_settings

        ttl = get_settings().idempotency.IDEMPOTENCY_TTL_SECONDS
        ```
    """

    IDEMPOTENCY_TTL_SECONDS: int = Field(
        default=86400, alias="IDEMPOTENCY_TTL_SECONDS"
    )
