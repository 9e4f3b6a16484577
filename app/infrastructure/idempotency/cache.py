"""Idempotency cache abstract base class."""

from abc import ABC, abstractmethod
from typing import Any, Dict


class IdempotencyCache(ABC):
    """Abstract base class for idempotency claim implementations.

    A claim marks a unit of work (for example one scheduled notification
    occurrence) as owned by the caller for ``ttl_seconds``. Implementations
    must make ``claim`` atomic across every worker sharing the backend.
    """

    @abstractmethod
    def claim(self, key: str, ttl_seconds: int) -> bool:
        """Claim an idempotency key.

        Args:
            key: Idempotency key.
            ttl_seconds: How long the claim blocks other callers.

        Returns:
            True if the caller now owns the key, False if another caller
            holds an unexpired claim.
        """
        pass

    @abstractmethod
    def release(self, key: str) -> None:
        """Drop a claim so the work can be retried immediately."""
        pass

    @abstractmethod
    def purge_expired(self) -> int:
        """Drop expired claims. Returns how many were removed."""
        pass

    @abstractmethod
    def get_stats(self) -> Dict[str, Any]:
        """Get cache statistics.

        Returns:
            Dict with cache statistics (implementation-specific).
        """
        pass
