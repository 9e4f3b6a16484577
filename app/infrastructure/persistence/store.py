"""Document store abstract base class."""

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional


class DocumentStore(ABC):
    """Abstract key/document store shared by every engine component.

    Documents are JSON-compatible dicts grouped into named collections and
    addressed by a string key. Implementations must make ``insert``,
    ``update`` with ``expected`` and ``increment_if_below`` atomic with
    respect to concurrent callers, across processes where the backend is
    shared (DynamoDB).
    """

    @abstractmethod
    def insert(self, collection: str, key: str, document: Dict[str, Any]) -> None:
        """Insert a new document.

        Raises:
            DuplicateKeyError: If the key already exists in the collection.
        """
        pass

    @abstractmethod
    def get(self, collection: str, key: str) -> Optional[Dict[str, Any]]:
        """Return the document or None if it does not exist."""
        pass

    @abstractmethod
    def put(self, collection: str, key: str, document: Dict[str, Any]) -> None:
        """Create or replace a document unconditionally."""
        pass

    @abstractmethod
    def update(
        self,
        collection: str,
        key: str,
        changes: Dict[str, Any],
        expected: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        """Apply top-level field changes, optionally as a compare-and-set.

        Args:
            collection: Collection name.
            key: Document key.
            changes: Fields to set.
            expected: Field values the stored document must hold for the
                write to happen.

        Returns:
            The updated document.

        Raises:
            DocumentNotFoundError: If the document does not exist.
            ConditionFailedError: If any expected value does not match.
        """
        pass

    @abstractmethod
    def delete(self, collection: str, key: str) -> bool:
        """Delete a document. Returns True when something was deleted."""
        pass

    @abstractmethod
    def list(
        self, collection: str, filters: Optional[Dict[str, Any]] = None
    ) -> List[Dict[str, Any]]:
        """List documents, optionally keeping only exact field matches."""
        pass

    @abstractmethod
    def increment_if_below(
        self,
        collection: str,
        key: str,
        limit: int,
        expires_at: Optional[int] = None,
    ) -> Optional[int]:
        """Atomically increment the ``count`` of a counter document.

        The counter starts at zero when missing. The increment only happens
        while the current value is below ``limit``.

        Args:
            collection: Collection name.
            key: Counter key.
            limit: Exclusive upper bound for the value before incrementing.
            expires_at: Epoch seconds stored as the counter's ``expires_at``
                so ``purge_expired`` can drop it later.

        Returns:
            The new value, or None when the limit was already reached.
        """
        pass

    @abstractmethod
    def decrement(self, collection: str, key: str) -> Optional[int]:
        """Atomically give back one unit of a counter, never going below zero.

        Returns:
            The new value, or None when the counter was missing or at zero.
        """
        pass

    @abstractmethod
    def purge_expired(self, collection: str, now: float) -> int:
        """Delete documents whose ``expires_at`` is at or before ``now``.

        Documents without ``expires_at`` are kept.

        Returns:
            Number of deleted documents.
        """
        pass

    @abstractmethod
    def clear(self, collection: str) -> int:
        """Delete every document of a collection.

        Returns:
            Number of deleted documents.
        """
        pass
