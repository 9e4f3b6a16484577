"""In-memory document store."""

import copy
import threading
from typing import Any, Dict, List, Optional

from infrastructure.logging import get_module_logger
from infrastructure.persistence.errors import (
    ConditionFailedError,
    DocumentNotFoundError,
    DuplicateKeyError,
)
from infrastructure.persistence.store import DocumentStore

logger = get_module_logger()


class InMemoryDocumentStore(DocumentStore):
    """Process-local document store guarded by a single re-entrant lock.

    Suitable for development, tests and single-process deployments. Every
    read and write copies documents so callers never share mutable state
    with the store.
    """

    def __init__(self):
        self._collections: Dict[str, Dict[str, Dict[str, Any]]] = {}
        self._lock = threading.RLock()
        logger.info("initialized_memory_document_store")

    def _collection(self, name: str) -> Dict[str, Dict[str, Any]]:
        return self._collections.setdefault(name, {})

    def insert(self, collection: str, key: str, document: Dict[str, Any]) -> None:
        with self._lock:
            documents = self._collection(collection)
            if key in documents:
                raise DuplicateKeyError(collection, key)
            documents[key] = copy.deepcopy(document)

    def get(self, collection: str, key: str) -> Optional[Dict[str, Any]]:
        with self._lock:
            document = self._collection(collection).get(key)
            return copy.deepcopy(document) if document is not None else None

    def put(self, collection: str, key: str, document: Dict[str, Any]) -> None:
        with self._lock:
            self._collection(collection)[key] = copy.deepcopy(document)

    def update(
        self,
        collection: str,
        key: str,
        changes: Dict[str, Any],
        expected: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        with self._lock:
            documents = self._collection(collection)
            current = documents.get(key)
            if current is None:
                raise DocumentNotFoundError(collection, key)
            for field, value in (expected or {}).items():
                if current.get(field) != value:
                    raise ConditionFailedError(collection, key)
            current.update(copy.deepcopy(changes))
            return copy.deepcopy(current)

    def delete(self, collection: str, key: str) -> bool:
        with self._lock:
            return self._collection(collection).pop(key, None) is not None

    def list(
        self, collection: str, filters: Optional[Dict[str, Any]] = None
    ) -> List[Dict[str, Any]]:
        with self._lock:
            documents = list(self._collection(collection).values())
            if filters:
                documents = [
                    doc
                    for doc in documents
                    if all(doc.get(field) == value for field, value in filters.items())
                ]
            return copy.deepcopy(documents)

    def increment_if_below(
        self,
        collection: str,
        key: str,
        limit: int,
        expires_at: Optional[int] = None,
    ) -> Optional[int]:
        with self._lock:
            documents = self._collection(collection)
            document = documents.get(key, {})
            current = document.get("count", 0)
            if current >= limit:
                return None
            document["count"] = current + 1
            if expires_at is not None:
                document["expires_at"] = expires_at
            documents[key] = document
            return current + 1

    def decrement(self, collection: str, key: str) -> Optional[int]:
        with self._lock:
            document = self._collection(collection).get(key)
            if not document or document.get("count", 0) <= 0:
                return None
            document["count"] -= 1
            return document["count"]

    def purge_expired(self, collection: str, now: float) -> int:
        with self._lock:
            documents = self._collection(collection)
            expired = [
                key
                for key, doc in documents.items()
                if doc.get("expires_at") is not None and doc["expires_at"] <= now
            ]
            for key in expired:
                del documents[key]
            return len(expired)

    def clear(self, collection: str) -> int:
        with self._lock:
            documents = self._collection(collection)
            deleted = len(documents)
            documents.clear()
            return deleted
