"""Document persistence for the notification engine.

Exposes the DocumentStore interface and its two backends:
- InMemoryDocumentStore for development, tests and single-process runs
- DynamoDBDocumentStore for shared state across instances
"""

from infrastructure.persistence.errors import (
    ConditionFailedError,
    DocumentNotFoundError,
    DuplicateKeyError,
    PersistenceError,
)
from infrastructure.persistence.store import DocumentStore
from infrastructure.persistence.memory import InMemoryDocumentStore
from infrastructure.persistence.dynamodb import DynamoDBDocumentStore

__all__ = [
    "DocumentStore",
    "InMemoryDocumentStore",
    "DynamoDBDocumentStore",
    "PersistenceError",
    "DuplicateKeyError",
    "DocumentNotFoundError",
    "ConditionFailedError",
]
