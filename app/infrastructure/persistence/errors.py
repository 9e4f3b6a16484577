"""Errors raised by document store implementations."""


class PersistenceError(Exception):
    """Base class for document store failures."""


class DuplicateKeyError(PersistenceError):
    """Raised when inserting a document whose key already exists."""

    def __init__(self, collection: str, key: str):
        super().__init__(f"Document '{key}' already exists in '{collection}'")
        self.collection = collection
        self.key = key


class DocumentNotFoundError(PersistenceError):
    """Raised when updating a document that does not exist."""

    def __init__(self, collection: str, key: str):
        super().__init__(f"Document '{key}' not found in '{collection}'")
        self.collection = collection
        self.key = key


class ConditionFailedError(PersistenceError):
    """Raised when a conditional write finds unexpected field values."""

    def __init__(self, collection: str, key: str):
        super().__init__(f"Condition failed for '{key}' in '{collection}'")
        self.collection = collection
        self.key = key
