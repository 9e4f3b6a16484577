"""Operation status enumeration."""

from enum import Enum


class OperationStatus(Enum):
    """Outcome classes for channel and integration operations.

    Attributes:
        SUCCESS: Operation completed successfully
        TRANSIENT_ERROR: Might succeed later (timeout, provider throttling)
        PERMANENT_ERROR: Will not succeed on retry (bad recipient, no channel)
    """

    SUCCESS = "success"
    TRANSIENT_ERROR = "transient_error"
    PERMANENT_ERROR = "permanent_error"
