"""Errors for the notifications module."""

from dataclasses import dataclass
from typing import Dict, List


@dataclass(frozen=True)
class FieldError:
    """One violated field of a submitted configuration."""

    field: str
    message: str

    def to_dict(self) -> Dict[str, str]:
        return {"field": self.field, "message": self.message}


class NotificationError(Exception):
    """Base class for notification engine errors."""


class ValidationError(NotificationError):
    """A notification configuration violates one or more field rules.

    Attributes:
        errors: Every violated field, not only the first one found.
    """

    def __init__(self, errors: List[FieldError]):
        self.errors = list(errors)
        fields = ", ".join(sorted({e.field for e in self.errors}))
        super().__init__(f"Invalid fields: {fields}")

    def to_dict(self) -> Dict[str, List[Dict[str, str]]]:
        return {"errors": [e.to_dict() for e in self.errors]}


class UnknownEvent(NotificationError):
    """An event key was emitted that the registry does not know."""

    def __init__(self, event_key: str):
        super().__init__(f"Unknown event type: {event_key}")
        self.event_key = event_key


class RegistryUnavailable(NotificationError):
    """The event source could not enumerate candidate events."""


class NotificationTypeNotFound(NotificationError):
    def __init__(self, notification_type_id: str):
        super().__init__(f"Notification type not found: {notification_type_id}")
        self.notification_type_id = notification_type_id


class DeliveryRecordNotFound(NotificationError):
    def __init__(self, record_id: str):
        super().__init__(f"Delivery record not found: {record_id}")
        self.record_id = record_id


class RecordAlreadyResolved(NotificationError):
    """A delivery record already left the pending state."""

    def __init__(self, record_id: str, status: str):
        super().__init__(f"Delivery record {record_id} is already {status}")
        self.record_id = record_id
        self.status = status
