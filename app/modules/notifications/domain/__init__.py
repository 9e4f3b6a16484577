"""Notification engine domain: models, errors and schedule arithmetic."""

from modules.notifications.domain.errors import (
    DeliveryRecordNotFound,
    FieldError,
    NotificationError,
    NotificationTypeNotFound,
    RecordAlreadyResolved,
    RegistryUnavailable,
    UnknownEvent,
    ValidationError,
)
from modules.notifications.domain.models import (
    Channel,
    ChannelToggles,
    DeliveryRecord,
    DeliveryStatus,
    EventDescriptor,
    ImmediateSchedule,
    NotificationType,
    NotificationTypeDraft,
    Priority,
    ScheduledSchedule,
    TemplateVariable,
    Weekday,
    is_deferred,
)
from modules.notifications.domain.schedule import next_occurrence

__all__ = [
    "Channel",
    "ChannelToggles",
    "DeliveryRecord",
    "DeliveryRecordNotFound",
    "DeliveryStatus",
    "EventDescriptor",
    "FieldError",
    "ImmediateSchedule",
    "NotificationError",
    "NotificationType",
    "NotificationTypeDraft",
    "NotificationTypeNotFound",
    "Priority",
    "RecordAlreadyResolved",
    "RegistryUnavailable",
    "ScheduledSchedule",
    "TemplateVariable",
    "UnknownEvent",
    "ValidationError",
    "Weekday",
    "is_deferred",
    "next_occurrence",
]
