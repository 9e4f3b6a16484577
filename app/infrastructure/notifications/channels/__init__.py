"""Notification channel implementations."""

from infrastructure.notifications.channels.base import ACCEPTED, NotificationChannel
from infrastructure.notifications.channels.dry_run import DryRunChannel
from infrastructure.notifications.channels.in_app import INBOX_COLLECTION, InAppChannel

__all__ = [
    "ACCEPTED",
    "NotificationChannel",
    "DryRunChannel",
    "InAppChannel",
    "INBOX_COLLECTION",
]
