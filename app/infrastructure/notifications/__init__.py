"""Notification delivery infrastructure.

Channel providers and the timeout-bound executor the dispatch engine uses
to hand rendered messages to them.
"""

from infrastructure.notifications.channels import (
    ACCEPTED,
    DryRunChannel,
    InAppChannel,
    INBOX_COLLECTION,
    NotificationChannel,
)
from infrastructure.notifications.delivery import DeliveryExecutor
from infrastructure.notifications.models import ChannelMessage

__all__ = [
    "ACCEPTED",
    "ChannelMessage",
    "DeliveryExecutor",
    "DryRunChannel",
    "InAppChannel",
    "INBOX_COLLECTION",
    "NotificationChannel",
]
