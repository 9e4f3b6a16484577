"""Feature settings __init__ - exports all feature settings."""

from infrastructure.configuration.features.notifications import (
    NotificationsFeatureSettings,
)
from infrastructure.configuration.features.platform import PlatformSettings

__all__ = [
    "NotificationsFeatureSettings",
    "PlatformSettings",
]
