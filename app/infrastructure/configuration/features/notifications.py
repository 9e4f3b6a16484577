"""Notification feature settings."""

import pytz
from pydantic import Field, field_validator

from infrastructure.configuration.base import FeatureSettings


class NotificationsFeatureSettings(FeatureSettings):
    """Notification dispatch configuration.

    Environment Variables:
        NOTIFICATIONS_CHANNEL_TIMEOUT_SECONDS: Upper bound for a single channel
            delivery before the record is marked failed (default: 10s)
        NOTIFICATIONS_DELIVERY_MAX_WORKERS: Thread pool size used for channel
            delivery (default: 8)
        NOTIFICATIONS_SCHEDULE_TIMEZONE: Time zone in which schedule times,
            days and dates are interpreted (default: UTC)

    Example:
        ```python
        from infrastructure.services import get_settings

        timeout = get_settings().notifications.channel_timeout_seconds
        ```
    """

    channel_timeout_seconds: float = Field(
        default=10.0, alias="NOTIFICATIONS_CHANNEL_TIMEOUT_SECONDS", gt=0
    )
    delivery_max_workers: int = Field(
        default=8, alias="NOTIFICATIONS_DELIVERY_MAX_WORKERS", ge=1
    )
    schedule_timezone: str = Field(
        default="UTC", alias="NOTIFICATIONS_SCHEDULE_TIMEZONE"
    )

    @field_validator("schedule_timezone")
    @classmethod
    def validate_timezone(cls, v: str) -> str:
        """Reject time zone names pytz does not know."""
        if v not in pytz.all_timezones_set:
            raise ValueError(f"Unknown time zone: {v}")
        return v
