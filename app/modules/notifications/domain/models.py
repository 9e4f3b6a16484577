"""Notification engine domain models.

Pydantic models with camelCase aliases, so the same model validates API
payloads (``messageTemplate``) and Python callers (``message_template``).
Documents are persisted with ``model_dump(mode="json")`` (snake_case keys).
"""

import datetime as dt
import re
from enum import Enum
from typing import Annotated, Any, Dict, List, Literal, Optional, Union

from croniter import croniter
from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    StrictBool,
    field_validator,
    model_validator,
)
from pydantic.alias_generators import to_camel
from pydantic_core import PydanticCustomError

TIME_PATTERN = re.compile(r"^([01]?[0-9]|2[0-3]):([0-5][0-9])$")


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Channel(str, Enum):
    """Delivery media a notification type can enable."""

    EMAIL = "email"
    SMS = "sms"
    PUSH = "push"
    IN_APP = "inApp"
    WHATSAPP = "whatsapp"


class Priority(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class Weekday(str, Enum):
    MONDAY = "monday"
    TUESDAY = "tuesday"
    WEDNESDAY = "wednesday"
    THURSDAY = "thursday"
    FRIDAY = "friday"
    SATURDAY = "saturday"
    SUNDAY = "sunday"

    @property
    def index(self) -> int:
        """Python weekday number (monday = 0)."""
        return list(Weekday).index(self)


class DeliveryStatus(str, Enum):
    PENDING = "pending"
    SUCCESS = "success"
    FAILED = "failed"


class EventDescriptor(CamelModel):
    """A distinct event key the platform can emit."""

    key: str
    label: str
    created_at: Optional[dt.datetime] = None


class TemplateVariable(CamelModel):
    """A binding legal in templates of an event."""

    variable: str
    description: str = ""


class ChannelToggles(CamelModel):
    """Per-channel on/off switches. Unknown channel names are rejected."""

    model_config = ConfigDict(extra="forbid")

    email: StrictBool = False
    sms: StrictBool = False
    push: StrictBool = False
    in_app: StrictBool = False
    whatsapp: StrictBool = False

    def enabled(self) -> List[Channel]:
        """Enabled channels in declaration order."""
        return [
            channel
            for channel, field in _CHANNEL_FIELDS.items()
            if getattr(self, field)
        ]


_CHANNEL_FIELDS = {
    Channel.EMAIL: "email",
    Channel.SMS: "sms",
    Channel.PUSH: "push",
    Channel.IN_APP: "in_app",
    Channel.WHATSAPP: "whatsapp",
}


class ImmediateSchedule(CamelModel):
    """Deliver as soon as the event is emitted.

    Deferred-only fields (time, days, date, cron) are dropped and
    ``enabled`` is always False.
    """

    model_config = ConfigDict(extra="ignore")

    type: Literal["immediate"] = "immediate"
    enabled: bool = False

    @field_validator("enabled", mode="before")
    @classmethod
    def force_disabled(cls, v: Any) -> bool:
        return False


class ScheduledSchedule(CamelModel):
    """Hold deliveries until the next due occurrence.

    Occurrence precedence when several fields are set: ``date`` (one-off,
    at ``time``) > ``cron`` > ``days`` at ``time`` > every day at ``time``.
    A scheduled type with ``enabled=False`` delivers immediately.
    """

    model_config = ConfigDict(extra="ignore")

    type: Literal["scheduled"] = "scheduled"
    enabled: bool = True
    time: Optional[str] = None
    days: List[Weekday] = Field(default_factory=list)
    date: Optional[dt.date] = None
    cron: Optional[str] = None

    @field_validator("time", "cron", mode="before")
    @classmethod
    def blank_to_none(cls, v: Any) -> Any:
        if isinstance(v, str) and not v.strip():
            return None
        return v.strip() if isinstance(v, str) else v

    @field_validator("date", mode="before")
    @classmethod
    def blank_date_to_none(cls, v: Any) -> Any:
        if isinstance(v, str) and not v.strip():
            return None
        if isinstance(v, str) and "T" in v:
            return v.split("T", 1)[0]
        return v

    @field_validator("time")
    @classmethod
    def validate_time(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return v
        match = TIME_PATTERN.match(v)
        if not match:
            raise ValueError("Time must be in HH:MM format (00:00-23:59)")
        return f"{int(match.group(1)):02d}:{match.group(2)}"

    @field_validator("days", mode="before")
    @classmethod
    def normalize_days(cls, v: Any) -> Any:
        if isinstance(v, list):
            seen: List[Any] = []
            for day in v:
                day = day.strip().lower() if isinstance(day, str) else day
                if day not in seen:
                    seen.append(day)
            return seen
        return v

    @field_validator("cron")
    @classmethod
    def validate_cron(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return v
        if len(v.split()) != 5 or not croniter.is_valid(v):
            raise ValueError("Cron must be a valid 5-field cron expression")
        return v

    @model_validator(mode="after")
    def require_trigger(self) -> "ScheduledSchedule":
        if self.time is None and self.cron is None:
            raise PydanticCustomError(
                "schedule_time_required",
                "Scheduled notifications require a time or a cron expression",
            )
        if self.date is not None and self.time is None:
            raise PydanticCustomError(
                "schedule_time_required",
                "A scheduled date requires a time",
            )
        return self


Schedule = Annotated[
    Union[ImmediateSchedule, ScheduledSchedule], Field(discriminator="type")
]


def is_deferred(schedule: Union[ImmediateSchedule, ScheduledSchedule]) -> bool:
    """Whether deliveries for this schedule wait for an occurrence."""
    return isinstance(schedule, ScheduledSchedule) and schedule.enabled


class NotificationTypeDraft(CamelModel):
    """Operator-submitted notification configuration."""

    model_config = ConfigDict(str_strip_whitespace=True)

    title: str = Field(..., min_length=3, max_length=100)
    message_template: str = Field(..., min_length=10, max_length=1000)
    event_type: str = Field(..., min_length=3, max_length=50)
    roles: List[str] = Field(..., min_length=1)
    channels: ChannelToggles = Field(default_factory=ChannelToggles)
    is_active: StrictBool = True
    priority: Priority = Priority.MEDIUM
    schedule: Schedule = Field(default_factory=ImmediateSchedule)
    created_by: Optional[str] = None
    updated_by: Optional[str] = None

    @field_validator("roles")
    @classmethod
    def validate_roles(cls, v: List[str]) -> List[str]:
        roles: List[str] = []
        for role in v:
            if not role.strip():
                raise ValueError("Each role must be a non-empty string")
            if role.strip() not in roles:
                roles.append(role.strip())
        return roles

    @field_validator("schedule", mode="before")
    @classmethod
    def default_schedule_type(cls, v: Any) -> Any:
        if v is None:
            return {"type": "immediate"}
        if isinstance(v, dict) and not v.get("type"):
            return {**v, "type": "immediate"}
        return v


class NotificationType(NotificationTypeDraft):
    """A stored notification configuration bound to one event key."""

    id: str
    created_at: dt.datetime
    updated_at: dt.datetime
    deleted_at: Optional[dt.datetime] = None

    @property
    def is_deleted(self) -> bool:
        return self.deleted_at is not None


class DeliveryRecord(CamelModel):
    """One attempted send to one recipient on one channel for one emission."""

    id: str
    emission_id: str
    event_type: str
    notification_type_id: str
    recipient_user_id: str
    recipient_name: str = ""
    recipient_role: str
    channel: Channel
    status: DeliveryStatus = DeliveryStatus.PENDING
    priority: Priority = Priority.MEDIUM
    rendered_title: str = ""
    rendered_body: str
    context: Dict[str, Any] = Field(default_factory=dict)
    created_at: dt.datetime
    scheduled_for: Optional[dt.datetime] = None
    sent_at: Optional[dt.datetime] = None
    delivered_at: Optional[dt.datetime] = None
    error_message: Optional[str] = None
    external_id: Optional[str] = None

    @property
    def is_pending(self) -> bool:
        return self.status == DeliveryStatus.PENDING
