"""Chat policy domain models.

The permission matrix is a two-level mapping ``from_role -> to_role ->
PermissionCell``; a missing pair means no policy is defined for it.
Availability and restrictions are single versioned records replaced as a
whole.
"""

import datetime as dt
import re
import uuid
from enum import Enum
from typing import Any, Dict, List, Optional, Union

import pytz
from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

TIME_PATTERN = re.compile(r"^([01]?[0-9]|2[0-3]):([0-5][0-9])$")


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Direction(str, Enum):
    INITIATE = "initiate"
    RESPOND = "respond"


class DenialReason(str, Enum):
    """Why a chat request was denied, in evaluation order."""

    NO_POLICY_DEFINED = "NoPolicyDefined"
    CHAT_DISABLED_FOR_ROLE_PAIR = "ChatDisabledForRolePair"
    DIRECTION_NOT_ALLOWED = "DirectionNotAllowed"
    ENROLLMENT_REQUIRED = "EnrollmentRequired"
    LESSON_THRESHOLD_NOT_MET = "LessonThresholdNotMet"
    DAILY_LIMIT_EXCEEDED = "DailyLimitExceeded"
    OUTSIDE_AVAILABILITY_WINDOW = "OutsideAvailabilityWindow"


class PermissionCell(CamelModel):
    """Chat rules for one ordered role pair.

    ``can_initiate`` and ``can_respond`` only take effect while ``can_chat``
    is set. Zero or missing thresholds mean no requirement.
    """

    can_chat: bool = False
    can_initiate: bool = False
    can_respond: bool = False
    requires_course_enrollment: bool = False
    requires_lesson_completion: Optional[int] = Field(default=None, ge=0)
    max_daily_messages: Optional[int] = Field(default=None, ge=0)

    def allows(self, direction: Direction) -> bool:
        if not self.can_chat:
            return False
        if direction == Direction.INITIATE:
            return self.can_initiate
        return self.can_respond

    @property
    def lesson_threshold(self) -> int:
        return self.requires_lesson_completion or 0

    @property
    def daily_limit(self) -> Optional[int]:
        return self.max_daily_messages or None


class ChatPermissionMatrix(CamelModel):
    version: int = Field(default=0, ge=0)
    matrix: Dict[str, Dict[str, PermissionCell]] = Field(default_factory=dict)

    def cell(self, from_role: str, to_role: str) -> Optional[PermissionCell]:
        return self.matrix.get(from_role, {}).get(to_role)


class TimeWindow(CamelModel):
    """Daily window ``[start, end)``; ``end`` before ``start`` wraps past midnight.

    Equal start and end is open all day.
    """

    start: str
    end: str

    @field_validator("start", "end")
    @classmethod
    def validate_time(cls, v: str) -> str:
        match = TIME_PATTERN.match(v.strip())
        if not match:
            raise ValueError("Time must be in HH:MM format (00:00-23:59)")
        return f"{int(match.group(1)):02d}:{match.group(2)}"

    def contains(self, moment: dt.time) -> bool:
        start = dt.time.fromisoformat(self.start)
        end = dt.time.fromisoformat(self.end)
        current = moment.replace(second=0, microsecond=0, tzinfo=None)
        if start == end:
            return True
        if start < end:
            return start <= current < end
        return current >= start or current < end


class ChatAvailabilitySettings(CamelModel):
    """Platform-wide chat availability, replaced atomically by version."""

    version: int = Field(default=0, ge=0)
    creator_default_hours: TimeWindow = Field(
        default_factory=lambda: TimeWindow(start="09:00", end="17:00")
    )
    role_hours: Dict[str, TimeWindow] = Field(default_factory=dict)
    global_chat_window: TimeWindow = Field(
        default_factory=lambda: TimeWindow(start="08:00", end="22:00")
    )
    timezone: str = "UTC"
    enforce_availability: bool = True
    max_daily_chats: int = Field(default=50, ge=0)
    auto_archive_days: int = Field(default=30, ge=0)
    allow_file_sharing: bool = False
    allow_voice_messages: bool = False
    allow_scheduled_chats: bool = True

    @field_validator("timezone")
    @classmethod
    def validate_timezone(cls, v: str) -> str:
        if v not in pytz.all_timezones_set:
            raise ValueError(f"Unknown time zone: {v}")
        return v

    def hours_for(self, role: str) -> Optional[TimeWindow]:
        """Working hours of ``role``; creators fall back to the creator default."""
        if role in self.role_hours:
            return self.role_hours[role]
        if role == "creator":
            return self.creator_default_hours
        return None


class ChatRestriction(CamelModel):
    """Human-readable constraint attached to a role, shown with decisions."""

    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    role: str = Field(..., min_length=1)
    type: str = Field(..., min_length=1)
    value: Union[int, str, None] = None
    description: str = ""
    is_active: bool = True


class ChatRestrictionSet(CamelModel):
    version: int = Field(default=0, ge=0)
    restrictions: List[ChatRestriction] = Field(default_factory=list)

    def active_for(self, role: str) -> List[ChatRestriction]:
        return [r for r in self.restrictions if r.is_active and r.role == role]


class PolicyContext(CamelModel):
    """Relationship facts for one chat request.

    ``enrolled`` and ``completed_lessons`` may be supplied directly; when
    absent they are looked up in the user directory for the learner of the
    pair (``learner_id`` or whichever participant has the learner role).
    """

    from_user_id: Optional[str] = None
    to_user_id: Optional[str] = None
    learner_id: Optional[str] = None
    creator_id: Optional[str] = None
    course_id: Optional[str] = None
    enrolled: Optional[bool] = None
    completed_lessons: Optional[int] = Field(default=None, ge=0)
    at: Optional[dt.datetime] = None
    consume: bool = True


class PolicyDecision(CamelModel):
    allowed: bool
    reason: Optional[DenialReason] = None
    from_role: str
    to_role: str
    direction: Direction
    messages_today: Optional[int] = None
    daily_limit: Optional[int] = None
    notes: List[str] = Field(default_factory=list)

    def to_log(self) -> Dict[str, Any]:
        return {
            "allowed": self.allowed,
            "reason": self.reason.value if self.reason else None,
            "from_role": self.from_role,
            "to_role": self.to_role,
            "direction": self.direction.value,
        }
