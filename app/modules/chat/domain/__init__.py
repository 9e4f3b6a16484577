"""Chat policy domain: permission matrix, availability and decisions."""

from modules.chat.domain.errors import ChatPolicyError, SettingsVersionConflict
from modules.chat.domain.models import (
    ChatAvailabilitySettings,
    ChatPermissionMatrix,
    ChatRestriction,
    ChatRestrictionSet,
    DenialReason,
    Direction,
    PermissionCell,
    PolicyContext,
    PolicyDecision,
    TimeWindow,
)

__all__ = [
    "ChatAvailabilitySettings",
    "ChatPermissionMatrix",
    "ChatPolicyError",
    "ChatRestriction",
    "ChatRestrictionSet",
    "DenialReason",
    "Direction",
    "PermissionCell",
    "PolicyContext",
    "PolicyDecision",
    "SettingsVersionConflict",
    "TimeWindow",
]
