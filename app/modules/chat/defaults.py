"""Initial chat settings used until an operator saves their own."""

from modules.chat.domain import (
    ChatAvailabilitySettings,
    ChatPermissionMatrix,
    ChatRestriction,
    ChatRestrictionSet,
    PermissionCell,
)

_OPEN = {"can_chat": True, "can_initiate": True, "can_respond": True}
_CLOSED = {"can_chat": False, "can_initiate": False, "can_respond": False}


def _cell(**flags) -> PermissionCell:
    return PermissionCell(**flags)


def default_permission_matrix() -> ChatPermissionMatrix:
    return ChatPermissionMatrix(
        matrix={
            "creator": {
                "learner": _cell(**_OPEN, requires_course_enrollment=True),
                "brand": _cell(**_OPEN),
                "admin": _cell(**_OPEN),
                "account_manager": _cell(**_OPEN),
            },
            "learner": {
                "creator": _cell(
                    can_chat=True,
                    can_initiate=False,
                    can_respond=True,
                    requires_course_enrollment=True,
                    requires_lesson_completion=2,
                ),
                "brand": _cell(**_CLOSED),
                "admin": _cell(can_chat=True, can_initiate=False, can_respond=True),
                "account_manager": _cell(**_CLOSED),
            },
            "brand": {
                "creator": _cell(**_OPEN),
                "learner": _cell(**_CLOSED),
                "admin": _cell(**_OPEN),
                "account_manager": _cell(**_OPEN),
            },
            "admin": {
                "creator": _cell(**_OPEN),
                "learner": _cell(**_OPEN),
                "brand": _cell(**_OPEN),
                "account_manager": _cell(**_OPEN),
            },
            "account_manager": {
                "creator": _cell(**_OPEN),
                "learner": _cell(**_OPEN),
                "brand": _cell(**_OPEN),
                "admin": _cell(**_OPEN),
            },
        }
    )


def default_availability() -> ChatAvailabilitySettings:
    return ChatAvailabilitySettings()


def default_restrictions() -> ChatRestrictionSet:
    return ChatRestrictionSet(
        restrictions=[
            ChatRestriction(
                id="learner-lesson-completion",
                role="learner",
                type="lesson_completion",
                value=2,
                description="Must complete Lesson 2 before messaging creators",
            ),
            ChatRestriction(
                id="learner-course-enrollment",
                role="learner",
                type="course_enrollment",
                value="required",
                description="Must be enrolled in creator's course",
            ),
            ChatRestriction(
                id="creator-daily-message-limit",
                role="creator",
                type="daily_message_limit",
                value=100,
                description="Maximum 100 messages per day",
            ),
        ]
    )
