"""Validation of submitted notification type configurations.

Every violated rule is collected into one ValidationError so the operator
sees all problems of a submission at once, keyed by camelCase field paths
(``messageTemplate``, ``schedule.time``, ``channels.fax``).
"""

from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple

from pydantic import ValidationError as PydanticValidationError

from modules.notifications.domain import (
    FieldError,
    NotificationTypeDraft,
    ValidationError,
)
from modules.notifications.registry import EventRegistry

# Discriminator tags pydantic inserts into error locations of the schedule union.
_UNION_TAGS = {"immediate", "scheduled"}


def _camel(part: str) -> str:
    head, *rest = part.split("_")
    return head + "".join(word[:1].upper() + word[1:] for word in rest)


def _field_path(loc: Tuple[Any, ...], error_type: str) -> str:
    parts: List[str] = []
    for item in loc:
        if isinstance(item, int):
            continue
        if isinstance(item, str) and item in _UNION_TAGS and parts == ["schedule"]:
            continue
        parts.append(_camel(str(item)))
    if error_type == "schedule_time_required":
        parts = ["schedule", "time"]
    return ".".join(parts) or "body"


def _message(error: Mapping[str, Any]) -> str:
    message = str(error.get("msg", "Invalid value"))
    if message.startswith("Value error, "):
        message = message[len("Value error, ") :]
    return message


def field_errors(exc: PydanticValidationError) -> List[FieldError]:
    """Convert pydantic errors to camelCase field errors, one per field and message."""
    errors: List[FieldError] = []
    for error in exc.errors():
        field_error = FieldError(
            field=_field_path(tuple(error.get("loc", ())), error.get("type", "")),
            message=_message(error),
        )
        if field_error not in errors:
            errors.append(field_error)
    return errors


def validate_draft(
    payload: Mapping[str, Any],
    registry: EventRegistry,
    known_roles: Iterable[str],
) -> NotificationTypeDraft:
    """Validate a full notification type payload.

    Args:
        payload: Submitted fields, camelCase or snake_case.
        registry: Registry the event type must be registered in.
        known_roles: Role identifiers the platform recognizes.

    Returns:
        The validated draft.

    Raises:
        ValidationError: Listing every violated field.
    """
    errors: List[FieldError] = []
    draft: Optional[NotificationTypeDraft] = None
    try:
        draft = NotificationTypeDraft.model_validate(dict(payload))
    except PydanticValidationError as e:
        errors.extend(field_errors(e))

    failed_fields = {e.field for e in errors}
    event_type = draft.event_type if draft else _raw(payload, "eventType", "event_type")
    if (
        "eventType" not in failed_fields
        and isinstance(event_type, str)
        and event_type.strip()
        and not registry.exists(event_type.strip())
    ):
        errors.append(
            FieldError(
                field="eventType",
                message=f"Event type '{event_type.strip()}' is not registered",
            )
        )

    roles = draft.roles if draft else _raw(payload, "roles")
    if "roles" not in failed_fields and isinstance(roles, list):
        allowed = set(known_roles)
        unknown = [r for r in roles if isinstance(r, str) and r.strip() not in allowed]
        if unknown:
            errors.append(
                FieldError(
                    field="roles",
                    message=f"Unknown roles: {', '.join(sorted(set(unknown)))}",
                )
            )

    if errors:
        raise ValidationError(errors)
    return draft


def _raw(payload: Mapping[str, Any], *names: str) -> Any:
    for name in names:
        if name in payload:
            return payload[name]
    return None


def as_payload(data: Dict[str, Any]) -> Dict[str, Any]:
    """Drop stored-only fields so a document can be re-validated as a draft."""
    return {
        k: v
        for k, v in data.items()
        if k not in {"id", "created_at", "updated_at", "deleted_at"}
    }
