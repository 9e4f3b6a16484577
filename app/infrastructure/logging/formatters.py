"""Structlog processors applied to every log entry.

Usage:
    from infrastructure.logging.formatters import mask_contact_details

Notification records and channel messages carry recipient contact details
and rendered message bodies; these processors keep both out of the logs
in readable form.
"""

from typing import Any, Dict, FrozenSet, Optional

# Keys whose values identify how to reach a recipient
CONTACT_PATTERNS = frozenset(
    {
        "email",
        "phone",
        "token",
        "secret",
        "authorization",
    }
)


def mask_contact_details(
    mask_value: str = "***REDACTED***",
    additional_patterns: Optional[FrozenSet[str]] = None,
):
    """Create a processor that masks recipient contact details.

    Any key containing one of the patterns (case-insensitive) has its
    value replaced, so ``recipient_email`` and ``phone_number`` are both
    masked.

    Example:
        configure_logging(
            extra_processors=[mask_contact_details(additional_patterns={"address"})]
        )
    """
    patterns = CONTACT_PATTERNS
    if additional_patterns:
        patterns = patterns | additional_patterns

    def processor(
        logger: Any, method_name: str, event_dict: Dict[str, Any]
    ) -> Dict[str, Any]:
        masked = {}
        for key, value in event_dict.items():
            key_lower = key.lower()
            if value is not None and any(p in key_lower for p in patterns):
                masked[key] = mask_value
            else:
                masked[key] = value
        return masked

    return processor


def truncate_large_values(max_length: int = 500):
    """Create a processor that truncates long strings such as rendered bodies."""

    def processor(
        logger: Any, method_name: str, event_dict: Dict[str, Any]
    ) -> Dict[str, Any]:
        for key, value in event_dict.items():
            if isinstance(value, str) and len(value) > max_length:
                event_dict[key] = (
                    value[:max_length] + f"...[truncated, {len(value)} chars total]"
                )
        return event_dict

    return processor


def add_app_info(app_name: str, app_version: str = "unknown"):
    def processor(
        logger: Any, method_name: str, event_dict: Dict[str, Any]
    ) -> Dict[str, Any]:
        event_dict["app_name"] = app_name
        event_dict["app_version"] = app_version
        return event_dict

    return processor
