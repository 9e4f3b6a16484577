"""Event models for the in-process event bus."""

from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict
from uuid import UUID, uuid4


@dataclass
class Event:
    """Something that happened on the platform and may trigger notifications.

    Host code raises events keyed by a registered event key; the payload
    becomes the template context of every notification bound to that key.
    """

    event_type: str
    """Event key (e.g. 'creator_signup')."""

    payload: Dict[str, Any] = field(default_factory=dict)
    """Context values made available to notification templates."""

    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    """When the event occurred."""

    correlation_id: UUID = field(default_factory=uuid4)
    """Unique ID to track related log entries and deliveries."""

    actor: str = ""
    """User or service that raised the event."""

    def to_dict(self) -> Dict[str, Any]:
        """Serialize event to a JSON-compatible dictionary."""
        data = asdict(self)
        data["timestamp"] = self.timestamp.isoformat()
        data["correlation_id"] = str(self.correlation_id)
        return data
