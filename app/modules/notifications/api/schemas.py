"""Request and response schemas of the notifications HTTP API.

Payloads are camelCase on the wire. Notification type bodies are accepted
as plain objects and validated by the type store, which reports every
violated field at once.
"""

from typing import Any, Dict, List, Literal, Optional

from pydantic import Field

from modules.notifications.domain import (
    DeliveryRecord,
    EventDescriptor,
    TemplateVariable,
)
from modules.notifications.domain.models import CamelModel


class ScanResponse(CamelModel):
    success: bool = True
    events: List[EventDescriptor]
    inserted: List[str]
    skipped: List[str]


class PurgeResponse(CamelModel):
    success: bool = True
    deleted: int


class TemplateVariablesResponse(CamelModel):
    event_type: Optional[str] = None
    variables: List[TemplateVariable]


class ToggleResponse(CamelModel):
    id: str
    is_active: bool


class EmitRequest(CamelModel):
    event_type: str = Field(..., min_length=1)
    context: Dict[str, Any] = Field(default_factory=dict)


class EmitResponse(CamelModel):
    success: bool = True
    emitted: int
    records: List[DeliveryRecord]


class PreviewRequest(CamelModel):
    notification_type_id: Optional[str] = None
    title: Optional[str] = None
    message_template: Optional[str] = None
    event_type: Optional[str] = None
    context: Dict[str, Any] = Field(default_factory=dict)


class PreviewResponse(CamelModel):
    title: str
    body: str


class SampleDataRequest(CamelModel):
    context: Dict[str, Any] = Field(default_factory=dict)


class SampleDataResponse(CamelModel):
    event_type: str
    context: Dict[str, Any]


class DeliveryStatusUpdate(CamelModel):
    """Asynchronous outcome reported by a channel provider."""

    status: Literal["success", "failed"]
    error_message: Optional[str] = None
    external_id: Optional[str] = None


class MarkReadResponse(CamelModel):
    user_id: str
    updated: int
