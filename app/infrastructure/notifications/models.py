"""Channel delivery models.

Platform-agnostic message handed to a channel provider. The notification
engine renders content; channels only deliver it.
"""

from typing import Any, Dict, Optional

from pydantic import BaseModel, Field, field_validator


class ChannelMessage(BaseModel):
    """One rendered message for one recipient on one channel.

    Attributes:
        record_id: Delivery record this message resolves
        channel: Channel name (email, sms, push, inApp, whatsapp)
        recipient_id: Platform user id of the recipient
        recipient_name: Display name of the recipient
        recipient_email: Email address, when the directory knows it
        recipient_phone: E.164 phone number, when the directory knows it
        title: Rendered title (email subject, push title)
        body: Rendered message body
        priority: low, medium or high
        metadata: Extra routing context (event key, notification type id)

    Example:
        message = ChannelMessage(
            record_id="d-1",
            channel="email",
            recipient_id="u-1",
            recipient_name="Ava",
            title="Welcome",
            body="Hi Ava, welcome aboard",
        )
    """

    record_id: str
    channel: str
    recipient_id: str
    recipient_name: str = ""
    recipient_email: Optional[str] = None
    recipient_phone: Optional[str] = None
    title: str = ""
    body: str
    priority: str = "medium"
    metadata: Dict[str, Any] = Field(default_factory=dict)

    @field_validator("recipient_phone")
    @classmethod
    def validate_phone_number(cls, v: Optional[str]) -> Optional[str]:
        """Validate E.164 phone format if provided."""
        if v is None:
            return v
        if not v.startswith("+") or not v[1:].isdigit():
            raise ValueError(f"Phone number must be in E.164 format: {v}")
        if len(v) < 8 or len(v) > 16:
            raise ValueError(f"Phone number length invalid: {v}")
        return v
