"""Request schemas of the chat policy HTTP API."""

from pydantic import Field

from modules.chat.domain import PolicyContext
from modules.chat.domain.models import CamelModel


class PolicyRequest(CamelModel):
    """A chat permission question for one ordered role pair."""

    from_role: str = Field(..., min_length=1)
    to_role: str = Field(..., min_length=1)
    context: PolicyContext = Field(default_factory=PolicyContext)
