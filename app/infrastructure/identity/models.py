"""Platform user and enrollment models."""

from typing import Any, Dict, Optional

from pydantic import BaseModel, Field


class PlatformUser(BaseModel):
    """A platform participant notifications can be addressed to.

    Attributes are merged into template bindings, so any profile field the
    directory knows (bio, username, profileImage...) is available to
    templates without extra wiring.
    """

    id: str = Field(..., description="Platform user identifier")
    name: str = Field(default="", description="Display name")
    role: str = Field(..., description="Role identifier (creator, learner, ...)")
    email: Optional[str] = None
    phone_number: Optional[str] = None
    attributes: Dict[str, Any] = Field(default_factory=dict)


class Enrollment(BaseModel):
    """A learner's enrollment in a creator's course and their progress."""

    learner_id: str
    course_id: str
    creator_id: Optional[str] = None
    completed_lessons: int = Field(default=0, ge=0)
