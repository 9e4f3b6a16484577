"""Built-in event definitions and template variable catalogs."""

from dataclasses import dataclass, field
from typing import Dict, List, Optional

from modules.notifications.domain.models import TemplateVariable

# Variables every recipient contributes, layered beneath the emitted context.
RECIPIENT_VARIABLES: List[TemplateVariable] = [
    TemplateVariable(variable="userName", description="Recipient's full name"),
    TemplateVariable(variable="userEmail", description="Recipient's email address"),
    TemplateVariable(variable="userRole", description="Recipient's role"),
    TemplateVariable(variable="userId", description="Recipient's user ID"),
]

# Platform-wide catalog used for events that do not declare their own.
DEFAULT_VARIABLES: List[TemplateVariable] = [
    TemplateVariable(variable="userName", description="User's full name"),
    TemplateVariable(variable="email", description="User's email address"),
    TemplateVariable(variable="phoneNumber", description="User's phone number"),
    TemplateVariable(variable="role", description="User's role"),
    TemplateVariable(variable="userType", description="User type"),
    TemplateVariable(variable="bio", description="User bio"),
    TemplateVariable(variable="username", description="Username"),
    TemplateVariable(variable="creatorId", description="Creator ID"),
    TemplateVariable(variable="userId", description="User ID"),
    TemplateVariable(variable="status", description="User status"),
    TemplateVariable(variable="profileImage", description="Profile image URL"),
    TemplateVariable(variable="courseTitle", description="Course title (if provided)"),
    TemplateVariable(variable="brandName", description="Brand name (if provided)"),
    TemplateVariable(
        variable="documentType", description="KYC document type (if provided)"
    ),
    TemplateVariable(
        variable="documentName", description="KYC document name (if provided)"
    ),
    TemplateVariable(
        variable="documentNumber", description="KYC document number (if provided)"
    ),
]


def _pick(*names: str) -> List[TemplateVariable]:
    by_name = {v.variable: v for v in DEFAULT_VARIABLES}
    return [by_name[name] for name in names]


@dataclass(frozen=True)
class EventDefinition:
    """An emittable event as reported by an event source."""

    key: str
    label: Optional[str] = None
    variables: List[TemplateVariable] = field(default_factory=list)

    @property
    def display_label(self) -> str:
        """Explicit label, or the key turned into words ("kyc_uploaded" -> "Kyc Uploaded")."""
        return self.label or label_for(self.key)


def label_for(key: str) -> str:
    return key.replace("_", " ").title()


DEFAULT_EVENTS: List[EventDefinition] = [
    EventDefinition(
        key="creator_signup",
        label="Creator Signup",
        variables=_pick(
            "userName", "email", "phoneNumber", "role", "userType", "username",
            "creatorId", "userId", "status",
        ),
    ),
    EventDefinition(
        key="kyc_uploaded",
        label="KYC Uploaded",
        variables=_pick(
            "userName", "email", "userId", "documentType", "documentName",
            "documentNumber", "status",
        ),
    ),
    EventDefinition(
        key="kyc_approved",
        label="KYC Approved",
        variables=_pick(
            "userName", "email", "userId", "documentType", "documentName", "status"
        ),
    ),
    EventDefinition(
        key="course_assigned",
        label="Course Assigned",
        variables=_pick("userName", "email", "userId", "courseTitle", "creatorId"),
    ),
    EventDefinition(
        key="campaign_invite",
        label="Campaign Invite",
        variables=_pick("userName", "email", "userId", "brandName", "creatorId"),
    ),
]


def with_recipient_variables(
    variables: List[TemplateVariable],
) -> List[TemplateVariable]:
    """Append recipient variables the catalog does not already declare."""
    declared = {v.variable for v in variables}
    return list(variables) + [v for v in RECIPIENT_VARIABLES if v.variable not in declared]


def as_dicts(variables: List[TemplateVariable]) -> List[Dict[str, str]]:
    return [v.model_dump() for v in variables]
