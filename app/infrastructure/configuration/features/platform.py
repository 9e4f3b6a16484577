"""Platform directory settings."""

from typing import List, Optional

from pydantic import Field

from infrastructure.configuration.base import FeatureSettings


class PlatformSettings(FeatureSettings):
    """Roles and user directory configuration.

    Environment Variables:
        PLATFORM_ROLES: JSON list of role identifiers notification types and
            chat policies may reference
        PLATFORM_DIRECTORY_SEED_FILE: Optional JSON file used to seed the
            in-memory user directory (users, enrollments)
    """

    roles: List[str] = Field(
        default_factory=lambda: [
            "creator",
            "learner",
            "brand",
            "admin",
            "account_manager",
        ],
        alias="PLATFORM_ROLES",
    )
    directory_seed_file: Optional[str] = Field(
        default=None, alias="PLATFORM_DIRECTORY_SEED_FILE"
    )
