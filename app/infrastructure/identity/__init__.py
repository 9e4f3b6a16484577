"""Platform user directory.

Usage:
    from infrastructure.identity import InMemoryUserDirectory, PlatformUser

    directory = InMemoryUserDirectory(users=[PlatformUser(id="u1", role="learner")])
    learners = directory.users_with_roles(["learner"])
"""

from infrastructure.identity.directory import InMemoryUserDirectory, UserDirectory
from infrastructure.identity.models import Enrollment, PlatformUser

__all__ = [
    "Enrollment",
    "InMemoryUserDirectory",
    "PlatformUser",
    "UserDirectory",
]
