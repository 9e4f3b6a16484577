"""User/role directory consumed by dispatch and chat policy."""

import json
import threading
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Dict, Iterable, List, Optional

from infrastructure.identity.models import Enrollment, PlatformUser
from infrastructure.logging import get_module_logger

logger = get_module_logger()


class UserDirectory(ABC):
    """Resolves audiences and learner progress facts.

    User and course CRUD live outside the engine; this is the read-only
    view the engine needs of them.
    """

    @abstractmethod
    def users_with_roles(self, roles: Iterable[str]) -> List[PlatformUser]:
        """All users whose role is one of ``roles``, without duplicates."""
        pass

    @abstractmethod
    def get_user(self, user_id: str) -> Optional[PlatformUser]:
        pass

    @abstractmethod
    def is_enrolled(
        self,
        learner_id: str,
        course_id: Optional[str] = None,
        creator_id: Optional[str] = None,
    ) -> bool:
        """Whether the learner is enrolled in the course.

        Without a course id, any course by ``creator_id`` counts; without
        either, any enrollment counts.
        """
        pass

    @abstractmethod
    def completed_lessons(
        self,
        learner_id: str,
        course_id: Optional[str] = None,
        creator_id: Optional[str] = None,
    ) -> int:
        """Lessons completed in the matching enrollment (highest when several match)."""
        pass


class InMemoryUserDirectory(UserDirectory):
    """Directory held in memory, optionally seeded from a JSON file.

    Seed file format::

        {
          "users": [{"id": "u1", "name": "Ava", "role": "learner"}],
          "enrollments": [{"learner_id": "u1", "course_id": "c1",
                           "creator_id": "u2", "completed_lessons": 3}]
        }
    """

    def __init__(
        self,
        users: Optional[Iterable[PlatformUser]] = None,
        enrollments: Optional[Iterable[Enrollment]] = None,
    ):
        self._lock = threading.RLock()
        self._users: Dict[str, PlatformUser] = {}
        self._enrollments: List[Enrollment] = []
        for user in users or []:
            self.add_user(user)
        for enrollment in enrollments or []:
            self.enroll(enrollment)

    @classmethod
    def from_file(cls, path: str) -> "InMemoryUserDirectory":
        data = json.loads(Path(path).read_text(encoding="utf-8"))
        directory = cls(
            users=[PlatformUser.model_validate(u) for u in data.get("users", [])],
            enrollments=[
                Enrollment.model_validate(e) for e in data.get("enrollments", [])
            ],
        )
        logger.info(
            "user_directory_seeded",
            path=path,
            users=len(directory._users),
            enrollments=len(directory._enrollments),
        )
        return directory

    def add_user(self, user: PlatformUser) -> None:
        with self._lock:
            self._users[user.id] = user

    def enroll(self, enrollment: Enrollment) -> None:
        with self._lock:
            self._enrollments = [
                e
                for e in self._enrollments
                if not (
                    e.learner_id == enrollment.learner_id
                    and e.course_id == enrollment.course_id
                )
            ]
            self._enrollments.append(enrollment)

    def users_with_roles(self, roles: Iterable[str]) -> List[PlatformUser]:
        wanted = set(roles)
        with self._lock:
            return [user for user in self._users.values() if user.role in wanted]

    def get_user(self, user_id: str) -> Optional[PlatformUser]:
        with self._lock:
            return self._users.get(user_id)

    def _matching(
        self,
        learner_id: str,
        course_id: Optional[str],
        creator_id: Optional[str],
    ) -> List[Enrollment]:
        with self._lock:
            return [
                e
                for e in self._enrollments
                if e.learner_id == learner_id
                and (course_id is None or e.course_id == course_id)
                and (creator_id is None or e.creator_id == creator_id)
            ]

    def is_enrolled(
        self,
        learner_id: str,
        course_id: Optional[str] = None,
        creator_id: Optional[str] = None,
    ) -> bool:
        return bool(self._matching(learner_id, course_id, creator_id))

    def completed_lessons(
        self,
        learner_id: str,
        course_id: Optional[str] = None,
        creator_id: Optional[str] = None,
    ) -> int:
        matches = self._matching(learner_id, course_id, creator_id)
        return max((e.completed_lessons for e in matches), default=0)
