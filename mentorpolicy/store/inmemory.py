"""In-memory implementation of the attribute store."""

from __future__ import annotations

from typing import Dict, Mapping, Optional

from ..config import RoleGrant
from ..constants import COURSE_STATUS_ARCHIVED
from ..models import Subject
from .attributes import build_subject
from .models import CourseRecord, UserRecord
from .repository import AttributeStore


class InMemoryAttributeStore(AttributeStore):
    """Keep users and courses in local memory.

    Useful for tests or when no database is configured. Data is not
    persisted across process restarts.
    """

    def __init__(self, role_grants: Optional[Mapping[str, RoleGrant]] = None) -> None:
        self.role_grants = role_grants
        self._users: Dict[str, UserRecord] = {}
        self._courses: Dict[str, CourseRecord] = {}

    # ------------------------------------------------------------------
    def add_user(self, record: UserRecord) -> None:
        self._users[record.id] = record

    def add_course(self, record: CourseRecord) -> None:
        self._courses[record.course_id] = record

    def _find_user(self, subject_id: str) -> UserRecord | None:
        record = self._users.get(subject_id)
        if record is not None:
            return record
        for candidate in self._users.values():
            if candidate.userid == subject_id:
                return candidate
        return None

    def _active_courses(self, mentor_id: str) -> int:
        return sum(
            1
            for course in self._courses.values()
            if course.mentor_id == mentor_id and course.status != COURSE_STATUS_ARCHIVED
        )

    # ------------------------------------------------------------------
    async def get_user_with_attributes(self, subject_id: str) -> Subject | None:
        record = self._find_user(subject_id)
        if record is None:
            return None
        if record.current_load is None:
            record = record.model_copy(
                update={"current_load": self._active_courses(record.id)}
            )
        return build_subject(record, self.role_grants)

    async def get_course(self, course_id: str) -> CourseRecord | None:
        return self._courses.get(str(course_id))
