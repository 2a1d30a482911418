"""Attribute store abstraction consumed by the policy service."""

from __future__ import annotations

from typing import Protocol

from ..models import Subject
from .models import CourseRecord


class AttributeStore(Protocol):
    """Protocol for backends that resolve subjects and courses."""

    async def get_user_with_attributes(self, subject_id: str) -> Subject | None:
        """Return the subject with derived attributes, or ``None`` if unknown or blocked."""

    async def get_course(self, course_id: str) -> CourseRecord | None:
        """Return the course by id."""
