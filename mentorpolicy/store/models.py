"""Rows read from the application's user and course tables."""

from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, Field, field_validator


class UserRecord(BaseModel):
    """A stored user account.

    Optional attribute columns override the grants of the user's role when
    present. ``current_load`` is filled in by the store when it can count the
    user's active courses.
    """

    id: str
    userid: Optional[str] = None
    email: Optional[str] = None
    role: str = "mentee"
    is_blocked: bool = False
    display_name: Optional[str] = None
    current_load: Optional[int] = None

    experience: int = 0
    skills: list[str] = Field(default_factory=list)
    location: str = ""
    department: str = ""
    permissions: Optional[list[str]] = None
    admin_level: Optional[str] = None
    mentoring_capacity: Optional[int] = None
    available_for_mentoring: Optional[bool] = None

    @field_validator("id", mode="before")
    @classmethod
    def _stringify_id(cls, value: Any) -> Any:
        return str(value) if value is not None else value


class CourseRecord(BaseModel):
    """A stored course owned by a mentor."""

    course_id: str
    mentor_id: str
    title: str = ""
    status: str = "draft"

    @field_validator("course_id", "mentor_id", mode="before")
    @classmethod
    def _stringify_ids(cls, value: Any) -> Any:
        return str(value) if value is not None else value
