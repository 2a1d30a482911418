"""SQLite implementation of the attribute store."""

from __future__ import annotations

import asyncio
import json
import sqlite3
from pathlib import Path
from typing import Any, Mapping, Optional

from ..config import RoleGrant
from ..constants import COURSE_STATUS_ARCHIVED
from ..models import Subject
from .attributes import build_subject
from .models import CourseRecord, UserRecord
from .repository import AttributeStore

_USER_COLUMNS = (
    "id, userid, email, role, is_blocked, display_name, permissions, "
    "admin_level, mentoring_capacity, available_for_mentoring, "
    "experience, skills, location, department"
)


class SQLiteAttributeStore(AttributeStore):
    """Resolve subjects from a local SQLite database."""

    def __init__(
        self,
        db_path: str | Path,
        role_grants: Optional[Mapping[str, RoleGrant]] = None,
    ):
        self.db_path = str(db_path)
        self.role_grants = role_grants
        self._conn = sqlite3.connect(self.db_path, check_same_thread=False)
        self._conn.row_factory = sqlite3.Row
        self._ensure_schema()

    # ------------------------------------------------------------------
    # Schema management
    def _ensure_schema(self) -> None:
        cur = self._conn.cursor()
        cur.execute(
            """
            CREATE TABLE IF NOT EXISTS users (
                id TEXT PRIMARY KEY,
                userid TEXT UNIQUE,
                email TEXT,
                role TEXT NOT NULL DEFAULT 'mentee',
                is_blocked INTEGER NOT NULL DEFAULT 0,
                display_name TEXT,
                permissions TEXT,
                admin_level TEXT,
                mentoring_capacity INTEGER,
                available_for_mentoring INTEGER,
                experience INTEGER NOT NULL DEFAULT 0,
                skills TEXT,
                location TEXT NOT NULL DEFAULT '',
                department TEXT NOT NULL DEFAULT ''
            )
            """
        )
        cur.execute(
            """
            CREATE TABLE IF NOT EXISTS courses (
                course_id TEXT PRIMARY KEY,
                mentor_id TEXT NOT NULL,
                title TEXT,
                status TEXT NOT NULL DEFAULT 'draft'
            )
            """
        )
        self._conn.commit()

    # ------------------------------------------------------------------
    # Helper methods
    def _execute(self, query: str, *params: Any) -> None:
        cur = self._conn.cursor()
        cur.execute(query, params)
        self._conn.commit()

    def _fetchone(self, query: str, *params: Any) -> sqlite3.Row | None:
        cur = self._conn.cursor()
        cur.execute(query, params)
        return cur.fetchone()

    @staticmethod
    def _to_record(row: sqlite3.Row, current_load: int) -> UserRecord:
        available = row["available_for_mentoring"]
        return UserRecord(
            id=row["id"],
            userid=row["userid"],
            email=row["email"],
            role=row["role"],
            is_blocked=bool(row["is_blocked"]),
            display_name=row["display_name"],
            current_load=current_load,
            permissions=json.loads(row["permissions"]) if row["permissions"] else None,
            admin_level=row["admin_level"],
            mentoring_capacity=row["mentoring_capacity"],
            available_for_mentoring=None if available is None else bool(available),
            experience=row["experience"] or 0,
            skills=json.loads(row["skills"]) if row["skills"] else [],
            location=row["location"] or "",
            department=row["department"] or "",
        )

    # ------------------------------------------------------------------
    # Seeding
    async def add_user(self, record: UserRecord) -> None:
        await asyncio.to_thread(
            self._execute,
            f"INSERT OR REPLACE INTO users ({_USER_COLUMNS}) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)",
            record.id,
            record.userid,
            record.email,
            record.role,
            int(record.is_blocked),
            record.display_name,
            json.dumps(record.permissions) if record.permissions is not None else None,
            record.admin_level,
            record.mentoring_capacity,
            None
            if record.available_for_mentoring is None
            else int(record.available_for_mentoring),
            record.experience,
            json.dumps(record.skills),
            record.location,
            record.department,
        )

    async def add_course(self, record: CourseRecord) -> None:
        await asyncio.to_thread(
            self._execute,
            "INSERT OR REPLACE INTO courses (course_id, mentor_id, title, status) VALUES (?, ?, ?, ?)",
            record.course_id,
            record.mentor_id,
            record.title,
            record.status,
        )

    # ------------------------------------------------------------------
    # Store API
    async def get_user_with_attributes(self, subject_id: str) -> Subject | None:
        row = await asyncio.to_thread(
            self._fetchone,
            f"SELECT {_USER_COLUMNS} FROM users WHERE id = ? OR userid = ? LIMIT 1",
            subject_id,
            subject_id,
        )
        if not row:
            return None
        load = await asyncio.to_thread(
            self._fetchone,
            "SELECT COUNT(*) AS active_courses FROM courses WHERE mentor_id = ? AND status != ?",
            row["id"],
            COURSE_STATUS_ARCHIVED,
        )
        return build_subject(self._to_record(row, load["active_courses"]), self.role_grants)

    async def get_course(self, course_id: str) -> CourseRecord | None:
        row = await asyncio.to_thread(
            self._fetchone,
            "SELECT course_id, mentor_id, title, status FROM courses WHERE course_id = ?",
            str(course_id),
        )
        if not row:
            return None
        return CourseRecord(
            course_id=row["course_id"],
            mentor_id=row["mentor_id"],
            title=row["title"] or "",
            status=row["status"],
        )
