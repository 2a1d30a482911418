"""PostgreSQL implementation of the attribute store.

Reads the application's existing ``users`` and ``courses`` tables; the schema
itself is owned by the application's migrations.
"""

from __future__ import annotations

from typing import Mapping, Optional

import asyncpg

from ..config import RoleGrant
from ..constants import COURSE_STATUS_ARCHIVED
from ..models import Subject
from .attributes import build_subject
from .models import CourseRecord, UserRecord
from .repository import AttributeStore

_USER_QUERY = """
SELECT
    u.id,
    u.userid,
    u.email,
    u.role,
    COALESCE(u.is_blocked, FALSE) AS is_blocked,
    u.display_name,
    (
        SELECT COUNT(*)
        FROM courses c
        WHERE c.mentor_id = u.id AND COALESCE(c.status, 'draft') <> $2
    ) AS current_load
FROM users u
WHERE u.id::text = $1 OR u.userid = $1
LIMIT 1
"""

_COURSE_QUERY = """
SELECT course_id, mentor_id, title, COALESCE(status, 'draft') AS status
FROM courses
WHERE course_id::text = $1
"""


class PostgresAttributeStore(AttributeStore):
    """Resolve subjects from the application's PostgreSQL database."""

    def __init__(self, dsn: str, role_grants: Optional[Mapping[str, RoleGrant]] = None):
        self._dsn = dsn
        self.role_grants = role_grants

    async def _connect(self) -> asyncpg.Connection:
        return await asyncpg.connect(self._dsn)

    # ------------------------------------------------------------------
    async def get_user_with_attributes(self, subject_id: str) -> Subject | None:
        conn = await self._connect()
        try:
            row = await conn.fetchrow(_USER_QUERY, str(subject_id), COURSE_STATUS_ARCHIVED)
        finally:
            await conn.close()
        if not row:
            return None
        record = UserRecord(
            id=row["id"],
            userid=row["userid"],
            email=row["email"],
            role=row["role"],
            is_blocked=row["is_blocked"],
            display_name=row["display_name"],
            current_load=row["current_load"],
        )
        return build_subject(record, self.role_grants)

    async def get_course(self, course_id: str) -> CourseRecord | None:
        conn = await self._connect()
        try:
            row = await conn.fetchrow(_COURSE_QUERY, str(course_id))
        finally:
            await conn.close()
        if not row:
            return None
        return CourseRecord(
            course_id=row["course_id"],
            mentor_id=row["mentor_id"],
            title=row["title"] or "",
            status=row["status"],
        )
