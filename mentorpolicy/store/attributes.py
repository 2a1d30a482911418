"""Derive a policy subject from a stored user row."""

from __future__ import annotations

import logging
from typing import Mapping, Optional

from ..config import RoleGrant, default_role_grants
from ..constants import ROLE_MENTEE, ROLES
from ..models import Subject, SubjectAttributes
from .models import UserRecord

logger = logging.getLogger(__name__)


def build_subject(
    record: Optional[UserRecord],
    role_grants: Optional[Mapping[str, RoleGrant]] = None,
) -> Subject | None:
    """Combine the role's grants with per-user overrides.

    Blocked accounts resolve to ``None`` so that every check denies.
    """
    if record is None:
        return None
    if record.is_blocked:
        logger.info("User %s is blocked, not resolving subject", record.id)
        return None

    grants = role_grants or default_role_grants()
    role = record.role.lower() if record.role else ROLE_MENTEE
    if role not in ROLES:
        logger.warning("User %s has unknown role %r, treating as mentee", record.id, record.role)
        role = ROLE_MENTEE
    grant = grants.get(role) or RoleGrant()

    def pick(override, default):
        return default if override is None else override

    attributes = SubjectAttributes(
        experience=record.experience,
        skills=record.skills,
        location=record.location,
        department=record.department,
        mentoring_capacity=pick(record.mentoring_capacity, grant.mentoring_capacity),
        can_create_courses=grant.can_create_courses,
        permissions=list(pick(record.permissions, grant.permissions)),
        admin_level=pick(record.admin_level, grant.admin_level),
        available_for_mentoring=pick(
            record.available_for_mentoring, grant.available_for_mentoring
        ),
    )
    return Subject(
        id=record.id,
        role=role,
        attributes=attributes,
        current_load=record.current_load or 0,
        email=record.email,
    )
