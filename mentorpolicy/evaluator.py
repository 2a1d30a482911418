"""Rule tables deciding whether a subject may act on a resource.

Each resource type owns a table mapping action names to predicates over the
subject, the resource and the environment. Evaluation is pure and
synchronous: no I/O happens here and nothing is cached between calls. Any
unknown resource type or action denies, and missing data makes the
corresponding predicate false rather than raising.
"""

from __future__ import annotations

import logging
from datetime import timedelta
from typing import Callable, Dict, Optional

from .constants import (
    ADMIN_LEVEL_BASIC,
    ADMIN_LEVEL_SENIOR,
    ADMIN_LEVEL_SUPER,
    COURSE_STATUS_PUBLISHED,
    DEFAULT_CANCELLATION_WINDOW,
    PERMISSION_COURSE_APPROVAL,
    PERMISSION_SYSTEM_ANALYTICS,
    PERMISSION_SYSTEM_CONFIG,
    PERMISSION_USER_MANAGEMENT,
    ROLE_ADMIN,
    ROLE_MENTEE,
    ROLE_MENTOR,
    ROLES,
    SESSION_STATUS_IN_PROGRESS,
    VISIBILITY_MENTORS,
    VISIBILITY_PUBLIC,
)
from .models import (
    AnalyticsResource,
    ApplicationResource,
    CourseResource,
    Environment,
    PolicyInput,
    Resource,
    SessionResource,
    Subject,
    UserResource,
)

logger = logging.getLogger(__name__)

Rule = Callable[[Subject, Resource, Environment], bool]


def is_subject(subject: Subject, user_id: Optional[str]) -> bool:
    """Return ``True`` when ``user_id`` is present and names ``subject``."""
    return user_id is not None and subject.id == user_id


def is_admin_with(subject: Subject, permission: str) -> bool:
    return subject.role == ROLE_ADMIN and subject.has_permission(permission)


def has_capacity(subject: Subject) -> bool:
    return subject.current_load < subject.attributes.mentoring_capacity


def can_promote_to_role(subject: Subject, target_role: Optional[str]) -> bool:
    """Check the admin tier against the requested role.

    Super admins may grant any role. Senior and basic admins may only
    promote to mentor. Subjects without an admin level cannot promote.
    """
    if target_role not in ROLES:
        return False
    level = subject.attributes.admin_level
    if level == ADMIN_LEVEL_SUPER:
        return True
    if level in (ADMIN_LEVEL_SENIOR, ADMIN_LEVEL_BASIC):
        return target_role == ROLE_MENTOR
    return False


class PolicyEvaluator:
    """Evaluate ABAC rules for courses, sessions, users, applications and analytics."""

    def __init__(self, cancellation_window: timedelta = DEFAULT_CANCELLATION_WINDOW):
        self.cancellation_window = cancellation_window
        self._tables: Dict[str, Dict[str, Rule]] = {
            "course": {
                "create": self._course_create,
                "read": self._course_read,
                "update": self._course_update,
                "delete": self._course_delete,
                "publish": self._course_publish,
            },
            "session": {
                "create": self._session_create,
                "read": self._session_participant_or_admin,
                "update": self._session_participant_or_admin,
                "cancel": self._session_cancel,
                "complete": self._session_complete,
            },
            "user": {
                "read": self._user_read,
                "update": self._user_update,
                "promote": self._user_promote,
                "suspend": self._user_suspend,
            },
            "application": {
                "create": self._application_create,
                "read": self._application_read,
                "approve": self._application_decide,
                "reject": self._application_decide,
            },
            "analytics": {
                "read": self._analytics_basic,
                "view_basic": self._analytics_basic,
                "write": self._analytics_advanced,
                "view_advanced": self._analytics_advanced,
            },
        }

    def actions_for(self, resource_type: str) -> list[str]:
        return sorted(self._tables.get(resource_type, {}))

    def evaluate(
        self,
        subject: Optional[Subject],
        resource: Resource,
        action: str,
        environment: Optional[Environment] = None,
    ) -> bool:
        """Return ``True`` if ``subject`` may perform ``action`` on ``resource``."""
        if subject is None or resource is None:
            return False
        rule = self._tables.get(getattr(resource, "type", None), {}).get(action)
        if rule is None:
            logger.debug(
                "No rule for %s.%s, denying", getattr(resource, "type", None), action
            )
            return False
        return bool(rule(subject, resource, environment or Environment()))

    def apply(self, policy: PolicyInput) -> bool:
        return self.evaluate(
            policy.subject, policy.resource, policy.action, policy.environment
        )

    # ------------------------------------------------------------------
    # Courses
    def _course_create(self, subject: Subject, resource: CourseResource, env: Environment) -> bool:
        return (
            subject.role in (ROLE_MENTOR, ROLE_ADMIN)
            and subject.attributes.can_create_courses
            and has_capacity(subject)
        )

    def _course_read(self, subject: Subject, resource: CourseResource, env: Environment) -> bool:
        return (
            resource.status == COURSE_STATUS_PUBLISHED
            or is_subject(subject, resource.creator_id)
            or subject.role == ROLE_ADMIN
        )

    def _course_update(self, subject: Subject, resource: CourseResource, env: Environment) -> bool:
        return is_subject(subject, resource.creator_id) or is_admin_with(
            subject, PERMISSION_COURSE_APPROVAL
        )

    def _course_delete(self, subject: Subject, resource: CourseResource, env: Environment) -> bool:
        return is_admin_with(subject, PERMISSION_COURSE_APPROVAL)

    def _course_publish(self, subject: Subject, resource: CourseResource, env: Environment) -> bool:
        owner_mentor = is_subject(subject, resource.creator_id) and subject.role == ROLE_MENTOR
        return owner_mentor or is_admin_with(subject, PERMISSION_COURSE_APPROVAL)

    # ------------------------------------------------------------------
    # Sessions
    def _session_create(self, subject: Subject, resource: SessionResource, env: Environment) -> bool:
        if is_subject(subject, resource.mentor_id):
            return has_capacity(subject)
        if is_subject(subject, resource.mentee_id):
            return subject.attributes.available_for_mentoring
        return False

    def _session_participant_or_admin(
        self, subject: Subject, resource: SessionResource, env: Environment
    ) -> bool:
        return self._is_participant(subject, resource) or subject.role == ROLE_ADMIN

    def _session_cancel(self, subject: Subject, resource: SessionResource, env: Environment) -> bool:
        if not self._is_participant(subject, resource) or resource.scheduled_at is None:
            return False
        return resource.scheduled_at - env.time > self.cancellation_window

    def _session_complete(self, subject: Subject, resource: SessionResource, env: Environment) -> bool:
        return (
            is_subject(subject, resource.mentor_id)
            and resource.status == SESSION_STATUS_IN_PROGRESS
        )

    @staticmethod
    def _is_participant(subject: Subject, resource: SessionResource) -> bool:
        return is_subject(subject, resource.mentor_id) or is_subject(
            subject, resource.mentee_id
        )

    # ------------------------------------------------------------------
    # Users
    def _user_read(self, subject: Subject, resource: UserResource, env: Environment) -> bool:
        if is_subject(subject, resource.id) or subject.role == ROLE_ADMIN:
            return True
        visibility = resource.profile_visibility
        if visibility == VISIBILITY_PUBLIC:
            return True
        if visibility == VISIBILITY_MENTORS:
            return subject.role == ROLE_MENTOR
        # private and unrecognised settings
        return False

    def _user_update(self, subject: Subject, resource: UserResource, env: Environment) -> bool:
        if is_admin_with(subject, PERMISSION_USER_MANAGEMENT):
            return True
        if not is_subject(subject, resource.id):
            return False
        # Users may edit their own profile but never change their own role
        return resource.target_role is None or resource.target_role == subject.role

    def _user_promote(self, subject: Subject, resource: UserResource, env: Environment) -> bool:
        return is_admin_with(subject, PERMISSION_USER_MANAGEMENT) and can_promote_to_role(
            subject, resource.target_role
        )

    def _user_suspend(self, subject: Subject, resource: UserResource, env: Environment) -> bool:
        return (
            is_admin_with(subject, PERMISSION_USER_MANAGEMENT)
            and resource.id is not None
            and not is_subject(subject, resource.id)
        )

    # ------------------------------------------------------------------
    # Applications
    def _application_create(
        self, subject: Subject, resource: ApplicationResource, env: Environment
    ) -> bool:
        return subject.attributes.available_for_mentoring and subject.role == ROLE_MENTEE

    def _application_read(
        self, subject: Subject, resource: ApplicationResource, env: Environment
    ) -> bool:
        return (
            is_subject(subject, resource.applicant_id)
            or is_subject(subject, resource.course_creator_id)
            or subject.role == ROLE_ADMIN
        )

    def _application_decide(
        self, subject: Subject, resource: ApplicationResource, env: Environment
    ) -> bool:
        return is_subject(subject, resource.course_creator_id) or is_admin_with(
            subject, PERMISSION_COURSE_APPROVAL
        )

    # ------------------------------------------------------------------
    # Analytics
    def _analytics_basic(self, subject: Subject, resource: AnalyticsResource, env: Environment) -> bool:
        return is_admin_with(subject, PERMISSION_SYSTEM_ANALYTICS)

    def _analytics_advanced(
        self, subject: Subject, resource: AnalyticsResource, env: Environment
    ) -> bool:
        return is_admin_with(subject, PERMISSION_SYSTEM_CONFIG)
