"""High-level permission checks backed by an attribute store.

:class:`PolicyService` resolves the acting user from an
:class:`~mentorpolicy.store.AttributeStore`, turns caller descriptors into
typed resources and delegates the decision to
:class:`~mentorpolicy.evaluator.PolicyEvaluator`. The acting user is always
passed explicitly; there is no notion of a process-wide current user.

Every failure on the way (unknown user, malformed resource, store errors)
collapses into a deny decision that is logged rather than raised.
"""

from __future__ import annotations

import logging
from typing import Any, Optional

from pydantic import ValidationError

from .audit import AuditLog, DecisionRecord
from .constants import (
    ROLE_GUEST,
    ROLE_MENTEE,
    ROLE_MENTOR,
    TAG_CREATE_COURSE,
    TAG_MANAGE_USERS,
    TAG_VIEW_ADVANCED_ANALYTICS,
    TAG_VIEW_ANALYTICS,
)
from .evaluator import PolicyEvaluator, can_promote_to_role
from .models import (
    AnalyticsResource,
    CourseResource,
    Environment,
    PermissionContext,
    SessionResource,
    UserResource,
    parse_environment,
    parse_resource,
)
from .store import AttributeStore

logger = logging.getLogger(__name__)

# Checks behind each permission-context tag, as (resource, action) pairs
_TAG_CHECKS = {
    TAG_CREATE_COURSE: (CourseResource(), "create"),
    # Promotion to mentor is the baseline every user manager can perform
    TAG_MANAGE_USERS: (UserResource(target_role=ROLE_MENTOR), "promote"),
    TAG_VIEW_ANALYTICS: (AnalyticsResource(), "view_basic"),
    TAG_VIEW_ADVANCED_ANALYTICS: (AnalyticsResource(), "view_advanced"),
}


class PolicyService:
    """Evaluate access for users resolved through an attribute store."""

    def __init__(
        self,
        store: AttributeStore,
        evaluator: Optional[PolicyEvaluator] = None,
        audit: Optional[AuditLog] = None,
    ) -> None:
        self.store = store
        self.evaluator = evaluator or PolicyEvaluator()
        self.audit = audit

    async def _record(
        self,
        subject_id: Optional[str],
        resource: Any,
        action: str,
        allowed: bool,
        reason: Optional[str] = None,
    ) -> None:
        if self.audit is None:
            return
        if isinstance(resource, dict):
            resource_type = resource.get("type")
        else:
            resource_type = getattr(resource, "type", None)
        try:
            await self.audit.record(
                DecisionRecord(
                    subject_id=subject_id,
                    resource_type=str(resource_type) if resource_type else None,
                    action=action,
                    allowed=allowed,
                    reason=reason,
                )
            )
        except Exception:
            logger.exception("Failed to record audit entry for %s", subject_id)

    async def evaluate_policy(
        self,
        resource: Any,
        action: str,
        environment: Environment | dict[str, Any] | None = None,
        subject_id: Optional[str] = None,
    ) -> bool:
        """Decide whether ``subject_id`` may perform ``action`` on ``resource``.

        ``resource`` may be a typed resource model or a plain descriptor such
        as ``{"type": "course", "data": {"creatorId": ...}}``. Returns
        ``False`` when no subject id is given or the subject cannot be
        resolved.
        """
        if not subject_id:
            await self._record(None, resource, action, False, "unauthenticated")
            return False

        reason: Optional[str] = None
        try:
            subject = await self.store.get_user_with_attributes(subject_id)
            if subject is None:
                allowed, reason = False, "unresolved_subject"
            else:
                allowed = self.evaluator.evaluate(
                    subject,
                    parse_resource(resource),
                    action,
                    parse_environment(environment),
                )
        except ValidationError as exc:
            logger.warning(
                "Rejecting malformed policy input for %s/%s: %s",
                subject_id,
                action,
                exc.errors(include_url=False),
            )
            allowed, reason = False, "invalid_input"
        except Exception:
            logger.exception("ABAC policy evaluation error for subject %s", subject_id)
            allowed, reason = False, "error"

        if not allowed:
            logger.debug("Denied %s on %r for %s", action, resource, subject_id)
        await self._record(subject_id, resource, action, allowed, reason)
        return allowed

    async def get_user_role(self, subject_id: Optional[str] = None) -> str:
        if not subject_id:
            return ROLE_GUEST
        try:
            subject = await self.store.get_user_with_attributes(subject_id)
        except Exception:
            logger.exception("Error getting role for %s", subject_id)
            return ROLE_GUEST
        if subject is None:
            return ROLE_GUEST
        return subject.role or ROLE_MENTEE

    # ------------------------------------------------------------------
    # Convenience checks
    async def can_user_create_course(self, subject_id: Optional[str] = None) -> bool:
        resource, action = _TAG_CHECKS[TAG_CREATE_COURSE]
        return await self.evaluate_policy(resource, action, subject_id=subject_id)

    async def can_user_manage_users(self, subject_id: Optional[str] = None) -> bool:
        resource, action = _TAG_CHECKS[TAG_MANAGE_USERS]
        return await self.evaluate_policy(resource, action, subject_id=subject_id)

    async def can_user_view_analytics(
        self, subject_id: Optional[str] = None, level: str = "basic"
    ) -> bool:
        tag = TAG_VIEW_ANALYTICS if level == "basic" else TAG_VIEW_ADVANCED_ANALYTICS
        resource, action = _TAG_CHECKS[tag]
        return await self.evaluate_policy(resource, action, subject_id=subject_id)

    async def _course_check(self, course_id: str, action: str, subject_id: Optional[str]) -> bool:
        try:
            course = await self.store.get_course(course_id)
        except Exception:
            logger.exception("Error loading course %s for %s check", course_id, action)
            return False
        if course is None:
            logger.debug("Course %s not found", course_id)
            return False
        resource = CourseResource(
            course_id=course.course_id, creator_id=course.mentor_id, status=course.status
        )
        return await self.evaluate_policy(resource, action, subject_id=subject_id)

    async def can_user_access_course(
        self, course_id: str, subject_id: Optional[str] = None
    ) -> bool:
        return await self._course_check(course_id, "read", subject_id)

    async def can_user_edit_course(
        self, course_id: str, subject_id: Optional[str] = None
    ) -> bool:
        return await self._course_check(course_id, "update", subject_id)

    async def can_user_access_session(
        self,
        session: SessionResource | dict[str, Any],
        subject_id: Optional[str] = None,
    ) -> bool:
        if isinstance(session, dict):
            session = {**session, "type": "session"}
        return await self.evaluate_policy(session, "read", subject_id=subject_id)

    async def can_promote_to_role(
        self, target_role: str, subject_id: Optional[str] = None
    ) -> bool:
        """Tier check alone, without the admin permission requirement of ``promote``."""
        if not subject_id:
            return False
        try:
            subject = await self.store.get_user_with_attributes(subject_id)
        except Exception:
            logger.exception("Error resolving %s for promotion check", subject_id)
            return False
        return subject is not None and can_promote_to_role(subject, target_role)

    # ------------------------------------------------------------------
    async def get_permission_context(
        self, subject_id: Optional[str] = None
    ) -> PermissionContext:
        """Summarise what ``subject_id`` may do as a flat list of tags.

        The subject is resolved once and every tag is evaluated against that
        snapshot, so the tags always agree with the reported role and
        attributes. The order of the returned tags carries no meaning.
        """
        if not subject_id:
            return PermissionContext(is_authenticated=False, role=ROLE_GUEST)

        try:
            subject = await self.store.get_user_with_attributes(subject_id)
            if subject is None:
                return PermissionContext(is_authenticated=True, role=ROLE_GUEST)
            permissions = [
                tag
                for tag, (resource, action) in _TAG_CHECKS.items()
                if self.evaluator.evaluate(subject, resource, action)
            ]
        except Exception as exc:
            logger.exception("Error getting permission context for %s", subject_id)
            return PermissionContext(is_authenticated=False, role=ROLE_GUEST, error=str(exc))

        return PermissionContext(
            is_authenticated=True,
            role=subject.role,
            permissions=permissions,
            attributes=subject.attributes,
            current_load=subject.current_load,
            capacity=subject.attributes.mentoring_capacity,
        )
