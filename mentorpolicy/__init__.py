"""mentorpolicy: attribute-based access control for a mentorship marketplace."""

from .audit import DecisionRecord, InMemoryAuditLog, LoggingAuditLog
from .evaluator import PolicyEvaluator, can_promote_to_role
from .models import (
    AnalyticsResource,
    ApplicationResource,
    CourseResource,
    Environment,
    PermissionContext,
    PolicyInput,
    SessionResource,
    Subject,
    SubjectAttributes,
    UserResource,
    parse_resource,
)
from .service import PolicyService
from .store import get_attribute_store

__version__ = "0.1.0"
__all__ = [
    "AnalyticsResource",
    "ApplicationResource",
    "CourseResource",
    "DecisionRecord",
    "Environment",
    "InMemoryAuditLog",
    "LoggingAuditLog",
    "PermissionContext",
    "PolicyEvaluator",
    "PolicyInput",
    "PolicyService",
    "SessionResource",
    "Subject",
    "SubjectAttributes",
    "UserResource",
    "can_promote_to_role",
    "get_attribute_store",
    "parse_resource",
]
