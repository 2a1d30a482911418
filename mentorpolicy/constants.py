"""Shared names used by the policy evaluator and its callers."""

from datetime import timedelta

ROLE_MENTEE = "mentee"
ROLE_MENTOR = "mentor"
ROLE_ADMIN = "admin"
ROLE_GUEST = "guest"
ROLES = (ROLE_MENTEE, ROLE_MENTOR, ROLE_ADMIN)

ADMIN_LEVEL_BASIC = "basic"
ADMIN_LEVEL_SENIOR = "senior"
ADMIN_LEVEL_SUPER = "super"
ADMIN_LEVELS = (ADMIN_LEVEL_BASIC, ADMIN_LEVEL_SENIOR, ADMIN_LEVEL_SUPER)

PERMISSION_COURSE_APPROVAL = "course_approval"
PERMISSION_USER_MANAGEMENT = "user_management"
PERMISSION_SYSTEM_ANALYTICS = "system_analytics"
PERMISSION_SYSTEM_CONFIG = "system_config"

COURSE_STATUS_PUBLISHED = "published"
COURSE_STATUS_ARCHIVED = "archived"
SESSION_STATUS_IN_PROGRESS = "in_progress"

VISIBILITY_PUBLIC = "public"
VISIBILITY_MENTORS = "mentors"
VISIBILITY_PRIVATE = "private"

DEFAULT_CANCELLATION_WINDOW = timedelta(hours=24)

# Tags reported by PolicyService.get_permission_context
TAG_CREATE_COURSE = "create_course"
TAG_MANAGE_USERS = "manage_users"
TAG_VIEW_ANALYTICS = "view_analytics"
TAG_VIEW_ADVANCED_ANALYTICS = "view_advanced_analytics"
