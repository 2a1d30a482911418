"""Subject, resource and environment models consumed by the policy evaluator."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Annotated, Any, Literal, Optional, Union

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    TypeAdapter,
    field_validator,
    model_validator,
)

from .constants import ADMIN_LEVELS, ROLE_MENTEE, ROLES, VISIBILITY_PUBLIC

Role = Literal["mentee", "mentor", "admin"]
AdminLevel = Literal["basic", "senior", "super"]


def _as_utc(value: datetime) -> datetime:
    """Treat naive datetimes as UTC so comparisons never mix offsets."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class SubjectAttributes(BaseModel):
    """Derived attributes of the acting user."""

    experience: int = 0
    skills: list[str] = Field(default_factory=list)
    location: str = ""
    department: str = ""
    mentoring_capacity: int = 0
    can_create_courses: bool = False
    permissions: list[str] = Field(default_factory=list)
    admin_level: Optional[AdminLevel] = None
    available_for_mentoring: bool = False

    @field_validator("admin_level", mode="before")
    @classmethod
    def _known_admin_level(cls, value: Any) -> Any:
        if value not in ADMIN_LEVELS:
            return None
        return value


class Subject(BaseModel):
    """The acting user as seen by a single policy check."""

    id: str
    role: Role = ROLE_MENTEE
    attributes: SubjectAttributes = Field(default_factory=SubjectAttributes)
    current_load: int = 0
    email: Optional[str] = None

    @field_validator("id", mode="before")
    @classmethod
    def _stringify_id(cls, value: Any) -> Any:
        return str(value) if value is not None else value

    @field_validator("role", mode="before")
    @classmethod
    def _least_privileged_role(cls, value: Any) -> Any:
        # Unknown or missing roles fall back to the least privileged one
        if isinstance(value, str) and value.lower() in ROLES:
            return value.lower()
        return ROLE_MENTEE

    def has_permission(self, permission: str) -> bool:
        return permission in self.attributes.permissions


class Environment(BaseModel):
    """Context of the request: evaluation time, system load and extras."""

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    time: datetime = Field(default_factory=_utcnow)
    system_load: str = Field(default="normal", alias="systemLoad")

    @field_validator("time", mode="before")
    @classmethod
    def _default_time(cls, value: Any) -> Any:
        return _utcnow() if value is None else value

    @field_validator("time")
    @classmethod
    def _aware_time(cls, value: datetime) -> datetime:
        return _as_utc(value)


class _ResourceBase(BaseModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True, extra="ignore")

    @field_validator(
        "id",
        "course_id",
        "creator_id",
        "mentor_id",
        "mentee_id",
        "applicant_id",
        "course_creator_id",
        mode="before",
        check_fields=False,
    )
    @classmethod
    def _stringify_ids(cls, value: Any) -> Any:
        # Database drivers hand back UUID and int keys; rules compare strings
        return str(value) if value is not None else None


class CourseResource(_ResourceBase):
    type: Literal["course"] = "course"
    course_id: Optional[str] = Field(default=None, alias="courseId")
    creator_id: Optional[str] = Field(default=None, alias="creatorId")
    status: Optional[str] = None


class SessionResource(_ResourceBase):
    type: Literal["session"] = "session"
    mentor_id: Optional[str] = Field(default=None, alias="mentorId")
    mentee_id: Optional[str] = Field(default=None, alias="menteeId")
    scheduled_at: Optional[datetime] = Field(default=None, alias="scheduledAt")
    status: Optional[str] = None

    @field_validator("scheduled_at")
    @classmethod
    def _aware_schedule(cls, value: Optional[datetime]) -> Optional[datetime]:
        return _as_utc(value) if value is not None else None


class UserResource(_ResourceBase):
    type: Literal["user"] = "user"
    id: Optional[str] = None
    target_role: Optional[str] = Field(default=None, alias="targetRole")
    profile_visibility: Optional[str] = Field(
        default=VISIBILITY_PUBLIC, alias="profileVisibility"
    )

    @field_validator("profile_visibility", mode="before")
    @classmethod
    def _public_when_unset(cls, value: Any) -> Any:
        return VISIBILITY_PUBLIC if value is None else value

    @model_validator(mode="before")
    @classmethod
    def _lift_preferences(cls, data: Any) -> Any:
        """Accept ``preferences.profileVisibility`` as stored on user profiles."""
        if isinstance(data, dict) and isinstance(data.get("preferences"), dict):
            visibility = data["preferences"].get("profileVisibility")
            if visibility is not None:
                data = {**data, "profile_visibility": visibility}
        return data


class ApplicationResource(_ResourceBase):
    type: Literal["application"] = "application"
    applicant_id: Optional[str] = Field(default=None, alias="applicantId")
    course_creator_id: Optional[str] = Field(default=None, alias="courseCreatorId")
    course_id: Optional[str] = Field(default=None, alias="courseId")


class AnalyticsResource(_ResourceBase):
    type: Literal["analytics"] = "analytics"


Resource = Annotated[
    Union[
        CourseResource,
        SessionResource,
        UserResource,
        ApplicationResource,
        AnalyticsResource,
    ],
    Field(discriminator="type"),
]

_RESOURCE_ADAPTER: TypeAdapter[Resource] = TypeAdapter(Resource)


def parse_resource(resource: Any) -> Resource:
    """Build a typed resource from a model or a plain descriptor.

    Descriptors may be flat (``{"type": "course", "creatorId": ...}``) or carry
    their fields under ``data`` (``{"type": "course", "data": {...}}``).
    Raises :class:`pydantic.ValidationError` for unknown resource types.
    """
    if isinstance(resource, _ResourceBase):
        return resource  # type: ignore[return-value]
    if isinstance(resource, dict) and isinstance(resource.get("data"), dict):
        resource = {**resource["data"], "type": resource.get("type")}
    return _RESOURCE_ADAPTER.validate_python(resource)


def parse_environment(environment: Environment | dict[str, Any] | None) -> Environment:
    if environment is None:
        return Environment()
    if isinstance(environment, Environment):
        return environment
    return Environment.model_validate(environment)


class PolicyInput(BaseModel):
    """Everything a single evaluation sees."""

    subject: Subject
    resource: Resource
    action: str
    environment: Environment = Field(default_factory=Environment)


class PermissionContext(BaseModel):
    """UI-facing summary of what a user may do."""

    is_authenticated: bool
    role: str
    permissions: list[str] = Field(default_factory=list)
    attributes: Optional[SubjectAttributes] = None
    current_load: Optional[int] = None
    capacity: Optional[int] = None
    error: Optional[str] = None
