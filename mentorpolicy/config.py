from __future__ import annotations

import logging
import os
from datetime import timedelta
from typing import Any, Dict, List, Optional

import yaml
from pydantic import BaseModel, Field, field_validator

from .constants import (
    PERMISSION_COURSE_APPROVAL,
    PERMISSION_SYSTEM_ANALYTICS,
    PERMISSION_USER_MANAGEMENT,
    ROLE_ADMIN,
    ROLE_MENTEE,
    ROLE_MENTOR,
)


class RoleGrant(BaseModel):
    """Attributes granted to every user holding a role."""

    mentoring_capacity: int = 0
    can_create_courses: bool = False
    permissions: List[str] = Field(default_factory=list)
    available_for_mentoring: bool = False
    admin_level: Optional[str] = None


def default_role_grants() -> Dict[str, RoleGrant]:
    return {
        ROLE_MENTEE: RoleGrant(available_for_mentoring=True),
        ROLE_MENTOR: RoleGrant(
            mentoring_capacity=5,
            can_create_courses=True,
            available_for_mentoring=True,
        ),
        ROLE_ADMIN: RoleGrant(
            mentoring_capacity=5,
            can_create_courses=True,
            permissions=[
                PERMISSION_USER_MANAGEMENT,
                PERMISSION_COURSE_APPROVAL,
                PERMISSION_SYSTEM_ANALYTICS,
            ],
        ),
    }


class PolicyConfig(BaseModel):
    """Top-level configuration model."""

    database_url: Optional[str] = None
    log_level: str = "INFO"
    cancellation_window_hours: float = 24
    roles: Dict[str, RoleGrant] = Field(default_factory=default_role_grants)

    @field_validator("roles", mode="before")
    @classmethod
    def _merge_role_defaults(cls, value: Any) -> Any:
        """Layer configured fields over the default grant of each role."""
        if value is None:
            return default_role_grants()
        if not isinstance(value, dict):
            return value
        merged: Dict[str, Any] = dict(default_role_grants())
        for role, grant in value.items():
            if isinstance(grant, RoleGrant):
                supplied = grant.model_dump(exclude_unset=True)
            else:
                supplied = dict(grant or {})
            base = merged.get(role, RoleGrant())
            merged[role] = RoleGrant.model_validate({**base.model_dump(), **supplied})
        return merged

    @property
    def cancellation_window(self) -> timedelta:
        return timedelta(hours=self.cancellation_window_hours)


def load_config(path: Optional[str] = None) -> PolicyConfig:
    """Load configuration from YAML file.

    Args:
        path: Optional path to config file. Falls back to MENTORPOLICY_CONFIG
            env variable or 'mentorpolicy.yaml' in the current directory.
    """

    config_path = path or os.getenv("MENTORPOLICY_CONFIG", "mentorpolicy.yaml")
    if os.path.exists(config_path):
        with open(config_path) as f:
            data = yaml.safe_load(f) or {}
        config = PolicyConfig(**data)
    else:
        config = PolicyConfig()

    env_db_url = os.getenv("MENTORPOLICY_DATABASE_URL") or os.getenv("DATABASE_URL")
    if env_db_url:
        config.database_url = env_db_url
    env_level = os.getenv("MENTORPOLICY_LOG_LEVEL")
    if env_level:
        config.log_level = env_level
    return config


def configure_logging(level: Optional[str] = None) -> None:
    """Attach a basic stderr handler for command line use."""
    logging.basicConfig(
        level=(level or "INFO").upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
