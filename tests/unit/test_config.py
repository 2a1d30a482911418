"""Tests for configuration loading."""

from datetime import timedelta

from mentorpolicy.config import PolicyConfig, RoleGrant, load_config
from mentorpolicy.store import SQLiteAttributeStore, get_attribute_store
import mentorpolicy.store as store


def test_load_config_from_env(tmp_path, monkeypatch):
    config_path = tmp_path / "mentorpolicy.yaml"
    config_path.write_text(
        """
log_level: DEBUG
cancellation_window_hours: 12
roles:
  admin:
    permissions: [course_approval]
    admin_level: senior
"""
    )
    monkeypatch.setenv("MENTORPOLICY_CONFIG", str(config_path))
    monkeypatch.delenv("MENTORPOLICY_DATABASE_URL", raising=False)
    monkeypatch.delenv("DATABASE_URL", raising=False)
    monkeypatch.delenv("MENTORPOLICY_LOG_LEVEL", raising=False)

    config = load_config()
    assert config.log_level == "DEBUG"
    assert config.cancellation_window == timedelta(hours=12)
    assert config.roles["admin"].permissions == ["course_approval"]
    assert config.roles["admin"].admin_level == "senior"
    # roles left out of the file keep their defaults
    assert config.roles["mentor"].mentoring_capacity == 5
    assert config.roles["mentee"].available_for_mentoring is True


def test_missing_file_uses_defaults(tmp_path, monkeypatch):
    monkeypatch.setenv("MENTORPOLICY_CONFIG", str(tmp_path / "absent.yaml"))
    monkeypatch.delenv("MENTORPOLICY_DATABASE_URL", raising=False)
    monkeypatch.delenv("DATABASE_URL", raising=False)

    config = load_config()
    assert config.database_url is None
    assert config.cancellation_window == timedelta(hours=24)
    assert "course_approval" in config.roles["admin"].permissions
    assert config.roles["admin"].admin_level is None


def test_env_overrides_database_url_and_level(tmp_path, monkeypatch):
    monkeypatch.setenv("MENTORPOLICY_CONFIG", str(tmp_path / "absent.yaml"))
    monkeypatch.setenv("MENTORPOLICY_DATABASE_URL", f"sqlite://{tmp_path / 'p.db'}")
    monkeypatch.setenv("MENTORPOLICY_LOG_LEVEL", "WARNING")

    config = load_config()
    assert config.database_url.startswith("sqlite://")
    assert config.log_level == "WARNING"

    store._store_instance = None
    try:
        assert isinstance(get_attribute_store(config=config), SQLiteAttributeStore)
    finally:
        store._store_instance = None



def test_partial_role_override_keeps_defaults(tmp_path, monkeypatch):
    config_path = tmp_path / "mentorpolicy.yaml"
    config_path.write_text(
        """
roles:
  admin:
    admin_level: super
  mentor:
    mentoring_capacity: 2
"""
    )
    monkeypatch.setenv("MENTORPOLICY_CONFIG", str(config_path))
    monkeypatch.delenv("MENTORPOLICY_DATABASE_URL", raising=False)
    monkeypatch.delenv("DATABASE_URL", raising=False)

    config = load_config()
    admin = config.roles["admin"]
    assert admin.admin_level == "super"
    assert admin.can_create_courses is True
    assert admin.mentoring_capacity == 5
    assert set(admin.permissions) == {
        "user_management",
        "course_approval",
        "system_analytics",
    }
    mentor = config.roles["mentor"]
    assert mentor.mentoring_capacity == 2
    assert mentor.can_create_courses is True
    assert mentor.available_for_mentoring is True


def test_role_grant_models_merge_over_defaults():
    config = PolicyConfig(roles={"admin": RoleGrant(admin_level="senior")})
    assert config.roles["admin"].admin_level == "senior"
    assert "user_management" in config.roles["admin"].permissions
    assert config.roles["mentee"].available_for_mentoring is True
