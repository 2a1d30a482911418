"""User profile, promotion and suspension rules."""

import pytest

from mentorpolicy.evaluator import PolicyEvaluator, can_promote_to_role
from mentorpolicy.models import Subject, SubjectAttributes, UserResource


def _admin(subject_id="adm", level=None, permissions=("user_management",)):
    return Subject(
        id=subject_id,
        role="admin",
        attributes=SubjectAttributes(admin_level=level, permissions=list(permissions)),
    )


def _user(subject_id, role="mentee"):
    return Subject(id=subject_id, role=role)


@pytest.fixture
def evaluator():
    return PolicyEvaluator()


@pytest.mark.parametrize(
    "visibility, mentee_ok, mentor_ok",
    [
        ("public", True, True),
        ("mentors", False, True),
        ("private", False, False),
        ("friends-only", False, False),
    ],
)
def test_profile_visibility(evaluator, visibility, mentee_ok, mentor_ok):
    profile = UserResource(id="target", profile_visibility=visibility)
    assert evaluator.evaluate(_user("a"), profile, "read") is mentee_ok
    assert evaluator.evaluate(_user("b", role="mentor"), profile, "read") is mentor_ok
    assert evaluator.evaluate(_user("target"), profile, "read")
    assert evaluator.evaluate(_admin(permissions=()), profile, "read")


def test_visibility_read_from_preferences(evaluator):
    profile = UserResource.model_validate(
        {"id": "target", "preferences": {"profileVisibility": "private"}}
    )
    assert profile.profile_visibility == "private"
    assert not evaluator.evaluate(_user("a"), profile, "read")


def test_self_update_allowed_without_role_change(evaluator):
    assert evaluator.evaluate(_user("me"), UserResource(id="me"), "update")
    same_role = UserResource(id="me", target_role="mentee")
    assert evaluator.evaluate(_user("me"), same_role, "update")


def test_self_role_change_requires_admin(evaluator):
    escalate = UserResource(id="me", target_role="admin")
    assert not evaluator.evaluate(_user("me"), escalate, "update")
    assert evaluator.evaluate(_admin(), UserResource(id="other", target_role="mentor"), "update")


def test_other_user_update_requires_user_management(evaluator):
    assert not evaluator.evaluate(_user("a"), UserResource(id="b"), "update")
    assert not evaluator.evaluate(_admin(permissions=()), UserResource(id="b"), "update")


@pytest.mark.parametrize("level", ["basic", "senior"])
def test_lower_tiers_cannot_promote_to_admin(evaluator, level):
    admin = _admin(level=level)
    assert not evaluator.evaluate(admin, UserResource(id="u", target_role="admin"), "promote")
    assert evaluator.evaluate(admin, UserResource(id="u", target_role="mentor"), "promote")


def test_super_admin_promotes_to_any_role(evaluator):
    admin = _admin(level="super")
    for role in ("mentee", "mentor", "admin"):
        assert evaluator.evaluate(admin, UserResource(id="u", target_role=role), "promote")


def test_missing_admin_level_denies_promotion(evaluator):
    assert not evaluator.evaluate(_admin(level=None), UserResource(target_role="mentor"), "promote")


def test_promotion_requires_user_management(evaluator):
    admin = _admin(level="super", permissions=("course_approval",))
    assert not evaluator.evaluate(admin, UserResource(target_role="mentor"), "promote")


def test_promotion_to_unknown_role_denied():
    assert not can_promote_to_role(_admin(level="super"), "owner")
    assert not can_promote_to_role(_admin(level="super"), None)


def test_suspend_other_user_only(evaluator):
    admin = _admin()
    assert evaluator.evaluate(admin, UserResource(id="u"), "suspend")
    assert not evaluator.evaluate(admin, UserResource(id="adm"), "suspend")
    assert not evaluator.evaluate(admin, UserResource(), "suspend")
    assert not evaluator.evaluate(_user("a"), UserResource(id="u"), "suspend")
