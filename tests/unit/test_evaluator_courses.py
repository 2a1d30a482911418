"""Course rules of the policy evaluator."""

import pytest

from mentorpolicy.evaluator import PolicyEvaluator
from mentorpolicy.models import CourseResource, Subject, SubjectAttributes


def _subject(role="mentor", subject_id="u-1", load=0, capacity=5, permissions=(), create=True):
    return Subject(
        id=subject_id,
        role=role,
        current_load=load,
        attributes=SubjectAttributes(
            mentoring_capacity=capacity,
            can_create_courses=create,
            permissions=list(permissions),
        ),
    )


@pytest.fixture
def evaluator():
    return PolicyEvaluator()


def test_mentor_below_capacity_can_create(evaluator):
    assert evaluator.evaluate(_subject(load=4, capacity=5), CourseResource(), "create")


def test_mentor_at_capacity_cannot_create(evaluator):
    assert not evaluator.evaluate(_subject(load=5, capacity=5), CourseResource(), "create")


def test_mentee_cannot_create_even_with_flag(evaluator):
    mentee = _subject(role="mentee", capacity=5, create=True)
    assert not evaluator.evaluate(mentee, CourseResource(), "create")


def test_create_requires_course_creation_attribute(evaluator):
    assert not evaluator.evaluate(_subject(create=False), CourseResource(), "create")


@pytest.mark.parametrize("status", ["draft", "archived", None])
def test_unpublished_course_readable_only_by_owner_or_admin(evaluator, status):
    course = CourseResource(creator_id="owner", status=status)
    assert evaluator.evaluate(_subject(subject_id="owner"), course, "read")
    assert evaluator.evaluate(_subject(role="admin", subject_id="adm"), course, "read")
    assert not evaluator.evaluate(_subject(subject_id="other"), course, "read")
    assert not evaluator.evaluate(_subject(role="mentee", subject_id="m"), course, "read")


def test_published_course_readable_by_anyone(evaluator):
    course = CourseResource(creator_id="owner", status="published")
    assert evaluator.evaluate(_subject(role="mentee", subject_id="m"), course, "read")


def test_update_by_owner_or_approving_admin(evaluator):
    course = CourseResource(creator_id="owner")
    assert evaluator.evaluate(_subject(subject_id="owner"), course, "update")
    approver = _subject(role="admin", subject_id="adm", permissions=["course_approval"])
    assert evaluator.evaluate(approver, course, "update")
    plain_admin = _subject(role="admin", subject_id="adm")
    assert not evaluator.evaluate(plain_admin, course, "update")


def test_admin_without_course_approval_cannot_delete(evaluator):
    course = CourseResource(creator_id="adm")
    admin = _subject(role="admin", subject_id="adm", permissions=["user_management"])
    assert not evaluator.evaluate(admin, course, "delete")


def test_owner_cannot_delete_without_admin_permission(evaluator):
    course = CourseResource(creator_id="owner")
    assert not evaluator.evaluate(_subject(subject_id="owner"), course, "delete")
    approver = _subject(role="admin", subject_id="adm", permissions=["course_approval"])
    assert evaluator.evaluate(approver, course, "delete")


def test_publish_by_owning_mentor_or_approving_admin(evaluator):
    course = CourseResource(creator_id="owner", status="draft")
    assert evaluator.evaluate(_subject(subject_id="owner"), course, "publish")
    # an owning admin without the permission is not enough
    owning_admin = _subject(role="admin", subject_id="owner")
    assert not evaluator.evaluate(owning_admin, course, "publish")
    approver = _subject(role="admin", subject_id="adm", permissions=["course_approval"])
    assert evaluator.evaluate(approver, course, "publish")


def test_missing_creator_never_matches(evaluator):
    assert not evaluator.evaluate(_subject(subject_id="owner"), CourseResource(), "update")


def test_unknown_action_denied(evaluator):
    approver = _subject(role="admin", permissions=["course_approval"])
    assert not evaluator.evaluate(approver, CourseResource(), "archive")
