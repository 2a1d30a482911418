"""Simple example showing course and session checks for a few users."""

import asyncio
from datetime import datetime, timedelta, timezone

from mentorpolicy import PolicyService
from mentorpolicy.store import CourseRecord, InMemoryAttributeStore, UserRecord


async def main():
    """Course permission walkthrough."""
    # Seed an attribute store
    store = InMemoryAttributeStore()
    store.add_user(UserRecord(id="m-1", userid="maria", role="mentor"))
    store.add_user(UserRecord(id="s-1", userid="sam", role="mentee"))
    store.add_user(UserRecord(id="a-1", userid="ada", role="admin", admin_level="super"))
    store.add_course(CourseRecord(course_id="101", mentor_id="m-1", status="draft"))

    service = PolicyService(store)

    # Draft courses are visible to their creator and to admins only
    for user in ("maria", "sam", "ada"):
        allowed = await service.can_user_access_course("101", subject_id=user)
        print(f"{user:>6} can read draft course 101: {allowed}")

    # Sessions can be cancelled up to 24 hours ahead
    now = datetime.now(timezone.utc)
    session = {
        "type": "session",
        "mentorId": "m-1",
        "menteeId": "s-1",
        "scheduledAt": (now + timedelta(hours=30)).isoformat(),
    }
    print("sam can cancel:", await service.evaluate_policy(session, "cancel", {"time": now}, "sam"))

    context = await service.get_permission_context("ada")
    print(f"ada permissions: {sorted(context.permissions)}")


if __name__ == "__main__":
    asyncio.run(main())
