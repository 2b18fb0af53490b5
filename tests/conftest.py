"""
Shared pytest fixtures for course access tests.
"""

from datetime import datetime, timezone

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from course_access.db.base import Base
from course_access.service import CourseAccessService

FIXED_NOW = datetime(2025, 3, 15, 12, 0, 0, tzinfo=timezone.utc)


class FakeEnrollmentStore:
    """In-memory stand-in for SqlEnrollmentStore."""

    def __init__(self, enrollments=None, events=None, fail_with=None):
        self.enrollments = list(enrollments or [])
        self.events = list(events or [])
        self.fail_with = fail_with
        self.calls = []

    def _maybe_fail(self):
        if self.fail_with is not None:
            raise self.fail_with

    def find_enrollment(self, user_id, course_id):
        self.calls.append(("find_enrollment", user_id, course_id))
        self._maybe_fail()
        for row in self.enrollments:
            if row["user_id"] == user_id and row["course_id"] == course_id:
                return dict(row)
        return None

    def find_active_enrollment_candidates(self, user_id):
        self.calls.append(("find_active_enrollment_candidates", user_id))
        self._maybe_fail()
        return [
            dict(row)
            for row in self.enrollments
            if row["user_id"] == user_id
            and (row.get("subscription_status") == "active" or row.get("subscription_type") == "one_time")
        ]

    def list_subscription_events(self, user_id, course_id):
        self.calls.append(("list_subscription_events", user_id, course_id))
        self._maybe_fail()
        rows = [e for e in self.events if e["user_id"] == user_id and e["course_id"] == course_id]
        return sorted(rows, key=lambda e: e["created_at"], reverse=True)


def make_enrollment_row(
    subscription_type="monthly",
    subscription_status="active",
    expires_at=None,
    user_id="user-1",
    course_id="course-1",
    **extra,
):
    row = {
        "id": f"{user_id}:{course_id}",
        "user_id": user_id,
        "course_id": course_id,
        "subscription_type": subscription_type,
        "subscription_status": subscription_status,
        "subscription_expires_at": expires_at,
        "next_billing_date": expires_at,
    }
    row.update(extra)
    return row


@pytest.fixture
def now():
    return FIXED_NOW


@pytest.fixture
def make_row():
    return make_enrollment_row


@pytest.fixture
def store_factory():
    return FakeEnrollmentStore


@pytest.fixture
def fake_store():
    return FakeEnrollmentStore()


@pytest.fixture
def service(fake_store, now):
    return CourseAccessService(fake_store, clock=lambda: now)


@pytest.fixture(scope="module")
def engine():
    """In-memory SQLite engine that lives for the whole test module."""
    eng = create_engine("sqlite:///:memory:", echo=False)
    import course_access.db.tables  # noqa: F401

    Base.metadata.create_all(bind=eng)
    return eng


@pytest.fixture
def db(engine):
    """Function-scoped session rolled back at the end of each test."""
    connection = engine.connect()
    transaction = connection.begin()
    Session = sessionmaker(autocommit=False, autoflush=False, bind=connection)
    session = Session()

    yield session

    session.close()
    transaction.rollback()
    connection.close()
