"""
SqlEnrollmentStore against a real SQLite in-memory database.
"""

from datetime import datetime, timedelta, timezone
from unittest.mock import MagicMock

import pytest
from sqlalchemy import UniqueConstraint
from sqlalchemy.exc import OperationalError

from course_access.db.tables import Course, SubscriptionEventRecord, UserCourse
from course_access.errors import EnrollmentLookupError
from course_access.service import CourseAccessService
from course_access.store import SqlEnrollmentStore

NOW = datetime(2025, 3, 15, 12, 0, 0, tzinfo=timezone.utc)


def _seed(db):
    db.add_all([
        Course(id="py", title="Python 101", payment_type="subscription"),
        Course(id="js", title="JavaScript", payment_type="one_time"),
        Course(id="go", title="Go", payment_type="subscription"),
        Course(id="rs", title="Rust", payment_type="subscription"),
    ])
    db.flush()
    db.add_all([
        UserCourse(user_id="u1", course_id="py", subscription_type="monthly",
                   subscription_status="active", subscription_expires_at=NOW + timedelta(days=5)),
        UserCourse(user_id="u1", course_id="js", subscription_type="one_time", subscription_status=None),
        UserCourse(user_id="u1", course_id="go", subscription_type="annual",
                   subscription_status="active", subscription_expires_at=NOW - timedelta(days=1)),
        UserCourse(user_id="u1", course_id="rs", subscription_type="annual",
                   subscription_status="canceled", subscription_expires_at=NOW + timedelta(days=10)),
        UserCourse(user_id="u2", course_id="py", subscription_type="one_time"),
    ])
    db.flush()


def test_find_enrollment_returns_row_mapping(db):
    _seed(db)
    store = SqlEnrollmentStore(db)

    record = store.find_enrollment("u1", "py")

    assert record["subscription_type"] == "monthly"
    assert record["subscription_status"] == "active"
    assert record["subscription_expires_at"] is not None


def test_find_enrollment_missing_pair_returns_none(db):
    _seed(db)

    assert SqlEnrollmentStore(db).find_enrollment("u2", "go") is None


def test_user_course_pair_is_unique():
    constraints = [
        c for c in UserCourse.__table__.constraints if isinstance(c, UniqueConstraint)
    ]

    assert [sorted(col.name for col in c.columns) for c in constraints] == [["course_id", "user_id"]]


def test_active_candidates_over_select_status_or_one_time(db):
    _seed(db)

    records = SqlEnrollmentStore(db).find_active_enrollment_candidates("u1")

    # expired-but-active "go" is still returned; canceled "rs" is not
    assert sorted(r["course_id"] for r in records) == ["go", "js", "py"]
    by_course = {r["course_id"]: r for r in records}
    assert by_course["py"]["course"]["title"] == "Python 101"


def test_service_refines_candidates_from_database(db):
    _seed(db)
    service = CourseAccessService(SqlEnrollmentStore(db), clock=lambda: NOW)

    active = service.get_user_active_courses("u1")

    assert sorted(a.enrollment.course_id for a in active) == ["js", "py"]


def test_service_classifies_rows_read_back_from_sqlite(db):
    _seed(db)
    service = CourseAccessService(SqlEnrollmentStore(db), clock=lambda: NOW)

    assert service.check_course_access("u1", "py").has_access is True
    assert service.check_course_access("u1", "go").is_expired is True
    canceled = service.check_course_access("u1", "rs")
    assert canceled.has_access is False
    assert canceled.is_expired is False


@pytest.mark.parametrize(
    "subscription_type,subscription_status",
    [("monthly", "Active"), ("monthly", " active"), ("ONE_TIME", None), (" one_time", "active")],
)
def test_check_and_active_list_agree_on_non_canonical_values(db, subscription_type, subscription_status):
    db.add(Course(id="py", title="Python 101"))
    db.flush()
    db.add(UserCourse(user_id="u1", course_id="py", subscription_type=subscription_type,
                      subscription_status=subscription_status,
                      subscription_expires_at=NOW + timedelta(days=5)))
    db.flush()
    service = CourseAccessService(SqlEnrollmentStore(db), clock=lambda: NOW)

    has_access = service.check_course_access("u1", "py").has_access
    listed = [a.enrollment.course_id for a in service.get_user_active_courses("u1")]

    assert has_access == ("py" in listed)


def test_subscription_events_newest_first(db):
    _seed(db)
    db.add_all([
        SubscriptionEventRecord(id="old", user_id="u1", course_id="py",
                                event_type="subscription_created", created_at=NOW - timedelta(days=30)),
        SubscriptionEventRecord(id="new", user_id="u1", course_id="py",
                                event_type="subscription_renewed", created_at=NOW - timedelta(days=1),
                                payload={"transaction": "HP123"}),
        SubscriptionEventRecord(id="other", user_id="u1", course_id="js",
                                event_type="payment_approved", created_at=NOW),
    ])
    db.flush()

    records = SqlEnrollmentStore(db).list_subscription_events("u1", "py")

    assert [r["id"] for r in records] == ["new", "old"]
    assert records[0]["payload"] == {"transaction": "HP123"}


def test_sqlalchemy_errors_are_wrapped():
    session = MagicMock()
    session.query.side_effect = OperationalError("SELECT", {}, Exception("connection refused"))
    store = SqlEnrollmentStore(session)

    with pytest.raises(EnrollmentLookupError) as exc:
        store.find_enrollment("u1", "py")

    assert exc.value.error_code == "ENROLLMENT_LOOKUP_FAILED"
    assert exc.value.course_id == "py"

    with pytest.raises(EnrollmentLookupError):
        store.find_active_enrollment_candidates("u1")
    with pytest.raises(EnrollmentLookupError):
        store.list_subscription_events("u1", "py")
