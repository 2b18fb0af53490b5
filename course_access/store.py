"""
SQLAlchemy-backed enrollment store.

Returns plain mappings so the service can parse rows at its boundary and
tests can swap in any object exposing the same three methods.
"""

from typing import Any, Dict, List, Optional

from sqlalchemy import or_
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from course_access.db.tables import SubscriptionEventRecord, UserCourse
from course_access.errors import EnrollmentLookupError
from course_access.models import SubscriptionStatus, SubscriptionType


class SqlEnrollmentStore:
    """Reads user_courses and subscription_events through a SQLAlchemy session."""

    def __init__(self, db_session: Session):
        self.db = db_session

    def find_enrollment(self, user_id: str, course_id: str) -> Optional[Dict[str, Any]]:
        """Single enrollment for the pair, or None."""
        try:
            row = (
                self.db.query(UserCourse)
                .filter(
                    UserCourse.user_id == user_id,
                    UserCourse.course_id == course_id,
                )
                .one_or_none()
            )
        except SQLAlchemyError as e:
            raise EnrollmentLookupError(user_id, course_id, cause=e) from e
        return row.to_record() if row is not None else None

    def find_active_enrollment_candidates(self, user_id: str) -> List[Dict[str, Any]]:
        """
        Enrollments that may grant access: status active OR one-time purchase.

        Over-selects on purpose; expiry is refined by the caller.
        Each row carries a nested "course" summary.
        """
        try:
            rows = (
                self.db.query(UserCourse)
                .filter(
                    UserCourse.user_id == user_id,
                    or_(
                        UserCourse.subscription_status == SubscriptionStatus.ACTIVE.value,
                        UserCourse.subscription_type == SubscriptionType.ONE_TIME.value,
                    ),
                )
                .all()
            )
        except SQLAlchemyError as e:
            raise EnrollmentLookupError(user_id, cause=e) from e

        records = []
        for row in rows:
            record = row.to_record()
            record["course"] = row.course.to_summary() if row.course is not None else None
            records.append(record)
        return records

    def list_subscription_events(self, user_id: str, course_id: str) -> List[Dict[str, Any]]:
        """Subscription events for the pair, newest first."""
        try:
            rows = (
                self.db.query(SubscriptionEventRecord)
                .filter(
                    SubscriptionEventRecord.user_id == user_id,
                    SubscriptionEventRecord.course_id == course_id,
                )
                .order_by(SubscriptionEventRecord.created_at.desc())
                .all()
            )
        except SQLAlchemyError as e:
            raise EnrollmentLookupError(user_id, course_id, cause=e) from e
        return [row.to_record() for row in rows]
