"""
Course access: entitlement classification for course enrollments.

This package provides:
- CourseAccessService: check / require access, active courses, subscription history
- classify_enrollment: pure decision over one enrollment at one instant
- SqlEnrollmentStore: SQLAlchemy reads of user_courses and subscription_events
- Display helpers for subscription types, statuses and days left
- FastAPI router and page-guard dependency (course_access.api)
"""

from course_access.errors import (
    CourseAccessDeniedError,
    CourseAccessError,
    EnrollmentLookupError,
    EnrollmentRecordError,
)
from course_access.formatting import (
    format_subscription_status,
    format_subscription_type,
    get_days_until_expiration,
)
from course_access.models import (
    AccessResult,
    ActiveCourse,
    CourseSummary,
    Enrollment,
    SubscriptionEvent,
    SubscriptionStatus,
    SubscriptionType,
)
from course_access.policy import classify_enrollment, grants_access
from course_access.service import CourseAccessService
from course_access.store import SqlEnrollmentStore

__all__ = [
    # Service
    "CourseAccessService",
    "SqlEnrollmentStore",
    # Policy
    "classify_enrollment",
    "grants_access",
    # Models
    "AccessResult",
    "ActiveCourse",
    "CourseSummary",
    "Enrollment",
    "SubscriptionEvent",
    "SubscriptionStatus",
    "SubscriptionType",
    # Formatting
    "format_subscription_status",
    "format_subscription_type",
    "get_days_until_expiration",
    # Errors
    "CourseAccessError",
    "CourseAccessDeniedError",
    "EnrollmentLookupError",
    "EnrollmentRecordError",
]
