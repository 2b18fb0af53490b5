"""
Course access evaluation: fetch one enrollment, classify it, explain it.

Read-only. Store failures never cross this boundary: the primary lookup
folds them into the no-access result, list queries degrade to [].
"""

import logging
from datetime import datetime, timezone
from typing import Any, Callable, List, Mapping, Optional, Protocol

from course_access.errors import ENROLLMENT_LOOKUP_FAILED, CourseAccessDeniedError
from course_access.models import (
    AccessResult,
    ActiveCourse,
    CourseSummary,
    Enrollment,
    SubscriptionEvent,
)
from course_access.policy import classify_enrollment, grants_access, no_access_result

logger = logging.getLogger(__name__)


class EnrollmentStore(Protocol):
    def find_enrollment(self, user_id: str, course_id: str) -> Optional[Mapping[str, Any]]: ...

    def find_active_enrollment_candidates(self, user_id: str) -> List[Mapping[str, Any]]: ...

    def list_subscription_events(self, user_id: str, course_id: str) -> List[Mapping[str, Any]]: ...


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class CourseAccessService:
    """Per-call entitlement classification over an injected enrollment store."""

    def __init__(
        self,
        store: EnrollmentStore,
        *,
        clock: Optional[Callable[[], datetime]] = None,
    ) -> None:
        self.store = store
        self._clock = clock or _utcnow

    def now(self) -> datetime:
        return self._clock()

    def check_course_access(
        self,
        user_id: str,
        course_id: str,
        *,
        now: Optional[datetime] = None,
    ) -> AccessResult:
        """
        Classify the user's access to the course at `now` (default: the clock).

        A missing enrollment and a failed lookup both yield status "none";
        the latter also sets error_code so callers can tell them apart.
        """
        try:
            record = self.store.find_enrollment(user_id, course_id)
            enrollment = Enrollment.from_record(record) if record else None
        except Exception as e:
            logger.exception(
                "Course access lookup failed",
                extra={"user_id": user_id, "course_id": course_id, "error": str(e)},
            )
            return no_access_result(error_code=ENROLLMENT_LOOKUP_FAILED)

        return classify_enrollment(enrollment, now=now or self.now())

    def require_course_access(self, user_id: str, course_id: str) -> AccessResult:
        """Same as check_course_access but raises CourseAccessDeniedError on denial."""
        result = self.check_course_access(user_id, course_id)
        if not result.has_access:
            raise CourseAccessDeniedError(user_id=user_id, course_id=course_id, result=result)
        return result

    def get_user_active_courses(self, user_id: str) -> List[ActiveCourse]:
        """
        Courses the user can open right now.

        The store over-selects (status active OR one-time); expiry is
        re-checked here against the current time.
        """
        try:
            records = self.store.find_active_enrollment_candidates(user_id)
        except Exception as e:
            logger.exception(
                "Failed to fetch active courses",
                extra={"user_id": user_id, "error": str(e)},
            )
            return []

        now = self.now()
        active: List[ActiveCourse] = []
        for record in records:
            try:
                enrollment = Enrollment.from_record(record)
                course = record.get("course")
                summary = CourseSummary.from_record(course) if course else None
            except ValueError as e:
                logger.warning(
                    "Skipping malformed enrollment row",
                    extra={"user_id": user_id, "error": str(e)},
                )
                continue
            if not grants_access(enrollment, now):
                continue
            active.append(ActiveCourse(enrollment=enrollment, course=summary))
        return active

    def get_subscription_history(self, user_id: str, course_id: str) -> List[SubscriptionEvent]:
        """Subscription lifecycle events for the pair, newest first."""
        try:
            records = self.store.list_subscription_events(user_id, course_id)
        except Exception as e:
            logger.exception(
                "Failed to fetch subscription history",
                extra={"user_id": user_id, "course_id": course_id, "error": str(e)},
            )
            return []

        events: List[SubscriptionEvent] = []
        for record in records:
            try:
                events.append(SubscriptionEvent.from_record(record))
            except ValueError as e:
                logger.warning(
                    "Skipping malformed subscription event row",
                    extra={"user_id": user_id, "course_id": course_id, "error": str(e)},
                )
        return events
