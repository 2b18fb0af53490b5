"""
Course access error hierarchy.

Provides:
- CourseAccessError: base for all course access failures
- CourseAccessDeniedError: the user is not entitled to the course (fail-fast guards)
- EnrollmentLookupError: the enrollment store could not be queried
- EnrollmentRecordError: a store row is missing identity fields
"""

from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from course_access.models import AccessResult


COURSE_ACCESS_DENIED = "COURSE_ACCESS_DENIED"
ENROLLMENT_LOOKUP_FAILED = "ENROLLMENT_LOOKUP_FAILED"


class CourseAccessError(Exception):
    """Base exception for course access failures."""

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class CourseAccessDeniedError(CourseAccessError):
    """
    Raised by require_course_access when the user has no access.

    The message is the human-readable explanation derived for the user.
    """

    def __init__(self, user_id: str, course_id: str, result: "AccessResult"):
        self.user_id = user_id
        self.course_id = course_id
        self.result = result
        self.error_code = COURSE_ACCESS_DENIED
        super().__init__(result.message)

    def to_dict(self) -> dict:
        return {
            "error": self.error_code,
            "message": self.message,
            "course_id": self.course_id,
            "status": self.result.status,
        }


class EnrollmentLookupError(CourseAccessError):
    """Raised by the store when the underlying query fails."""

    def __init__(
        self,
        user_id: str,
        course_id: Optional[str] = None,
        cause: Optional[Exception] = None,
    ):
        self.user_id = user_id
        self.course_id = course_id
        self.cause = cause
        self.error_code = ENROLLMENT_LOOKUP_FAILED
        target = f"{user_id}/{course_id}" if course_id else user_id
        super().__init__(f"Enrollment lookup failed for {target}: {cause}")


class EnrollmentRecordError(CourseAccessError, ValueError):
    """Raised when a store row cannot be parsed into a typed record."""

    def __init__(self, message: str, field: Optional[str] = None):
        self.field = field
        super().__init__(message)
