"""
Course access endpoints and page-guard dependency.

The caller's identity is read from request.state.user_id, which the auth
middleware in front of this router is expected to set.
"""

import logging
from typing import Callable

from fastapi import APIRouter, Depends, HTTPException, Request, status
from sqlalchemy.orm import Session

from course_access.db.session import get_db_session
from course_access.errors import CourseAccessDeniedError
from course_access.models import AccessResult
from course_access.schemas import (
    AccessResultResponse,
    ActiveCourseListResponse,
    ActiveCourseResponse,
    SubscriptionEventResponse,
    SubscriptionHistoryResponse,
)
from course_access.service import CourseAccessService
from course_access.store import SqlEnrollmentStore

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/courses", tags=["course-access"])


def get_course_access_service(db_session: Session = Depends(get_db_session)) -> CourseAccessService:
    return CourseAccessService(SqlEnrollmentStore(db_session))


def current_user_id(request: Request) -> str:
    user_id = getattr(request.state, "user_id", None)
    if user_id:
        return str(user_id)
    raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Missing user context")


def require_course_access_dependency(path_param: str = "course_id") -> Callable:
    """
    Factory for a dependency that blocks the route unless the user has access.

    Args:
        path_param: Name of the path parameter carrying the course id

    Returns:
        FastAPI dependency that raises 402 when not entitled, else returns the AccessResult
    """

    def check_access(
        request: Request,
        service: CourseAccessService = Depends(get_course_access_service),
    ) -> AccessResult:
        user_id = current_user_id(request)
        course_id = request.path_params.get(path_param)
        if not course_id:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Missing course id")
        try:
            return service.require_course_access(user_id, course_id)
        except CourseAccessDeniedError as e:
            logger.warning(
                "Course access denied",
                extra={"user_id": user_id, "course_id": course_id, "status": e.result.status},
            )
            raise HTTPException(
                status_code=status.HTTP_402_PAYMENT_REQUIRED,
                detail=e.to_dict(),
            ) from e

    return check_access


@router.get("/active", response_model=ActiveCourseListResponse)
def list_active_courses(
    request: Request,
    service: CourseAccessService = Depends(get_course_access_service),
) -> ActiveCourseListResponse:
    """Courses the current user can open right now."""
    user_id = current_user_id(request)
    courses = service.get_user_active_courses(user_id)
    return ActiveCourseListResponse(
        courses=[ActiveCourseResponse.from_active_course(c) for c in courses],
        total=len(courses),
    )


@router.get("/{course_id}/access", response_model=AccessResultResponse)
def get_course_access(
    course_id: str,
    request: Request,
    service: CourseAccessService = Depends(get_course_access_service),
) -> AccessResultResponse:
    """Entitlement of the current user to the course. Never fails on denial."""
    user_id = current_user_id(request)
    now = service.now()
    result = service.check_course_access(user_id, course_id, now=now)
    return AccessResultResponse.from_result(course_id, result, now=now)


@router.get("/{course_id}/subscription-history", response_model=SubscriptionHistoryResponse)
def get_subscription_history(
    course_id: str,
    request: Request,
    service: CourseAccessService = Depends(get_course_access_service),
) -> SubscriptionHistoryResponse:
    user_id = current_user_id(request)
    events = service.get_subscription_history(user_id, course_id)
    return SubscriptionHistoryResponse(
        course_id=course_id,
        events=[SubscriptionEventResponse.from_event(e) for e in events],
    )
