"""
Pydantic schemas for the course access API.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from course_access.formatting import (
    format_subscription_status,
    format_subscription_type,
    get_days_until_expiration,
)
from course_access.models import AccessResult, ActiveCourse, SubscriptionEvent


class AccessResultResponse(BaseModel):
    """Entitlement of the current user to one course."""

    course_id: str = Field(..., description="Course identifier")
    has_access: bool = Field(..., description="Whether the user may view the course now")
    status: str = Field(..., description="active, canceled, expired, suspended, past_due, none")
    status_label: str = Field(..., description="Display label for status")
    subscription_type: str = Field(..., description="one_time, monthly, quarterly, semiannual, annual")
    subscription_type_label: str = Field(..., description="Display label for subscription_type")
    expires_at: Optional[datetime] = Field(None, description="Subscription expiry, null if permanent")
    days_until_expiration: Optional[int] = Field(None, description="Whole days left, never negative")
    is_expired: bool = Field(..., description="Whether the expiry date has passed")
    next_billing_date: Optional[datetime] = Field(None, description="Informational next charge date")
    message: str = Field(..., description="Human-readable explanation")
    error_code: Optional[str] = Field(None, description="Set when the enrollment lookup failed")

    @classmethod
    def from_result(
        cls,
        course_id: str,
        result: AccessResult,
        now: Optional[datetime] = None,
    ) -> "AccessResultResponse":
        return cls(
            course_id=course_id,
            has_access=result.has_access,
            status=result.status,
            status_label=format_subscription_status(result.status),
            subscription_type=result.subscription_type.value,
            subscription_type_label=format_subscription_type(result.subscription_type),
            expires_at=result.expires_at,
            days_until_expiration=get_days_until_expiration(result.expires_at, now=now),
            is_expired=result.is_expired,
            next_billing_date=result.next_billing_date,
            message=result.message,
            error_code=result.error_code,
        )


class CourseSummaryResponse(BaseModel):
    id: str
    title: str
    description: Optional[str] = None
    thumbnail_url: Optional[str] = None
    payment_type: Optional[str] = None


class ActiveCourseResponse(BaseModel):
    """An enrollment currently granting access."""

    course_id: str = Field(..., description="Course identifier")
    subscription_type: str = Field(..., description="Billing type")
    subscription_type_label: str = Field(..., description="Display label for subscription_type")
    subscription_status: str = Field(..., description="Billing status")
    subscription_expires_at: Optional[datetime] = Field(None, description="Expiry, null if permanent")
    next_billing_date: Optional[datetime] = Field(None, description="Informational next charge date")
    course: Optional[CourseSummaryResponse] = Field(None, description="Joined course summary")

    @classmethod
    def from_active_course(cls, active: ActiveCourse) -> "ActiveCourseResponse":
        enrollment = active.enrollment
        course = None
        if active.course is not None:
            course = CourseSummaryResponse(
                id=active.course.id,
                title=active.course.title,
                description=active.course.description,
                thumbnail_url=active.course.thumbnail_url,
                payment_type=active.course.payment_type,
            )
        return cls(
            course_id=enrollment.course_id,
            subscription_type=enrollment.subscription_type.value,
            subscription_type_label=format_subscription_type(enrollment.subscription_type),
            subscription_status=enrollment.subscription_status.value,
            subscription_expires_at=enrollment.subscription_expires_at,
            next_billing_date=enrollment.next_billing_date,
            course=course,
        )


class ActiveCourseListResponse(BaseModel):
    courses: List[ActiveCourseResponse] = Field(..., description="Courses the user can open now")
    total: int = Field(..., description="Number of courses")


class SubscriptionEventResponse(BaseModel):
    id: str
    event_type: str
    created_at: Optional[datetime] = None
    transaction_id: Optional[str] = None
    subscription_id: Optional[str] = None
    payload: Dict[str, Any] = Field(default_factory=dict)

    @classmethod
    def from_event(cls, event: SubscriptionEvent) -> "SubscriptionEventResponse":
        return cls(
            id=event.id,
            event_type=event.event_type,
            created_at=event.created_at,
            transaction_id=event.transaction_id,
            subscription_id=event.subscription_id,
            payload=dict(event.payload),
        )


class SubscriptionHistoryResponse(BaseModel):
    course_id: str = Field(..., description="Course identifier")
    events: List[SubscriptionEventResponse] = Field(..., description="Events, newest first")
