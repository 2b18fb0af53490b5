"""
Relational schema read by the course access store.

courses, user_courses (one row per user x course) and subscription_events.
Subscription type and status are stored as plain strings; parsing into enums
happens in course_access.models.
"""

import uuid

from sqlalchemy import JSON, Column, DateTime, ForeignKey, Index, String, Text, UniqueConstraint
from sqlalchemy.orm import relationship

from course_access.db.base import Base, TimestampMixin, utcnow


def _uuid() -> str:
    return str(uuid.uuid4())


class Course(Base, TimestampMixin):
    """Course catalog entry. Only the summary fields used for access listings."""

    __tablename__ = "courses"

    id = Column(String(255), primary_key=True, default=_uuid)
    title = Column(String(500), nullable=False)
    description = Column(Text, nullable=True)
    thumbnail_url = Column(String(1000), nullable=True)
    payment_type = Column(String(50), nullable=True, comment="one_time or subscription")

    def to_summary(self) -> dict:
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "thumbnail_url": self.thumbnail_url,
            "payment_type": self.payment_type,
        }

    def __repr__(self) -> str:
        return f"<Course(id={self.id}, title={self.title})>"


class UserCourse(Base, TimestampMixin):
    """Enrollment linking a user to a course with its subscription metadata."""

    __tablename__ = "user_courses"

    id = Column(String(255), primary_key=True, default=_uuid)
    user_id = Column(String(255), nullable=False, index=True)
    course_id = Column(String(255), ForeignKey("courses.id"), nullable=False, index=True)

    subscription_type = Column(String(50), nullable=False, default="one_time")
    subscription_status = Column(String(50), nullable=True)
    subscription_expires_at = Column(DateTime(timezone=True), nullable=True)
    next_billing_date = Column(DateTime(timezone=True), nullable=True)
    last_payment_date = Column(DateTime(timezone=True), nullable=True)
    canceled_at = Column(DateTime(timezone=True), nullable=True)

    course = relationship(Course, lazy="joined")

    __table_args__ = (
        UniqueConstraint("user_id", "course_id", name="uq_user_courses_user_course"),
        Index("ix_user_courses_user_status", "user_id", "subscription_status"),
    )

    def to_record(self) -> dict:
        return {
            "id": self.id,
            "user_id": self.user_id,
            "course_id": self.course_id,
            "subscription_type": self.subscription_type,
            "subscription_status": self.subscription_status,
            "subscription_expires_at": self.subscription_expires_at,
            "next_billing_date": self.next_billing_date,
            "last_payment_date": self.last_payment_date,
            "canceled_at": self.canceled_at,
        }

    def __repr__(self) -> str:
        return (
            f"<UserCourse(user_id={self.user_id}, course_id={self.course_id}, "
            f"type={self.subscription_type}, status={self.subscription_status})>"
        )


class SubscriptionEventRecord(Base):
    """Append-only subscription lifecycle event (created, renewed, canceled, ...)."""

    __tablename__ = "subscription_events"

    id = Column(String(255), primary_key=True, default=_uuid)
    enrollment_id = Column(String(255), ForeignKey("user_courses.id"), nullable=True)
    user_id = Column(String(255), nullable=False)
    course_id = Column(String(255), nullable=False)
    event_type = Column(String(100), nullable=False)
    transaction_id = Column(String(255), nullable=True)
    subscription_id = Column(String(255), nullable=True)
    payload = Column(JSON, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)

    __table_args__ = (
        Index("ix_subscription_events_user_course_created", "user_id", "course_id", "created_at"),
    )

    def to_record(self) -> dict:
        return {
            "id": self.id,
            "enrollment_id": self.enrollment_id,
            "user_id": self.user_id,
            "course_id": self.course_id,
            "event_type": self.event_type,
            "transaction_id": self.transaction_id,
            "subscription_id": self.subscription_id,
            "payload": self.payload,
            "created_at": self.created_at,
        }
