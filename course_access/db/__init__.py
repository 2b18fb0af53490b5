"""
Database layer: declarative base, course access tables and session factory.
"""

from course_access.db.base import Base, TimestampMixin
from course_access.db.tables import Course, SubscriptionEventRecord, UserCourse
from course_access.db.session import build_engine, get_db_session, get_session_factory

__all__ = [
    "Base",
    "TimestampMixin",
    "Course",
    "UserCourse",
    "SubscriptionEventRecord",
    "build_engine",
    "get_db_session",
    "get_session_factory",
]
