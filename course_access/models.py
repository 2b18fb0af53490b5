from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from types import MappingProxyType
from typing import Any, Mapping, Optional, Union

from course_access.errors import EnrollmentRecordError


class SubscriptionType(str, Enum):
    """Billing type of an enrollment."""

    ONE_TIME = "one_time"
    MONTHLY = "monthly"
    QUARTERLY = "quarterly"
    SEMIANNUAL = "semiannual"
    ANNUAL = "annual"
    UNKNOWN = "unknown"

    @classmethod
    def parse(cls, raw: Any) -> "SubscriptionType":
        return _parse_enum(cls, raw)


class SubscriptionStatus(str, Enum):
    """Billing status of a recurring enrollment."""

    ACTIVE = "active"
    CANCELED = "canceled"
    EXPIRED = "expired"
    SUSPENDED = "suspended"
    PAST_DUE = "past_due"
    UNKNOWN = "unknown"

    @classmethod
    def parse(cls, raw: Any) -> "SubscriptionStatus":
        return _parse_enum(cls, raw)


AccessStatus = str  # a SubscriptionStatus value or "none"
NO_ACCESS_STATUS = "none"


def _parse_enum(enum_cls, raw: Any):
    if isinstance(raw, enum_cls):
        return raw
    if raw is None:
        return enum_cls.UNKNOWN
    # exact match, same as the store-side filters
    try:
        return enum_cls(str(raw))
    except ValueError:
        return enum_cls.UNKNOWN


def parse_timestamp(raw: Union[datetime, str, None]) -> Optional[datetime]:
    """Parse a store timestamp into an aware UTC datetime. Naive values are UTC."""
    if raw is None or raw == "":
        return None
    if isinstance(raw, datetime):
        value = raw
    else:
        text = str(raw).strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        value = datetime.fromisoformat(text)
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def _required_id(record: Mapping[str, Any], key: str) -> str:
    value = str(record.get(key) or "").strip()
    if not value:
        raise EnrollmentRecordError(f"{key} is required", field=key)
    return value


def _optional_str(value: Any) -> Optional[str]:
    if value is None:
        return None
    return str(value)


@dataclass(frozen=True)
class CourseSummary:
    """Course fields joined onto active enrollments."""

    id: str
    title: str
    description: Optional[str] = None
    thumbnail_url: Optional[str] = None
    payment_type: Optional[str] = None

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> "CourseSummary":
        return cls(
            id=_required_id(record, "id"),
            title=str(record.get("title") or ""),
            description=record.get("description"),
            thumbnail_url=record.get("thumbnail_url"),
            payment_type=record.get("payment_type"),
        )


@dataclass(frozen=True)
class Enrollment:
    """Typed view of a user_courses row."""

    user_id: str
    course_id: str
    subscription_type: SubscriptionType
    subscription_status: SubscriptionStatus
    subscription_expires_at: Optional[datetime] = None
    next_billing_date: Optional[datetime] = None
    id: Optional[str] = None
    last_payment_date: Optional[datetime] = None
    canceled_at: Optional[datetime] = None

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> "Enrollment":
        return cls(
            user_id=_required_id(record, "user_id"),
            course_id=_required_id(record, "course_id"),
            subscription_type=SubscriptionType.parse(record.get("subscription_type")),
            subscription_status=SubscriptionStatus.parse(record.get("subscription_status")),
            subscription_expires_at=parse_timestamp(record.get("subscription_expires_at")),
            next_billing_date=parse_timestamp(record.get("next_billing_date")),
            id=_optional_str(record.get("id")),
            last_payment_date=parse_timestamp(record.get("last_payment_date")),
            canceled_at=parse_timestamp(record.get("canceled_at")),
        )

    def is_expired(self, now: datetime) -> bool:
        if self.subscription_expires_at is None:
            return False
        return self.subscription_expires_at <= now


@dataclass(frozen=True)
class ActiveCourse:
    """An enrollment that currently grants access, with its course summary."""

    enrollment: Enrollment
    course: Optional[CourseSummary]


@dataclass(frozen=True)
class SubscriptionEvent:
    """Historical lifecycle event for a user x course subscription."""

    id: str
    user_id: str
    course_id: str
    event_type: str
    created_at: Optional[datetime]
    enrollment_id: Optional[str] = None
    transaction_id: Optional[str] = None
    subscription_id: Optional[str] = None
    payload: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "payload", MappingProxyType(dict(self.payload or {})))

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> "SubscriptionEvent":
        return cls(
            id=_required_id(record, "id"),
            user_id=_required_id(record, "user_id"),
            course_id=_required_id(record, "course_id"),
            event_type=str(record.get("event_type") or ""),
            created_at=parse_timestamp(record.get("created_at")),
            enrollment_id=_optional_str(record.get("enrollment_id")),
            transaction_id=_optional_str(record.get("transaction_id")),
            subscription_id=_optional_str(record.get("subscription_id")),
            payload=record.get("payload") or {},
        )


@dataclass(frozen=True)
class AccessResult:
    """Derived entitlement for one user x course at one instant. Never persisted."""

    has_access: bool
    status: AccessStatus
    expires_at: Optional[datetime]
    is_expired: bool
    subscription_type: SubscriptionType
    next_billing_date: Optional[datetime]
    message: str
    error_code: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "has_access": self.has_access,
            "status": self.status,
            "expires_at": self.expires_at.isoformat() if self.expires_at else None,
            "is_expired": self.is_expired,
            "subscription_type": self.subscription_type.value,
            "next_billing_date": self.next_billing_date.isoformat() if self.next_billing_date else None,
            "message": self.message,
            "error_code": self.error_code,
        }
