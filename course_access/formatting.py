"""
Display helpers for subscription metadata. Pure, no I/O.
"""

import math
from datetime import datetime, timezone
from enum import Enum
from typing import Dict, Optional, Union

from course_access.config import SECONDS_PER_DAY
from course_access.models import parse_timestamp

SUBSCRIPTION_TYPE_LABELS: Dict[str, str] = {
    "one_time": "Pago Único",
    "monthly": "Mensual",
    "quarterly": "Trimestral",
    "semiannual": "Semestral",
    "annual": "Anual",
}

SUBSCRIPTION_STATUS_LABELS: Dict[str, str] = {
    "active": "Activa",
    "canceled": "Cancelada",
    "expired": "Expirada",
    "suspended": "Suspendida",
    "past_due": "Pago Pendiente",
    "none": "Sin Acceso",
}


def _key(value: Union[str, Enum]) -> str:
    if isinstance(value, Enum):
        return str(value.value)
    return str(value)


def format_subscription_type(subscription_type: Union[str, Enum]) -> str:
    """Label for a subscription type; unknown keys are returned unchanged."""
    key = _key(subscription_type)
    return SUBSCRIPTION_TYPE_LABELS.get(key, key)


def format_subscription_status(status: Union[str, Enum]) -> str:
    """Label for a subscription or access status; unknown keys are returned unchanged."""
    key = _key(status)
    return SUBSCRIPTION_STATUS_LABELS.get(key, key)


def days_between(start: datetime, end: datetime) -> int:
    """Whole days from start to end, rounded up. Negative when end is in the past."""
    return math.ceil((end - start).total_seconds() / SECONDS_PER_DAY)


def get_days_until_expiration(
    expires_at: Union[datetime, str, None],
    now: Optional[datetime] = None,
) -> Optional[int]:
    """
    Days left until expiry, never negative.

    Returns None when there is no expiry date.
    """
    expires = parse_timestamp(expires_at)
    if expires is None:
        return None
    days = days_between(now or datetime.now(timezone.utc), expires)
    return days if days > 0 else 0
