"""
Course access policy.

Classifies an enrollment into an AccessResult. One-time purchases grant
permanent access; recurring subscriptions need an active status and an
unexpired timestamp.
"""

from datetime import datetime, timezone
from typing import Optional

from course_access.formatting import days_between
from course_access.models import (
    NO_ACCESS_STATUS,
    AccessResult,
    Enrollment,
    SubscriptionStatus,
    SubscriptionType,
)

NO_ENROLLMENT_MESSAGE = "No tienes acceso a este curso. Por favor, realiza la compra."
PERMANENT_ACCESS_MESSAGE = "Tienes acceso completo a este curso."
ACTIVE_MESSAGE = "Tu suscripción está activa."
CANCELED_EXPIRED_MESSAGE = "Tu suscripción ha sido cancelada y ha expirado. Renueva para continuar."
CANCELED_GRACE_MESSAGE = (
    "Tu suscripción está cancelada pero aún tienes acceso hasta la fecha de expiración."
)
EXPIRED_MESSAGE = "Tu suscripción ha expirado. Renueva para continuar accediendo al contenido."
SUSPENDED_MESSAGE = "Tu suscripción está suspendida. Por favor, verifica tu método de pago."
PAST_DUE_MESSAGE = "Tu suscripción tiene un pago pendiente. Por favor, actualiza tu método de pago."


def no_access_result(error_code: Optional[str] = None) -> AccessResult:
    """Result for a user with no enrollment (or whose enrollment could not be read)."""
    return AccessResult(
        has_access=False,
        status=NO_ACCESS_STATUS,
        expires_at=None,
        is_expired=False,
        subscription_type=SubscriptionType.ONE_TIME,
        next_billing_date=None,
        message=NO_ENROLLMENT_MESSAGE,
        error_code=error_code,
    )


def grants_access(enrollment: Enrollment, now: datetime) -> bool:
    """True when the enrollment grants access at `now`."""
    if enrollment.subscription_type is SubscriptionType.ONE_TIME:
        return True
    if enrollment.subscription_status is not SubscriptionStatus.ACTIVE:
        return False
    return not enrollment.is_expired(now)


def active_message(expires_at: Optional[datetime], now: datetime) -> str:
    if expires_at is None:
        return ACTIVE_MESSAGE
    days_left = days_between(now, expires_at)
    suffix = "" if days_left == 1 else "s"
    return f"{ACTIVE_MESSAGE} Expira en {days_left} día{suffix}."


def denial_message(status: SubscriptionStatus, is_expired: bool) -> str:
    """Explanation for a recurring enrollment without access, by priority."""
    if status is SubscriptionStatus.CANCELED:
        return CANCELED_EXPIRED_MESSAGE if is_expired else CANCELED_GRACE_MESSAGE
    if status is SubscriptionStatus.EXPIRED or is_expired:
        return EXPIRED_MESSAGE
    if status is SubscriptionStatus.SUSPENDED:
        return SUSPENDED_MESSAGE
    if status is SubscriptionStatus.PAST_DUE:
        return PAST_DUE_MESSAGE
    return ""


def classify_enrollment(
    enrollment: Optional[Enrollment],
    now: Optional[datetime] = None,
) -> AccessResult:
    """Evaluate in order: no enrollment -> one-time -> recurring status and expiry."""
    if enrollment is None:
        return no_access_result()

    if enrollment.subscription_type is SubscriptionType.ONE_TIME:
        return AccessResult(
            has_access=True,
            status=SubscriptionStatus.ACTIVE.value,
            expires_at=None,
            is_expired=False,
            subscription_type=SubscriptionType.ONE_TIME,
            next_billing_date=None,
            message=PERMANENT_ACCESS_MESSAGE,
        )

    compare_at = now or datetime.now(timezone.utc)
    status = enrollment.subscription_status
    is_expired = enrollment.is_expired(compare_at)
    has_access = status is SubscriptionStatus.ACTIVE and not is_expired

    if has_access:
        message = active_message(enrollment.subscription_expires_at, compare_at)
    else:
        message = denial_message(status, is_expired)

    return AccessResult(
        has_access=has_access,
        status=status.value,
        expires_at=enrollment.subscription_expires_at,
        is_expired=is_expired,
        subscription_type=enrollment.subscription_type,
        next_billing_date=enrollment.next_billing_date,
        message=message,
    )
