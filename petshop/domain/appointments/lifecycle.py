"""Appointment lifecycle state machine.

    SCHEDULED ──> CONFIRMED ──> COMPLETED
        │             │
        └─────────────┴──────> CANCELLED

COMPLETED and CANCELLED are terminal. Bookings always start as SCHEDULED.
"""

from typing import Optional

from ...models import Appointment, AppointmentStatus
from ...services.notification_service import (
    NotificationIntent,
    appointment_cancellation,
    appointment_confirmation,
)
from ...shared.exceptions import InvalidTransitionError

INITIAL_STATUS = AppointmentStatus.SCHEDULED

ALLOWED_TRANSITIONS: dict[AppointmentStatus, frozenset[AppointmentStatus]] = {
    AppointmentStatus.SCHEDULED: frozenset({AppointmentStatus.CONFIRMED, AppointmentStatus.CANCELLED}),
    AppointmentStatus.CONFIRMED: frozenset({AppointmentStatus.COMPLETED, AppointmentStatus.CANCELLED}),
    AppointmentStatus.COMPLETED: frozenset(),
    AppointmentStatus.CANCELLED: frozenset(),
}

TERMINAL_STATUSES = frozenset(
    status for status, successors in ALLOWED_TRANSITIONS.items() if not successors
)


def is_allowed(current: AppointmentStatus, new: AppointmentStatus) -> bool:
    return new in ALLOWED_TRANSITIONS[current]


def validate_transition(current: AppointmentStatus, new: AppointmentStatus, strict: bool = True) -> None:
    """
    Reject a status change the state machine does not allow.

    With `strict=False` every change is accepted and the caller's status is
    written as sent.
    """
    if not strict:
        return
    if not is_allowed(current, new):
        raise InvalidTransitionError(
            f"Cannot change appointment status from {current.value} to {new.value}"
        )


def intent_for(appointment: Appointment, new_status: AppointmentStatus) -> Optional[NotificationIntent]:
    """Notification announced when an appointment enters `new_status`"""
    if new_status is AppointmentStatus.CONFIRMED:
        return appointment_confirmation(appointment)
    if new_status is AppointmentStatus.CANCELLED:
        return appointment_cancellation(appointment)
    return None
