"""Appointment service - Business logic for the appointment lifecycle"""

import logging
from typing import Optional

from sqlalchemy.orm import Session

from ...config import STRICT_STATUS_TRANSITIONS
from ...models import Appointment, AppointmentStatus
from ...services.notification_service import NotificationPublisher, get_publisher
from ...shared.exceptions import ForbiddenError, NotFoundError
from ...shared.validators import to_utc_naive
from .. import policy
from ..policy import AllRecords, OwnedBy, Principal
from .conflicts import ConflictDetector
from .lifecycle import INITIAL_STATUS, intent_for, validate_transition
from .repository import AppointmentRepository
from .schemas import AppointmentCreate

logger = logging.getLogger(__name__)


class AppointmentService:
    """Service layer for appointment business logic"""

    def __init__(
        self,
        db: Session,
        publisher: Optional[NotificationPublisher] = None,
        strict_transitions: bool = STRICT_STATUS_TRANSITIONS,
    ):
        self.db = db
        self.repo = AppointmentRepository()
        self.conflicts = ConflictDetector(db, self.repo)
        self.publisher = publisher or get_publisher(db)
        self.strict_transitions = strict_transitions

    def create_appointment(self, data: AppointmentCreate, principal: Principal) -> Appointment:
        """Book a pet owned by the requester into a free timeslot"""
        if not policy.can_book(principal.role):
            raise ForbiddenError("Only clients can book appointments")

        logger.info(f"📥 Booking request from user {principal.user_id} for pet {data.petId}")

        pet = self.repo.get_owned_pet(self.db, data.petId, principal.user_id)
        if not pet:
            raise NotFoundError("Pet not found or does not belong to the user")

        service = self.repo.get_service(self.db, data.serviceId)
        if not service:
            raise NotFoundError("Service not found")

        slot = to_utc_naive(data.date)
        self.conflicts.ensure_bookable(slot)

        appointment = self.repo.create(
            self.db,
            pet_id=pet.id,
            service_id=service.id,
            user_id=principal.user_id,
            date=slot,
            status=INITIAL_STATUS,
        )
        logger.info(f"✅ Appointment {appointment.id} booked for {slot.isoformat()}")
        return appointment

    def list_appointments(self, principal: Principal) -> list[Appointment]:
        """Appointments visible to the requester"""
        scope = policy.scope_for(principal.role, principal.user_id)
        return self.repo.find_by_scope(self.db, scope)

    def get_appointment(self, appointment_id: str, principal: Principal) -> Appointment:
        """
        Get one appointment within the requester's scope.

        Records outside the scope are reported as missing, not forbidden.
        """
        scope = policy.scope_for(principal.role, principal.user_id)
        appointment = self.repo.get_by_id(self.db, appointment_id)

        if not appointment or not _in_scope(appointment, scope):
            raise NotFoundError("Appointment not found")
        return appointment

    def update_status(
        self, appointment_id: str, new_status: AppointmentStatus, principal: Principal
    ) -> Appointment:
        """Move an appointment to a new status and announce the change"""
        if not policy.can_change_status(principal.role):
            raise ForbiddenError("Only employees and admins can change appointment status")

        appointment = self.repo.get_by_id(self.db, appointment_id)
        if not appointment:
            raise NotFoundError("Appointment not found")

        previous = appointment.status
        validate_transition(previous, new_status, strict=self.strict_transitions)

        appointment = self.repo.update_status(self.db, appointment, new_status)
        logger.info(
            f"🔄 Appointment {appointment.id} {previous.value} -> {new_status.value} "
            f"by user {principal.user_id}"
        )

        if new_status is previous:
            return appointment

        intent = intent_for(appointment, new_status)
        if intent is not None:
            self._publish(intent)

        return appointment

    def delete_appointment(self, appointment_id: str, principal: Principal) -> None:
        """Delete an appointment regardless of its status"""
        if not policy.can_delete(principal.role):
            raise ForbiddenError("Only admins can delete appointments")

        appointment = self.repo.get_by_id(self.db, appointment_id)
        if not appointment:
            raise NotFoundError("Appointment not found")

        self.repo.delete(self.db, appointment)
        logger.info(f"🗑️ Appointment {appointment_id} deleted by user {principal.user_id}")

    def _publish(self, intent) -> None:
        # The status change is already committed; a delivery failure must not undo it
        try:
            self.publisher.publish(intent)
        except Exception as e:
            logger.error(
                f"❌ Failed to publish {intent.type.value} for appointment {intent.appointment_id}: {e}"
            )


def _in_scope(appointment: Appointment, scope) -> bool:
    if isinstance(scope, AllRecords):
        return True
    if isinstance(scope, OwnedBy):
        return appointment.user_id == scope.user_id
    return False
