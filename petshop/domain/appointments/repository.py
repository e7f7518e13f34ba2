"""Appointment repository - Database operations for appointments"""

import logging
from datetime import datetime
from typing import Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, joinedload

from ...models import ACTIVE_STATUSES, Appointment, AppointmentStatus, Pet, Service
from ...shared.exceptions import SlotTakenError
from ..policy import AllRecords, OwnedBy, Scope

logger = logging.getLogger(__name__)

ACTIVE_SLOT_INDEX = "uq_appointments_active_slot"


class AppointmentRepository:
    """Repository for appointment database operations"""

    @staticmethod
    def get_by_id(db: Session, appointment_id: str) -> Optional[Appointment]:
        """Get an appointment by ID, regardless of owner"""
        return (
            db.query(Appointment)
            .options(
                joinedload(Appointment.pet),
                joinedload(Appointment.service),
                joinedload(Appointment.user),
            )
            .filter(Appointment.id == appointment_id)
            .first()
        )

    @staticmethod
    def find_by_scope(db: Session, scope: Scope) -> list[Appointment]:
        """Get the appointments visible within a scope, oldest slot first"""
        query = db.query(Appointment).options(
            joinedload(Appointment.pet),
            joinedload(Appointment.service),
            joinedload(Appointment.user),
        )

        if isinstance(scope, OwnedBy):
            query = query.filter(Appointment.user_id == scope.user_id)
        elif not isinstance(scope, AllRecords):
            raise TypeError(f"Unsupported scope: {scope!r}")

        return query.order_by(Appointment.date.asc(), Appointment.id.asc()).all()

    @staticmethod
    def find_conflicting(db: Session, date: datetime) -> Optional[Appointment]:
        """Get the active appointment holding exactly this instant, if any"""
        return (
            db.query(Appointment)
            .filter(Appointment.date == date, Appointment.status.in_(ACTIVE_STATUSES))
            .first()
        )

    @staticmethod
    def create(db: Session, **appointment_data) -> Appointment:
        """
        Insert a new appointment.

        The active-slot unique index makes the insert itself the final
        conflict check: a concurrent booking that slipped past
        `find_conflicting` is rejected here.
        """
        appointment = Appointment(**appointment_data)
        db.add(appointment)
        try:
            db.commit()
        except IntegrityError as e:
            db.rollback()
            if _is_active_slot_violation(e):
                logger.warning(f"⚠️ Active slot already taken at {appointment_data.get('date')}")
                raise SlotTakenError() from e
            raise
        db.refresh(appointment)
        return appointment

    @staticmethod
    def update_status(db: Session, appointment: Appointment, status: AppointmentStatus) -> Appointment:
        """Persist a new status"""
        appointment.status = status
        try:
            db.commit()
        except IntegrityError as e:
            db.rollback()
            if _is_active_slot_violation(e):
                raise SlotTakenError() from e
            raise
        db.refresh(appointment)
        return appointment

    @staticmethod
    def delete(db: Session, appointment: Appointment) -> None:
        """Delete an appointment"""
        db.delete(appointment)
        db.commit()

    # Registry lookups
    @staticmethod
    def get_owned_pet(db: Session, pet_id: str, owner_id: str) -> Optional[Pet]:
        """Get a pet only if it belongs to the given user"""
        return db.query(Pet).filter(Pet.id == pet_id, Pet.owner_id == owner_id).first()

    @staticmethod
    def get_service(db: Session, service_id: str) -> Optional[Service]:
        """Get a service by ID"""
        return db.query(Service).filter(Service.id == service_id).first()


def _is_active_slot_violation(error: IntegrityError) -> bool:
    message = str(error.orig).lower()
    # PostgreSQL names the index; SQLite names the column
    return ACTIVE_SLOT_INDEX in message or "appointments.date" in message
