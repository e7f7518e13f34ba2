"""Appointment router - FastAPI endpoints for appointment operations"""

import logging

from fastapi import Depends, Response
from sqlalchemy.orm import Session

from ...auth import get_current_principal
from ...database import get_db
from ...models import Role
from ...routing import Route, build_router
from .. import policy
from ..policy import Principal
from .projections import booking_view, scoped_view, staff_view
from .schemas import AppointmentCreate, AppointmentResponse, AppointmentStatusUpdate
from .service import AppointmentService

logger = logging.getLogger(__name__)


def get_appointment_service(db: Session = Depends(get_db)) -> AppointmentService:
    """Dependency injection for AppointmentService"""
    return AppointmentService(db)


async def create_appointment(
    data: AppointmentCreate,
    principal: Principal = Depends(get_current_principal),
    service: AppointmentService = Depends(get_appointment_service),
):
    """Book an appointment for one of the caller's pets"""
    return booking_view(service.create_appointment(data, principal))


async def list_appointments(
    principal: Principal = Depends(get_current_principal),
    service: AppointmentService = Depends(get_appointment_service),
):
    """List appointments: own bookings for clients, everything for staff"""
    include_owner = policy.includes_owner_profile(principal.role)
    return [scoped_view(a, include_owner) for a in service.list_appointments(principal)]


async def get_appointment(
    appointment_id: str,
    principal: Principal = Depends(get_current_principal),
    service: AppointmentService = Depends(get_appointment_service),
):
    """Get a specific appointment"""
    appointment = service.get_appointment(appointment_id, principal)
    return scoped_view(appointment, policy.includes_owner_profile(principal.role))


async def update_appointment_status(
    appointment_id: str,
    data: AppointmentStatusUpdate,
    principal: Principal = Depends(get_current_principal),
    service: AppointmentService = Depends(get_appointment_service),
):
    """Change an appointment's status"""
    return staff_view(service.update_status(appointment_id, data.status, principal))


async def delete_appointment(
    appointment_id: str,
    principal: Principal = Depends(get_current_principal),
    service: AppointmentService = Depends(get_appointment_service),
):
    """Delete an appointment"""
    service.delete_appointment(appointment_id, principal)
    return Response(status_code=204)


ALL_ROLES = frozenset({Role.CLIENT, Role.EMPLOYEE, Role.ADMIN})
STAFF = frozenset({Role.EMPLOYEE, Role.ADMIN})

ROUTES = [
    Route("POST", "", frozenset({Role.CLIENT}), create_appointment,
          status_code=201, response_model=AppointmentResponse, summary="createAppointment"),
    Route("GET", "", ALL_ROLES, list_appointments,
          response_model=list[AppointmentResponse], summary="listAppointments"),
    Route("GET", "/{appointment_id}", ALL_ROLES, get_appointment,
          response_model=AppointmentResponse, summary="getAppointment"),
    Route("PATCH", "/{appointment_id}", STAFF, update_appointment_status,
          response_model=AppointmentResponse, summary="updateAppointmentStatus"),
    Route("DELETE", "/{appointment_id}", frozenset({Role.ADMIN}), delete_appointment,
          status_code=204, summary="deleteAppointment"),
]

router = build_router("/appointments", ["Appointments"], ROUTES)

__all__ = [
    "router",
    "ROUTES",
    "create_appointment",
    "list_appointments",
    "get_appointment",
    "update_appointment_status",
    "delete_appointment",
]
