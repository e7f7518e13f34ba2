"""Explicit response projections for appointments.

Each operation states which related records it attaches. Fields that are
not attached stay unset, so routes serialize with `exclude_unset` and the
key is absent rather than null.
"""

from ...models import Appointment
from .schemas import AppointmentResponse, PetSummary, ServiceSummary, UserSummary


def project_appointment(
    appointment: Appointment,
    *,
    with_pet: bool = False,
    with_service: bool = False,
    with_user: bool = False,
) -> AppointmentResponse:
    related = {}
    if with_pet and appointment.pet is not None:
        related["pet"] = PetSummary.model_validate(appointment.pet)
    if with_service and appointment.service is not None:
        related["service"] = ServiceSummary.model_validate(appointment.service)
    if with_user and appointment.user is not None:
        related["user"] = UserSummary.model_validate(appointment.user)

    return AppointmentResponse(
        id=appointment.id,
        petId=appointment.pet_id,
        serviceId=appointment.service_id,
        userId=appointment.user_id,
        date=appointment.date,
        status=appointment.status,
        createdAt=appointment.created_at,
        updatedAt=appointment.updated_at,
        **related,
    )


def booking_view(appointment: Appointment) -> AppointmentResponse:
    """createAppointment: the bare record"""
    return project_appointment(appointment)


def scoped_view(appointment: Appointment, include_owner: bool) -> AppointmentResponse:
    """listAppointments / getAppointment: pet and service, owner only for staff"""
    return project_appointment(appointment, with_pet=True, with_service=True, with_user=include_owner)


def staff_view(appointment: Appointment) -> AppointmentResponse:
    """updateAppointmentStatus and report details: everything attached"""
    return project_appointment(appointment, with_pet=True, with_service=True, with_user=True)
