"""Tests for AppointmentService against an in-memory database"""

import uuid
from datetime import datetime, timedelta, timezone

import pytest

from petshop.domain.appointments.repository import AppointmentRepository
from petshop.domain.appointments.schemas import AppointmentCreate
from petshop.domain.appointments.service import AppointmentService
from petshop.domain.policy import Principal
from petshop.models import ACTIVE_STATUSES, Appointment, AppointmentStatus, NotificationType
from petshop.shared.exceptions import (
    ForbiddenError,
    InvalidTransitionError,
    NotFoundError,
    SlotTakenError,
)


class TestCreateAppointment:
    def test_books_scheduled_appointment(self, appointment_service, principal_for, client_user, pet, grooming, slot):
        appt = appointment_service.create_appointment(
            AppointmentCreate(petId=pet.id, serviceId=grooming.id, date=slot),
            principal_for(client_user),
        )
        assert appt.status is AppointmentStatus.SCHEDULED
        assert appt.user_id == client_user.id
        assert appt.pet_id == pet.id
        assert appt.date == slot

    def test_aware_date_is_stored_as_utc(self, appointment_service, principal_for, client_user, pet, grooming, slot):
        local = datetime(2024, 3, 20, 7, 0, tzinfo=timezone(timedelta(hours=-3)))
        appt = appointment_service.create_appointment(
            AppointmentCreate(petId=pet.id, serviceId=grooming.id, date=local),
            principal_for(client_user),
        )
        assert appt.date == slot

    def test_staff_cannot_book(self, appointment_service, principal_for, employee_user, pet, grooming, slot):
        with pytest.raises(ForbiddenError):
            appointment_service.create_appointment(
                AppointmentCreate(petId=pet.id, serviceId=grooming.id, date=slot),
                principal_for(employee_user),
            )

    def test_pet_of_another_user(self, appointment_service, principal_for, client_user, other_pet, grooming, slot):
        with pytest.raises(NotFoundError):
            appointment_service.create_appointment(
                AppointmentCreate(petId=other_pet.id, serviceId=grooming.id, date=slot),
                principal_for(client_user),
            )

    def test_unknown_service(self, appointment_service, principal_for, client_user, pet, slot):
        with pytest.raises(NotFoundError):
            appointment_service.create_appointment(
                AppointmentCreate(petId=pet.id, serviceId=str(uuid.uuid4()), date=slot),
                principal_for(client_user),
            )

    def test_slot_taken_across_services_and_owners(
        self, appointment_service, principal_for, make_appointment, client_user, pet, other_pet, grooming, bath, slot
    ):
        make_appointment(other_pet, bath, slot, AppointmentStatus.CONFIRMED)

        with pytest.raises(SlotTakenError):
            appointment_service.create_appointment(
                AppointmentCreate(petId=pet.id, serviceId=grooming.id, date=slot),
                principal_for(client_user),
            )

    def test_cancelled_slot_can_be_rebooked(
        self, appointment_service, principal_for, make_appointment, client_user, pet, grooming, slot
    ):
        make_appointment(pet, grooming, slot, AppointmentStatus.CANCELLED)

        appt = appointment_service.create_appointment(
            AppointmentCreate(petId=pet.id, serviceId=grooming.id, date=slot),
            principal_for(client_user),
        )
        assert appt.status is AppointmentStatus.SCHEDULED

    def test_concurrent_booking_rejected_by_index(
        self, appointment_service, principal_for, make_appointment, db_session, client_user, pet, other_pet, grooming, slot, monkeypatch
    ):
        """A booking that passes the pre-check still loses at insert time"""
        make_appointment(other_pet, grooming, slot)
        monkeypatch.setattr(AppointmentRepository, "find_conflicting", staticmethod(lambda db, date: None))

        with pytest.raises(SlotTakenError):
            appointment_service.create_appointment(
                AppointmentCreate(petId=pet.id, serviceId=grooming.id, date=slot),
                principal_for(client_user),
            )

        active = (
            db_session.query(Appointment)
            .filter(Appointment.date == slot, Appointment.status.in_(ACTIVE_STATUSES))
            .count()
        )
        assert active == 1


class TestVisibility:
    @pytest.fixture
    def booked(self, make_appointment, pet, other_pet, grooming, slot):
        mine = make_appointment(pet, grooming, slot + timedelta(hours=1))
        theirs = make_appointment(other_pet, grooming, slot)
        return mine, theirs

    def test_client_lists_only_own(self, appointment_service, principal_for, client_user, booked):
        mine, _ = booked
        listed = appointment_service.list_appointments(principal_for(client_user))
        assert [a.id for a in listed] == [mine.id]

    @pytest.mark.parametrize("staff", ["employee_user", "admin_user"])
    def test_staff_list_everything_by_date(self, appointment_service, principal_for, request, booked, staff):
        mine, theirs = booked
        listed = appointment_service.list_appointments(principal_for(request.getfixturevalue(staff)))
        assert [a.id for a in listed] == [theirs.id, mine.id]

    def test_unknown_role_sees_nothing(self, appointment_service, client_user, booked):
        principal = Principal(user_id=client_user.id, role=None)
        assert appointment_service.list_appointments(principal) == []

    def test_client_cannot_get_foreign_appointment(self, appointment_service, principal_for, client_user, booked):
        _, theirs = booked
        with pytest.raises(NotFoundError):
            appointment_service.get_appointment(theirs.id, principal_for(client_user))

    def test_employee_gets_any_appointment(self, appointment_service, principal_for, employee_user, booked):
        _, theirs = booked
        assert appointment_service.get_appointment(theirs.id, principal_for(employee_user)).id == theirs.id

    def test_missing_appointment(self, appointment_service, principal_for, admin_user):
        with pytest.raises(NotFoundError):
            appointment_service.get_appointment(str(uuid.uuid4()), principal_for(admin_user))


class TestUpdateStatus:
    def test_confirm_publishes_one_confirmation(
        self, appointment_service, principal_for, publisher, make_appointment, employee_user, client_user, pet, grooming, slot
    ):
        appt = make_appointment(pet, grooming, slot)

        updated = appointment_service.update_status(appt.id, AppointmentStatus.CONFIRMED, principal_for(employee_user))

        assert updated.status is AppointmentStatus.CONFIRMED
        assert len(publisher.intents) == 1
        intent = publisher.intents[0]
        assert intent.type is NotificationType.APPOINTMENT_CONFIRMATION
        assert intent.user_id == client_user.id
        assert intent.appointment_id == appt.id

    def test_cancel_publishes_cancellation(
        self, appointment_service, principal_for, publisher, make_appointment, admin_user, pet, grooming, slot
    ):
        appt = make_appointment(pet, grooming, slot, AppointmentStatus.CONFIRMED)

        appointment_service.update_status(appt.id, AppointmentStatus.CANCELLED, principal_for(admin_user))

        assert [i.type for i in publisher.intents] == [NotificationType.APPOINTMENT_CANCELLATION]

    def test_complete_publishes_nothing(
        self, appointment_service, principal_for, publisher, make_appointment, admin_user, pet, grooming, slot
    ):
        appt = make_appointment(pet, grooming, slot, AppointmentStatus.CONFIRMED)

        appointment_service.update_status(appt.id, AppointmentStatus.COMPLETED, principal_for(admin_user))

        assert publisher.intents == []

    def test_client_forbidden(self, appointment_service, principal_for, make_appointment, client_user, pet, grooming, slot):
        appt = make_appointment(pet, grooming, slot)
        with pytest.raises(ForbiddenError):
            appointment_service.update_status(appt.id, AppointmentStatus.CANCELLED, principal_for(client_user))

    def test_missing_appointment(self, appointment_service, principal_for, employee_user):
        with pytest.raises(NotFoundError):
            appointment_service.update_status(str(uuid.uuid4()), AppointmentStatus.CONFIRMED, principal_for(employee_user))

    def test_terminal_status_is_final(
        self, appointment_service, principal_for, publisher, make_appointment, employee_user, pet, grooming, slot
    ):
        appt = make_appointment(pet, grooming, slot, AppointmentStatus.CANCELLED)

        with pytest.raises(InvalidTransitionError):
            appointment_service.update_status(appt.id, AppointmentStatus.CONFIRMED, principal_for(employee_user))
        assert publisher.intents == []

    def test_relaxed_transitions(self, db_session, publisher, principal_for, make_appointment, employee_user, pet, grooming, slot):
        service = AppointmentService(db_session, publisher=publisher, strict_transitions=False)
        appt = make_appointment(pet, grooming, slot)

        updated = service.update_status(appt.id, AppointmentStatus.COMPLETED, principal_for(employee_user))

        assert updated.status is AppointmentStatus.COMPLETED

    def test_relaxed_reactivation_into_taken_slot(
        self, db_session, publisher, principal_for, make_appointment, employee_user, pet, other_pet, grooming, slot
    ):
        service = AppointmentService(db_session, publisher=publisher, strict_transitions=False)
        make_appointment(other_pet, grooming, slot)
        old = make_appointment(pet, grooming, slot, AppointmentStatus.CANCELLED)

        with pytest.raises(SlotTakenError):
            service.update_status(old.id, AppointmentStatus.SCHEDULED, principal_for(employee_user))

        active = (
            db_session.query(Appointment)
            .filter(Appointment.date == slot, Appointment.status.in_(ACTIVE_STATUSES))
            .count()
        )
        assert active == 1
        assert publisher.intents == []

    def test_rewriting_same_status_publishes_nothing(
        self, db_session, publisher, principal_for, make_appointment, employee_user, pet, grooming, slot
    ):
        service = AppointmentService(db_session, publisher=publisher, strict_transitions=False)
        appt = make_appointment(pet, grooming, slot, AppointmentStatus.CONFIRMED)

        updated = service.update_status(appt.id, AppointmentStatus.CONFIRMED, principal_for(employee_user))

        assert updated.status is AppointmentStatus.CONFIRMED
        assert publisher.intents == []

    def test_publisher_failure_keeps_status(
        self, db_session, principal_for, make_appointment, employee_user, pet, grooming, slot
    ):
        class BrokenPublisher:
            def publish(self, intent):
                raise RuntimeError("queue unavailable")

        service = AppointmentService(db_session, publisher=BrokenPublisher())
        appt = make_appointment(pet, grooming, slot)

        updated = service.update_status(appt.id, AppointmentStatus.CONFIRMED, principal_for(employee_user))

        assert updated.status is AppointmentStatus.CONFIRMED


class TestDeleteAppointment:
    def test_admin_deletes(self, appointment_service, principal_for, db_session, make_appointment, admin_user, pet, grooming, slot):
        appt = make_appointment(pet, grooming, slot, AppointmentStatus.COMPLETED)
        appt_id = appt.id

        appointment_service.delete_appointment(appt_id, principal_for(admin_user))

        assert db_session.query(Appointment).filter(Appointment.id == appt_id).first() is None

    @pytest.mark.parametrize("user", ["employee_user", "client_user"])
    def test_non_admin_forbidden(self, appointment_service, principal_for, request, make_appointment, pet, grooming, slot, user):
        appt = make_appointment(pet, grooming, slot)
        with pytest.raises(ForbiddenError):
            appointment_service.delete_appointment(appt.id, principal_for(request.getfixturevalue(user)))

    def test_missing_appointment(self, appointment_service, principal_for, admin_user):
        with pytest.raises(NotFoundError):
            appointment_service.delete_appointment(str(uuid.uuid4()), principal_for(admin_user))

