from datetime import date

import pytest

from clinic_api.models.models import Appointment, AppointmentStatus
from clinic_api.modules.appointments import workflow


def make_appointment(status: AppointmentStatus) -> Appointment:
    return Appointment(status=status, approved_by_doctor=False, completed_by_doctor=False)


def test_approve_pending():
    appointment = workflow.review(make_appointment(AppointmentStatus.PENDING), approve=True)

    assert appointment.status == AppointmentStatus.APPROVED
    assert appointment.approved_by_doctor is True


def test_reject_pending():
    appointment = workflow.review(make_appointment(AppointmentStatus.PENDING), approve=False)

    assert appointment.status == AppointmentStatus.REJECTED
    assert appointment.approved_by_doctor is False


@pytest.mark.parametrize("status", [s for s in AppointmentStatus if s != AppointmentStatus.PENDING])
def test_review_only_from_pending(status):
    with pytest.raises(workflow.InvalidTransition) as exc_info:
        workflow.review(make_appointment(status), approve=True)

    assert exc_info.value.message == "Appointment already processed"
    assert exc_info.value.current == status


@pytest.mark.parametrize("status", [AppointmentStatus.APPROVED, AppointmentStatus.SCHEDULED])
def test_complete_from_approved_or_scheduled(status):
    appointment = workflow.complete(make_appointment(status))

    assert appointment.status == AppointmentStatus.COMPLETED
    assert appointment.completed_by_doctor is True


def test_pending_cannot_be_completed():
    appointment = make_appointment(AppointmentStatus.PENDING)

    with pytest.raises(workflow.InvalidTransition, match="not in correct state to complete"):
        workflow.complete(appointment)

    assert appointment.status == AppointmentStatus.PENDING
    assert appointment.completed_by_doctor is False


@pytest.mark.parametrize("status", [
    AppointmentStatus.PENDING, AppointmentStatus.APPROVED, AppointmentStatus.SCHEDULED,
])
def test_cancel_open_appointment(status):
    assert workflow.cancel(make_appointment(status)).status == AppointmentStatus.CANCELLED


@pytest.mark.parametrize("status", sorted(workflow.TERMINAL_STATUSES, key=lambda s: s.value))
def test_terminal_appointments_cannot_be_cancelled(status):
    with pytest.raises(workflow.InvalidTransition) as exc_info:
        workflow.cancel(make_appointment(status))

    assert exc_info.value.message == f"Cannot cancel an appointment that is {status.value}"


def test_terminal_statuses():
    assert workflow.is_terminal(AppointmentStatus.NO_SHOW)
    assert not workflow.is_terminal(AppointmentStatus.SCHEDULED)


@pytest.mark.parametrize("status", [AppointmentStatus.APPROVED, AppointmentStatus.SCHEDULED])
def test_reschedule_returns_reviewed_appointment_to_pending(status):
    appointment = make_appointment(status)
    appointment.approved_by_doctor = True

    workflow.reschedule(appointment, date(2024, 3, 1), "16:00")

    assert appointment.status == AppointmentStatus.PENDING
    assert appointment.approved_by_doctor is False
    assert (appointment.date, appointment.time) == (date(2024, 3, 1), "16:00")


def test_reschedule_by_assigned_doctor_keeps_status():
    appointment = make_appointment(AppointmentStatus.APPROVED)

    workflow.reschedule(appointment, date(2024, 3, 1), "16:00", by_assigned_doctor=True)

    assert appointment.status == AppointmentStatus.APPROVED


def test_terminal_appointment_cannot_be_rescheduled():
    with pytest.raises(workflow.InvalidTransition, match="Cannot reschedule a completed appointment"):
        workflow.reschedule(make_appointment(AppointmentStatus.COMPLETED), date(2024, 3, 1), "16:00")
