# clinic_api/modules/appointments/workflow.py
"""Appointment status transitions."""

from clinic_api.models.models import Appointment, AppointmentStatus

TERMINAL_STATUSES = frozenset({
    AppointmentStatus.REJECTED,
    AppointmentStatus.COMPLETED,
    AppointmentStatus.CANCELLED,
    AppointmentStatus.NO_SHOW,
})

COMPLETABLE_STATUSES = frozenset({
    AppointmentStatus.APPROVED,
    AppointmentStatus.SCHEDULED,
})


class InvalidTransition(Exception):
    """Raised when an appointment cannot move to the requested status."""

    def __init__(self, message: str, current: AppointmentStatus):
        super().__init__(message)
        self.message = message
        self.current = current


def is_terminal(status: AppointmentStatus) -> bool:
    return status in TERMINAL_STATUSES


def review(appointment: Appointment, approve: bool) -> Appointment:
    """Approve or reject a pending appointment."""
    if appointment.status != AppointmentStatus.PENDING:
        raise InvalidTransition("Appointment already processed", appointment.status)
    appointment.status = AppointmentStatus.APPROVED if approve else AppointmentStatus.REJECTED
    appointment.approved_by_doctor = bool(approve)
    return appointment


def complete(appointment: Appointment) -> Appointment:
    """Mark an approved or scheduled appointment as completed."""
    if appointment.status not in COMPLETABLE_STATUSES:
        raise InvalidTransition("Appointment not in correct state to complete", appointment.status)
    appointment.status = AppointmentStatus.COMPLETED
    appointment.completed_by_doctor = True
    return appointment


def cancel(appointment: Appointment) -> Appointment:
    """Cancel any appointment that has not reached a terminal status."""
    if is_terminal(appointment.status):
        raise InvalidTransition(
            f"Cannot cancel an appointment that is {appointment.status.value}",
            appointment.status
        )
    appointment.status = AppointmentStatus.CANCELLED
    return appointment


def reschedule(appointment: Appointment, new_date, new_time: str, by_assigned_doctor: bool = False) -> Appointment:
    """
    Move an open appointment to a new slot.

    An approved or scheduled appointment goes back to pending for review,
    unless the assigned doctor moved it.
    """
    if is_terminal(appointment.status):
        raise InvalidTransition(
            f"Cannot reschedule a {appointment.status.value} appointment",
            appointment.status
        )
    appointment.date = new_date
    appointment.time = new_time
    if appointment.status in COMPLETABLE_STATUSES and not by_assigned_doctor:
        appointment.status = AppointmentStatus.PENDING
        appointment.approved_by_doctor = False
    return appointment
