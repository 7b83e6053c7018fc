# clinic_api/modules/appointments/appointments_service.py
"""Appointments service for business logic."""

import logging
from typing import Optional
from datetime import date
from uuid import UUID

from fastapi import HTTPException, status as http_status
from sqlalchemy import select, desc
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from clinic_api.auth.scope import Scope
from clinic_api.models.models import (
    Patient, Doctor, Appointment, AppointmentStatus as DBAppointmentStatus,
    SLOT_HOLDING_STATUSES
)
from . import workflow
from .schemas import (
    AppointmentResponse, AppointmentListResponse, AppointmentActionResponse,
    AppointmentCreateRequest, AppointmentUpdateRequest, AppointmentStatus,
    PartyInfo, Prescription
)

logger = logging.getLogger(__name__)

SLOT_TAKEN_MESSAGE = "Time slot already booked"
SLOT_INDEX_NAME = "uq_appointments_active_slot"
# SQLite names the columns instead of the index
SLOT_INDEX_COLUMNS = "appointments.doctor_id, appointments.date, appointments.time"


def _party_from_patient(patient: Patient) -> PartyInfo:
    return PartyInfo(
        id=patient.id,
        name=patient.user.name,
        email=patient.user.email,
        contact_number=patient.user.contact_number,
    )


def _party_from_doctor(doctor: Doctor) -> PartyInfo:
    return PartyInfo(
        id=doctor.id,
        name=f"Dr. {doctor.user.name}",
        email=doctor.user.email,
        contact_number=doctor.user.contact_number,
        specialization=doctor.specialization,
    )


def _build_appointment_response(appointment: Appointment) -> AppointmentResponse:
    """Build appointment response with patient and doctor info."""
    return AppointmentResponse(
        id=appointment.id,
        patient=_party_from_patient(appointment.patient),
        doctor=_party_from_doctor(appointment.doctor),
        date=appointment.date,
        time=appointment.time,
        status=AppointmentStatus(appointment.status.value),
        approved_by_doctor=appointment.approved_by_doctor,
        completed_by_doctor=appointment.completed_by_doctor,
        reason=appointment.reason,
        notes=appointment.notes,
        prescription=Prescription(**appointment.prescription) if appointment.prescription else None,
        follow_up_date=appointment.follow_up_date,
        created_at=appointment.created_at,
    )


def _with_parties(query):
    return query.options(
        selectinload(Appointment.patient).selectinload(Patient.user),
        selectinload(Appointment.doctor).selectinload(Doctor.user),
    )


async def _fetch_appointment(session: AsyncSession, appointment_id: UUID) -> Optional[Appointment]:
    """Load an appointment with its patient and doctor, refreshing any cached copy."""
    result = await session.execute(
        _with_parties(select(Appointment))
        .where(Appointment.id == appointment_id)
        .execution_options(populate_existing=True)
    )
    return result.scalar_one_or_none()


async def _get_scoped_appointment(
    session: AsyncSession,
    scope: Scope,
    appointment_id: UUID
) -> Appointment:
    appointment = await _fetch_appointment(session, appointment_id)
    if not appointment:
        raise HTTPException(status_code=http_status.HTTP_404_NOT_FOUND, detail="Appointment not found")
    scope.ensure_access(patient_id=appointment.patient_id, doctor_id=appointment.doctor_id)
    return appointment


async def _slot_taken(
    session: AsyncSession,
    doctor_id: UUID,
    slot_date: date,
    slot_time: str,
    exclude_id: Optional[UUID] = None
) -> bool:
    query = select(Appointment.id).where(
        Appointment.doctor_id == doctor_id,
        Appointment.date == slot_date,
        Appointment.time == slot_time,
        Appointment.status.in_(SLOT_HOLDING_STATUSES),
    )
    if exclude_id is not None:
        query = query.where(Appointment.id != exclude_id)
    result = await session.execute(query.limit(1))
    return result.first() is not None


def is_slot_conflict(error: IntegrityError) -> bool:
    message = str(error.orig)
    return SLOT_INDEX_NAME in message or SLOT_INDEX_COLUMNS in message


async def _commit_slot(session: AsyncSession) -> None:
    """Commit, turning a lost race on the slot index into the usual conflict error."""
    try:
        await session.commit()
    except IntegrityError as e:
        await session.rollback()
        if not is_slot_conflict(e):
            raise
        raise HTTPException(status_code=http_status.HTTP_400_BAD_REQUEST, detail=SLOT_TAKEN_MESSAGE)


def _transition_error(error: workflow.InvalidTransition) -> HTTPException:
    return HTTPException(status_code=http_status.HTTP_400_BAD_REQUEST, detail=error.message)


async def list_appointments(
    session: AsyncSession,
    scope: Scope,
    status: Optional[AppointmentStatus] = None
) -> AppointmentListResponse:
    """List appointments visible to the caller, newest first."""
    query = _with_parties(select(Appointment))

    if scope.is_patient:
        if scope.patient_id is None:
            return AppointmentListResponse(appointments=[], total=0)
        query = query.where(Appointment.patient_id == scope.patient_id)
    elif scope.is_doctor:
        if scope.doctor_id is None:
            return AppointmentListResponse(appointments=[], total=0)
        query = query.where(Appointment.doctor_id == scope.doctor_id)

    if status is not None:
        query = query.where(Appointment.status == DBAppointmentStatus(status.value))

    query = query.order_by(desc(Appointment.date), desc(Appointment.time))
    result = await session.execute(query)
    appointments = [_build_appointment_response(a) for a in result.scalars().all()]

    return AppointmentListResponse(appointments=appointments, total=len(appointments))


async def get_appointment(
    session: AsyncSession,
    scope: Scope,
    appointment_id: UUID
) -> AppointmentResponse:
    appointment = await _get_scoped_appointment(session, scope, appointment_id)
    return _build_appointment_response(appointment)


async def create_appointment(
    session: AsyncSession,
    scope: Scope,
    request: AppointmentCreateRequest
) -> AppointmentActionResponse:
    """Book an appointment in pending status."""
    if scope.is_patient:
        patient_id = scope.patient_id
        if patient_id is None:
            raise HTTPException(status_code=http_status.HTTP_400_BAD_REQUEST, detail="Patient profile not found")
    elif scope.is_admin and request.patient_id:
        patient = await session.get(Patient, request.patient_id)
        if not patient:
            raise HTTPException(status_code=http_status.HTTP_404_NOT_FOUND, detail="Patient not found")
        patient_id = patient.id
    else:
        raise HTTPException(status_code=http_status.HTTP_400_BAD_REQUEST, detail="Patient ID is required")

    doctor = await session.get(Doctor, request.doctor_id)
    if not doctor:
        raise HTTPException(status_code=http_status.HTTP_404_NOT_FOUND, detail="Doctor not found")

    if await _slot_taken(session, doctor.id, request.date, request.time):
        raise HTTPException(status_code=http_status.HTTP_400_BAD_REQUEST, detail=SLOT_TAKEN_MESSAGE)

    appointment = Appointment(
        patient_id=patient_id,
        doctor_id=doctor.id,
        date=request.date,
        time=request.time,
        status=DBAppointmentStatus.PENDING,
        reason=request.reason,
        notes=request.notes,
    )
    session.add(appointment)
    await _commit_slot(session)
    logger.info("Booked appointment %s with doctor %s on %s %s", appointment.id, doctor.id, request.date, request.time)

    appointment = await _fetch_appointment(session, appointment.id)
    return AppointmentActionResponse(
        message="Appointment booked successfully",
        appointment=_build_appointment_response(appointment)
    )


async def update_appointment(
    session: AsyncSession,
    scope: Scope,
    appointment_id: UUID,
    request: AppointmentUpdateRequest
) -> AppointmentActionResponse:
    """Update appointment details."""
    appointment = await _get_scoped_appointment(session, scope, appointment_id)
    changes = request.model_dump(exclude_unset=True)

    if ("prescription" in changes or "follow_up_date" in changes) and scope.is_patient:
        raise HTTPException(
            status_code=http_status.HTTP_403_FORBIDDEN,
            detail="Only doctors can record prescriptions and follow-ups"
        )

    new_date = changes.get("date") or appointment.date
    new_time = changes.get("time") or appointment.time
    if (new_date, new_time) != (appointment.date, appointment.time):
        if workflow.is_terminal(appointment.status):
            raise HTTPException(
                status_code=http_status.HTTP_400_BAD_REQUEST,
                detail=f"Cannot reschedule a {appointment.status.value} appointment"
            )
        if await _slot_taken(session, appointment.doctor_id, new_date, new_time, exclude_id=appointment.id):
            raise HTTPException(status_code=http_status.HTTP_400_BAD_REQUEST, detail=SLOT_TAKEN_MESSAGE)
        previous_status = appointment.status
        workflow.reschedule(
            appointment, new_date, new_time,
            by_assigned_doctor=scope.is_doctor and scope.doctor_id == appointment.doctor_id
        )
        if appointment.status != previous_status:
            logger.info("Appointment %s rescheduled; back to %s for review", appointment_id, appointment.status.value)

    if changes.get("reason") is not None:
        appointment.reason = changes["reason"]
    if "notes" in changes:
        appointment.notes = changes["notes"]
    if "prescription" in changes:
        appointment.prescription = request.prescription.model_dump() if request.prescription else None
    if "follow_up_date" in changes:
        appointment.follow_up_date = changes["follow_up_date"]

    await _commit_slot(session)

    appointment = await _fetch_appointment(session, appointment_id)
    return AppointmentActionResponse(
        message="Appointment updated successfully",
        appointment=_build_appointment_response(appointment)
    )


async def cancel_appointment(
    session: AsyncSession,
    scope: Scope,
    appointment_id: UUID
) -> AppointmentActionResponse:
    """Cancel an appointment owned by the caller."""
    appointment = await _get_scoped_appointment(session, scope, appointment_id)

    try:
        workflow.cancel(appointment)
    except workflow.InvalidTransition as e:
        logger.warning("Rejected cancel of appointment %s in status %s", appointment_id, e.current.value)
        raise _transition_error(e)

    await session.commit()
    logger.info("Appointment %s cancelled by %s", appointment_id, scope.role.value)

    appointment = await _fetch_appointment(session, appointment_id)
    return AppointmentActionResponse(
        message="Appointment cancelled successfully",
        appointment=_build_appointment_response(appointment)
    )


async def review_appointment(
    session: AsyncSession,
    scope: Scope,
    appointment_id: UUID,
    approve: bool
) -> AppointmentActionResponse:
    """Doctor approves or rejects one of their pending appointments."""
    scope.require_doctor_id()
    appointment = await _get_scoped_appointment(session, scope, appointment_id)

    try:
        workflow.review(appointment, approve)
    except workflow.InvalidTransition as e:
        logger.warning("Rejected review of appointment %s in status %s", appointment_id, e.current.value)
        raise _transition_error(e)

    await session.commit()
    logger.info("Appointment %s %s", appointment_id, appointment.status.value)

    appointment = await _fetch_appointment(session, appointment_id)
    return AppointmentActionResponse(
        message="Appointment approved" if approve else "Appointment rejected",
        appointment=_build_appointment_response(appointment)
    )


async def complete_appointment(
    session: AsyncSession,
    scope: Scope,
    appointment_id: UUID
) -> AppointmentActionResponse:
    """Doctor marks one of their approved/scheduled appointments as completed."""
    scope.require_doctor_id()
    appointment = await _get_scoped_appointment(session, scope, appointment_id)

    try:
        workflow.complete(appointment)
    except workflow.InvalidTransition as e:
        logger.warning("Rejected completion of appointment %s in status %s", appointment_id, e.current.value)
        raise _transition_error(e)

    await session.commit()
    logger.info("Appointment %s completed", appointment_id)

    appointment = await _fetch_appointment(session, appointment_id)
    return AppointmentActionResponse(
        message="Appointment marked as completed",
        appointment=_build_appointment_response(appointment)
    )
