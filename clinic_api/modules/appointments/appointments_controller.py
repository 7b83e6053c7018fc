# clinic_api/modules/appointments/appointments_controller.py
"""Appointments controller with API routes."""

from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from clinic_api.common.database.database import get_db_session
from clinic_api.auth.dependencies import require_roles
from clinic_api.auth.scope import Scope, get_scope
from clinic_api.models.models import UserRole

from . import appointments_service as service
from .schemas import (
    AppointmentResponse, AppointmentListResponse, AppointmentActionResponse,
    AppointmentCreateRequest, AppointmentUpdateRequest, AppointmentApproveRequest,
    AppointmentStatus
)

router = APIRouter(prefix="/appointments", tags=["Appointments"])


@router.get("", response_model=AppointmentListResponse)
async def get_appointments(
    status: Optional[AppointmentStatus] = Query(None, description="Filter by status"),
    db: AsyncSession = Depends(get_db_session),
    scope: Scope = Depends(get_scope)
):
    """List appointments: patients see their own, doctors theirs, admins all."""
    return await service.list_appointments(db, scope, status)


@router.get("/{appointment_id}", response_model=AppointmentResponse)
async def get_appointment(
    appointment_id: UUID,
    db: AsyncSession = Depends(get_db_session),
    scope: Scope = Depends(get_scope)
):
    """Get a single appointment by ID."""
    return await service.get_appointment(db, scope, appointment_id)


@router.post("", response_model=AppointmentActionResponse, status_code=201)
async def create_appointment(
    request: AppointmentCreateRequest,
    db: AsyncSession = Depends(get_db_session),
    scope: Scope = Depends(get_scope)
):
    """Book a new appointment (patients for themselves, admins for any patient)."""
    return await service.create_appointment(db, scope, request)


@router.put("/{appointment_id}", response_model=AppointmentActionResponse)
async def update_appointment(
    appointment_id: UUID,
    request: AppointmentUpdateRequest,
    db: AsyncSession = Depends(get_db_session),
    scope: Scope = Depends(get_scope)
):
    """Update appointment details (date, time, reason, notes, prescription)."""
    return await service.update_appointment(db, scope, appointment_id, request)


@router.delete("/{appointment_id}", response_model=AppointmentActionResponse)
async def cancel_appointment(
    appointment_id: UUID,
    db: AsyncSession = Depends(get_db_session),
    scope: Scope = Depends(get_scope)
):
    """Cancel an appointment. Appointments are never deleted."""
    return await service.cancel_appointment(db, scope, appointment_id)


@router.put(
    "/{appointment_id}/approve",
    response_model=AppointmentActionResponse,
    dependencies=[Depends(require_roles(UserRole.DOCTOR))]
)
async def approve_appointment(
    appointment_id: UUID,
    request: AppointmentApproveRequest,
    db: AsyncSession = Depends(get_db_session),
    scope: Scope = Depends(get_scope)
):
    """Approve (`approve: true`) or reject (`approve: false`) a pending appointment."""
    return await service.review_appointment(db, scope, appointment_id, request.approve)


@router.put(
    "/{appointment_id}/complete",
    response_model=AppointmentActionResponse,
    dependencies=[Depends(require_roles(UserRole.DOCTOR))]
)
async def complete_appointment(
    appointment_id: UUID,
    db: AsyncSession = Depends(get_db_session),
    scope: Scope = Depends(get_scope)
):
    """Mark an approved or scheduled appointment as completed."""
    return await service.complete_appointment(db, scope, appointment_id)
