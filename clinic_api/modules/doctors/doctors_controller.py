# clinic_api/modules/doctors/doctors_controller.py
"""Doctors controller with API routes."""

from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from clinic_api.common.database.database import get_db_session
from clinic_api.auth.dependencies import get_current_user, require_roles
from clinic_api.auth.scope import Scope, get_scope
from clinic_api.models.models import UserRole

from . import doctors_service as service
from .schemas import (
    DoctorResponse, DoctorListResponse, DoctorActionResponse,
    DoctorCreateRequest, DoctorUpdateRequest, Availability
)

router = APIRouter(prefix="/doctors", tags=["Doctors"], dependencies=[Depends(get_current_user)])


@router.get("", response_model=DoctorListResponse)
async def get_doctors(db: AsyncSession = Depends(get_db_session)):
    """List all doctors, newest first."""
    return await service.list_doctors(db)


@router.get("/search/specialization/{specialization}", response_model=DoctorListResponse)
async def search_doctors(specialization: str, db: AsyncSession = Depends(get_db_session)):
    """Search doctors by specialization (case-insensitive, partial match)."""
    return await service.search_by_specialization(db, specialization)


@router.post(
    "",
    response_model=DoctorActionResponse,
    status_code=201,
    dependencies=[Depends(require_roles(UserRole.ADMIN))]
)
async def create_doctor(request: DoctorCreateRequest, db: AsyncSession = Depends(get_db_session)):
    """Create a doctor account with its profile (admin only)."""
    return await service.create_doctor(db, request)


@router.get("/{doctor_id}", response_model=DoctorResponse)
async def get_doctor(doctor_id: UUID, db: AsyncSession = Depends(get_db_session)):
    """Get a doctor by ID."""
    return await service.get_doctor(db, doctor_id)


@router.put("/{doctor_id}", response_model=DoctorActionResponse)
async def update_doctor(
    doctor_id: UUID,
    request: DoctorUpdateRequest,
    db: AsyncSession = Depends(get_db_session),
    scope: Scope = Depends(get_scope)
):
    """Update a doctor profile (the doctor themself or an admin)."""
    return await service.update_doctor(db, scope, doctor_id, request)


@router.get("/{doctor_id}/availability", response_model=Availability)
async def get_doctor_availability(doctor_id: UUID, db: AsyncSession = Depends(get_db_session)):
    """Get a doctor's weekly availability."""
    return await service.get_availability(db, doctor_id)
