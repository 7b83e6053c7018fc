# clinic_api/modules/patients/patients_controller.py
"""Patients controller with API routes."""

from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from clinic_api.common.database.database import get_db_session
from clinic_api.auth.dependencies import require_roles
from clinic_api.auth.scope import Scope, get_scope
from clinic_api.models.models import UserRole

from . import patients_service as service
from .schemas import PatientResponse, PatientListResponse, PatientActionResponse, PatientUpdateRequest

router = APIRouter(prefix="/patients", tags=["Patients"])

staff_only = Depends(require_roles(UserRole.ADMIN, UserRole.DOCTOR))


@router.get("", response_model=PatientListResponse, dependencies=[staff_only])
async def get_patients(db: AsyncSession = Depends(get_db_session)):
    """List all patients (admins and doctors)."""
    return await service.list_patients(db)


@router.get("/search/{query}", response_model=PatientListResponse, dependencies=[staff_only])
async def search_patients(query: str, db: AsyncSession = Depends(get_db_session)):
    """Search patients by name or email (admins and doctors)."""
    return await service.search_patients(db, query)


@router.get("/{patient_id}", response_model=PatientResponse)
async def get_patient(
    patient_id: UUID,
    db: AsyncSession = Depends(get_db_session),
    scope: Scope = Depends(get_scope)
):
    """Get a patient profile. Patients may only view their own."""
    return await service.get_patient(db, scope, patient_id)


@router.put("/{patient_id}", response_model=PatientActionResponse)
async def update_patient(
    patient_id: UUID,
    request: PatientUpdateRequest,
    db: AsyncSession = Depends(get_db_session),
    scope: Scope = Depends(get_scope)
):
    """Update a patient profile (the patient themself or an admin)."""
    return await service.update_patient(db, scope, patient_id, request)
