# clinic_api/modules/patients/patients_service.py
"""Service layer for patient profiles."""

from typing import Optional
from uuid import UUID

from fastapi import HTTPException, status as http_status
from sqlalchemy import select, desc, or_
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from clinic_api.auth.scope import Scope
from clinic_api.common.utils.search import LIKE_ESCAPE, contains_pattern
from clinic_api.models.models import User, Patient, Gender as DBGender
from .schemas import (
    PatientResponse, PatientListResponse, PatientActionResponse,
    PatientUpdateRequest, Gender, BloodGroup
)

USER_FIELDS = ("name", "contact_number")


def _build_patient_response(patient: Patient) -> PatientResponse:
    return PatientResponse(
        id=patient.id,
        user_id=patient.user_id,
        name=patient.user.name,
        email=patient.user.email,
        contact_number=patient.user.contact_number,
        date_of_birth=patient.date_of_birth,
        gender=Gender(patient.gender.value) if patient.gender else None,
        blood_group=BloodGroup(patient.blood_group) if patient.blood_group else None,
        address=patient.address,
        emergency_contact_name=patient.emergency_contact_name,
        emergency_contact_phone=patient.emergency_contact_phone,
        allergies=patient.allergies,
        medical_history=patient.medical_history,
        created_at=patient.created_at,
    )


def _patient_query():
    return select(Patient).options(selectinload(Patient.user))


async def _fetch_patient(session: AsyncSession, patient_id: UUID) -> Optional[Patient]:
    result = await session.execute(
        _patient_query()
        .where(Patient.id == patient_id)
        .execution_options(populate_existing=True)
    )
    return result.scalar_one_or_none()


async def _get_scoped_patient(session: AsyncSession, scope: Scope, patient_id: UUID) -> Patient:
    patient = await _fetch_patient(session, patient_id)
    if not patient:
        raise HTTPException(status_code=http_status.HTTP_404_NOT_FOUND, detail="Patient not found")
    if scope.is_patient:
        scope.ensure_access(patient_id=patient.id)
    return patient


async def list_patients(session: AsyncSession) -> PatientListResponse:
    result = await session.execute(_patient_query().order_by(desc(Patient.created_at)))
    patients = [_build_patient_response(p) for p in result.scalars().all()]
    return PatientListResponse(patients=patients, total=len(patients))


async def search_patients(session: AsyncSession, query: str) -> PatientListResponse:
    """Case-insensitive match on the patient's name or email."""
    pattern = contains_pattern(query)
    result = await session.execute(
        _patient_query()
        .join(User, Patient.user_id == User.id)
        .where(or_(User.name.ilike(pattern, escape=LIKE_ESCAPE), User.email.ilike(pattern, escape=LIKE_ESCAPE)))
        .order_by(desc(Patient.created_at))
    )
    patients = [_build_patient_response(p) for p in result.scalars().all()]
    return PatientListResponse(patients=patients, total=len(patients))


async def get_patient(session: AsyncSession, scope: Scope, patient_id: UUID) -> PatientResponse:
    patient = await _get_scoped_patient(session, scope, patient_id)
    return _build_patient_response(patient)


async def update_patient(
    session: AsyncSession,
    scope: Scope,
    patient_id: UUID,
    request: PatientUpdateRequest
) -> PatientActionResponse:
    """Update a patient profile. Patients may only edit their own; doctors may not edit."""
    if scope.is_doctor:
        raise HTTPException(status_code=http_status.HTTP_403_FORBIDDEN, detail="Access denied")
    patient = await _get_scoped_patient(session, scope, patient_id)

    changes = request.model_dump(exclude_unset=True)
    for key, value in changes.items():
        if key in USER_FIELDS:
            if value is not None:
                setattr(patient.user, key, value)
        elif key == "gender":
            patient.gender = DBGender(value.value) if value else None
        elif key == "blood_group":
            patient.blood_group = value.value if value else None
        else:
            setattr(patient, key, value)

    await session.commit()

    patient = await _fetch_patient(session, patient_id)
    return PatientActionResponse(message="Patient profile updated", patient=_build_patient_response(patient))
