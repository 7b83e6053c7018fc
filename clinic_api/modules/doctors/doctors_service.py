# clinic_api/modules/doctors/doctors_service.py
"""Service layer for doctor profiles."""

import logging
from typing import Optional
from uuid import UUID

from fastapi import HTTPException, status as http_status
from sqlalchemy import select, desc
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from clinic_api.auth.auth_service import create_user
from clinic_api.auth.scope import Scope
from clinic_api.common.utils.search import LIKE_ESCAPE, contains_pattern
from clinic_api.models.models import Doctor, UserRole
from .schemas import (
    DoctorResponse, DoctorListResponse, DoctorActionResponse,
    DoctorCreateRequest, DoctorUpdateRequest, Availability, Education
)

logger = logging.getLogger(__name__)


def _build_doctor_response(doctor: Doctor) -> DoctorResponse:
    return DoctorResponse(
        id=doctor.id,
        user_id=doctor.user_id,
        name=doctor.user.name,
        email=doctor.user.email,
        contact_number=doctor.user.contact_number,
        specialization=doctor.specialization,
        license_number=doctor.license_number,
        experience=doctor.experience,
        education=[Education(**e) for e in doctor.education or []],
        qualifications=list(doctor.qualifications or []),
        bio=doctor.bio,
        image=doctor.image,
        contact_email=doctor.contact_email,
        contact_phone=doctor.contact_phone,
        availability=Availability(**doctor.availability) if doctor.availability else None,
        consultation_fee=float(doctor.consultation_fee),
        department=doctor.department,
        created_at=doctor.created_at,
    )


def _doctor_query():
    return select(Doctor).options(selectinload(Doctor.user))


async def _fetch_doctor(session: AsyncSession, doctor_id: UUID) -> Optional[Doctor]:
    result = await session.execute(
        _doctor_query()
        .where(Doctor.id == doctor_id)
        .execution_options(populate_existing=True)
    )
    return result.scalar_one_or_none()


async def _get_doctor_or_404(session: AsyncSession, doctor_id: UUID) -> Doctor:
    doctor = await _fetch_doctor(session, doctor_id)
    if not doctor:
        raise HTTPException(status_code=http_status.HTTP_404_NOT_FOUND, detail="Doctor not found")
    return doctor


async def _ensure_license_free(session: AsyncSession, license_number: str, exclude_id: Optional[UUID] = None) -> None:
    query = select(Doctor.id).where(Doctor.license_number == license_number)
    if exclude_id is not None:
        query = query.where(Doctor.id != exclude_id)
    result = await session.execute(query)
    if result.first() is not None:
        raise HTTPException(
            status_code=http_status.HTTP_400_BAD_REQUEST,
            detail="A doctor with this license number already exists"
        )


async def list_doctors(session: AsyncSession) -> DoctorListResponse:
    result = await session.execute(_doctor_query().order_by(desc(Doctor.created_at)))
    doctors = [_build_doctor_response(d) for d in result.scalars().all()]
    return DoctorListResponse(doctors=doctors, total=len(doctors))


async def search_by_specialization(session: AsyncSession, specialization: str) -> DoctorListResponse:
    """Case-insensitive substring match on specialization."""
    pattern = contains_pattern(specialization)
    result = await session.execute(
        _doctor_query()
        .where(Doctor.specialization.ilike(pattern, escape=LIKE_ESCAPE))
        .order_by(desc(Doctor.created_at))
    )
    doctors = [_build_doctor_response(d) for d in result.scalars().all()]
    return DoctorListResponse(doctors=doctors, total=len(doctors))


async def get_doctor(session: AsyncSession, doctor_id: UUID) -> DoctorResponse:
    doctor = await _get_doctor_or_404(session, doctor_id)
    return _build_doctor_response(doctor)


async def get_availability(session: AsyncSession, doctor_id: UUID) -> Availability:
    doctor = await _get_doctor_or_404(session, doctor_id)
    return Availability(**doctor.availability) if doctor.availability else Availability()


async def create_doctor(session: AsyncSession, request: DoctorCreateRequest) -> DoctorActionResponse:
    """Create the doctor's user account and profile in one transaction."""
    await _ensure_license_free(session, request.license_number)

    user = await create_user(
        name=request.name,
        email=request.email,
        password=request.password,
        role=UserRole.DOCTOR,
        db=session,
        contact_number=request.contact_number
    )
    doctor = Doctor(
        user_id=user.id,
        specialization=request.specialization,
        license_number=request.license_number,
        experience=request.experience,
        education=[e.model_dump() for e in request.education],
        qualifications=request.qualifications,
        bio=request.bio,
        image=request.image,
        contact_email=request.contact_email,
        contact_phone=request.contact_phone,
        availability=request.availability.model_dump() if request.availability else None,
        consultation_fee=request.consultation_fee,
        department=request.department,
    )
    session.add(doctor)
    await session.commit()
    logger.info("Created doctor %s (%s)", doctor.id, request.specialization)

    doctor = await _fetch_doctor(session, doctor.id)
    return DoctorActionResponse(message="Doctor created successfully", doctor=_build_doctor_response(doctor))


async def update_doctor(
    session: AsyncSession,
    scope: Scope,
    doctor_id: UUID,
    request: DoctorUpdateRequest
) -> DoctorActionResponse:
    """Update a doctor profile. Doctors may only edit their own."""
    doctor = await _get_doctor_or_404(session, doctor_id)
    if not (scope.is_admin or (scope.is_doctor and scope.doctor_id == doctor.id)):
        raise HTTPException(status_code=http_status.HTTP_403_FORBIDDEN, detail="Access denied")

    changes = request.model_dump(exclude_unset=True)
    if changes.get("license_number") and changes["license_number"] != doctor.license_number:
        await _ensure_license_free(session, changes["license_number"], exclude_id=doctor.id)

    for key, value in changes.items():
        if value is None and key in ("specialization", "license_number", "experience", "consultation_fee", "department"):
            continue
        setattr(doctor, key, value)

    await session.commit()

    doctor = await _fetch_doctor(session, doctor_id)
    return DoctorActionResponse(message="Doctor profile updated", doctor=_build_doctor_response(doctor))
