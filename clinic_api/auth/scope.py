# clinic_api/auth/scope.py
"""
Caller scoping shared by every resource.

A scope is the caller's role plus the id of their own patient or doctor
profile. Services resolve it once per request and use it both to filter
list queries and to reject access to records that belong to somebody else.
"""

from dataclasses import dataclass
from typing import Optional
from uuid import UUID

from fastapi import Depends, HTTPException, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from clinic_api.auth.dependencies import get_current_user
from clinic_api.common.database.database import get_db_session
from clinic_api.models.models import User, UserRole, Patient, Doctor


@dataclass(frozen=True)
class Scope:
    user: User
    role: UserRole
    patient_id: Optional[UUID] = None
    doctor_id: Optional[UUID] = None

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN

    @property
    def is_patient(self) -> bool:
        return self.role == UserRole.PATIENT

    @property
    def is_doctor(self) -> bool:
        return self.role == UserRole.DOCTOR

    def can_access(self, patient_id: Optional[UUID] = None, doctor_id: Optional[UUID] = None) -> bool:
        """Whether a record owned by the given patient/doctor is visible to the caller."""
        if self.is_admin:
            return True
        if self.is_patient:
            return self.patient_id is not None and self.patient_id == patient_id
        if self.is_doctor:
            return self.doctor_id is not None and self.doctor_id == doctor_id
        return False

    def ensure_access(self, patient_id: Optional[UUID] = None, doctor_id: Optional[UUID] = None) -> None:
        if not self.can_access(patient_id=patient_id, doctor_id=doctor_id):
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Access denied")

    def require_patient_id(self) -> UUID:
        """Own patient profile id; 404 when the profile is missing."""
        if self.patient_id is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Patient profile not found")
        return self.patient_id

    def require_doctor_id(self) -> UUID:
        """Own doctor profile id; 404 when the profile is missing."""
        if self.doctor_id is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Doctor profile not found")
        return self.doctor_id


async def resolve_scope(session: AsyncSession, user: User) -> Scope:
    """Derive the caller's scope from their role and profile."""
    if user.role == UserRole.PATIENT:
        result = await session.execute(select(Patient.id).where(Patient.user_id == user.id))
        return Scope(user=user, role=user.role, patient_id=result.scalar_one_or_none())
    if user.role == UserRole.DOCTOR:
        result = await session.execute(select(Doctor.id).where(Doctor.user_id == user.id))
        return Scope(user=user, role=user.role, doctor_id=result.scalar_one_or_none())
    return Scope(user=user, role=user.role)


async def get_scope(
    db: AsyncSession = Depends(get_db_session),
    current_user: User = Depends(get_current_user)
) -> Scope:
    """FastAPI dependency returning the caller's scope."""
    return await resolve_scope(db, current_user)
