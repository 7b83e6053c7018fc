# clinic_api/modules/doctors/schemas.py
"""Doctors module Pydantic schemas."""

from typing import Optional, List
from datetime import datetime
from decimal import Decimal
from pydantic import BaseModel, EmailStr, Field
from uuid import UUID


TIME_PATTERN = r"^([01]\d|2[0-3]):[0-5]\d$"


class Education(BaseModel):
    degree: str
    institution: str
    year: Optional[int] = Field(None, ge=1900, le=2100)


class DaySchedule(BaseModel):
    start: Optional[str] = Field(None, pattern=TIME_PATTERN)
    end: Optional[str] = Field(None, pattern=TIME_PATTERN)
    available: bool = False


class Availability(BaseModel):
    """Weekly working hours."""
    monday: Optional[DaySchedule] = None
    tuesday: Optional[DaySchedule] = None
    wednesday: Optional[DaySchedule] = None
    thursday: Optional[DaySchedule] = None
    friday: Optional[DaySchedule] = None
    saturday: Optional[DaySchedule] = None
    sunday: Optional[DaySchedule] = None


# ============================================================================
# REQUEST SCHEMAS
# ============================================================================

class DoctorCreateRequest(BaseModel):
    """Admin request creating a doctor account and profile."""
    name: str = Field(..., min_length=2)
    email: EmailStr
    password: str = Field(..., min_length=8)
    contact_number: Optional[str] = Field(None, max_length=20)
    specialization: str = Field(..., min_length=1)
    license_number: str = Field(..., min_length=1)
    experience: int = Field(..., ge=0)
    education: List[Education] = []
    qualifications: List[str] = []
    bio: Optional[str] = None
    image: Optional[str] = None
    contact_email: Optional[EmailStr] = None
    contact_phone: Optional[str] = Field(None, max_length=20)
    availability: Optional[Availability] = None
    consultation_fee: Decimal = Field(..., ge=0, max_digits=10, decimal_places=2)
    department: str = Field(..., min_length=1)


class DoctorUpdateRequest(BaseModel):
    """Partial update of a doctor profile."""
    specialization: Optional[str] = Field(None, min_length=1)
    license_number: Optional[str] = Field(None, min_length=1)
    experience: Optional[int] = Field(None, ge=0)
    education: Optional[List[Education]] = None
    qualifications: Optional[List[str]] = None
    bio: Optional[str] = None
    image: Optional[str] = None
    contact_email: Optional[EmailStr] = None
    contact_phone: Optional[str] = Field(None, max_length=20)
    availability: Optional[Availability] = None
    consultation_fee: Optional[Decimal] = Field(None, ge=0, max_digits=10, decimal_places=2)
    department: Optional[str] = Field(None, min_length=1)


# ============================================================================
# RESPONSE SCHEMAS
# ============================================================================

class DoctorResponse(BaseModel):
    id: UUID
    user_id: UUID
    name: str
    email: str
    contact_number: Optional[str] = None
    specialization: str
    license_number: str
    experience: int
    education: List[Education]
    qualifications: List[str]
    bio: Optional[str] = None
    image: Optional[str] = None
    contact_email: Optional[str] = None
    contact_phone: Optional[str] = None
    availability: Optional[Availability] = None
    consultation_fee: float
    department: str
    created_at: datetime

    class Config:
        from_attributes = True


class DoctorListResponse(BaseModel):
    doctors: List[DoctorResponse]
    total: int


class DoctorActionResponse(BaseModel):
    success: bool = True
    message: str
    doctor: Optional[DoctorResponse] = None
