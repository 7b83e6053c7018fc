# clinic_api/modules/patients/schemas.py
"""Patients module Pydantic schemas."""

from typing import Optional, List
from datetime import date, datetime
from pydantic import BaseModel, Field
from uuid import UUID
from enum import Enum


class Gender(str, Enum):
    MALE = "male"
    FEMALE = "female"
    OTHER = "other"


class BloodGroup(str, Enum):
    A_POS = "A+"
    A_NEG = "A-"
    B_POS = "B+"
    B_NEG = "B-"
    AB_POS = "AB+"
    AB_NEG = "AB-"
    O_POS = "O+"
    O_NEG = "O-"


class PatientUpdateRequest(BaseModel):
    """Partial update of a patient profile and its account details."""
    name: Optional[str] = Field(None, min_length=2)
    contact_number: Optional[str] = Field(None, max_length=20)
    date_of_birth: Optional[date] = None
    gender: Optional[Gender] = None
    blood_group: Optional[BloodGroup] = None
    address: Optional[str] = None
    emergency_contact_name: Optional[str] = Field(None, max_length=200)
    emergency_contact_phone: Optional[str] = Field(None, max_length=20)
    allergies: Optional[str] = None
    medical_history: Optional[str] = None


class PatientResponse(BaseModel):
    id: UUID
    user_id: UUID
    name: str
    email: str
    contact_number: Optional[str] = None
    date_of_birth: Optional[date] = None
    gender: Optional[Gender] = None
    blood_group: Optional[BloodGroup] = None
    address: Optional[str] = None
    emergency_contact_name: Optional[str] = None
    emergency_contact_phone: Optional[str] = None
    allergies: Optional[str] = None
    medical_history: Optional[str] = None
    created_at: datetime

    class Config:
        from_attributes = True


class PatientListResponse(BaseModel):
    patients: List[PatientResponse]
    total: int


class PatientActionResponse(BaseModel):
    success: bool = True
    message: str
    patient: Optional[PatientResponse] = None
