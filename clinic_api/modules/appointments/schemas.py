# clinic_api/modules/appointments/schemas.py
"""Appointments module Pydantic schemas."""

from typing import Optional, List
import datetime as dt
from pydantic import BaseModel, Field
from uuid import UUID
from enum import Enum


class AppointmentStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    SCHEDULED = "scheduled"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    NO_SHOW = "no-show"


# ============================================================================
# SHARED SCHEMAS
# ============================================================================

class Medication(BaseModel):
    name: str = Field(..., min_length=1)
    dosage: Optional[str] = None
    frequency: Optional[str] = None
    duration: Optional[str] = None


class Prescription(BaseModel):
    medications: List[Medication] = []
    instructions: Optional[str] = None


# ============================================================================
# REQUEST SCHEMAS
# ============================================================================

class AppointmentCreateRequest(BaseModel):
    """Request to book a new appointment."""
    doctor_id: UUID
    patient_id: Optional[UUID] = Field(None, description="Required when an admin books for a patient")
    date: dt.date
    time: str = Field(..., pattern=r"^([01]\d|2[0-3]):[0-5]\d$", description="Slot start, HH:MM")
    reason: str = Field(..., min_length=1)
    notes: Optional[str] = None


class AppointmentUpdateRequest(BaseModel):
    """Request to update appointment details. Status moves only through the workflow routes."""
    date: Optional[dt.date] = None
    time: Optional[str] = Field(None, pattern=r"^([01]\d|2[0-3]):[0-5]\d$")
    reason: Optional[str] = Field(None, min_length=1)
    notes: Optional[str] = None
    prescription: Optional[Prescription] = None
    follow_up_date: Optional[dt.date] = None


class AppointmentApproveRequest(BaseModel):
    approve: bool = True


# ============================================================================
# RESPONSE SCHEMAS
# ============================================================================

class PartyInfo(BaseModel):
    """Patient or doctor summary embedded in an appointment."""
    id: UUID
    name: str
    email: str
    contact_number: Optional[str] = None
    specialization: Optional[str] = None


class AppointmentResponse(BaseModel):
    """Full appointment details."""
    id: UUID
    patient: PartyInfo
    doctor: PartyInfo
    date: dt.date
    time: str
    status: AppointmentStatus
    approved_by_doctor: bool
    completed_by_doctor: bool
    reason: str
    notes: Optional[str] = None
    prescription: Optional[Prescription] = None
    follow_up_date: Optional[dt.date] = None
    created_at: dt.datetime

    class Config:
        from_attributes = True


class AppointmentListResponse(BaseModel):
    appointments: List[AppointmentResponse]
    total: int


class AppointmentActionResponse(BaseModel):
    """Generic response for appointment actions."""
    success: bool = True
    message: str
    appointment: Optional[AppointmentResponse] = None
