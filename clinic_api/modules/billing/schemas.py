# clinic_api/modules/billing/schemas.py
"""Billing module Pydantic schemas."""

from typing import Optional, List
from datetime import date, datetime
from decimal import Decimal
from pydantic import BaseModel, Field
from uuid import UUID
from enum import Enum


class BillingStatus(str, Enum):
    PENDING = "pending"
    PAID = "paid"
    OVERDUE = "overdue"
    CANCELLED = "cancelled"


class PaymentMethod(str, Enum):
    CASH = "cash"
    CARD = "card"
    INSURANCE = "insurance"
    ONLINE = "online"


# ============================================================================
# REQUEST SCHEMAS
# ============================================================================

class ServiceItemRequest(BaseModel):
    """A billed line item."""
    description: str = Field(..., min_length=1)
    quantity: int = Field(..., ge=1)
    unit_price: Decimal = Field(..., ge=0, max_digits=12, decimal_places=2)


class BillCreateRequest(BaseModel):
    """Request to create a bill. Totals are computed server-side."""
    patient_id: UUID
    appointment_id: Optional[UUID] = None
    services: List[ServiceItemRequest] = Field(..., min_length=1)
    tax: Decimal = Field(default=Decimal("0"), ge=0, max_digits=12, decimal_places=2)
    discount: Decimal = Field(default=Decimal("0"), ge=0, max_digits=12, decimal_places=2)


class PaymentUpdateRequest(BaseModel):
    """Admin update of a bill's payment status."""
    status: BillingStatus
    payment_method: Optional[PaymentMethod] = None


# ============================================================================
# RESPONSE SCHEMAS
# ============================================================================

class ServiceItemResponse(BaseModel):
    description: str
    quantity: int
    unit_price: float
    total_price: float


class BillResponse(BaseModel):
    """Full bill details."""
    id: UUID
    invoice_number: str
    patient_id: UUID
    patient_name: str
    appointment_id: Optional[UUID] = None
    services: List[ServiceItemResponse]
    subtotal: float
    tax: float
    discount: float
    total_amount: float
    status: BillingStatus
    payment_method: Optional[PaymentMethod] = None
    payment_date: Optional[datetime] = None
    due_date: date
    payment_proof: Optional[str] = None
    verified_by_doctor: bool
    created_at: datetime

    class Config:
        from_attributes = True


class BillListResponse(BaseModel):
    bills: List[BillResponse]
    total: int


class BillActionResponse(BaseModel):
    success: bool = True
    message: str
    bill: Optional[BillResponse] = None


class PaymentProofResponse(BaseModel):
    message: str = "Payment proof uploaded"
    payment_proof: str
