# clinic_api/modules/billing/billing_controller.py
"""Billing controller with API routes."""

from uuid import UUID

from fastapi import APIRouter, Depends, File, UploadFile
from sqlalchemy.ext.asyncio import AsyncSession

from clinic_api.common.database.database import get_db_session
from clinic_api.auth.dependencies import require_roles
from clinic_api.auth.scope import Scope, get_scope
from clinic_api.models.models import UserRole

from . import billing_service as service
from .schemas import (
    BillResponse, BillListResponse, BillActionResponse, BillCreateRequest,
    PaymentUpdateRequest, PaymentProofResponse
)

router = APIRouter(prefix="/billing", tags=["Billing"])


@router.get("", response_model=BillListResponse)
async def get_bills(
    db: AsyncSession = Depends(get_db_session),
    scope: Scope = Depends(get_scope)
):
    """List bills, newest first. Patients only see their own."""
    return await service.list_bills(db, scope)


@router.post(
    "",
    response_model=BillActionResponse,
    status_code=201,
    dependencies=[Depends(require_roles(UserRole.ADMIN, UserRole.DOCTOR))]
)
async def create_bill(
    request: BillCreateRequest,
    db: AsyncSession = Depends(get_db_session)
):
    """Create a bill; subtotal, tax, discount and total are computed server-side."""
    return await service.create_bill(db, request)


@router.get("/{bill_id}", response_model=BillResponse)
async def get_bill(
    bill_id: UUID,
    db: AsyncSession = Depends(get_db_session),
    scope: Scope = Depends(get_scope)
):
    """Get a single bill by ID."""
    return await service.get_bill(db, scope, bill_id)


@router.put(
    "/{bill_id}/payment",
    response_model=BillActionResponse,
    dependencies=[Depends(require_roles(UserRole.ADMIN))]
)
async def update_payment(
    bill_id: UUID,
    request: PaymentUpdateRequest,
    db: AsyncSession = Depends(get_db_session)
):
    """Update a bill's payment status (admin only)."""
    return await service.update_payment(db, bill_id, request)


@router.post(
    "/{bill_id}/payment-proof",
    response_model=PaymentProofResponse,
    dependencies=[Depends(require_roles(UserRole.PATIENT))]
)
async def upload_payment_proof(
    bill_id: UUID,
    payment_proof: UploadFile = File(..., description="PDF payment proof"),
    db: AsyncSession = Depends(get_db_session),
    scope: Scope = Depends(get_scope)
):
    """Upload a PDF proof of payment for one of your pending bills."""
    return await service.upload_payment_proof(db, scope, bill_id, payment_proof)


@router.put(
    "/{bill_id}/verify-payment",
    response_model=BillActionResponse,
    dependencies=[Depends(require_roles(UserRole.DOCTOR))]
)
async def verify_payment(
    bill_id: UUID,
    db: AsyncSession = Depends(get_db_session)
):
    """Mark an uploaded payment proof as verified (doctor only)."""
    return await service.verify_payment(db, bill_id)
