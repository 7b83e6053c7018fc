# clinic_api/modules/billing/billing_service.py
"""Service layer for billing business logic."""

import logging
import secrets
import time
from datetime import date, datetime, timedelta, timezone
from decimal import Decimal, ROUND_HALF_UP
from typing import List, Optional, Tuple
from uuid import UUID

from fastapi import HTTPException, UploadFile, status as http_status
from sqlalchemy import select, desc
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from clinic_api.auth.scope import Scope
from clinic_api.common.config import settings
from clinic_api.common.utils.storage import discard_upload, looks_like_pdf, save_upload
from clinic_api.models.models import (
    Patient, Appointment, Billing,
    BillingStatus as DBBillingStatus, PaymentMethod as DBPaymentMethod
)
from .schemas import (
    BillResponse, BillListResponse, BillActionResponse, BillCreateRequest,
    PaymentUpdateRequest, PaymentProofResponse, ServiceItemRequest,
    ServiceItemResponse, BillingStatus, PaymentMethod
)

logger = logging.getLogger(__name__)

CENTS = Decimal("0.01")
PROOF_SUBDIR = "payment-proofs"

# Status changes an admin may make; paid and cancelled bills are closed.
PAYMENT_TRANSITIONS = {
    DBBillingStatus.PENDING: {DBBillingStatus.PAID, DBBillingStatus.OVERDUE, DBBillingStatus.CANCELLED},
    DBBillingStatus.OVERDUE: {DBBillingStatus.PAID, DBBillingStatus.CANCELLED},
}


def _money(value: Decimal) -> Decimal:
    return Decimal(value).quantize(CENTS, rounding=ROUND_HALF_UP)


def generate_invoice_number() -> str:
    """INV-<epoch millis>-<random suffix>."""
    return f"INV-{int(time.time() * 1000)}-{secrets.token_hex(3).upper()}"


def compute_totals(
    services: List[ServiceItemRequest],
    tax: Decimal,
    discount: Decimal
) -> Tuple[List[dict], Decimal, Decimal]:
    """
    Price each line item and the bill as a whole.

    Returns the stored line items, the subtotal and the total, where
    total = sum(quantity * unit_price) + tax - discount.
    """
    items = []
    subtotal = Decimal("0")
    for service in services:
        line_total = _money(service.unit_price * service.quantity)
        subtotal += line_total
        items.append({
            "description": service.description,
            "quantity": service.quantity,
            "unit_price": str(_money(service.unit_price)),
            "total_price": str(line_total),
        })
    subtotal = _money(subtotal)
    total = _money(subtotal + tax - discount)
    return items, subtotal, total


def _build_bill_response(bill: Billing) -> BillResponse:
    """Build BillResponse from database model."""
    return BillResponse(
        id=bill.id,
        invoice_number=bill.invoice_number,
        patient_id=bill.patient_id,
        patient_name=bill.patient.user.name,
        appointment_id=bill.appointment_id,
        services=[
            ServiceItemResponse(
                description=item["description"],
                quantity=item["quantity"],
                unit_price=float(item["unit_price"]),
                total_price=float(item["total_price"]),
            )
            for item in bill.services or []
        ],
        subtotal=float(bill.subtotal),
        tax=float(bill.tax),
        discount=float(bill.discount),
        total_amount=float(bill.total_amount),
        status=BillingStatus(bill.status.value),
        payment_method=PaymentMethod(bill.payment_method.value) if bill.payment_method else None,
        payment_date=bill.payment_date,
        due_date=bill.due_date,
        payment_proof=bill.payment_proof,
        verified_by_doctor=bill.verified_by_doctor,
        created_at=bill.created_at,
    )


async def _fetch_bill(session: AsyncSession, bill_id: UUID) -> Optional[Billing]:
    result = await session.execute(
        select(Billing)
        .options(selectinload(Billing.patient).selectinload(Patient.user))
        .where(Billing.id == bill_id)
        .execution_options(populate_existing=True)
    )
    return result.scalar_one_or_none()


async def _get_scoped_bill(session: AsyncSession, scope: Scope, bill_id: UUID) -> Billing:
    bill = await _fetch_bill(session, bill_id)
    if not bill:
        raise HTTPException(status_code=http_status.HTTP_404_NOT_FOUND, detail="Bill not found")
    if scope.is_patient:
        scope.ensure_access(patient_id=bill.patient_id)
    return bill


async def list_bills(session: AsyncSession, scope: Scope) -> BillListResponse:
    """Patients see their own bills; doctors and admins see all bills."""
    query = (
        select(Billing)
        .options(selectinload(Billing.patient).selectinload(Patient.user))
        .order_by(desc(Billing.created_at))
    )
    if scope.is_patient:
        if scope.patient_id is None:
            return BillListResponse(bills=[], total=0)
        query = query.where(Billing.patient_id == scope.patient_id)

    result = await session.execute(query)
    bills = [_build_bill_response(b) for b in result.scalars().all()]
    return BillListResponse(bills=bills, total=len(bills))


async def get_bill(session: AsyncSession, scope: Scope, bill_id: UUID) -> BillResponse:
    bill = await _get_scoped_bill(session, scope, bill_id)
    return _build_bill_response(bill)


async def create_bill(session: AsyncSession, request: BillCreateRequest) -> BillActionResponse:
    """Create a bill with server-computed totals, due BILL_DUE_DAYS from today."""
    patient = await session.get(Patient, request.patient_id)
    if not patient:
        raise HTTPException(status_code=http_status.HTTP_404_NOT_FOUND, detail="Patient not found")

    if request.appointment_id:
        appointment = await session.get(Appointment, request.appointment_id)
        if not appointment:
            raise HTTPException(status_code=http_status.HTTP_404_NOT_FOUND, detail="Appointment not found")
        if appointment.patient_id != patient.id:
            raise HTTPException(
                status_code=http_status.HTTP_400_BAD_REQUEST,
                detail="Appointment does not belong to this patient"
            )

    items, subtotal, total = compute_totals(request.services, request.tax, request.discount)
    if total < 0:
        raise HTTPException(
            status_code=http_status.HTTP_400_BAD_REQUEST,
            detail="Discount cannot exceed subtotal plus tax"
        )

    bill = Billing(
        patient_id=patient.id,
        appointment_id=request.appointment_id,
        invoice_number=generate_invoice_number(),
        services=items,
        subtotal=subtotal,
        tax=_money(request.tax),
        discount=_money(request.discount),
        total_amount=total,
        status=DBBillingStatus.PENDING,
        due_date=date.today() + timedelta(days=settings.BILL_DUE_DAYS),
    )
    session.add(bill)
    await session.commit()
    logger.info("Created bill %s (%s) for patient %s, total %s", bill.id, bill.invoice_number, patient.id, total)

    bill = await _fetch_bill(session, bill.id)
    return BillActionResponse(message="Bill created successfully", bill=_build_bill_response(bill))


async def update_payment(
    session: AsyncSession,
    bill_id: UUID,
    request: PaymentUpdateRequest
) -> BillActionResponse:
    """Move a bill to a new payment status. Marking it paid stamps the payment date and method."""
    bill = await _fetch_bill(session, bill_id)
    if not bill:
        raise HTTPException(status_code=http_status.HTTP_404_NOT_FOUND, detail="Bill not found")

    new_status = DBBillingStatus(request.status.value)
    if new_status not in PAYMENT_TRANSITIONS.get(bill.status, set()):
        logger.warning("Rejected bill %s status change %s -> %s", bill_id, bill.status.value, new_status.value)
        raise HTTPException(
            status_code=http_status.HTTP_400_BAD_REQUEST,
            detail=f"Cannot change a {bill.status.value} bill to {new_status.value}"
        )

    bill.status = new_status
    if new_status == DBBillingStatus.PAID:
        bill.payment_date = datetime.now(timezone.utc)
        bill.payment_method = DBPaymentMethod(request.payment_method.value) if request.payment_method else None

    await session.commit()
    logger.info("Bill %s is now %s", bill_id, new_status.value)

    bill = await _fetch_bill(session, bill_id)
    return BillActionResponse(message="Payment status updated", bill=_build_bill_response(bill))


async def upload_payment_proof(
    session: AsyncSession,
    scope: Scope,
    bill_id: UUID,
    file: UploadFile
) -> PaymentProofResponse:
    """Attach a PDF payment proof to one of the patient's pending bills."""
    bill = await _get_scoped_bill(session, scope, bill_id)
    if bill.status != DBBillingStatus.PENDING:
        raise HTTPException(
            status_code=http_status.HTTP_400_BAD_REQUEST,
            detail="Payment proof can only be attached to a pending bill"
        )

    content = await file.read()
    if not looks_like_pdf(file, content[:4]):
        raise HTTPException(status_code=http_status.HTTP_400_BAD_REQUEST, detail="Only PDF files are allowed")

    stored_path = await save_upload(file, PROOF_SUBDIR, content)
    bill.payment_proof = stored_path
    # A verification covers only the proof the doctor actually saw
    bill.verified_by_doctor = False
    try:
        await session.commit()
    except Exception:
        await session.rollback()
        discard_upload(stored_path)
        raise
    logger.info("Stored payment proof for bill %s at %s", bill_id, stored_path)

    return PaymentProofResponse(payment_proof=stored_path)


async def verify_payment(session: AsyncSession, bill_id: UUID) -> BillActionResponse:
    """Doctor confirms a bill's uploaded payment proof."""
    bill = await _fetch_bill(session, bill_id)
    if not bill:
        raise HTTPException(status_code=http_status.HTTP_404_NOT_FOUND, detail="Bill not found")
    if not bill.payment_proof:
        raise HTTPException(status_code=http_status.HTTP_400_BAD_REQUEST, detail="No payment proof uploaded")

    bill.verified_by_doctor = True
    await session.commit()
    logger.info("Payment proof for bill %s verified", bill_id)

    bill = await _fetch_bill(session, bill_id)
    return BillActionResponse(message="Payment verified by doctor", bill=_build_bill_response(bill))
