from datetime import date, timedelta
from decimal import Decimal

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from clinic_api.main import app
from clinic_api.modules.billing.billing_service import compute_totals, generate_invoice_number
from clinic_api.modules.billing.schemas import ServiceItemRequest

PDF_BYTES = b"%PDF-1.4\n1 0 obj\n<<>>\nendobj\n%%EOF\n"


def bill_payload(patient, **overrides):
    payload = {
        "patient_id": patient.profile_id,
        "services": [
            {"description": "Consultation", "quantity": 2, "unit_price": "50.00"},
            {"description": "Blood test", "quantity": 1, "unit_price": "25.50"},
        ],
        "tax": "10.00",
        "discount": "5.50",
    }
    payload.update(overrides)
    return payload


async def create_bill(client, author, patient, **overrides):
    response = await client.post("/billing", json=bill_payload(patient, **overrides), headers=author.headers)
    assert response.status_code == 201, response.text
    return response.json()["bill"]


async def upload_proof(client, actor, bill_id, content=PDF_BYTES, content_type="application/pdf", name="receipt.pdf"):
    return await client.post(
        f"/billing/{bill_id}/payment-proof",
        files={"payment_proof": (name, content, content_type)},
        headers=actor.headers,
    )


def test_compute_totals():
    services = [
        ServiceItemRequest(description="Consultation", quantity=3, unit_price=Decimal("19.99")),
        ServiceItemRequest(description="X-ray", quantity=1, unit_price=Decimal("120.00")),
    ]

    items, subtotal, total = compute_totals(services, Decimal("7.50"), Decimal("20.00"))

    assert subtotal == Decimal("179.97")
    assert total == Decimal("167.47")
    assert items[0]["total_price"] == "59.97"


def test_invoice_numbers_are_unique():
    numbers = {generate_invoice_number() for _ in range(50)}

    assert len(numbers) == 50
    assert all(number.startswith("INV-") for number in numbers)


async def test_admin_creates_bill_with_server_side_totals(client, admin, patient):
    response = await client.post("/billing", json=bill_payload(patient), headers=admin.headers)

    assert response.status_code == 201
    assert response.json()["message"] == "Bill created successfully"
    bill = response.json()["bill"]
    assert bill["subtotal"] == pytest.approx(125.50)
    assert bill["total_amount"] == pytest.approx(130.00)
    assert bill["status"] == "pending"
    assert bill["patient_name"] == "John Smith"
    assert bill["invoice_number"].startswith("INV-")
    assert bill["due_date"] == (date.today() + timedelta(days=30)).isoformat()
    assert [s["total_price"] for s in bill["services"]] == [100.0, 25.5]


async def test_doctor_can_create_bill(client, doctor, patient):
    await create_bill(client, doctor, patient)


async def test_patient_cannot_create_bill(client, patient):
    response = await client.post("/billing", json=bill_payload(patient), headers=patient.headers)

    assert response.status_code == 403


async def test_bill_requires_a_service(client, admin, patient):
    response = await client.post("/billing", json=bill_payload(patient, services=[]), headers=admin.headers)

    assert response.status_code == 400
    assert response.json()["message"] == "Validation failed"


async def test_discount_larger_than_bill_is_refused(client, admin, patient):
    response = await client.post(
        "/billing", json=bill_payload(patient, tax="0", discount="500.00"), headers=admin.headers
    )

    assert response.status_code == 400


async def test_bill_for_another_patients_appointment(client, admin, patient, other_patient, doctor):
    booked = await client.post(
        "/appointments",
        json={"doctor_id": doctor.profile_id, "date": "2024-01-10", "time": "09:00", "reason": "Checkup"},
        headers=patient.headers,
    )
    appointment_id = booked.json()["appointment"]["id"]

    response = await client.post(
        "/billing", json=bill_payload(other_patient, appointment_id=appointment_id), headers=admin.headers
    )
    assert response.status_code == 400

    bill = await create_bill(client, admin, patient, appointment_id=appointment_id)
    assert bill["appointment_id"] == appointment_id


async def test_patients_only_see_their_own_bills(client, admin, patient, other_patient, doctor):
    mine = await create_bill(client, admin, patient)
    theirs = await create_bill(client, admin, other_patient)

    listing = (await client.get("/billing", headers=patient.headers)).json()
    assert [b["id"] for b in listing["bills"]] == [mine["id"]]

    assert (await client.get(f"/billing/{theirs['id']}", headers=patient.headers)).status_code == 403
    assert (await client.get(f"/billing/{mine['id']}", headers=patient.headers)).status_code == 200

    assert (await client.get("/billing", headers=doctor.headers)).json()["total"] == 2


async def test_admin_marks_bill_paid(client, admin, patient):
    bill = await create_bill(client, admin, patient)

    response = await client.put(
        f"/billing/{bill['id']}/payment", json={"status": "paid", "payment_method": "card"}, headers=admin.headers
    )

    assert response.status_code == 200
    updated = response.json()["bill"]
    assert updated["status"] == "paid"
    assert updated["payment_method"] == "card"
    assert updated["payment_date"] is not None


async def test_paid_bill_is_closed(client, admin, patient):
    bill = await create_bill(client, admin, patient)
    url = f"/billing/{bill['id']}/payment"
    await client.put(url, json={"status": "paid", "payment_method": "cash"}, headers=admin.headers)

    response = await client.put(url, json={"status": "pending"}, headers=admin.headers)

    assert response.status_code == 400
    assert response.json()["detail"] == "Cannot change a paid bill to pending"


async def test_overdue_bill_can_still_be_paid(client, admin, patient):
    bill = await create_bill(client, admin, patient)
    url = f"/billing/{bill['id']}/payment"

    assert (await client.put(url, json={"status": "overdue"}, headers=admin.headers)).status_code == 200
    response = await client.put(url, json={"status": "paid", "payment_method": "online"}, headers=admin.headers)
    assert response.json()["bill"]["status"] == "paid"


async def test_only_admin_updates_payment(client, admin, doctor, patient):
    bill = await create_bill(client, admin, patient)

    response = await client.put(f"/billing/{bill['id']}/payment", json={"status": "paid"}, headers=doctor.headers)

    assert response.status_code == 403


async def test_patient_uploads_pdf_proof(client, admin, patient, upload_dir):
    bill = await create_bill(client, admin, patient)

    response = await upload_proof(client, patient, bill["id"])

    assert response.status_code == 200
    body = response.json()
    assert body["message"] == "Payment proof uploaded"
    assert body["payment_proof"].startswith("/uploads/payment-proofs/")
    assert body["payment_proof"].endswith("-receipt.pdf")

    stored = upload_dir / "payment-proofs" / body["payment_proof"].rsplit("/", 1)[-1]
    assert stored.read_bytes() == PDF_BYTES

    refreshed = (await client.get(f"/billing/{bill['id']}", headers=patient.headers)).json()
    assert refreshed["payment_proof"] == body["payment_proof"]


@pytest.mark.parametrize("content,content_type", [
    (b"not really a pdf", "application/pdf"),
    (PDF_BYTES, "image/png"),
])
async def test_non_pdf_proof_is_rejected(client, admin, patient, content, content_type):
    bill = await create_bill(client, admin, patient)

    response = await upload_proof(client, patient, bill["id"], content=content, content_type=content_type)

    assert response.status_code == 400
    assert response.json()["detail"] == "Only PDF files are allowed"


async def test_proof_upload_is_scoped_to_owner(client, admin, patient, other_patient):
    bill = await create_bill(client, admin, patient)

    response = await upload_proof(client, other_patient, bill["id"])

    assert response.status_code == 403


async def test_proof_only_for_pending_bills(client, admin, patient):
    bill = await create_bill(client, admin, patient)
    await client.put(f"/billing/{bill['id']}/payment", json={"status": "cancelled"}, headers=admin.headers)

    response = await upload_proof(client, patient, bill["id"])

    assert response.status_code == 400


async def test_doctor_verifies_uploaded_proof(client, admin, patient, doctor):
    bill = await create_bill(client, admin, patient)
    url = f"/billing/{bill['id']}/verify-payment"

    missing = await client.put(url, headers=doctor.headers)
    assert missing.status_code == 400
    assert missing.json()["detail"] == "No payment proof uploaded"

    await upload_proof(client, patient, bill["id"])

    assert (await client.put(url, headers=admin.headers)).status_code == 403
    response = await client.put(url, headers=doctor.headers)
    assert response.status_code == 200
    assert response.json()["message"] == "Payment verified by doctor"
    assert response.json()["bill"]["verified_by_doctor"] is True


async def test_new_proof_clears_previous_verification(client, admin, patient, doctor):
    bill = await create_bill(client, admin, patient)
    await upload_proof(client, patient, bill["id"])
    verified = await client.put(f"/billing/{bill['id']}/verify-payment", headers=doctor.headers)
    assert verified.json()["bill"]["verified_by_doctor"] is True

    replaced = await upload_proof(client, patient, bill["id"], name="other.pdf")
    assert replaced.status_code == 200

    refreshed = (await client.get(f"/billing/{bill['id']}", headers=patient.headers)).json()
    assert refreshed["payment_proof"].endswith("-other.pdf")
    assert refreshed["verified_by_doctor"] is False


async def test_failed_commit_removes_stored_proof(client, admin, patient, upload_dir, monkeypatch):
    bill = await create_bill(client, admin, patient)

    async def failing_commit(self):
        raise RuntimeError("database unavailable")

    monkeypatch.setattr(AsyncSession, "commit", failing_commit)
    transport = ASGITransport(app=app, raise_app_exceptions=False)
    async with AsyncClient(transport=transport, base_url="http://test") as failing_client:
        response = await upload_proof(failing_client, patient, bill["id"])

    assert response.status_code == 500
    assert response.json() == {"message": "Server error"}
    proof_dir = upload_dir / "payment-proofs"
    assert not proof_dir.exists() or list(proof_dir.iterdir()) == []
