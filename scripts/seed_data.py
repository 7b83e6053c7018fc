# scripts/seed_data.py
"""
Seed script for local development.

Creates an admin, two doctors and two patients, with appointments in
different states of the workflow and a couple of bills.

Run: python -m scripts.seed_data
"""

import asyncio
from datetime import date, datetime, timedelta, timezone
from decimal import Decimal

from sqlalchemy import delete
from sqlalchemy.ext.asyncio import AsyncSession

from clinic_api.common.database.database import async_session
from clinic_api.auth.auth_service import hash_password
from clinic_api.models.models import (
    User, Patient, Doctor, Appointment, Billing, ChatHistory,
    UserRole, Gender, AppointmentStatus, BillingStatus, PaymentMethod
)
from clinic_api.modules.billing.billing_service import compute_totals, generate_invoice_number
from clinic_api.modules.billing.schemas import ServiceItemRequest


# =============================================================================
# CONSTANTS - Test Credentials
# =============================================================================

TEST_PASSWORD = "Test1234!"  # Same password for all seeded users
HASHED_PASSWORD = None  # Set in seed_all_data()

WORKING_WEEK = {
    day: {"start": "09:00", "end": "17:00", "available": day not in ("saturday", "sunday")}
    for day in ("monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday")
}


async def clear_existing_data(db: AsyncSession):
    """Clear all data (if needed for re-seeding)."""
    print("Clearing existing data...")

    # Delete in reverse order of dependencies
    for table in (ChatHistory, Billing, Appointment, Doctor, Patient, User):
        await db.execute(delete(table))

    await db.commit()
    print("Data cleared")


def _user(name: str, email: str, role: UserRole, contact_number: str = None) -> User:
    return User(
        name=name,
        email=email,
        password_hash=HASHED_PASSWORD,
        role=role,
        contact_number=contact_number,
        is_active=True,
    )


async def create_admin(db: AsyncSession) -> User:
    print("Creating admin...")
    admin = _user("Clinic Admin", "admin@clinic.com", UserRole.ADMIN, "+15550000001")
    db.add(admin)
    await db.flush()
    return admin


async def create_doctors(db: AsyncSession) -> list:
    print("Creating doctors...")
    profiles = [
        {
            "name": "Dr. Sarah Johnson",
            "email": "sarah.johnson@clinic.com",
            "specialization": "Cardiology",
            "license_number": "MD-CARD-1001",
            "experience": 15,
            "department": "Cardiology",
            "consultation_fee": Decimal("150.00"),
            "education": [{"degree": "MD", "institution": "Johns Hopkins University", "year": 2008}],
            "qualifications": ["Board Certified Cardiologist", "FACC"],
            "bio": "Preventive cardiology and hypertension management.",
        },
        {
            "name": "Dr. Michael Chen",
            "email": "michael.chen@clinic.com",
            "specialization": "Pediatrics",
            "license_number": "MD-PED-2002",
            "experience": 9,
            "department": "Pediatrics",
            "consultation_fee": Decimal("120.00"),
            "education": [{"degree": "MD", "institution": "Stanford University", "year": 2014}],
            "qualifications": ["Board Certified Pediatrician"],
            "bio": "General pediatrics with an interest in childhood asthma.",
        },
    ]

    doctors = []
    for profile in profiles:
        user = _user(profile.pop("name"), profile.pop("email"), UserRole.DOCTOR)
        db.add(user)
        await db.flush()
        doctor = Doctor(user_id=user.id, availability=WORKING_WEEK, contact_email=user.email, **profile)
        db.add(doctor)
        doctors.append(doctor)

    await db.flush()
    return doctors


async def create_patients(db: AsyncSession) -> list:
    print("Creating patients...")
    profiles = [
        {
            "name": "John Smith",
            "email": "john.smith@clinic.com",
            "contact_number": "+15550001001",
            "date_of_birth": date(1985, 4, 12),
            "gender": Gender.MALE,
            "blood_group": "O+",
            "address": "12 Oak Street, Springfield",
            "allergies": "Penicillin",
        },
        {
            "name": "Emily Davis",
            "email": "emily.davis@clinic.com",
            "contact_number": "+15550001002",
            "date_of_birth": date(1992, 9, 30),
            "gender": Gender.FEMALE,
            "blood_group": "A-",
            "address": "48 Maple Avenue, Springfield",
        },
    ]

    patients = []
    for profile in profiles:
        user = _user(profile.pop("name"), profile.pop("email"), UserRole.PATIENT, profile.pop("contact_number"))
        db.add(user)
        await db.flush()
        patient = Patient(user_id=user.id, **profile)
        db.add(patient)
        patients.append(patient)

    await db.flush()
    return patients


async def create_appointments(db: AsyncSession, patients: list, doctors: list) -> list:
    print("Creating appointments...")
    today = date.today()
    john, emily = patients
    cardiologist, pediatrician = doctors

    appointments = [
        Appointment(
            patient_id=john.id,
            doctor_id=cardiologist.id,
            date=today + timedelta(days=3),
            time="09:00",
            status=AppointmentStatus.PENDING,
            reason="Blood pressure follow-up",
        ),
        Appointment(
            patient_id=emily.id,
            doctor_id=pediatrician.id,
            date=today + timedelta(days=5),
            time="11:30",
            status=AppointmentStatus.APPROVED,
            approved_by_doctor=True,
            reason="Vaccination schedule review",
        ),
        Appointment(
            patient_id=john.id,
            doctor_id=cardiologist.id,
            date=today - timedelta(days=14),
            time="10:00",
            status=AppointmentStatus.COMPLETED,
            approved_by_doctor=True,
            completed_by_doctor=True,
            reason="Chest discomfort after exercise",
            notes="ECG normal. Advised lifestyle changes.",
            prescription={
                "medications": [
                    {"name": "Amlodipine", "dosage": "5mg", "frequency": "Once daily", "duration": "30 days"}
                ],
                "instructions": "Reduce salt intake and walk 30 minutes a day.",
            },
            follow_up_date=today + timedelta(days=16),
        ),
    ]
    db.add_all(appointments)
    await db.flush()
    return appointments


async def create_bills(db: AsyncSession, patients: list, appointments: list):
    print("Creating bills...")
    john, _ = patients
    completed = appointments[2]

    services = [
        ServiceItemRequest(description="Cardiology consultation", quantity=1, unit_price=Decimal("150.00")),
        ServiceItemRequest(description="ECG", quantity=1, unit_price=Decimal("75.00")),
    ]
    items, subtotal, total = compute_totals(services, Decimal("22.50"), Decimal("10.00"))
    db.add(Billing(
        patient_id=john.id,
        appointment_id=completed.id,
        invoice_number=generate_invoice_number(),
        services=items,
        subtotal=subtotal,
        tax=Decimal("22.50"),
        discount=Decimal("10.00"),
        total_amount=total,
        status=BillingStatus.PAID,
        payment_method=PaymentMethod.CARD,
        payment_date=datetime.now(timezone.utc) - timedelta(days=10),
        due_date=completed.date + timedelta(days=30),
    ))

    items, subtotal, total = compute_totals(
        [ServiceItemRequest(description="Follow-up consultation", quantity=1, unit_price=Decimal("150.00"))],
        Decimal("0"),
        Decimal("0"),
    )
    db.add(Billing(
        patient_id=john.id,
        invoice_number=generate_invoice_number(),
        services=items,
        subtotal=subtotal,
        tax=Decimal("0"),
        discount=Decimal("0"),
        total_amount=total,
        status=BillingStatus.PENDING,
        due_date=date.today() + timedelta(days=30),
    ))
    await db.flush()


async def seed_all_data(db: AsyncSession):
    """Main seeding function."""
    global HASHED_PASSWORD
    HASHED_PASSWORD = hash_password(TEST_PASSWORD)

    print("\nStarting clinic seed")
    print("=" * 50)

    await create_admin(db)
    doctors = await create_doctors(db)
    patients = await create_patients(db)
    appointments = await create_appointments(db, patients, doctors)
    await create_bills(db, patients, appointments)

    await db.commit()

    print("\n" + "=" * 50)
    print("Seed complete! Test credentials:")
    print(f"   Admin:   admin@clinic.com / {TEST_PASSWORD}")
    print(f"   Doctor:  sarah.johnson@clinic.com / {TEST_PASSWORD}")
    print(f"   Patient: john.smith@clinic.com / {TEST_PASSWORD}")
    print("=" * 50 + "\n")


# =============================================================================
# MAIN
# =============================================================================

async def main():
    """Run the seed script."""
    async with async_session() as db:
        try:
            await clear_existing_data(db)
            await seed_all_data(db)
        except Exception as e:
            await db.rollback()
            print(f"\nError during seeding: {e}")
            raise


if __name__ == "__main__":
    asyncio.run(main())
