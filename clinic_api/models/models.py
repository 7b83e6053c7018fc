# clinic_api/models/models.py

import uuid
import enum

from sqlalchemy import (
    JSON, Boolean, Column, Date, ForeignKey, Index, Integer, Numeric,
    String, Text, DateTime, Uuid,
    Enum as SAEnum,
    func, text,
)
from sqlalchemy.orm import declarative_base, relationship, backref

Base = declarative_base()


# ============================================================================
# ENUMS
# ============================================================================

class UserRole(enum.Enum):
    PATIENT = "patient"
    DOCTOR = "doctor"
    ADMIN = "admin"


class Gender(enum.Enum):
    MALE = "male"
    FEMALE = "female"
    OTHER = "other"


class AppointmentStatus(enum.Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    SCHEDULED = "scheduled"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    NO_SHOW = "no-show"


class BillingStatus(enum.Enum):
    PENDING = "pending"
    PAID = "paid"
    OVERDUE = "overdue"
    CANCELLED = "cancelled"


class PaymentMethod(enum.Enum):
    CASH = "cash"
    CARD = "card"
    INSURANCE = "insurance"
    ONLINE = "online"


# Statuses that keep a (doctor, date, time) slot occupied
SLOT_HOLDING_STATUSES = (
    AppointmentStatus.PENDING,
    AppointmentStatus.APPROVED,
    AppointmentStatus.SCHEDULED,
)


# ============================================================================
# USER MODELS
# ============================================================================

class User(Base):
    __tablename__ = "users"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4, nullable=False)
    name = Column(String(200), nullable=False)
    email = Column(String(255), unique=True, nullable=False, index=True)
    password_hash = Column(String(255), nullable=False)
    role = Column(SAEnum(UserRole), nullable=False, default=UserRole.PATIENT)
    contact_number = Column(String(20), nullable=True)
    is_active = Column(Boolean, default=True, nullable=False)
    last_login = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())

    def __repr__(self):
        return f"<User(id={self.id}, email={self.email}, role={self.role.value})>"


class Patient(Base):
    __tablename__ = "patients"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4, nullable=False)
    user_id = Column(Uuid, ForeignKey("users.id", ondelete="CASCADE"), unique=True, nullable=False)
    date_of_birth = Column(Date, nullable=True)
    gender = Column(SAEnum(Gender), nullable=True)
    blood_group = Column(String(3), nullable=True)
    address = Column(Text, nullable=True)
    emergency_contact_name = Column(String(200), nullable=True)
    emergency_contact_phone = Column(String(20), nullable=True)
    allergies = Column(Text, nullable=True)
    medical_history = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())

    # Relationship
    user = relationship("User", backref=backref("patient", uselist=False, cascade="all, delete-orphan"))

    def __repr__(self):
        return f"<Patient(id={self.id}, user_id={self.user_id})>"


class Doctor(Base):
    __tablename__ = "doctors"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4, nullable=False)
    user_id = Column(Uuid, ForeignKey("users.id", ondelete="CASCADE"), unique=True, nullable=False)
    specialization = Column(String(100), nullable=False)
    license_number = Column(String(100), unique=True, nullable=False)
    experience = Column(Integer, nullable=False)
    education = Column(JSON, nullable=False, default=list)  # [{degree, institution, year}]
    qualifications = Column(JSON, nullable=False, default=list)
    bio = Column(Text, nullable=True)
    image = Column(String(500), nullable=True)
    contact_email = Column(String(255), nullable=True)
    contact_phone = Column(String(20), nullable=True)
    availability = Column(JSON, nullable=True)  # {weekday: {start, end, available}}
    consultation_fee = Column(Numeric(10, 2), nullable=False)
    department = Column(String(100), nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())

    # Relationship
    user = relationship("User", backref=backref("doctor", uselist=False, cascade="all, delete-orphan"))

    __table_args__ = (
        Index("idx_doctors_specialization", "specialization"),
    )

    def __repr__(self):
        return f"<Doctor(id={self.id}, specialization={self.specialization})>"


# ============================================================================
# APPOINTMENT MODELS
# ============================================================================

class Appointment(Base):
    __tablename__ = "appointments"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4, nullable=False)
    patient_id = Column(Uuid, ForeignKey("patients.id", ondelete="CASCADE"), nullable=False)
    doctor_id = Column(Uuid, ForeignKey("doctors.id", ondelete="CASCADE"), nullable=False)
    date = Column(Date, nullable=False)
    time = Column(String(10), nullable=False)  # e.g. "09:00"
    status = Column(SAEnum(AppointmentStatus), default=AppointmentStatus.PENDING, nullable=False)
    approved_by_doctor = Column(Boolean, default=False, nullable=False)
    completed_by_doctor = Column(Boolean, default=False, nullable=False)
    reason = Column(Text, nullable=False)
    notes = Column(Text, nullable=True)
    prescription = Column(JSON, nullable=True)  # {medications: [...], instructions}
    follow_up_date = Column(Date, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())

    # Relationships
    patient = relationship("Patient", backref=backref("appointments", lazy="dynamic", cascade="all, delete-orphan"))
    doctor = relationship("Doctor", backref=backref("appointments", lazy="dynamic", cascade="all, delete-orphan"))

    __table_args__ = (
        Index("idx_appointments_date", "date"),
        Index("idx_appointments_status", "status"),
        # One slot-holding appointment per (doctor, date, time)
        Index(
            "uq_appointments_active_slot",
            "doctor_id", "date", "time",
            unique=True,
            postgresql_where=text("status IN ('PENDING', 'APPROVED', 'SCHEDULED')"),
            sqlite_where=text("status IN ('PENDING', 'APPROVED', 'SCHEDULED')"),
        ),
    )

    def __repr__(self):
        return f"<Appointment(id={self.id}, date={self.date}, status={self.status.value})>"


# ============================================================================
# BILLING MODELS
# ============================================================================

class Billing(Base):
    __tablename__ = "billing"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4, nullable=False)
    patient_id = Column(Uuid, ForeignKey("patients.id", ondelete="CASCADE"), nullable=False)
    appointment_id = Column(Uuid, ForeignKey("appointments.id", ondelete="SET NULL"), nullable=True)
    invoice_number = Column(String(50), unique=True, nullable=False)
    services = Column(JSON, nullable=False, default=list)  # [{description, quantity, unit_price, total_price}]
    subtotal = Column(Numeric(12, 2), nullable=False)
    tax = Column(Numeric(12, 2), nullable=False, default=0)
    discount = Column(Numeric(12, 2), nullable=False, default=0)
    total_amount = Column(Numeric(12, 2), nullable=False)
    status = Column(SAEnum(BillingStatus), default=BillingStatus.PENDING, nullable=False)
    payment_method = Column(SAEnum(PaymentMethod), nullable=True)
    payment_date = Column(DateTime(timezone=True), nullable=True)
    due_date = Column(Date, nullable=False)
    payment_proof = Column(String(500), nullable=True)
    verified_by_doctor = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())

    # Relationships
    patient = relationship("Patient", backref=backref("bills", lazy="dynamic", cascade="all, delete-orphan"))
    appointment = relationship("Appointment", backref=backref("bills", lazy="dynamic"))

    __table_args__ = (
        Index("idx_billing_patient", "patient_id"),
        Index("idx_billing_status", "status"),
    )

    def __repr__(self):
        return f"<Billing(id={self.id}, number={self.invoice_number}, status={self.status.value})>"


# ============================================================================
# CHATBOT MODELS
# ============================================================================

class ChatHistory(Base):
    """Stores the chatbot conversation of a patient."""
    __tablename__ = "chat_histories"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4, nullable=False)
    patient_id = Column(Uuid, ForeignKey("patients.id", ondelete="CASCADE"), unique=True, nullable=False)
    messages = Column(JSON, nullable=False, default=list)  # [{role, content, timestamp}]
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())

    # Relationship
    patient = relationship("Patient", backref=backref("chat_history", uselist=False, cascade="all, delete-orphan"))

    def __repr__(self):
        return f"<ChatHistory(id={self.id}, patient_id={self.patient_id})>"
