"""initial clinic schema

Revision ID: 4c1e2b7a9d10
Revises:
Create Date: 2026-10-17 09:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '4c1e2b7a9d10'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


userrole_enum = sa.Enum('PATIENT', 'DOCTOR', 'ADMIN', name='userrole')
gender_enum = sa.Enum('MALE', 'FEMALE', 'OTHER', name='gender')
appointmentstatus_enum = sa.Enum(
    'PENDING', 'APPROVED', 'REJECTED', 'SCHEDULED', 'COMPLETED', 'CANCELLED', 'NO_SHOW',
    name='appointmentstatus'
)
billingstatus_enum = sa.Enum('PENDING', 'PAID', 'OVERDUE', 'CANCELLED', name='billingstatus')
paymentmethod_enum = sa.Enum('CASH', 'CARD', 'INSURANCE', 'ONLINE', name='paymentmethod')

ACTIVE_SLOT_WHERE = sa.text("status IN ('PENDING', 'APPROVED', 'SCHEDULED')")


def _timestamps():
    return [
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
    ]


def upgrade() -> None:
    op.create_table(
        'users',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('name', sa.String(length=200), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('password_hash', sa.String(length=255), nullable=False),
        sa.Column('role', userrole_enum, nullable=False),
        sa.Column('contact_number', sa.String(length=20), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.Column('last_login', sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('email'),
    )
    op.create_index('ix_users_email', 'users', ['email'], unique=False)

    op.create_table(
        'patients',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('user_id', sa.Uuid(), nullable=False),
        sa.Column('date_of_birth', sa.Date(), nullable=True),
        sa.Column('gender', gender_enum, nullable=True),
        sa.Column('blood_group', sa.String(length=3), nullable=True),
        sa.Column('address', sa.Text(), nullable=True),
        sa.Column('emergency_contact_name', sa.String(length=200), nullable=True),
        sa.Column('emergency_contact_phone', sa.String(length=20), nullable=True),
        sa.Column('allergies', sa.Text(), nullable=True),
        sa.Column('medical_history', sa.Text(), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('user_id'),
    )

    op.create_table(
        'doctors',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('user_id', sa.Uuid(), nullable=False),
        sa.Column('specialization', sa.String(length=100), nullable=False),
        sa.Column('license_number', sa.String(length=100), nullable=False),
        sa.Column('experience', sa.Integer(), nullable=False),
        sa.Column('education', sa.JSON(), nullable=False),
        sa.Column('qualifications', sa.JSON(), nullable=False),
        sa.Column('bio', sa.Text(), nullable=True),
        sa.Column('image', sa.String(length=500), nullable=True),
        sa.Column('contact_email', sa.String(length=255), nullable=True),
        sa.Column('contact_phone', sa.String(length=20), nullable=True),
        sa.Column('availability', sa.JSON(), nullable=True),
        sa.Column('consultation_fee', sa.Numeric(precision=10, scale=2), nullable=False),
        sa.Column('department', sa.String(length=100), nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('user_id'),
        sa.UniqueConstraint('license_number'),
    )
    op.create_index('idx_doctors_specialization', 'doctors', ['specialization'], unique=False)

    op.create_table(
        'appointments',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('patient_id', sa.Uuid(), nullable=False),
        sa.Column('doctor_id', sa.Uuid(), nullable=False),
        sa.Column('date', sa.Date(), nullable=False),
        sa.Column('time', sa.String(length=10), nullable=False),
        sa.Column('status', appointmentstatus_enum, nullable=False),
        sa.Column('approved_by_doctor', sa.Boolean(), nullable=False),
        sa.Column('completed_by_doctor', sa.Boolean(), nullable=False),
        sa.Column('reason', sa.Text(), nullable=False),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('prescription', sa.JSON(), nullable=True),
        sa.Column('follow_up_date', sa.Date(), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(['patient_id'], ['patients.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['doctor_id'], ['doctors.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('idx_appointments_date', 'appointments', ['date'], unique=False)
    op.create_index('idx_appointments_status', 'appointments', ['status'], unique=False)
    op.create_index(
        'uq_appointments_active_slot', 'appointments', ['doctor_id', 'date', 'time'],
        unique=True, postgresql_where=ACTIVE_SLOT_WHERE
    )

    op.create_table(
        'billing',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('patient_id', sa.Uuid(), nullable=False),
        sa.Column('appointment_id', sa.Uuid(), nullable=True),
        sa.Column('invoice_number', sa.String(length=50), nullable=False),
        sa.Column('services', sa.JSON(), nullable=False),
        sa.Column('subtotal', sa.Numeric(precision=12, scale=2), nullable=False),
        sa.Column('tax', sa.Numeric(precision=12, scale=2), nullable=False),
        sa.Column('discount', sa.Numeric(precision=12, scale=2), nullable=False),
        sa.Column('total_amount', sa.Numeric(precision=12, scale=2), nullable=False),
        sa.Column('status', billingstatus_enum, nullable=False),
        sa.Column('payment_method', paymentmethod_enum, nullable=True),
        sa.Column('payment_date', sa.DateTime(timezone=True), nullable=True),
        sa.Column('due_date', sa.Date(), nullable=False),
        sa.Column('payment_proof', sa.String(length=500), nullable=True),
        sa.Column('verified_by_doctor', sa.Boolean(), nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(['patient_id'], ['patients.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['appointment_id'], ['appointments.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('invoice_number'),
    )
    op.create_index('idx_billing_patient', 'billing', ['patient_id'], unique=False)
    op.create_index('idx_billing_status', 'billing', ['status'], unique=False)

    op.create_table(
        'chat_histories',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('patient_id', sa.Uuid(), nullable=False),
        sa.Column('messages', sa.JSON(), nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(['patient_id'], ['patients.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('patient_id'),
    )


def downgrade() -> None:
    op.drop_table('chat_histories')
    op.drop_index('idx_billing_status', table_name='billing')
    op.drop_index('idx_billing_patient', table_name='billing')
    op.drop_table('billing')
    op.drop_index('uq_appointments_active_slot', table_name='appointments')
    op.drop_index('idx_appointments_status', table_name='appointments')
    op.drop_index('idx_appointments_date', table_name='appointments')
    op.drop_table('appointments')
    op.drop_index('idx_doctors_specialization', table_name='doctors')
    op.drop_table('doctors')
    op.drop_table('patients')
    op.drop_index('ix_users_email', table_name='users')
    op.drop_table('users')

    # Drop the enum types
    for enum_type in (paymentmethod_enum, billingstatus_enum, appointmentstatus_enum, gender_enum, userrole_enum):
        enum_type.drop(op.get_bind(), checkfirst=True)
