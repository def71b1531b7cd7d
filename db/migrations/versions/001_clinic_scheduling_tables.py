"""Clinic scheduling tables.

- appointments: one row per booked visit; partial unique index keeps at most
  one non-cancelled appointment per (doctor, date, time)
- availabilities: dated per-minute doctor slots; a slot holding an
  appointment_id is never available
- notifications: in-app inbox
- audit_logs: append-only record of API mutations
"""

from __future__ import annotations
from alembic import op
import sqlalchemy as sa

revision = "001_clinic_scheduling"
down_revision = None
branch_labels = None
depends_on = None

_LIVE = sa.text("status != 'cancelled'")


def _timestamps():
    return (
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )


def upgrade():
    # ---------- appointments ----------
    op.create_table(
        "appointments",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("patient_id", sa.Integer(), nullable=False),
        sa.Column("doctor_id", sa.Integer(), nullable=False),
        sa.Column("appointment_date", sa.Date(), nullable=False),
        sa.Column("appointment_time", sa.Time(), nullable=False),
        sa.Column("status", sa.String(20), nullable=False, server_default="scheduled"),
        sa.Column("reason", sa.Text(), nullable=True),
        *_timestamps(),
        sa.CheckConstraint(
            "status IN ('scheduled', 'confirmed', 'cancelled', 'completed', 'no_show')",
            name="chk_appointments__status",
        ),
    )
    op.create_index(
        "uq_appointments__live_slot",
        "appointments",
        ["doctor_id", "appointment_date", "appointment_time"],
        unique=True,
        sqlite_where=_LIVE,
        postgresql_where=_LIVE,
    )
    op.create_index("ix_appointments__patient", "appointments", ["patient_id"])
    op.create_index("ix_appointments__doctor_date", "appointments", ["doctor_id", "appointment_date"])

    # ---------- availabilities ----------
    op.create_table(
        "availabilities",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("doctor_id", sa.Integer(), nullable=False),
        sa.Column("slot_date", sa.Date(), nullable=False),
        sa.Column("slot_time", sa.Time(), nullable=False),
        sa.Column("is_available", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("appointment_id", sa.Integer(), nullable=True),
        *_timestamps(),
        sa.UniqueConstraint("doctor_id", "slot_date", "slot_time", name="uq_availabilities__doctor_slot"),
        sa.CheckConstraint(
            "appointment_id IS NULL OR NOT is_available",
            name="chk_availabilities__booked_not_available",
        ),
    )
    op.create_index("ix_availabilities__doctor_date", "availabilities", ["doctor_id", "slot_date"])

    # ---------- notifications ----------
    op.create_table(
        "notifications",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("message", sa.Text(), nullable=False),
        sa.Column("type", sa.String(20), nullable=False, server_default="info"),
        sa.Column("is_read", sa.Boolean(), nullable=False, server_default=sa.false()),
        *_timestamps(),
        sa.CheckConstraint(
            "type IN ('appointment', 'reminder', 'system', 'alert', 'info')",
            name="chk_notifications__type",
        ),
    )
    op.create_index("ix_notifications__user_created", "notifications", ["user_id", "created_at"])

    # ---------- audit_logs ----------
    op.create_table(
        "audit_logs",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("user_id", sa.Integer(), nullable=True),
        sa.Column("action", sa.String(50), nullable=False),
        sa.Column("entity_type", sa.String(50), nullable=False),
        sa.Column("entity_id", sa.Integer(), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_audit_logs__user_created", "audit_logs", ["user_id", "created_at"])
    op.create_index("ix_audit_logs__entity", "audit_logs", ["entity_type", "entity_id"])


def downgrade():
    op.drop_index("ix_audit_logs__entity", table_name="audit_logs")
    op.drop_index("ix_audit_logs__user_created", table_name="audit_logs")
    op.drop_table("audit_logs")

    op.drop_index("ix_notifications__user_created", table_name="notifications")
    op.drop_table("notifications")

    op.drop_index("ix_availabilities__doctor_date", table_name="availabilities")
    op.drop_table("availabilities")

    op.drop_index("ix_appointments__doctor_date", table_name="appointments")
    op.drop_index("ix_appointments__patient", table_name="appointments")
    op.drop_index("uq_appointments__live_slot", table_name="appointments")
    op.drop_table("appointments")
