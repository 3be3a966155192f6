"""Initial schema: profiles, records, deletion ledger, notifications, audit log.

Revision ID: 001
Revises: None
Create Date: 2026-10-18
"""
from __future__ import annotations

from typing import Union

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, tuple[str, ...], None] = None
depends_on: Union[str, tuple[str, ...], None] = None


def upgrade() -> None:
    op.create_table(
        "profiles",
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("full_name", sa.String(200), nullable=False),
        sa.Column("role", sa.String(20), nullable=False, comment="manager, staff"),
        sa.Column("id", postgresql.UUID(as_uuid=True), server_default=sa.text("gen_random_uuid()"), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("email"),
    )

    op.create_table(
        "rtw_records",
        sa.Column("person_name", sa.String(200), nullable=False),
        sa.Column("date_of_birth", sa.Date()),
        sa.Column("check_date", sa.Date(), comment="Null while onboarding is pending"),
        sa.Column("check_type", sa.String(20), nullable=False),
        sa.Column("check_method", sa.String(20), nullable=False),
        sa.Column("share_code", sa.String(20), comment="Online checks only"),
        sa.Column("idsp_provider", sa.String(200), comment="IDSP checks only"),
        sa.Column("documents", postgresql.ARRAY(sa.String(50)), comment="Document identifier tokens"),
        sa.Column("step2_answers", postgresql.JSONB(astext_type=sa.Text())),
        sa.Column("declaration_confirmed", sa.Boolean()),
        sa.Column("checker_name", sa.String(200)),
        sa.Column("notes", sa.Text()),
        sa.Column("scan_path", sa.String(500)),
        sa.Column("scan_filename", sa.String(255)),
        sa.Column("expiry_date", sa.Date()),
        sa.Column("follow_up_date", sa.Date()),
        sa.Column("employment_end_date", sa.Date()),
        sa.Column("deletion_due_date", sa.Date(), comment="employment_end_date + 2 calendar years"),
        sa.Column("status", sa.String(30), nullable=False),
        sa.Column("onboarding_id", postgresql.UUID(as_uuid=True)),
        sa.Column("created_by", postgresql.UUID(as_uuid=True)),
        sa.Column("gdrive_file_id", sa.String(200)),
        sa.Column("id", postgresql.UUID(as_uuid=True), server_default=sa.text("gen_random_uuid()"), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_rtw_records_expiry_date", "rtw_records", ["expiry_date"])
    op.create_index("ix_rtw_records_follow_up_date", "rtw_records", ["follow_up_date"])
    op.create_index("ix_rtw_records_deletion_due_date", "rtw_records", ["deletion_due_date"])
    op.create_index("ix_rtw_records_onboarding_id", "rtw_records", ["onboarding_id"])

    # Ledger rows outlive the record, so no FK to rtw_records
    op.create_table(
        "deleted_records",
        sa.Column("original_record_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("person_name", sa.String(200), nullable=False),
        sa.Column("employment_start_date", sa.Date()),
        sa.Column("employment_end_date", sa.Date()),
        sa.Column("deletion_due_date", sa.Date()),
        sa.Column("deleted_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.Column("deleted_by", postgresql.UUID(as_uuid=True), comment="Null for the system actor"),
        sa.Column("deleted_by_email", sa.String(255), comment="Email, or 'system'"),
        sa.Column("reason", sa.String(255), nullable=False),
        sa.Column("id", postgresql.UUID(as_uuid=True), server_default=sa.text("gen_random_uuid()"), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_deleted_records_original_record_id", "deleted_records", ["original_record_id"])
    op.create_index("ix_deleted_records_deleted_at", "deleted_records", ["deleted_at"])

    op.create_table(
        "notifications",
        sa.Column("source_app", sa.String(50), nullable=False),
        sa.Column("severity", sa.String(10), nullable=False, comment="info, warning, urgent"),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("message", sa.Text(), nullable=False),
        sa.Column("action_url", sa.String(500)),
        sa.Column("record_id", postgresql.UUID(as_uuid=True)),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.Column("dismissed_at", sa.DateTime(timezone=True)),
        sa.Column("dismissed_by", sa.String(255)),
        sa.Column("id", postgresql.UUID(as_uuid=True), server_default=sa.text("gen_random_uuid()"), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_notifications_record_id", "notifications", ["record_id"])
    op.create_index("ix_notifications_dismissed_at", "notifications", ["dismissed_at"])

    op.create_table(
        "audit_log",
        sa.Column("user_id", postgresql.UUID(as_uuid=True)),
        sa.Column("user_email", sa.String(255), comment="Email, or 'system'"),
        sa.Column("action", sa.String(100), nullable=False),
        sa.Column("table_name", sa.String(50)),
        sa.Column("record_id", postgresql.UUID(as_uuid=True)),
        sa.Column("old_values", postgresql.JSONB(astext_type=sa.Text())),
        sa.Column("new_values", postgresql.JSONB(astext_type=sa.Text())),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.Column("id", postgresql.UUID(as_uuid=True), server_default=sa.text("gen_random_uuid()"), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_audit_log_user_id", "audit_log", ["user_id"])
    op.create_index("ix_audit_log_action", "audit_log", ["action"])
    op.create_index("ix_audit_log_record_id", "audit_log", ["record_id"])
    op.create_index("ix_audit_log_created_at", "audit_log", ["created_at"])


def downgrade() -> None:
    op.drop_table("audit_log")
    op.drop_table("notifications")
    op.drop_table("deleted_records")
    op.drop_table("rtw_records")
    op.drop_table("profiles")
