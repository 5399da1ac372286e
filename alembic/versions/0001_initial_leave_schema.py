"""0001 - Initial leave schema: leave days, comp-time ledger, policy, audit.

Revision ID: 0001_initial_leave_schema
Revises:
Create Date: 2026-10-19 09:00:00.000000+00:00
"""

from alembic import op
import sqlalchemy as sa

revision = "0001_initial_leave_schema"
down_revision = None
branch_labels = None
depends_on = None


def _created_at() -> sa.Column:
    return sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False)


def upgrade() -> None:
    op.create_table(
        "leave_request",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("user_id", sa.Uuid(), nullable=False),
        sa.Column("org_id", sa.Uuid(), nullable=True),
        sa.Column("type", sa.String(length=50), nullable=False),
        sa.Column("date", sa.Date(), nullable=False),
        sa.Column("end_date", sa.Date(), nullable=True),
        sa.Column("notes", sa.String(length=500), nullable=True),
        sa.Column("status", sa.String(length=50), server_default="APPROVED", nullable=False),
        _created_at(),
        sa.UniqueConstraint("user_id", "date", name="uq_leave_user_date"),
    )
    op.create_index("ix_leave_request_user_id", "leave_request", ["user_id"])
    op.create_index("ix_leave_request_org_id", "leave_request", ["org_id"])
    op.create_index("ix_leave_user_type_date", "leave_request", ["user_id", "type", "date"])

    op.create_table(
        "comp_time_entry",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("user_id", sa.Uuid(), nullable=False),
        sa.Column("org_id", sa.Uuid(), nullable=True),
        sa.Column("type", sa.String(length=50), nullable=False),
        sa.Column("source_id", sa.Uuid(), nullable=True),
        sa.Column("source_date", sa.Date(), nullable=False),
        sa.Column("minutes_earned", sa.Integer(), nullable=False),
        sa.Column("minutes_used", sa.Integer(), server_default="0", nullable=False),
        sa.Column("status", sa.String(length=50), server_default="AVAILABLE", nullable=False),
        sa.Column("expires_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("description", sa.String(length=500), nullable=True),
        _created_at(),
        sa.CheckConstraint("minutes_used <= minutes_earned", name="ck_comp_time_used_le_earned"),
    )
    op.create_index("ix_comp_time_entry_user_id", "comp_time_entry", ["user_id"])
    op.create_index("ix_comp_time_entry_org_id", "comp_time_entry", ["org_id"])
    op.create_index("ix_comp_time_entry_source_id", "comp_time_entry", ["source_id"])
    op.create_index("ix_comp_time_user_status_expiry", "comp_time_entry", ["user_id", "status", "expires_at"])

    op.create_table(
        "comp_time_usage",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column(
            "comp_time_entry_id",
            sa.Uuid(),
            sa.ForeignKey("comp_time_entry.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("leave_request_id", sa.Uuid(), nullable=False),
        sa.Column("minutes_used", sa.Integer(), nullable=False),
        _created_at(),
        sa.UniqueConstraint("comp_time_entry_id", "leave_request_id", name="uq_comp_time_usage_entry_leave"),
    )
    op.create_index("ix_comp_time_usage_comp_time_entry_id", "comp_time_usage", ["comp_time_entry_id"])
    op.create_index("ix_comp_time_usage_leave_request_id", "comp_time_usage", ["leave_request_id"])

    op.create_table(
        "policy_config",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("org_id", sa.Uuid(), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        sa.Column("effective_date", sa.Date(), nullable=False),
        sa.Column("required_days_per_week", sa.Integer(), nullable=False),
        sa.Column("minimum_minutes_per_day", sa.Integer(), nullable=False),
        sa.Column("annual_pto_days", sa.Integer(), nullable=False),
        sa.Column("max_carryover_days", sa.Integer(), nullable=False),
        sa.Column("leave_year_start_month", sa.Integer(), nullable=False),
        sa.Column("leave_year_start_day", sa.Integer(), nullable=False),
        _created_at(),
    )
    op.create_index("ix_policy_config_org_id", "policy_config", ["org_id"])
    op.create_index("ix_policy_org_active", "policy_config", ["org_id", "is_active"])

    op.create_table(
        "leave_allowance_override",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("org_id", sa.Uuid(), nullable=False),
        sa.Column("user_id", sa.Uuid(), nullable=False),
        sa.Column("annual_pto_days", sa.Integer(), nullable=False),
        sa.Column("effective_year", sa.Integer(), nullable=True),
        sa.Column("notes", sa.String(length=500), nullable=True),
        _created_at(),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.UniqueConstraint("org_id", "user_id", "effective_year", name="uq_allowance_override_user_year"),
    )
    op.create_index("ix_leave_allowance_override_org_id", "leave_allowance_override", ["org_id"])
    op.create_index("ix_leave_allowance_override_user_id", "leave_allowance_override", ["user_id"])

    op.create_table(
        "audit_log",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("org_id", sa.Uuid(), nullable=True),
        sa.Column("actor_id", sa.Uuid(), nullable=False),
        sa.Column("entity_type", sa.String(length=50), nullable=False),
        sa.Column("entity_id", sa.Uuid(), nullable=False),
        sa.Column("action", sa.String(length=50), nullable=False),
        sa.Column("before_json", sa.JSON(), nullable=True),
        sa.Column("after_json", sa.JSON(), nullable=True),
        _created_at(),
    )
    op.create_index("ix_audit_log_org_id", "audit_log", ["org_id"])
    op.create_index("ix_audit_log_created_at", "audit_log", ["created_at"])
    op.create_index("ix_audit_entity", "audit_log", ["entity_type", "entity_id"])


def downgrade() -> None:
    op.drop_table("audit_log")
    op.drop_table("leave_allowance_override")
    op.drop_table("policy_config")
    op.drop_table("comp_time_usage")
    op.drop_table("comp_time_entry")
    op.drop_table("leave_request")
