"""Approval engine schema

Revision ID: 0001
Revises:
Create Date: 2026-10-19

Tables added:
- employees: Actors that submit and decide documents
- approval_workflows: Workflow rules (amount band -> approver role)
- approval_steps: Per-document approval levels
- delegation_rules: Temporary hand-over of a role to another employee
- audit_logs: Append-only audit trail
- notifications: In-app notifications
- material_requisitions, material_issues, job_orders, stock_transfers:
  approvable documents
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = "0001"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


DOCUMENT_TABLES = {
    "material_requisitions": [("project_code", sa.String(50)), ("notes", sa.Text())],
    "material_issues": [("warehouse_code", sa.String(50)), ("project_code", sa.String(50))],
    "job_orders": [("job_type", sa.String(50)), ("description", sa.Text())],
    "stock_transfers": [("from_warehouse_code", sa.String(50)), ("to_warehouse_code", sa.String(50))],
}


def _now():
    return sa.text("CURRENT_TIMESTAMP")


def upgrade() -> None:
    """Create the approval engine tables."""

    # --- employees ---
    op.create_table(
        "employees",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("full_name", sa.String(255), nullable=False),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("system_role", sa.String(50), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("created_at", sa.DateTime(), server_default=_now()),
        sa.Column("updated_at", sa.DateTime(), server_default=_now()),
        sa.PrimaryKeyConstraint("id", name="pk_employees"),
    )
    op.create_index("ix_employees_email", "employees", ["email"], unique=True)
    op.create_index("ix_employees_system_role", "employees", ["system_role"])

    # --- approval_workflows ---
    op.create_table(
        "approval_workflows",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("document_type", sa.String(50), nullable=False),
        sa.Column("min_amount", sa.Numeric(15, 2), nullable=False, server_default="0"),
        sa.Column("max_amount", sa.Numeric(15, 2), nullable=True),
        sa.Column("approver_role", sa.String(50), nullable=False),
        sa.Column("sla_hours", sa.Integer(), nullable=False, server_default="24"),
        sa.Column("created_at", sa.DateTime(), server_default=_now()),
        sa.PrimaryKeyConstraint("id", name="pk_approval_workflows"),
    )
    op.create_index("ix_approval_workflows_document_type", "approval_workflows", ["document_type"])

    # --- approval_steps ---
    op.create_table(
        "approval_steps",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("document_type", sa.String(50), nullable=False),
        sa.Column("document_id", sa.Uuid(), nullable=False),
        sa.Column("level", sa.Integer(), nullable=False),
        sa.Column("approver_role", sa.String(50), nullable=False),
        sa.Column("status", sa.String(20), nullable=False, server_default="pending"),
        sa.Column("approver_id", sa.Uuid(), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("decided_at", sa.DateTime(), nullable=True),
        sa.Column("created_at", sa.DateTime(), server_default=_now()),
        sa.PrimaryKeyConstraint("id", name="pk_approval_steps"),
        sa.ForeignKeyConstraint(
            ["approver_id"], ["employees.id"],
            name="fk_approval_steps_approver_id", ondelete="SET NULL",
        ),
        sa.UniqueConstraint("document_type", "document_id", "level", name="uq_approval_steps_document_level"),
    )
    op.create_index(
        "ix_approval_steps_document_status", "approval_steps",
        ["document_type", "document_id", "status"],
    )
    op.create_index("ix_approval_steps_approver_role", "approval_steps", ["approver_role"])
    op.create_index("ix_approval_steps_status", "approval_steps", ["status"])
    op.create_index("ix_approval_steps_created_at", "approval_steps", ["created_at"])

    # --- delegation_rules ---
    op.create_table(
        "delegation_rules",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("delegator_id", sa.Uuid(), nullable=False),
        sa.Column("delegate_id", sa.Uuid(), nullable=False),
        sa.Column("start_date", sa.Date(), nullable=False),
        sa.Column("end_date", sa.Date(), nullable=False),
        sa.Column("scope", sa.String(50), nullable=False, server_default="all"),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(), server_default=_now()),
        sa.PrimaryKeyConstraint("id", name="pk_delegation_rules"),
        sa.ForeignKeyConstraint(
            ["delegator_id"], ["employees.id"],
            name="fk_delegation_rules_delegator_id", ondelete="CASCADE",
        ),
        sa.ForeignKeyConstraint(
            ["delegate_id"], ["employees.id"],
            name="fk_delegation_rules_delegate_id", ondelete="CASCADE",
        ),
    )
    op.create_index("ix_delegation_rules_delegator_id", "delegation_rules", ["delegator_id"])
    op.create_index("ix_delegation_rules_delegate_id", "delegation_rules", ["delegate_id"])

    # --- audit_logs ---
    op.create_table(
        "audit_logs",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("table_name", sa.String(100), nullable=False),
        sa.Column("record_id", sa.Uuid(), nullable=False),
        sa.Column("action", sa.String(50), nullable=False),
        sa.Column("old_values", sa.JSON(), nullable=True),
        sa.Column("new_values", sa.JSON(), nullable=True),
        sa.Column("performed_by_id", sa.Uuid(), nullable=True),
        sa.Column("severity", sa.String(20), nullable=False, server_default="info"),
        sa.Column("created_at", sa.DateTime(), server_default=_now()),
        sa.PrimaryKeyConstraint("id", name="pk_audit_logs"),
        sa.ForeignKeyConstraint(
            ["performed_by_id"], ["employees.id"],
            name="fk_audit_logs_performed_by_id", ondelete="SET NULL",
        ),
    )
    op.create_index("ix_audit_logs_table_name", "audit_logs", ["table_name"])
    op.create_index("ix_audit_logs_record_id", "audit_logs", ["record_id"])
    op.create_index("ix_audit_logs_action", "audit_logs", ["action"])
    op.create_index("ix_audit_logs_performed_by_id", "audit_logs", ["performed_by_id"])
    op.create_index("ix_audit_logs_created_at", "audit_logs", ["created_at"])

    # --- notifications ---
    op.create_table(
        "notifications",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("recipient_id", sa.Uuid(), nullable=False),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("body", sa.Text(), nullable=True),
        sa.Column("notification_type", sa.String(50), nullable=False, server_default="approval"),
        sa.Column("event_name", sa.String(50), nullable=False),
        sa.Column("reference_table", sa.String(50), nullable=True),
        sa.Column("reference_id", sa.Uuid(), nullable=True),
        sa.Column("payload", sa.JSON(), nullable=True),
        sa.Column("is_read", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("created_at", sa.DateTime(), server_default=_now()),
        sa.PrimaryKeyConstraint("id", name="pk_notifications"),
        sa.ForeignKeyConstraint(
            ["recipient_id"], ["employees.id"],
            name="fk_notifications_recipient_id", ondelete="CASCADE",
        ),
    )
    op.create_index("ix_notifications_recipient_id", "notifications", ["recipient_id"])
    op.create_index("ix_notifications_event_name", "notifications", ["event_name"])
    op.create_index("ix_notifications_reference_id", "notifications", ["reference_id"])
    op.create_index("ix_notifications_created_at", "notifications", ["created_at"])

    # --- approvable documents ---
    for table_name, extra_columns in DOCUMENT_TABLES.items():
        op.create_table(
            table_name,
            sa.Column("id", sa.Uuid(), nullable=False),
            sa.Column("document_number", sa.String(50), nullable=False),
            sa.Column("status", sa.String(50), nullable=False, server_default="draft"),
            sa.Column("amount", sa.Numeric(15, 2), nullable=False, server_default="0"),
            sa.Column("sla_due_date", sa.DateTime(), nullable=True),
            sa.Column("approved_date", sa.DateTime(), nullable=True),
            sa.Column("rejection_reason", sa.Text(), nullable=True),
            sa.Column("created_by_id", sa.Uuid(), nullable=True),
            sa.Column("approved_by_id", sa.Uuid(), nullable=True),
            sa.Column("created_at", sa.DateTime(), server_default=_now()),
            sa.Column("updated_at", sa.DateTime(), server_default=_now()),
            *[sa.Column(name, type_, nullable=True) for name, type_ in extra_columns],
            sa.PrimaryKeyConstraint("id", name=f"pk_{table_name}"),
            sa.ForeignKeyConstraint(
                ["created_by_id"], ["employees.id"],
                name=f"fk_{table_name}_created_by_id", ondelete="SET NULL",
            ),
            sa.ForeignKeyConstraint(
                ["approved_by_id"], ["employees.id"],
                name=f"fk_{table_name}_approved_by_id", ondelete="SET NULL",
            ),
        )
        op.create_index(f"ix_{table_name}_document_number", table_name, ["document_number"])
        op.create_index(f"ix_{table_name}_status", table_name, ["status"])


def downgrade() -> None:
    """Drop the approval engine tables."""
    for table_name in reversed(list(DOCUMENT_TABLES)):
        op.drop_index(f"ix_{table_name}_status", table_name=table_name)
        op.drop_index(f"ix_{table_name}_document_number", table_name=table_name)
        op.drop_table(table_name)

    op.drop_index("ix_notifications_created_at", table_name="notifications")
    op.drop_index("ix_notifications_reference_id", table_name="notifications")
    op.drop_index("ix_notifications_event_name", table_name="notifications")
    op.drop_index("ix_notifications_recipient_id", table_name="notifications")
    op.drop_table("notifications")

    op.drop_index("ix_audit_logs_created_at", table_name="audit_logs")
    op.drop_index("ix_audit_logs_performed_by_id", table_name="audit_logs")
    op.drop_index("ix_audit_logs_action", table_name="audit_logs")
    op.drop_index("ix_audit_logs_record_id", table_name="audit_logs")
    op.drop_index("ix_audit_logs_table_name", table_name="audit_logs")
    op.drop_table("audit_logs")

    op.drop_index("ix_delegation_rules_delegate_id", table_name="delegation_rules")
    op.drop_index("ix_delegation_rules_delegator_id", table_name="delegation_rules")
    op.drop_table("delegation_rules")

    op.drop_index("ix_approval_steps_created_at", table_name="approval_steps")
    op.drop_index("ix_approval_steps_status", table_name="approval_steps")
    op.drop_index("ix_approval_steps_approver_role", table_name="approval_steps")
    op.drop_index("ix_approval_steps_document_status", table_name="approval_steps")
    op.drop_table("approval_steps")

    op.drop_index("ix_approval_workflows_document_type", table_name="approval_workflows")
    op.drop_table("approval_workflows")

    op.drop_index("ix_employees_system_role", table_name="employees")
    op.drop_index("ix_employees_email", table_name="employees")
    op.drop_table("employees")
