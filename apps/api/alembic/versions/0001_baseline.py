"""Baseline migration - users, sales tables, design tasks, pending requests

Revision ID: 0001_baseline
Revises: 
Create Date: 2026-10-19

Creates every table of the approval workflow.
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql


# revision identifiers, used by Alembic.
revision: str = '0001_baseline'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

JSON = sa.JSON().with_variant(postgresql.JSONB(), "postgresql")


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    ]


def _request_columns() -> list[sa.Column]:
    """Lifecycle columns shared by every pending_*_requests table."""
    return [
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("requested_by", sa.Uuid(), sa.ForeignKey("users.id", ondelete="SET NULL"), nullable=True),
        sa.Column("requested_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("status", sa.String(20), server_default="pending", nullable=False),
        sa.Column("reviewed_by", sa.Uuid(), sa.ForeignKey("users.id", ondelete="SET NULL"), nullable=True),
        sa.Column("reviewed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("rejection_reason", sa.Text(), nullable=True),
        sa.Column("version", sa.Integer(), server_default=sa.text("1"), nullable=False),
        *_timestamps(),
    ]


def _request_constraints(table: str) -> list:
    return [
        sa.CheckConstraint("status IN ('pending', 'approved', 'rejected')", name=f"ck_{table}_status"),
        sa.CheckConstraint(
            "status <> 'rejected' OR rejection_reason IS NOT NULL",
            name=f"ck_{table}_rejection_reason",
        ),
        sa.CheckConstraint("(status = 'pending') = (reviewed_at IS NULL)", name=f"ck_{table}_reviewed"),
    ]


def upgrade() -> None:
    """Create all tables."""

    # ==========================================================================
    # Users
    # ==========================================================================
    op.create_table(
        "users",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("email", sa.String(255), nullable=False, unique=True),
        sa.Column("full_name", sa.String(255), nullable=True),
        sa.Column("role", sa.String(50), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        sa.Column("token_version", sa.Integer(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )

    # ==========================================================================
    # Sales side
    # ==========================================================================
    op.create_table(
        "campaigns",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )
    op.create_table(
        "customers",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("phone", sa.String(50), nullable=True),
        sa.Column("email", sa.String(255), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        sa.Column("created_by", sa.Uuid(), sa.ForeignKey("users.id", ondelete="SET NULL"), nullable=True),
        *_timestamps(),
    )
    op.create_table(
        "orders",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("campaign_id", sa.Uuid(), sa.ForeignKey("campaigns.id", ondelete="SET NULL"), nullable=True),
        sa.Column("model_id", sa.String(64), nullable=True),
        sa.Column("customer_name", sa.String(255), nullable=False),
        sa.Column("customer_phone", sa.String(50), nullable=True),
        sa.Column("customer_email", sa.String(255), nullable=True),
        sa.Column("quantity", sa.Integer(), nullable=False),
        sa.Column("customization_data", JSON, nullable=False),
        sa.Column("session_id", sa.String(255), nullable=False),
        sa.Column("deleted_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )
    op.create_index("idx_orders_session", "orders", ["session_id"])
    op.create_table(
        "leads",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("campaign_id", sa.Uuid(), sa.ForeignKey("campaigns.id", ondelete="SET NULL"), nullable=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("phone", sa.String(50), nullable=True),
        sa.Column("email", sa.String(255), nullable=True),
        sa.Column("quantity", sa.String(50), nullable=True),
        sa.Column("customization_summary", JSON, nullable=True),
        sa.Column("needs_logo", sa.Boolean(), nullable=False),
        sa.Column("uploaded_logo_url", sa.Text(), nullable=True),
        sa.Column("order_id", sa.Uuid(), sa.ForeignKey("orders.id", ondelete="SET NULL"), nullable=True),
        sa.Column("session_id", sa.String(255), nullable=False),
        sa.Column("completed", sa.Boolean(), nullable=False),
        sa.Column("created_by", sa.Uuid(), sa.ForeignKey("users.id", ondelete="SET NULL"), nullable=True),
        sa.Column("created_by_salesperson", sa.Boolean(), nullable=False),
        sa.Column("salesperson_status", sa.String(50), nullable=True),
        sa.Column("deleted_at", sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
    )
    op.create_index("idx_leads_order", "leads", ["order_id"])

    # ==========================================================================
    # Design tasks
    # ==========================================================================
    op.create_table(
        "design_tasks",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("order_id", sa.Uuid(), sa.ForeignKey("orders.id", ondelete="CASCADE"), nullable=False),
        sa.Column("lead_id", sa.Uuid(), sa.ForeignKey("leads.id", ondelete="SET NULL"), nullable=True),
        sa.Column("campaign_id", sa.Uuid(), sa.ForeignKey("campaigns.id", ondelete="SET NULL"), nullable=True),
        sa.Column("customer_id", sa.Uuid(), sa.ForeignKey("customers.id", ondelete="SET NULL"), nullable=True),
        sa.Column("status", sa.String(30), nullable=False),
        sa.Column("priority", sa.String(20), nullable=False),
        sa.Column("assigned_to", sa.Uuid(), sa.ForeignKey("users.id", ondelete="SET NULL"), nullable=True),
        sa.Column("assigned_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_by", sa.Uuid(), sa.ForeignKey("users.id", ondelete="SET NULL"), nullable=True),
        sa.Column("created_by_salesperson", sa.Boolean(), nullable=False),
        sa.Column("returned_from_rejection", sa.Boolean(), nullable=False),
        sa.Column("current_version", sa.Integer(), nullable=False),
        sa.Column("deadline", sa.DateTime(timezone=True), nullable=True),
        sa.Column("status_changed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("completed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("deleted_at", sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
    )
    op.create_index("idx_design_tasks_order", "design_tasks", ["order_id"])
    op.create_index("idx_design_tasks_status", "design_tasks", ["status", "deleted_at"])
    op.create_index("idx_design_tasks_created_by", "design_tasks", ["created_by"])

    op.create_table(
        "design_task_history",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("task_id", sa.Uuid(), sa.ForeignKey("design_tasks.id", ondelete="CASCADE"), nullable=False),
        sa.Column("user_id", sa.Uuid(), sa.ForeignKey("users.id", ondelete="SET NULL"), nullable=True),
        sa.Column("action", sa.String(50), nullable=False),
        sa.Column("old_status", sa.String(30), nullable=True),
        sa.Column("new_status", sa.String(30), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )
    op.create_index("idx_task_history_task", "design_task_history", ["task_id", "created_at"])

    op.create_table(
        "task_rejections",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("task_id", sa.Uuid(), sa.ForeignKey("design_tasks.id", ondelete="CASCADE"), nullable=False),
        sa.Column("rejected_by", sa.Uuid(), sa.ForeignKey("users.id", ondelete="SET NULL"), nullable=True),
        sa.Column("reason_type", sa.String(50), nullable=False),
        sa.Column("reason_text", sa.Text(), nullable=True),
        sa.Column("resolved", sa.Boolean(), nullable=False),
        sa.Column("resolved_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("resolved_by", sa.Uuid(), sa.ForeignKey("users.id", ondelete="SET NULL"), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )
    op.create_index("idx_task_rejections_task", "task_rejections", ["task_id", "resolved"])

    op.create_table(
        "urgent_reasons",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("label", sa.String(255), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("display_order", sa.Integer(), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )

    # ==========================================================================
    # Notifications
    # ==========================================================================
    op.create_table(
        "notifications",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("user_id", sa.Uuid(), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("type", sa.String(50), nullable=False),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("message", sa.Text(), nullable=False),
        sa.Column("customer_name", sa.String(255), nullable=True),
        sa.Column("task_id", sa.Uuid(), sa.ForeignKey("design_tasks.id", ondelete="SET NULL"), nullable=True),
        sa.Column("read_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )
    op.create_index("idx_notif_user_unread", "notifications", ["user_id", "read_at", "created_at"])

    # ==========================================================================
    # Pending requests
    # ==========================================================================
    op.create_table(
        "pending_urgent_requests",
        *_request_columns(),
        sa.Column("request_data", JSON, nullable=False),
        sa.Column("requested_priority", sa.String(20), nullable=False),
        sa.Column("final_priority", sa.String(20), nullable=True),
        sa.Column("urgent_reason_id", sa.Uuid(), sa.ForeignKey("urgent_reasons.id", ondelete="SET NULL"), nullable=True),
        sa.Column("urgent_reason_text", sa.Text(), nullable=True),
        sa.Column("created_order_id", sa.Uuid(), sa.ForeignKey("orders.id", ondelete="SET NULL"), nullable=True),
        sa.Column("created_task_id", sa.Uuid(), sa.ForeignKey("design_tasks.id", ondelete="SET NULL"), nullable=True),
        *_request_constraints("pending_urgent_requests"),
    )
    op.create_table(
        "pending_delete_requests",
        *_request_columns(),
        sa.Column("task_id", sa.Uuid(), sa.ForeignKey("design_tasks.id", ondelete="CASCADE"), nullable=False),
        sa.Column("reason", sa.Text(), nullable=False),
        *_request_constraints("pending_delete_requests"),
    )
    op.create_table(
        "pending_modification_requests",
        *_request_columns(),
        sa.Column("task_id", sa.Uuid(), sa.ForeignKey("design_tasks.id", ondelete="CASCADE"), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("attachments", JSON, nullable=False),
        *_request_constraints("pending_modification_requests"),
    )
    op.create_table(
        "pending_priority_change_requests",
        *_request_columns(),
        sa.Column("task_id", sa.Uuid(), sa.ForeignKey("design_tasks.id", ondelete="CASCADE"), nullable=False),
        sa.Column("current_priority", sa.String(20), nullable=False),
        sa.Column("requested_priority", sa.String(20), nullable=False),
        sa.Column("urgent_reason_id", sa.Uuid(), sa.ForeignKey("urgent_reasons.id", ondelete="SET NULL"), nullable=True),
        sa.Column("urgent_reason_text", sa.Text(), nullable=True),
        *_request_constraints("pending_priority_change_requests"),
    )
    op.create_index(
        "uq_pending_priority_change_per_task",
        "pending_priority_change_requests",
        ["task_id"],
        unique=True,
        postgresql_where=sa.text("status = 'pending'"),
        sqlite_where=sa.text("status = 'pending'"),
    )
    op.create_table(
        "pending_customer_delete_requests",
        *_request_columns(),
        sa.Column("customer_id", sa.Uuid(), sa.ForeignKey("customers.id", ondelete="CASCADE"), nullable=False),
        sa.Column("reason", sa.Text(), nullable=False),
        *_request_constraints("pending_customer_delete_requests"),
    )

    for table in (
        "pending_urgent_requests",
        "pending_delete_requests",
        "pending_modification_requests",
        "pending_priority_change_requests",
        "pending_customer_delete_requests",
    ):
        op.create_index(f"idx_{table}_status", table, ["status", "requested_at"])


def downgrade() -> None:
    """Drop all tables."""
    for table in (
        "pending_customer_delete_requests",
        "pending_priority_change_requests",
        "pending_modification_requests",
        "pending_delete_requests",
        "pending_urgent_requests",
        "notifications",
        "urgent_reasons",
        "task_rejections",
        "design_task_history",
        "design_tasks",
        "leads",
        "orders",
        "customers",
        "campaigns",
        "users",
    ):
        op.drop_table(table)
