"""
Add quote requests and admin notifications tables

Revision ID: 0001_quote_requests
Revises:
Create Date: 2026-02-10 00:00:00
"""

from alembic import op
import sqlalchemy as sa


revision = "0001_quote_requests"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "quote_requests",
        sa.Column("quote_request_id", sa.String(length=36), primary_key=True),
        sa.Column("client_name", sa.String(length=255), nullable=False),
        sa.Column("client_email", sa.String(length=255), nullable=False),
        sa.Column("client_phone", sa.String(length=64), nullable=True),
        sa.Column("service_name", sa.String(length=255), nullable=False),
        sa.Column("project_type", sa.String(length=32), nullable=False),
        sa.Column("zone", sa.String(length=32), nullable=False),
        sa.Column("hours", sa.Float(), nullable=False),
        sa.Column("sqft", sa.Float(), nullable=False),
        sa.Column("visits", sa.Integer(), nullable=False),
        sa.Column("extras", sa.String(length=512), nullable=True),
        sa.Column("min_cents", sa.BigInteger(), nullable=False),
        sa.Column("max_cents", sa.BigInteger(), nullable=False),
        sa.Column("breakdown_metadata", sa.JSON(), nullable=False),
        sa.Column("status", sa.String(length=32), nullable=False, server_default="pending"),
        sa.Column("message_to_client", sa.Text(), nullable=True),
        sa.Column("approved_min_cents", sa.BigInteger(), nullable=True),
        sa.Column("approved_max_cents", sa.BigInteger(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            onupdate=sa.func.now(),
            nullable=False,
        ),
        sa.Column("sent_at", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index("ix_quote_requests_status", "quote_requests", ["status"], unique=False)

    op.create_table(
        "admin_notifications",
        sa.Column("notification_id", sa.String(length=36), primary_key=True),
        sa.Column("type", sa.String(length=64), nullable=False),
        sa.Column("entity_id", sa.String(length=36), nullable=False),
        sa.Column("read", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("quote_request_id", sa.String(length=36), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.ForeignKeyConstraint(
            ["quote_request_id"],
            ["quote_requests.quote_request_id"],
            name="fk_admin_notifications_quote_request",
            ondelete="CASCADE",
        ),
    )
    op.create_index(
        "ix_admin_notifications_quote_request_id",
        "admin_notifications",
        ["quote_request_id"],
        unique=False,
    )


def downgrade() -> None:
    op.drop_index("ix_admin_notifications_quote_request_id", table_name="admin_notifications")
    op.drop_table("admin_notifications")
    op.drop_index("ix_quote_requests_status", table_name="quote_requests")
    op.drop_table("quote_requests")
