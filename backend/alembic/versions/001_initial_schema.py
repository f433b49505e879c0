"""Initial schema: users, leads, status history and interactions.

Revision ID: 001
Revises: None
Create Date: 2025-01-01
"""
from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import UUID, JSONB

revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # Users
    op.create_table(
        "users",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("email", sa.String(255), unique=True, nullable=False),
        sa.Column("role", sa.String(30), server_default="admin"),
        sa.Column("is_active", sa.Boolean, server_default="true"),
        sa.Column("created_at", sa.DateTime, server_default=sa.func.now()),
    )
    op.create_index("ix_users_email", "users", ["email"])

    # Leads
    op.create_table(
        "leads",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column("source", sa.String(50), server_default="contact_form"),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("company", sa.String(255), nullable=True),
        sa.Column("phone", sa.String(50), nullable=True),
        sa.Column("whatsapp", sa.String(50), nullable=True),
        sa.Column("city", sa.String(120), nullable=True),
        sa.Column("state", sa.String(120), nullable=True),
        sa.Column("country", sa.String(120), nullable=True),
        sa.Column("business_type", sa.String(120), nullable=True),
        sa.Column("message", sa.Text, nullable=True),
        sa.Column("status", sa.String(30), server_default="new"),
        sa.Column("assigned_to", UUID(as_uuid=True), sa.ForeignKey("users.id"), nullable=True),
        sa.Column("conversion_date", sa.DateTime, nullable=True),
        sa.Column("rejection_reason", sa.Text, nullable=True),
        sa.Column("lead_score", sa.Integer, nullable=True),
        sa.Column("lead_temperature", sa.String(10), nullable=True),
        sa.Column("predicted_conversion_rate", sa.Float, nullable=True),
        sa.Column("ai_suggestions", JSONB, nullable=True),
        sa.Column("ai_analysis", JSONB, nullable=True),
        sa.Column("last_ai_analysis", sa.DateTime, nullable=True),
        sa.Column("ddd", sa.String(2), nullable=True),
        sa.Column("ddi", sa.String(5), nullable=True),
        sa.Column("estado", sa.String(2), nullable=True),
        sa.Column("cidade", sa.String(120), nullable=True),
        sa.Column("pais", sa.String(120), nullable=True),
        sa.Column("continente", sa.String(60), nullable=True),
        sa.Column("regiao", sa.String(30), nullable=True),
        sa.Column("geo_data", JSONB, nullable=True),
        sa.Column("interaction_count", sa.Integer, server_default="0"),
        sa.Column("last_interaction", sa.DateTime, nullable=True),
        sa.Column("created_at", sa.DateTime, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime, server_default=sa.func.now()),
        sa.CheckConstraint("lead_score IS NULL OR (lead_score BETWEEN 0 AND 100)", name="ck_leads_score_range"),
    )
    op.create_index("ix_leads_email", "leads", ["email"])
    op.create_index("ix_leads_status", "leads", ["status"])
    op.create_index("ix_leads_assigned_to", "leads", ["assigned_to"])
    op.create_index("ix_leads_estado", "leads", ["estado"])
    op.create_index("ix_leads_created_at", "leads", ["created_at"])

    # Status history (append-only)
    op.create_table(
        "lead_status_history",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column("lead_id", UUID(as_uuid=True), sa.ForeignKey("leads.id"), nullable=False),
        sa.Column("old_status", sa.String(30), nullable=True),
        sa.Column("new_status", sa.String(30), nullable=False),
        sa.Column("reason", sa.Text, nullable=True),
        sa.Column("notes", sa.Text, nullable=True),
        sa.Column("changed_by", UUID(as_uuid=True), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("created_at", sa.DateTime, server_default=sa.func.now()),
        sa.Column("sequence", sa.Integer, nullable=False, server_default="1"),
        sa.UniqueConstraint("lead_id", "sequence", name="uq_lead_status_history_sequence"),
    )
    op.create_index("ix_lead_status_history_lead", "lead_status_history", ["lead_id", "created_at"])

    # Interactions
    op.create_table(
        "lead_interactions",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column("lead_id", UUID(as_uuid=True), sa.ForeignKey("leads.id"), nullable=False),
        sa.Column("user_id", UUID(as_uuid=True), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("type", sa.String(20), nullable=False),
        sa.Column("content", sa.Text, nullable=False),
        sa.Column("created_at", sa.DateTime, server_default=sa.func.now()),
    )
    op.create_index("ix_lead_interactions_lead", "lead_interactions", ["lead_id", "created_at"])


def downgrade() -> None:
    op.drop_table("lead_interactions")
    op.drop_table("lead_status_history")
    op.drop_table("leads")
    op.drop_table("users")
