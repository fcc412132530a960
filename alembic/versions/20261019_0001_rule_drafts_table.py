"""Rule drafts table

Revision ID: 20261019_0001
Revises: 
Create Date: 2026-10-19 10:15:00
"""
from __future__ import annotations

from alembic import op
import sqlalchemy as sa


revision = "20261019_0001"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "rule_drafts",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("version", sa.Integer(), nullable=False),
        sa.Column("recurrence_type", sa.String(length=24), nullable=False),
        sa.Column("repeat_interval", sa.Integer(), nullable=False),
        sa.Column("start_date", sa.Date(), nullable=False),
        sa.Column("end_date", sa.Date(), nullable=True),
        sa.Column("days_of_week", sa.String(length=32), nullable=True),
        sa.Column("month_day", sa.Integer(), nullable=True),
        sa.Column("month_week", sa.String(length=8), nullable=True),
        sa.Column("month_week_day", sa.Integer(), nullable=True),
        sa.Column("created_at", sa.DateTime(), server_default=sa.text("CURRENT_TIMESTAMP"), nullable=False),
        sa.Column("updated_at", sa.DateTime(), server_default=sa.text("CURRENT_TIMESTAMP"), nullable=False),
        sa.CheckConstraint(
            "recurrence_type IN ('daily','weekly','monthly_by_day','monthly_by_weekday','yearly')",
            name="ck_rule_drafts_recurrence_type",
        ),
        sa.CheckConstraint("repeat_interval >= 1", name="ck_rule_drafts_repeat_interval"),
        sa.CheckConstraint("version >= 1", name="ck_rule_drafts_version"),
    )


def downgrade() -> None:
    op.drop_table("rule_drafts")
