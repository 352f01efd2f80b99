"""cases, approvals, events

Revision ID: 0001_initial
Revises:
Create Date: 2026-10-18

"""
from alembic import op
import sqlalchemy as sa

revision = "0001_initial"
down_revision = None
branch_labels = None
depends_on = None

CASE_STATUS = sa.Enum("DRAFTED", "APPROVED", "REJECTED", "REVISE", name="casestatusenum")
ACTION = sa.Enum(
    "SUBMIT_RESPONSES", "BUILD_DRAFT", "SAVE_APPROVAL", "RENDER_REPORT",
    "RELOAD_INSTRUMENT", "FAILURE_LOG",
    name="actionenum",
)


def upgrade() -> None:
    op.create_table(
        "cases",
        sa.Column("case_id", sa.String(), primary_key=True),
        sa.Column("respondent_name", sa.String(), nullable=True),
        sa.Column("status", CASE_STATUS, nullable=False),
        sa.Column("validation_status", sa.String(), nullable=False),
        sa.Column("recommendation", sa.String(), nullable=False),
        sa.Column("confidence_score", sa.Float(), nullable=True),
        sa.Column("confidence_level", sa.String(), nullable=True),
        sa.Column("high_stakes", sa.Boolean(), nullable=True),
        sa.Column("responses", sa.Text(), nullable=False),
        sa.Column("draft", sa.Text(), nullable=False),
        sa.Column("instrument_version", sa.String(), nullable=True),
        sa.Column("app_version", sa.String(), nullable=True),
        sa.Column("schema_version", sa.String(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index("ix_cases_case_id", "cases", ["case_id"])

    op.create_table(
        "approvals",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("case_id", sa.String(), sa.ForeignKey("cases.case_id"), nullable=False),
        sa.Column("decision", sa.String(), nullable=False),
        sa.Column("operator_id", sa.String(), nullable=True),
        sa.Column("operator_notes", sa.Text(), nullable=True),
        sa.Column("approval", sa.Text(), nullable=False),
        sa.Column("payload", sa.Text(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index("ix_approvals_case_id", "approvals", ["case_id"])

    op.create_table(
        "events",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("case_id", sa.String(), nullable=True),
        sa.Column("action", ACTION, nullable=False),
        sa.Column("actor_type", sa.String(), nullable=True),
        sa.Column("payload", sa.Text(), nullable=True),
        sa.Column("app_version", sa.String(), nullable=True),
        sa.Column("schema_version", sa.String(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index("ix_events_case_id", "events", ["case_id"])


def downgrade() -> None:
    op.drop_index("ix_events_case_id", table_name="events")
    op.drop_table("events")
    op.drop_index("ix_approvals_case_id", table_name="approvals")
    op.drop_table("approvals")
    op.drop_index("ix_cases_case_id", table_name="cases")
    op.drop_table("cases")
