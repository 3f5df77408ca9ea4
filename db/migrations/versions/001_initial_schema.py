"""Initial schema: crm accounts, contacts, opportunities, leads, cases.

Revision ID: 001
Revises:
Create Date: 2026-10-19

"""
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers
revision = "001"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.execute("CREATE SCHEMA IF NOT EXISTS crm")

    # ─── CRM Schema ──────────────────────────────────────────────────────────

    op.create_table(
        "accounts",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("name", sa.Text, nullable=False),
        sa.Column("industry", sa.Text, nullable=True),
        sa.Column("rating", sa.Text, nullable=True),
        sa.Column("description", sa.Text, nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()")),
        sa.CheckConstraint(
            "rating IS NULL OR rating IN ('Hot', 'Warm', 'Cold')",
            name="ck_account_rating",
        ),
        schema="crm",
    )
    op.create_index("ix_accounts_name", "accounts", ["name"], schema="crm")

    op.create_table(
        "contacts",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("account_id", postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column("first_name", sa.Text, nullable=True),
        sa.Column("last_name", sa.Text, nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()")),
        sa.ForeignKeyConstraint(["account_id"], ["crm.accounts.id"], name="fk_contact_account", ondelete="SET NULL"),
        schema="crm",
    )

    op.create_table(
        "opportunities",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("account_id", postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column("name", sa.Text, nullable=False),
        sa.Column("stage_name", sa.Text, nullable=False),
        sa.Column("close_date", sa.Date, nullable=False),
        sa.Column("amount", sa.Numeric(16, 2), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()")),
        sa.CheckConstraint(
            "stage_name IN ('Prospecting','Qualification','Needs Analysis','Value Proposition',"
            "'Id. Decision Makers','Perception Analysis','Proposal/Price Quote',"
            "'Negotiation/Review','Closed Won','Closed Lost')",
            name="ck_opportunity_stage_name",
        ),
        sa.ForeignKeyConstraint(["account_id"], ["crm.accounts.id"], name="fk_opportunity_account", ondelete="CASCADE"),
        schema="crm",
    )

    op.create_table(
        "leads",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("last_name", sa.Text, nullable=False),
        sa.Column("company", sa.Text, nullable=False),
        sa.Column("email", sa.Text, nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()")),
        schema="crm",
    )

    op.create_table(
        "cases",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("account_id", postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column("status", sa.Text, nullable=False),
        sa.Column("origin", sa.Text, nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()")),
        sa.CheckConstraint(
            "status IN ('New', 'Working', 'Escalated', 'Closed')",
            name="ck_case_status",
        ),
        sa.CheckConstraint(
            "origin IS NULL OR origin IN ('Phone', 'Email', 'Web')",
            name="ck_case_origin",
        ),
        sa.ForeignKeyConstraint(["account_id"], ["crm.accounts.id"], name="fk_case_account", ondelete="SET NULL"),
        schema="crm",
    )


def downgrade() -> None:
    # Drop in reverse dependency order
    op.drop_table("cases", schema="crm")
    op.drop_table("leads", schema="crm")
    op.drop_table("opportunities", schema="crm")
    op.drop_table("contacts", schema="crm")
    op.drop_index("ix_accounts_name", table_name="accounts", schema="crm")
    op.drop_table("accounts", schema="crm")
