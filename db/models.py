"""SQLAlchemy 2.0 ORM models for the CRM record store.

Covers the five standard objects the exercises manipulate, all in the
crm schema:
  - accounts, contacts, opportunities, leads, cases
"""

import uuid
from datetime import date, datetime
from decimal import Decimal
from typing import Optional

from sqlalchemy import (
    CheckConstraint,
    Date,
    DateTime,
    ForeignKey,
    Index,
    Numeric,
    Text,
    Uuid,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship
from sqlalchemy.sql import func


# ---------------------------------------------------------------------------
# Shared base
# ---------------------------------------------------------------------------


class Base(DeclarativeBase):
    pass


# ---------------------------------------------------------------------------
# Picklist values used in the CHECK constraints
# ---------------------------------------------------------------------------

OPPORTUNITY_STAGES = (
    "Prospecting",
    "Qualification",
    "Needs Analysis",
    "Value Proposition",
    "Id. Decision Makers",
    "Perception Analysis",
    "Proposal/Price Quote",
    "Negotiation/Review",
    "Closed Won",
    "Closed Lost",
)

ACCOUNT_RATINGS = ("Hot", "Warm", "Cold")

CASE_STATUSES = ("New", "Working", "Escalated", "Closed")

CASE_ORIGINS = ("Phone", "Email", "Web")


def _in_check(column: str, values: tuple[str, ...], nullable: bool = False) -> str:
    clause = f"{column} IN (" + ", ".join(f"'{v}'" for v in values) + ")"
    if nullable:
        return f"{column} IS NULL OR {clause}"
    return clause


# ===========================================================================
# Schema: crm
# ===========================================================================


class Account(Base):
    """crm.accounts — a company or organization."""

    __tablename__ = "accounts"
    __table_args__ = (
        CheckConstraint(
            _in_check("rating", ACCOUNT_RATINGS, nullable=True),
            name="ck_account_rating",
        ),
        Index("ix_accounts_name", "name"),
        {"schema": "crm"},
    )

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4
    )
    name: Mapped[str] = mapped_column(Text, nullable=False)
    industry: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    rating: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )

    # Relationships
    contacts: Mapped[list["Contact"]] = relationship(
        "Contact", back_populates="account", passive_deletes=True
    )
    opportunities: Mapped[list["Opportunity"]] = relationship(
        "Opportunity", back_populates="account", passive_deletes=True
    )
    cases: Mapped[list["Case"]] = relationship(
        "Case", back_populates="account", passive_deletes=True
    )


class Contact(Base):
    """crm.contacts — an individual person, optionally under an account."""

    __tablename__ = "contacts"
    __table_args__ = {"schema": "crm"}

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4
    )
    account_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("crm.accounts.id", ondelete="SET NULL"),
        nullable=True,
    )
    first_name: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    last_name: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )

    account: Mapped[Optional["Account"]] = relationship(
        "Account", back_populates="contacts"
    )


class Opportunity(Base):
    """crm.opportunities — a pending deal against an account."""

    __tablename__ = "opportunities"
    __table_args__ = (
        CheckConstraint(
            _in_check("stage_name", OPPORTUNITY_STAGES),
            name="ck_opportunity_stage_name",
        ),
        {"schema": "crm"},
    )

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4
    )
    account_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("crm.accounts.id", ondelete="CASCADE"),
        nullable=True,
    )
    name: Mapped[str] = mapped_column(Text, nullable=False)
    stage_name: Mapped[str] = mapped_column(Text, nullable=False)
    close_date: Mapped[date] = mapped_column(Date, nullable=False)
    amount: Mapped[Optional[Decimal]] = mapped_column(Numeric(16, 2), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )

    account: Mapped[Optional["Account"]] = relationship(
        "Account", back_populates="opportunities"
    )


class Lead(Base):
    """crm.leads — an unqualified prospect, not yet tied to an account."""

    __tablename__ = "leads"
    __table_args__ = {"schema": "crm"}

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4
    )
    last_name: Mapped[str] = mapped_column(Text, nullable=False)
    company: Mapped[str] = mapped_column(Text, nullable=False)
    email: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )


class Case(Base):
    """crm.cases — a customer issue raised against an account."""

    __tablename__ = "cases"
    __table_args__ = (
        CheckConstraint(
            _in_check("status", CASE_STATUSES),
            name="ck_case_status",
        ),
        CheckConstraint(
            _in_check("origin", CASE_ORIGINS, nullable=True),
            name="ck_case_origin",
        ),
        {"schema": "crm"},
    )

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4
    )
    account_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("crm.accounts.id", ondelete="SET NULL"),
        nullable=True,
    )
    status: Mapped[str] = mapped_column(Text, nullable=False)
    origin: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )

    account: Mapped[Optional["Account"]] = relationship(
        "Account", back_populates="cases"
    )
