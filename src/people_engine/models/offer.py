"""Offer and offer version models."""

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from uuid import UUID, uuid4

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Date,
    DateTime,
    ForeignKey,
    Integer,
    Numeric,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from people_engine.models.base import Base, TimestampMixin, UpdatedAtMixin

MONEY = Numeric(14, 2)


class Offer(Base, UpdatedAtMixin):
    """An offer made to a candidate; its terms live in versions."""

    __tablename__ = "offers"

    id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4)
    offer_code: Mapped[str] = mapped_column(String, nullable=False, unique=True)
    candidate_id: Mapped[UUID] = mapped_column(nullable=False, index=True)
    status: Mapped[str] = mapped_column(String, nullable=False, default="draft")
    current_version_id: Mapped[UUID | None] = mapped_column(nullable=True)

    __table_args__ = (
        CheckConstraint(
            "status IN ('draft', 'sent', 'accepted', 'rejected', 'expired', 'archived')",
            name="offers_status_check",
        ),
    )

    versions: Mapped[list[OfferVersion]] = relationship(
        back_populates="offer",
        order_by="OfferVersion.version_number",
    )


class OfferVersion(Base, TimestampMixin):
    """One immutable revision of an offer's terms.

    Revisions never update money fields in place: a new version is inserted
    and the previous one is marked superseded.
    """

    __tablename__ = "offer_versions"

    id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4)
    offer_id: Mapped[UUID] = mapped_column(
        ForeignKey("offers.id", ondelete="CASCADE"),
        nullable=False,
    )
    version_number: Mapped[int] = mapped_column(Integer, nullable=False)
    status: Mapped[str] = mapped_column(String, nullable=False, default="draft")
    change_reason: Mapped[str | None] = mapped_column(Text, nullable=True)
    currency_code: Mapped[str] = mapped_column(String(3), nullable=False, default="SAR")
    start_date: Mapped[date | None] = mapped_column(Date, nullable=True)

    basic_salary: Mapped[Decimal] = mapped_column(MONEY, nullable=False, default=Decimal("0"))
    housing_allowance: Mapped[Decimal] = mapped_column(MONEY, nullable=False, default=Decimal("0"))
    transport_allowance: Mapped[Decimal] = mapped_column(MONEY, nullable=False, default=Decimal("0"))
    other_allowances: Mapped[Decimal] = mapped_column(MONEY, nullable=False, default=Decimal("0"))
    deductions_fixed: Mapped[Decimal] = mapped_column(MONEY, nullable=False, default=Decimal("0"))
    is_subject_to_gosi: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    gosi_employee_amount: Mapped[Decimal] = mapped_column(MONEY, nullable=False, default=Decimal("0"))
    gosi_employer_amount: Mapped[Decimal] = mapped_column(MONEY, nullable=False, default=Decimal("0"))
    gosi_employee_overridden: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    gosi_employer_overridden: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    # Derived from the fields above by the offer calculator
    gross_pay_total: Mapped[Decimal] = mapped_column(MONEY, nullable=False, default=Decimal("0"))
    deductions_total: Mapped[Decimal] = mapped_column(MONEY, nullable=False, default=Decimal("0"))
    net_pay_estimate: Mapped[Decimal] = mapped_column(MONEY, nullable=False, default=Decimal("0"))

    sent_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    superseded_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    accepted_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    rejected_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    __table_args__ = (
        UniqueConstraint("offer_id", "version_number", name="offer_versions_number_unique"),
        CheckConstraint(
            "status IN ('draft', 'sent', 'superseded', 'accepted', 'rejected', 'expired')",
            name="offer_versions_status_check",
        ),
    )

    offer: Mapped[Offer] = relationship(back_populates="versions")
