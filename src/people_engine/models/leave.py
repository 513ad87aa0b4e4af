"""Leave type, balance, adjustment and request models."""

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

from people_engine.models.base import Base, UpdatedAtMixin

DAYS = Numeric(7, 2)


class LeaveType(Base, UpdatedAtMixin):
    """Leave type configuration."""

    __tablename__ = "leave_types"

    id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4)
    name: Mapped[str] = mapped_column(String, nullable=False, unique=True)
    color: Mapped[str | None] = mapped_column(String, nullable=True)
    max_days_per_year: Mapped[Decimal | None] = mapped_column(DAYS, nullable=True)
    is_paid: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    allow_carryover: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    max_carryover_days: Mapped[Decimal | None] = mapped_column(DAYS, nullable=True)
    requires_approval: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    count_weekends: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    balances: Mapped[list[LeaveBalance]] = relationship(back_populates="leave_type")


class LeaveBalance(Base, UpdatedAtMixin):
    """Per (employee, leave type, year) balance. Remaining days are derived."""

    __tablename__ = "leave_balances"

    id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4)
    employee_id: Mapped[UUID] = mapped_column(nullable=False, index=True)
    leave_type_id: Mapped[UUID] = mapped_column(
        ForeignKey("leave_types.id", ondelete="RESTRICT"),
        nullable=False,
    )
    year: Mapped[int] = mapped_column(Integer, nullable=False)
    total_days: Mapped[Decimal] = mapped_column(DAYS, nullable=False, default=Decimal("0"))
    used_days: Mapped[Decimal] = mapped_column(DAYS, nullable=False, default=Decimal("0"))
    pending_days: Mapped[Decimal] = mapped_column(DAYS, nullable=False, default=Decimal("0"))

    __table_args__ = (
        UniqueConstraint("employee_id", "leave_type_id", "year", name="leave_balances_key_unique"),
    )

    leave_type: Mapped[LeaveType] = relationship(back_populates="balances")
    adjustments: Mapped[list[LeaveBalanceAdjustment]] = relationship(back_populates="leave_balance")

    @property
    def remaining_days(self) -> Decimal:
        return self.total_days - self.used_days - self.pending_days


class LeaveBalanceAdjustment(Base):
    """Append-only audit entry for a change to a balance total."""

    __tablename__ = "leave_balance_adjustments"

    id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4)
    leave_balance_id: Mapped[UUID] = mapped_column(
        ForeignKey("leave_balances.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    employee_id: Mapped[UUID] = mapped_column(nullable=False, index=True)
    leave_type_id: Mapped[UUID] = mapped_column(ForeignKey("leave_types.id"), nullable=False)
    adjustment_days: Mapped[Decimal] = mapped_column(DAYS, nullable=False)
    adjustment_type: Mapped[str] = mapped_column(String, nullable=False)
    reason: Mapped[str | None] = mapped_column(Text, nullable=True)
    adjusted_by: Mapped[UUID | None] = mapped_column(nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    __table_args__ = (
        CheckConstraint(
            "adjustment_type IN ('manual', 'carryover', 'expiry', 'correction')",
            name="leave_balance_adjustments_type_check",
        ),
        CheckConstraint("adjustment_days <> 0", name="leave_balance_adjustments_nonzero"),
    )

    leave_balance: Mapped[LeaveBalance] = relationship(back_populates="adjustments")


class LeaveRequest(Base, UpdatedAtMixin):
    """Leave request, including admin-entered and holiday-synced entries."""

    __tablename__ = "leave_requests"

    id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4)
    employee_id: Mapped[UUID] = mapped_column(nullable=False, index=True)
    leave_type_id: Mapped[UUID] = mapped_column(ForeignKey("leave_types.id"), nullable=False)
    start_date: Mapped[date] = mapped_column(Date, nullable=False)
    end_date: Mapped[date] = mapped_column(Date, nullable=False)
    days_count: Mapped[Decimal] = mapped_column(DAYS, nullable=False)
    is_half_day: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    status: Mapped[str] = mapped_column(String, nullable=False, default="pending")
    reason: Mapped[str | None] = mapped_column(Text, nullable=True)
    reviewed_by: Mapped[UUID | None] = mapped_column(nullable=True)
    reviewed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    rejection_reason: Mapped[str | None] = mapped_column(Text, nullable=True)

    __table_args__ = (
        CheckConstraint(
            "status IN ('pending', 'approved', 'rejected', 'cancelled')",
            name="leave_requests_status_check",
        ),
        CheckConstraint("end_date >= start_date", name="leave_requests_dates_check"),
    )
