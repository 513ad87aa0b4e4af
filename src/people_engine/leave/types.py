"""Type definitions for the leave balance ledger."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Union
from uuid import UUID, uuid4

from people_engine.errors import ValidationError, require_days


class AdjustmentType(str, Enum):
    """Reason category recorded on every balance adjustment."""

    MANUAL = "manual"
    CARRYOVER = "carryover"
    EXPIRY = "expiry"
    CORRECTION = "correction"


class AdjustmentOperation(str, Enum):
    """Operations offered by the balance adjustment form."""

    ADD = "add"
    SUBTRACT = "subtract"
    SET = "set"


class LeaveRequestStatus(str, Enum):
    """Leave request status values."""

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    CANCELLED = "cancelled"


@dataclass(frozen=True)
class LeaveTypePolicy:
    """Leave type configuration as seen by the ledger (read-only)."""

    id: UUID
    name: str
    max_days_per_year: Decimal | None = None
    is_paid: bool = True
    allow_carryover: bool = False
    max_carryover_days: Decimal | None = None  # None = uncapped
    requires_approval: bool = True
    count_weekends: bool = False
    color: str | None = None
    is_active: bool = True

    @property
    def default_allocation(self) -> Decimal:
        return self.max_days_per_year if self.max_days_per_year is not None else Decimal("0")


@dataclass
class LeaveBalanceRecord:
    """One (employee, leave type, year) balance row."""

    id: UUID
    employee_id: UUID
    leave_type_id: UUID
    year: int
    total_days: Decimal = Decimal("0")
    used_days: Decimal = Decimal("0")
    pending_days: Decimal = Decimal("0")

    @property
    def remaining_days(self) -> Decimal:
        """Derived, never stored. May be negative."""
        return self.total_days - self.used_days - self.pending_days

    @property
    def key(self) -> tuple[UUID, UUID, int]:
        return (self.employee_id, self.leave_type_id, self.year)


@dataclass(frozen=True)
class BalanceDraft:
    """A balance row to insert."""

    employee_id: UUID
    leave_type_id: UUID
    year: int
    total_days: Decimal
    used_days: Decimal = Decimal("0")
    pending_days: Decimal = Decimal("0")
    id: UUID = field(default_factory=uuid4)

    @property
    def key(self) -> tuple[UUID, UUID, int]:
        return (self.employee_id, self.leave_type_id, self.year)


@dataclass(frozen=True)
class InsertOutcome:
    """Result of an insert guarded by the balance uniqueness key.

    If ``created`` is False the key already existed and ``balance`` is the
    existing row, untouched.
    """

    balance: LeaveBalanceRecord
    created: bool


@dataclass(frozen=True)
class AdjustmentRecord:
    """Append-only audit entry for a change to a balance's total."""

    id: UUID
    leave_balance_id: UUID
    employee_id: UUID
    leave_type_id: UUID
    adjustment_days: Decimal  # Signed
    adjustment_type: AdjustmentType
    reason: str | None
    adjusted_by: UUID | None
    created_at: datetime


@dataclass(frozen=True)
class LeaveRequestDraft:
    """A leave request to insert."""

    employee_id: UUID
    leave_type_id: UUID
    start_date: date
    end_date: date
    days_count: Decimal
    is_half_day: bool = False
    status: LeaveRequestStatus = LeaveRequestStatus.PENDING
    reason: str | None = None


@dataclass
class LeaveRequestRecord:
    """A persisted leave request."""

    id: UUID
    employee_id: UUID
    leave_type_id: UUID
    start_date: date
    end_date: date
    days_count: Decimal
    status: LeaveRequestStatus
    is_half_day: bool = False
    reason: str | None = None
    reviewed_by: UUID | None = None
    reviewed_at: datetime | None = None
    rejection_reason: str | None = None

    @classmethod
    def from_draft(cls, draft: LeaveRequestDraft, request_id: UUID | None = None) -> LeaveRequestRecord:
        return cls(
            id=request_id or uuid4(),
            employee_id=draft.employee_id,
            leave_type_id=draft.leave_type_id,
            start_date=draft.start_date,
            end_date=draft.end_date,
            days_count=draft.days_count,
            status=draft.status,
            is_half_day=draft.is_half_day,
            reason=draft.reason,
        )


@dataclass(frozen=True)
class NegativeBalanceWarning:
    """Non-fatal signal: the write completed but the balance is now negative."""

    balance_id: UUID
    employee_id: UUID
    leave_type_id: UUID
    year: int
    remaining_days: Decimal

    @property
    def message(self) -> str:
        return (
            f"Employee {self.employee_id} has a negative balance of "
            f"{self.remaining_days} days for {self.year}"
        )

    @classmethod
    def check(cls, balance: LeaveBalanceRecord) -> list[NegativeBalanceWarning]:
        """Return a one-item list if ``balance`` is negative, else an empty list."""
        if balance.remaining_days >= 0:
            return []
        return [
            cls(
                balance_id=balance.id,
                employee_id=balance.employee_id,
                leave_type_id=balance.leave_type_id,
                year=balance.year,
                remaining_days=balance.remaining_days,
            )
        ]


# =============================================================================
# Balance changes (tagged union)
# =============================================================================


@dataclass(frozen=True)
class AddDays:
    """Grant extra days: new total = total + days."""

    days: Decimal

    def __post_init__(self) -> None:
        _require_positive(self, "days")

    def delta_from(self, total: Decimal) -> Decimal:
        return self.days


@dataclass(frozen=True)
class SubtractDays:
    """Remove days: new total = total - days."""

    days: Decimal

    def __post_init__(self) -> None:
        _require_positive(self, "days")

    def delta_from(self, total: Decimal) -> Decimal:
        return -self.days


@dataclass(frozen=True)
class SetTotal:
    """Overwrite the total: new total = days. Logged as the signed difference."""

    days: Decimal

    def __post_init__(self) -> None:
        object.__setattr__(self, "days", require_days(self.days, "days"))

    def delta_from(self, total: Decimal) -> Decimal:
        return self.days - total


BalanceChange = Union[AddDays, SubtractDays, SetTotal]


def change_for(operation: AdjustmentOperation | str, days: Decimal | int | float | str) -> BalanceChange:
    """Build the balance change for a form-level operation name."""
    try:
        op = AdjustmentOperation(operation)
    except ValueError as e:
        raise ValidationError(f"Unknown adjustment operation {operation!r}", field="operation") from e
    if op is AdjustmentOperation.ADD:
        return AddDays(days)  # type: ignore[arg-type]
    if op is AdjustmentOperation.SUBTRACT:
        return SubtractDays(days)  # type: ignore[arg-type]
    return SetTotal(days)  # type: ignore[arg-type]


def _require_positive(change: AddDays | SubtractDays, name: str) -> None:
    value = require_days(getattr(change, name), name)
    if value <= 0:
        raise ValidationError(f"{name} must be greater than zero", field=name)
    object.__setattr__(change, name, value)


# =============================================================================
# Results
# =============================================================================


@dataclass
class InitializeResult:
    """Counts from a bulk initialization."""

    year: int
    created: int = 0
    skipped: int = 0


@dataclass
class AssignResult:
    """A newly assigned balance plus any warnings."""

    balance: LeaveBalanceRecord
    warnings: list[NegativeBalanceWarning] = field(default_factory=list)


@dataclass
class AdjustmentResult:
    """The adjusted balance, its audit entry and any warnings."""

    balance: LeaveBalanceRecord
    adjustment: AdjustmentRecord
    warnings: list[NegativeBalanceWarning] = field(default_factory=list)

    @property
    def previous_total(self) -> Decimal:
        return self.balance.total_days - self.adjustment.adjustment_days


@dataclass
class AdminLeaveResult:
    """An admin-entered approved leave and the balance it consumed."""

    request: LeaveRequestRecord
    balance: LeaveBalanceRecord
    warnings: list[NegativeBalanceWarning] = field(default_factory=list)


@dataclass
class RolloverResult:
    """Summary of a year-end rollover."""

    from_year: int
    to_year: int
    balances_created: int = 0
    carryovers_applied: int = 0
    skipped: int = 0
    carried_days: Decimal = Decimal("0")


@dataclass(frozen=True)
class BalanceSummary:
    """Display row for one leave type of one employee."""

    balance_id: UUID
    leave_type_id: UUID
    leave_type_name: str
    color: str
    total: Decimal
    used: Decimal
    pending: Decimal
    remaining: Decimal
