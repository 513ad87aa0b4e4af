"""Leave balance ledger.

Tracks per (employee, leave type, year) balances and records every change
to a balance's total as an append-only adjustment. Remaining days are
always derived as total - used - pending and may go negative; negative
outcomes are reported as warnings, never refused.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from decimal import Decimal
from uuid import UUID, uuid4

from people_engine.dates import days_between_inclusive
from people_engine.errors import (
    BalanceNotFoundError,
    DuplicateBalanceError,
    ValidationError,
    require_days,
)
from people_engine.leave.store import BalanceStore
from people_engine.leave.types import (
    AdjustmentRecord,
    AdjustmentResult,
    AdjustmentType,
    AdminLeaveResult,
    AssignResult,
    BalanceChange,
    BalanceDraft,
    BalanceSummary,
    InitializeResult,
    LeaveBalanceRecord,
    LeaveRequestRecord,
    LeaveRequestStatus,
    LeaveTypePolicy,
    NegativeBalanceWarning,
)

logger = logging.getLogger(__name__)

HALF_DAY = Decimal("0.5")
DEFAULT_COLOR = "#3b82f6"


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class EmployeeBalances:
    """All balances of one employee for a year, for the HR overview."""

    employee_id: UUID
    balances: list[LeaveBalanceRecord] = field(default_factory=list)


class LeaveBalanceLedger:
    """Balance ledger over a BalanceStore.

    Operations:
    - initialize: create missing balances at the default allocation
    - assign: create one balance, refusing duplicates
    - adjust / apply_adjustment: change a total and append an audit entry
    - record_admin_leave: approved leave entered by an administrator
    - summarize / balances_by_employee / history: read views
    """

    def __init__(self, store: BalanceStore, now: Callable[[], datetime] = utcnow):
        self.store = store
        self.now = now

    @staticmethod
    def remaining(balance: LeaveBalanceRecord) -> Decimal:
        """Remaining days; not clamped."""
        return balance.remaining_days

    def initialize(
        self,
        employee_ids: Iterable[UUID],
        year: int,
        leave_types: Iterable[LeaveTypePolicy],
    ) -> InitializeResult:
        """Create a balance for every (employee, active leave type) pair lacking one.

        Existing balances are never overwritten, so running this twice is
        the same as running it once.
        """
        result = InitializeResult(year=year)
        types = [lt for lt in leave_types if lt.is_active]

        for employee_id in employee_ids:
            for leave_type in types:
                outcome = self.store.insert_balance(
                    BalanceDraft(
                        employee_id=employee_id,
                        leave_type_id=leave_type.id,
                        year=year,
                        total_days=leave_type.default_allocation,
                    )
                )
                if outcome.created:
                    result.created += 1
                else:
                    result.skipped += 1

        logger.info(
            "Initialized leave balances for %s: %d created, %d skipped",
            year,
            result.created,
            result.skipped,
        )
        return result

    def assign(
        self,
        employee_id: UUID,
        leave_type_id: UUID,
        year: int,
        total_days: Decimal | int | float | str,
    ) -> AssignResult:
        """Create a single balance.

        Raises:
            DuplicateBalanceError: If a balance already exists for the key;
                callers should adjust the existing balance instead
        """
        total = require_days(total_days, "total_days")
        outcome = self.store.insert_balance(
            BalanceDraft(
                employee_id=employee_id,
                leave_type_id=leave_type_id,
                year=year,
                total_days=total,
            )
        )
        if not outcome.created:
            raise DuplicateBalanceError(employee_id, leave_type_id, year)

        return AssignResult(
            balance=outcome.balance,
            warnings=NegativeBalanceWarning.check(outcome.balance),
        )

    def adjust(
        self,
        balance_id: UUID,
        change: BalanceChange,
        *,
        adjustment_type: AdjustmentType = AdjustmentType.MANUAL,
        reason: str | None = None,
        adjusted_by: UUID | None = None,
    ) -> AdjustmentResult:
        """Apply an add / subtract / set change to a balance's total.

        A set is recorded as the signed difference between the new and the
        old total, like every other adjustment.

        Raises:
            BalanceNotFoundError: If the balance does not exist
            ValidationError: If the change would not alter the total
        """
        balance = self._load(balance_id)
        delta = change.delta_from(balance.total_days)
        return self._apply(balance, delta, adjustment_type, reason, adjusted_by)

    def apply_adjustment(
        self,
        balance_id: UUID,
        adjustment_days: Decimal | int | float | str,
        adjustment_type: AdjustmentType | str = AdjustmentType.MANUAL,
        reason: str | None = None,
        adjusted_by: UUID | None = None,
    ) -> AdjustmentResult:
        """Add a signed number of days to a balance's total.

        This is the single primitive through which totals change.

        Raises:
            ValidationError: If adjustment_days is zero or the type is unknown
            BalanceNotFoundError: If the balance does not exist
        """
        days = require_days(adjustment_days, "adjustment_days")
        try:
            kind = AdjustmentType(adjustment_type)
        except ValueError as e:
            raise ValidationError(
                f"Unknown adjustment type {adjustment_type!r}", field="adjustment_type"
            ) from e
        balance = self._load(balance_id)
        return self._apply(balance, days, kind, reason, adjusted_by)

    def record_admin_leave(
        self,
        employee_id: UUID,
        leave_type_id: UUID,
        start_date: date,
        end_date: date,
        is_half_day: bool = False,
        reason: str | None = None,
        recorded_by: UUID | None = None,
    ) -> AdminLeaveResult:
        """Record leave entered by an administrator, already approved.

        Consumes ``used_days`` on the balance for ``start_date.year``. The
        balance is never created here.

        Raises:
            ValidationError: If the dates are reversed, or a half day spans
                more than one date
            BalanceNotFoundError: If the employee has no balance for the
                leave type and year
        """
        days_count = days_between_inclusive(start_date, end_date)
        if is_half_day:
            if start_date != end_date:
                raise ValidationError("A half day must start and end on the same date", field="is_half_day")
            days = HALF_DAY
        else:
            days = Decimal(days_count)

        year = start_date.year
        balance = self.store.find_balance(employee_id, leave_type_id, year)
        if balance is None:
            raise BalanceNotFoundError(employee_id=employee_id, leave_type_id=leave_type_id, year=year)

        now = self.now()
        request = LeaveRequestRecord(
            id=uuid4(),
            employee_id=employee_id,
            leave_type_id=leave_type_id,
            start_date=start_date,
            end_date=end_date,
            days_count=days,
            status=LeaveRequestStatus.APPROVED,
            is_half_day=is_half_day,
            reason=reason,
            reviewed_by=recorded_by,
            reviewed_at=now,
        )
        self.store.insert_leave_request(request)

        balance.used_days += days
        self.store.update_balance(balance)

        logger.info(
            "Recorded %s admin leave day(s) for employee %s on balance %s",
            days,
            employee_id,
            balance.id,
        )
        return AdminLeaveResult(
            request=request,
            balance=balance,
            warnings=NegativeBalanceWarning.check(balance),
        )

    def move_days(
        self,
        balance: LeaveBalanceRecord,
        *,
        used: Decimal = Decimal("0"),
        pending: Decimal = Decimal("0"),
    ) -> LeaveBalanceRecord:
        """Shift used / pending days on a balance (leave request side effects)."""
        balance.used_days += used
        balance.pending_days += pending
        self.store.update_balance(balance)
        return balance

    def summarize(
        self,
        employee_id: UUID,
        year: int,
        leave_types: Iterable[LeaveTypePolicy],
    ) -> list[BalanceSummary]:
        """Per-leave-type display rows for one employee."""
        types = {lt.id: lt for lt in leave_types}
        rows: list[BalanceSummary] = []
        for balance in self.store.list_balances(year, employee_id=employee_id):
            leave_type = types.get(balance.leave_type_id)
            rows.append(
                BalanceSummary(
                    balance_id=balance.id,
                    leave_type_id=balance.leave_type_id,
                    leave_type_name=leave_type.name if leave_type else "Unknown",
                    color=(leave_type.color if leave_type and leave_type.color else DEFAULT_COLOR),
                    total=balance.total_days,
                    used=balance.used_days,
                    pending=balance.pending_days,
                    remaining=balance.remaining_days,
                )
            )
        return sorted(rows, key=lambda r: r.leave_type_name)

    def balances_by_employee(self, year: int) -> list[EmployeeBalances]:
        """All balances of a year grouped by employee."""
        grouped: dict[UUID, EmployeeBalances] = {}
        for balance in self.store.list_balances(year):
            entry = grouped.setdefault(balance.employee_id, EmployeeBalances(balance.employee_id))
            entry.balances.append(balance)
        return list(grouped.values())

    def history(
        self, employee_id: UUID | None = None, balance_id: UUID | None = None
    ) -> list[AdjustmentRecord]:
        """Audit entries, newest first."""
        return self.store.list_adjustments(employee_id=employee_id, balance_id=balance_id)

    def _load(self, balance_id: UUID) -> LeaveBalanceRecord:
        balance = self.store.get_balance(balance_id)
        if balance is None:
            raise BalanceNotFoundError(balance_id)
        return balance

    def _apply(
        self,
        balance: LeaveBalanceRecord,
        delta: Decimal,
        adjustment_type: AdjustmentType,
        reason: str | None,
        adjusted_by: UUID | None,
    ) -> AdjustmentResult:
        if delta == 0:
            raise ValidationError("Adjustment must change the balance by a non-zero amount", field="adjustment_days")

        adjustment = AdjustmentRecord(
            id=uuid4(),
            leave_balance_id=balance.id,
            employee_id=balance.employee_id,
            leave_type_id=balance.leave_type_id,
            adjustment_days=delta,
            adjustment_type=adjustment_type,
            reason=reason,
            adjusted_by=adjusted_by,
            created_at=self.now(),
        )
        balance.total_days += delta
        self.store.update_balance(balance)
        self.store.append_adjustment(adjustment)

        logger.debug(
            "Adjusted balance %s by %s (%s); total now %s",
            balance.id,
            delta,
            adjustment_type.value,
            balance.total_days,
        )
        return AdjustmentResult(
            balance=balance,
            adjustment=adjustment,
            warnings=NegativeBalanceWarning.check(balance),
        )
