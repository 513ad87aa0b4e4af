"""Year-end leave rollover."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from decimal import Decimal
from uuid import UUID

from people_engine.errors import ValidationError
from people_engine.leave.ledger import LeaveBalanceLedger
from people_engine.leave.store import BalanceStore
from people_engine.leave.types import (
    AdjustmentType,
    BalanceDraft,
    LeaveBalanceRecord,
    LeaveTypePolicy,
    RolloverResult,
)

logger = logging.getLogger(__name__)

MIN_YEAR = 2000
MAX_YEAR = 2100


def carryover_days(balance: LeaveBalanceRecord, leave_type: LeaveTypePolicy) -> Decimal:
    """Days a balance carries into the next year under ``leave_type``'s cap.

    Negative remaining contributes nothing; a cap of None means uncapped.
    """
    if not leave_type.allow_carryover:
        return Decimal("0")
    unused = max(balance.remaining_days, Decimal("0"))
    if leave_type.max_carryover_days is None:
        return unused
    return min(unused, max(leave_type.max_carryover_days, Decimal("0")))


class YearEndRollover:
    """Opens next year's balances from this year's.

    For each employee and active leave type with a ``from_year`` balance:
    1. Skip if a ``to_year`` balance already exists
    2. Create the ``to_year`` balance at the default allocation
    3. For carryover types, add min(unused, cap) through the ledger's
       adjustment primitive with type ``carryover``, so the audit entry
       references the new balance

    Not safe to re-run blindly for a year pair: the existing-row guard
    stops duplicate balances, but carryover entries are written again if
    the created balances were deleted in between.
    """

    def __init__(self, store: BalanceStore, ledger: LeaveBalanceLedger | None = None):
        self.store = store
        self.ledger = ledger or LeaveBalanceLedger(store)

    def process(
        self,
        from_year: int,
        employee_ids: Iterable[UUID],
        leave_types: Iterable[LeaveTypePolicy],
        *,
        confirm: bool = False,
        processed_by: UUID | None = None,
    ) -> RolloverResult:
        """Roll balances from ``from_year`` into ``from_year + 1``.

        Raises:
            ValidationError: If not confirmed or the year is out of range
        """
        if not confirm:
            raise ValidationError("Rollover creates balances for every employee and must be confirmed", field="confirm")
        if not MIN_YEAR <= from_year <= MAX_YEAR:
            raise ValidationError(f"from_year must be between {MIN_YEAR} and {MAX_YEAR}", field="from_year")

        to_year = from_year + 1
        result = RolloverResult(from_year=from_year, to_year=to_year)
        types = [lt for lt in leave_types if lt.is_active]

        logger.info("Processing rollover from %s to %s", from_year, to_year)

        for employee_id in employee_ids:
            for leave_type in types:
                self._roll_one(employee_id, leave_type, from_year, to_year, result, processed_by)

        logger.info(
            "Rollover complete: %d balances created, %d carryovers applied, %d skipped",
            result.balances_created,
            result.carryovers_applied,
            result.skipped,
        )
        return result

    def _roll_one(
        self,
        employee_id: UUID,
        leave_type: LeaveTypePolicy,
        from_year: int,
        to_year: int,
        result: RolloverResult,
        processed_by: UUID | None,
    ) -> None:
        source = self.store.find_balance(employee_id, leave_type.id, from_year)
        if source is None:
            result.skipped += 1
            return

        outcome = self.store.insert_balance(
            BalanceDraft(
                employee_id=employee_id,
                leave_type_id=leave_type.id,
                year=to_year,
                total_days=leave_type.default_allocation,
            )
        )
        if not outcome.created:
            logger.debug(
                "Skipping employee %s leave type %s: %s balance already exists",
                employee_id,
                leave_type.id,
                to_year,
            )
            result.skipped += 1
            return
        result.balances_created += 1

        carry = carryover_days(source, leave_type)
        if carry <= 0:
            return

        self.ledger.apply_adjustment(
            outcome.balance.id,
            carry,
            AdjustmentType.CARRYOVER,
            reason=(
                f"Carryover from {from_year} ({source.remaining_days} days remaining, "
                f"{carry} days carried over)"
            ),
            adjusted_by=processed_by,
        )
        result.carryovers_applied += 1
        result.carried_days += carry
