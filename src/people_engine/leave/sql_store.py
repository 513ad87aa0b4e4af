"""SQLAlchemy-backed BalanceStore.

Balance inserts rely on the (employee_id, leave_type_id, year) unique
constraint: a conflicting insert is skipped and the existing row returned,
so concurrent initialize / rollover runs never create duplicates.
"""

from __future__ import annotations

import logging
from decimal import Decimal
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from people_engine.leave.types import (
    AdjustmentRecord,
    AdjustmentType,
    BalanceDraft,
    InsertOutcome,
    LeaveBalanceRecord,
    LeaveRequestRecord,
    LeaveRequestStatus,
    LeaveTypePolicy,
)
from people_engine.models import LeaveBalance, LeaveBalanceAdjustment, LeaveRequest, LeaveType

logger = logging.getLogger(__name__)

BALANCE_KEY = ("employee_id", "leave_type_id", "year")


class SqlBalanceStore:
    """BalanceStore over a synchronous SQLAlchemy session.

    The caller owns the transaction: nothing here commits.
    """

    def __init__(self, session: Session):
        self.session = session

    # ------------------------------------------------------------------
    # Balances
    # ------------------------------------------------------------------

    def get_balance(self, balance_id: UUID) -> LeaveBalanceRecord | None:
        row = self.session.get(LeaveBalance, balance_id)
        return _balance_record(row) if row else None

    def find_balance(self, employee_id: UUID, leave_type_id: UUID, year: int) -> LeaveBalanceRecord | None:
        row = self._find_row(employee_id, leave_type_id, year)
        return _balance_record(row) if row else None

    def list_balances(self, year: int, employee_id: UUID | None = None) -> list[LeaveBalanceRecord]:
        stmt = select(LeaveBalance).where(LeaveBalance.year == year)
        if employee_id is not None:
            stmt = stmt.where(LeaveBalance.employee_id == employee_id)
        return [_balance_record(row) for row in self.session.scalars(stmt)]

    def insert_balance(self, draft: BalanceDraft) -> InsertOutcome:
        self.session.flush()
        values = {
            "id": draft.id,
            "employee_id": draft.employee_id,
            "leave_type_id": draft.leave_type_id,
            "year": draft.year,
            "total_days": draft.total_days,
            "used_days": draft.used_days,
            "pending_days": draft.pending_days,
        }

        created = self._insert_ignoring_conflict(values)
        row = self._find_row(draft.employee_id, draft.leave_type_id, draft.year)
        if row is None:
            raise RuntimeError("Balance insert failed unexpectedly - no row created or found")

        if not created:
            logger.debug(
                "Balance for employee %s leave type %s year %s already exists",
                draft.employee_id,
                draft.leave_type_id,
                draft.year,
            )
        return InsertOutcome(balance=_balance_record(row), created=created)

    def update_balance(self, balance: LeaveBalanceRecord) -> None:
        row = self.session.get(LeaveBalance, balance.id)
        if row is None:
            raise KeyError(f"Balance {balance.id} does not exist")
        row.total_days = balance.total_days
        row.used_days = balance.used_days
        row.pending_days = balance.pending_days
        self.session.flush()

    # ------------------------------------------------------------------
    # Adjustments
    # ------------------------------------------------------------------

    def append_adjustment(self, adjustment: AdjustmentRecord) -> None:
        self.session.add(
            LeaveBalanceAdjustment(
                id=adjustment.id,
                leave_balance_id=adjustment.leave_balance_id,
                employee_id=adjustment.employee_id,
                leave_type_id=adjustment.leave_type_id,
                adjustment_days=adjustment.adjustment_days,
                adjustment_type=adjustment.adjustment_type.value,
                reason=adjustment.reason,
                adjusted_by=adjustment.adjusted_by,
                created_at=adjustment.created_at,
            )
        )
        self.session.flush()

    def list_adjustments(
        self, employee_id: UUID | None = None, balance_id: UUID | None = None
    ) -> list[AdjustmentRecord]:
        stmt = select(LeaveBalanceAdjustment).order_by(LeaveBalanceAdjustment.created_at.desc())
        if employee_id is not None:
            stmt = stmt.where(LeaveBalanceAdjustment.employee_id == employee_id)
        if balance_id is not None:
            stmt = stmt.where(LeaveBalanceAdjustment.leave_balance_id == balance_id)
        return [
            AdjustmentRecord(
                id=row.id,
                leave_balance_id=row.leave_balance_id,
                employee_id=row.employee_id,
                leave_type_id=row.leave_type_id,
                adjustment_days=Decimal(row.adjustment_days),
                adjustment_type=AdjustmentType(row.adjustment_type),
                reason=row.reason,
                adjusted_by=row.adjusted_by,
                created_at=row.created_at,
            )
            for row in self.session.scalars(stmt)
        ]

    # ------------------------------------------------------------------
    # Leave requests
    # ------------------------------------------------------------------

    def insert_leave_request(self, request: LeaveRequestRecord) -> None:
        row = LeaveRequest(id=request.id)
        _copy_request(request, row)
        self.session.add(row)
        self.session.flush()

    def get_leave_request(self, request_id: UUID) -> LeaveRequestRecord | None:
        row = self.session.get(LeaveRequest, request_id)
        if row is None:
            return None
        return LeaveRequestRecord(
            id=row.id,
            employee_id=row.employee_id,
            leave_type_id=row.leave_type_id,
            start_date=row.start_date,
            end_date=row.end_date,
            days_count=Decimal(row.days_count),
            status=LeaveRequestStatus(row.status),
            is_half_day=row.is_half_day,
            reason=row.reason,
            reviewed_by=row.reviewed_by,
            reviewed_at=row.reviewed_at,
            rejection_reason=row.rejection_reason,
        )

    def update_leave_request(self, request: LeaveRequestRecord) -> None:
        row = self.session.get(LeaveRequest, request.id)
        if row is None:
            raise KeyError(f"Leave request {request.id} does not exist")
        _copy_request(request, row)
        self.session.flush()

    # ------------------------------------------------------------------
    # Leave types
    # ------------------------------------------------------------------

    def list_leave_types(self, active_only: bool = True) -> list[LeaveTypePolicy]:
        stmt = select(LeaveType).order_by(LeaveType.name)
        if active_only:
            stmt = stmt.where(LeaveType.is_active.is_(True))
        return [
            LeaveTypePolicy(
                id=row.id,
                name=row.name,
                max_days_per_year=row.max_days_per_year,
                is_paid=row.is_paid,
                allow_carryover=row.allow_carryover,
                max_carryover_days=row.max_carryover_days,
                requires_approval=row.requires_approval,
                count_weekends=row.count_weekends,
                color=row.color,
                is_active=row.is_active,
            )
            for row in self.session.scalars(stmt)
        ]

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _find_row(self, employee_id: UUID, leave_type_id: UUID, year: int) -> LeaveBalance | None:
        return self.session.scalars(
            select(LeaveBalance).where(
                LeaveBalance.employee_id == employee_id,
                LeaveBalance.leave_type_id == leave_type_id,
                LeaveBalance.year == year,
            )
        ).one_or_none()

    def _insert_ignoring_conflict(self, values: dict) -> bool:
        """Insert a balance row; return False if the key already existed."""
        dialect = self.session.get_bind().dialect.name
        table = LeaveBalance.__table__

        if dialect == "postgresql":
            from sqlalchemy.dialects.postgresql import insert
        elif dialect == "sqlite":
            from sqlalchemy.dialects.sqlite import insert
        else:
            return self._insert_with_savepoint(values)

        stmt = insert(table).values(**values).on_conflict_do_nothing(index_elements=list(BALANCE_KEY))
        result = self.session.execute(stmt)
        return result.rowcount == 1

    def _insert_with_savepoint(self, values: dict) -> bool:
        try:
            with self.session.begin_nested():
                self.session.execute(LeaveBalance.__table__.insert().values(**values))
        except IntegrityError:
            return False
        return True


def _balance_record(row: LeaveBalance) -> LeaveBalanceRecord:
    return LeaveBalanceRecord(
        id=row.id,
        employee_id=row.employee_id,
        leave_type_id=row.leave_type_id,
        year=row.year,
        total_days=Decimal(row.total_days),
        used_days=Decimal(row.used_days),
        pending_days=Decimal(row.pending_days),
    )


def _copy_request(request: LeaveRequestRecord, row: LeaveRequest) -> None:
    row.employee_id = request.employee_id
    row.leave_type_id = request.leave_type_id
    row.start_date = request.start_date
    row.end_date = request.end_date
    row.days_count = request.days_count
    row.is_half_day = request.is_half_day
    row.status = request.status.value
    row.reason = request.reason
    row.reviewed_by = request.reviewed_by
    row.reviewed_at = request.reviewed_at
    row.rejection_reason = request.rejection_reason
