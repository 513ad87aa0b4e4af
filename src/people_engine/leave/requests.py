"""Leave request workflow and its effect on balances."""

from __future__ import annotations

import logging
from datetime import date
from decimal import Decimal
from uuid import UUID, uuid4

from people_engine.dates import days_between_inclusive
from people_engine.errors import (
    BalanceNotFoundError,
    LeaveRequestNotFoundError,
    ValidationError,
)
from people_engine.leave.ledger import HALF_DAY, LeaveBalanceLedger
from people_engine.leave.store import BalanceStore
from people_engine.leave.types import (
    LeaveBalanceRecord,
    LeaveRequestRecord,
    LeaveRequestStatus,
    NegativeBalanceWarning,
)
from people_engine.state_machine import StateMachine

logger = logging.getLogger(__name__)


class LeaveRequestStateMachine(StateMachine):
    """State machine for leave request status transitions.

    Allowed transitions:
    - pending → approved
    - pending → rejected
    - pending → cancelled
    - approved → cancelled
    """

    VALID_TRANSITIONS: dict[str, list[str]] = {
        LeaveRequestStatus.PENDING: [
            LeaveRequestStatus.APPROVED,
            LeaveRequestStatus.REJECTED,
            LeaveRequestStatus.CANCELLED,
        ],
        LeaveRequestStatus.APPROVED: [LeaveRequestStatus.CANCELLED],
        LeaveRequestStatus.REJECTED: [],  # Terminal state
        LeaveRequestStatus.CANCELLED: [],  # Terminal state
    }


class LeaveRequestWorkflow:
    """Moves leave request days between pending and used on the balance.

    - submit: reserve days as pending
    - approve: pending → used
    - reject: release pending
    - cancel: release pending or used
    """

    def __init__(self, store: BalanceStore, ledger: LeaveBalanceLedger | None = None):
        self.store = store
        self.ledger = ledger or LeaveBalanceLedger(store)

    def submit(
        self,
        employee_id: UUID,
        leave_type_id: UUID,
        start_date: date,
        end_date: date,
        is_half_day: bool = False,
        reason: str | None = None,
    ) -> tuple[LeaveRequestRecord, list[NegativeBalanceWarning]]:
        """Create a pending request and reserve its days."""
        days_count = days_between_inclusive(start_date, end_date)
        if is_half_day and start_date != end_date:
            raise ValidationError("A half day must start and end on the same date", field="is_half_day")
        days = HALF_DAY if is_half_day else Decimal(days_count)

        balance = self._balance_for(employee_id, leave_type_id, start_date.year)
        request = LeaveRequestRecord(
            id=uuid4(),
            employee_id=employee_id,
            leave_type_id=leave_type_id,
            start_date=start_date,
            end_date=end_date,
            days_count=days,
            status=LeaveRequestStatus.PENDING,
            is_half_day=is_half_day,
            reason=reason,
        )
        self.store.insert_leave_request(request)
        balance = self.ledger.move_days(balance, pending=days)
        return request, NegativeBalanceWarning.check(balance)

    def approve(self, request_id: UUID, reviewer_id: UUID) -> LeaveRequestRecord:
        request = self._load(request_id)
        LeaveRequestStateMachine.validate_transition(request.status, LeaveRequestStatus.APPROVED)
        balance = self._balance_for(request.employee_id, request.leave_type_id, request.start_date.year)

        self._transition(request, LeaveRequestStatus.APPROVED, reviewer_id)
        self.ledger.move_days(balance, used=request.days_count, pending=-request.days_count)
        return request

    def reject(self, request_id: UUID, reviewer_id: UUID, rejection_reason: str) -> LeaveRequestRecord:
        if not rejection_reason or not rejection_reason.strip():
            raise ValidationError("A rejection reason is required", field="rejection_reason")
        request = self._load(request_id)
        LeaveRequestStateMachine.validate_transition(request.status, LeaveRequestStatus.REJECTED)
        balance = self._balance_for(request.employee_id, request.leave_type_id, request.start_date.year)

        self._transition(request, LeaveRequestStatus.REJECTED, reviewer_id, rejection_reason=rejection_reason)
        self.ledger.move_days(balance, pending=-request.days_count)
        return request

    def cancel(self, request_id: UUID) -> LeaveRequestRecord:
        request = self._load(request_id)
        LeaveRequestStateMachine.validate_transition(request.status, LeaveRequestStatus.CANCELLED)
        balance = self._balance_for(request.employee_id, request.leave_type_id, request.start_date.year)
        was_approved = request.status == LeaveRequestStatus.APPROVED

        self._transition(request, LeaveRequestStatus.CANCELLED, None)
        if was_approved:
            self.ledger.move_days(balance, used=-request.days_count)
        else:
            self.ledger.move_days(balance, pending=-request.days_count)
        return request

    def _transition(
        self,
        request: LeaveRequestRecord,
        to_status: LeaveRequestStatus,
        reviewer_id: UUID | None,
        rejection_reason: str | None = None,
    ) -> None:
        request.status = to_status
        if reviewer_id is not None:
            request.reviewed_by = reviewer_id
            request.reviewed_at = self.ledger.now()
        if rejection_reason is not None:
            request.rejection_reason = rejection_reason
        self.store.update_leave_request(request)

        logger.info("Leave request %s is now %s", request.id, to_status.value)

    def _load(self, request_id: UUID) -> LeaveRequestRecord:
        request = self.store.get_leave_request(request_id)
        if request is None:
            raise LeaveRequestNotFoundError(request_id)
        return request

    def _balance_for(self, employee_id: UUID, leave_type_id: UUID, year: int) -> LeaveBalanceRecord:
        balance = self.store.find_balance(employee_id, leave_type_id, year)
        if balance is None:
            raise BalanceNotFoundError(employee_id=employee_id, leave_type_id=leave_type_id, year=year)
        return balance
