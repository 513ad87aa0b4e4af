"""Tests for the leave request state machine and workflow."""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from uuid import uuid4

import pytest

from people_engine.errors import (
    BalanceNotFoundError,
    InvalidTransitionError,
    LeaveRequestNotFoundError,
    ValidationError,
)
from people_engine.leave import (
    LeaveRequestStateMachine,
    LeaveRequestStatus,
    LeaveRequestWorkflow,
)


@pytest.fixture
def workflow(store, ledger) -> LeaveRequestWorkflow:
    return LeaveRequestWorkflow(store, ledger)


@pytest.fixture
def balance(ledger, annual_leave, employee_id):
    return ledger.assign(employee_id, annual_leave.id, 2025, Decimal("21")).balance


class TestLeaveRequestStateMachine:
    """Test state machine transitions."""

    def test_valid_transitions(self):
        """Test that valid transitions are allowed."""
        assert LeaveRequestStateMachine.can_transition("pending", "approved") is True
        assert LeaveRequestStateMachine.can_transition("pending", "rejected") is True
        assert LeaveRequestStateMachine.can_transition("pending", "cancelled") is True
        assert LeaveRequestStateMachine.can_transition("approved", "cancelled") is True

    def test_invalid_transitions(self):
        """Test that invalid transitions are blocked."""
        assert LeaveRequestStateMachine.can_transition("approved", "rejected") is False
        assert LeaveRequestStateMachine.can_transition("approved", "pending") is False

        # Rejected and cancelled are terminal
        assert LeaveRequestStateMachine.can_transition("rejected", "approved") is False
        assert LeaveRequestStateMachine.can_transition("cancelled", "pending") is False

    def test_validate_transition_raises(self):
        with pytest.raises(InvalidTransitionError) as exc_info:
            LeaveRequestStateMachine.validate_transition("rejected", "approved")

        assert exc_info.value.from_status == "rejected"
        assert exc_info.value.to_status == "approved"

    def test_accepts_enum_members(self):
        assert LeaveRequestStateMachine.can_transition(
            LeaveRequestStatus.PENDING, LeaveRequestStatus.APPROVED
        ) is True


class TestLeaveRequestWorkflow:
    """Balance side effects of each transition."""

    def test_submit_reserves_pending(self, workflow, store, balance, annual_leave, employee_id):
        request, warnings = workflow.submit(employee_id, annual_leave.id, date(2025, 4, 6), date(2025, 4, 8))

        assert request.status == LeaveRequestStatus.PENDING
        assert request.days_count == Decimal("3")
        assert warnings == []
        updated = store.get_balance(balance.id)
        assert updated.pending_days == Decimal("3")
        assert updated.remaining_days == Decimal("18")

    def test_approve_moves_pending_to_used(self, workflow, store, balance, annual_leave, employee_id):
        request, _ = workflow.submit(employee_id, annual_leave.id, date(2025, 4, 6), date(2025, 4, 8))
        reviewer = uuid4()

        approved = workflow.approve(request.id, reviewer)

        assert approved.status == LeaveRequestStatus.APPROVED
        assert approved.reviewed_by == reviewer
        assert approved.reviewed_at is not None
        updated = store.get_balance(balance.id)
        assert updated.pending_days == Decimal("0")
        assert updated.used_days == Decimal("3")

    def test_reject_releases_pending(self, workflow, store, balance, annual_leave, employee_id):
        request, _ = workflow.submit(employee_id, annual_leave.id, date(2025, 4, 6), date(2025, 4, 6))

        rejected = workflow.reject(request.id, uuid4(), "Team coverage")

        assert rejected.rejection_reason == "Team coverage"
        assert store.get_leave_request(request.id).status == LeaveRequestStatus.REJECTED
        assert store.get_balance(balance.id).remaining_days == Decimal("21")

    def test_reject_requires_reason(self, workflow, balance, annual_leave, employee_id):
        request, _ = workflow.submit(employee_id, annual_leave.id, date(2025, 4, 6), date(2025, 4, 6))

        with pytest.raises(ValidationError):
            workflow.reject(request.id, uuid4(), "  ")

    def test_cancel_pending(self, workflow, store, balance, annual_leave, employee_id):
        request, _ = workflow.submit(employee_id, annual_leave.id, date(2025, 4, 6), date(2025, 4, 7))

        workflow.cancel(request.id)

        updated = store.get_balance(balance.id)
        assert updated.pending_days == Decimal("0")
        assert updated.used_days == Decimal("0")

    def test_cancel_approved_releases_used(self, workflow, store, balance, annual_leave, employee_id):
        request, _ = workflow.submit(employee_id, annual_leave.id, date(2025, 4, 6), date(2025, 4, 7))
        workflow.approve(request.id, uuid4())

        cancelled = workflow.cancel(request.id)

        assert cancelled.status == LeaveRequestStatus.CANCELLED
        assert store.get_balance(balance.id).used_days == Decimal("0")

    def test_half_day(self, workflow, store, balance, annual_leave, employee_id):
        workflow.submit(employee_id, annual_leave.id, date(2025, 4, 6), date(2025, 4, 6), is_half_day=True)

        assert store.get_balance(balance.id).pending_days == Decimal("0.5")

    def test_half_day_must_be_single_date(self, workflow, balance, annual_leave, employee_id):
        with pytest.raises(ValidationError):
            workflow.submit(
                employee_id, annual_leave.id, date(2025, 4, 6), date(2025, 4, 7), is_half_day=True
            )

    def test_overdraw_warns(self, workflow, balance, annual_leave, employee_id):
        _, warnings = workflow.submit(employee_id, annual_leave.id, date(2025, 4, 1), date(2025, 4, 30))

        assert len(warnings) == 1
        assert warnings[0].remaining_days == Decimal("-9")

    def test_no_balance(self, workflow, store, annual_leave, employee_id):
        with pytest.raises(BalanceNotFoundError):
            workflow.submit(employee_id, annual_leave.id, date(2025, 4, 6), date(2025, 4, 6))

        assert store.requests == {}

    def test_approve_twice_rejected(self, workflow, store, balance, annual_leave, employee_id):
        request, _ = workflow.submit(employee_id, annual_leave.id, date(2025, 4, 6), date(2025, 4, 6))
        workflow.approve(request.id, uuid4())

        with pytest.raises(InvalidTransitionError):
            workflow.approve(request.id, uuid4())

        assert store.get_balance(balance.id).used_days == Decimal("1")

    def test_unknown_request(self, workflow):
        missing = uuid4()

        with pytest.raises(LeaveRequestNotFoundError) as exc_info:
            workflow.approve(missing, uuid4())

        assert exc_info.value.request_id == missing
        with pytest.raises(LeaveRequestNotFoundError):
            workflow.reject(uuid4(), uuid4(), "Busy period")
        with pytest.raises(LeaveRequestNotFoundError):
            workflow.cancel(uuid4())
