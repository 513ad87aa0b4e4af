"""Persistence contract for the leave ledger and an in-memory implementation."""

from __future__ import annotations

from copy import copy
from typing import Protocol, runtime_checkable
from uuid import UUID

from people_engine.leave.types import (
    AdjustmentRecord,
    BalanceDraft,
    InsertOutcome,
    LeaveBalanceRecord,
    LeaveRequestRecord,
    LeaveTypePolicy,
)


@runtime_checkable
class BalanceStore(Protocol):
    """Storage operations the ledger relies on.

    Implementations must enforce uniqueness of (employee_id, leave_type_id,
    year) and report a conflicting insert as ``InsertOutcome(created=False)``
    instead of raising.
    """

    def get_balance(self, balance_id: UUID) -> LeaveBalanceRecord | None: ...

    def find_balance(self, employee_id: UUID, leave_type_id: UUID, year: int) -> LeaveBalanceRecord | None: ...

    def list_balances(self, year: int, employee_id: UUID | None = None) -> list[LeaveBalanceRecord]: ...

    def insert_balance(self, draft: BalanceDraft) -> InsertOutcome: ...

    def update_balance(self, balance: LeaveBalanceRecord) -> None: ...

    def append_adjustment(self, adjustment: AdjustmentRecord) -> None: ...

    def list_adjustments(
        self, employee_id: UUID | None = None, balance_id: UUID | None = None
    ) -> list[AdjustmentRecord]: ...

    def insert_leave_request(self, request: LeaveRequestRecord) -> None: ...

    def get_leave_request(self, request_id: UUID) -> LeaveRequestRecord | None: ...

    def update_leave_request(self, request: LeaveRequestRecord) -> None: ...

    def list_leave_types(self, active_only: bool = True) -> list[LeaveTypePolicy]: ...


class InMemoryBalanceStore:
    """Dict-backed BalanceStore for tests and dry runs.

    Records handed out are copies; changes only land through
    ``update_balance`` / ``update_leave_request``.
    """

    def __init__(self, leave_types: list[LeaveTypePolicy] | None = None):
        self.leave_types: dict[UUID, LeaveTypePolicy] = {lt.id: lt for lt in leave_types or []}
        self.balances: dict[UUID, LeaveBalanceRecord] = {}
        self.adjustments: list[AdjustmentRecord] = []
        self.requests: dict[UUID, LeaveRequestRecord] = {}
        self._by_key: dict[tuple[UUID, UUID, int], UUID] = {}

    def get_balance(self, balance_id: UUID) -> LeaveBalanceRecord | None:
        balance = self.balances.get(balance_id)
        return copy(balance) if balance else None

    def find_balance(self, employee_id: UUID, leave_type_id: UUID, year: int) -> LeaveBalanceRecord | None:
        balance_id = self._by_key.get((employee_id, leave_type_id, year))
        return self.get_balance(balance_id) if balance_id else None

    def list_balances(self, year: int, employee_id: UUID | None = None) -> list[LeaveBalanceRecord]:
        return [
            copy(b)
            for b in self.balances.values()
            if b.year == year and (employee_id is None or b.employee_id == employee_id)
        ]

    def insert_balance(self, draft: BalanceDraft) -> InsertOutcome:
        existing_id = self._by_key.get(draft.key)
        if existing_id is not None:
            return InsertOutcome(balance=copy(self.balances[existing_id]), created=False)

        balance = LeaveBalanceRecord(
            id=draft.id,
            employee_id=draft.employee_id,
            leave_type_id=draft.leave_type_id,
            year=draft.year,
            total_days=draft.total_days,
            used_days=draft.used_days,
            pending_days=draft.pending_days,
        )
        self.balances[balance.id] = balance
        self._by_key[draft.key] = balance.id
        return InsertOutcome(balance=copy(balance), created=True)

    def update_balance(self, balance: LeaveBalanceRecord) -> None:
        if balance.id not in self.balances:
            raise KeyError(f"Balance {balance.id} does not exist")
        self.balances[balance.id] = copy(balance)

    def append_adjustment(self, adjustment: AdjustmentRecord) -> None:
        self.adjustments.append(adjustment)

    def list_adjustments(
        self, employee_id: UUID | None = None, balance_id: UUID | None = None
    ) -> list[AdjustmentRecord]:
        rows = [
            a
            for a in self.adjustments
            if (employee_id is None or a.employee_id == employee_id)
            and (balance_id is None or a.leave_balance_id == balance_id)
        ]
        # Newest first; insertion order breaks timestamp ties
        indexed = sorted(enumerate(rows), key=lambda p: (p[1].created_at, p[0]), reverse=True)
        return [a for _, a in indexed]

    def insert_leave_request(self, request: LeaveRequestRecord) -> None:
        self.requests[request.id] = copy(request)

    def get_leave_request(self, request_id: UUID) -> LeaveRequestRecord | None:
        request = self.requests.get(request_id)
        return copy(request) if request else None

    def update_leave_request(self, request: LeaveRequestRecord) -> None:
        if request.id not in self.requests:
            raise KeyError(f"Leave request {request.id} does not exist")
        self.requests[request.id] = copy(request)

    def list_leave_types(self, active_only: bool = True) -> list[LeaveTypePolicy]:
        return [lt for lt in self.leave_types.values() if lt.is_active or not active_only]
