"""Leave balances, adjustments, requests and year-end rollover."""

from people_engine.leave.ledger import HALF_DAY, EmployeeBalances, LeaveBalanceLedger
from people_engine.leave.requests import LeaveRequestStateMachine, LeaveRequestWorkflow
from people_engine.leave.rollover import YearEndRollover, carryover_days
from people_engine.leave.store import BalanceStore, InMemoryBalanceStore
from people_engine.leave.types import (
    AddDays,
    AdjustmentOperation,
    AdjustmentRecord,
    AdjustmentResult,
    AdjustmentType,
    AdminLeaveResult,
    AssignResult,
    BalanceChange,
    BalanceSummary,
    InitializeResult,
    LeaveBalanceRecord,
    LeaveRequestDraft,
    LeaveRequestRecord,
    LeaveRequestStatus,
    LeaveTypePolicy,
    NegativeBalanceWarning,
    RolloverResult,
    SetTotal,
    SubtractDays,
    change_for,
)

__all__ = [
    "HALF_DAY",
    "EmployeeBalances",
    "LeaveBalanceLedger",
    "LeaveRequestStateMachine",
    "LeaveRequestWorkflow",
    "YearEndRollover",
    "carryover_days",
    "BalanceStore",
    "InMemoryBalanceStore",
    "AddDays",
    "AdjustmentOperation",
    "AdjustmentRecord",
    "AdjustmentResult",
    "AdjustmentType",
    "AdminLeaveResult",
    "AssignResult",
    "BalanceChange",
    "BalanceSummary",
    "InitializeResult",
    "LeaveBalanceRecord",
    "LeaveRequestDraft",
    "LeaveRequestRecord",
    "LeaveRequestStatus",
    "LeaveTypePolicy",
    "NegativeBalanceWarning",
    "RolloverResult",
    "SetTotal",
    "SubtractDays",
    "change_for",
]
