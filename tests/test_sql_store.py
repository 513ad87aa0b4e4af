"""Tests for the SQLAlchemy stores over SQLite."""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from uuid import uuid4

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import Session

from people_engine.errors import DuplicateBalanceError
from people_engine.holidays import HolidayInput
from people_engine.holidays.sql_store import SqlHolidayStore
from people_engine.leave import (
    AdjustmentType,
    LeaveBalanceLedger,
    LeaveRequestStatus,
    LeaveRequestWorkflow,
    YearEndRollover,
)
from people_engine.leave.sql_store import SqlBalanceStore
from people_engine.leave.types import BalanceDraft
from people_engine.models import Base, LeaveBalance, LeaveBalanceAdjustment, LeaveType


@pytest.fixture
def sql_store(session, leave_types) -> SqlBalanceStore:
    """Store with a leave_types row for every policy fixture."""
    for policy in leave_types:
        session.add(
            LeaveType(
                id=policy.id,
                name=policy.name,
                max_days_per_year=policy.max_days_per_year,
                allow_carryover=policy.allow_carryover,
                max_carryover_days=policy.max_carryover_days,
                color=policy.color,
                is_active=policy.is_active,
            )
        )
    session.flush()
    return SqlBalanceStore(session)


@pytest.fixture
def sql_ledger(sql_store, clock) -> LeaveBalanceLedger:
    return LeaveBalanceLedger(sql_store, now=clock)


class TestBalanceInsert:
    """Inserts keyed on (employee, leave type, year)."""

    def test_insert_creates_row(self, sql_store, session, annual_leave, employee_id):
        outcome = sql_store.insert_balance(
            BalanceDraft(employee_id=employee_id, leave_type_id=annual_leave.id, year=2025, total_days=Decimal("21"))
        )

        assert outcome.created is True
        assert outcome.balance.total_days == Decimal("21")
        assert session.get(LeaveBalance, outcome.balance.id) is not None

    def test_duplicate_key_returns_existing(self, sql_store, annual_leave, employee_id):
        first = sql_store.insert_balance(
            BalanceDraft(employee_id=employee_id, leave_type_id=annual_leave.id, year=2025, total_days=Decimal("21"))
        )

        second = sql_store.insert_balance(
            BalanceDraft(employee_id=employee_id, leave_type_id=annual_leave.id, year=2025, total_days=Decimal("5"))
        )

        assert second.created is False
        assert second.balance.id == first.balance.id
        assert second.balance.total_days == Decimal("21")

    def test_assign_duplicate_raises(self, sql_ledger, annual_leave, employee_id):
        sql_ledger.assign(employee_id, annual_leave.id, 2025, Decimal("21"))

        with pytest.raises(DuplicateBalanceError):
            sql_ledger.assign(employee_id, annual_leave.id, 2025, Decimal("30"))


class TestLedgerOverSql:
    """The ledger against a real database."""

    def test_initialize_is_idempotent(self, sql_ledger, sql_store, session, employee_id):
        leave_types = sql_store.list_leave_types()
        other = uuid4()

        first = sql_ledger.initialize([employee_id, other], 2025, leave_types)
        second = sql_ledger.initialize([employee_id, other], 2025, leave_types)

        assert first.created == 4
        assert second.created == 0
        assert second.skipped == 4
        assert session.query(LeaveBalance).count() == 4

    def test_adjustments_newest_first(self, sql_ledger, session, annual_leave, employee_id):
        balance = sql_ledger.assign(employee_id, annual_leave.id, 2025, Decimal("21")).balance

        sql_ledger.apply_adjustment(balance.id, Decimal("2"), reason="Overtime")
        sql_ledger.apply_adjustment(balance.id, Decimal("-1"), AdjustmentType.CORRECTION)

        history = sql_ledger.history(balance_id=balance.id)
        assert [h.adjustment_days for h in history] == [Decimal("-1"), Decimal("2")]
        assert history[0].adjustment_type == AdjustmentType.CORRECTION
        assert sql_ledger.store.get_balance(balance.id).total_days == Decimal("22")
        assert session.query(LeaveBalanceAdjustment).count() == 2

    def test_history_filtered_by_employee(self, sql_ledger, annual_leave, employee_id):
        mine = sql_ledger.assign(employee_id, annual_leave.id, 2025, Decimal("21")).balance
        theirs = sql_ledger.assign(uuid4(), annual_leave.id, 2025, Decimal("21")).balance
        sql_ledger.apply_adjustment(mine.id, Decimal("1"))
        sql_ledger.apply_adjustment(theirs.id, Decimal("3"))

        (entry,) = sql_ledger.history(employee_id=employee_id)

        assert entry.leave_balance_id == mine.id

    def test_rollover(self, sql_ledger, sql_store, annual_leave, employee_id):
        balance = sql_ledger.assign(employee_id, annual_leave.id, 2025, Decimal("21")).balance
        sql_ledger.move_days(balance, used=Decimal("10"))

        result = YearEndRollover(sql_store, sql_ledger).process(
            2025, [employee_id], sql_store.list_leave_types(), confirm=True
        )
        again = YearEndRollover(sql_store, sql_ledger).process(
            2025, [employee_id], sql_store.list_leave_types(), confirm=True
        )

        assert sql_store.find_balance(employee_id, annual_leave.id, 2026).total_days == Decimal("26")
        assert result.carried_days == Decimal("5")
        assert again.balances_created == 0


class TestLeaveRequestsOverSql:
    """Leave request rows."""

    def test_submit_and_approve(self, sql_ledger, sql_store, annual_leave, employee_id):
        balance = sql_ledger.assign(employee_id, annual_leave.id, 2025, Decimal("21")).balance
        workflow = LeaveRequestWorkflow(sql_store, sql_ledger)

        request, _ = workflow.submit(
            employee_id, annual_leave.id, date(2025, 5, 4), date(2025, 5, 5), reason="Family visit"
        )
        reviewer = uuid4()
        workflow.approve(request.id, reviewer)

        stored = sql_store.get_leave_request(request.id)
        assert stored.status == LeaveRequestStatus.APPROVED
        assert stored.reviewed_by == reviewer
        assert stored.reason == "Family visit"
        assert stored.days_count == Decimal("2")
        updated = sql_store.get_balance(balance.id)
        assert updated.used_days == Decimal("2")
        assert updated.pending_days == Decimal("0")

    def test_admin_leave(self, sql_ledger, sql_store, annual_leave, employee_id):
        sql_ledger.assign(employee_id, annual_leave.id, 2025, Decimal("21"))

        result = sql_ledger.record_admin_leave(
            employee_id, annual_leave.id, date(2025, 6, 1), date(2025, 6, 3)
        )

        stored = sql_store.get_leave_request(result.request.id)
        assert stored.status == LeaveRequestStatus.APPROVED
        assert result.balance.used_days == Decimal("3")

    def test_missing_request(self, sql_store):
        assert sql_store.get_leave_request(uuid4()) is None


class TestLeaveTypes:
    """Leave type listing."""

    def test_active_only_sorted_by_name(self, sql_store):
        names = [lt.name for lt in sql_store.list_leave_types()]
        assert names == ["Annual Leave", "Sick Leave"]

    def test_include_inactive(self, sql_store):
        names = [lt.name for lt in sql_store.list_leave_types(active_only=False)]
        assert names == ["Annual Leave", "Sick Leave", "Study Leave"]

    def test_policy_fields_mapped(self, sql_store, annual_leave):
        (annual,) = [lt for lt in sql_store.list_leave_types() if lt.id == annual_leave.id]

        assert annual.max_carryover_days == Decimal("5")
        assert annual.allow_carryover is True
        assert annual.color == "#10b981"


class TestHolidayStore:
    """Public holiday rows."""

    def test_insert_and_list(self, session, planner):
        store = SqlHolidayStore(session)
        drafts = planner.plan_year(
            [HolidayInput("National Day", date(2025, 1, 3)), HolidayInput("Founding Day", date(2025, 1, 6))]
        )

        created = store.insert_drafts(drafts)

        assert len(created) == 2
        assert all(record.id is not None for record in created)
        listed = store.list_year(2025)
        assert [h.name for h in listed] == ["National Day", "Founding Day"]
        assert listed[0].observed_date == date(2025, 1, 5)
        assert listed[0].is_compensated is True

    def test_reinserting_same_key_skipped(self, session, planner):
        store = SqlHolidayStore(session)
        drafts = planner.plan_year([HolidayInput("National Day", date(2025, 1, 3))])
        store.insert_drafts(drafts)

        again = store.insert_drafts(drafts)

        assert again == []
        assert len(store.list_year(2025)) == 1

    def test_addition_planned_against_stored_rows(self, session, planner):
        store = SqlHolidayStore(session)
        store.insert_drafts(planner.plan_year([HolidayInput("Founding Day", date(2025, 1, 6))]))

        drafts = planner.plan_additions([HolidayInput("Flag Day", date(2025, 1, 6))], store.list_year(2025))
        (flag_day,) = store.insert_drafts(drafts)

        assert flag_day.observed_date == date(2025, 1, 7)

    def test_update_and_delete(self, session, planner):
        store = SqlHolidayStore(session)
        (record,) = store.insert_drafts(planner.plan_year([HolidayInput("National Day", date(2025, 1, 3))]))
        edited = planner.plan_edit(record, "National Day", date(2025, 1, 6), siblings=[record])

        store.update(edited)

        (stored,) = store.list_year(2025)
        assert stored.observed_date == date(2025, 1, 6)
        assert stored.is_compensated is False
        assert store.delete_many([record.id]) == 1
        assert store.list_year(2025) == []

    def test_key_committed_by_another_session_skipped(self, tmp_path, planner):
        engine = create_engine(f"sqlite:///{tmp_path / 'holidays.db'}")
        Base.metadata.create_all(engine)
        drafts = planner.plan_year(
            [HolidayInput("National Day", date(2025, 1, 3)), HolidayInput("Founding Day", date(2025, 1, 6))]
        )

        with Session(engine, expire_on_commit=False) as session:
            store = SqlHolidayStore(session)
            assert store.list_year(2025) == []

            with Session(engine) as other:
                SqlHolidayStore(other).insert_drafts(drafts[:1])
                other.commit()

            created = store.insert_drafts(drafts)
            session.commit()

            assert [h.name for h in created] == ["Founding Day"]
            assert len(store.list_year(2025)) == 2
        engine.dispose()

    def test_duplicate_key_within_batch_inserted_once(self, session, planner):
        store = SqlHolidayStore(session)
        (draft,) = planner.plan_year([HolidayInput("National Day", date(2025, 1, 3))])

        created = store.insert_drafts([draft, draft])

        assert len(created) == 1
        assert len(store.list_year(2025)) == 1
