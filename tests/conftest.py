"""Pytest fixtures for people engine tests."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from decimal import Decimal
from typing import Generator
from uuid import uuid4

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import Session

from people_engine.holidays import HolidayCompensationCalculator, HolidayPlanner
from people_engine.leave import InMemoryBalanceStore, LeaveBalanceLedger, LeaveTypePolicy
from people_engine.models import Base
from people_engine.policy import WeekendConfig

# In-memory SQLite; ON CONFLICT DO NOTHING is supported since 3.24
TEST_DATABASE_URL = "sqlite://"


class TickingClock:
    """Deterministic clock that advances one second per call."""

    def __init__(self, start: datetime | None = None):
        self.current = start or datetime(2025, 1, 1, 9, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        self.current += timedelta(seconds=1)
        return self.current


@pytest.fixture
def weekend() -> WeekendConfig:
    """Friday / Saturday weekend."""
    return WeekendConfig.friday_saturday()


@pytest.fixture
def calculator(weekend) -> HolidayCompensationCalculator:
    return HolidayCompensationCalculator(weekend)


@pytest.fixture
def planner(calculator) -> HolidayPlanner:
    return HolidayPlanner(calculator)


@pytest.fixture
def annual_leave() -> LeaveTypePolicy:
    """21 days a year, up to 5 carried over."""
    return LeaveTypePolicy(
        id=uuid4(),
        name="Annual Leave",
        max_days_per_year=Decimal("21"),
        allow_carryover=True,
        max_carryover_days=Decimal("5"),
        color="#10b981",
    )


@pytest.fixture
def sick_leave() -> LeaveTypePolicy:
    """30 days a year, no carryover."""
    return LeaveTypePolicy(
        id=uuid4(),
        name="Sick Leave",
        max_days_per_year=Decimal("30"),
        allow_carryover=False,
    )


@pytest.fixture
def retired_leave() -> LeaveTypePolicy:
    """An inactive leave type."""
    return LeaveTypePolicy(
        id=uuid4(),
        name="Study Leave",
        max_days_per_year=Decimal("10"),
        is_active=False,
    )


@pytest.fixture
def leave_types(annual_leave, sick_leave, retired_leave) -> list[LeaveTypePolicy]:
    return [annual_leave, sick_leave, retired_leave]


@pytest.fixture
def store(leave_types) -> InMemoryBalanceStore:
    return InMemoryBalanceStore(leave_types)


@pytest.fixture
def clock() -> TickingClock:
    return TickingClock()


@pytest.fixture
def ledger(store, clock) -> LeaveBalanceLedger:
    return LeaveBalanceLedger(store, now=clock)


@pytest.fixture
def employee_id():
    return uuid4()


@pytest.fixture
def engine():
    """Create test database engine with all tables."""
    engine = create_engine(TEST_DATABASE_URL, echo=False)
    Base.metadata.create_all(engine)

    yield engine

    engine.dispose()


@pytest.fixture
def session(engine) -> Generator[Session, None, None]:
    """Create a database session for each test."""
    with Session(engine, expire_on_commit=False, autoflush=False) as session:
        yield session
        session.rollback()
