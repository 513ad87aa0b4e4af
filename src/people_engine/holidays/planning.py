"""Holiday record planning for year loads, additions, copies, edits and leave sync.

The planner turns calculator output into persistable drafts. Writing them
is the caller's job; nothing here touches storage.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass, replace
from datetime import date
from decimal import Decimal
from uuid import UUID

from people_engine.dates import add_years
from people_engine.errors import ValidationError
from people_engine.holidays.compensation import (
    HolidayCompensationCalculator,
    HolidayInput,
    ObservedHoliday,
)
from people_engine.leave.types import LeaveRequestDraft, LeaveRequestStatus

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class HolidayDraft:
    """A holiday row ready to insert."""

    name: str
    date: date
    observed_date: date
    year: int
    is_compensated: bool
    compensation_reason: str | None

    @classmethod
    def from_observed(cls, observed: ObservedHoliday) -> HolidayDraft:
        return cls(
            name=observed.name,
            date=observed.date,
            observed_date=observed.observed_date,
            year=observed.year,
            is_compensated=observed.is_compensated,
            compensation_reason=observed.reason,
        )

    @property
    def key(self) -> tuple[str, date]:
        """Uniqueness key within a year."""
        return (self.name, self.date)


@dataclass(frozen=True)
class HolidayRecord(HolidayDraft):
    """A persisted holiday."""

    id: UUID | None = None


class HolidayPlanner:
    """Plans holiday rows around a single compensation algorithm.

    Entry points:
    - plan_year: load a whole set of holidays at once
    - plan_additions: add holidays next to already recorded ones
    - plan_copy: copy holidays into another year
    - plan_edit: recompute one edited holiday against its siblings
    - plan_leave_sync: approved leave entries for every employee
    """

    def __init__(self, calculator: HolidayCompensationCalculator):
        self.calculator = calculator

    def plan_year(self, holidays: Iterable[HolidayInput]) -> list[HolidayDraft]:
        """Plan a bulk load; repeated (name, date) pairs are dropped."""
        unique = _dedupe(holidays)
        return [HolidayDraft.from_observed(o) for o in self.calculator.compute(unique)]

    def plan_additions(
        self,
        new_holidays: Iterable[HolidayInput],
        existing: Iterable[HolidayRecord],
    ) -> list[HolidayDraft]:
        """Plan holidays added to a year that already has recorded ones.

        Existing observed dates are collision hazards; existing holidays are
        not re-shifted. New entries repeating an existing (name, date) are skipped.
        """
        existing = list(existing)
        existing_keys = {r.key for r in existing}
        candidates = _dedupe(new_holidays)
        fresh = [h for h in candidates if (h.name, h.date) not in existing_keys]
        skipped = len(candidates) - len(fresh)
        if skipped:
            logger.info("Skipping %d holiday(s) already recorded", skipped)

        observed = self.calculator.compute(fresh, existing_observed_dates=(r.observed_date for r in existing))
        return [HolidayDraft.from_observed(o) for o in observed]

    def plan_copy(
        self,
        source: Iterable[HolidayRecord],
        target_year: int,
        existing_target: Iterable[HolidayRecord] = (),
        replace_existing: bool = False,
    ) -> list[HolidayDraft]:
        """Copy holidays into ``target_year`` and recompute compensation.

        Args:
            source: Holidays to copy (each shifted by whole years)
            target_year: Year to copy into
            existing_target: Holidays already recorded for the target year
            replace_existing: When True the caller deletes the target year's
                holidays first, so their observed dates are not hazards
        """
        shifted = [
            HolidayInput(name=r.name, date=add_years(r.date, target_year - r.date.year))
            for r in source
        ]
        if replace_existing:
            return self.plan_year(shifted)
        return self.plan_additions(shifted, existing_target)

    def plan_edit(
        self,
        record: HolidayRecord,
        name: str,
        new_date: date,
        siblings: Iterable[HolidayRecord],
    ) -> HolidayRecord:
        """Recompute an edited holiday against the other holidays of its year.

        Raises:
            ValidationError: If another holiday already has the edited name and date
        """
        others = [s for s in siblings if s.id != record.id]
        if any(s.key == (name, new_date) for s in others):
            raise ValidationError(f"Holiday '{name}' on {new_date} already exists", field="date")
        (observed,) = self.calculator.compute(
            [HolidayInput(name=name, date=new_date)],
            existing_observed_dates=(s.observed_date for s in others),
        )
        return replace(
            record,
            name=observed.name,
            date=observed.date,
            observed_date=observed.observed_date,
            year=observed.year,
            is_compensated=observed.is_compensated,
            compensation_reason=observed.reason,
        )

    @staticmethod
    def plan_leave_sync(
        holidays: Iterable[HolidayDraft],
        employee_ids: Iterable[UUID],
        leave_type_id: UUID,
        existing_entries: Iterable[tuple[UUID, date]] = (),
    ) -> list[LeaveRequestDraft]:
        """Plan one approved one-day leave entry per employee and observed date.

        Args:
            holidays: Holidays of the year being synced
            employee_ids: Active employees
            leave_type_id: The public-holiday leave type
            existing_entries: (employee_id, start_date) pairs already present

        Returns:
            Drafts for the missing entries only
        """
        seen = set(existing_entries)
        employees = list(employee_ids)
        drafts: list[LeaveRequestDraft] = []
        for holiday in holidays:
            for employee_id in employees:
                key = (employee_id, holiday.observed_date)
                if key in seen:
                    continue
                seen.add(key)
                drafts.append(
                    LeaveRequestDraft(
                        employee_id=employee_id,
                        leave_type_id=leave_type_id,
                        start_date=holiday.observed_date,
                        end_date=holiday.observed_date,
                        days_count=Decimal("1"),
                        is_half_day=False,
                        status=LeaveRequestStatus.APPROVED,
                        reason=holiday.name,
                    )
                )
        logger.info("Planned %d holiday leave entries", len(drafts))
        return drafts


def _dedupe(holidays: Iterable[HolidayInput]) -> list[HolidayInput]:
    seen: set[tuple[str, date]] = set()
    unique: list[HolidayInput] = []
    for holiday in holidays:
        key = (holiday.name, holiday.date)
        if key not in seen:
            seen.add(key)
            unique.append(holiday)
    return unique
