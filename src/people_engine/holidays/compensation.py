"""Public holiday observed-date computation.

A holiday that lands on a weekend is compensated with the next working
day after its block of back-to-back holidays. Every holiday claims its
observed date in date order, so two holidays processed together never
share one.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date, timedelta

from people_engine.dates import day_name, is_weekend
from people_engine.errors import ConfigurationError, ValidationError
from people_engine.policy import HolidayShiftPolicy, WeekendConfig

logger = logging.getLogger(__name__)

ONE_DAY = timedelta(days=1)


@dataclass(frozen=True)
class HolidayInput:
    """A named holiday date supplied by the caller."""

    name: str
    date: date

    def __post_init__(self) -> None:
        if not isinstance(self.name, str) or not self.name.strip():
            raise ValidationError("Holiday name is required", field="name")
        if not isinstance(self.date, date):
            raise ValidationError(f"Holiday '{self.name}' needs a date", field="date")


@dataclass(frozen=True)
class ObservedHoliday:
    """Compensation outcome for one holiday."""

    name: str
    date: date
    observed_date: date
    is_compensated: bool
    reason: str | None = None

    @property
    def year(self) -> int:
        """Year of the original holiday date, not the observed date."""
        return self.date.year


class HolidayCompensationCalculator:
    """Computes observed dates for public holidays.

    Algorithm:
    1. Sort holidays by date (name breaks ties)
    2. Split into runs of consecutive calendar dates
    3. A holiday on a weekend day is observed on the first day after its
       run that is neither a weekend day nor already claimed
    4. A weekday holiday keeps its own date unless that date is already
       claimed, in which case it takes the same walk
    5. Claimed dates are ``existing_observed_dates`` plus every observed
       date assigned earlier in the same pass

    The same algorithm serves a whole-year load, a single addition, a copy
    into another year and an edit; only the hazard set differs.
    """

    def __init__(
        self,
        weekend: WeekendConfig,
        policy: HolidayShiftPolicy | None = None,
    ):
        self.weekend = weekend
        self.policy = policy or HolidayShiftPolicy()

    def compute(
        self,
        holidays: Iterable[HolidayInput],
        existing_observed_dates: Iterable[date] = (),
    ) -> list[ObservedHoliday]:
        """Compute observed dates for ``holidays``.

        Args:
            holidays: Holidays to place; may span several years
            existing_observed_dates: Observed dates already recorded elsewhere.
                They are collision hazards only and never join a run.

        Returns:
            One ObservedHoliday per input, in date order

        Raises:
            ConfigurationError: If no free working day is found within
                ``policy.max_shift_days`` of a block's end
        """
        ordered = sorted(holidays, key=lambda h: (h.date, h.name))
        claimed = set(existing_observed_dates)
        results: list[ObservedHoliday] = []

        for run in self.group_consecutive(ordered):
            block_end = run[-1].date
            for holiday in run:
                result = self._place(holiday, block_end, claimed)
                claimed.add(result.observed_date)
                results.append(result)

        return results

    @staticmethod
    def group_consecutive(ordered: list[HolidayInput]) -> list[list[HolidayInput]]:
        """Partition date-ordered holidays into runs of consecutive days."""
        runs: list[list[HolidayInput]] = []
        for holiday in ordered:
            if runs and (holiday.date - runs[-1][-1].date).days <= 1:
                runs[-1].append(holiday)
            else:
                runs.append([holiday])
        return runs

    def _place(
        self,
        holiday: HolidayInput,
        block_end: date,
        claimed: set[date],
    ) -> ObservedHoliday:
        if is_weekend(holiday.date, self.weekend):
            observed = self._next_free_day(block_end + ONE_DAY, claimed, holiday.date)
            reason = f"Falls on {day_name(holiday.date)}, observed {day_name(observed)}"
        elif holiday.date in claimed:
            observed = self._next_free_day(block_end + ONE_DAY, claimed, holiday.date)
            reason = f"Overlaps another holiday, observed {day_name(observed)}"
        else:
            return ObservedHoliday(
                name=holiday.name,
                date=holiday.date,
                observed_date=holiday.date,
                is_compensated=False,
            )

        logger.debug("Holiday %s on %s observed on %s", holiday.name, holiday.date, observed)
        return ObservedHoliday(
            name=holiday.name,
            date=holiday.date,
            observed_date=observed,
            is_compensated=True,
            reason=reason,
        )

    def _next_free_day(self, start: date, claimed: set[date], holiday_date: date) -> date:
        candidate = start
        for _ in range(self.policy.max_shift_days):
            if not is_weekend(candidate, self.weekend) and candidate not in claimed:
                return candidate
            candidate += ONE_DAY

        raise ConfigurationError(
            f"No working day found within {self.policy.max_shift_days} days "
            f"to observe the holiday on {holiday_date}; check the weekend configuration",
            holiday_date=holiday_date,
            max_shift_days=self.policy.max_shift_days,
        )
