"""Public holiday compensation and planning."""

from people_engine.holidays.compensation import (
    HolidayCompensationCalculator,
    HolidayInput,
    ObservedHoliday,
)
from people_engine.holidays.planning import HolidayDraft, HolidayPlanner, HolidayRecord

__all__ = [
    "HolidayCompensationCalculator",
    "HolidayInput",
    "ObservedHoliday",
    "HolidayDraft",
    "HolidayPlanner",
    "HolidayRecord",
]
