"""Calendar helpers shared by holiday and leave computations."""

from __future__ import annotations

from datetime import date

from people_engine.errors import ValidationError
from people_engine.policy import WeekendConfig

# Indexed by day_index(): 0=Sunday .. 6=Saturday
DAY_NAMES = ("Sunday", "Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday")


def day_index(d: date) -> int:
    """Return the weekday index of ``d`` with 0=Sunday and 6=Saturday."""
    return d.isoweekday() % 7


def day_name(d: date) -> str:
    return DAY_NAMES[day_index(d)]


def is_weekend(d: date, weekend: WeekendConfig) -> bool:
    """True iff ``d`` falls on one of the configured weekend days."""
    return day_index(d) in weekend.days


def days_between_inclusive(start: date, end: date) -> int:
    """Count calendar days from ``start`` to ``end``, both included.

    Raises:
        ValidationError: If ``end`` is before ``start``.
    """
    if end < start:
        raise ValidationError(f"end date {end} is before start date {start}", field="end_date")
    return (end - start).days + 1


def add_years(d: date, years: int) -> date:
    """Shift ``d`` by whole years, mapping Feb 29 to Feb 28 in non-leap years."""
    try:
        return d.replace(year=d.year + years)
    except ValueError:
        return d.replace(year=d.year + years, day=28)
