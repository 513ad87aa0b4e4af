"""Explicit engine policy objects.

Every date and money computation receives its company configuration as
one of these values instead of reading shared settings:

    calculator = HolidayCompensationCalculator(
        weekend=WeekendConfig.parse("5,6"),
        policy=HolidayShiftPolicy(max_shift_days=14),
    )

Rules:
    1. No env vars. Configuration is explicit.
    2. No globals. Callers pass the policy they want.
    3. Immutable after creation (frozen dataclasses).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal


@dataclass(frozen=True)
class WeekendConfig:
    """
    Company weekend definition.

    Attributes:
        days: Weekday indices treated as non-working, 0=Sunday .. 6=Saturday.
            May be empty (every day is a working day).
    """

    days: frozenset[int] = field(default_factory=frozenset)

    def __post_init__(self) -> None:
        """Validate configuration."""
        if not isinstance(self.days, frozenset):
            object.__setattr__(self, "days", frozenset(self.days))
        for day in self.days:
            if not isinstance(day, int) or isinstance(day, bool) or not 0 <= day <= 6:
                raise ValueError(f"weekend day must be an integer in 0..6, got {day!r}")

    @classmethod
    def parse(cls, value: str) -> WeekendConfig:
        """Build from a comma-separated list such as ``"5,6"``."""
        parts = [p.strip() for p in value.split(",") if p.strip()]
        try:
            return cls(frozenset(int(p) for p in parts))
        except ValueError as e:
            raise ValueError(f"invalid weekend days {value!r}: {e}") from e

    @classmethod
    def friday_saturday(cls) -> WeekendConfig:
        return cls(frozenset({5, 6}))

    @classmethod
    def saturday_sunday(cls) -> WeekendConfig:
        return cls(frozenset({6, 0}))

    def __contains__(self, day: int) -> bool:
        return day in self.days


@dataclass(frozen=True)
class HolidayShiftPolicy:
    """
    Bounds for the observed-date walk.

    Attributes:
        max_shift_days: Maximum number of candidate days tried after a
            holiday block before giving up. Default 14.
    """

    max_shift_days: int = 14

    def __post_init__(self) -> None:
        """Validate configuration."""
        if self.max_shift_days < 1:
            raise ValueError("max_shift_days must be at least 1")
        if self.max_shift_days > 60:
            raise ValueError("max_shift_days cannot exceed 60")


@dataclass(frozen=True)
class ContributionRates:
    """
    Statutory contribution rates applied to basic salary.

    Attributes:
        employee_rate: Share withheld from the employee. Default 9.75%.
        employer_rate: Share paid by the employer. Default 11.75%.
    """

    employee_rate: Decimal = Decimal("0.0975")
    employer_rate: Decimal = Decimal("0.1175")

    def __post_init__(self) -> None:
        """Validate configuration."""
        for name in ("employee_rate", "employer_rate"):
            rate = getattr(self, name)
            if not isinstance(rate, Decimal):
                rate = Decimal(str(rate))
                object.__setattr__(self, name, rate)
            if rate < 0 or rate > 1:
                raise ValueError(f"{name} must be between 0 and 1")
