"""Configuration management for the people engine's outer surfaces.

Only the CLI and database layer read these settings. Engine computations
receive explicit policy objects (see ``people_engine.policy``).
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from decimal import Decimal
from functools import lru_cache

from dotenv import load_dotenv

from people_engine.policy import ContributionRates, HolidayShiftPolicy, WeekendConfig


@dataclass(frozen=True)
class Settings:
    """Application settings loaded from environment."""

    database_url: str
    weekend_days: str
    log_level: str
    contribution_employee_rate: Decimal
    contribution_employer_rate: Decimal
    holiday_max_shift_days: int
    debug: bool

    @classmethod
    def from_env(cls) -> Settings:
        """Load settings from environment variables."""
        load_dotenv()

        return cls(
            database_url=os.getenv("DATABASE_URL", "sqlite:///./people_engine.db"),
            weekend_days=os.getenv("WEEKEND_DAYS", "5,6"),
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
            contribution_employee_rate=Decimal(os.getenv("CONTRIBUTION_EMPLOYEE_RATE", "0.0975")),
            contribution_employer_rate=Decimal(os.getenv("CONTRIBUTION_EMPLOYER_RATE", "0.1175")),
            holiday_max_shift_days=int(os.getenv("HOLIDAY_MAX_SHIFT_DAYS", "14")),
            debug=os.getenv("DEBUG", "false").lower() == "true",
        )

    def weekend(self) -> WeekendConfig:
        return WeekendConfig.parse(self.weekend_days)

    def contribution_rates(self) -> ContributionRates:
        return ContributionRates(
            employee_rate=self.contribution_employee_rate,
            employer_rate=self.contribution_employer_rate,
        )

    def shift_policy(self) -> HolidayShiftPolicy:
        return HolidayShiftPolicy(max_shift_days=self.holiday_max_shift_days)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings.from_env()
