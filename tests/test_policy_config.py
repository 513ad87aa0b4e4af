"""Tests for engine policy objects and environment settings."""

from decimal import Decimal

import pytest

from people_engine.config import Settings, get_settings
from people_engine.policy import ContributionRates, HolidayShiftPolicy, WeekendConfig


class TestWeekendConfig:
    """Weekend configuration validation."""

    def test_parse(self):
        assert WeekendConfig.parse("5,6").days == frozenset({5, 6})

    def test_parse_tolerates_spaces_and_empty_parts(self):
        assert WeekendConfig.parse(" 6, 0 ,").days == frozenset({0, 6})

    def test_parse_empty_string_means_no_weekend(self):
        assert WeekendConfig.parse("").days == frozenset()

    def test_accepts_any_iterable(self):
        config = WeekendConfig([5, 6])  # type: ignore[arg-type]
        assert config.days == frozenset({5, 6})

    def test_out_of_range_rejected(self):
        with pytest.raises(ValueError):
            WeekendConfig(frozenset({7}))

    def test_non_numeric_rejected(self):
        with pytest.raises(ValueError):
            WeekendConfig.parse("fri,sat")

    def test_contains(self):
        config = WeekendConfig.friday_saturday()
        assert 5 in config
        assert 0 not in config


class TestHolidayShiftPolicy:
    """Shift walk bounds."""

    def test_default(self):
        assert HolidayShiftPolicy().max_shift_days == 14

    def test_zero_rejected(self):
        with pytest.raises(ValueError):
            HolidayShiftPolicy(max_shift_days=0)

    def test_too_large_rejected(self):
        with pytest.raises(ValueError):
            HolidayShiftPolicy(max_shift_days=61)


class TestContributionRates:
    """Statutory contribution rates."""

    def test_defaults(self):
        rates = ContributionRates()
        assert rates.employee_rate == Decimal("0.0975")
        assert rates.employer_rate == Decimal("0.1175")

    def test_coerces_to_decimal(self):
        rates = ContributionRates(employee_rate="0.1", employer_rate=0.12)  # type: ignore[arg-type]
        assert rates.employee_rate == Decimal("0.1")
        assert rates.employer_rate == Decimal("0.12")

    def test_rate_above_one_rejected(self):
        with pytest.raises(ValueError):
            ContributionRates(employee_rate=Decimal("1.5"))

    def test_negative_rate_rejected(self):
        with pytest.raises(ValueError):
            ContributionRates(employer_rate=Decimal("-0.01"))


class TestSettings:
    """Settings loaded from the environment."""

    @pytest.fixture(autouse=True)
    def clear_cache(self):
        get_settings.cache_clear()
        yield
        get_settings.cache_clear()

    def test_defaults(self, monkeypatch):
        for name in (
            "DATABASE_URL",
            "WEEKEND_DAYS",
            "LOG_LEVEL",
            "CONTRIBUTION_EMPLOYEE_RATE",
            "CONTRIBUTION_EMPLOYER_RATE",
            "HOLIDAY_MAX_SHIFT_DAYS",
        ):
            monkeypatch.delenv(name, raising=False)
        monkeypatch.setattr("people_engine.config.load_dotenv", lambda: None)

        settings = Settings.from_env()

        assert settings.database_url == "sqlite:///./people_engine.db"
        assert settings.weekend() == WeekendConfig.friday_saturday()
        assert settings.contribution_rates() == ContributionRates()
        assert settings.shift_policy() == HolidayShiftPolicy()
        assert settings.log_level == "INFO"

    def test_overrides(self, monkeypatch):
        monkeypatch.setattr("people_engine.config.load_dotenv", lambda: None)
        monkeypatch.setenv("WEEKEND_DAYS", "6,0")
        monkeypatch.setenv("LOG_LEVEL", "debug")
        monkeypatch.setenv("CONTRIBUTION_EMPLOYEE_RATE", "0.1")
        monkeypatch.setenv("HOLIDAY_MAX_SHIFT_DAYS", "21")

        settings = get_settings()

        assert settings.weekend().days == frozenset({0, 6})
        assert settings.log_level == "DEBUG"
        assert settings.contribution_rates().employee_rate == Decimal("0.1")
        assert settings.shift_policy().max_shift_days == 21

    def test_get_settings_is_cached(self, monkeypatch):
        monkeypatch.setattr("people_engine.config.load_dotenv", lambda: None)
        assert get_settings() is get_settings()
