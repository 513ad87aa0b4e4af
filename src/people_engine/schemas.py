"""Pydantic schemas for JSON input to the command line tools."""

from __future__ import annotations

import datetime as dt
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from people_engine.holidays.compensation import HolidayInput
from people_engine.offers.calculator import CompensationInputs


# ============================================================================
# Holiday schemas
# ============================================================================


class HolidayIn(BaseModel):
    """Schema for one public holiday."""

    model_config = ConfigDict(str_strip_whitespace=True)

    name: str = Field(min_length=1)
    date: dt.date

    def to_input(self) -> HolidayInput:
        return HolidayInput(name=self.name, date=self.date)


class HolidayFile(BaseModel):
    """Schema for a holiday file: a year's holidays plus optional context."""

    holidays: list[HolidayIn]
    weekend_days: list[int] | None = None
    existing_observed_dates: list[dt.date] = Field(default_factory=list)

    @field_validator("weekend_days")
    @classmethod
    def check_weekend_days(cls, value: list[int] | None) -> list[int] | None:
        if value is not None and any(not 0 <= d <= 6 for d in value):
            raise ValueError("weekend days must be between 0 (Sunday) and 6 (Saturday)")
        return value


# ============================================================================
# Offer schemas
# ============================================================================


class OfferTotalsIn(BaseModel):
    """Schema for offer totals input."""

    basic_salary: Decimal = Field(ge=0)
    housing_allowance: Decimal = Field(default=Decimal("0"), ge=0)
    transport_allowance: Decimal = Field(default=Decimal("0"), ge=0)
    other_allowances: Decimal = Field(default=Decimal("0"), ge=0)
    deductions_fixed: Decimal = Field(default=Decimal("0"), ge=0)
    is_subject_to_contribution: bool = False

    def to_inputs(self) -> CompensationInputs:
        return CompensationInputs(**self.model_dump())
