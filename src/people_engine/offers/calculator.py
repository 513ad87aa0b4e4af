"""Offer compensation totals.

Derives gross pay, statutory contributions, total deductions and the net
pay estimate from an offer version's raw money fields:

    gross       = basic + housing + transport + other
    employee    = basic * employee_rate   (if subject to contribution)
    employer    = basic * employer_rate   (if subject to contribution)
    deductions  = deductions_fixed + employee
    net         = gross - deductions

Net pay is never clamped. A negative net is a valid result and is flagged
by ``OfferTotals.is_under_compensated``.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import Any

from people_engine.errors import ValidationError, require_days
from people_engine.policy import ContributionRates

CENT = Decimal("0.01")
ZERO = Decimal("0")

MONEY_FIELDS = (
    "basic_salary",
    "housing_allowance",
    "transport_allowance",
    "other_allowances",
    "deductions_fixed",
)


def _money(value: Decimal | int | float | str, name: str) -> Decimal:
    amount = require_days(value, name)
    if amount < 0:
        raise ValidationError(f"{name} cannot be negative", field=name)
    return amount


@dataclass(frozen=True)
class CompensationInputs:
    """Raw money fields of one offer version."""

    basic_salary: Decimal
    housing_allowance: Decimal = ZERO
    transport_allowance: Decimal = ZERO
    other_allowances: Decimal = ZERO
    deductions_fixed: Decimal = ZERO
    is_subject_to_contribution: bool = False

    def __post_init__(self) -> None:
        for name in MONEY_FIELDS:
            object.__setattr__(self, name, _money(getattr(self, name), name))


@dataclass(frozen=True)
class OfferTotals:
    """Derived totals for an offer version."""

    gross_pay_total: Decimal
    employee_contribution: Decimal
    employer_contribution: Decimal
    deductions_total: Decimal
    net_pay_estimate: Decimal

    @property
    def is_under_compensated(self) -> bool:
        return self.net_pay_estimate < 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "gross_pay_total": str(self.gross_pay_total),
            "employee_contribution": str(self.employee_contribution),
            "employer_contribution": str(self.employer_contribution),
            "deductions_total": str(self.deductions_total),
            "net_pay_estimate": str(self.net_pay_estimate),
            "is_under_compensated": self.is_under_compensated,
        }


def contribution(basic_salary: Decimal, rate: Decimal) -> Decimal:
    """Rate-based contribution on basic salary, rounded to cents."""
    return (basic_salary * rate).quantize(CENT, rounding=ROUND_HALF_UP)


def totals_for(
    inputs: CompensationInputs,
    rates: ContributionRates | None = None,
    employee_contribution: Decimal | None = None,
    employer_contribution: Decimal | None = None,
) -> OfferTotals:
    """Compute totals for already-validated inputs.

    Explicit contribution amounts replace the rate-based ones and are used
    as given. They only apply when the version is subject to contribution.
    """
    rates = rates or ContributionRates()
    gross = (
        inputs.basic_salary
        + inputs.housing_allowance
        + inputs.transport_allowance
        + inputs.other_allowances
    )

    if inputs.is_subject_to_contribution:
        employee = (
            _money(employee_contribution, "employee_contribution")
            if employee_contribution is not None
            else contribution(inputs.basic_salary, rates.employee_rate)
        )
        employer = (
            _money(employer_contribution, "employer_contribution")
            if employer_contribution is not None
            else contribution(inputs.basic_salary, rates.employer_rate)
        )
    else:
        employee = ZERO
        employer = ZERO

    deductions = inputs.deductions_fixed + employee
    return OfferTotals(
        gross_pay_total=gross,
        employee_contribution=employee,
        employer_contribution=employer,
        deductions_total=deductions,
        net_pay_estimate=gross - deductions,
    )


def compute_totals(
    *,
    basic_salary: Decimal | int | str,
    housing_allowance: Decimal | int | str = ZERO,
    transport_allowance: Decimal | int | str = ZERO,
    other_allowances: Decimal | int | str = ZERO,
    deductions_fixed: Decimal | int | str = ZERO,
    is_subject_to_contribution: bool = False,
    rates: ContributionRates | None = None,
    employee_contribution: Decimal | None = None,
    employer_contribution: Decimal | None = None,
) -> OfferTotals:
    """Compute offer totals from raw money fields.

    Raises:
        ValidationError: If any amount is negative or not a number
    """
    inputs = CompensationInputs(
        basic_salary=basic_salary,  # type: ignore[arg-type]
        housing_allowance=housing_allowance,  # type: ignore[arg-type]
        transport_allowance=transport_allowance,  # type: ignore[arg-type]
        other_allowances=other_allowances,  # type: ignore[arg-type]
        deductions_fixed=deductions_fixed,  # type: ignore[arg-type]
        is_subject_to_contribution=is_subject_to_contribution,
    )
    return totals_for(inputs, rates, employee_contribution, employer_contribution)
