"""Offer version state machine and revision rules."""

from __future__ import annotations

from dataclasses import dataclass, fields, replace
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any
from uuid import UUID, uuid4

from people_engine.errors import ValidationError
from people_engine.offers.calculator import MONEY_FIELDS, CompensationInputs, totals_for
from people_engine.policy import ContributionRates
from people_engine.state_machine import StateMachine

ZERO = Decimal("0")


class OfferVersionStatus(str, Enum):
    """Offer version status values."""

    DRAFT = "draft"
    SENT = "sent"
    SUPERSEDED = "superseded"
    ACCEPTED = "accepted"
    REJECTED = "rejected"
    EXPIRED = "expired"


class OfferVersionStateMachine(StateMachine):
    """State machine for offer version status transitions.

    Allowed transitions:
    - draft → sent
    - draft → superseded
    - draft → expired
    - sent → accepted / rejected / expired
    - sent → superseded (revised after sending)
    - accepted → superseded (revised after acceptance)
    """

    VALID_TRANSITIONS: dict[str, list[str]] = {
        OfferVersionStatus.DRAFT: [
            OfferVersionStatus.SENT,
            OfferVersionStatus.SUPERSEDED,
            OfferVersionStatus.EXPIRED,
        ],
        OfferVersionStatus.SENT: [
            OfferVersionStatus.ACCEPTED,
            OfferVersionStatus.REJECTED,
            OfferVersionStatus.EXPIRED,
            OfferVersionStatus.SUPERSEDED,
        ],
        OfferVersionStatus.ACCEPTED: [OfferVersionStatus.SUPERSEDED],
        OfferVersionStatus.SUPERSEDED: [],  # Terminal state
        OfferVersionStatus.REJECTED: [],  # Terminal state
        OfferVersionStatus.EXPIRED: [],  # Terminal state
    }


@dataclass(frozen=True)
class OfferVersionSnapshot:
    """One version of an offer's terms, with its derived totals."""

    offer_id: UUID
    version_number: int
    status: OfferVersionStatus = OfferVersionStatus.DRAFT
    id: UUID | None = None
    change_reason: str | None = None
    currency_code: str = "SAR"
    start_date: date | None = None

    basic_salary: Decimal = ZERO
    housing_allowance: Decimal = ZERO
    transport_allowance: Decimal = ZERO
    other_allowances: Decimal = ZERO
    deductions_fixed: Decimal = ZERO
    is_subject_to_gosi: bool = False
    gosi_employee_amount: Decimal = ZERO
    gosi_employer_amount: Decimal = ZERO
    # Set when the amount was given explicitly instead of derived from the rates
    gosi_employee_overridden: bool = False
    gosi_employer_overridden: bool = False

    gross_pay_total: Decimal = ZERO
    deductions_total: Decimal = ZERO
    net_pay_estimate: Decimal = ZERO

    superseded_at: datetime | None = None

    def inputs(self) -> CompensationInputs:
        return CompensationInputs(
            basic_salary=self.basic_salary,
            housing_allowance=self.housing_allowance,
            transport_allowance=self.transport_allowance,
            other_allowances=self.other_allowances,
            deductions_fixed=self.deductions_fixed,
            is_subject_to_contribution=self.is_subject_to_gosi,
        )

    def with_totals(
        self,
        rates: ContributionRates | None = None,
        employee_contribution: Decimal | None = None,
        employer_contribution: Decimal | None = None,
    ) -> OfferVersionSnapshot:
        """Return a copy with normalized money fields and recomputed totals.

        Contribution overrides are used as given instead of the rates.
        """
        inputs = self.inputs()
        totals = totals_for(inputs, rates, employee_contribution, employer_contribution)
        return replace(
            self,
            basic_salary=inputs.basic_salary,
            housing_allowance=inputs.housing_allowance,
            transport_allowance=inputs.transport_allowance,
            other_allowances=inputs.other_allowances,
            deductions_fixed=inputs.deductions_fixed,
            gosi_employee_amount=totals.employee_contribution,
            gosi_employer_amount=totals.employer_contribution,
            gosi_employee_overridden=inputs.is_subject_to_contribution and employee_contribution is not None,
            gosi_employer_overridden=inputs.is_subject_to_contribution and employer_contribution is not None,
            gross_pay_total=totals.gross_pay_total,
            deductions_total=totals.deductions_total,
            net_pay_estimate=totals.net_pay_estimate,
        )


# Fields a revision may change; ids, numbering, status and totals are derived
REVISABLE_FIELDS = frozenset(MONEY_FIELDS) | {"is_subject_to_gosi", "currency_code", "start_date"}
CONTRIBUTION_OVERRIDES = frozenset({"gosi_employee_amount", "gosi_employer_amount"})


def revise(
    current: OfferVersionSnapshot,
    changes: dict[str, Any],
    change_reason: str | None,
    now: datetime,
    rates: ContributionRates | None = None,
) -> tuple[OfferVersionSnapshot, OfferVersionSnapshot]:
    """Supersede ``current`` with a new draft carrying ``changes``.

    Fields not in ``changes`` are copied forward, including contribution
    amounts that were given explicitly. The new draft gets the next version
    number and freshly computed totals. ``gosi_employee_amount`` and
    ``gosi_employer_amount`` in ``changes`` override the rate-based
    contributions; passing None for either goes back to the rate.

    Returns:
        (superseded current version, new draft version)

    Raises:
        InvalidTransitionError: If ``current`` cannot be superseded
        ValidationError: If ``changes`` names a field that cannot be revised
            or a money field is negative
    """
    OfferVersionStateMachine.validate_transition(current.status, OfferVersionStatus.SUPERSEDED)

    unknown = sorted(set(changes) - REVISABLE_FIELDS - CONTRIBUTION_OVERRIDES)
    if unknown:
        raise ValidationError(f"Cannot revise field(s): {', '.join(unknown)}", field=unknown[0])

    field_changes = {k: v for k, v in changes.items() if k in REVISABLE_FIELDS}
    superseded = replace(current, status=OfferVersionStatus.SUPERSEDED, superseded_at=now)
    draft = replace(
        current,
        id=uuid4(),
        version_number=current.version_number + 1,
        status=OfferVersionStatus.DRAFT,
        change_reason=change_reason,
        superseded_at=None,
        **field_changes,
    ).with_totals(
        rates,
        employee_contribution=changes.get(
            "gosi_employee_amount",
            current.gosi_employee_amount if current.gosi_employee_overridden else None,
        ),
        employer_contribution=changes.get(
            "gosi_employer_amount",
            current.gosi_employer_amount if current.gosi_employer_overridden else None,
        ),
    )
    return superseded, draft


def snapshot_fields() -> list[str]:
    """Names of the snapshot fields persisted on an offer version row."""
    return [f.name for f in fields(OfferVersionSnapshot)]
