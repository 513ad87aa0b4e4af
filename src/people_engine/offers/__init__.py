"""Offer compensation totals and version history."""

from people_engine.offers.calculator import (
    CompensationInputs,
    OfferTotals,
    compute_totals,
    totals_for,
)
from people_engine.offers.service import OfferVersionService
from people_engine.offers.versioning import (
    OfferVersionSnapshot,
    OfferVersionStateMachine,
    OfferVersionStatus,
    revise,
)

__all__ = [
    "CompensationInputs",
    "OfferTotals",
    "compute_totals",
    "totals_for",
    "OfferVersionService",
    "OfferVersionSnapshot",
    "OfferVersionStateMachine",
    "OfferVersionStatus",
    "revise",
]
