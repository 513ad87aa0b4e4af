"""Offer version persistence."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any
from uuid import UUID, uuid4

from sqlalchemy import select
from sqlalchemy.orm import Session

from people_engine.errors import OfferVersionNotFoundError
from people_engine.models import Offer, OfferVersion
from people_engine.offers.versioning import (
    OfferVersionSnapshot,
    OfferVersionStateMachine,
    OfferVersionStatus,
    revise,
    snapshot_fields,
)
from people_engine.policy import ContributionRates

logger = logging.getLogger(__name__)

# Offer status that follows each version status change
OFFER_STATUS_FOR = {
    OfferVersionStatus.DRAFT: "draft",
    OfferVersionStatus.SENT: "sent",
    OfferVersionStatus.ACCEPTED: "accepted",
    OfferVersionStatus.REJECTED: "rejected",
}

TIMESTAMP_FOR = {
    OfferVersionStatus.SENT: "sent_at",
    OfferVersionStatus.ACCEPTED: "accepted_at",
    OfferVersionStatus.REJECTED: "rejected_at",
}


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class OfferVersionService:
    """Creates, revises and moves offer versions through their lifecycle.

    Money fields of a stored version are never edited in place; revising
    supersedes the current version and inserts the next one. The caller
    owns the transaction.
    """

    def __init__(self, session: Session, rates: ContributionRates | None = None):
        self.session = session
        self.rates = rates or ContributionRates()

    def create_offer(
        self,
        candidate_id: UUID,
        offer_code: str,
        terms: dict[str, Any],
    ) -> tuple[Offer, OfferVersionSnapshot]:
        """Create an offer with version 1 as a draft."""
        offer = Offer(id=uuid4(), offer_code=offer_code, candidate_id=candidate_id, status="draft")
        self.session.add(offer)
        self.session.flush()

        terms = dict(terms)
        employee = terms.pop("gosi_employee_amount", None)
        employer = terms.pop("gosi_employer_amount", None)
        first = OfferVersionSnapshot(offer_id=offer.id, version_number=1, id=uuid4(), **terms).with_totals(
            self.rates, employee_contribution=employee, employer_contribution=employer
        )
        self._insert(first)
        offer.current_version_id = first.id
        self.session.flush()

        logger.info("Created offer %s with version 1", offer.id)
        return offer, first

    def get_version(self, version_id: UUID) -> OfferVersionSnapshot:
        return _snapshot(self._load(version_id))

    def history(self, offer_id: UUID) -> list[OfferVersionSnapshot]:
        """All versions of an offer, newest first."""
        rows = self.session.scalars(
            select(OfferVersion)
            .where(OfferVersion.offer_id == offer_id)
            .order_by(OfferVersion.version_number.desc())
        )
        return [_snapshot(row) for row in rows]

    def revise(
        self,
        version_id: UUID,
        changes: dict[str, Any],
        change_reason: str | None = None,
        now: datetime | None = None,
    ) -> OfferVersionSnapshot:
        """Supersede a version and make the new draft the offer's current version.

        Raises:
            OfferVersionNotFoundError: If the version does not exist
            InvalidTransitionError: If the version is superseded, rejected
                or expired
        """
        row = self._load(version_id)
        superseded, draft = revise(_snapshot(row), changes, change_reason, now or _utcnow(), self.rates)

        row.status = superseded.status.value
        row.superseded_at = superseded.superseded_at
        self.session.flush()

        self._insert(draft)
        offer = self.session.get(Offer, row.offer_id)
        offer.current_version_id = draft.id
        offer.status = OFFER_STATUS_FOR[OfferVersionStatus.DRAFT]
        self.session.flush()

        logger.info(
            "Offer %s revised: version %d superseded by %d",
            row.offer_id,
            superseded.version_number,
            draft.version_number,
        )
        return draft

    def mark_sent(self, version_id: UUID, now: datetime | None = None) -> OfferVersionSnapshot:
        return self._move(version_id, OfferVersionStatus.SENT, now)

    def mark_accepted(self, version_id: UUID, now: datetime | None = None) -> OfferVersionSnapshot:
        return self._move(version_id, OfferVersionStatus.ACCEPTED, now)

    def mark_rejected(self, version_id: UUID, now: datetime | None = None) -> OfferVersionSnapshot:
        return self._move(version_id, OfferVersionStatus.REJECTED, now)

    def _move(self, version_id: UUID, to_status: OfferVersionStatus, now: datetime | None) -> OfferVersionSnapshot:
        row = self._load(version_id)
        OfferVersionStateMachine.validate_transition(row.status, to_status)

        row.status = to_status.value
        setattr(row, TIMESTAMP_FOR[to_status], now or _utcnow())
        offer = self.session.get(Offer, row.offer_id)
        offer.status = OFFER_STATUS_FOR[to_status]
        self.session.flush()

        logger.info("Offer version %s is now %s", version_id, to_status.value)
        return _snapshot(row)

    def _load(self, version_id: UUID) -> OfferVersion:
        row = self.session.get(OfferVersion, version_id)
        if row is None:
            raise OfferVersionNotFoundError(version_id)
        return row

    def _insert(self, snapshot: OfferVersionSnapshot) -> None:
        values = {name: getattr(snapshot, name) for name in snapshot_fields()}
        values["status"] = snapshot.status.value
        self.session.add(OfferVersion(**values))
        self.session.flush()


def _snapshot(row: OfferVersion) -> OfferVersionSnapshot:
    values = {name: getattr(row, name) for name in snapshot_fields()}
    values["status"] = OfferVersionStatus(row.status)
    return OfferVersionSnapshot(**values)
