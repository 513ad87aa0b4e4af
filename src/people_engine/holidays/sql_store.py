"""SQLAlchemy persistence for planned holidays.

Rows are keyed by (year, name, date). Inserting a draft whose key already
exists is skipped, so loading the same holiday file twice adds nothing.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from uuid import UUID, uuid4

from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from people_engine.holidays.planning import HolidayDraft, HolidayRecord
from people_engine.models import PublicHoliday

logger = logging.getLogger(__name__)

HOLIDAY_KEY = ("year", "name", "date")


class SqlHolidayStore:
    """Reads and writes public holiday rows. The caller owns the transaction."""

    def __init__(self, session: Session):
        self.session = session

    def list_year(self, year: int) -> list[HolidayRecord]:
        """Holidays of a year ordered by date, then name."""
        rows = self.session.scalars(
            select(PublicHoliday)
            .where(PublicHoliday.year == year)
            .order_by(PublicHoliday.date, PublicHoliday.name)
        )
        return [_record(row) for row in rows]

    def insert_drafts(self, drafts: Iterable[HolidayDraft]) -> list[HolidayRecord]:
        """Insert drafts whose (year, name, date) is not yet recorded.

        Each insert skips on a key conflict, including rows committed by
        another session after the drafts were planned. Returns the records
        actually created, in draft order.
        """
        drafts = list(drafts)
        self.session.flush()

        created_ids: list[UUID] = []
        for draft in drafts:
            holiday_id = uuid4()
            values = {
                "id": holiday_id,
                "name": draft.name,
                "date": draft.date,
                "observed_date": draft.observed_date,
                "year": draft.year,
                "is_compensated": draft.is_compensated,
                "compensation_reason": draft.compensation_reason,
            }
            if self._insert_ignoring_conflict(values):
                created_ids.append(holiday_id)
            else:
                logger.debug("Holiday %s on %s already recorded", draft.name, draft.date)

        logger.info("Recorded %d of %d holiday(s)", len(created_ids), len(drafts))
        if not created_ids:
            return []
        rows = {
            row.id: row
            for row in self.session.scalars(select(PublicHoliday).where(PublicHoliday.id.in_(created_ids)))
        }
        return [_record(rows[holiday_id]) for holiday_id in created_ids]

    def update(self, record: HolidayRecord) -> None:
        """Write back an edited holiday."""
        row = self.session.get(PublicHoliday, record.id)
        if row is None:
            raise KeyError(f"Holiday {record.id} does not exist")
        row.name = record.name
        row.date = record.date
        row.observed_date = record.observed_date
        row.year = record.year
        row.is_compensated = record.is_compensated
        row.compensation_reason = record.compensation_reason
        self.session.flush()

    def delete_many(self, holiday_ids: Iterable[UUID]) -> int:
        """Delete holidays by id; returns the number of rows removed."""
        result = self.session.execute(delete(PublicHoliday).where(PublicHoliday.id.in_(list(holiday_ids))))
        return result.rowcount

    def _insert_ignoring_conflict(self, values: dict) -> bool:
        dialect = self.session.get_bind().dialect.name
        table = PublicHoliday.__table__
        if dialect == "postgresql":
            from sqlalchemy.dialects.postgresql import insert
        elif dialect == "sqlite":
            from sqlalchemy.dialects.sqlite import insert
        else:
            return self._insert_with_savepoint(values)

        stmt = insert(table).values(**values).on_conflict_do_nothing(index_elements=list(HOLIDAY_KEY))
        result = self.session.execute(stmt)
        return result.rowcount == 1

    def _insert_with_savepoint(self, values: dict) -> bool:
        try:
            with self.session.begin_nested():
                self.session.execute(PublicHoliday.__table__.insert().values(**values))
        except IntegrityError:
            return False
        return True


def _record(row: PublicHoliday) -> HolidayRecord:
    return HolidayRecord(
        name=row.name,
        date=row.date,
        observed_date=row.observed_date,
        year=row.year,
        is_compensated=row.is_compensated,
        compensation_reason=row.compensation_reason,
        id=row.id,
    )
