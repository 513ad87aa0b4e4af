"""Public holiday model."""

from __future__ import annotations

import datetime as dt
from uuid import UUID, uuid4

from sqlalchemy import Boolean, Date, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from people_engine.models.base import Base, UpdatedAtMixin


class PublicHoliday(Base, UpdatedAtMixin):
    """A public holiday and the date it is observed on."""

    __tablename__ = "public_holidays"

    id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4)
    name: Mapped[str] = mapped_column(String, nullable=False)
    date: Mapped[dt.date] = mapped_column(Date, nullable=False)
    observed_date: Mapped[dt.date] = mapped_column(Date, nullable=False)
    # Year of the original date, not the observed date
    year: Mapped[int] = mapped_column(Integer, nullable=False, index=True)
    is_compensated: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    compensation_reason: Mapped[str | None] = mapped_column(Text, nullable=True)

    __table_args__ = (
        UniqueConstraint("year", "name", "date", name="public_holidays_year_name_date_unique"),
    )
