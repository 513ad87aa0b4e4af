"""SQLAlchemy ORM models."""

from people_engine.models.base import Base, TimestampMixin, UpdatedAtMixin
from people_engine.models.holiday import PublicHoliday
from people_engine.models.leave import (
    LeaveBalance,
    LeaveBalanceAdjustment,
    LeaveRequest,
    LeaveType,
)
from people_engine.models.offer import Offer, OfferVersion

__all__ = [
    "Base",
    "TimestampMixin",
    "UpdatedAtMixin",
    "PublicHoliday",
    "LeaveBalance",
    "LeaveBalanceAdjustment",
    "LeaveRequest",
    "LeaveType",
    "Offer",
    "OfferVersion",
]
