"""Exception types raised by the people engine."""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from uuid import UUID


class PeopleEngineError(Exception):
    """Base class for all engine errors."""


class ValidationError(PeopleEngineError, ValueError):
    """Raised when input is rejected before any computation or write."""

    def __init__(self, message: str, field: str | None = None):
        self.field = field
        super().__init__(message)


class DuplicateBalanceError(PeopleEngineError):
    """Raised when assigning a balance that already exists for the key."""

    def __init__(self, employee_id: UUID, leave_type_id: UUID, year: int):
        self.employee_id = employee_id
        self.leave_type_id = leave_type_id
        self.year = year
        super().__init__(
            f"Leave balance already exists for employee {employee_id}, "
            f"leave type {leave_type_id}, year {year}; adjust it instead"
        )


class BalanceNotFoundError(PeopleEngineError):
    """Raised when an operation references a balance that does not exist."""

    def __init__(
        self,
        balance_id: UUID | None = None,
        *,
        employee_id: UUID | None = None,
        leave_type_id: UUID | None = None,
        year: int | None = None,
    ):
        self.balance_id = balance_id
        self.employee_id = employee_id
        self.leave_type_id = leave_type_id
        self.year = year
        if balance_id is not None:
            msg = f"Leave balance {balance_id} not found"
        else:
            msg = (
                f"No leave balance for employee {employee_id}, "
                f"leave type {leave_type_id}, year {year}"
            )
        super().__init__(msg)


class ConfigurationError(PeopleEngineError):
    """Raised when company configuration makes a computation impossible."""

    def __init__(self, message: str, holiday_date: date | None = None, max_shift_days: int | None = None):
        self.holiday_date = holiday_date
        self.max_shift_days = max_shift_days
        super().__init__(message)


class InvalidTransitionError(PeopleEngineError):
    """Raised when an invalid status transition is attempted."""

    def __init__(self, from_status: str, to_status: str, reason: str | None = None):
        # Enum members are reported by value
        self.from_status = getattr(from_status, "value", from_status)
        self.to_status = getattr(to_status, "value", to_status)
        self.reason = reason
        msg = f"Invalid transition from '{self.from_status}' to '{self.to_status}'"
        if reason:
            msg += f": {reason}"
        super().__init__(msg)


class OfferVersionNotFoundError(PeopleEngineError):
    """Raised when an offer or offer version cannot be loaded."""

    def __init__(self, version_id: UUID):
        self.version_id = version_id
        super().__init__(f"Offer version {version_id} not found")


class LeaveRequestNotFoundError(PeopleEngineError):
    """Raised when a leave request cannot be loaded."""

    def __init__(self, request_id: UUID):
        self.request_id = request_id
        super().__init__(f"Leave request {request_id} not found")


def require_days(value: Decimal | int | float | str, field: str) -> Decimal:
    """Coerce a day count or amount to Decimal, rejecting non-numeric input."""
    try:
        result = value if isinstance(value, Decimal) else Decimal(str(value))
    except ArithmeticError as e:
        raise ValidationError(f"{field} must be a number, got {value!r}", field=field) from e
    if not result.is_finite():
        raise ValidationError(f"{field} must be finite", field=field)
    return result
