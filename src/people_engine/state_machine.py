"""Status transition tables shared by offer versions and leave requests."""

from __future__ import annotations

from people_engine.errors import InvalidTransitionError


class StateMachine:
    """Base for status machines driven by a transition table.

    Subclasses define ``VALID_TRANSITIONS`` as {from_status: [allowed_to_statuses]}.
    A status with no allowed targets is terminal.
    """

    VALID_TRANSITIONS: dict[str, list[str]] = {}

    @classmethod
    def can_transition(cls, from_status: str, to_status: str) -> bool:
        """Check if a transition is valid."""
        allowed = cls.VALID_TRANSITIONS.get(from_status, [])
        return to_status in allowed

    @classmethod
    def validate_transition(cls, from_status: str, to_status: str) -> None:
        """Validate a transition, raising InvalidTransitionError if invalid."""
        if not cls.can_transition(from_status, to_status):
            raise InvalidTransitionError(from_status, to_status)

    @classmethod
    def is_terminal(cls, status: str) -> bool:
        return not cls.VALID_TRANSITIONS.get(status, [])
