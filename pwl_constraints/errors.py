"""
Error types for pwl-constraints.

Caller sequencing errors derive from ReluplexError. Broken internal
invariants raise InvariantViolation, which is an AssertionError and is not
meant to be recovered from.
"""

from __future__ import annotations

from enum import Enum


class ErrorCode(Enum):
    PARTICIPATING_VARIABLES_ABSENT = "participating variables absent"


class ReluplexError(Exception):
    def __init__(self, code: ErrorCode, message: str = ""):
        self.code = code
        super().__init__(message or code.value)


class MissingAssignmentError(ReluplexError):
    """A query needed a value for a participating variable that was never notified."""

    def __init__(self, message: str = ""):
        super().__init__(ErrorCode.PARTICIPATING_VARIABLES_ABSENT, message)


class InvariantViolation(AssertionError):
    """A foundational invariant does not hold; continuing would be unsound."""


def ensure(condition: bool, message: str) -> None:
    """Raise InvariantViolation unless ``condition`` holds (survives ``python -O``)."""
    if not condition:
        raise InvariantViolation(message)
