"""
Piecewise-linear constraint kinds.

Each kind is a PiecewiseLinearConstraint subclass constructed as
``cls(b, f, allocator, verbose=..., epsilon=...)``.
"""

from __future__ import annotations

from pwl_constraints.constraints.absolute_value import AbsoluteValueConstraint
from pwl_constraints.constraints.base import PiecewiseLinearConstraint
from pwl_constraints.constraints.relu import ReluConstraint

# Registry of constraint kinds
_CONSTRAINTS: dict[str, type[PiecewiseLinearConstraint]] = {
    "relu": ReluConstraint,
    "abs": AbsoluteValueConstraint,
}


def register_constraint(name: str, constraint_class: type[PiecewiseLinearConstraint]) -> None:
    """Register a constraint class."""
    _CONSTRAINTS[name.lower()] = constraint_class


def get_constraint(name: str) -> type[PiecewiseLinearConstraint] | None:
    """Get a constraint class by name, or None if unknown."""
    return _CONSTRAINTS.get(name.lower())


def available_constraints() -> list[str]:
    """Return sorted list of registered constraint names."""
    return sorted(_CONSTRAINTS)


__all__ = [
    "PiecewiseLinearConstraint",
    "ReluConstraint",
    "AbsoluteValueConstraint",
    "register_constraint",
    "get_constraint",
    "available_constraints",
]
