from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


class BoundType(Enum):
    LB = "lb"
    UB = "ub"


class Status(Enum):
    SAT = "SAT"
    UNSAT = "UNSAT"
    UNKNOWN = "UNKNOWN"


@dataclass(frozen=True)
class Tightening:
    """A single-variable bound fact: ``variable >= value`` or ``variable <= value``."""

    variable: int
    value: float
    type: BoundType

    def __str__(self) -> str:
        op = ">=" if self.type is BoundType.LB else "<="
        return f"x{self.variable} {op} {self.value}"


@dataclass(frozen=True)
class Addend:
    coefficient: float
    variable: int


@dataclass(frozen=True)
class Equation:
    """
    Linear equation ``sum(coefficient * variable) = scalar``.

    ``auxiliary`` optionally marks one addend's variable as eliminable by
    the tableau.
    """

    addends: tuple[Addend, ...]
    scalar: float = 0.0
    auxiliary: int | None = None

    def __post_init__(self):
        if self.auxiliary is not None and self.auxiliary not in self.variables():
            raise ValueError(
                f"Auxiliary variable {self.auxiliary} does not appear in the equation"
            )

    def variables(self) -> list[int]:
        return [addend.variable for addend in self.addends]

    def __str__(self) -> str:
        terms = " + ".join(f"{a.coefficient}*x{a.variable}" for a in self.addends)
        return f"{terms} = {self.scalar}"


@dataclass(frozen=True)
class CaseSplit:
    """One phase of a piecewise-linear constraint, applied to the tableau as a unit."""

    tightenings: tuple[Tightening, ...] = field(default_factory=tuple)
    equations: tuple[Equation, ...] = field(default_factory=tuple)

    def __str__(self) -> str:
        parts = [str(t) for t in self.tightenings] + [str(e) for e in self.equations]
        return "{" + ", ".join(parts) + "}"


@dataclass(frozen=True)
class Fix:
    """Suggested repair: set ``variable`` to ``value``."""

    variable: int
    value: float
