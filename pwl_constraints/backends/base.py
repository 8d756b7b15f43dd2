"""
Base class for solver encoders.

An encoder collects a query (variable bounds, linear equations,
tightenings and piecewise-linear constraints) and hands it to an
off-the-shelf solver, so case splits can be checked independently of the
tableau engine.
"""

from __future__ import annotations

import math
from abc import abstractmethod
from typing import TYPE_CHECKING

from pwl_constraints.types import BoundType, CaseSplit, Equation, Status, Tightening

if TYPE_CHECKING:
    from pwl_constraints.constraints.base import PiecewiseLinearConstraint


class BaseEncoder:
    """
    Base class for solver encoders.

    Subclasses should:
    1. Implement solve() to translate the stored query and run the solver
    2. Set self._solution with variable values when SAT

    Attributes:
        time_limit: Time limit in seconds (None for no limit)
        verbose: Verbosity level
        options: Solver-specific options string
    """

    def __init__(
        self,
        time_limit: float | None = None,
        verbose: int = 0,
        options: str = "",
    ):
        self.time_limit = time_limit
        self.verbose = verbose
        self.options = options

        # Bounds per variable id; every variable of the query has an entry
        self.lower_bounds: dict[int, float] = {}
        self.upper_bounds: dict[int, float] = {}

        self.equations: list[Equation] = []
        # Each disjunction is a list of disjuncts; exactly one must hold
        self.disjunctions: list[list[CaseSplit]] = []

        self._solution: dict[int, float] | None = None
        self._status: Status = Status.UNKNOWN

    # ========== Abstract methods to implement ==========

    @abstractmethod
    def solve(self) -> Status:
        """
        Solve the query and return status.

        Should set self._solution with variable values if SAT.
        """
        raise NotImplementedError

    def get_solution(self) -> dict[int, float] | None:
        """Return the solution as {variable: value} dict, or None if no solution."""
        return self._solution

    @property
    def status(self) -> Status:
        return self._status

    # ========== Query building ==========

    def add_variable(
        self, variable: int, lower: float = -math.inf, upper: float = math.inf
    ) -> None:
        """Declare ``variable``, intersecting with any bounds it already has."""
        self._ensure_variable(variable)
        self.lower_bounds[variable] = max(self.lower_bounds[variable], lower)
        self.upper_bounds[variable] = min(self.upper_bounds[variable], upper)
        self._log(2, f"Declared var x{variable} in [{lower}, {upper}]")

    def add_tightening(self, tightening: Tightening) -> None:
        if tightening.type is BoundType.LB:
            self.add_variable(tightening.variable, lower=tightening.value)
        else:
            self.add_variable(tightening.variable, upper=tightening.value)

    def add_equation(self, equation: Equation) -> None:
        for variable in equation.variables():
            self._ensure_variable(variable)
        self.equations.append(equation)
        self._log(2, f"Added equation {equation}")

    def add_case_split(self, split: CaseSplit) -> None:
        for tightening in split.tightenings:
            self.add_tightening(tightening)
        for equation in split.equations:
            self.add_equation(equation)

    def add_constraint(self, constraint: PiecewiseLinearConstraint) -> None:
        """
        Add a piecewise-linear constraint through its currently valid splits.

        Tightenings shared by every split are asserted unconditionally; a
        single remaining split is asserted directly.
        """
        splits = constraint.get_case_splits()
        if not splits:
            raise ValueError(f"{constraint!r} has no valid case splits")

        common = [
            t for t in splits[0].tightenings
            if all(t in split.tightenings for split in splits[1:])
        ]
        for tightening in common:
            self.add_tightening(tightening)

        residual = [
            CaseSplit(
                tightenings=tuple(t for t in split.tightenings if t not in common),
                equations=split.equations,
            )
            for split in splits
        ]
        if len(residual) == 1:
            self.add_case_split(residual[0])
        else:
            for split in residual:
                for tightening in split.tightenings:
                    self._ensure_variable(tightening.variable)
                for equation in split.equations:
                    for variable in equation.variables():
                        self._ensure_variable(variable)
            self.disjunctions.append(residual)
        self._log(2, f"Added constraint {constraint!r} with {len(residual)} split(s)")

    # ========== Utility methods ==========

    def _ensure_variable(self, variable: int) -> None:
        if variable not in self.lower_bounds:
            self.lower_bounds[variable] = -math.inf
            self.upper_bounds[variable] = math.inf

    def _bounds_conflict(self) -> bool:
        return any(
            self.lower_bounds[v] > self.upper_bounds[v] for v in self.lower_bounds
        )

    def _log(self, level: int, msg: str) -> None:
        """Log message if verbosity is high enough."""
        if self.verbose >= level:
            print(msg)
