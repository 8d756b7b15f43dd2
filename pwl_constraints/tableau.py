"""
Tableau-side interfaces consumed by piecewise-linear constraints.

ITableau is the contract a constraint talks to. BoundTableau is a
reference implementation that keeps bounds and values per variable and
dispatches watcher notifications; it performs no pivoting.

Notifications are synchronous and reentrant: a constraint may call
apply_split() from inside notify_lower_bound()/notify_upper_bound(),
while the tableau is still propagating the bound that triggered it.
"""

from __future__ import annotations

import math
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

from pwl_constraints import float_utils
from pwl_constraints.errors import ensure
from pwl_constraints.types import BoundType, CaseSplit, Equation, Tightening

if TYPE_CHECKING:
    from pwl_constraints.constraints.base import PiecewiseLinearConstraint


class ITableau(ABC):
    @abstractmethod
    def register_to_watch_variable(
        self, constraint: PiecewiseLinearConstraint, variable: int
    ) -> None:
        raise NotImplementedError

    @abstractmethod
    def unregister_to_watch_variable(
        self, constraint: PiecewiseLinearConstraint, variable: int
    ) -> None:
        raise NotImplementedError

    @abstractmethod
    def apply_split(self, split: CaseSplit) -> None:
        """Incorporate a split's tightenings and equations. Must tolerate re-entry."""
        raise NotImplementedError


class WatcherRegistry:
    """Keyed variable -> constraints lookup used for notification dispatch."""

    def __init__(self):
        self._by_variable: dict[int, list[PiecewiseLinearConstraint]] = {}

    def watch(self, constraint: PiecewiseLinearConstraint, variable: int) -> None:
        watchers = self._by_variable.setdefault(variable, [])
        if constraint not in watchers:
            watchers.append(constraint)

    def unwatch(self, constraint: PiecewiseLinearConstraint, variable: int) -> None:
        watchers = self._by_variable.get(variable, [])
        ensure(
            constraint in watchers,
            f"Constraint {constraint!r} is not watching variable {variable}",
        )
        watchers.remove(constraint)
        if not watchers:
            del self._by_variable[variable]

    def watchers(self, variable: int) -> list[PiecewiseLinearConstraint]:
        return list(self._by_variable.get(variable, ()))

    def watched_variables(self, constraint: PiecewiseLinearConstraint) -> set[int]:
        return {v for v, watchers in self._by_variable.items() if constraint in watchers}

    def __len__(self) -> int:
        return sum(len(watchers) for watchers in self._by_variable.values())


class BoundTableau(ITableau):
    """
    Bound and assignment store with watcher dispatch.

    Watchers are only notified on a strict tightening, which is what makes
    reentrant apply_split() calls terminate.
    """

    def __init__(self, verbose: int = 0, epsilon: float = float_utils.DEFAULT_EPSILON):
        self.verbose = verbose
        self.epsilon = epsilon
        self.watchers = WatcherRegistry()

        self._lower_bounds: dict[int, float] = {}
        self._upper_bounds: dict[int, float] = {}
        self._equations: list[Equation] = []
        self._applied_splits: list[CaseSplit] = []

    # ========== ITableau ==========

    def register_to_watch_variable(
        self, constraint: PiecewiseLinearConstraint, variable: int
    ) -> None:
        self.watchers.watch(constraint, variable)

    def unregister_to_watch_variable(
        self, constraint: PiecewiseLinearConstraint, variable: int
    ) -> None:
        self.watchers.unwatch(constraint, variable)

    def apply_split(self, split: CaseSplit) -> None:
        self._applied_splits.append(split)
        self._log(1, f"Applying case split {split}")

        for equation in split.equations:
            if equation not in self._equations:
                self._equations.append(equation)
                self._log(2, f"  Added equation {equation}")

        for tightening in split.tightenings:
            self.apply_tightening(tightening)

    # ========== Bounds and values ==========

    def apply_tightening(self, tightening: Tightening) -> bool:
        if tightening.type is BoundType.LB:
            return self.tighten_lower_bound(tightening.variable, tightening.value)
        return self.tighten_upper_bound(tightening.variable, tightening.value)

    def tighten_lower_bound(self, variable: int, value: float) -> bool:
        if value <= self.get_lower_bound(variable):
            return False
        self._lower_bounds[variable] = value
        self._log(2, f"  x{variable} >= {value}")
        for constraint in self.watchers.watchers(variable):
            constraint.notify_lower_bound(variable, value)
        return True

    def tighten_upper_bound(self, variable: int, value: float) -> bool:
        if value >= self.get_upper_bound(variable):
            return False
        self._upper_bounds[variable] = value
        self._log(2, f"  x{variable} <= {value}")
        for constraint in self.watchers.watchers(variable):
            constraint.notify_upper_bound(variable, value)
        return True

    def set_value(self, variable: int, value: float) -> None:
        """Push an assignment change to the watchers of ``variable``."""
        for constraint in self.watchers.watchers(variable):
            constraint.notify_variable_value(variable, value)

    def get_lower_bound(self, variable: int) -> float:
        return self._lower_bounds.get(variable, -math.inf)

    def get_upper_bound(self, variable: int) -> float:
        return self._upper_bounds.get(variable, math.inf)

    def bounds_consistent(self) -> bool:
        """Return False if some variable's lower bound exceeds its upper bound."""
        for variable, lower in self._lower_bounds.items():
            if float_utils.gt(lower, self.get_upper_bound(variable), self.epsilon):
                return False
        return True

    @property
    def equations(self) -> list[Equation]:
        return list(self._equations)

    @property
    def applied_splits(self) -> list[CaseSplit]:
        return list(self._applied_splits)

    def _log(self, level: int, msg: str) -> None:
        """Log message if verbosity is high enough."""
        if self.verbose >= level:
            print(msg)
