"""
Base class for piecewise-linear constraints.

A piecewise-linear constraint relates tableau variables through a finite
set of mutually exclusive linear phases (case splits). The tableau pushes
values and bounds into it; the search driver polls satisfied(), asks for
get_possible_fixes() to repair locally, and falls back to branching on
get_case_splits().
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

from pwl_constraints import float_utils
from pwl_constraints.errors import MissingAssignmentError, ensure
from pwl_constraints.types import CaseSplit, Fix

if TYPE_CHECKING:
    from pwl_constraints.tableau import ITableau


class PiecewiseLinearConstraint(ABC):
    """
    Base class for piecewise-linear constraints.

    Subclasses should:
    1. Build every case split once in __init__ and store them in
       self._splits / self._valid_splits
    2. Implement get_participating_variables()
    3. Override _phase_forced_by_lower_bound / _phase_forced_by_upper_bound
       to prune phases from bounds
    4. Implement satisfied() and get_possible_fixes()

    Attributes:
        assignment: Last notified value per watched variable
        lower_bounds: Last notified lower bound per watched variable
        upper_bounds: Last notified upper bound per watched variable
        verbose: Verbosity level
        epsilon: Tolerance for float comparisons
    """

    def __init__(self, verbose: int = 0, epsilon: float = float_utils.DEFAULT_EPSILON):
        self.verbose = verbose
        self.epsilon = epsilon

        self.assignment: dict[int, float] = {}
        self.lower_bounds: dict[int, float] = {}
        self.upper_bounds: dict[int, float] = {}

        self._tableau: ITableau | None = None
        self._splits: tuple[CaseSplit, ...] = ()
        self._valid_splits: list[CaseSplit] = []

    # ========== Abstract methods to implement ==========

    @abstractmethod
    def get_participating_variables(self) -> list[int]:
        raise NotImplementedError

    @abstractmethod
    def satisfied(self) -> bool:
        """Raise MissingAssignmentError if a participating variable has no value."""
        raise NotImplementedError

    @abstractmethod
    def get_possible_fixes(self) -> list[Fix]:
        """Ordered single-variable repairs. Only valid while not satisfied()."""
        raise NotImplementedError

    # ========== Watcher registration ==========

    @property
    def tableau(self) -> ITableau | None:
        return self._tableau

    def register_as_watcher(self, tableau: ITableau) -> None:
        ensure(
            self._tableau is None or self._tableau is tableau,
            f"{self!r} is already registered with another tableau",
        )
        self._tableau = tableau
        for variable in self.get_participating_variables():
            tableau.register_to_watch_variable(self, variable)

    def unregister_as_watcher(self, tableau: ITableau) -> None:
        ensure(
            self._tableau is tableau,
            f"{self!r} is not registered with the tableau it is unregistering from",
        )
        for variable in self.get_participating_variables():
            tableau.unregister_to_watch_variable(self, variable)
        self._tableau = None

    # ========== Notifications ==========

    def notify_variable_value(self, variable: int, value: float) -> None:
        self.assignment[variable] = value

    def notify_lower_bound(self, variable: int, bound: float) -> None:
        self.lower_bounds[variable] = bound
        phase = self._phase_forced_by_lower_bound(variable, bound)
        if phase is not None:
            self._fix_phase(phase)

    def notify_upper_bound(self, variable: int, bound: float) -> None:
        self.upper_bounds[variable] = bound
        phase = self._phase_forced_by_upper_bound(variable, bound)
        if phase is not None:
            self._fix_phase(phase)

    def _phase_forced_by_lower_bound(self, variable: int, bound: float) -> CaseSplit | None:
        return None

    def _phase_forced_by_upper_bound(self, variable: int, bound: float) -> CaseSplit | None:
        return None

    # ========== Queries ==========

    def participating_variable(self, variable: int) -> bool:
        return variable in self.get_participating_variables()

    def get_case_splits(self) -> list[CaseSplit]:
        return list(self._valid_splits)

    @property
    def splits(self) -> tuple[CaseSplit, ...]:
        """Every phase of the constraint, including excluded ones."""
        return self._splits

    def phase_fixed(self) -> bool:
        return len(self._valid_splits) == 1

    # ========== Phase bookkeeping ==========

    def _fix_phase(self, split: CaseSplit) -> None:
        """Commit to ``split`` and push it into the tableau. Never re-expands."""
        ensure(split in self._splits, f"{self!r} does not own split {split}")

        if self._valid_splits == [split]:
            return
        if split not in self._valid_splits:
            # Already committed to another phase; the tableau's bounds now
            # conflict and the driver reports the infeasibility.
            self._log(2, f"{self!r}: bound forces excluded phase {split}, ignored")
            return

        ensure(self._tableau is not None, f"{self!r} fixed a phase while unregistered")
        self._narrow([split])
        self._log(1, f"{self!r}: phase fixed to {split}")
        self._tableau.apply_split(split)

    def _narrow(self, splits: list[CaseSplit]) -> None:
        ensure(
            all(split in self._valid_splits for split in splits),
            f"{self!r}: valid splits may only shrink",
        )
        self._valid_splits = list(splits)

    # ========== Utility methods ==========

    def _participating_values(self) -> list[float]:
        """Values of get_participating_variables(), in order."""
        missing = [v for v in self.get_participating_variables() if v not in self.assignment]
        if missing:
            raise MissingAssignmentError(
                f"{self!r}: no value notified for variable(s) {missing}"
            )
        return [self.assignment[v] for v in self.get_participating_variables()]

    def _log(self, level: int, msg: str) -> None:
        """Log message if verbosity is high enough."""
        if self.verbose >= level:
            print(msg)
