"""
OR-Tools MILP backend for pwl-constraints.

Encodes the query as a mixed-integer linear program: one binary per
disjunct, exactly one selected, and every disjunct's rows relaxed by a
big-M derived from the variable bounds. Variables that appear in a
disjunction therefore need finite bounds.
"""

from __future__ import annotations

from ortools.linear_solver import pywraplp

from pwl_constraints import float_utils
from pwl_constraints.backends.base import BaseEncoder
from pwl_constraints.types import BoundType, CaseSplit, Equation, Status, Tightening


class ORToolsEncoder(BaseEncoder):
    """
    OR-Tools linear solver backend.

    ``options`` names the underlying MILP engine (default "SCIP").
    """

    def __init__(
        self,
        time_limit: float | None = None,
        verbose: int = 0,
        options: str = "",
    ):
        super().__init__(time_limit, verbose, options)
        self.engine = options or "SCIP"
        self.solver: pywraplp.Solver | None = None
        self.vars: dict[int, pywraplp.Variable] = {}

    # ========== Translation ==========

    def _build_model(self) -> None:
        solver = pywraplp.Solver.CreateSolver(self.engine)
        if solver is None:
            raise ValueError(f"OR-Tools engine '{self.engine}' is not available")
        self.solver = solver
        infinity = solver.infinity()

        self.vars = {}
        for variable in sorted(self.lower_bounds):
            lower = self.lower_bounds[variable]
            upper = self.upper_bounds[variable]
            self.vars[variable] = solver.NumVar(
                lower if float_utils.is_finite(lower) else -infinity,
                upper if float_utils.is_finite(upper) else infinity,
                f"x{variable}",
            )

        for equation in self.equations:
            solver.Add(self._linear_expr(equation) == equation.scalar)

        for index, disjunction in enumerate(self.disjunctions):
            selectors = [
                solver.BoolVar(f"d{index}_{k}") for k in range(len(disjunction))
            ]
            solver.Add(solver.Sum(selectors) == 1)
            for selector, split in zip(selectors, disjunction):
                self._add_relaxed_split(split, selector)

    def _linear_expr(self, equation: Equation):
        return self.solver.Sum(
            [a.coefficient * self.vars[a.variable] for a in equation.addends]
        )

    def _add_relaxed_split(self, split: CaseSplit, selector) -> None:
        """Add ``split`` so that it is enforced only when ``selector`` is 1."""
        for tightening in split.tightenings:
            self._add_relaxed_tightening(tightening, selector)
        for equation in split.equations:
            self._add_relaxed_equation(equation, selector)

    def _add_relaxed_tightening(self, tightening: Tightening, selector) -> None:
        variable = tightening.variable
        var = self.vars[variable]
        value = tightening.value
        if tightening.type is BoundType.LB:
            lower = self._finite(self.lower_bounds[variable], variable)
            if value <= lower:
                return
            # var - value >= (lower - value) * (1 - selector)
            self.solver.Add(var - value >= (lower - value) * (1 - selector))
        else:
            upper = self._finite(self.upper_bounds[variable], variable)
            if value >= upper:
                return
            self.solver.Add(var - value <= (upper - value) * (1 - selector))

    def _add_relaxed_equation(self, equation: Equation, selector) -> None:
        low, high = self._expression_range(equation)
        expr = self._linear_expr(equation) - equation.scalar
        self.solver.Add(expr <= (high - equation.scalar) * (1 - selector))
        self.solver.Add(expr >= (low - equation.scalar) * (1 - selector))

    def _expression_range(self, equation: Equation) -> tuple[float, float]:
        low = high = 0.0
        for addend in equation.addends:
            lower = self._finite(self.lower_bounds[addend.variable], addend.variable)
            upper = self._finite(self.upper_bounds[addend.variable], addend.variable)
            a, b = addend.coefficient * lower, addend.coefficient * upper
            low += min(a, b)
            high += max(a, b)
        return low, high

    @staticmethod
    def _finite(bound: float, variable: int) -> float:
        if not float_utils.is_finite(bound):
            raise ValueError(
                f"Big-M encoding requires finite bounds on variable x{variable}"
            )
        return bound

    # ========== Solving ==========

    def solve(self) -> Status:
        """Solve the query and return status."""
        if self._bounds_conflict():
            self._log(1, "Variable bounds conflict; skipping OR-Tools solver")
            self._solution = None
            self._status = Status.UNSAT
            return self._status

        self._build_model()

        if self.time_limit is not None:
            self.solver.SetTimeLimit(int(self.time_limit * 1000))
        if self.verbose >= 2:
            self.solver.EnableOutput()

        self._log(1, f"Starting OR-Tools solver ({self.engine})...")
        self._log(1, f"  Variables: {self.solver.NumVariables()}")
        self._log(1, f"  Constraints: {self.solver.NumConstraints()}")

        status = self.solver.Solve()

        if status in (pywraplp.Solver.OPTIMAL, pywraplp.Solver.FEASIBLE):
            self._solution = {
                variable: var.solution_value() for variable, var in self.vars.items()
            }
            self._status = Status.SAT
        elif status == pywraplp.Solver.INFEASIBLE:
            self._solution = None
            self._status = Status.UNSAT
        else:
            self._solution = None
            self._status = Status.UNKNOWN

        self._log(1, f"Solver finished with status: {self._status.value}")
        return self._status
