"""
Z3 SMT solver backend for pwl-constraints.

Encodes the query over real arithmetic; a disjunction of case splits
becomes ``Or(And(split_1), ..., And(split_n))``.
"""

from __future__ import annotations

from z3 import (
    And,
    ArithRef,
    BoolRef,
    Or,
    Real,
    Solver,
    Sum,
    is_algebraic_value,
    is_rational_value,
    sat,
    unsat,
)

from pwl_constraints import float_utils
from pwl_constraints.backends.base import BaseEncoder
from pwl_constraints.types import BoundType, CaseSplit, Equation, Status, Tightening


class Z3Encoder(BaseEncoder):
    """Z3 backend: exact rational arithmetic, no bounds required."""

    def __init__(
        self,
        time_limit: float | None = None,
        verbose: int = 0,
        options: str = "",
    ):
        super().__init__(time_limit, verbose, options)
        self.vars: dict[int, ArithRef] = {}

    # ========== Translation ==========

    def _var(self, variable: int) -> ArithRef:
        if variable not in self.vars:
            self.vars[variable] = Real(f"x{variable}")
        return self.vars[variable]

    def _translate_tightening(self, tightening: Tightening) -> BoolRef:
        var = self._var(tightening.variable)
        if tightening.type is BoundType.LB:
            return var >= tightening.value
        return var <= tightening.value

    def _translate_equation(self, equation: Equation) -> BoolRef:
        terms = [a.coefficient * self._var(a.variable) for a in equation.addends]
        return Sum(terms) == equation.scalar

    def _translate_split(self, split: CaseSplit) -> BoolRef:
        parts = [self._translate_tightening(t) for t in split.tightenings]
        parts.extend(self._translate_equation(e) for e in split.equations)
        return And(parts)

    def _build_constraints(self) -> list[BoolRef]:
        constraints: list[BoolRef] = []
        for variable in sorted(self.lower_bounds):
            var = self._var(variable)
            if float_utils.is_finite(self.lower_bounds[variable]):
                constraints.append(var >= self.lower_bounds[variable])
            if float_utils.is_finite(self.upper_bounds[variable]):
                constraints.append(var <= self.upper_bounds[variable])
        for equation in self.equations:
            constraints.append(self._translate_equation(equation))
        for disjunction in self.disjunctions:
            constraints.append(Or([self._translate_split(split) for split in disjunction]))
        return constraints

    # ========== Solving ==========

    def solve(self) -> Status:
        """Solve the query and return status."""
        solver = Solver()
        constraints = self._build_constraints()
        for constraint in constraints:
            solver.add(constraint)

        if self.time_limit is not None:
            solver.set("timeout", int(self.time_limit * 1000))

        self._log(1, "Starting Z3 solver...")
        self._log(1, f"  Variables: {len(self.vars)}")
        self._log(1, f"  Constraints: {len(constraints)} ({len(self.disjunctions)} disjunctive)")

        result = solver.check()

        if result == sat:
            model = solver.model()
            self._solution = {
                variable: self._to_float(model.eval(var, model_completion=True))
                for variable, var in self.vars.items()
            }
            self._status = Status.SAT
        elif result == unsat:
            self._solution = None
            self._status = Status.UNSAT
        else:
            self._solution = None
            self._status = Status.UNKNOWN

        self._log(1, f"Solver finished: {self._status.value}")
        return self._status

    @staticmethod
    def _to_float(value) -> float:
        if is_rational_value(value):
            return float(value.as_fraction())
        if is_algebraic_value(value):
            return float(value.approx(20).as_fraction())
        raise ValueError(f"Cannot convert Z3 value {value} to float")
