"""
Rectified-linear constraint ``f = max(0, b)``.
"""

from __future__ import annotations

from pwl_constraints import float_utils
from pwl_constraints.constraints.base import PiecewiseLinearConstraint
from pwl_constraints.errors import ensure
from pwl_constraints.fresh_variables import VariableAllocator
from pwl_constraints.types import Addend, BoundType, CaseSplit, Equation, Fix, Tightening


class ReluConstraint(PiecewiseLinearConstraint):
    """
    ReLU between an input variable ``b`` and an output variable ``f``.

    Two phases, built once:
    - active:   b >= 0, b - f + aux = 0
    - inactive: b <= 0, f + aux = 0
    where ``aux`` is a fresh variable pinned to 0 in both phases, so each
    phase equation carries an eliminable auxiliary addend.
    """

    def __init__(
        self,
        b: int,
        f: int,
        allocator: VariableAllocator,
        verbose: int = 0,
        epsilon: float = float_utils.DEFAULT_EPSILON,
    ):
        if b == f:
            raise ValueError(f"ReLU input and output must differ, got b = f = {b}")
        super().__init__(verbose, epsilon)
        self.b = b
        self.f = f
        self.aux = allocator.get_next_variable()
        ensure(
            self.aux not in (b, f),
            f"Fresh variable x{self.aux} collides with an input or output; "
            "start the allocator past the model variables",
        )

        aux_bounds = (
            Tightening(self.aux, 0.0, BoundType.UB),
            Tightening(self.aux, 0.0, BoundType.LB),
        )

        active = CaseSplit(
            tightenings=(Tightening(b, 0.0, BoundType.LB),) + aux_bounds,
            equations=(
                Equation(
                    (Addend(1.0, b), Addend(-1.0, f), Addend(1.0, self.aux)),
                    0.0,
                    auxiliary=self.aux,
                ),
            ),
        )
        inactive = CaseSplit(
            tightenings=(Tightening(b, 0.0, BoundType.UB),) + aux_bounds,
            equations=(
                Equation((Addend(1.0, f), Addend(1.0, self.aux)), 0.0, auxiliary=self.aux),
            ),
        )

        self._splits = (active, inactive)
        self._valid_splits = [active, inactive]

    @property
    def active_split(self) -> CaseSplit:
        return self._splits[0]

    @property
    def inactive_split(self) -> CaseSplit:
        return self._splits[1]

    def get_participating_variables(self) -> list[int]:
        return [self.b, self.f]

    def _phase_forced_by_lower_bound(self, variable: int, bound: float) -> CaseSplit | None:
        if variable in (self.b, self.f) and float_utils.is_positive(bound, self.epsilon):
            return self.active_split
        return None

    def _phase_forced_by_upper_bound(self, variable: int, bound: float) -> CaseSplit | None:
        # Only f is checked; a non-positive upper bound on b is left to
        # bound propagation elsewhere.
        if variable == self.f and float_utils.is_negative(bound, self.epsilon):
            return self.inactive_split
        return None

    def satisfied(self) -> bool:
        b_value, f_value = self._participating_values()
        ensure(
            not float_utils.is_negative(f_value, self.epsilon),
            f"{self!r}: output x{self.f} is negative ({f_value})",
        )

        if float_utils.is_positive(f_value, self.epsilon):
            return float_utils.are_equal(b_value, f_value, self.epsilon)
        return not float_utils.is_positive(b_value, self.epsilon)

    def get_possible_fixes(self) -> list[Fix]:
        b_value, f_value = self._participating_values()
        ensure(not self.satisfied(), f"{self!r}: fixes requested while satisfied")

        # Possible violations:
        #   1. f positive, b positive, b != f
        #   2. f positive, b non-positive
        #   3. f zero, b positive
        if float_utils.is_positive(f_value, self.epsilon):
            if float_utils.is_positive(b_value, self.epsilon):
                return [Fix(self.b, f_value), Fix(self.f, b_value)]
            return [Fix(self.b, f_value), Fix(self.f, 0.0)]
        return [Fix(self.b, 0.0), Fix(self.f, b_value)]

    def __repr__(self) -> str:
        return f"ReluConstraint(b={self.b}, f={self.f})"
