from __future__ import annotations

from pwl_constraints import float_utils
from pwl_constraints.constraints.base import PiecewiseLinearConstraint
from pwl_constraints.errors import ensure
from pwl_constraints.fresh_variables import VariableAllocator
from pwl_constraints.types import Addend, BoundType, CaseSplit, Equation, Fix, Tightening


class AbsoluteValueConstraint(PiecewiseLinearConstraint):
    """
    Absolute value ``f = |b|``.

    Phases:
    - positive: b >= 0, b - f + aux = 0
    - negative: b <= 0, b + f + aux = 0
    with ``aux`` pinned to 0 in both.
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
            raise ValueError(f"Absolute value input and output must differ, got b = f = {b}")
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

        positive = CaseSplit(
            tightenings=(Tightening(b, 0.0, BoundType.LB),) + aux_bounds,
            equations=(
                Equation(
                    (Addend(1.0, b), Addend(-1.0, f), Addend(1.0, self.aux)),
                    0.0,
                    auxiliary=self.aux,
                ),
            ),
        )
        negative = CaseSplit(
            tightenings=(Tightening(b, 0.0, BoundType.UB),) + aux_bounds,
            equations=(
                Equation(
                    (Addend(1.0, b), Addend(1.0, f), Addend(1.0, self.aux)),
                    0.0,
                    auxiliary=self.aux,
                ),
            ),
        )

        self._splits = (positive, negative)
        self._valid_splits = [positive, negative]

    @property
    def positive_split(self) -> CaseSplit:
        return self._splits[0]

    @property
    def negative_split(self) -> CaseSplit:
        return self._splits[1]

    def get_participating_variables(self) -> list[int]:
        return [self.b, self.f]

    def _phase_forced_by_lower_bound(self, variable: int, bound: float) -> CaseSplit | None:
        if variable == self.b and float_utils.is_positive(bound, self.epsilon):
            return self.positive_split
        return None

    def _phase_forced_by_upper_bound(self, variable: int, bound: float) -> CaseSplit | None:
        if variable == self.b and float_utils.is_negative(bound, self.epsilon):
            return self.negative_split
        return None

    def satisfied(self) -> bool:
        b_value, f_value = self._participating_values()
        ensure(
            not float_utils.is_negative(f_value, self.epsilon),
            f"{self!r}: output x{self.f} is negative ({f_value})",
        )
        return float_utils.are_equal(abs(b_value), f_value, self.epsilon)

    def get_possible_fixes(self) -> list[Fix]:
        b_value, f_value = self._participating_values()
        ensure(not self.satisfied(), f"{self!r}: fixes requested while satisfied")

        if float_utils.is_positive(b_value, self.epsilon):
            return [Fix(self.b, f_value), Fix(self.f, b_value)]
        if float_utils.is_negative(b_value, self.epsilon):
            return [Fix(self.b, -f_value), Fix(self.f, -b_value)]
        # b is zero, so f must be positive
        return [Fix(self.b, f_value), Fix(self.f, 0.0)]

    def __repr__(self) -> str:
        return f"AbsoluteValueConstraint(b={self.b}, f={self.f})"
