"""
Main solve() function for pwl-constraints.

Checks a query of variable bounds, linear equations and piecewise-linear
constraints with an external solver backend (Z3, OR-Tools).
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable

from pwl_constraints.backends import get_backend
from pwl_constraints.constraints.base import PiecewiseLinearConstraint
from pwl_constraints.types import Equation, Status

# Solvers implemented by this package
EXTRA_SOLVERS = {"z3", "ortools"}


@dataclass(frozen=True)
class SolveResult:
    status: Status
    solution: dict[int, float] | None = None


def supported_solvers() -> list[str]:
    """Return list of all supported solver names."""
    return sorted(EXTRA_SOLVERS)


def solve(
    constraints: Iterable[PiecewiseLinearConstraint],
    *,
    bounds: dict[int, tuple[float, float]] | None = None,
    equations: Iterable[Equation] = (),
    solver: str = "z3",
    time_limit: float | None = None,
    verbose: int = 0,
    options: str = "",
) -> SolveResult:
    """
    Solve a piecewise-linear query with the specified solver.

    Each constraint contributes its currently valid case splits, so phases
    already fixed by bound notifications are respected.

    Args:
        constraints: Piecewise-linear constraints of the query
        bounds: {variable: (lower, upper)}; use math.inf for no bound
        equations: Linear equations that must hold
        solver: Solver name - "z3" or "ortools"
        time_limit: Time limit in seconds (None for no limit)
        verbose: Verbosity level (0=quiet, 1=normal, 2=detailed)
        options: Solver-specific options string

    Returns:
        SolveResult with status SAT, UNSAT or UNKNOWN and the solution if SAT.
        On SAT every constraint is notified of its participating variables'
        values, so constraint.satisfied() can be queried afterwards.

    Example:
        allocator = VariableAllocator(first=2)
        relu = ReluConstraint(0, 1, allocator)
        result = solve([relu], bounds={0: (-1, 1), 1: (0.5, 1)})
        if result.status == Status.SAT:
            print(result.solution[0], result.solution[1])
    """
    solver_lower = solver.lower()
    if solver_lower not in EXTRA_SOLVERS:
        raise ValueError(
            f"Unknown solver: {solver}. Supported solvers: {supported_solvers()}"
        )

    backend_class = get_backend(solver_lower)
    if backend_class is None:
        raise ImportError(
            f"Backend '{solver}' is not available. "
            f"Install the required package: pip install pwl-constraints[{solver_lower}]"
        )

    constraints = list(constraints)
    encoder = backend_class(time_limit=time_limit, verbose=verbose, options=options)

    for variable, (lower, upper) in (bounds or {}).items():
        encoder.add_variable(variable, lower, upper)
    for equation in equations:
        encoder.add_equation(equation)
    for constraint in constraints:
        encoder.add_constraint(constraint)

    if verbose > 0:
        print(f"Solving with {solver_lower}...")

    status = encoder.solve()
    solution = encoder.get_solution() if status == Status.SAT else None

    if solution is not None:
        _notify_solution(constraints, solution)

    return SolveResult(status, solution)


def _notify_solution(
    constraints: list[PiecewiseLinearConstraint], solution: dict[int, float]
) -> None:
    """Push solution values into the constraints that watch them."""
    for constraint in constraints:
        for variable in constraint.get_participating_variables():
            if variable in solution:
                constraint.notify_variable_value(variable, solution[variable])
