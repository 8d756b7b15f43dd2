"""
Tiny ReLU network query.

    x in [-1, 1]
    h = relu(2x - 1)
    y = relu(1 - h)

Asks whether y can reach --target, first letting the reference tableau
prune phases from the input bounds, then checking the query with a solver
backend.
"""

import argparse

from pwl_constraints import BoundTableau, ReluConstraint, Status, VariableAllocator, solve
from pwl_constraints.types import Addend, Equation


def main() -> None:
    parser = argparse.ArgumentParser(description="ReLU query example.")
    parser.add_argument("--solver", default="z3", help="Solver backend (default: z3)")
    parser.add_argument("--x-min", type=float, default=-1.0, help="Lower bound on x")
    parser.add_argument("--target", type=float, default=0.5, help="Lower bound asked of y")
    parser.add_argument("--verbose", type=int, default=0, help="Verbosity level")
    args = parser.parse_args()

    x, pre_h, h, pre_y, y = range(5)
    allocator = VariableAllocator(first=5)
    relus = [
        ReluConstraint(pre_h, h, allocator, verbose=args.verbose),
        ReluConstraint(pre_y, y, allocator, verbose=args.verbose),
    ]
    equations = [
        Equation((Addend(1.0, pre_h), Addend(-2.0, x)), -1.0),
        Equation((Addend(1.0, pre_y), Addend(1.0, h)), 1.0),
    ]

    # Interval bounds of the pre-activations drive proactive phase pruning
    tableau = BoundTableau(verbose=args.verbose)
    for relu in relus:
        relu.register_as_watcher(tableau)
    tableau.tighten_lower_bound(pre_h, 2 * args.x_min - 1)
    tableau.tighten_upper_bound(pre_h, 1.0)
    tableau.tighten_lower_bound(h, 0.0)
    tableau.tighten_upper_bound(h, 1.0)
    tableau.tighten_lower_bound(pre_y, 0.0)

    for relu in relus:
        phases = "fixed" if relu.phase_fixed() else "open"
        print(f"{relu!r}: {len(relu.get_case_splits())} valid split(s), phase {phases}")

    result = solve(
        relus,
        bounds={x: (args.x_min, 1.0), pre_h: (2 * args.x_min - 1, 1.0), h: (0.0, 1.0),
                pre_y: (0.0, 1.0), y: (args.target, 1.0)},
        equations=equations,
        solver=args.solver,
        verbose=args.verbose,
    )
    print(f"Status: {result.status.value}")
    if result.status == Status.SAT:
        print(f"x = {result.solution[x]}, y = {result.solution[y]}")

    for relu in relus:
        relu.unregister_as_watcher(tableau)


if __name__ == "__main__":
    main()
