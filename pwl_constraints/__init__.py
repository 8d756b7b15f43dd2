"""
pwl-constraints: piecewise-linear constraints for Simplex-based verification.

This package provides the piecewise-linear constraint layer of a
Reluplex-style engine: the constraint contract, the ReLU and absolute-value
relations, a reference bound tableau, and encoders that check a query
with Z3 or OR-Tools.

Example usage:
    from pwl_constraints import BoundTableau, ReluConstraint, VariableAllocator

    allocator = VariableAllocator(first=2)
    relu = ReluConstraint(0, 1, allocator)

    tableau = BoundTableau()
    relu.register_as_watcher(tableau)
    tableau.tighten_lower_bound(0, 0.5)   # fixes the active phase

    tableau.set_value(0, 2.0)
    tableau.set_value(1, 3.0)
    if not relu.satisfied():
        print(relu.get_possible_fixes())
"""

from pwl_constraints.backends import get_backend
from pwl_constraints.constraints import (
    AbsoluteValueConstraint,
    PiecewiseLinearConstraint,
    ReluConstraint,
    get_constraint,
)
from pwl_constraints.errors import InvariantViolation, MissingAssignmentError, ReluplexError
from pwl_constraints.fresh_variables import VariableAllocator
from pwl_constraints.solver import SolveResult, solve, supported_solvers
from pwl_constraints.tableau import BoundTableau, ITableau
from pwl_constraints.types import BoundType, CaseSplit, Equation, Fix, Status, Tightening

__version__ = "0.1.0"
__all__ = [
    "solve",
    "supported_solvers",
    "get_backend",
    "get_constraint",
    "SolveResult",
    "PiecewiseLinearConstraint",
    "ReluConstraint",
    "AbsoluteValueConstraint",
    "ITableau",
    "BoundTableau",
    "VariableAllocator",
    "BoundType",
    "Tightening",
    "Equation",
    "CaseSplit",
    "Fix",
    "Status",
    "ReluplexError",
    "MissingAssignmentError",
    "InvariantViolation",
]
