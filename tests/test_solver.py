"""
Tests for pwl_constraints.solver module.

These tests verify the solve() function including:
- Solver routing and error handling
- Solution feedback into constraints
"""

import math

import pytest
from unittest.mock import patch

from pwl_constraints.backends import get_backend
from pwl_constraints.constraints import ReluConstraint
from pwl_constraints.fresh_variables import VariableAllocator
from pwl_constraints.solver import EXTRA_SOLVERS, SolveResult, solve, supported_solvers
from pwl_constraints.types import Addend, Equation, Status

from conftest import B, F


class TestSupportedSolvers:
    """Test supported_solvers function."""

    def test_returns_sorted_list(self):
        solvers = supported_solvers()
        assert isinstance(solvers, list)
        assert solvers == sorted(solvers)

    def test_includes_extra_solvers(self):
        for extra in EXTRA_SOLVERS:
            assert extra in supported_solvers()


class TestSolveRouting:
    """Test error handling before any solver runs."""

    def test_unknown_solver(self, relu):
        with pytest.raises(ValueError, match="Unknown solver"):
            solve([relu], solver="gurobi")

    def test_unavailable_backend(self, relu):
        with patch("pwl_constraints.solver.get_backend", return_value=None):
            with pytest.raises(ImportError, match="pip install pwl-constraints"):
                solve([relu], solver="z3")


@pytest.mark.skipif(get_backend("z3") is None, reason="Z3 backend not available")
class TestSolveZ3:
    """End-to-end queries through Z3."""

    def test_sat_notifies_constraints(self, relu):
        """On SAT, constraint values are updated and the ReLU holds."""
        result = solve([relu], bounds={B: (-1.0, 1.0), F: (0.5, 1.0)})
        assert isinstance(result, SolveResult)
        assert result.status == Status.SAT
        assert relu.assignment[B] == result.solution[B]
        assert relu.satisfied()

    def test_unsat(self, relu):
        result = solve([relu], bounds={B: (-2.0, -1.0), F: (0.5, 1.0)})
        assert result.status == Status.UNSAT
        assert result.solution is None
        assert relu.assignment == {}

    def test_two_layer_network(self):
        """x in [-1, 1], h = relu(x), y = relu(h - 0.5): y <= 0.5 always."""
        allocator = VariableAllocator(first=10)
        x, pre_h, h, pre_y, y = 0, 1, 2, 3, 4
        relus = [
            ReluConstraint(pre_h, h, allocator),
            ReluConstraint(pre_y, y, allocator),
        ]
        equations = [
            Equation((Addend(1.0, pre_h), Addend(-1.0, x)), 0.0),
            Equation((Addend(1.0, pre_y), Addend(-1.0, h)), -0.5),
        ]
        bounds = {x: (-1.0, 1.0), y: (0.6, math.inf)}

        result = solve(relus, bounds=bounds, equations=equations)
        assert result.status == Status.UNSAT

        bounds[y] = (0.4, math.inf)
        result = solve(relus, bounds=bounds, equations=equations)
        assert result.status == Status.SAT
        assert all(relu.satisfied() for relu in relus)

    def test_verbose(self, relu, capsys):
        solve([relu], bounds={B: (-1.0, 1.0), F: (0.0, 1.0)}, verbose=1)
        assert "Solving with z3" in capsys.readouterr().out
