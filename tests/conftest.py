"""
Pytest configuration for pwl-constraints tests.

Provides a fresh-variable allocator, a mocked tableau for checking the
calls a constraint makes, and a reference BoundTableau.
"""

from unittest.mock import Mock

import pytest

from pwl_constraints.constraints import AbsoluteValueConstraint, ReluConstraint
from pwl_constraints.fresh_variables import VariableAllocator
from pwl_constraints.tableau import BoundTableau, ITableau

B = 1
F = 2
AUX = 100


@pytest.fixture
def allocator():
    """Allocator whose first fresh id is AUX."""
    return VariableAllocator(first=AUX)


@pytest.fixture
def mock_tableau():
    """Tableau collaborator that records every call."""
    return Mock(spec=ITableau)


@pytest.fixture
def other_tableau():
    """A second, unrelated tableau."""
    return Mock(spec=ITableau)


@pytest.fixture
def relu(allocator):
    """Unregistered ReLU with b=B, f=F."""
    return ReluConstraint(B, F, allocator)


@pytest.fixture
def registered_relu(relu, mock_tableau):
    """ReLU registered with the mock tableau."""
    relu.register_as_watcher(mock_tableau)
    mock_tableau.reset_mock()
    return relu


@pytest.fixture
def abs_constraint(allocator):
    """Unregistered absolute value with b=B, f=F."""
    return AbsoluteValueConstraint(B, F, allocator)


@pytest.fixture
def bound_tableau():
    return BoundTableau()


def assign(constraint, b_value, f_value):
    """Notify values for the constraint's b and f."""
    constraint.notify_variable_value(constraint.b, b_value)
    constraint.notify_variable_value(constraint.f, f_value)
