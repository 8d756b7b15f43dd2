"""
Tests for pwl_constraints.tableau module.

These tests verify:
- WatcherRegistry bookkeeping and symmetry
- BoundTableau bound/value dispatch
- Reentrant apply_split from constraint notifications
"""

import math

import pytest
from unittest.mock import Mock

from pwl_constraints.constraints import ReluConstraint
from pwl_constraints.errors import InvariantViolation
from pwl_constraints.tableau import BoundTableau, WatcherRegistry
from pwl_constraints.types import BoundType, Tightening

from conftest import AUX, B, F


class TestWatcherRegistry:
    """Test the keyed watcher registry."""

    def test_watch_and_lookup(self):
        registry = WatcherRegistry()
        constraint = Mock()
        registry.watch(constraint, 1)
        registry.watch(constraint, 2)
        assert registry.watchers(1) == [constraint]
        assert registry.watched_variables(constraint) == {1, 2}
        assert len(registry) == 2

    def test_watch_twice_is_single(self):
        """Watching the same pair twice keeps one entry."""
        registry = WatcherRegistry()
        constraint = Mock()
        registry.watch(constraint, 1)
        registry.watch(constraint, 1)
        assert registry.watchers(1) == [constraint]

    def test_unwatch(self):
        registry = WatcherRegistry()
        constraint = Mock()
        registry.watch(constraint, 1)
        registry.unwatch(constraint, 1)
        assert registry.watchers(1) == []
        assert registry.watched_variables(constraint) == set()
        assert len(registry) == 0

    def test_unwatch_unknown_pair(self):
        """Unwatching a pair that was never watched is an invariant violation."""
        registry = WatcherRegistry()
        with pytest.raises(InvariantViolation):
            registry.unwatch(Mock(), 1)

    def test_watchers_returns_copy(self):
        registry = WatcherRegistry()
        constraint = Mock()
        registry.watch(constraint, 1)
        registry.watchers(1).clear()
        assert registry.watchers(1) == [constraint]


class TestBoundTableau:
    """Test bound and value bookkeeping."""

    def test_defaults(self, bound_tableau):
        assert bound_tableau.get_lower_bound(7) == -math.inf
        assert bound_tableau.get_upper_bound(7) == math.inf
        assert bound_tableau.equations == []
        assert bound_tableau.applied_splits == []

    def test_tighten_lower_bound(self, bound_tableau):
        assert bound_tableau.tighten_lower_bound(1, 2.0)
        assert bound_tableau.get_lower_bound(1) == 2.0

    def test_loosening_is_ignored(self, bound_tableau):
        """Only strict tightenings change bounds."""
        bound_tableau.tighten_lower_bound(1, 2.0)
        assert not bound_tableau.tighten_lower_bound(1, 1.0)
        assert not bound_tableau.tighten_lower_bound(1, 2.0)
        assert bound_tableau.get_lower_bound(1) == 2.0

    def test_tighten_upper_bound(self, bound_tableau):
        assert bound_tableau.tighten_upper_bound(1, 2.0)
        assert not bound_tableau.tighten_upper_bound(1, 3.0)
        assert bound_tableau.get_upper_bound(1) == 2.0

    def test_apply_tightening(self, bound_tableau):
        bound_tableau.apply_tightening(Tightening(1, -1.0, BoundType.LB))
        bound_tableau.apply_tightening(Tightening(1, 1.0, BoundType.UB))
        assert bound_tableau.get_lower_bound(1) == -1.0
        assert bound_tableau.get_upper_bound(1) == 1.0

    def test_bounds_consistent(self, bound_tableau):
        bound_tableau.tighten_lower_bound(1, 0.0)
        bound_tableau.tighten_upper_bound(1, 1.0)
        assert bound_tableau.bounds_consistent()
        bound_tableau.tighten_upper_bound(1, -1.0)
        assert not bound_tableau.bounds_consistent()

    def test_dispatch_only_to_watchers(self, bound_tableau):
        """Notifications go to constraints watching the variable."""
        watcher = Mock()
        bound_tableau.register_to_watch_variable(watcher, 1)
        bound_tableau.set_value(1, 4.0)
        bound_tableau.set_value(2, 5.0)
        bound_tableau.tighten_lower_bound(1, -1.0)
        bound_tableau.tighten_upper_bound(1, 9.0)
        watcher.notify_variable_value.assert_called_once_with(1, 4.0)
        watcher.notify_lower_bound.assert_called_once_with(1, -1.0)
        watcher.notify_upper_bound.assert_called_once_with(1, 9.0)

    def test_no_dispatch_without_tightening(self, bound_tableau):
        watcher = Mock()
        bound_tableau.register_to_watch_variable(watcher, 1)
        bound_tableau.tighten_lower_bound(1, 1.0)
        bound_tableau.tighten_lower_bound(1, 0.5)
        watcher.notify_lower_bound.assert_called_once_with(1, 1.0)


class TestReluIntegration:
    """Test a ReLU registered with a BoundTableau."""

    @pytest.fixture
    def wired(self, relu, bound_tableau):
        relu.register_as_watcher(bound_tableau)
        return relu, bound_tableau

    def test_registration_symmetry(self, wired):
        """Register/unregister leave the registry as they found it."""
        relu, tableau = wired
        assert tableau.watchers.watched_variables(relu) == {B, F}
        relu.unregister_as_watcher(tableau)
        assert tableau.watchers.watched_variables(relu) == set()
        assert len(tableau.watchers) == 0

    def test_values_flow_to_constraint(self, wired):
        relu, tableau = wired
        tableau.set_value(B, -1.0)
        tableau.set_value(F, 0.0)
        assert relu.satisfied()

    def test_positive_bound_applies_active_split(self, wired):
        """Tightening b > 0 re-enters the tableau with the active split."""
        relu, tableau = wired
        tableau.tighten_lower_bound(B, 0.5)
        assert tableau.applied_splits == [relu.active_split]
        assert tableau.equations == list(relu.active_split.equations)
        assert tableau.get_lower_bound(AUX) == 0.0
        assert tableau.get_upper_bound(AUX) == 0.0
        # b >= 0 is weaker than the bound already in place
        assert tableau.get_lower_bound(B) == 0.5

    def test_negative_bound_applies_inactive_split(self, wired):
        relu, tableau = wired
        tableau.tighten_upper_bound(F, -0.5)
        assert tableau.applied_splits == [relu.inactive_split]
        assert tableau.get_upper_bound(B) == 0.0

    def test_reentrant_chain_terminates(self, allocator, bound_tableau):
        """A split that tightens another ReLU's input fixes it too."""
        first = ReluConstraint(B, F, allocator)
        second = ReluConstraint(F, 3, allocator)
        first.register_as_watcher(bound_tableau)
        second.register_as_watcher(bound_tableau)

        bound_tableau.tighten_lower_bound(F, 1.0)

        assert first.get_case_splits() == [first.active_split]
        assert second.get_case_splits() == [second.active_split]
        assert bound_tableau.applied_splits == [first.active_split, second.active_split]

    def test_conflicting_bound_surfaces_in_tableau(self, wired):
        """After the active phase is fixed, f < 0 leaves splits alone but breaks bounds."""
        relu, tableau = wired
        tableau.tighten_lower_bound(B, 0.5)
        tableau.tighten_lower_bound(F, 0.5)
        tableau.tighten_upper_bound(F, -0.5)
        assert relu.get_case_splits() == [relu.active_split]
        assert not tableau.bounds_consistent()

    def test_apply_split_deduplicates_equations(self, wired):
        relu, tableau = wired
        tableau.apply_split(relu.active_split)
        tableau.apply_split(relu.active_split)
        assert len(tableau.equations) == 1
        assert len(tableau.applied_splits) == 2

    def test_verbose_logging(self, relu, capsys):
        tableau = BoundTableau(verbose=1)
        relu.register_as_watcher(tableau)
        tableau.tighten_lower_bound(B, 1.0)
        assert "Applying case split" in capsys.readouterr().out
