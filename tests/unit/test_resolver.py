"""Unit tests for ScalingActionResolver."""

from datetime import timedelta

import pytest

from fleet_scaling.exceptions import ConfigError
from fleet_scaling.models import NO_ACTION, TARGET_DURATION, ScaleDown, ScaleUp, Workers
from fleet_scaling.resolver import ScalingActionResolver


@pytest.fixture
def resolver():
    """Resolver with the default one minute target."""
    return ScalingActionResolver()


class TestRequiredWorkers:
    """Tests for the required worker count calculation."""

    def test_default_target_is_one_minute(self, resolver):
        """Test the default target duration."""
        assert resolver.target_duration == TARGET_DURATION == timedelta(seconds=60)

    def test_empty_queue_needs_no_workers(self, resolver, make_workload):
        """Test that zero waiting requests need zero workers."""
        assert resolver.required_workers(make_workload(0, 10)) == 0

    def test_remainder_rounds_up(self, resolver, make_workload):
        """Test that one 61s job needs two workers to finish within a minute.

        total = 61s, 61 // 60 = 1, remainder -> 2
        """
        assert resolver.required_workers(make_workload(1, 61)) == 2

    @pytest.mark.parametrize(
        "waiting, seconds, expected",
        [
            (1, 60, 1),
            (2, 30, 1),
            (3, 30, 2),
            (10, 30, 5),
            (7, 45, 6),
            (120, 0.5, 1),
            (121, 0.5, 2),
            (1, 1, 1),
        ],
    )
    def test_ceiling_of_total_time_over_target(self, resolver, make_workload, waiting, seconds, expected):
        """Test required = ceil(waiting * duration / 60s)."""
        assert resolver.required_workers(make_workload(waiting, seconds)) == expected

    def test_custom_target_duration(self, make_workload):
        """Test that a shorter target needs more workers."""
        resolver = ScalingActionResolver(timedelta(seconds=30))
        assert resolver.required_workers(make_workload(2, 30)) == 2

    def test_non_positive_target_rejected(self):
        """Test that the target duration must be positive."""
        with pytest.raises(ConfigError):
            ScalingActionResolver(timedelta(0))


class TestResolveAction:
    """Tests for resolve_action decisions."""

    def test_scale_up_for_shortfall(self, resolver, make_workload, make_workers):
        """Test 10 x 30s with three active workers scales up by two."""
        workers = make_workers(running=["w1"], idling=["w2", "w3"])
        action = resolver.resolve_action(make_workload(10, 30), workers)
        assert action == ScaleUp(2)

    def test_scale_down_all_idle_on_empty_queue(self, resolver, make_workload, make_workers):
        """Test an empty queue stops every idle worker in ascending id order."""
        workers = make_workers(idling=["w2", "w1"])
        action = resolver.resolve_action(make_workload(0, 10), workers)
        assert action == ScaleDown(("w1", "w2"))

    def test_no_action_when_balanced(self, resolver, make_workload, make_workers):
        """Test that a fleet matching the requirement needs no action."""
        workers = make_workers(running=[1, 2])
        assert resolver.resolve_action(make_workload(2, 60), workers) is NO_ACTION

    def test_scale_up_from_empty_fleet(self, resolver, make_workload):
        """Test that an empty fleet scales up to the full requirement."""
        action = resolver.resolve_action(make_workload(3, 60), Workers())
        assert action == ScaleUp(3)

    def test_empty_queue_and_empty_fleet(self, resolver, make_workload):
        """Test that nothing to do and nobody to do it is balanced."""
        assert resolver.resolve_action(make_workload(0, 60), Workers()) is NO_ACTION

    def test_scale_down_selects_only_idle_workers(self, resolver, make_workload, make_workers):
        """Test that running and initializing workers are never stopped."""
        workers = make_workers(initializing=[1], running=[2], idling=[3])
        action = resolver.resolve_action(make_workload(0, 60), workers)
        assert action == ScaleDown((3,))

    def test_scale_down_bounded_by_diff(self, resolver, make_workload, make_workers):
        """Test that no more than the surplus is stopped.

        required = 2, active = 5 -> stop the three lowest idle ids
        """
        workers = make_workers(idling=[5, 4, 3, 2, 1])
        action = resolver.resolve_action(make_workload(2, 60), workers)
        assert action == ScaleDown((1, 2, 3))

    def test_scale_down_without_idle_workers_is_no_action(self, resolver, make_workload, make_workers):
        """Test that busy workers are left alone even when over capacity."""
        workers = make_workers(running=[1, 2], initializing=[3])
        assert resolver.resolve_action(make_workload(0, 60), workers) is NO_ACTION

    def test_stopping_and_failed_not_counted(self, resolver, make_workload, make_workers):
        """Test that leaving and failed workers do not count as capacity."""
        workers = make_workers(stopping=[1], failed=[2])
        action = resolver.resolve_action(make_workload(1, 60), workers)
        assert action == ScaleUp(1)

    def test_stopping_workers_never_selected(self, resolver, make_workload, make_workers):
        """Test that non-idle workers are excluded from scale-down selection."""
        workers = make_workers(idling=["b"], stopping=["a"], failed=["c"], running=["d"])
        action = resolver.resolve_action(make_workload(0, 60), workers)
        assert action == ScaleDown(("b",))

    def test_resolution_is_deterministic(self, resolver, make_workload, make_workers):
        """Test that the same snapshot always yields the same action."""
        workers = make_workers(idling=["w3", "w1", "w2"], running=["w0"])
        workload = make_workload(1, 30)
        first = resolver.resolve_action(workload, workers)
        assert first == ScaleDown(("w1", "w2", "w3"))
        assert resolver.resolve_action(workload, workers) == first


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
