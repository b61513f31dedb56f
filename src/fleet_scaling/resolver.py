"""Resolve the scaling action that keeps queued work within the target duration."""

import logging
from datetime import timedelta

from fleet_scaling.exceptions import ConfigError
from fleet_scaling.models import (
    NO_ACTION,
    TARGET_DURATION,
    ScaleDown,
    ScaleUp,
    ScalingAction,
    Workers,
    Workload,
)

logger = logging.getLogger(__name__)


class ScalingActionResolver:
    """Computes a scaling action from a workload and fleet snapshot.

    The aim is to have enough workers that every waiting request completes
    within ``target_duration``. The resolver keeps no state between calls.
    """

    def __init__(self, target_duration: timedelta = TARGET_DURATION):
        if target_duration <= timedelta(0):
            raise ConfigError("target_duration must be positive")
        self.target_duration = target_duration

    def resolve_action(self, workload: Workload, workers: Workers) -> ScalingAction:
        """Resolve the action for one control cycle.

        Args:
            workload: Current queued work
            workers: Current fleet snapshot

        Returns:
            NO_ACTION, ScaleUp or ScaleDown
        """
        required = self.required_workers(workload)
        active = self.count_active(workers)
        diff = abs(required - active)

        if required < active:
            action = self._resolve_scale_down(diff, workers)
        elif active < required:
            action = ScaleUp(diff)
        else:
            action = NO_ACTION

        logger.debug(
            f"Resolved {action.name}: pending={workload.waiting_requests}, "
            f"required={required}, active={active}"
        )
        return action

    def required_workers(self, workload: Workload) -> int:
        """Number of workers needed to drain the queue within the target duration.

        Rounds up so the fleet is never sized below the target.
        """
        total_time_required = workload.average_job_duration * workload.waiting_requests
        fully_loaded_workers = total_time_required // self.target_duration
        if self.target_duration * fully_loaded_workers < total_time_required:
            return fully_loaded_workers + 1
        return fully_loaded_workers

    def count_active(self, workers: Workers) -> int:
        return workers.active_count()

    def _resolve_scale_down(self, max_shutdown_count: int, workers: Workers) -> ScalingAction:
        # Only idle workers are stopped; busy or starting ones are left alone.
        to_shutdown = workers.idle_ids()[:max_shutdown_count]
        if not to_shutdown:
            return NO_ACTION
        return ScaleDown(tuple(to_shutdown))
