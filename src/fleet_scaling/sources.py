"""Redis-backed workload and fleet snapshots, and the resolving action provider."""

import logging
from datetime import timedelta
from typing import Optional

import redis

from fleet_scaling.exceptions import FleetScalingError
from fleet_scaling.interfaces import FleetSource, WorkloadSource
from fleet_scaling.models import NO_ACTION, ScalingAction, WorkerState, Workers, Workload
from fleet_scaling.resolver import ScalingActionResolver

logger = logging.getLogger(__name__)


class RedisWorkloadSource:
    """Reads queued work from a Redis stream consumer group."""

    def __init__(
        self,
        client: redis.Redis,
        stream_name: str,
        consumer_group: str,
        average_job_duration: timedelta,
        duration_key: Optional[str] = None,
    ):
        """Initialize the workload source.

        Args:
            client: Redis client (created with decode_responses=True)
            stream_name: Name of the Redis stream
            consumer_group: Consumer group name
            average_job_duration: Duration used when none is published
            duration_key: Optional key holding the measured average job
                duration in seconds
        """
        self.client = client
        self.stream_name = stream_name
        self.consumer_group = consumer_group
        self.average_job_duration = average_job_duration
        self.duration_key = duration_key

    def get_pending_count(self) -> int:
        """Get the count of pending (unacknowledged) messages."""
        # XPENDING returns dict with 'pending' key in redis-py
        result = self.client.xpending(self.stream_name, self.consumer_group)
        if result and isinstance(result, dict):
            return result.get("pending", 0) or 0
        return 0

    def get_average_job_duration(self) -> timedelta:
        if self.duration_key is None:
            return self.average_job_duration
        value = self.client.get(self.duration_key)
        if value is None:
            return self.average_job_duration
        try:
            seconds = float(value)
        except ValueError:
            logger.warning(f"Ignoring malformed job duration in {self.duration_key}: {value!r}")
            return self.average_job_duration
        if seconds <= 0:
            return self.average_job_duration
        return timedelta(seconds=seconds)

    def get(self) -> Workload:
        return Workload(
            waiting_requests=self.get_pending_count(),
            average_job_duration=self.get_average_job_duration(),
        )


class RedisFleetSource:
    """Reads worker states from a Redis hash of ``worker id -> state``."""

    def __init__(self, client: redis.Redis, key: str):
        self.client = client
        self.key = key

    def get(self) -> Workers:
        instances = {}
        for worker_id, raw_state in self.client.hgetall(self.key).items():
            try:
                instances[worker_id] = WorkerState(raw_state)
            except ValueError:
                logger.warning(f"Worker {worker_id} has unknown state {raw_state!r}, treating as failed")
                instances[worker_id] = WorkerState.FAILED
        return Workers(instances)


class ResolvingActionProvider:
    """Gathers live snapshots and resolves them into a scaling action."""

    def __init__(
        self,
        resolver: ScalingActionResolver,
        workload_source: WorkloadSource,
        fleet_source: FleetSource,
    ):
        self.resolver = resolver
        self.workload_source = workload_source
        self.fleet_source = fleet_source

    def get(self) -> ScalingAction:
        """Resolve the current action, or NO_ACTION if a snapshot is unavailable."""
        try:
            workload = self.workload_source.get()
            workers = self.fleet_source.get()
        except redis.RedisError as e:
            logger.warning(f"Error reading scaling snapshot from Redis: {e}")
            return NO_ACTION
        except FleetScalingError as e:
            logger.warning(f"Invalid scaling snapshot: {e}")
            return NO_ACTION
        return self.resolver.resolve_action(workload, workers)
