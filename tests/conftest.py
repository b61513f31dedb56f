"""Shared pytest fixtures for fleet scaling tests."""

from unittest.mock import MagicMock

import pytest

from fleet_scaling.models import WorkerState, Workers, Workload


@pytest.fixture
def make_workload():
    """Build a Workload from a request count and job duration in seconds."""
    def _make(waiting_requests=0, average_job_seconds=60.0):
        return Workload.from_seconds(waiting_requests, average_job_seconds)
    return _make


@pytest.fixture
def make_workers():
    """Build a Workers snapshot from per-state id lists."""
    def _make(initializing=(), running=(), idling=(), stopping=(), failed=()):
        instances = {}
        for ids, state in (
            (initializing, WorkerState.INITIALIZING),
            (running, WorkerState.RUNNING),
            (idling, WorkerState.IDLING),
            (stopping, WorkerState.STOPPING),
            (failed, WorkerState.FAILED),
        ):
            for worker_id in ids:
                instances[worker_id] = state
        return Workers(instances)
    return _make


@pytest.fixture
def redis_client():
    """Mocked Redis client with an empty queue and fleet."""
    client = MagicMock()
    client.xpending.return_value = {"pending": 0}
    client.hgetall.return_value = {}
    client.get.return_value = None
    return client
