"""Data models for fleet scaling."""

import enum
from dataclasses import dataclass, field
from datetime import timedelta
from types import MappingProxyType
from typing import Any, List, Mapping, Tuple, Union

from fleet_scaling.exceptions import InvalidActionError, InvalidWorkloadError

WorkerId = Union[int, str]

# Every queued job should be done within this time given current throughput.
TARGET_DURATION = timedelta(minutes=1)


def worker_id_sort_key(worker_id: WorkerId) -> Tuple[bool, Any]:
    """Ascending id order, integer ids before string ids."""
    return (isinstance(worker_id, str), worker_id)


class WorkerState(enum.Enum):
    """Lifecycle state of a single worker."""

    INITIALIZING = "initializing"
    RUNNING = "running"
    IDLING = "idling"
    STOPPING = "stopping"
    FAILED = "failed"

    @property
    def is_active(self) -> bool:
        """Whether the worker counts toward current capacity."""
        return self in ACTIVE_STATES


ACTIVE_STATES = frozenset(
    {WorkerState.INITIALIZING, WorkerState.RUNNING, WorkerState.IDLING}
)


@dataclass(frozen=True)
class Workload:
    """Amount of queued work at the time of the snapshot."""

    waiting_requests: int
    average_job_duration: timedelta

    def __post_init__(self) -> None:
        if self.waiting_requests < 0:
            raise InvalidWorkloadError(
                f"waiting_requests must be >= 0, got {self.waiting_requests}"
            )
        if self.average_job_duration <= timedelta(0):
            raise InvalidWorkloadError(
                f"average_job_duration must be positive, got {self.average_job_duration}"
            )

    @classmethod
    def from_seconds(cls, waiting_requests: int, average_job_seconds: float) -> "Workload":
        """Create a Workload from an average job duration in seconds."""
        return cls(
            waiting_requests=waiting_requests,
            average_job_duration=timedelta(seconds=average_job_seconds),
        )


@dataclass(frozen=True)
class Workers:
    """Snapshot of the worker fleet, keyed by worker id."""

    instances: Mapping[WorkerId, WorkerState] = field(default_factory=dict)

    def __post_init__(self) -> None:
        instances = {worker_id: WorkerState(state) for worker_id, state in self.instances.items()}
        object.__setattr__(self, "instances", MappingProxyType(instances))

    @classmethod
    def from_dict(cls, data: Mapping[WorkerId, Union[str, WorkerState]]) -> "Workers":
        """Create Workers from a mapping of ids to states or state names.

        Args:
            data: Mapping of worker id to ``WorkerState`` or its value string

        Returns:
            Workers instance
        """
        return cls(dict(data))

    def __len__(self) -> int:
        return len(self.instances)

    def active_count(self) -> int:
        return sum(1 for state in self.instances.values() if state.is_active)

    def idle_ids(self) -> List[WorkerId]:
        """Ids of IDLING workers in ascending id order."""
        idle = [wid for wid, state in self.instances.items() if state is WorkerState.IDLING]
        return sorted(idle, key=worker_id_sort_key)


@dataclass(frozen=True)
class NoAction:
    """Fleet is already sized for the workload."""

    name = "no_action"


NO_ACTION = NoAction()


@dataclass(frozen=True)
class ScaleUp:
    """Start ``workers_to_add`` new workers."""

    workers_to_add: int

    name = "scale_up"

    def __post_init__(self) -> None:
        if self.workers_to_add <= 0:
            raise InvalidActionError(
                f"workers_to_add must be > 0, got {self.workers_to_add}"
            )


@dataclass(frozen=True)
class ScaleDown:
    """Stop the listed workers, in order."""

    workers_to_stop: Tuple[WorkerId, ...]

    name = "scale_down"

    def __post_init__(self) -> None:
        object.__setattr__(self, "workers_to_stop", tuple(self.workers_to_stop))
        if not self.workers_to_stop:
            raise InvalidActionError("workers_to_stop must not be empty")


ScalingAction = Union[NoAction, ScaleUp, ScaleDown]


@dataclass(frozen=True)
class ScalingActionResult:
    """Workers actually started and stopped while executing an action."""

    workers_started: Tuple[WorkerId, ...] = ()
    workers_stopped: Tuple[WorkerId, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "workers_started", tuple(self.workers_started))
        object.__setattr__(self, "workers_stopped", tuple(self.workers_stopped))

    @classmethod
    def empty(cls) -> "ScalingActionResult":
        return cls()

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "workers_started": list(self.workers_started),
            "workers_stopped": list(self.workers_stopped),
        }
