# Fleet Scaling
#
# Sizes a worker fleet to its queue so that all waiting work completes
# within a target duration.
#
# Key features:
# - Stateless resolver turning a workload + fleet snapshot into an action
# - Executor tolerating partial start/stop failures
# - Redis-backed snapshots and a subprocess worker operator

from fleet_scaling.config import ScalingConfig, RedisSettings, load_scaling_config
from fleet_scaling.controller import ScalingController, ScalingEvent
from fleet_scaling.executor import ScalingActionExecutor
from fleet_scaling.models import (
    NO_ACTION,
    TARGET_DURATION,
    NoAction,
    ScaleDown,
    ScaleUp,
    ScalingAction,
    ScalingActionResult,
    WorkerId,
    WorkerState,
    Workers,
    Workload,
)
from fleet_scaling.resolver import ScalingActionResolver
from fleet_scaling.exceptions import (
    FleetScalingError,
    ConfigError,
    InvalidWorkloadError,
    InvalidActionError,
    ErrorKind,
    WorkerOperatorError,
    WorkerNotFoundError,
    WorkerOperationError,
)

__version__ = "0.1.0"

__all__ = [
    "ScalingConfig",
    "RedisSettings",
    "load_scaling_config",
    "ScalingController",
    "ScalingEvent",
    "ScalingActionExecutor",
    "ScalingActionResolver",
    "NO_ACTION",
    "TARGET_DURATION",
    "NoAction",
    "ScaleDown",
    "ScaleUp",
    "ScalingAction",
    "ScalingActionResult",
    "WorkerId",
    "WorkerState",
    "Workers",
    "Workload",
    "FleetScalingError",
    "ConfigError",
    "InvalidWorkloadError",
    "InvalidActionError",
    "ErrorKind",
    "WorkerOperatorError",
    "WorkerNotFoundError",
    "WorkerOperationError",
]
