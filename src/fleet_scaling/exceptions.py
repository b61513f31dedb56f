"""Fleet scaling exception classes."""

import enum
from typing import Optional, Union


class FleetScalingError(Exception):
    """Base exception for fleet scaling errors."""
    pass


class ConfigError(FleetScalingError, ValueError):
    """Raised when scaling configuration is invalid."""
    pass


class InvalidWorkloadError(FleetScalingError, ValueError):
    """Raised when a workload snapshot violates its preconditions."""
    pass


class InvalidActionError(FleetScalingError, ValueError):
    """Raised when a scaling action is malformed or of an unknown type."""
    pass


class ErrorKind(enum.Enum):
    """Failure kinds reported by a worker operator."""

    NOT_FOUND = "not_found"
    OPERATIONAL = "operational"


class WorkerOperatorError(FleetScalingError):
    """Raised by a worker operator when start or stop fails."""

    kind = ErrorKind.OPERATIONAL

    def __init__(self, message: str, worker_id: Optional[Union[int, str]] = None):
        self.worker_id = worker_id
        super().__init__(message)


class WorkerNotFoundError(WorkerOperatorError):
    """Raised when stopping a worker that does not exist."""

    kind = ErrorKind.NOT_FOUND

    def __init__(self, worker_id: Union[int, str]):
        super().__init__(f"Worker not found: {worker_id}", worker_id)


class WorkerOperationError(WorkerOperatorError):
    """Raised when the worker backend fails to start or stop a worker."""

    kind = ErrorKind.OPERATIONAL
