"""Collaborator interfaces consumed by the resolver and executor."""

from typing import Protocol

from fleet_scaling.models import ScalingAction, WorkerId, Workers, Workload


class ActionProvider(Protocol):
    """Supplies the scaling action for the current cycle. Must not raise."""

    def get(self) -> ScalingAction: ...


class WorkerOperator(Protocol):
    """Starts and stops individual workers.

    ``start`` raises WorkerOperationError when provisioning fails. ``stop``
    raises WorkerNotFoundError for an unknown worker and WorkerOperationError
    on any other failure.
    """

    def start(self) -> WorkerId: ...

    def stop(self, worker_id: WorkerId) -> None: ...


class WorkloadSource(Protocol):
    def get(self) -> Workload: ...


class FleetSource(Protocol):
    def get(self) -> Workers: ...
