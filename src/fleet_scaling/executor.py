"""Execute scaling actions against a worker operator."""

import logging
from typing import List, Optional

from fleet_scaling.exceptions import ErrorKind, InvalidActionError, WorkerOperatorError
from fleet_scaling.interfaces import ActionProvider, WorkerOperator
from fleet_scaling.models import (
    NoAction,
    ScaleDown,
    ScaleUp,
    ScalingActionResult,
    WorkerId,
)

logger = logging.getLogger(__name__)


class ScalingActionExecutor:
    """Performs the current scaling action by starting or stopping workers.

    Every start and stop is attempted once. Failures are logged and left out
    of the result; the next cycle sees the remaining drift and corrects it.
    """

    def __init__(self, worker_operator: WorkerOperator, action_provider: ActionProvider):
        """Initialize the executor.

        Args:
            worker_operator: Backend that starts and stops workers
            action_provider: Source of the action to execute
        """
        self.worker_operator = worker_operator
        self.action_provider = action_provider

    def run(self) -> ScalingActionResult:
        """Fetch the current action and execute it.

        Returns:
            ScalingActionResult listing only confirmed starts and stops
        """
        action = self.action_provider.get()

        if isinstance(action, NoAction):
            return ScalingActionResult.empty()
        if isinstance(action, ScaleUp):
            return ScalingActionResult(workers_started=self._start_workers(action.workers_to_add))
        if isinstance(action, ScaleDown):
            return ScalingActionResult(workers_stopped=self._stop_workers(action.workers_to_stop))
        raise InvalidActionError(f"Unknown scaling action: {action!r}")

    def _start_workers(self, count: int) -> List[WorkerId]:
        started = []
        for _ in range(count):
            worker_id = self._start_or_none()
            if worker_id is not None:
                started.append(worker_id)
        if len(started) < count:
            logger.warning(f"Started {len(started)} of {count} requested workers")
        return started

    def _start_or_none(self) -> Optional[WorkerId]:
        logger.info("Starting new worker")
        try:
            return self.worker_operator.start()
        except WorkerOperatorError as e:
            logger.error(f"Failed to start new worker ({e.kind.value}): {e}")
        except Exception:
            logger.exception("Unexpected error while starting new worker")
        return None

    def _stop_workers(self, worker_ids) -> List[WorkerId]:
        stopped = []
        for worker_id in worker_ids:
            if self._stop(worker_id):
                stopped.append(worker_id)
        return stopped

    def _stop(self, worker_id: WorkerId) -> bool:
        """Stop one worker, returning True when it is confirmed gone."""
        logger.info(f"Stopping worker {worker_id}")
        try:
            self.worker_operator.stop(worker_id)
        except WorkerOperatorError as e:
            if e.kind is ErrorKind.NOT_FOUND:
                logger.warning(
                    f"Worker {worker_id} already does not exist, stop considered successful"
                )
                return True
            logger.error(f"Failed to stop worker {worker_id}: {e}")
            return False
        except Exception:
            logger.exception(f"Unexpected error while stopping worker {worker_id}")
            return False
        return True
