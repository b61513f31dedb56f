"""Worker operator that runs each worker as a local subprocess."""

import itertools
import logging
import os
import signal
import subprocess
import sys
from typing import Dict, List, Optional

import redis

from fleet_scaling.exceptions import WorkerNotFoundError, WorkerOperationError
from fleet_scaling.models import WorkerId, WorkerState

logger = logging.getLogger(__name__)


class ProcessWorkerOperator:
    """Starts and stops worker processes and records their state in Redis.

    Workers update their own state (running/idling) in the fleet hash; this
    operator only writes the states it causes: initializing on start and
    stopping on stop.
    """

    def __init__(
        self,
        client: Optional[redis.Redis],
        fleet_key: str,
        config_path: str,
        worker_script: str = "worker.py",
        dry_run: bool = False,
    ):
        """Initialize the operator.

        Args:
            client: Redis client used to record worker state, or None
            fleet_key: Redis hash holding worker states
            config_path: Path to config file passed to spawned workers
            worker_script: Worker entry point script
            dry_run: If True, only log actions without executing
        """
        self.client = client
        self.fleet_key = fleet_key
        self.config_path = config_path
        self.worker_script = worker_script
        self.dry_run = dry_run

        self.processes: Dict[WorkerId, subprocess.Popen] = {}
        self._counter = itertools.count(1)

    def _next_worker_id(self) -> str:
        return f"worker-{next(self._counter)}"

    def _record_state(self, worker_id: WorkerId, state: Optional[WorkerState]) -> None:
        if self.client is None or self.dry_run:
            return
        try:
            if state is None:
                self.client.hdel(self.fleet_key, worker_id)
            else:
                self.client.hset(self.fleet_key, worker_id, state.value)
        except redis.RedisError as e:
            logger.warning(f"Failed to record state of worker {worker_id}: {e}")

    def start(self) -> WorkerId:
        """Spawn a new worker process.

        Returns:
            Id of the new worker

        Raises:
            WorkerOperationError: If the process could not be spawned
        """
        worker_id = self._next_worker_id()
        cmd = [
            sys.executable,
            self.worker_script,
            "--config", self.config_path,
            "--consumer", worker_id,
        ]
        if self.dry_run:
            logger.info(f"[DRY RUN] Would spawn worker {worker_id}")
            return worker_id

        try:
            proc = subprocess.Popen(cmd, cwd=os.getcwd())
        except OSError as e:
            raise WorkerOperationError(f"Failed to spawn worker {worker_id}: {e}", worker_id) from e

        self.processes[worker_id] = proc
        self._record_state(worker_id, WorkerState.INITIALIZING)
        logger.info(f"Spawned worker {worker_id} with PID {proc.pid}")
        return worker_id

    def stop(self, worker_id: WorkerId) -> None:
        """Send SIGTERM to a worker process.

        Raises:
            WorkerNotFoundError: If the worker is unknown or already dead
            WorkerOperationError: If the signal could not be delivered
        """
        if self.dry_run:
            logger.info(f"[DRY RUN] Would terminate worker {worker_id}")
            return

        proc = self.processes.get(worker_id)
        if proc is None:
            # Not spawned by this operator (e.g. before a restart); drop the stale entry.
            self._forget(worker_id)
            raise WorkerNotFoundError(worker_id)

        try:
            os.kill(proc.pid, signal.SIGTERM)
        except ProcessLookupError:
            self._forget(worker_id)
            raise WorkerNotFoundError(worker_id)
        except OSError as e:
            raise WorkerOperationError(f"Failed to terminate worker {worker_id}: {e}", worker_id) from e

        self._record_state(worker_id, WorkerState.STOPPING)
        logger.info(f"Terminating worker {worker_id} (PID {proc.pid})")

    def _forget(self, worker_id: WorkerId) -> None:
        self.processes.pop(worker_id, None)
        self._record_state(worker_id, None)

    def reap(self) -> List[WorkerId]:
        """Remove exited worker processes from the registry and fleet hash.

        Returns:
            Ids of the reaped workers
        """
        reaped = []
        for worker_id, proc in list(self.processes.items()):
            returncode = proc.poll()
            if returncode is not None:
                logger.warning(f"Worker {worker_id} (PID {proc.pid}) exited with code {returncode}")
                self._forget(worker_id)
                reaped.append(worker_id)
        return reaped
