"""Control loop that runs one scaling cycle per poll interval."""

import logging
import time
from collections import deque
from dataclasses import dataclass, field
from typing import Callable, Deque, List, Optional, Tuple

from fleet_scaling.executor import ScalingActionExecutor
from fleet_scaling.models import WorkerId

logger = logging.getLogger(__name__)


@dataclass
class ScalingEvent:
    """Log entry for one scaling cycle."""

    cycle: int
    timestamp: float = field(default_factory=time.time)
    workers_started: Tuple[WorkerId, ...] = ()
    workers_stopped: Tuple[WorkerId, ...] = ()
    workers_reaped: Tuple[WorkerId, ...] = ()

    @property
    def action(self) -> str:
        if self.workers_started:
            return "scale_up"
        if self.workers_stopped:
            return "scale_down"
        return "no_change"


class ScalingController:
    """Drives the executor at a fixed cadence."""

    def __init__(
        self,
        executor: ScalingActionExecutor,
        poll_interval: float,
        reaper: Optional[Callable[[], List[WorkerId]]] = None,
        sleep: Callable[[float], None] = time.sleep,
        history_size: int = 100,
    ):
        """Initialize the scaling controller.

        Args:
            executor: Executor run once per cycle
            poll_interval: Seconds between cycles
            reaper: Optional callable removing dead workers before each cycle
            sleep: Sleep function, replaceable in tests
            history_size: Number of recent events kept in ``history``
        """
        self.executor = executor
        self.poll_interval = poll_interval
        self.reaper = reaper
        self._sleep = sleep
        self.cycle_count = 0
        self.history: Deque[ScalingEvent] = deque(maxlen=history_size)
        self._running = False

    def run_cycle(self) -> ScalingEvent:
        """Run a single resolve-then-execute cycle."""
        self.cycle_count += 1
        reaped = self.reaper() if self.reaper else []
        result = self.executor.run()

        event = ScalingEvent(
            cycle=self.cycle_count,
            workers_started=result.workers_started,
            workers_stopped=result.workers_stopped,
            workers_reaped=tuple(reaped),
        )
        self.history.append(event)
        if event.action == "no_change":
            logger.debug(f"Cycle {event.cycle}: NO_CHANGE")
        else:
            logger.info(
                f"Cycle {event.cycle}: {event.action.upper()} "
                f"started={list(event.workers_started)} stopped={list(event.workers_stopped)}"
            )
        return event

    def run(self, max_cycles: Optional[int] = None) -> int:
        """Run cycles until stopped or ``max_cycles`` is reached.

        Only the most recent events are kept, in ``history``.

        Returns:
            Number of cycles that ran
        """
        cycles = 0
        self._running = True
        while self._running:
            self.run_cycle()
            cycles += 1
            if max_cycles is not None and cycles >= max_cycles:
                break
            self._sleep(self.poll_interval)
        self._running = False
        return cycles

    def stop(self) -> None:
        """Ask the loop to exit after the current cycle."""
        self._running = False
