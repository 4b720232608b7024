"""Tick driver tying the energy manager, ledger and alert engine together.

One step is: advance the manager, append the new record to the ledger,
then run an alert pass on the fully computed state. Steps run either on
demand or from a periodic timer thread that can be stopped at any time.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field

from gridsim.alerts.engine import AlertEngine
from gridsim.domain.models import AlertRecord, SimulationRecord
from gridsim.ledger.store import HistoricalLedger
from gridsim.simulation.manager import EnergyManager

logger = logging.getLogger(__name__)


@dataclass
class StepResult:
    """Outcome of one simulation step.

    Attributes:
        record: Record produced by the tick.
        alerts: Alerts emitted by the evaluation that followed.
    """

    record: SimulationRecord
    alerts: list[AlertRecord] = field(default_factory=list)

    @property
    def has_alerts(self) -> bool:
        return bool(self.alerts)


class SimulationDriver:
    """Drives the simulation manually or on a periodic timer.

    Example:
        ```python
        driver = SimulationDriver(manager, ledger, engine, interval=1.0)
        driver.start()
        ...
        driver.stop(flush=True)
        ```
    """

    def __init__(
        self,
        manager: EnergyManager,
        ledger: HistoricalLedger,
        alert_engine: AlertEngine,
        interval: float = 1.0,
    ) -> None:
        """Initialize the driver.

        Args:
            manager: Energy manager advanced by each step.
            ledger: Ledger receiving every new record.
            alert_engine: Engine evaluated after each tick.
            interval: Seconds between steps when running on the timer.

        Raises:
            ValueError: If interval is not positive.
        """
        if interval <= 0:
            raise ValueError(f"interval must be > 0, got {interval}")
        self.manager = manager
        self.ledger = ledger
        self.alert_engine = alert_engine
        self.interval = interval
        self._step_lock = threading.Lock()
        self._stop_event = threading.Event()
        self._thread: threading.Thread | None = None

    @property
    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def step(self) -> StepResult:
        """Run one tick, persist it to the ledger buffer and evaluate alerts."""
        with self._step_lock:
            record = self.manager.tick()
            self.ledger.append(record)
            alerts = self.alert_engine.evaluate()
        return StepResult(record=record, alerts=alerts)

    def run(self, steps: int) -> list[StepResult]:
        """Run a fixed number of steps synchronously."""
        if steps < 0:
            raise ValueError(f"steps must be >= 0, got {steps}")
        return [self.step() for _ in range(steps)]

    def start(self) -> None:
        """Start stepping on a background timer. No-op if already running."""
        if self.is_running:
            return
        self._stop_event.clear()
        self._thread = threading.Thread(
            target=self._loop, name="gridsim-tick", daemon=True
        )
        self._thread.start()
        logger.info("Simulation timer started (interval %.2fs)", self.interval)

    def stop(self, flush: bool = False, timeout: float | None = None) -> bool:
        """Stop the timer.

        In-memory and on-disk state stay consistent whenever this is called:
        a step in progress completes before the thread exits.

        Args:
            flush: Flush the ledger once the timer has stopped.
            timeout: Seconds to wait for the timer thread to finish.

        Returns:
            False only if the requested flush failed.
        """
        self._stop_event.set()
        thread = self._thread
        if thread is not None and thread is not threading.current_thread():
            thread.join(timeout)
        self._thread = None
        logger.info("Simulation timer stopped")
        if flush:
            return self.ledger.flush()
        return True

    def _loop(self) -> None:
        while not self._stop_event.wait(self.interval):
            try:
                self.step()
            except Exception:
                logger.exception("Simulation step failed, stopping timer")
                self._stop_event.set()
