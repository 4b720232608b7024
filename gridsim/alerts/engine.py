"""Alert engine: threshold evaluation and alert lifecycle management.

Each evaluation pass inspects one fully computed simulation snapshot and
emits an ``AlertRecord`` for every breached limit:

1. Consumption above its threshold (CRITIQUE above 1.5x, else HAUTE)
2. Production below its threshold (CRITIQUE below 0.5x, else MOYENNE)
3. Negative balance (CRITIQUE when the deficit exceeds 50, else HAUTE)
4. Battery charge below the battery threshold, one alert per battery
   (CRITIQUE below 0.5x, else HAUTE)

Alert records are immutable. A status change builds a new record and puts
it in place of the old one; only ACTIVE alerts can change status.
"""

from __future__ import annotations

import logging
import threading
from collections import Counter
from collections.abc import Callable
from datetime import datetime
from typing import TYPE_CHECKING

from gridsim.alerts.rules import AlertThresholdRule
from gridsim.domain.models import AlertRecord, AlertSeverity, AlertStatus, AlertType

if TYPE_CHECKING:
    from gridsim.simulation.manager import EnergyManager
    from gridsim.simulation.snapshot import SimulationSnapshot

logger = logging.getLogger(__name__)

AlertObserver = Callable[[AlertRecord], None]

# Severity escalation factors
CONSUMPTION_CRITICAL_FACTOR = 1.5
PRODUCTION_CRITICAL_FACTOR = 0.5
BATTERY_CRITICAL_FACTOR = 0.5
DEFICIT_CRITICAL_KWH = 50.0

DEFAULT_RULE = AlertThresholdRule(
    consumption_threshold=100.0,
    production_threshold=50.0,
    battery_threshold=20.0,
)


class AlertEngine:
    """Evaluates threshold rules and keeps the alert history.

    The engine holds a read reference to the energy manager and owns the
    alert history exclusively. Queries return copies. A single lock guards
    the history, so the tick thread and an operator thread may share an
    engine.

    Example:
        ```python
        engine = AlertEngine(manager)
        engine.configure_thresholds(consumption=5, production=50)
        engine.register_observer(lambda alert: print(alert))
        new_alerts = engine.evaluate()
        engine.acknowledge_all()
        ```
    """

    def __init__(
        self,
        manager: EnergyManager,
        rule: AlertThresholdRule | None = None,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        """Initialize the alert engine.

        Args:
            manager: Energy manager providing snapshots.
            rule: Thresholds to install on the manager. When omitted the
                manager's rule is used, or 100 / 50 / 20% if it has none.
            clock: Timestamp source for new alerts.
        """
        self._manager = manager
        if rule is not None:
            manager.set_alert_rule(rule)
        self._clock = clock
        self._lock = threading.Lock()
        self._history: list[AlertRecord] = []
        self._observer: AlertObserver | None = None

    @property
    def rule(self) -> AlertThresholdRule:
        """Thresholds in force (the manager holds the single active rule)."""
        return self._manager.alert_rule or DEFAULT_RULE

    def configure_thresholds(
        self,
        consumption: object,
        production: object,
        battery: object | None = None,
    ) -> AlertThresholdRule:
        """Set new thresholds and push them to the energy manager.

        Raises:
            InvalidParameterError: If a threshold is negative or non-numeric.
                Neither the engine nor the manager is changed.
        """
        if battery is None:
            battery = self.rule.battery_threshold
        rule = AlertThresholdRule.build(consumption, production, battery)
        self._manager.set_alert_rule(rule)
        return rule

    def register_observer(self, observer: AlertObserver | None) -> None:
        """Set the callback notified of every new alert.

        There is a single slot: registering replaces the previous observer,
        and None removes it.
        """
        self._observer = observer

    # -------------------------------------------------------------------------
    # Evaluation
    # -------------------------------------------------------------------------

    def evaluate(self) -> list[AlertRecord]:
        """Run one rule pass against the manager's current snapshot.

        Returns:
            Alerts emitted by this pass, in emission order.
        """
        snapshot = self._manager.snapshot()
        return [self._emit(alert) for alert in self._detect(snapshot)]

    def _detect(self, snapshot: SimulationSnapshot) -> list[AlertRecord]:
        rule = self.rule
        production = snapshot.total_production
        consumption = snapshot.total_consumption
        balance = snapshot.balance
        now = self._clock()
        alerts: list[AlertRecord] = []

        if consumption > rule.consumption_threshold:
            severity = (
                AlertSeverity.CRITIQUE
                if consumption > rule.consumption_threshold * CONSUMPTION_CRITICAL_FACTOR
                else AlertSeverity.HAUTE
            )
            alerts.append(
                AlertRecord(
                    timestamp=now,
                    type=AlertType.CONSUMPTION_EXCESSIVE,
                    severity=severity,
                    message=(
                        f"Excessive consumption: {consumption:.2f} kWh "
                        f"(threshold: {rule.consumption_threshold:.2f} kWh)"
                    ),
                    measured_value=consumption,
                    threshold_value=rule.consumption_threshold,
                )
            )

        if production < rule.production_threshold:
            severity = (
                AlertSeverity.CRITIQUE
                if production < rule.production_threshold * PRODUCTION_CRITICAL_FACTOR
                else AlertSeverity.MOYENNE
            )
            alerts.append(
                AlertRecord(
                    timestamp=now,
                    type=AlertType.PRODUCTION_LOW,
                    severity=severity,
                    message=(
                        f"Insufficient production: {production:.2f} kWh "
                        f"(threshold: {rule.production_threshold:.2f} kWh)"
                    ),
                    measured_value=production,
                    threshold_value=rule.production_threshold,
                )
            )

        if balance < 0:
            severity = (
                AlertSeverity.CRITIQUE
                if abs(balance) > DEFICIT_CRITICAL_KWH
                else AlertSeverity.HAUTE
            )
            alerts.append(
                AlertRecord(
                    timestamp=now,
                    type=AlertType.ENERGY_DEFICIT,
                    severity=severity,
                    message=f"Energy deficit: {abs(balance):.2f} kWh",
                    measured_value=balance,
                    threshold_value=0.0,
                )
            )

        for battery in snapshot.battery_levels:
            percentage = battery.percentage
            if percentage < rule.battery_threshold:
                severity = (
                    AlertSeverity.CRITIQUE
                    if percentage < rule.battery_threshold * BATTERY_CRITICAL_FACTOR
                    else AlertSeverity.HAUTE
                )
                alerts.append(
                    AlertRecord(
                        timestamp=now,
                        type=AlertType.BATTERY_LOW,
                        severity=severity,
                        message=(
                            f"Battery #{battery.index} low: {percentage:.1f}% "
                            f"(threshold: {rule.battery_threshold:.1f}%)"
                        ),
                        measured_value=percentage,
                        threshold_value=rule.battery_threshold,
                    )
                )

        return alerts

    def _emit(self, alert: AlertRecord) -> AlertRecord:
        with self._lock:
            self._history.append(alert)
        level = logging.WARNING if alert.is_critical else logging.INFO
        logger.log(
            level,
            "%s alert (%s): %s",
            alert.type.value,
            alert.severity.value,
            alert.message,
            extra={"alert_type": alert.type.value, "severity": alert.severity.value},
        )

        observer = self._observer
        if observer is not None:
            try:
                observer(alert)
            except Exception:
                # A broken observer must not stop the tick loop
                logger.exception("Alert observer failed for %s", alert.type.value)
        return alert

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    def alerts(self) -> list[AlertRecord]:
        """Copy of the full alert history."""
        with self._lock:
            return list(self._history)

    def filter_by_severity(self, severity: AlertSeverity) -> list[AlertRecord]:
        return [a for a in self.alerts() if a.severity == severity]

    def filter_by_type(self, alert_type: AlertType) -> list[AlertRecord]:
        return [a for a in self.alerts() if a.type == alert_type]

    def filter_by_status(self, status: AlertStatus) -> list[AlertRecord]:
        return [a for a in self.alerts() if a.status == status]

    def active_alerts(self) -> list[AlertRecord]:
        return [a for a in self.alerts() if a.is_active]

    def critical_alerts(self) -> list[AlertRecord]:
        return [a for a in self.alerts() if a.is_critical]

    def count(self) -> int:
        with self._lock:
            return len(self._history)

    def active_count(self) -> int:
        return len(self.active_alerts())

    def count_by_severity(self) -> dict[AlertSeverity, int]:
        """Number of alerts per severity (severities without alerts omitted)."""
        return dict(Counter(a.severity for a in self.alerts()))

    def latest_alert(self) -> AlertRecord | None:
        with self._lock:
            return self._history[-1] if self._history else None

    def average_severity_score(self) -> float:
        """Mean severity score over ACTIVE alerts, 0.0 when there are none."""
        active = self.active_alerts()
        if not active:
            return 0.0
        return sum(a.severity_score for a in active) / len(active)

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    def acknowledge_all(self) -> int:
        """Acknowledge every ACTIVE alert.

        Returns:
            Number of alerts acknowledged.
        """
        changed = 0
        with self._lock:
            for i, alert in enumerate(self._history):
                if alert.is_active:
                    self._history[i] = alert.with_status(AlertStatus.ACKNOWLEDGED)
                    changed += 1
        return changed

    def acknowledge(self, index: int) -> bool:
        """Acknowledge one alert. No-op if not ACTIVE or index out of range."""
        return self._transition(index, AlertStatus.ACKNOWLEDGED)

    def resolve(self, index: int) -> bool:
        """Resolve one alert. No-op if not ACTIVE or index out of range."""
        return self._transition(index, AlertStatus.RESOLVED)

    def purge_resolved(self) -> int:
        """Drop RESOLVED alerts from the history and return how many went."""
        with self._lock:
            before = len(self._history)
            self._history[:] = [
                a for a in self._history if a.status != AlertStatus.RESOLVED
            ]
            return before - len(self._history)

    def clear(self) -> None:
        with self._lock:
            self._history.clear()

    def _transition(self, index: int, status: AlertStatus) -> bool:
        with self._lock:
            if not 0 <= index < len(self._history):
                return False
            alert = self._history[index]
            if not alert.is_active:
                return False
            self._history[index] = alert.with_status(status)
            return True
