"""Energy manager: owner of the grid's sources and consumers.

The manager is the single authority over the source and consumer
collections. Accessors hand out copies, so external code can never alter a
collection while a tick is being computed.
"""

from __future__ import annotations

import logging

from gridsim.alerts.rules import AlertThresholdRule
from gridsim.core.exceptions import GridSimError, InvalidStateError
from gridsim.domain.models import SimulationRecord
from gridsim.simulation.consumer import Consumer
from gridsim.simulation.snapshot import SimulationSnapshot
from gridsim.sources.base import EnergySource
from gridsim.sources.storage import Battery

logger = logging.getLogger(__name__)

DEFAULT_STORAGE_CHARGE = 10.0


class EnergyManager:
    """Orchestrates sources, consumers, simulated time and the alert rule.

    Example:
        ```python
        manager = EnergyManager()
        manager.add_source(SolarPanel(surface=10, efficiency=0.2, rated_power=5))
        manager.add_consumer(Consumer("House", 8))
        record = manager.tick()
        ledger.append(record)
        ```
    """

    def __init__(self, storage_charge_quantity: float = DEFAULT_STORAGE_CHARGE) -> None:
        """Initialize an empty grid.

        Args:
            storage_charge_quantity: Energy offered to each battery by
                ``manage_storage`` when no quantity is given.
        """
        self._sources: list[EnergySource] = []
        self._consumers: list[Consumer] = []
        self._history: list[SimulationRecord] = []
        self._tick = 0
        self._alert_rule: AlertThresholdRule | None = None
        self.storage_charge_quantity = storage_charge_quantity

    # -------------------------------------------------------------------------
    # Sources
    # -------------------------------------------------------------------------

    def add_source(self, source: EnergySource) -> None:
        """Add a source.

        Raises:
            InvalidStateError: If source is None or not an EnergySource.
        """
        self._sources.append(self._check_source(source))

    def remove_source(self, source: EnergySource) -> bool:
        """Remove a source by identity. Returns False if it was not present."""
        for i, existing in enumerate(self._sources):
            if existing is source:
                del self._sources[i]
                return True
        return False

    def remove_source_at(self, index: int) -> bool:
        """Remove the source at index. Returns False if index is out of range."""
        if 0 <= index < len(self._sources):
            del self._sources[index]
            return True
        return False

    def remove_all_sources(self) -> int:
        """Remove every source and return how many were removed."""
        count = len(self._sources)
        self._sources.clear()
        return count

    def replace_source(self, index: int, source: EnergySource) -> bool:
        """Replace the source at index.

        Returns:
            False if index is out of range (nothing replaced).

        Raises:
            InvalidStateError: If the new source is invalid.
        """
        checked = self._check_source(source)
        if 0 <= index < len(self._sources):
            self._sources[index] = checked
            return True
        return False

    def source_at(self, index: int) -> EnergySource | None:
        if 0 <= index < len(self._sources):
            return self._sources[index]
        return None

    def sources(self) -> list[EnergySource]:
        """Copy of the source list."""
        return list(self._sources)

    def batteries(self) -> list[Battery]:
        return [s for s in self._sources if isinstance(s, Battery)]

    # -------------------------------------------------------------------------
    # Consumers
    # -------------------------------------------------------------------------

    def add_consumer(self, consumer: Consumer) -> None:
        """Add a consumer.

        Raises:
            InvalidStateError: If consumer is None or not a Consumer.
        """
        if consumer is None:
            raise InvalidStateError("Consumer is missing")
        if not isinstance(consumer, Consumer):
            raise InvalidStateError(f"Not a consumer: {consumer!r}")
        self._consumers.append(consumer)

    def remove_consumer(self, consumer: Consumer) -> bool:
        for i, existing in enumerate(self._consumers):
            if existing is consumer:
                del self._consumers[i]
                return True
        return False

    def remove_all_consumers(self) -> int:
        count = len(self._consumers)
        self._consumers.clear()
        return count

    def consumer_named(self, name: str) -> Consumer | None:
        """First consumer with the given name, if any."""
        for consumer in self._consumers:
            if consumer.name == name:
                return consumer
        return None

    def add_appliance(self, consumer_name: str, appliance: str, consumption: float) -> None:
        """Add an appliance to a named consumer.

        Raises:
            InvalidStateError: If no consumer has that name.
            InvalidParameterError: If the appliance values are invalid.
        """
        self._require_consumer(consumer_name).add_appliance(appliance, consumption)

    def adjust_consumer(self, consumer_name: str, factor: float) -> None:
        """Scale a named consumer's consumption.

        Raises:
            InvalidStateError: If no consumer has that name.
            InvalidFactorError: If factor <= 0.
        """
        self._require_consumer(consumer_name).adjust_multiplicative(factor)

    def consumers_above(self, threshold: float) -> list[Consumer]:
        """Consumers whose consumption is strictly above threshold."""
        return [c for c in self._consumers if c.consumption() > threshold]

    def consumption_by_consumer(self) -> dict[str, float]:
        return {c.name: c.consumption() for c in self._consumers}

    def consumers(self) -> list[Consumer]:
        """Copy of the consumer list."""
        return list(self._consumers)

    # -------------------------------------------------------------------------
    # Measurements
    # -------------------------------------------------------------------------

    def snapshot(self) -> SimulationSnapshot:
        """Fresh aggregate of the current sources and consumers."""
        return SimulationSnapshot.capture(self._sources, self._consumers, self._tick)

    def total_production(self) -> float:
        return self.snapshot().total_production

    def total_consumption(self) -> float:
        return self.snapshot().total_consumption

    def balance(self) -> float:
        return self.snapshot().balance

    # -------------------------------------------------------------------------
    # Simulation
    # -------------------------------------------------------------------------

    @property
    def current_tick(self) -> int:
        return self._tick

    def tick(self) -> SimulationRecord:
        """Advance simulated time by one step.

        Returns:
            The record for the new tick. Persisting it is the caller's job.
        """
        self._tick += 1
        record = self.snapshot().to_record()
        self._history.append(record)
        logger.debug(
            "Tick %d | production %.2f kWh | consumption %.2f kWh",
            record.tick,
            record.production,
            record.consumption,
            extra={"tick": record.tick},
        )
        return record

    def history(self) -> list[SimulationRecord]:
        """Copy of the records produced by this manager."""
        return list(self._history)

    def latest_record(self) -> SimulationRecord | None:
        return self._history[-1] if self._history else None

    def manage_storage(self, quantity: float | None = None) -> int:
        """Offer energy to every battery.

        A failing battery is logged and skipped; the others are still charged.

        Returns:
            Number of batteries charged.
        """
        amount = self.storage_charge_quantity if quantity is None else quantity
        charged = 0
        for battery in self.batteries():
            try:
                battery.charge(amount)
            except GridSimError:
                logger.exception("Could not charge %r", battery)
                continue
            charged += 1
        return charged

    def state_summary(self) -> str:
        return self.snapshot().describe()

    # -------------------------------------------------------------------------
    # Alert rule
    # -------------------------------------------------------------------------

    @property
    def alert_rule(self) -> AlertThresholdRule | None:
        return self._alert_rule

    def set_alert_rule(self, rule: AlertThresholdRule | None) -> None:
        self._alert_rule = rule

    def configure_alert_rule(
        self, consumption_threshold: float, production_threshold: float
    ) -> AlertThresholdRule:
        """Build and install a rule from raw thresholds.

        The battery threshold of the current rule, if any, is kept.

        Raises:
            InvalidParameterError: If a threshold is invalid. The current
                rule is left untouched.
        """
        battery = self._alert_rule.battery_threshold if self._alert_rule else None
        rule = AlertThresholdRule.build(
            consumption_threshold, production_threshold, battery
        )
        self._alert_rule = rule
        return rule

    def check_alert(self) -> bool:
        """Whether the active rule fires on the current totals."""
        if self._alert_rule is None:
            return False
        return self._alert_rule.is_triggered(self.snapshot())

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------

    @staticmethod
    def _check_source(source: EnergySource) -> EnergySource:
        if source is None:
            raise InvalidStateError("Source is missing")
        if not isinstance(source, EnergySource):
            raise InvalidStateError(f"Not an energy source: {source!r}")
        return source

    def _require_consumer(self, name: str) -> Consumer:
        consumer = self.consumer_named(name)
        if consumer is None:
            raise InvalidStateError(f"Unknown consumer: {name!r}")
        return consumer
