"""Point-in-time aggregate of the grid's sources and consumers."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

from gridsim.domain.models import SimulationRecord
from gridsim.simulation.consumer import Consumer
from gridsim.sources.base import EnergySource
from gridsim.sources.storage import Battery


@dataclass(frozen=True)
class BatteryLevel:
    """Charge state of one battery at snapshot time.

    Attributes:
        index: Position of the battery in the manager's source list.
        level: Stored energy (kWh).
        capacity: Maximum capacity (kWh).
    """

    index: int
    level: float
    capacity: float

    @property
    def percentage(self) -> float:
        """Charge as a percentage of capacity (0-100)."""
        return (self.level / self.capacity) * 100


@dataclass(frozen=True)
class SimulationSnapshot:
    """Totals computed from the current sources and consumers.

    Built in one go by ``capture`` so no caller ever observes partial sums.

    Attributes:
        tick: Simulated time step the snapshot belongs to.
        total_production: Sum of ``production()`` over all sources.
        total_consumption: Sum of ``consumption()`` over all consumers.
        battery_levels: Charge state of every battery among the sources.
    """

    tick: int
    total_production: float
    total_consumption: float
    battery_levels: tuple[BatteryLevel, ...] = ()

    @classmethod
    def capture(
        cls,
        sources: Iterable[EnergySource],
        consumers: Iterable[Consumer],
        tick: int = 0,
    ) -> SimulationSnapshot:
        """Aggregate sources and consumers into a snapshot."""
        sources = list(sources)
        production = sum(source.production() for source in sources)
        consumption = sum(consumer.consumption() for consumer in consumers)
        batteries = tuple(
            BatteryLevel(index=i, level=source.level(), capacity=source.capacity())
            for i, source in enumerate(sources)
            if isinstance(source, Battery)
        )
        return cls(
            tick=tick,
            total_production=float(production),
            total_consumption=float(consumption),
            battery_levels=batteries,
        )

    @property
    def balance(self) -> float:
        """Production minus consumption."""
        return self.total_production - self.total_consumption

    @property
    def is_surplus(self) -> bool:
        return self.total_production >= self.total_consumption

    def to_record(self) -> SimulationRecord:
        return SimulationRecord(
            tick=self.tick,
            consumption=self.total_consumption,
            production=self.total_production,
        )

    def describe(self) -> str:
        return (
            f"Tick: {self.tick} | Consumption: {self.total_consumption:.2f} | "
            f"Production: {self.total_production:.2f}"
        )
