"""Read-only queries and statistics over simulation records.

These helpers consume ledger snapshots (or any sequence of records) and
never modify them.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

import numpy as np

from gridsim.domain.models import SimulationRecord


@dataclass(frozen=True)
class LedgerStatistics:
    """Aggregate statistics over a run of simulation records.

    Attributes:
        count: Number of records.
        mean_production: Average production per tick (kWh).
        max_production: Highest production seen (kWh).
        mean_consumption: Average consumption per tick (kWh).
        max_consumption: Highest consumption seen (kWh).
        mean_balance: Average production minus consumption (kWh).
        deficit_count: Ticks where consumption exceeded production.
        surplus_count: Ticks where production covered consumption.
    """

    count: int = 0
    mean_production: float = 0.0
    max_production: float = 0.0
    mean_consumption: float = 0.0
    max_consumption: float = 0.0
    mean_balance: float = 0.0
    deficit_count: int = 0
    surplus_count: int = 0

    @classmethod
    def from_records(cls, records: Sequence[SimulationRecord]) -> LedgerStatistics:
        """Compute statistics, returning all zeros for an empty sequence."""
        if not records:
            return cls()

        production = np.array([r.production for r in records], dtype=float)
        consumption = np.array([r.consumption for r in records], dtype=float)
        balance = production - consumption

        return cls(
            count=len(records),
            mean_production=float(np.mean(production)),
            max_production=float(np.max(production)),
            mean_consumption=float(np.mean(consumption)),
            max_consumption=float(np.max(consumption)),
            mean_balance=float(np.mean(balance)),
            deficit_count=int(np.sum(balance < 0)),
            surplus_count=int(np.sum(balance >= 0)),
        )

    @property
    def deficit_rate(self) -> float:
        """Fraction of ticks in deficit."""
        if self.count == 0:
            return 0.0
        return self.deficit_count / self.count

    def summary(self) -> str:
        if self.count == 0:
            return "No simulation recorded."
        return (
            f"Simulations: {self.count}\n"
            f"Mean production: {self.mean_production:.2f} kWh\n"
            f"Mean consumption: {self.mean_consumption:.2f} kWh\n"
            f"Max production: {self.max_production:.2f} kWh\n"
            f"Max consumption: {self.max_consumption:.2f} kWh\n"
            f"Mean balance: {self.mean_balance:.2f} kWh\n"
            f"Deficits: {self.deficit_count} | Surpluses: {self.surplus_count}"
        )


def records_from_tick(
    records: Sequence[SimulationRecord], min_tick: int
) -> list[SimulationRecord]:
    """Records at or after the given tick."""
    return [r for r in records if r.tick >= min_tick]


def records_with_production_at_least(
    records: Sequence[SimulationRecord], min_production: float
) -> list[SimulationRecord]:
    return [r for r in records if r.production >= min_production]


def records_with_consumption_at_most(
    records: Sequence[SimulationRecord], max_consumption: float
) -> list[SimulationRecord]:
    return [r for r in records if r.consumption <= max_consumption]


def deficits(records: Sequence[SimulationRecord]) -> list[SimulationRecord]:
    return [r for r in records if r.is_deficit]


def surpluses(records: Sequence[SimulationRecord]) -> list[SimulationRecord]:
    return [r for r in records if r.is_surplus]


def latest(records: Sequence[SimulationRecord], n: int) -> list[SimulationRecord]:
    """The last n records in order (all of them if there are fewer)."""
    if n <= 0:
        return []
    return list(records[-n:])
