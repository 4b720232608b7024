"""Energy consumers with a per-appliance breakdown."""

import math
from collections.abc import Mapping
from types import MappingProxyType

from gridsim.core.exceptions import InvalidFactorError
from gridsim.sources.base import require, to_float


class Consumer:
    """Named energy consumer (a house, a workshop, ...).

    The per-tick consumption is what the simulation sums. The appliance
    mapping is an informational breakdown and does not feed the total.
    """

    def __init__(self, name: str, consumption_per_tick: float) -> None:
        """Initialize the consumer.

        Args:
            name: Display name (non-empty).
            consumption_per_tick: Base consumption in kWh per tick (>= 0).

        Raises:
            InvalidParameterError: If the name is empty or consumption negative.
        """
        require(
            isinstance(name, str) and bool(name.strip()),
            "Consumer name is required and must not be empty",
        )
        consumption_per_tick = to_float(consumption_per_tick, "consumption_per_tick")
        require(
            consumption_per_tick >= 0,
            f"Consumption must be >= 0, got {consumption_per_tick}",
        )
        self._name = name
        self._consumption = consumption_per_tick
        self._appliances: dict[str, float] = {}

    @property
    def name(self) -> str:
        return self._name

    def consumption(self) -> float:
        """Current consumption in kWh per tick."""
        return self._consumption

    def adjust_multiplicative(self, factor: float) -> None:
        """Scale consumption by a positive factor.

        Raises:
            InvalidFactorError: If factor <= 0.
            InvalidParameterError: If the result overflows. Consumption is
                left unchanged.
        """
        factor = to_float(factor, "factor")
        if factor <= 0:
            raise InvalidFactorError(factor)
        self._consumption = _finite(self._consumption * factor)

    def adjust_additive(self, delta: float) -> None:
        """Shift consumption by delta, clamping at zero.

        Raises:
            InvalidParameterError: If the result overflows.
        """
        shifted = self._consumption + to_float(delta, "delta")
        self._consumption = _finite(max(0.0, shifted))

    def add_appliance(self, name: str, consumption: float) -> None:
        """Add or replace an appliance in the breakdown.

        Raises:
            InvalidParameterError: If the name is empty or consumption negative.
        """
        require(
            isinstance(name, str) and bool(name.strip()),
            "Appliance name is required and must not be empty",
        )
        consumption = to_float(consumption, "consumption")
        require(consumption >= 0, f"Appliance consumption must be >= 0, got {consumption}")
        self._appliances[name] = consumption

    def appliances(self) -> Mapping[str, float]:
        """Read-only copy of the appliance breakdown."""
        return MappingProxyType(dict(self._appliances))

    def appliance_total(self) -> float:
        return sum(self._appliances.values())

    def __repr__(self) -> str:
        return f"Consumer(name={self._name!r}, consumption_per_tick={self._consumption})"


def _finite(consumption: float) -> float:
    require(math.isfinite(consumption), f"Consumption overflow: {consumption}")
    return consumption
