"""Battery storage model.

Implements battery operations including:
- Level tracking within [0, max_capacity]
- Charge with efficiency losses (charge side only)
- Discharge bounded by the stored level
"""

from gridsim.core.exceptions import DischargeExceedsLevelError, NegativeQuantityError
from gridsim.sources.base import EnergySource, SourceKind, require, to_float


class Battery(EnergySource):
    """Combined source/storage device.

    A battery produces nothing on its own: energy leaves it only through
    ``discharge``. All quantities are in kWh.
    """

    kind = SourceKind.BATTERY

    def __init__(self, max_capacity: float, level: float, efficiency: float) -> None:
        """Initialize the battery.

        Args:
            max_capacity: Maximum storable energy (> 0).
            level: Initial stored energy in [0, max_capacity].
            efficiency: Charge efficiency ratio in [0, 1].

        Raises:
            InvalidParameterError: If any parameter is out of range.
        """
        max_capacity = to_float(max_capacity, "max_capacity")
        level = to_float(level, "level")
        efficiency = to_float(efficiency, "efficiency")
        require(max_capacity > 0, f"Battery capacity must be > 0, got {max_capacity}")
        require(
            0 <= level <= max_capacity,
            f"Battery level must be 0-{max_capacity}, got {level}",
        )
        require(
            0 <= efficiency <= 1, f"Battery efficiency must be 0-1, got {efficiency}"
        )
        self._max_capacity = max_capacity
        self._level = level
        self._efficiency = efficiency

    @property
    def efficiency(self) -> float:
        return self._efficiency

    def level(self) -> float:
        """Energy currently stored (kWh)."""
        return self._level

    def capacity(self) -> float:
        return self._max_capacity

    def production(self) -> float:
        return 0.0

    def charge_percentage(self) -> float:
        """Stored level as a percentage of capacity (0-100)."""
        return (self._level / self._max_capacity) * 100

    def charge(self, quantity: float) -> None:
        """Charge the battery.

        Only ``quantity * efficiency`` is stored, and the level never
        exceeds the maximum capacity.

        Args:
            quantity: Energy offered to the battery (>= 0).

        Raises:
            NegativeQuantityError: If quantity is negative.
        """
        quantity = to_float(quantity, "quantity")
        if quantity < 0:
            raise NegativeQuantityError(quantity)

        self._level = min(self._max_capacity, self._level + quantity * self._efficiency)

    def discharge(self, quantity: float) -> None:
        """Discharge the battery.

        Args:
            quantity: Energy withdrawn (>= 0, at most the current level).

        Raises:
            NegativeQuantityError: If quantity is negative.
            DischargeExceedsLevelError: If quantity exceeds the stored level.
                The level is left unchanged.
        """
        quantity = to_float(quantity, "quantity")
        if quantity < 0:
            raise NegativeQuantityError(quantity)
        if quantity > self._level:
            raise DischargeExceedsLevelError(quantity, self._level)

        self._level = max(0.0, self._level - quantity)

    def __repr__(self) -> str:
        return (
            f"Battery(max_capacity={self._max_capacity}, level={self._level}, "
            f"efficiency={self._efficiency})"
        )
