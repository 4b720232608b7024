"""Renewable generation sources: solar panels and wind turbines."""

import math

from gridsim.core.exceptions import InvalidParameterError
from gridsim.sources.base import EnergySource, SourceKind, require, to_float

# Reference wind speed for the cubic power law
REFERENCE_WIND_SPEED = 10.0


class SolarPanel(EnergySource):
    """Solar panel with a static output.

    Production is ``surface * efficiency * rated_power``. There is no
    time-of-day irradiance factor.
    """

    kind = SourceKind.SOLAR

    def __init__(self, surface: float, efficiency: float, rated_power: float) -> None:
        """Initialize the panel.

        Args:
            surface: Panel surface (> 0).
            efficiency: Conversion efficiency ratio in [0, 1].
            rated_power: Rated power (> 0).

        Raises:
            InvalidParameterError: If any parameter is out of range.
        """
        surface = to_float(surface, "surface")
        efficiency = to_float(efficiency, "efficiency")
        rated_power = to_float(rated_power, "rated_power")
        require(surface > 0, f"Solar panel surface must be > 0, got {surface}")
        require(
            0 <= efficiency <= 1,
            f"Solar panel efficiency must be 0-1, got {efficiency}",
        )
        require(rated_power > 0, f"Solar panel power must be > 0, got {rated_power}")
        require(
            math.isfinite(surface * efficiency * rated_power),
            "Solar panel output overflows",
        )
        self._surface = surface
        self._efficiency = efficiency
        self._rated_power = rated_power

    @property
    def surface(self) -> float:
        return self._surface

    @property
    def efficiency(self) -> float:
        return self._efficiency

    @property
    def rated_power(self) -> float:
        return self._rated_power

    def production(self) -> float:
        return self._surface * self._efficiency * self._rated_power

    def capacity(self) -> float:
        return self._rated_power

    def __repr__(self) -> str:
        return (
            f"SolarPanel(surface={self._surface}, efficiency={self._efficiency}, "
            f"rated_power={self._rated_power})"
        )


class WindTurbine(EnergySource):
    """Wind turbine following a cubic wind-power law.

    Production is ``rated_power * max(0, wind_speed / 10) ** 3``. The wind
    speed can change during a simulation, the rated power cannot.
    """

    kind = SourceKind.WIND

    def __init__(self, wind_speed: float, rated_power: float) -> None:
        """Initialize the turbine.

        Args:
            wind_speed: Current wind speed (>= 0).
            rated_power: Rated power (> 0).

        Raises:
            InvalidParameterError: If any parameter is out of range.
        """
        wind_speed = to_float(wind_speed, "wind_speed")
        rated_power = to_float(rated_power, "rated_power")
        require(wind_speed >= 0, f"Wind speed must be >= 0, got {wind_speed}")
        require(rated_power > 0, f"Wind turbine power must be > 0, got {rated_power}")
        _cubic_output(wind_speed, rated_power)
        self._wind_speed = wind_speed
        self._rated_power = rated_power

    @property
    def wind_speed(self) -> float:
        return self._wind_speed

    @wind_speed.setter
    def wind_speed(self, value: float) -> None:
        value = to_float(value, "wind_speed")
        require(value >= 0, f"Wind speed must be >= 0, got {value}")
        _cubic_output(value, self._rated_power)
        self._wind_speed = value

    @property
    def rated_power(self) -> float:
        return self._rated_power

    def production(self) -> float:
        return _cubic_output(self._wind_speed, self._rated_power)

    def capacity(self) -> float:
        return self._rated_power

    def __repr__(self) -> str:
        return (
            f"WindTurbine(wind_speed={self._wind_speed}, "
            f"rated_power={self._rated_power})"
        )


def _cubic_output(wind_speed: float, rated_power: float) -> float:
    """Cubic power law output.

    Raises:
        InvalidParameterError: If the output is not a finite float.
    """
    ratio = max(0.0, wind_speed / REFERENCE_WIND_SPEED)
    try:
        output = rated_power * ratio**3
    except OverflowError as e:
        raise InvalidParameterError(f"Wind output overflows at speed {wind_speed}") from e
    require(math.isfinite(output), f"Wind output overflows at speed {wind_speed}")
    return output
