"""Shared capability interfaces for energy sources and storage devices."""

import math
from abc import ABC, abstractmethod
from enum import Enum
from typing import Protocol, runtime_checkable

from gridsim.core.exceptions import InvalidParameterError


class SourceKind(str, Enum):
    """Closed set of source variants."""

    SOLAR = "solar"
    WIND = "wind"
    BATTERY = "battery"


class EnergySource(ABC):
    """Producer of energy within the grid.

    The variant set is closed: ``SolarPanel``, ``WindTurbine`` and
    ``Battery`` are the only implementations.
    """

    kind: SourceKind

    @abstractmethod
    def production(self) -> float:
        """Instantaneous output in kWh per tick (never negative)."""

    @abstractmethod
    def capacity(self) -> float:
        """Nominal or maximum value for the source."""


@runtime_checkable
class EnergyStorage(Protocol):
    """Protocol for sources that can also store energy."""

    def charge(self, quantity: float) -> None:
        """Store energy."""
        ...

    def discharge(self, quantity: float) -> None:
        """Release energy."""
        ...

    def level(self) -> float:
        """Energy currently stored."""
        ...

    def capacity(self) -> float:
        """Maximum energy that can be stored."""
        ...


def to_float(value: object, name: str) -> float:
    """Coerce a numeric parameter, rejecting anything non-numeric."""
    if isinstance(value, bool):
        raise InvalidParameterError(f"{name} must be a number, got {value!r}")
    try:
        number = float(value)  # type: ignore[arg-type]
    except (TypeError, ValueError) as e:
        raise InvalidParameterError(f"{name} must be a number, got {value!r}") from e
    if not math.isfinite(number):
        raise InvalidParameterError(f"{name} must be finite, got {value!r}")
    return number


def require(condition: bool, message: str) -> None:
    """Raise InvalidParameterError unless the condition holds."""
    if not condition:
        raise InvalidParameterError(message)
