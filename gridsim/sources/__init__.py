"""Energy sources: solar panels, wind turbines and batteries."""

from gridsim.sources.base import EnergySource, EnergyStorage, SourceKind
from gridsim.sources.generation import SolarPanel, WindTurbine
from gridsim.sources.storage import Battery

# Closed set of concrete source variants
AnySource = SolarPanel | WindTurbine | Battery

__all__ = [
    "AnySource",
    "Battery",
    "EnergySource",
    "EnergyStorage",
    "SolarPanel",
    "SourceKind",
    "WindTurbine",
]
