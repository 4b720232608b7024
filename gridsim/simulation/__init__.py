"""Consumers, snapshots, the energy manager and the tick driver."""

from gridsim.simulation.consumer import Consumer
from gridsim.simulation.snapshot import BatteryLevel, SimulationSnapshot
from gridsim.simulation.manager import EnergyManager
from gridsim.simulation.driver import SimulationDriver, StepResult

__all__ = [
    "BatteryLevel",
    "Consumer",
    "EnergyManager",
    "SimulationDriver",
    "SimulationSnapshot",
    "StepResult",
]
