"""Shared fixtures for reproducible grid scenarios.

Provides the standard scenarios used across the suite:
- Reference grid (solar 10 x 0.2 x 5, one 8 kWh house)
- Deficit grid (consumption well above production)
- Grid with batteries at various charge levels
"""

from datetime import datetime
from pathlib import Path

import pytest

from gridsim.alerts import AlertEngine
from gridsim.ledger import HistoricalLedger
from gridsim.simulation import Consumer, EnergyManager
from gridsim.sources import Battery, SolarPanel

# =============================================================================
# Time Fixtures
# =============================================================================


@pytest.fixture
def base_timestamp() -> datetime:
    """Fixed timestamp for deterministic records."""
    return datetime(2025, 7, 15, 12, 0, 0)


@pytest.fixture
def fixed_clock(base_timestamp: datetime):
    """Clock callable always returning the base timestamp."""
    return lambda: base_timestamp


# =============================================================================
# Grid Fixtures
# =============================================================================


@pytest.fixture
def reference_manager() -> EnergyManager:
    """Solar panel producing 10 kWh and a house consuming 8 kWh."""
    manager = EnergyManager()
    manager.add_source(SolarPanel(surface=10, efficiency=0.2, rated_power=5))
    manager.add_consumer(Consumer("House", 8))
    return manager


@pytest.fixture
def deficit_manager() -> EnergyManager:
    """Production 10 kWh against 100 kWh of consumption."""
    manager = EnergyManager()
    manager.add_source(SolarPanel(surface=10, efficiency=0.2, rated_power=5))
    manager.add_consumer(Consumer("Factory", 100))
    return manager


@pytest.fixture
def battery_manager() -> EnergyManager:
    """Grid with a full, a low (15%) and a critical (5%) battery."""
    manager = EnergyManager()
    manager.add_source(SolarPanel(surface=10, efficiency=0.2, rated_power=5))
    manager.add_source(Battery(max_capacity=100, level=100, efficiency=0.9))
    manager.add_source(Battery(max_capacity=100, level=15, efficiency=0.9))
    manager.add_source(Battery(max_capacity=200, level=10, efficiency=0.9))
    manager.add_consumer(Consumer("House", 8))
    return manager


@pytest.fixture
def reference_engine(reference_manager: EnergyManager, fixed_clock) -> AlertEngine:
    """Alert engine over the reference grid with thresholds 5 / 50."""
    engine = AlertEngine(reference_manager, clock=fixed_clock)
    engine.configure_thresholds(5, 50)
    return engine


# =============================================================================
# Ledger Fixtures
# =============================================================================


@pytest.fixture
def ledger_path(tmp_path: Path) -> Path:
    return tmp_path / "history.csv"


@pytest.fixture
def ledger(ledger_path: Path, fixed_clock) -> HistoricalLedger:
    """Fresh ledger on a temporary file."""
    return HistoricalLedger(ledger_path, clock=fixed_clock)
