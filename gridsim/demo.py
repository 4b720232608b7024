"""Demo module for running a small grid simulation from the command line.

Usage:
    python -m gridsim.demo --ticks 5 --ledger history.csv --flush

Or in Python:
    from gridsim.demo import run_demo
    results = run_demo(DemoConfig(ticks=3))
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from gridsim.alerts import AlertEngine
from gridsim.core.config import get_settings
from gridsim.core.logging import setup_logging
from gridsim.domain.models import AlertRecord
from gridsim.ledger import HistoricalLedger, LedgerStatistics
from gridsim.simulation import Consumer, EnergyManager, SimulationDriver, StepResult
from gridsim.sources import Battery, SolarPanel, WindTurbine


@dataclass
class DemoConfig:
    """Configuration for the demo scenario.

    Attributes:
        ticks: Number of simulated time steps.
        ledger_path: Ledger file (settings default when None).
        flush: Persist the ledger at the end of the run.
        consumption_threshold: Maximum consumption before alerting.
        production_threshold: Minimum production before alerting.
        battery_threshold: Minimum battery charge percentage.
        wind_speed: Initial wind speed for the turbine.
    """

    ticks: int = 5
    ledger_path: Path | None = None
    flush: bool = False
    consumption_threshold: float = 5.0
    production_threshold: float = 50.0
    battery_threshold: float = 20.0
    wind_speed: float = 6.0


@dataclass
class DemoResults:
    """Results from running the demo scenario."""

    steps: list[StepResult] = field(default_factory=list)
    alerts: list[AlertRecord] = field(default_factory=list)
    statistics: LedgerStatistics = field(default_factory=LedgerStatistics)
    ledger_path: Path | None = None
    flushed: bool = False

    def print_summary(self) -> None:
        """Print a formatted summary of the run."""
        print("\n" + "=" * 60)
        print("Energy Grid Simulation Demo")
        print("=" * 60)

        print("\nRecords:")
        for step in self.steps:
            print(f"   • {step.record}")

        print(f"\nAlerts ({len(self.alerts)}):")
        for alert in self.alerts:
            print(f"   • {alert}")

        print("\nStatistics:")
        for line in self.statistics.summary().splitlines():
            print(f"   • {line}")

        if self.ledger_path is not None:
            state = "saved to" if self.flushed else "not flushed:"
            print(f"\nLedger {state} {self.ledger_path}")
        print("=" * 60 + "\n")


def build_demo_manager(config: DemoConfig) -> EnergyManager:
    """Grid with a solar panel, a wind turbine, a battery and one house."""
    manager = EnergyManager()
    manager.add_source(SolarPanel(surface=10, efficiency=0.2, rated_power=5))
    manager.add_source(WindTurbine(wind_speed=config.wind_speed, rated_power=20))
    manager.add_source(Battery(max_capacity=100, level=15, efficiency=0.9))

    house = Consumer("House", 8)
    house.add_appliance("Heating", 5)
    house.add_appliance("Lighting", 1)
    manager.add_consumer(house)
    return manager


def run_demo(config: DemoConfig | None = None) -> DemoResults:
    """Run the demo scenario.

    Args:
        config: Demo configuration.

    Returns:
        DemoResults with the step records, alerts and ledger statistics.
    """
    config = config or DemoConfig()
    manager = build_demo_manager(config)

    engine = AlertEngine(manager)
    engine.configure_thresholds(
        config.consumption_threshold,
        config.production_threshold,
        config.battery_threshold,
    )
    ledger = HistoricalLedger(config.ledger_path)
    driver = SimulationDriver(manager, ledger, engine)

    steps = driver.run(config.ticks)
    statistics = LedgerStatistics.from_records(manager.history())
    flushed = ledger.flush() if config.flush else False

    return DemoResults(
        steps=steps,
        alerts=engine.alerts(),
        statistics=statistics,
        ledger_path=ledger.path,
        flushed=flushed,
    )


def main() -> None:
    """Main entry point for running the demo from the command line."""
    import argparse

    settings = get_settings()

    parser = argparse.ArgumentParser(description="Energy grid simulation demo")
    parser.add_argument(
        "--ticks",
        type=int,
        default=5,
        help="Number of simulated time steps (default: 5)",
    )
    parser.add_argument(
        "--ledger",
        type=str,
        default=None,
        help="Ledger CSV file (default: timestamped file in GRIDSIM_LEDGER_DIR)",
    )
    parser.add_argument(
        "--flush",
        action="store_true",
        help="Write the ledger to disk at the end of the run",
    )
    parser.add_argument(
        "--consumption-threshold",
        type=float,
        default=5.0,
        help="Maximum consumption in kWh (default: 5)",
    )
    parser.add_argument(
        "--production-threshold",
        type=float,
        default=50.0,
        help="Minimum production in kWh (default: 50)",
    )
    parser.add_argument(
        "--json-logs",
        action="store_true",
        help="Emit structured JSON logs",
    )

    args = parser.parse_args()
    setup_logging(settings.log_level, json_format=args.json_logs or settings.log_json)

    config = DemoConfig(
        ticks=args.ticks,
        ledger_path=Path(args.ledger) if args.ledger else None,
        flush=args.flush,
        consumption_threshold=args.consumption_threshold,
        production_threshold=args.production_threshold,
        battery_threshold=settings.battery_threshold,
    )

    results = run_demo(config)
    results.print_summary()


if __name__ == "__main__":
    main()
