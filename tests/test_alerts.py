"""Tests for the alert engine and threshold rule."""

import logging
import threading
from datetime import datetime

import pytest

from gridsim.alerts import AlertEngine, AlertThresholdRule
from gridsim.core.exceptions import InvalidParameterError
from gridsim.domain.models import AlertRecord, AlertSeverity, AlertStatus, AlertType
from gridsim.simulation import Consumer, EnergyManager, SimulationSnapshot
from gridsim.sources import SolarPanel


def grid(production: float, consumption: float) -> EnergyManager:
    """Manager whose totals are exactly the given values."""
    manager = EnergyManager()
    if production > 0:
        manager.add_source(SolarPanel(surface=production, efficiency=1.0, rated_power=1))
    manager.add_consumer(Consumer("Load", consumption))
    return manager


class TestAlertThresholdRule:
    """Tests for AlertThresholdRule."""

    def test_build(self) -> None:
        rule = AlertThresholdRule.build(5, 50)
        assert rule.consumption_threshold == 5.0
        assert rule.production_threshold == 50.0
        assert rule.battery_threshold == 20.0

    @pytest.mark.parametrize(
        "values", [(-1, 50), (5, -0.1), ("abc", 50), (5, float("nan")), (5, 50, -3)]
    )
    def test_build_rejects_invalid(self, values: tuple) -> None:
        with pytest.raises(InvalidParameterError):
            AlertThresholdRule.build(*values)

    def test_is_triggered(self) -> None:
        rule = AlertThresholdRule.build(10, 5)
        assert rule.is_triggered(SimulationSnapshot(0, 6.0, 11.0)) is True
        assert rule.is_triggered(SimulationSnapshot(0, 4.0, 2.0)) is True
        assert rule.is_triggered(SimulationSnapshot(0, 5.0, 10.0)) is False


class TestEvaluation:
    """Tests for the detection pass."""

    def test_reference_scenario(
        self, reference_manager: EnergyManager, reference_engine: AlertEngine
    ) -> None:
        """Consumption 8 against 5 and production 10 against 50."""
        reference_manager.tick()
        alerts = reference_engine.evaluate()

        assert [(a.type, a.severity) for a in alerts] == [
            (AlertType.CONSUMPTION_EXCESSIVE, AlertSeverity.CRITIQUE),
            (AlertType.PRODUCTION_LOW, AlertSeverity.CRITIQUE),
        ]
        assert alerts[0].measured_value == pytest.approx(8.0)
        assert alerts[0].threshold_value == 5.0
        assert all(a.status == AlertStatus.ACTIVE for a in alerts)

    def test_timestamps_from_clock(
        self, reference_engine: AlertEngine, base_timestamp: datetime
    ) -> None:
        alerts = reference_engine.evaluate()
        assert all(a.timestamp == base_timestamp for a in alerts)

    def test_no_alert_within_limits(self) -> None:
        engine = AlertEngine(grid(production=60, consumption=10))
        assert engine.evaluate() == []
        assert engine.count() == 0

    def test_default_thresholds(self) -> None:
        """Without a configured rule the engine uses 100 / 50 / 20%."""
        engine = AlertEngine(grid(production=60, consumption=120))
        assert engine.rule == AlertThresholdRule(
            consumption_threshold=100, production_threshold=50, battery_threshold=20
        )
        alerts = engine.evaluate()
        assert [a.type for a in alerts] == [
            AlertType.CONSUMPTION_EXCESSIVE,
            AlertType.ENERGY_DEFICIT,
        ]

    @pytest.mark.parametrize(
        ("consumption", "expected"),
        [
            (5.0, None),
            (6.0, AlertSeverity.HAUTE),
            (7.5, AlertSeverity.HAUTE),
            (7.6, AlertSeverity.CRITIQUE),
        ],
    )
    def test_consumption_severity(
        self, consumption: float, expected: AlertSeverity | None
    ) -> None:
        """Exactly 1.5x the threshold is not yet critical."""
        engine = AlertEngine(grid(production=100, consumption=consumption))
        engine.configure_thresholds(5, 0)
        engine.evaluate()
        alerts = engine.filter_by_type(AlertType.CONSUMPTION_EXCESSIVE)
        if expected is None:
            assert alerts == []
        else:
            assert [a.severity for a in alerts] == [expected]

    @pytest.mark.parametrize(
        ("production", "expected"),
        [
            (50.0, None),
            (30.0, AlertSeverity.MOYENNE),
            (25.0, AlertSeverity.MOYENNE),
            (24.0, AlertSeverity.CRITIQUE),
        ],
    )
    def test_production_severity(
        self, production: float, expected: AlertSeverity | None
    ) -> None:
        """Exactly 0.5x the threshold is not yet critical."""
        engine = AlertEngine(grid(production=production, consumption=0))
        engine.configure_thresholds(1000, 50)
        engine.evaluate()
        alerts = engine.filter_by_type(AlertType.PRODUCTION_LOW)
        if expected is None:
            assert alerts == []
        else:
            assert [a.severity for a in alerts] == [expected]

    @pytest.mark.parametrize(
        ("consumption", "expected"),
        [
            (10.0, None),
            (40.0, AlertSeverity.HAUTE),
            (60.0, AlertSeverity.HAUTE),
            (61.0, AlertSeverity.CRITIQUE),
        ],
    )
    def test_deficit_severity(
        self, consumption: float, expected: AlertSeverity | None
    ) -> None:
        """Production 10: a deficit above 50 kWh is critical."""
        engine = AlertEngine(grid(production=10, consumption=consumption))
        engine.configure_thresholds(1000, 0)
        engine.evaluate()
        alerts = engine.filter_by_type(AlertType.ENERGY_DEFICIT)
        if expected is None:
            assert alerts == []
        else:
            assert [a.severity for a in alerts] == [expected]
            assert alerts[0].measured_value == pytest.approx(10.0 - consumption)

    def test_deficit_grid(self, deficit_manager: EnergyManager) -> None:
        engine = AlertEngine(deficit_manager)
        engine.configure_thresholds(1000, 0)
        (alert,) = engine.evaluate()
        assert alert.type == AlertType.ENERGY_DEFICIT
        assert alert.severity == AlertSeverity.CRITIQUE

    def test_battery_alerts_per_battery(self, battery_manager: EnergyManager) -> None:
        engine = AlertEngine(battery_manager)
        engine.configure_thresholds(1000, 0, 20)
        alerts = engine.evaluate()

        assert [a.type for a in alerts] == [AlertType.BATTERY_LOW] * 2
        assert [a.severity for a in alerts] == [
            AlertSeverity.HAUTE,
            AlertSeverity.CRITIQUE,
        ]
        assert [a.measured_value for a in alerts] == pytest.approx([15.0, 5.0])
        assert "Battery #2" in alerts[0].message
        assert "Battery #3" in alerts[1].message

    def test_evaluation_order(self, battery_manager: EnergyManager) -> None:
        """Consumption, production, deficit, then batteries."""
        battery_manager.add_consumer(Consumer("Factory", 200))
        engine = AlertEngine(battery_manager)
        engine.configure_thresholds(5, 50)
        types = [a.type for a in engine.evaluate()]
        assert types == [
            AlertType.CONSUMPTION_EXCESSIVE,
            AlertType.PRODUCTION_LOW,
            AlertType.ENERGY_DEFICIT,
            AlertType.BATTERY_LOW,
            AlertType.BATTERY_LOW,
        ]

    def test_history_accumulates(self, reference_engine: AlertEngine) -> None:
        reference_engine.evaluate()
        reference_engine.evaluate()
        assert reference_engine.count() == 4

    def test_critical_alert_logs_warning(
        self, reference_engine: AlertEngine, caplog: pytest.LogCaptureFixture
    ) -> None:
        with caplog.at_level(logging.INFO, logger="gridsim.alerts.engine"):
            reference_engine.evaluate()
        assert any(r.levelno == logging.WARNING for r in caplog.records)


class TestConfiguration:
    """Tests for threshold configuration."""

    def test_configure_pushes_rule_to_manager(
        self, reference_manager: EnergyManager
    ) -> None:
        engine = AlertEngine(reference_manager)
        rule = engine.configure_thresholds(5, 50)
        assert reference_manager.alert_rule == rule
        assert engine.rule == rule
        assert reference_manager.check_alert() is True

    def test_manager_rule_is_used(self, reference_manager: EnergyManager) -> None:
        engine = AlertEngine(reference_manager)
        reference_manager.configure_alert_rule(1000, 0)
        assert engine.evaluate() == []

    def test_constructor_rule_installed(self, reference_manager: EnergyManager) -> None:
        rule = AlertThresholdRule.build(5, 50)
        engine = AlertEngine(reference_manager, rule=rule)
        assert reference_manager.alert_rule == rule
        assert engine.rule == rule

    def test_invalid_thresholds_leave_state_unchanged(
        self, reference_manager: EnergyManager, reference_engine: AlertEngine
    ) -> None:
        before = reference_engine.rule
        with pytest.raises(InvalidParameterError):
            reference_engine.configure_thresholds(-1, 50)
        assert reference_engine.rule == before
        assert reference_manager.alert_rule == before

    def test_battery_threshold_kept(self, reference_engine: AlertEngine) -> None:
        reference_engine.configure_thresholds(5, 50, 40)
        rule = reference_engine.configure_thresholds(6, 60)
        assert rule.battery_threshold == 40.0


class TestObserver:
    """Tests for alert notification."""

    def test_observer_receives_each_alert(self, reference_engine: AlertEngine) -> None:
        received: list[AlertRecord] = []
        reference_engine.register_observer(received.append)
        emitted = reference_engine.evaluate()
        assert received == emitted

    def test_last_registration_wins(self, reference_engine: AlertEngine) -> None:
        first: list[AlertRecord] = []
        second: list[AlertRecord] = []
        reference_engine.register_observer(first.append)
        reference_engine.register_observer(second.append)
        reference_engine.evaluate()
        assert first == []
        assert len(second) == 2

    def test_unregister(self, reference_engine: AlertEngine) -> None:
        received: list[AlertRecord] = []
        reference_engine.register_observer(received.append)
        reference_engine.register_observer(None)
        reference_engine.evaluate()
        assert received == []

    def test_failing_observer_does_not_interrupt(
        self, reference_engine: AlertEngine, caplog: pytest.LogCaptureFixture
    ) -> None:
        def broken(alert: AlertRecord) -> None:
            raise RuntimeError("display unavailable")

        reference_engine.register_observer(broken)
        with caplog.at_level(logging.ERROR, logger="gridsim.alerts.engine"):
            alerts = reference_engine.evaluate()

        assert len(alerts) == 2
        assert reference_engine.count() == 2
        assert "Alert observer failed" in caplog.text


class TestQueries:
    """Tests for alert history queries."""

    @pytest.fixture
    def populated(self, battery_manager: EnergyManager, fixed_clock) -> AlertEngine:
        """Engine holding PRODUCTION_LOW CRITIQUE plus two battery alerts."""
        engine = AlertEngine(battery_manager, clock=fixed_clock)
        engine.configure_thresholds(1000, 50, 20)
        engine.evaluate()
        return engine

    def test_counts(self, populated: AlertEngine) -> None:
        assert populated.count() == 3
        assert populated.active_count() == 3
        assert populated.count_by_severity() == {
            AlertSeverity.CRITIQUE: 2,
            AlertSeverity.HAUTE: 1,
        }

    def test_filters(self, populated: AlertEngine) -> None:
        assert len(populated.filter_by_type(AlertType.BATTERY_LOW)) == 2
        assert len(populated.filter_by_severity(AlertSeverity.HAUTE)) == 1
        assert len(populated.critical_alerts()) == 2
        assert populated.filter_by_status(AlertStatus.RESOLVED) == []

    def test_latest_alert(self, populated: AlertEngine) -> None:
        latest = populated.latest_alert()
        assert latest is not None
        assert latest.type == AlertType.BATTERY_LOW
        assert AlertEngine(EnergyManager()).latest_alert() is None

    def test_alerts_returns_copy(self, populated: AlertEngine) -> None:
        populated.alerts().clear()
        assert populated.count() == 3

    def test_average_severity_score(self, populated: AlertEngine) -> None:
        assert populated.average_severity_score() == pytest.approx((1 + 1 + 0.75) / 3)
        populated.acknowledge_all()
        assert populated.average_severity_score() == 0.0


class TestLifecycle:
    """Tests for alert status transitions."""

    def test_acknowledge_all(self, reference_engine: AlertEngine) -> None:
        reference_engine.evaluate()
        assert reference_engine.resolve(0) is True

        assert reference_engine.acknowledge_all() == 1
        assert reference_engine.active_count() == 0
        statuses = [a.status for a in reference_engine.alerts()]
        assert statuses == [AlertStatus.RESOLVED, AlertStatus.ACKNOWLEDGED]

    def test_transition_builds_new_record(self, reference_engine: AlertEngine) -> None:
        (first, _) = reference_engine.evaluate()
        reference_engine.acknowledge(0)

        assert first.status == AlertStatus.ACTIVE
        updated = reference_engine.alerts()[0]
        assert updated.status == AlertStatus.ACKNOWLEDGED
        assert updated.message == first.message

    def test_terminal_statuses_do_not_change(
        self, reference_engine: AlertEngine
    ) -> None:
        reference_engine.evaluate()
        reference_engine.acknowledge(0)
        reference_engine.resolve(1)

        assert reference_engine.resolve(0) is False
        assert reference_engine.acknowledge(1) is False
        assert [a.status for a in reference_engine.alerts()] == [
            AlertStatus.ACKNOWLEDGED,
            AlertStatus.RESOLVED,
        ]

    @pytest.mark.parametrize("index", [-1, 2, 100])
    def test_out_of_range_is_noop(
        self, reference_engine: AlertEngine, index: int
    ) -> None:
        reference_engine.evaluate()
        assert reference_engine.acknowledge(index) is False
        assert reference_engine.resolve(index) is False
        assert reference_engine.active_count() == 2

    def test_purge_resolved(self, reference_engine: AlertEngine) -> None:
        reference_engine.evaluate()
        reference_engine.resolve(1)
        assert reference_engine.purge_resolved() == 1
        assert reference_engine.count() == 1
        assert reference_engine.purge_resolved() == 0

    def test_clear(self, reference_engine: AlertEngine) -> None:
        reference_engine.evaluate()
        reference_engine.clear()
        assert reference_engine.alerts() == []


class TestConcurrency:
    """Tests for sharing an engine between the tick thread and an operator."""

    def test_concurrent_evaluate_and_purge_loses_nothing(
        self, reference_engine: AlertEngine
    ) -> None:
        rounds = 2000
        purged = 0
        done = threading.Event()

        def tick_thread() -> None:
            for _ in range(rounds):
                reference_engine.evaluate()
            done.set()

        worker = threading.Thread(target=tick_thread)
        worker.start()
        while not done.is_set():
            reference_engine.resolve(0)
            removed = reference_engine.purge_resolved()
            assert removed >= 0
            purged += removed
        worker.join()

        assert reference_engine.count() + purged == rounds * 2
