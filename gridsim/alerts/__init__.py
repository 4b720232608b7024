"""Threshold rules and the alert engine."""

from gridsim.alerts.engine import AlertEngine, AlertObserver
from gridsim.alerts.rules import AlertThresholdRule

__all__ = [
    "AlertEngine",
    "AlertObserver",
    "AlertThresholdRule",
]
