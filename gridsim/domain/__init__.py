"""Record types for the energy grid simulation."""

from gridsim.domain.models import (
    AlertRecord,
    AlertSeverity,
    AlertStatus,
    AlertType,
    Recommendation,
    RecommendationImpact,
    RecommendationPriority,
    SimulationRecord,
)

__all__ = [
    "SimulationRecord",
    "AlertType",
    "AlertSeverity",
    "AlertStatus",
    "AlertRecord",
    "RecommendationPriority",
    "RecommendationImpact",
    "Recommendation",
]
