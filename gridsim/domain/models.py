"""Core record types for the energy grid simulation.

All records use Pydantic with strict validation and are immutable once
built. Units follow the simulation's teaching conventions:
- Energy: kWh per tick
- Time: discrete ticks (one per simulated time unit)
"""

from datetime import datetime
from enum import Enum
from typing import Annotated, Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

# =============================================================================
# Type Aliases with Validation
# =============================================================================

EnergyKWh = Annotated[
    float,
    Field(ge=0, allow_inf_nan=False, description="Energy in kilowatt-hours (kWh)"),
]
Tick = Annotated[int, Field(ge=0, description="Simulated time step index")]

DISPLAY_DATE_FORMAT = "%d/%m/%Y %H:%M:%S"


# =============================================================================
# Enums
# =============================================================================


class AlertType(str, Enum):
    """Kinds of threshold breach detected by the alert engine."""

    CONSUMPTION_EXCESSIVE = "CONSUMPTION_EXCESSIVE"
    PRODUCTION_LOW = "PRODUCTION_LOW"
    ENERGY_DEFICIT = "ENERGY_DEFICIT"
    BATTERY_LOW = "BATTERY_LOW"


class AlertSeverity(str, Enum):
    """Alert severity, most severe first."""

    CRITIQUE = "CRITIQUE"
    HAUTE = "HAUTE"
    MOYENNE = "MOYENNE"
    BASSE = "BASSE"

    @property
    def score(self) -> float:
        """Severity score in [0, 1]."""
        return _SEVERITY_SCORES[self]


_SEVERITY_SCORES = {
    AlertSeverity.CRITIQUE: 1.0,
    AlertSeverity.HAUTE: 0.75,
    AlertSeverity.MOYENNE: 0.5,
    AlertSeverity.BASSE: 0.25,
}


class AlertStatus(str, Enum):
    """Alert lifecycle status. RESOLVED and ACKNOWLEDGED are terminal."""

    ACTIVE = "ACTIVE"
    RESOLVED = "RESOLVED"
    ACKNOWLEDGED = "ACKNOWLEDGED"


class RecommendationPriority(str, Enum):
    """Priority of an optimization recommendation."""

    HAUTE = "HAUTE"
    MOYENNE = "MOYENNE"
    BASSE = "BASSE"


class RecommendationImpact(str, Enum):
    """Expected impact of an optimization recommendation."""

    ELEVE = "ELEVE"
    MOYEN = "MOYEN"
    FAIBLE = "FAIBLE"


_PRIORITY_SCORES = {
    RecommendationPriority.HAUTE: 1.0,
    RecommendationPriority.MOYENNE: 0.5,
    RecommendationPriority.BASSE: 0.25,
}

_IMPACT_SCORES = {
    RecommendationImpact.ELEVE: 1.0,
    RecommendationImpact.MOYEN: 0.5,
    RecommendationImpact.FAIBLE: 0.25,
}


# =============================================================================
# Simulation Records
# =============================================================================


class SimulationRecord(BaseModel):
    """State of the grid at one simulated tick.

    This is the persisted unit of the historical ledger.
    """

    model_config = ConfigDict(frozen=True)

    tick: Tick
    consumption: EnergyKWh
    production: EnergyKWh

    @property
    def balance(self) -> float:
        """Production minus consumption (negative means deficit)."""
        return self.production - self.consumption

    @property
    def is_surplus(self) -> bool:
        """True when production covers consumption."""
        return self.production >= self.consumption

    @property
    def is_deficit(self) -> bool:
        """True when consumption exceeds production."""
        return self.production < self.consumption

    def __str__(self) -> str:
        return (
            f"Tick: {self.tick} | Consumption: {self.consumption:.2f} kWh | "
            f"Production: {self.production:.2f} kWh | Balance: {self.balance:.2f} kWh"
        )


# =============================================================================
# Alerts
# =============================================================================


class AlertRecord(BaseModel):
    """Immutable notice of a threshold breach.

    Status changes never mutate a record: ``with_status`` returns a new
    record that replaces the old one in the alert history.
    """

    model_config = ConfigDict(frozen=True)

    timestamp: datetime = Field(default_factory=datetime.now)
    type: AlertType
    severity: AlertSeverity
    message: Annotated[str, Field(min_length=1)]
    status: AlertStatus = AlertStatus.ACTIVE
    measured_value: float
    threshold_value: float

    def with_status(self, status: AlertStatus) -> "AlertRecord":
        """Copy of this record carrying a new status."""
        return self.model_copy(update={"status": AlertStatus(status)})

    @property
    def is_active(self) -> bool:
        return self.status == AlertStatus.ACTIVE

    @property
    def is_critical(self) -> bool:
        return self.severity == AlertSeverity.CRITIQUE

    @property
    def severity_score(self) -> float:
        """Severity score in [0, 1]."""
        return self.severity.score

    @property
    def formatted_timestamp(self) -> str:
        return self.timestamp.strftime(DISPLAY_DATE_FORMAT)

    def __str__(self) -> str:
        return (
            f"[{self.formatted_timestamp}] {self.severity.value} - "
            f"{self.type.value}: {self.message} (Status: {self.status.value})"
        )


# =============================================================================
# Recommendations
# =============================================================================


class Recommendation(BaseModel):
    """Optimization recommendation shown to the operator.

    Unknown priority or impact labels fall back to the medium level and a
    negative savings estimate is clamped to zero.
    """

    model_config = ConfigDict(frozen=True)

    title: Annotated[str, Field(min_length=1)]
    description: Annotated[str, Field(min_length=1)]
    priority: RecommendationPriority = RecommendationPriority.MOYENNE
    impact: RecommendationImpact = RecommendationImpact.MOYEN
    estimated_savings: float = 0.0
    category: str = "GENERAL"

    @field_validator("priority", mode="before")
    @classmethod
    def _default_priority(cls, value: Any) -> RecommendationPriority:
        try:
            return RecommendationPriority(value)
        except ValueError:
            return RecommendationPriority.MOYENNE

    @field_validator("impact", mode="before")
    @classmethod
    def _default_impact(cls, value: Any) -> RecommendationImpact:
        try:
            return RecommendationImpact(value)
        except ValueError:
            return RecommendationImpact.MOYEN

    @field_validator("estimated_savings")
    @classmethod
    def _clamp_savings(cls, value: float) -> float:
        return max(0.0, value)

    @field_validator("category", mode="before")
    @classmethod
    def _default_category(cls, value: Any) -> Any:
        return value or "GENERAL"

    @property
    def priority_score(self) -> float:
        return _PRIORITY_SCORES[self.priority]

    @property
    def impact_score(self) -> float:
        return _IMPACT_SCORES[self.impact]

    @property
    def overall_score(self) -> float:
        """Mean of priority and impact scores."""
        return (self.priority_score + self.impact_score) / 2.0

    def __str__(self) -> str:
        return (
            f"[{self.priority.value}] {self.title} - Impact: {self.impact.value} | "
            f"Savings: {self.estimated_savings:.2f} kWh"
        )
