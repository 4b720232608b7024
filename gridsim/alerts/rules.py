"""Threshold rule deciding when the grid is in an alert condition."""

from __future__ import annotations

from typing import TYPE_CHECKING, Annotated

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from gridsim.core.exceptions import InvalidParameterError

if TYPE_CHECKING:
    from gridsim.simulation.snapshot import SimulationSnapshot

Threshold = Annotated[float, Field(ge=0, allow_inf_nan=False)]


class AlertThresholdRule(BaseModel):
    """Configured alert limits.

    The rule fires when consumption exceeds its maximum or production falls
    below its minimum. The battery threshold (a charge percentage) is only
    used by the alert engine's per-battery pass.
    """

    model_config = ConfigDict(frozen=True)

    consumption_threshold: Threshold
    production_threshold: Threshold
    battery_threshold: Threshold = 20.0

    @classmethod
    def build(
        cls,
        consumption_threshold: object,
        production_threshold: object,
        battery_threshold: object | None = None,
    ) -> AlertThresholdRule:
        """Validate raw operator input into a rule.

        Raises:
            InvalidParameterError: If any threshold is negative or non-numeric.
        """
        values = {
            "consumption_threshold": consumption_threshold,
            "production_threshold": production_threshold,
        }
        if battery_threshold is not None:
            values["battery_threshold"] = battery_threshold
        try:
            return cls.model_validate(values)
        except ValidationError as e:
            raise InvalidParameterError(f"Invalid alert thresholds: {e}") from e

    def is_triggered(self, snapshot: SimulationSnapshot) -> bool:
        """Check the consumption and production limits against a snapshot."""
        return (
            snapshot.total_consumption > self.consumption_threshold
            or snapshot.total_production < self.production_threshold
        )
