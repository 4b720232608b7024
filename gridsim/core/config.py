"""Runtime settings, overridable through ``GRIDSIM_*`` environment variables."""

from datetime import datetime
from functools import lru_cache
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

LEDGER_FILE_DATE_FORMAT = "%Y%m%d_%H%M%S"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="GRIDSIM_", case_sensitive=False)

    # Ledger
    ledger_dir: Path = Path(".")
    ledger_filename: str | None = None
    temp_suffix: str = ".tmp"

    # Alert thresholds
    consumption_threshold: float = Field(default=100.0, ge=0)
    production_threshold: float = Field(default=50.0, ge=0)
    battery_threshold: float = Field(default=20.0, ge=0)

    # Simulation
    tick_interval_seconds: float = Field(default=1.0, gt=0)
    storage_charge_quantity: float = Field(default=10.0, ge=0)

    # Logging
    log_level: str = "INFO"
    log_json: bool = False

    def ledger_path(self, now: datetime | None = None) -> Path:
        """Resolve the ledger file path.

        Without an explicit filename a timestamped ``history_*.csv`` name is
        generated, so every run gets its own file.
        """
        if self.ledger_filename:
            return self.ledger_dir / self.ledger_filename
        stamp = (now or datetime.now()).strftime(LEDGER_FILE_DATE_FORMAT)
        return self.ledger_dir / f"history_{stamp}.csv"


@lru_cache
def get_settings() -> Settings:
    return Settings()
