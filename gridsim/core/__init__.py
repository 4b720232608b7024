"""Cross-cutting concerns: configuration, logging and the error taxonomy."""

from gridsim.core.config import Settings, get_settings
from gridsim.core.exceptions import (
    DischargeExceedsLevelError,
    GridSimError,
    InvalidFactorError,
    InvalidParameterError,
    InvalidStateError,
    LedgerIOError,
    NegativeQuantityError,
)
from gridsim.core.logging import JSONFormatter, setup_logging

__all__ = [
    # Configuration
    "Settings",
    "get_settings",
    # Logging
    "JSONFormatter",
    "setup_logging",
    # Errors
    "GridSimError",
    "InvalidParameterError",
    "NegativeQuantityError",
    "DischargeExceedsLevelError",
    "InvalidFactorError",
    "InvalidStateError",
    "LedgerIOError",
]
