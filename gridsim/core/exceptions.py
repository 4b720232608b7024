"""Error taxonomy for the simulation core.

Validation errors subclass ``ValueError`` so callers that only know the
standard library contract can still catch them.
"""


class GridSimError(Exception):
    """Base class for all simulation errors."""


class InvalidParameterError(GridSimError, ValueError):
    """A constructor, setter or configuration received an out-of-range value."""


class NegativeQuantityError(InvalidParameterError):
    """A storage operation was given a negative energy quantity."""

    def __init__(self, quantity: float) -> None:
        super().__init__(f"Negative energy quantity not allowed: {quantity}")
        self.quantity = quantity


class DischargeExceedsLevelError(GridSimError):
    """A discharge asked for more energy than the storage holds."""

    def __init__(self, requested: float, available: float) -> None:
        super().__init__(
            f"Discharge exceeds available level: {requested} > {available}"
        )
        self.requested = requested
        self.available = available


class InvalidFactorError(InvalidParameterError):
    """A multiplicative consumption adjustment used a factor <= 0."""

    def __init__(self, factor: float) -> None:
        super().__init__(f"Adjustment factor must be positive, got {factor}")
        self.factor = factor


class InvalidStateError(GridSimError):
    """The energy manager was handed a missing or invalid entity."""


class LedgerIOError(GridSimError):
    """A ledger file operation failed.

    Raised internally and caught at the ledger boundary; callers observe it
    through ``HistoricalLedger.last_error``.
    """

    def __init__(self, operation: str, path: object, cause: BaseException) -> None:
        super().__init__(f"Ledger {operation} failed for {path}: {cause}")
        self.operation = operation
        self.path = path
        self.cause = cause
