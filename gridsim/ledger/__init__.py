"""Historical ledger of simulation records and its read-only analysis."""

from gridsim.ledger.analysis import (
    LedgerStatistics,
    deficits,
    latest,
    records_from_tick,
    records_with_consumption_at_most,
    records_with_production_at_least,
    surpluses,
)
from gridsim.ledger.store import HEADER, HistoricalLedger, format_line, parse_line

__all__ = [
    # Store
    "HEADER",
    "HistoricalLedger",
    "format_line",
    "parse_line",
    # Analysis
    "LedgerStatistics",
    "deficits",
    "latest",
    "records_from_tick",
    "records_with_consumption_at_most",
    "records_with_production_at_least",
    "surpluses",
]
