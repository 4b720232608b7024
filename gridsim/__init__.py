"""Energy grid simulation core: sources, consumers, alerts and history ledger."""

__version__ = "0.1.0"
