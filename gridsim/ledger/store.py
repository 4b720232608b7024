"""Durable, append-only history of simulation records.

Records are buffered in memory and written to a CSV file in batches. A
flush never edits the file in place: it writes the complete new content to
a temporary sibling file and atomically renames it over the ledger, so a
reader only ever sees the old file or the new one.

I/O failures are caught here. They are logged, kept in ``last_error`` and
reported through the boolean result of the operation; buffered records are
kept for the next attempt.
"""

from __future__ import annotations

import contextlib
import logging
import os
import threading
from collections.abc import Callable
from datetime import datetime
from pathlib import Path

from pydantic import ValidationError

from gridsim.core.config import Settings, get_settings
from gridsim.core.exceptions import InvalidStateError, LedgerIOError
from gridsim.domain.models import DISPLAY_DATE_FORMAT, SimulationRecord

logger = logging.getLogger(__name__)

HEADER = "Date/Time,Tick,Production,Consumption,Balance"
FIELD_COUNT = 5


def format_line(record: SimulationRecord, timestamp: datetime) -> str:
    """Render one ledger data line."""
    return (
        f"{timestamp.strftime(DISPLAY_DATE_FORMAT)},{record.tick},"
        f"{record.production:.2f},{record.consumption:.2f},{record.balance:.2f}"
    )


def parse_line(line: str) -> SimulationRecord:
    """Parse one ledger data line.

    Raises:
        ValueError: If the field count is wrong, the timestamp or a number
            does not parse, or the values violate the record invariants.
    """
    parts = line.split(",")
    if len(parts) != FIELD_COUNT:
        raise ValueError(f"expected {FIELD_COUNT} fields, got {len(parts)}")
    datetime.strptime(parts[0].strip(), DISPLAY_DATE_FORMAT)
    tick = int(parts[1].strip())
    production = float(parts[2].strip())
    consumption = float(parts[3].strip())
    return SimulationRecord(tick=tick, consumption=consumption, production=production)


class HistoricalLedger:
    """Append-only ledger backed by a CSV file.

    A single coarse lock guards the buffer and both files, so append, flush,
    load and clear may be called from different threads.

    Records read back from the file are marked as persisted: a later flush
    only writes records appended after the load.

    Example:
        ```python
        ledger = HistoricalLedger(tmp_dir / "history.csv")
        ledger.append(manager.tick())
        if not ledger.flush():
            show_warning(ledger.last_error)
        ```
    """

    def __init__(
        self,
        path: str | Path | None = None,
        *,
        settings: Settings | None = None,
        temp_suffix: str | None = None,
        clock: Callable[[], datetime] = datetime.now,
        autoload: bool = True,
    ) -> None:
        """Open (or create) a ledger file.

        Args:
            path: Ledger file. Defaults to the path resolved from settings.
            settings: Settings used for the default path and temp suffix.
            temp_suffix: Suffix of the temporary file used during writes.
            clock: Timestamp source for data lines.
            autoload: Load an existing file, or create a header-only one.
        """
        settings = settings or get_settings()
        self._path = Path(path) if path is not None else settings.ledger_path()
        suffix = temp_suffix if temp_suffix is not None else settings.temp_suffix
        self._temp_path = self._path.with_name(self._path.name + suffix)
        self._clock = clock
        self._lock = threading.Lock()
        self._records: list[SimulationRecord] = []
        self._persisted = 0
        self._last_error: LedgerIOError | None = None
        self._skipped_lines: list[str] = []

        if autoload:
            if self._path.exists():
                self.load_from_file()
            else:
                self._initialize_file()

    # -------------------------------------------------------------------------
    # Properties
    # -------------------------------------------------------------------------

    @property
    def path(self) -> Path:
        return self._path

    @property
    def temp_path(self) -> Path:
        return self._temp_path

    @property
    def last_error(self) -> LedgerIOError | None:
        """Most recent I/O failure, cleared by the next successful operation."""
        return self._last_error

    @property
    def skipped_lines(self) -> list[str]:
        """Malformed lines skipped by the last load."""
        return list(self._skipped_lines)

    # -------------------------------------------------------------------------
    # Buffer
    # -------------------------------------------------------------------------

    def append(self, record: SimulationRecord | None) -> None:
        """Buffer a record in memory. Does not touch the disk.

        Raises:
            InvalidStateError: If record is not a SimulationRecord.
        """
        if record is None:
            return
        if not isinstance(record, SimulationRecord):
            raise InvalidStateError(f"Not a simulation record: {record!r}")
        with self._lock:
            self._records.append(record)

    def snapshot(self) -> tuple[SimulationRecord, ...]:
        """Immutable copy of the in-memory buffer."""
        with self._lock:
            return tuple(self._records)

    def size(self) -> int:
        with self._lock:
            return len(self._records)

    def is_empty(self) -> bool:
        return self.size() == 0

    def __len__(self) -> int:
        return self.size()

    def pending_count(self) -> int:
        """Number of buffered records not yet written to disk."""
        with self._lock:
            return len(self._records) - self._persisted

    # -------------------------------------------------------------------------
    # Persistence
    # -------------------------------------------------------------------------

    def flush(self) -> bool:
        """Write pending records to disk atomically.

        The existing data lines are kept, the new ones are added after them,
        and the result replaces the ledger file in one rename. The buffer is
        cleared only once the rename has succeeded.

        Returns:
            True if the file now holds every buffered record.
        """
        with self._lock:
            pending = self._records[self._persisted :]
            if not pending:
                return True

            try:
                existing = self._read_data_lines()
                now = self._clock()
                new_lines = [format_line(record, now) for record in pending]
                self._write_atomically(existing + new_lines)
            except (OSError, UnicodeError) as e:
                self._fail("flush", e)
                return False

            self._records.clear()
            self._persisted = 0
            self._last_error = None

        logger.info(
            "Ledger flushed %d record(s) to %s",
            len(pending),
            self._path,
            extra={"records": len(pending), "path": str(self._path)},
        )
        return True

    def load_from_file(self) -> bool:
        """Replace the buffer with the records stored on disk.

        Malformed lines are skipped, logged and listed in ``skipped_lines``.

        Returns:
            True if the file could be read (or does not exist yet).
        """
        with self._lock:
            if not self._path.exists():
                self._records = []
                self._persisted = 0
                self._skipped_lines = []
                logger.info("No ledger file to load at %s", self._path)
                return True

            try:
                lines = self._read_data_lines()
            except (OSError, UnicodeError) as e:
                self._fail("load", e)
                return False

            records: list[SimulationRecord] = []
            skipped: list[str] = []
            for line in lines:
                try:
                    records.append(parse_line(line))
                except (ValueError, ValidationError) as e:
                    skipped.append(line)
                    logger.warning("Skipping malformed ledger line %r: %s", line, e)

            self._records = records
            self._persisted = len(records)
            self._skipped_lines = skipped
            self._last_error = None

        logger.info(
            "Loaded %d record(s) from %s",
            len(records),
            self._path,
            extra={"records": len(records), "path": str(self._path)},
        )
        return True

    def clear(self) -> bool:
        """Empty the buffer and rewrite the file with only the header.

        Returns:
            True if the file was rewritten.
        """
        with self._lock:
            self._records.clear()
            self._persisted = 0
            try:
                self._write_atomically([])
            except OSError as e:
                self._fail("clear", e)
                return False
            self._last_error = None

        logger.info("Ledger cleared: %s", self._path, extra={"path": str(self._path)})
        return True

    # -------------------------------------------------------------------------
    # File helpers (callers hold the lock)
    # -------------------------------------------------------------------------

    def _initialize_file(self) -> None:
        with self._lock:
            try:
                self._write_atomically([])
            except OSError as e:
                self._fail("create", e)
                return
        logger.info("Ledger file created: %s", self._path, extra={"path": str(self._path)})

    def _read_data_lines(self) -> list[str]:
        """Non-empty lines after the header, or [] if there is no file.

        Undecodable bytes become U+FFFD, so the line fails to parse and is
        skipped like any other malformed line.
        """
        if not self._path.exists():
            return []
        with self._path.open("r", encoding="utf-8", errors="replace") as f:
            lines = [line.strip() for line in f]
        return [line for line in lines[1:] if line]

    def _write_atomically(self, data_lines: list[str]) -> None:
        try:
            with self._temp_path.open("w", encoding="utf-8", newline="\n") as f:
                f.write(HEADER + "\n")
                for line in data_lines:
                    f.write(line + "\n")
                f.flush()
                os.fsync(f.fileno())
            os.replace(self._temp_path, self._path)
        except OSError:
            with contextlib.suppress(OSError):
                self._temp_path.unlink(missing_ok=True)
            raise

    def _fail(self, operation: str, cause: Exception) -> None:
        error = LedgerIOError(operation, self._path, cause)
        self._last_error = error
        logger.error("%s", error, exc_info=cause, extra={"path": str(self._path)})
