"""
Append-only audit log shared by every pass.

The log is an explicit handle: the orchestrator opens it once (creating or
truncating the file), hands it to each pass, and the context manager guarantees
the stream is flushed and closed on every exit path. Each record is flushed as
soon as it is written, so an interrupted run still leaves a complete trail of
what was done up to that point.
"""

from collections import Counter
from pathlib import Path
import threading
from types import TracebackType
from typing import Callable, Generator, TextIO

from rich import print as pr
from rich.markup import escape

from core.exceptions import AuditLogError, CleanupError
from core.models import AuditEvent, AuditRecord, Outcome, PassResult


class AuditLog:
    """
    Writer for the plain-text audit log.

    Usage:
        with AuditLog(Path("/var/log/cleanup.log")) as audit_log:
            audit_log.removed(AuditEvent.EMPTY_FILE_REMOVED, path)

    Attributes:
        log_path: Destination file.
        echo_failures: If True, failed and skipped records are also printed to the console.
        counts: Number of records written per event code.
    """

    def __init__(self, log_path: Path, echo_failures: bool = True):
        self.log_path = log_path
        self.echo_failures = echo_failures
        self.counts: Counter[str] = Counter()
        self._handle: TextIO | None = None
        self._lock = threading.Lock()

    def __enter__(self) -> "AuditLog":
        parent = self.log_path.parent
        if not parent.is_dir():
            raise AuditLogError(
                message=f"Parent directory does not exist: {parent}",
                path=str(self.log_path),
            )
        try:
            self._handle = open(self.log_path, "w", encoding="utf-8")
        except OSError as e:
            raise AuditLogError(
                message=f"Failed to open audit log: {self.log_path}",
                path=str(self.log_path),
                original_exception=e,
            ) from e
        self.counts.clear()
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        handle, self._handle = self._handle, None
        if handle is not None:
            handle.close()

    @property
    def is_open(self) -> bool:
        return self._handle is not None

    def write(self, record: AuditRecord) -> None:
        """
        Append one record and flush it to disk.

        Raises:
            AuditLogError: If the log is not open or the write fails.
        """
        with self._lock:
            if self._handle is None:
                raise AuditLogError(
                    message="Audit log is not open. Use: with AuditLog(path) as audit_log:",
                    path=str(self.log_path),
                )
            try:
                self._handle.write(record.to_line())
                self._handle.flush()
            except OSError as e:
                raise AuditLogError(
                    message=f"Failed to write audit log: {self.log_path}",
                    path=str(self.log_path),
                    original_exception=e,
                ) from e
            self.counts[record.event] += 1

        if self.echo_failures and record.outcome in (Outcome.FAILED, Outcome.SKIPPED):
            pr(
                f"[yellow]⚠ {record.event}:[/yellow] {escape(record.path)}"
                + (f" ({escape(record.detail)})" if record.detail else "")
            )

    def removed(self, event: AuditEvent, path: Path, detail: str | None = None) -> None:
        self.write(AuditRecord(Outcome.REMOVED, event, str(path), detail))

    def renamed(self, event: AuditEvent, old_path: Path, new_path: Path) -> None:
        self.write(AuditRecord(Outcome.RENAMED, event, str(old_path), str(new_path)))

    def modified(self, event: AuditEvent, path: Path) -> None:
        self.write(AuditRecord(Outcome.MODIFIED, event, str(path)))

    def failed(self, error: CleanupError) -> None:
        """Record a mutation that was attempted (or refused) and did not happen."""
        self.write(
            AuditRecord(Outcome.FAILED, error.code, error.path or "", error.detail)
        )

    def skipped(self, error: CleanupError) -> None:
        """Record an entry that was left alone because it could not be evaluated."""
        self.write(
            AuditRecord(Outcome.SKIPPED, error.code, error.path or "", error.detail)
        )


def read_log(log_path: Path) -> Generator[AuditRecord, None, None]:
    """
    Stream the records of an existing audit log.

    Raises:
        AuditLogError: If the file cannot be opened or read.
        ValueError: If a line is not a valid audit record.
    """
    try:
        with open(log_path, "r", encoding="utf-8") as f:
            for line in f:
                if line.strip():
                    yield AuditRecord.from_line(line)
    except OSError as e:
        raise AuditLogError(
            message=f"Failed to read audit log: {log_path}",
            path=str(log_path),
            original_exception=e,
        ) from e


def summarize_log(log_path: Path) -> Counter[tuple[str, str]]:
    """
    Count the records of an audit log per (outcome, event) pair.

    Returns:
        A Counter keyed by (outcome, event code).

    Raises:
        AuditLogError: If the file cannot be read or contains a malformed line.
    """
    counts: Counter[tuple[str, str]] = Counter()
    try:
        for record in read_log(log_path):
            counts[(str(record.outcome), record.event)] += 1
    except ValueError as e:
        raise AuditLogError(
            message=f"Audit log is malformed: {log_path}",
            path=str(log_path),
            original_exception=e,
        ) from e
    return counts


def skip_recorder(
    audit_log: AuditLog, result: PassResult
) -> Callable[[CleanupError], None]:
    """
    Build a traversal error handler that logs the entry as skipped and counts it.

    Passed as ``on_error`` to `walk_tree` so unreadable folders are recorded
    without interrupting the pass.
    """

    def _record(error: CleanupError) -> None:
        audit_log.skipped(error)
        result.failed += 1

    return _record
