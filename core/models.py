"""
Core data models for the normalization pipeline.

This module defines the structures shared by every pass: the entries produced
by the tree walker, the audit records written to the log, the pruning policies,
and the per-pass counters returned to the caller.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum, StrEnum
from pathlib import Path


class EntryKind(Enum):
    FILE = "file"
    DIRECTORY = "directory"
    SYMLINK = "symlink"


@dataclass
class FileSystemEntry:
    """
    A file, directory or symbolic link found while walking the source tree.

    The path is mutable on purpose: a pass that renames an entry assigns the new
    path back, and the walker uses the current value when it descends. Any other
    reference to the old path is stale after a rename.

    Attributes:
        path: Absolute path of the entry.
        kind: Whether the entry is a file, a directory, or a symlink (never followed).
        size: Byte length for files; 0 for anything else.
        hidden: True if the filesystem hidden marker is set.
    """

    path: Path
    kind: EntryKind
    size: int = 0
    hidden: bool = False

    @property
    def name(self) -> str:
        return self.path.name

    @property
    def is_file(self) -> bool:
        return self.kind is EntryKind.FILE

    @property
    def is_dir(self) -> bool:
        return self.kind is EntryKind.DIRECTORY


class Outcome(StrEnum):
    """What happened to the subject of an audit record."""

    REMOVED = "REMOVED"
    RENAMED = "RENAMED"
    MODIFIED = "MODIFIED"
    SKIPPED = "SKIPPED"
    FAILED = "FAILED"


class AuditEvent(StrEnum):
    """
    Event codes for successful actions.

    Failures use the ``code`` of the exception that was raised instead
    (see `core/exceptions.py`).
    """

    ATTRIBUTE_CLEARED = "AttributeCleared"
    NAME_SANITIZED = "NameSanitized"
    EMPTY_FILE_REMOVED = "EmptyFileRemoved"
    EMPTY_FOLDER_REMOVED = "EmptyFolderRemoved"
    ARCHIVE_REMOVED = "ArchiveRemoved"
    DUPLICATE_REMOVED = "DuplicateRemoved"
    UNSUPPORTED_REMOVED = "UnsupportedRemoved"
    VENDOR_ARTIFACT_REMOVED = "VendorArtifactRemoved"
    PATH_SHORTENED = "PathShortened"


def _single_line(text: str) -> str:
    # Tabs separate fields and newlines separate records.
    return text.replace("\t", " ").replace("\r", " ").replace("\n", " ")


@dataclass(frozen=True)
class AuditRecord:
    """
    One line of the audit log.

    Serialized as tab-separated fields:
    ``timestamp, outcome, event, path[, detail]``.
    """

    outcome: Outcome
    event: str
    path: str
    detail: str | None = None
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def to_line(self) -> str:
        fields = [
            self.timestamp.isoformat(timespec="seconds"),
            str(self.outcome),
            self.event,
            _single_line(self.path),
        ]
        if self.detail:
            fields.append(_single_line(self.detail))
        return "\t".join(fields) + "\n"

    @classmethod
    def from_line(cls, line: str) -> "AuditRecord":
        """
        Parse a line written by `to_line`.

        Raises:
            ValueError: If the line does not have at least four fields or the
                timestamp/outcome cannot be parsed.
        """
        parts = line.rstrip("\n").split("\t", 4)
        if len(parts) < 4:
            raise ValueError(f"Malformed audit line: {line!r}")
        timestamp, outcome, event, path = parts[:4]
        detail = parts[4] if len(parts) == 5 else None
        return cls(
            outcome=Outcome(outcome),
            event=event,
            path=path,
            detail=detail,
            timestamp=datetime.fromisoformat(timestamp),
        )


@dataclass(frozen=True)
class PruneRule:
    """
    A stateless removal policy.

    Matching is case-insensitive. A file matches when its name ends with one of
    ``extensions`` (compound ones like ".tar.gz" included), starts with one of
    ``name_prefixes``, or equals one of ``names``.

    Attributes:
        name: Short label used in console output.
        event: Audit event recorded for each removal.
        extensions: Lowercase extensions including the leading dot.
        name_prefixes: Lowercase prefixes, e.g. "~$" for Office lock files.
        names: Lowercase exact file names, e.g. "thumbs.db".
    """

    name: str
    event: AuditEvent
    extensions: frozenset[str] = frozenset()
    name_prefixes: frozenset[str] = frozenset()
    names: frozenset[str] = frozenset()

    def matches(self, file_name: str) -> bool:
        lowered = file_name.lower()
        if lowered in self.names:
            return True
        if any(lowered.startswith(prefix) for prefix in self.name_prefixes):
            return True
        return any(lowered.endswith(ext) for ext in self.extensions)


@dataclass
class PassResult:
    """
    Counters for one pass over the tree.

    Attributes:
        name: Pass name (matches the names accepted by ``--skip``).
        visited: Entries the pass looked at.
        changed: Entries removed, renamed or modified.
        failed: Entries that raised a per-entry error (including skips).
    """

    name: str
    visited: int = 0
    changed: int = 0
    failed: int = 0


@dataclass
class PipelineReport:
    root: Path
    log_path: Path
    results: list[PassResult] = field(default_factory=list)

    @property
    def total_changed(self) -> int:
        return sum(r.changed for r in self.results)

    @property
    def total_failed(self) -> int:
        return sum(r.failed for r in self.results)
