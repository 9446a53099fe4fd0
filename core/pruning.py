"""
Removal passes driven by simple per-entry checks.

- `prune_empty_items`: zero-byte files, and folders emptied by those removals.
- `prune_duplicate_archives`: archives whose expanded copy sits next to them.
- `prune_matching_files`: files matched by a PruneRule. It runs twice in the
  pipeline, once with the unsupported-type rule and once with the vendor
  artifact rule.

All removals and failures go to the audit log. A failure never stops the pass.
"""

import os
from pathlib import Path
from typing import Iterable

from adapters.filesystem import FileSystem, LocalFileSystem, extended_path
from constants import (
    ARCHIVE_EXTENSIONS,
    LOCK_FILE_PREFIXES,
    UNSUPPORTED_EXTENSIONS,
    UNSUPPORTED_NAMES,
    VENDOR_ARTIFACT_EXTENSIONS,
)
from core.audit import AuditLog, skip_recorder
from core.exceptions import RemovalFailedError
from core.models import AuditEvent, PassResult, PruneRule
from core.traversal import TraversalOrder, walk_tree
from ui.progress_display import ProgressDisplay, RichProgressDisplay

EMPTY_PASS_NAME = "empty"
ARCHIVE_PASS_NAME = "archives"

UNSUPPORTED_RULE = PruneRule(
    name="unsupported",
    event=AuditEvent.UNSUPPORTED_REMOVED,
    extensions=UNSUPPORTED_EXTENSIONS,
    name_prefixes=LOCK_FILE_PREFIXES,
    names=UNSUPPORTED_NAMES,
)

VENDOR_RULE = PruneRule(
    name="vendor",
    event=AuditEvent.VENDOR_ARTIFACT_REMOVED,
    extensions=VENDOR_ARTIFACT_EXTENSIONS,
)


def prune_empty_items(
    root: Path,
    audit_log: AuditLog,
    remove_empty_dirs: bool = True,
    fs: FileSystem | None = None,
    progress_display: ProgressDisplay | None = None,
) -> PassResult:
    """
    Remove every zero-byte file under ``root``.

    With ``remove_empty_dirs`` a folder is also removed when it became empty
    because of removals made by this pass (a folder that only held empty files,
    or only held such folders). Folders that were already empty are kept, and
    the root is never removed.

    The walk is bottom-up so a folder is checked after all of its contents.

    Args:
        root: Directory to prune.
        audit_log: Open audit log.
        remove_empty_dirs: Whether to remove folders emptied by this pass.
        fs: Filesystem adapter. Defaults to LocalFileSystem.
        progress_display: Progress reporter. Defaults to RichProgressDisplay.

    Returns:
        PassResult for the pass.
    """
    fs = fs if fs is not None else LocalFileSystem()
    display = progress_display if progress_display is not None else RichProgressDisplay()
    result = PassResult(EMPTY_PASS_NAME)
    # Folders that lost at least one child in this pass
    emptied: set[Path] = set()

    with display as pd:
        pd.on_start("🗑️  Removing empty items...")

        for entry in walk_tree(
            root, TraversalOrder.BOTTOM_UP, on_error=skip_recorder(audit_log, result)
        ):
            result.visited += 1
            pd.on_advance()

            if entry.is_file and entry.size == 0:
                event = AuditEvent.EMPTY_FILE_REMOVED
                remove = fs.remove_file
            elif (
                entry.is_dir
                and remove_empty_dirs
                and entry.path in emptied
                and _is_empty_dir(entry.path)
            ):
                event = AuditEvent.EMPTY_FOLDER_REMOVED
                remove = fs.remove_dir
            else:
                continue

            try:
                remove(entry.path)
            except RemovalFailedError as e:
                audit_log.failed(e)
                result.failed += 1
                continue

            audit_log.removed(event, entry.path)
            result.changed += 1
            emptied.add(entry.path.parent)

        pd.on_complete(
            f"✅ Removed {result.changed} empty items.", had_failures=result.failed > 0
        )

    return result


def expanded_path_for(
    path: Path, extensions: Iterable[str] = ARCHIVE_EXTENSIONS
) -> Path | None:
    """
    Derive where the expanded copy of an archive would live.

    The longest matching archive extension is stripped (case-insensitive), so
    "Q3.tar.gz" maps to "Q3" rather than "Q3.tar".

    Args:
        path: Path of a candidate archive.
        extensions: Lowercase archive extensions, leading dot included.

    Returns:
        The sibling path with the extension removed, or None if the name does not
        carry an archive extension (or consists of nothing but one).
    """
    lowered = path.name.lower()
    matches = [
        ext for ext in extensions if lowered.endswith(ext) and len(lowered) > len(ext)
    ]
    if not matches:
        return None
    longest = max(matches, key=len)
    return path.with_name(path.name[: -len(longest)])


def prune_duplicate_archives(
    root: Path,
    audit_log: AuditLog,
    extensions: Iterable[str] = ARCHIVE_EXTENSIONS,
    fs: FileSystem | None = None,
    progress_display: ProgressDisplay | None = None,
) -> PassResult:
    """
    Remove archives whose expanded counterpart already exists next to them.

    "report.zip" is removed when a file or folder named "report" exists in the
    same folder, and kept otherwise. The archive's contents are not compared with
    the sibling; only the path's existence is checked.

    Args:
        root: Directory to prune.
        audit_log: Open audit log.
        extensions: Archive extensions to recognize.
        fs: Filesystem adapter. Defaults to LocalFileSystem.
        progress_display: Progress reporter. Defaults to RichProgressDisplay.

    Returns:
        PassResult for the pass.
    """
    fs = fs if fs is not None else LocalFileSystem()
    display = progress_display if progress_display is not None else RichProgressDisplay()
    archive_extensions = frozenset(ext.lower() for ext in extensions)
    result = PassResult(ARCHIVE_PASS_NAME)

    with display as pd:
        pd.on_start("📦 Removing archives that were already expanded...")

        for entry in walk_tree(
            root, TraversalOrder.TOP_DOWN, on_error=skip_recorder(audit_log, result)
        ):
            result.visited += 1
            pd.on_advance()
            if not entry.is_file:
                continue

            expanded = expanded_path_for(entry.path, archive_extensions)
            if expanded is None or not os.path.lexists(extended_path(expanded)):
                continue

            try:
                fs.remove_file(entry.path)
            except RemovalFailedError as e:
                audit_log.failed(e)
                result.failed += 1
                continue

            audit_log.removed(
                AuditEvent.ARCHIVE_REMOVED, entry.path, f"expanded copy: {expanded}"
            )
            result.changed += 1

        pd.on_complete(
            f"✅ Removed {result.changed} expanded archives.",
            had_failures=result.failed > 0,
        )

    return result


def prune_matching_files(
    root: Path,
    audit_log: AuditLog,
    rule: PruneRule,
    fs: FileSystem | None = None,
    progress_display: ProgressDisplay | None = None,
) -> PassResult:
    """
    Remove every file under ``root`` that ``rule`` matches.

    Folders and symlinks are never removed by this pass.

    Args:
        root: Directory to prune.
        audit_log: Open audit log.
        rule: Removal policy; its ``event`` is recorded for each removal and its
            ``name`` becomes the pass name.
        fs: Filesystem adapter. Defaults to LocalFileSystem.
        progress_display: Progress reporter. Defaults to RichProgressDisplay.

    Returns:
        PassResult for the pass.
    """
    fs = fs if fs is not None else LocalFileSystem()
    display = progress_display if progress_display is not None else RichProgressDisplay()
    result = PassResult(rule.name)

    with display as pd:
        pd.on_start(f"🚫 Removing {rule.name} files...")

        for entry in walk_tree(
            root, TraversalOrder.TOP_DOWN, on_error=skip_recorder(audit_log, result)
        ):
            result.visited += 1
            pd.on_advance()
            if not entry.is_file or not rule.matches(entry.name):
                continue

            try:
                fs.remove_file(entry.path)
            except RemovalFailedError as e:
                audit_log.failed(e)
                result.failed += 1
                continue

            audit_log.removed(rule.event, entry.path)
            result.changed += 1

        pd.on_complete(
            f"✅ Removed {result.changed} {rule.name} files.",
            had_failures=result.failed > 0,
        )

    return result


def _is_empty_dir(path: Path) -> bool:
    try:
        with os.scandir(extended_path(path)) as it:
            return next(it, None) is None
    except OSError:
        return False
