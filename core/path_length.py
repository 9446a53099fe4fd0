"""
Shortening of paths that exceed the destination's length limit.

Path length is the number of characters in the absolute path. An over-long
entry is renamed to ``head + marker + tail``: the tail keeps the last characters
of the original name (so the extension survives) and the head takes whatever
room is left. A shortened file ends exactly at the limit. A shortened folder also
leaves room for its longest child name, so its contents fit without being cut
themselves (down to the shortest name the marker and tail allow).

The pass runs last in the pipeline and walks top-down, re-reading each path just
before measuring it: when a folder is shortened, the walker descends into its new
location and every descendant is measured against the shorter prefix.
"""

import os
from pathlib import Path

from adapters.filesystem import FileSystem, LocalFileSystem
from constants import DEFAULT_MAX_PATH_LENGTH, TRUNCATION_MARKER, TRUNCATION_TAIL_LENGTH
from core.audit import AuditLog, skip_recorder
from core.exceptions import PathStillTooLongError, RenameFailedError
from core.models import AuditEvent, FileSystemEntry, PassResult
from core.traversal import TraversalOrder, list_children, walk_tree
from ui.progress_display import ProgressDisplay, RichProgressDisplay

PASS_NAME = "path-length"


def path_length(path: Path) -> int:
    return len(str(path))


def shorten_name(
    name: str,
    budget: int,
    tail_length: int = TRUNCATION_TAIL_LENGTH,
    marker: str = TRUNCATION_MARKER,
) -> str:
    """
    Shorten a name to at most ``budget`` characters.

    Args:
        name: Original name.
        budget: Maximum length of the returned name.
        tail_length: Number of trailing characters of ``name`` to keep.
        marker: Inserted between the kept head and tail.

    Returns:
        ``name`` unchanged if it already fits, otherwise a name of exactly
        ``budget`` characters.

    Raises:
        ValueError: If the budget cannot hold at least one head character,
            the marker and the tail.
    """
    if len(name) <= budget:
        return name

    tail = name[-tail_length:] if tail_length > 0 else ""
    head_length = budget - len(marker) - len(tail)
    if head_length < 1 or len(tail) >= len(name):
        raise ValueError(
            f"No room to shorten {name!r} to {budget} characters "
            f"(needs at least {len(marker) + len(tail) + 1})"
        )
    return name[:head_length] + marker + tail


def normalize_path_lengths(
    root: Path,
    audit_log: AuditLog,
    max_length: int = DEFAULT_MAX_PATH_LENGTH,
    tail_length: int = TRUNCATION_TAIL_LENGTH,
    marker: str = TRUNCATION_MARKER,
    fs: FileSystem | None = None,
    progress_display: ProgressDisplay | None = None,
) -> PassResult:
    """
    Rename every entry whose full path is longer than ``max_length``.

    An entry that cannot be brought within the limit (its parent path alone is
    too long, or its name is too short to cut) is left untouched and logged as
    ``PathStillTooLong``. A shortened name already taken by a sibling is logged
    as ``NameCollision``.

    Args:
        root: Directory to normalize.
        audit_log: Open audit log.
        max_length: Maximum accepted path length in characters.
        tail_length: Trailing characters of the name to keep.
        marker: Truncation marker.
        fs: Filesystem adapter. Defaults to LocalFileSystem.
        progress_display: Progress reporter. Defaults to RichProgressDisplay.

    Returns:
        PassResult for the pass.
    """
    fs = fs if fs is not None else LocalFileSystem()
    display = progress_display if progress_display is not None else RichProgressDisplay()
    result = PassResult(PASS_NAME)

    with display as pd:
        pd.on_start(f"📏 Shortening paths longer than {max_length} characters...")

        for entry in walk_tree(
            root, TraversalOrder.TOP_DOWN, on_error=skip_recorder(audit_log, result)
        ):
            result.visited += 1
            pd.on_advance()

            if path_length(entry.path) <= max_length:
                continue

            budget = _name_budget(entry, max_length, tail_length, marker)
            try:
                new_name = shorten_name(entry.name, budget, tail_length, marker)
            except ValueError as e:
                audit_log.failed(
                    PathStillTooLongError(
                        message=(
                            f"Path is {path_length(entry.path)} characters, "
                            f"limit is {max_length}"
                        ),
                        path=str(entry.path),
                        original_exception=e,
                    )
                )
                result.failed += 1
                continue

            old_path = entry.path
            try:
                entry.path = fs.rename(old_path, new_name)
            except RenameFailedError as e:
                audit_log.failed(e)
                result.failed += 1
                continue

            audit_log.renamed(AuditEvent.PATH_SHORTENED, old_path, entry.path)
            result.changed += 1

        pd.on_complete(
            f"✅ Shortened {result.changed} paths.", had_failures=result.failed > 0
        )

    return result


def _name_budget(
    entry: FileSystemEntry, max_length: int, tail_length: int, marker: str
) -> int:
    budget = max_length - path_length(entry.path.parent) - len(os.sep)
    if not entry.is_dir:
        return budget

    # Unreadable folders are reported by the walker when it descends
    longest_child = max((len(c.name) for c in list_children(entry.path)), default=0)
    if not longest_child:
        return budget
    shortest_name = 1 + len(marker) + tail_length
    return min(budget, max(budget - len(os.sep) - longest_child, shortest_name))
