"""
Deterministic, lazy directory traversal.

Every pass walks the tree through `walk_tree`. Children of each directory are
listed only when the walker reaches that directory and are sorted by name, so
the visit order is lexicographic by path segment on every platform instead of
whatever order the filesystem happens to return.

Entries are yielded as mutable `FileSystemEntry` objects. In top-down order a
consumer that renames a directory assigns the new path to ``entry.path`` and the
walker descends into the new location; a consumer that deletes it simply causes
the walker to skip its contents. In bottom-up order a directory is yielded only
after everything beneath it, so renaming it never invalidates a pending path.
"""

from enum import Enum
import os
from pathlib import Path
import stat
from typing import Callable, Generator, Iterator

from adapters.filesystem import extended_path, is_hidden
from core.exceptions import CleanupError, TraversalError
from core.models import EntryKind, FileSystemEntry

ErrorHandler = Callable[[CleanupError], None]


class TraversalOrder(Enum):
    TOP_DOWN = "top_down"
    BOTTOM_UP = "bottom_up"


def walk_tree(
    root: Path,
    order: TraversalOrder = TraversalOrder.TOP_DOWN,
    on_error: ErrorHandler | None = None,
) -> Generator[FileSystemEntry, None, None]:
    """
    Walk every entry beneath ``root`` (the root itself is not yielded).

    Symbolic links and junctions are yielded but never followed. Special files
    (sockets, FIFOs, devices) are ignored.

    Args:
        root: Directory to walk.
        order: TOP_DOWN yields a directory before its contents; BOTTOM_UP after.
        on_error: Called with a TraversalError for each directory or entry that
            cannot be read. The walk continues with the next sibling.

    Yields:
        FileSystemEntry for each file, directory and symlink under root.
    """
    stack: list[Iterator[FileSystemEntry]] = [iter(list_children(root, on_error))]
    pending_dirs: list[FileSystemEntry] = []

    while stack:
        entry = next(stack[-1], None)
        if entry is None:
            stack.pop()
            # Every iterator above the root one belongs to a pending directory.
            if order is TraversalOrder.BOTTOM_UP and stack:
                yield pending_dirs.pop()
            continue

        if not entry.is_dir:
            yield entry
            continue

        if order is TraversalOrder.TOP_DOWN:
            yield entry
            # entry.path may have been reassigned or removed by the consumer
            if not os.path.isdir(extended_path(entry.path)):
                continue
        else:
            pending_dirs.append(entry)
        stack.append(iter(list_children(entry.path, on_error)))


def list_children(
    directory: Path, on_error: ErrorHandler | None = None
) -> list[FileSystemEntry]:
    """
    List the direct children of a directory, sorted by name.

    Args:
        directory: Directory to list.
        on_error: Receives a TraversalError if the directory or an entry's
            metadata cannot be read.

    Returns:
        The children as FileSystemEntry objects; empty if the directory is unreadable.
    """
    try:
        with os.scandir(extended_path(directory)) as it:
            dir_entries = sorted(it, key=lambda d: d.name)
    except OSError as e:
        _report(
            on_error,
            TraversalError(
                message=f"Failed to list folder: {directory}",
                path=str(directory),
                original_exception=e,
            ),
        )
        return []

    children: list[FileSystemEntry] = []
    for dir_entry in dir_entries:
        path = directory / dir_entry.name
        try:
            st = dir_entry.stat(follow_symlinks=False)
        except OSError as e:
            _report(
                on_error,
                TraversalError(
                    message=f"Failed to read metadata: {path}",
                    path=str(path),
                    original_exception=e,
                ),
            )
            continue

        kind = _entry_kind(dir_entry, st)
        if kind is None:
            continue
        size = st.st_size if kind is EntryKind.FILE else 0
        children.append(FileSystemEntry(path, kind, size, is_hidden(st)))
    return children


def _entry_kind(dir_entry: os.DirEntry, st: os.stat_result) -> EntryKind | None:
    if stat.S_ISLNK(st.st_mode) or getattr(dir_entry, "is_junction", lambda: False)():
        return EntryKind.SYMLINK
    if stat.S_ISDIR(st.st_mode):
        return EntryKind.DIRECTORY
    if stat.S_ISREG(st.st_mode):
        return EntryKind.FILE
    return None


def _report(on_error: ErrorHandler | None, error: CleanupError) -> None:
    if on_error is not None:
        on_error(error)
