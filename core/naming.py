from pathlib import Path
from typing import Iterable

from adapters.filesystem import FileSystem, LocalFileSystem
from constants import PLACEHOLDER_CHARACTER, RESERVED_CHARACTERS
from core.audit import AuditLog, skip_recorder
from core.exceptions import RenameFailedError
from core.models import AuditEvent, PassResult
from core.traversal import TraversalOrder, walk_tree
from ui.progress_display import ProgressDisplay, RichProgressDisplay

PASS_NAME = "names"


def sanitize_name(
    name: str,
    reserved: Iterable[str] = RESERVED_CHARACTERS,
    placeholder: str = PLACEHOLDER_CHARACTER,
) -> str:
    """
    Replace each reserved character in a name with the placeholder.

    The replacement is one character for one, so the result keeps its length,
    its extension and every other character, and is never empty.

    Example:
        >>> sanitize_name("my:file?.docx")
        'my_file_.docx'
    """
    reserved_set = frozenset(reserved)
    return "".join(placeholder if ch in reserved_set else ch for ch in name)


def sanitize_names(
    root: Path,
    audit_log: AuditLog,
    reserved: Iterable[str] = RESERVED_CHARACTERS,
    placeholder: str = PLACEHOLDER_CHARACTER,
    fs: FileSystem | None = None,
    progress_display: ProgressDisplay | None = None,
) -> PassResult:
    """
    Rename every entry under ``root`` whose name holds a reserved character.

    The walk is bottom-up: a folder is renamed only after everything inside it,
    so no pending path is invalidated by a parent rename. When the sanitized name
    is already taken by a sibling, the entry is left alone and a ``NameCollision``
    record is written instead of overwriting anything.

    Args:
        root: Directory to normalize. The root itself is never renamed.
        audit_log: Open audit log.
        reserved: Characters to replace.
        placeholder: Replacement character.
        fs: Filesystem adapter. Defaults to LocalFileSystem.
        progress_display: Progress reporter. Defaults to RichProgressDisplay.

    Returns:
        PassResult for the pass.
    """
    fs = fs if fs is not None else LocalFileSystem()
    display = progress_display if progress_display is not None else RichProgressDisplay()
    reserved_set = frozenset(reserved)
    result = PassResult(PASS_NAME)

    with display as pd:
        pd.on_start("✏️  Sanitizing names...")

        for entry in walk_tree(
            root, TraversalOrder.BOTTOM_UP, on_error=skip_recorder(audit_log, result)
        ):
            result.visited += 1
            pd.on_advance()

            new_name = sanitize_name(entry.name, reserved_set, placeholder)
            if new_name == entry.name:
                continue

            old_path = entry.path
            try:
                entry.path = fs.rename(old_path, new_name)
            except RenameFailedError as e:
                audit_log.failed(e)
                result.failed += 1
                continue

            audit_log.renamed(AuditEvent.NAME_SANITIZED, old_path, entry.path)
            result.changed += 1

        pd.on_complete(
            f"✅ Renamed {result.changed} entries.", had_failures=result.failed > 0
        )

    return result
