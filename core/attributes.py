from pathlib import Path

from adapters.filesystem import FileSystem, LocalFileSystem
from core.audit import AuditLog, skip_recorder
from core.exceptions import AttributeChangeError
from core.models import AuditEvent, PassResult
from core.traversal import TraversalOrder, walk_tree
from ui.progress_display import ProgressDisplay, RichProgressDisplay

PASS_NAME = "attributes"


def normalize_attributes(
    root: Path,
    audit_log: AuditLog,
    fs: FileSystem | None = None,
    progress_display: ProgressDisplay | None = None,
) -> PassResult:
    """
    Clear the filesystem hidden marker on every entry under ``root``.

    Files and folders are both visited, including the ones that are hidden.
    Nothing is renamed or deleted. An entry whose attribute cannot be changed is
    logged as ``AttributeChangeFailed`` and the walk continues.

    Args:
        root: Directory to normalize.
        audit_log: Open audit log receiving one record per change or failure.
        fs: Filesystem adapter. Defaults to LocalFileSystem.
        progress_display: Progress reporter. Defaults to RichProgressDisplay.

    Returns:
        PassResult with the number of entries visited, unhidden and failed.
    """
    fs = fs if fs is not None else LocalFileSystem()
    display = progress_display if progress_display is not None else RichProgressDisplay()
    result = PassResult(PASS_NAME)

    with display as pd:
        pd.on_start("🙈 Clearing hidden attributes...")

        for entry in walk_tree(
            root, TraversalOrder.TOP_DOWN, on_error=skip_recorder(audit_log, result)
        ):
            result.visited += 1
            pd.on_advance()
            if not entry.hidden:
                continue

            try:
                fs.clear_hidden(entry.path)
            except AttributeChangeError as e:
                audit_log.failed(e)
                result.failed += 1
                continue

            entry.hidden = False
            audit_log.modified(AuditEvent.ATTRIBUTE_CLEARED, entry.path)
            result.changed += 1

        pd.on_complete(
            f"✅ Unhid {result.changed} entries.", had_failures=result.failed > 0
        )

    return result
