"""
Pipeline orchestrator.

Runs the normalization passes over one source root, in a fixed order, against a
single audit log:

1. attributes   - clear hidden markers
2. names        - replace reserved characters
3. empty        - remove zero-byte files (and folders they leave empty)
4. archives     - remove archives whose expanded copy exists
5. duplicates   - remove files whose content was already seen
6. unsupported  - remove file types the destination rejects
7. vendor       - remove QuickBooks working files
8. path-length  - shorten over-long paths

Renaming passes run before the removal passes so every later pass sees final
names, and path shortening runs last so it never renames content that a later
pass would delete anyway. Folders emptied by the duplicate or type passes are
not removed (the empty pass has already run by then).
"""

import os
from pathlib import Path
from typing import Callable

from adapters.filesystem import FileSystem, LocalFileSystem
from core.attributes import normalize_attributes
from core.audit import AuditLog
from core.config import PASS_NAMES, PipelineConfig
from core.duplicates import prune_duplicate_files
from core.exceptions import ConfigError, PathInvalidError
from core.hashing import ContentHasher, Sha256ContentHasher
from core.models import PassResult, PipelineReport
from core.naming import sanitize_names
from core.path_length import normalize_path_lengths
from core.pruning import (
    prune_duplicate_archives,
    prune_empty_items,
    prune_matching_files,
)
from ui.progress_display import ProgressDisplay, RichProgressDisplay

PassRunner = Callable[[AuditLog], PassResult]


def validate_root(root: Path) -> None:
    """
    Make sure the source root can be walked and modified.

    Raises:
        PathInvalidError: If the root does not exist, is not a folder, or is not
            readable and writable by the current user.
    """
    if not root.exists():
        raise PathInvalidError(
            message=f"Source root does not exist: {root}", path=str(root)
        )
    if not root.is_dir():
        raise PathInvalidError(
            message=f"Source root is not a folder: {root}", path=str(root)
        )
    if not os.access(root, os.R_OK | os.W_OK | os.X_OK):
        raise PathInvalidError(
            message=f"Source root is not readable and writable: {root}",
            path=str(root),
        )


def run_pipeline(
    config: PipelineConfig,
    fs: FileSystem | None = None,
    hasher: ContentHasher | None = None,
    progress_display: ProgressDisplay | None = None,
    echo_failures: bool = True,
) -> PipelineReport:
    """
    Normalize ``config.root`` in place and record every action in the audit log.

    The audit log is created (or truncated) before the first pass and closed
    when the run ends, whether it finishes or fails. Per-entry errors are logged
    by the passes and never stop the run.

    Args:
        config: Run configuration.
        fs: Filesystem adapter shared by all passes. Defaults to LocalFileSystem.
        hasher: Content hasher for the duplicate pass. Defaults to SHA-256.
        progress_display: Progress reporter shared by all passes.
        echo_failures: Also print failed and skipped records to the console.

    Returns:
        PipelineReport with one PassResult per pass that ran, in order.

    Raises:
        PathInvalidError: If the root cannot be used.
        ConfigError: If the audit log would be written inside the root.
        AuditLogError: If the audit log cannot be created or written.
    """
    root = config.root
    validate_root(root)
    if config.log_path.resolve().is_relative_to(root.resolve()):
        raise ConfigError(
            message=f"Audit log must be outside the source root: {config.log_path}",
            path=str(config.log_path),
        )

    fs = fs if fs is not None else LocalFileSystem()
    hasher = hasher if hasher is not None else Sha256ContentHasher()
    display = progress_display if progress_display is not None else RichProgressDisplay()

    passes: dict[str, PassRunner] = {
        "attributes": lambda log: normalize_attributes(
            root, log, fs=fs, progress_display=display
        ),
        "names": lambda log: sanitize_names(
            root,
            log,
            reserved=config.reserved_characters,
            placeholder=config.placeholder,
            fs=fs,
            progress_display=display,
        ),
        "empty": lambda log: prune_empty_items(
            root,
            log,
            remove_empty_dirs=config.remove_empty_dirs,
            fs=fs,
            progress_display=display,
        ),
        "archives": lambda log: prune_duplicate_archives(
            root,
            log,
            extensions=config.archive_extensions,
            fs=fs,
            progress_display=display,
        ),
        "duplicates": lambda log: prune_duplicate_files(
            root, log, hasher=hasher, fs=fs, progress_display=display
        ),
        "unsupported": lambda log: prune_matching_files(
            root, log, config.unsupported_rule, fs=fs, progress_display=display
        ),
        "vendor": lambda log: prune_matching_files(
            root, log, config.vendor_rule, fs=fs, progress_display=display
        ),
        "path-length": lambda log: normalize_path_lengths(
            root,
            log,
            max_length=config.max_path_length,
            fs=fs,
            progress_display=display,
        ),
    }

    report = PipelineReport(root=root, log_path=config.log_path)
    with AuditLog(config.log_path, echo_failures=echo_failures) as audit_log:
        for name in PASS_NAMES:
            if name in config.skip_passes:
                continue
            result = passes[name](audit_log)
            # Rule names are configurable; report under the pass name.
            result.name = name
            report.results.append(result)

    return report
