"""
Content-addressed removal of duplicate files.

The walk is depth-first with children sorted by name, so "first" always means
the lexicographically first path (compared segment by segment) and the same copy
is kept on every platform and every run.

Files are hashed lazily: a file whose byte size has not been seen before cannot
be a duplicate yet, so it is parked until a second file of the same size shows
up. Only then are both hashed. This keeps the first-seen order intact while
skipping the digest for every file with a unique size.
"""

from pathlib import Path

from adapters.filesystem import FileSystem, LocalFileSystem
from core.audit import AuditLog, skip_recorder
from core.exceptions import RemovalFailedError, UnreadableFileError
from core.hashing import ContentHasher, Sha256ContentHasher
from core.models import AuditEvent, PassResult
from core.traversal import TraversalOrder, walk_tree
from ui.progress_display import ProgressDisplay, RichProgressDisplay

PASS_NAME = "duplicates"


class SeenHashIndex:
    """
    Maps a content digest to the path of the first file seen with it.

    Scoped to a single pass and never persisted; the tree may change between runs.
    """

    def __init__(self) -> None:
        self._first_seen: dict[bytes, Path] = {}

    def register(self, digest: bytes, path: Path) -> Path | None:
        """
        Record ``path`` under ``digest`` unless the digest is already known.

        Returns:
            The retained path if the digest was seen before, otherwise None (and
            ``path`` becomes the retained copy).
        """
        original = self._first_seen.get(digest)
        if original is None:
            self._first_seen[digest] = path
        return original

    def __contains__(self, digest: bytes) -> bool:
        return digest in self._first_seen

    def __len__(self) -> int:
        return len(self._first_seen)


def prune_duplicate_files(
    root: Path,
    audit_log: AuditLog,
    hasher: ContentHasher | None = None,
    fs: FileSystem | None = None,
    progress_display: ProgressDisplay | None = None,
) -> PassResult:
    """
    Remove every file whose content matches a file seen earlier in the walk.

    Each removal is logged as ``DuplicateRemoved`` with the retained path as
    detail. A file that cannot be hashed is logged as ``UnreadableFile`` and left
    in place, never deleted on unknown identity.

    Args:
        root: Directory to deduplicate.
        audit_log: Open audit log.
        hasher: Content hasher. Defaults to Sha256ContentHasher.
        fs: Filesystem adapter. Defaults to LocalFileSystem.
        progress_display: Progress reporter. Defaults to RichProgressDisplay.

    Returns:
        PassResult for the pass.
    """
    hasher = hasher if hasher is not None else Sha256ContentHasher()
    fs = fs if fs is not None else LocalFileSystem()
    display = progress_display if progress_display is not None else RichProgressDisplay()
    result = PassResult(PASS_NAME)

    index = SeenHashIndex()
    # First file of each size, parked until another file of that size appears
    unhashed_by_size: dict[int, Path] = {}
    hashed_sizes: set[int] = set()

    def digest_of(path: Path) -> bytes | None:
        try:
            return hasher.hash_file(path)
        except UnreadableFileError as e:
            audit_log.skipped(e)
            result.failed += 1
            return None

    with display as pd:
        pd.on_start("👯 Removing duplicate files...")

        for entry in walk_tree(
            root, TraversalOrder.TOP_DOWN, on_error=skip_recorder(audit_log, result)
        ):
            if not entry.is_file:
                continue
            result.visited += 1
            pd.on_advance()

            if entry.size not in hashed_sizes:
                parked = unhashed_by_size.pop(entry.size, None)
                if parked is None:
                    unhashed_by_size[entry.size] = entry.path
                    continue
                hashed_sizes.add(entry.size)
                parked_digest = digest_of(parked)
                if parked_digest is not None:
                    index.register(parked_digest, parked)

            digest = digest_of(entry.path)
            if digest is None:
                continue
            original = index.register(digest, entry.path)
            if original is None:
                continue

            try:
                fs.remove_file(entry.path)
            except RemovalFailedError as e:
                audit_log.failed(e)
                result.failed += 1
                continue

            audit_log.removed(
                AuditEvent.DUPLICATE_REMOVED, entry.path, f"duplicate of {original}"
            )
            result.changed += 1

        pd.on_complete(
            f"✅ Removed {result.changed} duplicate files.",
            had_failures=result.failed > 0,
        )

    return result
