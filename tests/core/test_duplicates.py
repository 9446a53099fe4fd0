"""
Tests for the duplicate file pass.

Tests cover:
- SeenHashIndex: first registration wins
- prune_duplicate_files: first-seen copy kept, later copies removed
- Files with a unique size are never hashed
- Unreadable files are skipped and never removed
"""

import pytest

from core.duplicates import SeenHashIndex, prune_duplicate_files
from core.exceptions import UnreadableFileError
from core.hashing import Sha256ContentHasher
from core.models import Outcome


class UnreadableNamesHasher:
    """Hashes real content, except for the given names, which fail to read."""

    def __init__(self, unreadable: set[str]):
        self.unreadable = unreadable
        self._inner = Sha256ContentHasher()

    def hash_file(self, file_path):
        if file_path.name in self.unreadable:
            raise UnreadableFileError(
                message="Failed to read file for hashing",
                path=str(file_path),
                original_exception=PermissionError("The file is locked"),
            )
        return self._inner.hash_file(file_path)


@pytest.mark.unit
def test_seen_hash_index_first_registration_wins(tmp_path):
    index = SeenHashIndex()

    assert index.register(b"digest", tmp_path / "a") is None
    assert index.register(b"digest", tmp_path / "b") == tmp_path / "a"
    assert index.register(b"digest", tmp_path / "c") == tmp_path / "a"
    assert b"digest" in index
    assert b"other" not in index
    assert len(index) == 1


@pytest.mark.unit
def test_only_later_copy_is_removed(
    source_root, make_tree, audit_log, read_records, progress_display, tree_listing
):
    make_tree(
        source_root,
        {"a.txt": "same", "b": {"copy.txt": "same"}, "c.txt": "diff"},
    )

    result = prune_duplicate_files(
        source_root, audit_log, progress_display=progress_display
    )

    assert tree_listing(source_root) == ["a.txt", "b", "c.txt"]
    assert (result.visited, result.changed, result.failed) == (3, 1, 0)
    (record,) = read_records()
    assert record.outcome is Outcome.REMOVED
    assert record.event == "DuplicateRemoved"
    assert record.path == str(source_root / "b" / "copy.txt")
    assert record.detail == f"duplicate of {source_root / 'a.txt'}"


@pytest.mark.unit
def test_lexicographically_first_path_is_kept(
    source_root, make_tree, audit_log, progress_display, tree_listing
):
    # "A" sorts before "a", and a folder's contents come before later siblings
    make_tree(
        source_root,
        {"b.txt": "x", "A": {"z.txt": "x"}, "a.txt": "x"},
    )

    prune_duplicate_files(source_root, audit_log, progress_display=progress_display)

    assert tree_listing(source_root) == ["A", "A/z.txt"]


@pytest.mark.unit
@pytest.mark.mock
def test_unique_sizes_are_not_hashed(
    source_root, make_tree, audit_log, progress_display, mocker
):
    make_tree(source_root, {"a.txt": "1", "b.txt": "22", "c.txt": "333"})
    hasher = Sha256ContentHasher()
    spy = mocker.spy(hasher, "hash_file")

    result = prune_duplicate_files(
        source_root, audit_log, hasher=hasher, progress_display=progress_display
    )

    assert spy.call_count == 0
    assert result.changed == 0


@pytest.mark.unit
@pytest.mark.mock
def test_same_size_different_content_is_kept(
    source_root, make_tree, audit_log, progress_display, tree_listing, mocker
):
    make_tree(source_root, {"a.txt": "abc", "b.txt": "xyz"})
    hasher = Sha256ContentHasher()
    spy = mocker.spy(hasher, "hash_file")

    prune_duplicate_files(
        source_root, audit_log, hasher=hasher, progress_display=progress_display
    )

    assert spy.call_count == 2
    assert tree_listing(source_root) == ["a.txt", "b.txt"]


@pytest.mark.unit
def test_unreadable_file_is_skipped_and_kept(
    source_root, make_tree, audit_log, read_records, progress_display, tree_listing
):
    make_tree(source_root, {"a.txt": "same", "b.txt": "same", "c.txt": "same"})

    result = prune_duplicate_files(
        source_root,
        audit_log,
        hasher=UnreadableNamesHasher({"b.txt"}),
        progress_display=progress_display,
    )

    assert tree_listing(source_root) == ["a.txt", "b.txt"]
    assert (result.changed, result.failed) == (1, 1)
    records = read_records()
    assert [(r.outcome, r.event, r.path) for r in records] == [
        (Outcome.SKIPPED, "UnreadableFile", str(source_root / "b.txt")),
        (Outcome.REMOVED, "DuplicateRemoved", str(source_root / "c.txt")),
    ]


@pytest.mark.unit
def test_unreadable_first_copy_does_not_become_the_original(
    source_root, make_tree, audit_log, read_records, progress_display, tree_listing
):
    make_tree(source_root, {"a.txt": "same", "b.txt": "same", "c.txt": "same"})

    prune_duplicate_files(
        source_root,
        audit_log,
        hasher=UnreadableNamesHasher({"a.txt"}),
        progress_display=progress_display,
    )

    assert tree_listing(source_root) == ["a.txt", "b.txt"]
    removed = [r for r in read_records() if r.outcome is Outcome.REMOVED]
    assert [r.detail for r in removed] == [f"duplicate of {source_root / 'b.txt'}"]
