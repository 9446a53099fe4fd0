"""
Tests for the hashing module.

Tests cover:
- Sha256ContentHasher: determinism, independence from name/path, chunked reads
- Error handling: unreadable files raise UnreadableFileError
"""

import hashlib

import pytest

from core.exceptions import UnreadableFileError
from core.hashing import Sha256ContentHasher


@pytest.mark.unit
def test_hash_matches_sha256_of_content(tmp_path):
    file_path = tmp_path / "invoice.pdf"
    file_path.write_bytes(b"%PDF-1.7 invoice 42")

    digest = Sha256ContentHasher().hash_file(file_path)

    assert digest == hashlib.sha256(b"%PDF-1.7 invoice 42").digest()
    assert len(digest) == 32


@pytest.mark.unit
def test_identical_content_has_identical_digest_regardless_of_name(tmp_path):
    (tmp_path / "sub").mkdir()
    first = tmp_path / "a.txt"
    second = tmp_path / "sub" / "completely different name.bin"
    first.write_bytes(b"same bytes")
    second.write_bytes(b"same bytes")

    hasher = Sha256ContentHasher()

    assert hasher.hash_file(first) == hasher.hash_file(second)


@pytest.mark.unit
def test_different_content_has_different_digest(tmp_path):
    first = tmp_path / "a.txt"
    second = tmp_path / "b.txt"
    first.write_bytes(b"one")
    second.write_bytes(b"two")

    hasher = Sha256ContentHasher()

    assert hasher.hash_file(first) != hasher.hash_file(second)


@pytest.mark.unit
def test_small_chunks_give_same_digest(tmp_path):
    """Streaming in chunks must not change the result."""
    file_path = tmp_path / "large.bin"
    content = bytes(range(256)) * 100
    file_path.write_bytes(content)

    digest = Sha256ContentHasher(chunk_size=7).hash_file(file_path)

    assert digest == hashlib.sha256(content).digest()


@pytest.mark.unit
def test_empty_file_hashes(tmp_path):
    file_path = tmp_path / "empty.txt"
    file_path.touch()

    assert Sha256ContentHasher().hash_file(file_path) == hashlib.sha256().digest()


@pytest.mark.unit
def test_missing_file_raises_unreadable(tmp_path):
    file_path = tmp_path / "gone.txt"

    with pytest.raises(UnreadableFileError) as exc_info:
        Sha256ContentHasher().hash_file(file_path)

    assert exc_info.value.path == str(file_path)
    assert isinstance(exc_info.value.original_exception, FileNotFoundError)


@pytest.mark.unit
@pytest.mark.mock
def test_permission_error_raises_unreadable(tmp_path, mocker):
    file_path = tmp_path / "locked.xlsx"
    file_path.write_bytes(b"data")
    mocker.patch(
        "core.hashing.open",
        create=True,
        side_effect=PermissionError("Access is denied"),
    )

    with pytest.raises(UnreadableFileError) as exc_info:
        Sha256ContentHasher().hash_file(file_path)

    assert "Failed to read file for hashing" in exc_info.value.message
    assert exc_info.value.diagnostic_info["type"] == "PermissionError"


@pytest.mark.unit
@pytest.mark.mock
def test_hasher_opens_extended_path(tmp_path, mocker):
    """Long paths should be opened through extended-path addressing."""
    file_path = tmp_path / "a.txt"
    file_path.write_bytes(b"x")
    mock_extended = mocker.patch(
        "core.hashing.extended_path", side_effect=lambda p: str(p)
    )

    Sha256ContentHasher().hash_file(file_path)

    mock_extended.assert_called_once_with(file_path)
