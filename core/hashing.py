import hashlib
from pathlib import Path
from typing import Protocol

from adapters.filesystem import extended_path
from constants import HASH_CHUNK_SIZE
from core.exceptions import UnreadableFileError


class ContentHasher(Protocol):
    """
    Protocol for computing a content identity of a file.

    Two files with equal digests are treated as having identical content,
    regardless of their names or locations.
    """

    def hash_file(self, file_path: Path) -> bytes:
        """
        Compute the digest of a file's bytes.

        Args:
            file_path: The path of the file to hash.

        Returns:
            The raw digest bytes.

        Raises:
            UnreadableFileError: If the file cannot be opened or read.
        """


class Sha256ContentHasher:
    """
    SHA-256 implementation of ContentHasher.

    Content is streamed in fixed-size chunks so memory use stays flat on very
    large files. Paths beyond the platform limit are opened through extended-path
    addressing.
    """

    def __init__(self, chunk_size: int = HASH_CHUNK_SIZE):
        self.chunk_size = chunk_size

    def hash_file(self, file_path: Path) -> bytes:
        digest = hashlib.sha256()
        try:
            with open(extended_path(file_path), "rb") as f:
                while chunk := f.read(self.chunk_size):
                    digest.update(chunk)
        except OSError as e:
            raise UnreadableFileError(
                message=f"Failed to read file for hashing: {file_path}",
                path=str(file_path),
                original_exception=e,
            ) from e
        return digest.digest()
