"""
Filesystem adapter for the mutating operations of the pipeline.

This module wraps the OS calls the passes need (delete, rename, clear the hidden
marker) and translates every ``OSError`` into the pipeline's own exceptions, so
the passes only deal with one error vocabulary. It also implements extended-path
addressing: on Windows, paths at or beyond MAX_PATH are handed to the OS with the
``\\\\?\\`` prefix instead of failing outright.
"""

import ntpath
import os
from pathlib import Path
import stat
from typing import Protocol

from constants import (
    EXTENDED_PATH_PREFIX,
    EXTENDED_UNC_PREFIX,
    WINDOWS_MAX_PATH,
)
from core.exceptions import (
    AttributeChangeError,
    NameCollisionError,
    RemovalFailedError,
    RenameFailedError,
)


def extended_path(path: Path | str, platform_name: str = os.name) -> str:
    """
    Return the OS-level spelling of a path, switching to extended-path addressing when needed.

    Only Windows has a short path limit that an extended prefix lifts; every other
    platform gets the path back unchanged.

    Args:
        path: Path to address. Relative paths are made absolute on Windows.
        platform_name: Value of ``os.name`` to assume. Defaults to the running platform.

    Returns:
        The path as a string, prefixed with ``\\\\?\\`` (or ``\\\\?\\UNC\\`` for network
        shares) when it is too long for plain Win32 addressing.
    """
    text = str(path)
    if platform_name != "nt" or text.startswith(EXTENDED_PATH_PREFIX):
        return text
    # Windows does not resolve a prefixed path, so it has to be absolute already
    text = ntpath.abspath(text)
    if len(text) < WINDOWS_MAX_PATH:
        return text
    if text.startswith("\\\\"):
        return EXTENDED_UNC_PREFIX + text[2:]
    return EXTENDED_PATH_PREFIX + text


def is_hidden(st: os.stat_result) -> bool:
    """
    Check a stat result for the filesystem hidden marker.

    Windows exposes it as ``FILE_ATTRIBUTE_HIDDEN`` and macOS/BSD as the ``UF_HIDDEN``
    flag. Linux filesystems have no such marker, so this is always False there.
    """
    attributes = getattr(st, "st_file_attributes", 0)
    if attributes & stat.FILE_ATTRIBUTE_HIDDEN:
        return True
    flags = getattr(st, "st_flags", 0)
    return bool(flags & stat.UF_HIDDEN)


class FileSystem(Protocol):
    """
    Protocol defining the mutating operations used by the passes.

    This allows different implementations for production (local disk) and tests.
    """

    def remove_file(self, path: Path) -> None:
        """
        Delete a single file.

        Raises:
            RemovalFailedError: If the OS refuses the deletion.
        """

    def remove_dir(self, path: Path) -> None:
        """
        Delete an empty directory.

        Raises:
            RemovalFailedError: If the directory is not empty or the OS refuses.
        """

    def rename(self, path: Path, new_name: str) -> Path:
        """
        Rename an entry within its parent directory.

        Returns:
            The new path.

        Raises:
            NameCollisionError: If a different entry already exists under ``new_name``.
            RenameFailedError: If the OS refuses the rename.
        """

    def clear_hidden(self, path: Path) -> None:
        """
        Clear the hidden marker of an entry.

        Raises:
            AttributeChangeError: If the marker cannot be changed.
        """


class LocalFileSystem:
    def remove_file(self, path: Path) -> None:
        try:
            os.unlink(extended_path(path))
        except OSError as e:
            raise RemovalFailedError(
                message=f"Failed to remove file: {path}",
                path=str(path),
                original_exception=e,
            ) from e

    def remove_dir(self, path: Path) -> None:
        try:
            os.rmdir(extended_path(path))
        except OSError as e:
            raise RemovalFailedError(
                message=f"Failed to remove folder: {path}",
                path=str(path),
                original_exception=e,
            ) from e

    def rename(self, path: Path, new_name: str) -> Path:
        target = path.with_name(new_name)
        source_os = extended_path(path)
        target_os = extended_path(target)

        # os.rename silently replaces an existing file on POSIX
        if os.path.lexists(target_os) and not self._same_entry(source_os, target_os):
            raise NameCollisionError(path=str(path), target=str(target))

        try:
            os.rename(source_os, target_os)
        except OSError as e:
            raise RenameFailedError(
                message=f"Failed to rename {path} to {new_name}",
                path=str(path),
                original_exception=e,
            ) from e
        return target

    def clear_hidden(self, path: Path) -> None:
        os_path = extended_path(path)
        try:
            st = os.stat(os_path, follow_symlinks=False)
            if os.name == "nt":
                self._clear_windows_hidden(os_path, st)
            elif hasattr(os, "chflags"):
                os.chflags(
                    os_path, st.st_flags & ~stat.UF_HIDDEN, follow_symlinks=False
                )
        except OSError as e:
            raise AttributeChangeError(
                message=f"Failed to clear hidden attribute: {path}",
                path=str(path),
                original_exception=e,
            ) from e

    def _clear_windows_hidden(self, os_path: str, st: os.stat_result) -> None:
        import ctypes

        attributes = st.st_file_attributes & ~stat.FILE_ATTRIBUTE_HIDDEN
        if not ctypes.windll.kernel32.SetFileAttributesW(os_path, attributes):  # type: ignore[attr-defined]
            raise ctypes.WinError()  # type: ignore[attr-defined]

    def _same_entry(self, source: str, target: str) -> bool:
        # Case-only renames on case-insensitive volumes resolve to the same entry.
        try:
            return os.path.samefile(source, target)
        except OSError:
            return False
