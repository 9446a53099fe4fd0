"""
Custom exception classes for the cloudprep pipeline.

This module defines the error taxonomy raised while normalizing a source tree.
Every exception carries the subject path, the underlying OS error (if any) and
a diagnostic dictionary, plus a stable ``code`` that is written to the audit log.

Only ``PathInvalidError``, ``AuditLogError`` and ``ConfigError`` are fatal to a
run. Everything else is caught per entry, logged, and the pass moves on.
"""

import os
from typing import Optional


class CleanupError(Exception):
    """
    Base exception for all pipeline errors.

    Attributes:
        message: A human-readable error message describing what went wrong.
        path: The filesystem path the error refers to, if any.
        original_exception: The underlying exception that caused this error, if any.
        diagnostic_info: A dictionary containing diagnostic information including
            exception type, details, and OS name.
    """

    code = "Failed"

    def __init__(
        self,
        message: Optional[str] = None,
        path: Optional[str] = None,
        original_exception: Optional[Exception] = None,
    ):
        self.message = message or "A cleanup operation failed"
        super().__init__(self.message)
        self.path = path
        self.original_exception = original_exception
        self.diagnostic_info = {
            "type": (
                type(original_exception).__name__ if original_exception else "Unknown"
            ),
            "details": str(original_exception) if original_exception else "No details",
            "os_name": os.name,
        }

    @property
    def detail(self) -> str:
        """Single-line detail suitable for an audit record."""
        if self.original_exception:
            return f"{self.message}: {self.original_exception}"
        return self.message


class PathInvalidError(CleanupError):
    """
    Raised when the source root does not exist or cannot be accessed.

    This is the only per-run validation error; nothing is modified when it is raised.
    """

    code = "PathInvalid"


class UnreadableFileError(CleanupError):
    """
    Raised when a file cannot be opened or streamed for hashing.

    Files in this state are skipped, never deleted on unknown identity.
    """

    code = "UnreadableFile"


class RenameFailedError(CleanupError):
    """Raised when the OS refuses a rename (permission, lock, sharing violation)."""

    code = "RenameFailed"


class RemovalFailedError(CleanupError):
    """Raised when the OS refuses to delete a file or folder."""

    code = "RemovalFailed"


class NameCollisionError(RenameFailedError):
    """
    Raised when a sanitized or shortened name already exists next to the entry.

    The rename is not attempted, so nothing is overwritten.
    """

    code = "NameCollision"

    def __init__(
        self,
        message: Optional[str] = None,
        path: Optional[str] = None,
        target: Optional[str] = None,
        original_exception: Optional[Exception] = None,
    ):
        super().__init__(
            message=message or f"Target name already exists: {target}",
            path=path,
            original_exception=original_exception,
        )
        self.target = target


class PathStillTooLongError(CleanupError):
    """Raised when no shortened name can bring a path within the configured limit."""

    code = "PathStillTooLong"


class AttributeChangeError(CleanupError):
    """Raised when the hidden marker of an entry cannot be cleared."""

    code = "AttributeChangeFailed"


class TraversalError(CleanupError):
    """Raised when a directory cannot be listed during a walk."""

    code = "TraversalFailed"


class AuditLogError(CleanupError):
    """
    Raised when the audit log cannot be created or written.

    The run stops, since further destructive actions would go unrecorded.
    """

    code = "AuditLogFailed"


class ConfigError(CleanupError):
    """Raised when a settings file cannot be read or holds invalid values."""

    code = "ConfigInvalid"
