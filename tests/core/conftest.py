"""
Shared fixtures for core module tests.

This module provides reusable pytest fixtures for building temporary source
trees, an open audit log, and a silent progress display.
"""

from pathlib import Path

import pytest

from core.audit import AuditLog, read_log
from ui.progress_display import NoOpProgressDisplay


@pytest.fixture
def source_root(tmp_path):
    """Create an empty source tree root, kept apart from the audit log."""
    root = tmp_path / "source"
    root.mkdir()
    return root


@pytest.fixture
def log_path(tmp_path):
    return tmp_path / "audit.log"


@pytest.fixture
def audit_log(log_path):
    """An open AuditLog that does not echo failures to the console."""
    with AuditLog(log_path, echo_failures=False) as log:
        yield log


@pytest.fixture
def progress_display():
    """Progress display for testing."""
    return NoOpProgressDisplay()


@pytest.fixture
def make_tree():
    """
    Factory building a tree from a nested dict.

    Keys are entry names. A dict value creates a folder, bytes or str values
    create a file with that content.
    """

    def _factory(root: Path, layout: dict) -> Path:
        for name, content in layout.items():
            path = root / name
            if isinstance(content, dict):
                path.mkdir()
                _factory(path, content)
            elif isinstance(content, bytes):
                path.write_bytes(content)
            else:
                path.write_text(content, encoding="utf-8")
        return root

    return _factory


@pytest.fixture
def read_records(log_path):
    """Return the records written to the audit log so far."""

    def _read():
        return list(read_log(log_path))

    return _read


@pytest.fixture
def tree_listing():
    """Return every path under a root, relative and POSIX-style, sorted."""

    def _listing(root: Path) -> list[str]:
        return sorted(p.relative_to(root).as_posix() for p in root.rglob("*"))

    return _listing
