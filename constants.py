"""
Application-wide constants and default policy values.

This module defines the destination platform's naming rules and the default
pruning policies used by the pipeline. Every value here can be overridden from
the settings file or the command line (see `core/config.py`).
"""

from pathlib import Path
from typing import Final


# Characters the destination platform refuses in file and folder names.
# Each one is replaced by PLACEHOLDER_CHARACTER during name sanitization.
RESERVED_CHARACTERS: Final[frozenset[str]] = frozenset('*:"<>?|/\\')

PLACEHOLDER_CHARACTER: Final[str] = "_"

# Maximum full path length (in characters) accepted by the destination.
DEFAULT_MAX_PATH_LENGTH: Final[int] = 260

# Path shortening keeps this many trailing characters of the original name
# so the extension and some context survive.
TRUNCATION_TAIL_LENGTH: Final[int] = 12
TRUNCATION_MARKER: Final[str] = "~"

# Windows refuses plain paths at or beyond MAX_PATH (260, including the NUL).
WINDOWS_MAX_PATH: Final[int] = 260
EXTENDED_PATH_PREFIX: Final[str] = "\\\\?\\"
EXTENDED_UNC_PREFIX: Final[str] = "\\\\?\\UNC\\"

HASH_CHUNK_SIZE: Final[int] = 1024 * 1024

# Compound extensions are listed so that "backup.tar.gz" maps to "backup"
# rather than "backup.tar".
ARCHIVE_EXTENSIONS: Final[frozenset[str]] = frozenset(
    {
        ".zip",
        ".7z",
        ".rar",
        ".tar",
        ".tar.gz",
        ".tgz",
        ".tar.bz2",
        ".tbz2",
        ".tar.xz",
        ".txz",
        ".gz",
        ".bz2",
        ".xz",
    }
)

# File types the destination platform rejects or that carry no content worth
# migrating (shell shortcuts, OS thumbnails, browser partial downloads).
UNSUPPORTED_EXTENSIONS: Final[frozenset[str]] = frozenset(
    {
        ".tmp",
        ".temp",
        ".lnk",
        ".url",
        ".ds_store",
        ".crdownload",
        ".partial",
    }
)

UNSUPPORTED_NAMES: Final[frozenset[str]] = frozenset({"thumbs.db", "desktop.ini"})

# Office owner files ("~$Budget.xlsx") and LibreOffice lock files.
LOCK_FILE_PREFIXES: Final[frozenset[str]] = frozenset({"~$", ".~lock."})

# QuickBooks Desktop company, backup, portable, transaction log and network
# descriptor files. They only work inside the desktop application.
# ".des" and ".dsn" are shared with ODBC and other tools, so they are only
# removed when listed in the "vendor_extensions" setting.
VENDOR_ARTIFACT_EXTENSIONS: Final[frozenset[str]] = frozenset(
    {
        ".qbw",
        ".qbb",
        ".qbm",
        ".qbx",
        ".qba",
        ".qby",
        ".qbj",
        ".qbr",
        ".tlg",
        ".nd",
    }
)

CONFIG_DIR: Final[Path] = Path.home() / ".cloudprep"
CONFIG_FILE: Final[Path] = CONFIG_DIR / "settings.json"
