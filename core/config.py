"""
Pipeline configuration.

Values come from three layers, later ones winning:

1. defaults in `constants.py`
2. an optional JSON settings file (``~/.cloudprep/settings.json`` or ``--config``)
3. command-line options

Example settings file::

    {
        "max_path_length": 400,
        "unsupported_extensions": [".tmp", ".bak"],
        "vendor_extensions": [".qbw", ".qbb"],
        "remove_empty_dirs": false
    }
"""

from dataclasses import dataclass, field, replace
import json
from pathlib import Path
from typing import Any

from constants import (
    ARCHIVE_EXTENSIONS,
    CONFIG_FILE,
    DEFAULT_MAX_PATH_LENGTH,
    PLACEHOLDER_CHARACTER,
    RESERVED_CHARACTERS,
)
from core.exceptions import ConfigError
from core.models import PruneRule
from core.pruning import UNSUPPORTED_RULE, VENDOR_RULE

# Execution order of the passes; also the names accepted by --skip.
PASS_NAMES: tuple[str, ...] = (
    "attributes",
    "names",
    "empty",
    "archives",
    "duplicates",
    "unsupported",
    "vendor",
    "path-length",
)

_LIST_KEYS = {
    "reserved_characters",
    "unsupported_extensions",
    "unsupported_names",
    "lock_file_prefixes",
    "vendor_extensions",
    "archive_extensions",
}
_KNOWN_KEYS = _LIST_KEYS | {"max_path_length", "remove_empty_dirs"}


@dataclass(frozen=True)
class PipelineConfig:
    """
    Everything a pipeline run needs.

    Attributes:
        root: Absolute path of the tree to normalize.
        log_path: Audit log destination; created or truncated at start.
        max_path_length: Longest accepted absolute path, in characters.
        reserved_characters: Characters replaced during name sanitization.
        placeholder: Replacement for reserved characters.
        archive_extensions: Extensions recognized by the archive pass.
        unsupported_rule: Policy for the unsupported-type pass.
        vendor_rule: Policy for the vendor-artifact pass.
        remove_empty_dirs: Remove folders emptied by the empty-item pass.
        skip_passes: Names from PASS_NAMES to leave out.
    """

    root: Path
    log_path: Path
    max_path_length: int = DEFAULT_MAX_PATH_LENGTH
    reserved_characters: frozenset[str] = RESERVED_CHARACTERS
    placeholder: str = PLACEHOLDER_CHARACTER
    archive_extensions: frozenset[str] = ARCHIVE_EXTENSIONS
    unsupported_rule: PruneRule = UNSUPPORTED_RULE
    vendor_rule: PruneRule = VENDOR_RULE
    remove_empty_dirs: bool = True
    skip_passes: frozenset[str] = field(default_factory=frozenset)


def load_settings(settings_path: Path | None = None) -> dict[str, Any]:
    """
    Read a JSON settings file.

    Args:
        settings_path: File to read. If None, the default settings file is used
            when it exists.

    Returns:
        The validated settings dictionary, empty when no default file exists.

    Raises:
        ConfigError: If an explicitly given file is missing, or any file is not
            valid JSON, is not an object, or holds unknown keys or bad values.
    """
    if settings_path is None:
        if not CONFIG_FILE.exists():
            return {}
        settings_path = CONFIG_FILE

    try:
        content = settings_path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigError(
            message=f"Failed to read settings file: {settings_path}",
            path=str(settings_path),
            original_exception=e,
        ) from e

    try:
        settings = json.loads(content)
    except json.JSONDecodeError as e:
        raise ConfigError(
            message=f"Settings file is not valid JSON: {settings_path}",
            path=str(settings_path),
            original_exception=e,
        ) from e

    if not isinstance(settings, dict):
        raise ConfigError(
            message=f"Settings file must hold a JSON object: {settings_path}",
            path=str(settings_path),
        )
    _validate_settings(settings, settings_path)
    return settings


def build_config(
    root: Path,
    log_path: Path,
    settings: dict[str, Any] | None = None,
    max_path_length: int | None = None,
    remove_empty_dirs: bool | None = None,
    skip_passes: list[str] | None = None,
) -> PipelineConfig:
    """
    Merge defaults, settings and command-line overrides into a PipelineConfig.

    Extension and name lists from the settings replace the defaults. Extra
    reserved characters are added to the default set, which cannot be shrunk.

    Raises:
        ConfigError: If a pass name is unknown or the path limit is not positive.
    """
    settings = settings or {}
    config = PipelineConfig(root=root, log_path=log_path)

    unsupported_rule = replace(
        config.unsupported_rule,
        extensions=_extensions(
            settings, "unsupported_extensions", config.unsupported_rule.extensions
        ),
        names=_lowered(settings, "unsupported_names", config.unsupported_rule.names),
        name_prefixes=_lowered(
            settings, "lock_file_prefixes", config.unsupported_rule.name_prefixes
        ),
    )
    vendor_rule = replace(
        config.vendor_rule,
        extensions=_extensions(
            settings, "vendor_extensions", config.vendor_rule.extensions
        ),
    )

    if max_path_length is None:
        max_path_length = settings.get("max_path_length", config.max_path_length)
    if max_path_length is None or max_path_length < 1:
        raise ConfigError(
            message=f"max_path_length must be positive, got {max_path_length}"
        )

    if remove_empty_dirs is None:
        remove_empty_dirs = settings.get("remove_empty_dirs", config.remove_empty_dirs)

    unknown = sorted(set(skip_passes or []) - set(PASS_NAMES))
    if unknown:
        raise ConfigError(
            message=f"Unknown pass name(s): {', '.join(unknown)}. "
            f"Available: {', '.join(PASS_NAMES)}"
        )

    reserved = config.reserved_characters | frozenset(
        "".join(settings.get("reserved_characters", []))
    )
    if config.placeholder in reserved:
        raise ConfigError(
            message=f"Placeholder {config.placeholder!r} cannot be a reserved character"
        )

    return replace(
        config,
        max_path_length=max_path_length,
        reserved_characters=reserved,
        archive_extensions=_extensions(
            settings, "archive_extensions", config.archive_extensions
        ),
        unsupported_rule=unsupported_rule,
        vendor_rule=vendor_rule,
        remove_empty_dirs=bool(remove_empty_dirs),
        skip_passes=frozenset(skip_passes or []),
    )


def _validate_settings(settings: dict[str, Any], settings_path: Path) -> None:
    unknown = sorted(set(settings) - _KNOWN_KEYS)
    if unknown:
        raise ConfigError(
            message=f"Unknown setting(s) in {settings_path}: {', '.join(unknown)}",
            path=str(settings_path),
        )

    for key in _LIST_KEYS & set(settings):
        value = settings[key]
        if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
            raise ConfigError(
                message=f"Setting '{key}' must be a list of strings",
                path=str(settings_path),
            )

    # bool is a subclass of int, so it has to be ruled out explicitly
    max_length = settings.get("max_path_length")
    if max_length is not None and (
        not isinstance(max_length, int) or isinstance(max_length, bool)
    ):
        raise ConfigError(
            message="Setting 'max_path_length' must be an integer",
            path=str(settings_path),
        )

    remove_empty_dirs = settings.get("remove_empty_dirs")
    if remove_empty_dirs is not None and not isinstance(remove_empty_dirs, bool):
        raise ConfigError(
            message="Setting 'remove_empty_dirs' must be true or false",
            path=str(settings_path),
        )


def _lowered(
    settings: dict[str, Any], key: str, default: frozenset[str]
) -> frozenset[str]:
    if key not in settings:
        return default
    return frozenset(v.strip().lower() for v in settings[key] if v.strip())


def _extensions(
    settings: dict[str, Any], key: str, default: frozenset[str]
) -> frozenset[str]:
    # "PDF" and ".pdf" both mean ".pdf"
    values = _lowered(settings, key, default)
    return frozenset(v if v.startswith(".") else f".{v}" for v in values)
