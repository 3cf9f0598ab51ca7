"""Configuration management for smartexport.

This module contains all configurable constants for vault exports and the
discovery/persistence of per-vault settings. Magic numbers are documented here
rather than scattered throughout the codebase.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import TYPE_CHECKING

import yaml
from pydantic import ValidationError

if TYPE_CHECKING:
    from .models import ExportSettings

log = logging.getLogger(__name__)


class ConfigurationError(Exception):
    """Raised when required configuration is missing."""

    pass


# =============================================================================
# Vault Discovery
# =============================================================================

# Per-vault settings file, stored at the vault root
SETTINGS_FILENAME = ".smartexport.yaml"

# Directory Obsidian creates inside every vault
OBSIDIAN_CONFIG_DIR = ".obsidian"

# Maximum directories to walk up from cwd when looking for a vault
MAX_VAULT_SEARCH_DEPTH = 20


def _is_vault_root(path: Path) -> bool:
    return (path / OBSIDIAN_CONFIG_DIR).is_dir() or (path / SETTINGS_FILENAME).is_file()


def _discover_vault(start_dir: Path | None = None, max_depth: int = MAX_VAULT_SEARCH_DEPTH) -> Path | None:
    """Walk up from start_dir looking for a vault marker.

    Args:
        start_dir: Directory to start from (defaults to cwd)
        max_depth: Maximum directories to traverse up

    Returns:
        Vault root if found, None otherwise.
    """
    current = Path(start_dir or os.getcwd()).resolve()

    for _ in range(max_depth):
        if _is_vault_root(current):
            return current

        parent = current.parent
        if parent == current:  # Reached filesystem root
            break
        current = parent

    return None


def get_vault_root(explicit: str | Path | None = None) -> Path:
    """Get the vault root directory.

    Discovery order:
    1. Explicit path (e.g. --vault option)
    2. SMARTEXPORT_VAULT_ROOT environment variable
    3. Walk up from cwd looking for .obsidian/ or .smartexport.yaml
    4. Error with helpful message

    Raises:
        ConfigurationError: If no vault can be found.
    """
    if explicit:
        path = Path(explicit).expanduser()
        if not path.is_dir():
            raise ConfigurationError(f"Vault directory does not exist: {path}")
        return path

    root = os.environ.get("SMARTEXPORT_VAULT_ROOT")
    if root:
        path = Path(root).expanduser()
        if not path.is_dir():
            raise ConfigurationError(f"SMARTEXPORT_VAULT_ROOT does not exist: {path}")
        return path

    discovered = _discover_vault()
    if discovered:
        return discovered

    raise ConfigurationError(
        "No vault found. Options:\n"
        "  1. Run sx from inside an Obsidian vault (a folder containing .obsidian/)\n"
        "  2. Pass --vault PATH\n"
        "  3. Set SMARTEXPORT_VAULT_ROOT to the vault directory"
    )


# =============================================================================
# Settings Persistence
# =============================================================================


def settings_path(vault_root: Path) -> Path:
    return vault_root / SETTINGS_FILENAME


def load_settings(vault_root: Path) -> ExportSettings:
    """Load export settings for a vault.

    A missing or unreadable settings file yields defaults; invalid values are
    logged and ignored.
    """
    from .models import ExportSettings

    path = settings_path(vault_root)
    if not path.exists():
        return ExportSettings()

    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except (OSError, yaml.YAMLError) as e:
        log.warning("Ignoring unreadable settings file %s: %s", path, e)
        return ExportSettings()

    if not isinstance(data, dict):
        log.warning("Ignoring settings file %s: expected a mapping", path)
        return ExportSettings()

    try:
        return ExportSettings.model_validate(data)
    except ValidationError as e:
        log.warning("Ignoring invalid settings in %s: %s", path, e)
        return ExportSettings()


def save_settings(vault_root: Path, settings: ExportSettings) -> Path:
    """Persist export settings to the vault's settings file."""
    path = settings_path(vault_root)
    path.write_text(
        yaml.safe_dump(settings.model_dump(), default_flow_style=False, sort_keys=False),
        encoding="utf-8",
    )
    return path


# =============================================================================
# Depth Limits
# =============================================================================

# Slider bounds from the interactive settings: content depth 1-20, title depth 1-30
MIN_DEPTH = 1
MAX_CONTENT_DEPTH = 20
MAX_TITLE_DEPTH = 30

DEFAULT_CONTENT_DEPTH = 3
DEFAULT_TITLE_DEPTH = 6


def clamp_depths(content_depth: int, title_depth: int, *, prefer: str = "content") -> tuple[int, int]:
    """Reconcile depth limits so that title_depth >= content_depth.

    Mirrors the settings sliders: raising content depth drags title depth up
    with it (prefer="content"), lowering title depth drags content depth down
    (prefer="title").
    """
    if title_depth >= content_depth:
        return content_depth, title_depth
    if prefer == "title":
        return title_depth, title_depth
    return content_depth, content_depth


# =============================================================================
# Token Estimation
# =============================================================================

# Rough approximation for English prose: 1 token ~ 4 characters
CHARS_PER_TOKEN = 4

# Context-size warnings shown next to the token estimate
TOKEN_WARNING_EXCEEDS_MOST = 200_000
TOKEN_WARNING_GPT4 = 128_000
TOKEN_WARNING_LARGE = 100_000
