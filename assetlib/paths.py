"""Path helpers for assetlib data files."""

import os
from pathlib import Path

PROJECT_STATE_DIR = ".assetlib"


def get_config_dir() -> Path:
    """Return the data directory holding registry, licenses and policy.

    Priority:
    1. ASSETLIB_HOME environment variable (if set)
    2. ~/.config/assetlib (default XDG location)
    """
    if "ASSETLIB_HOME" in os.environ:
        return Path(os.environ["ASSETLIB_HOME"])
    return Path.home() / ".config" / "assetlib"


def get_registry_path() -> Path:
    return get_config_dir() / "packages.json"


def get_legacy_registry_path() -> Path:
    return get_config_dir() / "packages.yaml"


def get_licenses_path() -> Path:
    return get_config_dir() / "licenses.json"


def get_policy_path() -> Path:
    return get_config_dir() / "config.json"


def get_cache_dir() -> Path:
    """Return the archive cache root.

    Lives outside any project. ASSETLIB_CACHE_DIR overrides the default
    ~/.cache/assetlib/archives.
    """
    if "ASSETLIB_CACHE_DIR" in os.environ:
        return Path(os.environ["ASSETLIB_CACHE_DIR"])
    return Path.home() / ".cache" / "assetlib" / "archives"


def get_project_log_path(project_root: Path) -> Path:
    return project_root / PROJECT_STATE_DIR / "assetlib.log"
