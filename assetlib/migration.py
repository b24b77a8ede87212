"""YAML to JSON registry migration."""

import logging
from pathlib import Path

import click
import yaml

from .config import ConfigError, write_document
from .paths import get_legacy_registry_path

_logging = logging.getLogger(__name__)


def migrate_yaml_registry(yaml_path: Path, json_path: Path) -> None:
    """Migrate a legacy YAML registry to the JSON format.

    The YAML file is kept as ``packages.yaml.bak``.

    Raises:
        ConfigError: If the YAML file cannot be read or has the wrong shape
    """
    try:
        with open(yaml_path, encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except (OSError, yaml.YAMLError) as e:
        _logging.error(f"Migration failed: {e}")
        raise ConfigError(f"Failed to read legacy registry {yaml_path}: {e}") from e

    if isinstance(data, list):
        data = {"packages": data}
    if not isinstance(data, dict) or not isinstance(data.get("packages", []), list):
        raise ConfigError(f"Invalid legacy registry structure in {yaml_path}")

    write_document(json_path, {"packages": data.get("packages", [])})

    backup = yaml_path.with_suffix(".yaml.bak")
    yaml_path.rename(backup)

    click.echo(f"✅ Migrated registry from {yaml_path} to {json_path}")
    click.echo(f"   Old YAML backed up to {backup}")


def ensure_registry(registry_path: Path) -> None:
    """Migrate a legacy YAML registry when no JSON registry exists yet."""
    if registry_path.exists():
        return

    legacy = get_legacy_registry_path()
    if legacy.exists():
        click.echo(f"⚠️  Found legacy YAML registry at {legacy}")
        migrate_yaml_registry(legacy, registry_path)
