"""Registry store for package and license records.

Both documents are ordered lists of records. Loading validates every record
and reports problems with their position, e.g. ``packages[2].packageType``.
Saving always replaces the whole document.
"""

import logging
from pathlib import Path

from .config import ConfigError, load_document, write_document
from .errors import DuplicatePackage, format_field_error
from .models import License, Package, PackageType
from .paths import get_licenses_path, get_registry_path

_logging = logging.getLogger(__name__)


def _require_str_field(data: dict, field: str, entity_name: str) -> str:
    if field not in data:
        raise ConfigError(f"{entity_name} missing required field: {field}")
    value = data[field]
    if not isinstance(value, str) or not value.strip():
        raise ConfigError(format_field_error(entity_name, field, "must be a non-empty string"))
    return value


def _optional_str_field(data: dict, field: str, entity_name: str) -> str | None:
    value = data.get(field)
    if value is None:
        return None
    if not isinstance(value, str):
        raise ConfigError(format_field_error(entity_name, field, "must be a string or null"))
    return value or None


def _str_list_field(data: dict, field: str, entity_name: str) -> list[str]:
    value = data.get(field)
    if value is None:
        return []
    if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
        raise ConfigError(format_field_error(entity_name, field, "must be a list of strings"))
    return value


def parse_package(data: dict, entity_name: str = "Package") -> Package:
    """Convert one raw registry record into a Package.

    Raises:
        ConfigError: If a field is missing or has the wrong type
    """
    if not isinstance(data, dict):
        raise ConfigError(f"{entity_name} must be an object, got {type(data).__name__}")

    package_id = _require_str_field(data, "id", entity_name)
    raw_type = data.get("packageType") or PackageType.CONTENT.value
    try:
        package_type = PackageType(raw_type)
    except ValueError:
        raise ConfigError(
            format_field_error(entity_name, "packageType", "must be 'content' or 'plugin'")
        )

    notes = data.get("notes") or ""
    if not isinstance(notes, str):
        raise ConfigError(format_field_error(entity_name, "notes", "must be a string"))

    try:
        return Package(
            id=package_id,
            name=_require_str_field(data, "name", entity_name),
            source=_optional_str_field(data, "source", entity_name) or "",
            cloud_location=_optional_str_field(data, "cloudLocation", entity_name),
            archive_location=_optional_str_field(data, "archiveLocation", entity_name),
            categories=_str_list_field(data, "categories", entity_name),
            tags=_str_list_field(data, "tags", entity_name),
            notes=notes,
            license_id=_optional_str_field(data, "licenseId", entity_name),
            package_type=package_type,
            plugin_folder_name=_optional_str_field(data, "pluginFolderName", entity_name),
            target_version_tag=_optional_str_field(data, "targetVersionTag", entity_name),
        )
    except ValueError as e:
        raise ConfigError(f"{entity_name}: {e}")


def parse_license(data: dict, entity_name: str = "License") -> License:
    if not isinstance(data, dict):
        raise ConfigError(f"{entity_name} must be an object, got {type(data).__name__}")

    commercial = data.get("commercialAllowed", False)
    if not isinstance(commercial, bool):
        raise ConfigError(
            format_field_error(entity_name, "commercialAllowed", "must be true or false")
        )

    return License(
        id=_require_str_field(data, "id", entity_name),
        name=_optional_str_field(data, "name", entity_name) or data["id"],
        description=_optional_str_field(data, "description", entity_name) or "",
        text_file=_optional_str_field(data, "textFile", entity_name) or "",
        commercial_allowed=commercial,
    )


def _load_records(path: Path, key: str, parse) -> list:
    if not path.exists():
        _logging.debug(f"{path} not found, starting with an empty {key} list")
        return []

    data = load_document(path)
    records_data = data.get(key, [])
    if not isinstance(records_data, list):
        raise ConfigError(f"{path}: {key} must be a list, got {type(records_data).__name__}")

    records = []
    seen_ids = set()
    for i, record_data in enumerate(records_data):
        record = parse(record_data, f"{key}[{i}]")
        if record.id in seen_ids:
            raise ConfigError(f"{path}: duplicate id '{record.id}' at {key}[{i}]")
        seen_ids.add(record.id)
        records.append(record)
    return records


def load_packages(path: Path | None = None) -> list[Package]:
    """Load the package registry, migrating a legacy YAML registry if needed."""
    if path is None:
        from .migration import ensure_registry

        path = get_registry_path()
        ensure_registry(path)
    return _load_records(path, "packages", parse_package)


def save_packages(packages: list[Package], path: Path | None = None) -> None:
    write_document(
        path or get_registry_path(),
        {"packages": [p.to_dict() for p in packages]},
    )


def load_licenses(path: Path | None = None) -> list[License]:
    return _load_records(path or get_licenses_path(), "licenses", parse_license)


def find_package(packages: list[Package], package_id: str) -> Package | None:
    return next((p for p in packages if p.id == package_id), None)


def find_license(licenses: list[License], license_id: str) -> License | None:
    return next((lic for lic in licenses if lic.id == license_id), None)


def add_package(packages: list[Package], package: Package) -> list[Package]:
    """Return a new list with package appended.

    Raises:
        DuplicatePackage: If the id is already registered
    """
    if find_package(packages, package.id) is not None:
        raise DuplicatePackage(package.id)
    return [*packages, package]


def remove_package(packages: list[Package], package_id: str) -> tuple[list[Package], bool]:
    """Return (remaining packages, whether anything was removed)."""
    remaining = [p for p in packages if p.id != package_id]
    return remaining, len(remaining) != len(packages)


__all__ = [
    "parse_package",
    "parse_license",
    "load_packages",
    "save_packages",
    "load_licenses",
    "find_package",
    "find_license",
    "add_package",
    "remove_package",
]
