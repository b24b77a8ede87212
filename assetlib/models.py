"""Registry record types."""

import re
from dataclasses import dataclass, field
from enum import Enum

PACKAGE_ID_PATTERN = r"^[A-Za-z0-9][A-Za-z0-9._-]*$"


class PackageType(Enum):
    CONTENT = "content"
    PLUGIN = "plugin"


class LicenseStatus(Enum):
    OK = "OK"
    NON_COMMERCIAL = "NON_COMMERCIAL"
    UNKNOWN_LICENSE = "UNKNOWN_LICENSE"
    NO_LICENSE = "NO_LICENSE"


class LicenseMode(Enum):
    RESTRICTIVE = "restrictive"
    PERMISSIVE = "permissive"


def is_valid_package_id(value: str) -> bool:
    return bool(value) and re.match(PACKAGE_ID_PATTERN, value) is not None and value not in (".", "..")


def _dedupe(values) -> list[str]:
    seen = []
    for value in values:
        if value not in seen:
            seen.append(value)
    return seen


@dataclass
class Package:
    """One trackable content pack or plugin."""
    id: str
    name: str
    source: str = ""
    cloud_location: str | None = None
    archive_location: str | None = None
    categories: list[str] = field(default_factory=list)
    tags: list[str] = field(default_factory=list)
    notes: str = ""
    license_id: str | None = None
    package_type: PackageType = PackageType.CONTENT
    plugin_folder_name: str | None = None
    target_version_tag: str | None = None

    def __post_init__(self):
        if not self.id or not isinstance(self.id, str):
            raise ValueError("id must be a non-empty string")
        if not is_valid_package_id(self.id):
            raise ValueError(
                f"id '{self.id}' must contain only letters, digits, '.', '_' or '-'"
            )
        if not self.name or not isinstance(self.name, str):
            raise ValueError("name must be a non-empty string")
        if not isinstance(self.package_type, PackageType):
            raise ValueError("package_type must be content or plugin")
        if self.plugin_folder_name is not None and not is_valid_package_id(
            self.plugin_folder_name
        ):
            raise ValueError(
                f"pluginFolderName '{self.plugin_folder_name}' must be a plain folder name"
            )
        self.categories = _dedupe(self.categories)
        self.tags = _dedupe(self.tags)

    @property
    def is_plugin(self) -> bool:
        return self.package_type == PackageType.PLUGIN

    @property
    def effective_folder_name(self) -> str:
        if self.is_plugin:
            return self.plugin_folder_name or self.id
        return self.id

    def to_dict(self) -> dict:
        data = {
            "id": self.id,
            "name": self.name,
            "source": self.source,
            "cloudLocation": self.cloud_location,
            "archiveLocation": self.archive_location,
            "categories": list(self.categories),
            "tags": list(self.tags),
            "notes": self.notes,
            "licenseId": self.license_id,
            "packageType": self.package_type.value,
        }
        if self.plugin_folder_name is not None:
            data["pluginFolderName"] = self.plugin_folder_name
        if self.target_version_tag is not None:
            data["targetVersionTag"] = self.target_version_tag
        return data


@dataclass
class License:
    """One license definition. Only commercial_allowed is machine-checked."""
    id: str
    name: str
    description: str = ""
    text_file: str = ""
    commercial_allowed: bool = False

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "textFile": self.text_file,
            "commercialAllowed": self.commercial_allowed,
        }


__all__ = [
    "PackageType",
    "LicenseStatus",
    "LicenseMode",
    "Package",
    "License",
    "is_valid_package_id",
]
