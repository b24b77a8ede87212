"""Inspection of an extracted package tree."""

import logging
import re
from pathlib import Path

from ..config import ConfigError, load_document
from ..versions import parse_major_minor
from .models import PackageLayout

_logging = logging.getLogger(__name__)

PLUGIN_DESCRIPTOR_SUFFIX = ".uplugin"
IGNORED_ENTRIES = frozenset({"__MACOSX", ".DS_Store", "Thumbs.db"})

# Engine/Plugins as consecutive path segments, either slash convention.
_HOST_LEVEL_SEGMENTS = re.compile(r"(^|[\\/])Engine[\\/]+Plugins([\\/]|$)", re.IGNORECASE)


def is_host_level_path(relative_path: str) -> bool:
    """True if a descriptor path sits inside an engine's own plugin tree.

    Examples:
        >>> is_host_level_path("SomeZip/Engine/Plugins/Foo/Foo.uplugin")
        True
        >>> is_host_level_path("Foo/Foo.uplugin")
        False
    """
    return bool(_HOST_LEVEL_SEGMENTS.search(relative_path or ""))


def _visible_entries(directory: Path) -> list[Path]:
    return sorted(
        (p for p in directory.iterdir() if p.name not in IGNORED_ENTRIES),
        key=lambda p: p.name,
    )


def find_wrapper_dir(root: Path) -> Path | None:
    """Return the single top-level directory when it is the only entry."""
    entries = _visible_entries(root)
    if len(entries) == 1 and entries[0].is_dir():
        return entries[0]
    return None


def find_plugin_descriptor(root: Path) -> Path | None:
    """Shallowest ``*.uplugin`` under root, ties broken by path."""
    candidates = [
        p
        for p in root.rglob(f"*{PLUGIN_DESCRIPTOR_SUFFIX}")
        if p.is_file() and not any(part in IGNORED_ENTRIES for part in p.relative_to(root).parts)
    ]
    if not candidates:
        return None
    return min(candidates, key=lambda p: (len(p.relative_to(root).parts), p.as_posix()))


def read_descriptor(path: Path) -> dict:
    try:
        return load_document(path)
    except ConfigError as e:
        _logging.warning(f"Could not parse plugin descriptor {path}: {e}")
        return {}


def inspect_package(root: Path) -> PackageLayout:
    """Describe an extracted archive rooted at root."""
    wrapper = find_wrapper_dir(root)
    source = wrapper or root
    layout = PackageLayout(
        root=root,
        wrapper_dir=wrapper,
        top_level_entries=[p.name for p in _visible_entries(source)],
    )

    descriptor = find_plugin_descriptor(root)
    if descriptor is None:
        return layout

    layout.plugin_descriptor = descriptor
    layout.is_host_level = is_host_level_path(layout.descriptor_relpath)

    data = read_descriptor(descriptor)
    version = parse_major_minor(data.get("EngineVersion"))
    if version is None:
        version = parse_major_minor(data.get("VersionName"))
    layout.declared_version = version

    modules = data.get("Modules")
    layout.has_compiled_modules = isinstance(modules, list) and len(modules) > 0

    _logging.debug(
        f"Inspected {root}: wrapper={wrapper}, descriptor={layout.descriptor_relpath}, "
        f"host_level={layout.is_host_level}, version={version}"
    )
    return layout


__all__ = [
    "is_host_level_path",
    "find_wrapper_dir",
    "find_plugin_descriptor",
    "read_descriptor",
    "inspect_package",
]
