"""Project detection, install targets and the per-project log."""

import logging
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path

from .config import ConfigError, load_document
from .errors import InvariantViolation, ProjectNotFound
from .models import Package
from .paths import get_project_log_path
from .versions import EngineVersion, parse_major_minor

_logging = logging.getLogger(__name__)

PROJECT_DESCRIPTOR_SUFFIX = ".uproject"
CONTENT_DIR = "Content"
CONTENT_INSTALL_DIR = ("Content", "AssetLib")
PLUGIN_INSTALL_DIR = ("Plugins",)


@dataclass
class Project:
    root: Path
    descriptor: Path
    engine_version: EngineVersion | None = None
    has_modules: bool = False

    @property
    def name(self) -> str:
        return self.descriptor.stem


def _project_descriptor(path: Path) -> Path | None:
    if not (path / CONTENT_DIR).is_dir():
        return None
    descriptors = sorted(path.glob(f"*{PROJECT_DESCRIPTOR_SUFFIX}"))
    return descriptors[0] if descriptors else None


def find_project_root(path: Path) -> Path | None:
    """Walk up from path to the first directory that looks like a project.

    A project root holds a ``*.uproject`` file and a ``Content`` directory.
    """
    path = path.resolve()
    for candidate in (path, *path.parents):
        if _project_descriptor(candidate) is not None:
            return candidate
    return None


def load_project(path: Path) -> Project:
    """Locate and describe the project containing path.

    Descriptor problems are tolerated: an unreadable ``.uproject`` yields a
    project with unknown engine version.

    Raises:
        ProjectNotFound: If no project root contains path
    """
    root = find_project_root(path)
    if root is None:
        raise ProjectNotFound(path)
    descriptor = _project_descriptor(root)

    data = {}
    try:
        data = load_document(descriptor)
    except ConfigError as e:
        _logging.warning(f"Could not read project descriptor {descriptor}: {e}")

    modules = data.get("Modules")
    has_modules = (isinstance(modules, list) and len(modules) > 0) or (root / "Source").is_dir()

    return Project(
        root=root,
        descriptor=descriptor,
        engine_version=parse_major_minor(data.get("EngineAssociation")),
        has_modules=has_modules,
    )


def is_within(path: Path, root: Path) -> bool:
    """True if path resolves to a strict descendant of root."""
    resolved = path.resolve()
    base = root.resolve()
    return resolved != base and base in resolved.parents


def ensure_within_project(path: Path, project_root: Path) -> Path:
    """Raises:
        InvariantViolation: If path is not a strict descendant of project_root
    """
    if not is_within(path, project_root):
        raise InvariantViolation(
            f"refusing to touch {path}: it is outside project root {project_root}"
        )
    return path


def install_target(package: Package, project_root: Path) -> Path:
    """Compute where a package lives inside a project.

    content -> <root>/Content/AssetLib/<id>
    plugin  -> <root>/Plugins/<pluginFolderName or id>
    """
    base = PLUGIN_INSTALL_DIR if package.is_plugin else CONTENT_INSTALL_DIR
    return project_root.joinpath(*base, package.effective_folder_name)


def resolve_install_target(package: Package, project_root: Path) -> Path:
    return ensure_within_project(install_target(package, project_root), project_root)


class ProjectLog:
    """Append-only event log under <project>/.assetlib/.

    Writing is best effort: failures are logged at debug level and never
    reach the caller.
    """

    def __init__(self, project_root: Path):
        self.path = get_project_log_path(project_root)

    def write(self, event: str, message: str) -> None:
        line = f"{datetime.now().isoformat(timespec='seconds')} {event} {message}\n"
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.path, "a", encoding="utf-8") as f:
                f.write(line)
        except OSError as e:
            _logging.debug(f"Project log write failed ({self.path}): {e}")


__all__ = [
    "Project",
    "ProjectLog",
    "find_project_root",
    "load_project",
    "is_within",
    "ensure_within_project",
    "install_target",
    "resolve_install_target",
]
