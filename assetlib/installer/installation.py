"""Filesystem changes inside a project."""

import logging
import shutil
from pathlib import Path

from ..errors import FilesystemError
from ..project import ensure_within_project
from .models import InstallPlan

_logging = logging.getLogger(__name__)


def remove_tree(path: Path, project_root: Path) -> None:
    """Recursively delete path after re-checking it is inside the project.

    Raises:
        InvariantViolation: If path is outside project_root
        FilesystemError: If the deletion fails
    """
    ensure_within_project(path, project_root)
    _logging.debug(f"Removing {path}")
    try:
        if path.is_dir() and not path.is_symlink():
            shutil.rmtree(path)
        else:
            path.unlink()
    except OSError as e:
        raise FilesystemError("remove", path, e) from e


def apply_plan(plan: InstallPlan, project_root: Path) -> list[Path]:
    """Move extracted entries into the plan's target.

    When the archive had a single wrapper folder its children are moved,
    otherwise the top-level entries are.

    Raises:
        FilesystemError: If the target cannot be created or an entry cannot be moved
    """
    target = ensure_within_project(plan.target, project_root)
    try:
        target.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise FilesystemError("create", target, e) from e

    source = plan.layout.source_dir
    placed = []
    for name in plan.layout.top_level_entries:
        destination = target / name
        try:
            shutil.move(str(source / name), str(destination))
        except OSError as e:
            raise FilesystemError("move into", destination, e) from e
        placed.append(destination)
    _logging.debug(f"Placed {len(placed)} entries into {target}")
    return placed


__all__ = ["remove_tree", "apply_plan"]
