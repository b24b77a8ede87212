"""Install pipeline: inspection, compatibility, planning and orchestration."""

from .compatibility import (
    check_compiled_modules,
    check_engine_compatibility,
    check_version_tag,
)
from .inspection import (
    find_plugin_descriptor,
    find_wrapper_dir,
    inspect_package,
    is_host_level_path,
)
from .installation import apply_plan, remove_tree
from .models import (
    Finding,
    FindingLevel,
    InstallOutcome,
    InstallPlan,
    InstallState,
    PackageLayout,
    PruneCandidate,
    PruneReport,
    PruneResult,
    ValidationIssue,
)
from .orchestrator import Installer
from .planning import plan_install, render_plan

__all__ = [
    "Finding",
    "FindingLevel",
    "InstallOutcome",
    "InstallPlan",
    "InstallState",
    "PackageLayout",
    "PruneCandidate",
    "PruneReport",
    "PruneResult",
    "ValidationIssue",
    "Installer",
    "check_compiled_modules",
    "check_engine_compatibility",
    "check_version_tag",
    "find_plugin_descriptor",
    "find_wrapper_dir",
    "inspect_package",
    "is_host_level_path",
    "apply_plan",
    "remove_tree",
    "plan_install",
    "render_plan",
]
