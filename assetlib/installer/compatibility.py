"""Engine compatibility findings.

Each check returns findings instead of raising; the orchestrator decides
whether a BLOCK finding stops the install (it does unless forced).
"""

from ..project import Project
from ..versions import EngineVersion, format_version, parse_major_minor
from .models import Finding, FindingLevel, PackageLayout


def check_engine_compatibility(
    plugin_version: EngineVersion | None, project_version: EngineVersion | None
) -> list[Finding]:
    if plugin_version is None or project_version is None:
        return []

    plugin_str = format_version(plugin_version)
    project_str = format_version(project_version)

    if plugin_version[0] != project_version[0]:
        return [
            Finding(
                FindingLevel.BLOCK,
                "major-mismatch",
                f"plugin targets engine {plugin_str} but the project uses {project_str} "
                f"(different major version)",
            )
        ]
    if plugin_version[1] > project_version[1]:
        return [
            Finding(
                FindingLevel.BLOCK,
                "plugin-newer",
                f"plugin targets engine {plugin_str}, newer than the project's {project_str}",
            )
        ]
    if plugin_version[1] < project_version[1]:
        return [
            Finding(
                FindingLevel.BLOCK,
                "plugin-older",
                f"plugin targets engine {plugin_str}, older than the project's {project_str}; "
                f"it will often still work",
            )
        ]
    return []


def check_compiled_modules(layout: PackageLayout, project: Project) -> list[Finding]:
    if layout.has_compiled_modules and not project.has_modules:
        return [
            Finding(
                FindingLevel.WARN,
                "needs-code-project",
                "plugin contains C++ modules but the project has none; "
                "the project may need to be converted to a C++ project",
            )
        ]
    return []


def check_version_tag(tag: str | None, project_version: EngineVersion | None) -> list[Finding]:
    tag_version = parse_major_minor(tag)
    if tag_version is None or project_version is None or tag_version == project_version:
        return []
    return [
        Finding(
            FindingLevel.WARN,
            "version-tag-mismatch",
            f"package is tagged for {format_version(tag_version)}, project uses "
            f"{format_version(project_version)}",
        )
    ]


__all__ = [
    "check_engine_compatibility",
    "check_compiled_modules",
    "check_version_tag",
]
