"""Install planning and rendering."""

from pathlib import Path

from ..models import Package
from ..project import Project
from .compatibility import (
    check_compiled_modules,
    check_engine_compatibility,
    check_version_tag,
)
from .models import InstallPlan, PackageLayout


def plan_install(
    package: Package,
    project: Project,
    target: Path,
    layout: PackageLayout,
) -> InstallPlan:
    findings = []
    if package.is_plugin:
        findings.extend(
            check_engine_compatibility(layout.declared_version, project.engine_version)
        )
        findings.extend(check_compiled_modules(layout, project))
    findings.extend(check_version_tag(package.target_version_tag, project.engine_version))

    return InstallPlan(
        package_id=package.id,
        target=target,
        layout=layout,
        overwrite=target.exists(),
        findings=findings,
    )


def render_plan(plan: InstallPlan, project_root: Path | None = None) -> str:
    target = plan.target
    if project_root is not None:
        target = plan.target.relative_to(project_root)

    lines = [f"Install Plan: {plan.package_id}", ""]
    lines.append(f"  Target: {target}")
    if plan.overwrite:
        lines.append("  ⚠️  Target exists and would be overwritten")
    if plan.layout.flattens:
        lines.append(f"  Flattening wrapper folder '{plan.layout.wrapper_dir.name}'")
    if plan.layout.descriptor_relpath:
        lines.append(f"  Plugin descriptor: {plan.layout.descriptor_relpath}")

    if plan.findings:
        lines.append("")
        for finding in plan.findings:
            icon = "❌" if finding.blocks else "⚠️ "
            lines.append(f"  {icon} {finding.message}")

    lines.append("")
    lines.append(f"Entries ({len(plan.layout.top_level_entries)}):")
    for name in plan.layout.top_level_entries:
        lines.append(f"  • {name}")

    return "\n".join(lines)


__all__ = [
    "plan_install",
    "render_plan",
]
