"""Validate command implementation."""

import sys
from pathlib import Path

import click

from assetlib import AssetLibError, ConfigError
from assetlib.commands.utils import fail, load_state, make_installer, project_option, project_path
from assetlib.errors import PackageNotFound, UserInputError
from assetlib.installer import FindingLevel
from assetlib.registry import find_package


@click.command()
@click.argument("package_id", required=False)
@click.option("--all", "all_packages", is_flag=True, help="Validate every registered package")
@click.option("--deep", is_flag=True, help="Download and inspect the archive (runs a preview install)")
@click.option("--force", "-f", is_flag=True, help="Deep mode: same overrides as install --force")
@project_option
@click.pass_context
def validate(
    ctx,
    package_id: str | None,
    all_packages: bool,
    deep: bool,
    force: bool,
    project: Path | None,
):
    """Check packages for problems before installing them.

    Without --deep only registry data is checked. With --deep the archive is
    downloaded, verified and inspected exactly as install would, without
    touching the project.
    """
    if bool(package_id) == all_packages:
        raise click.BadArgumentUsage("pass either a package id or --all")

    try:
        state = load_state(ctx)
        installer = make_installer(state)
        if all_packages:
            packages = list(state.packages)
        else:
            package = find_package(state.packages, package_id)
            if package is None:
                raise PackageNotFound(package_id)
            packages = [package]
    except (AssetLibError, ConfigError) as e:
        fail(e)

    failed = []
    for package in packages:
        issues = installer.validate_shallow(package)
        blocking = [i for i in issues if i.level == FindingLevel.BLOCK]
        for issue in issues:
            icon = "❌" if issue.level == FindingLevel.BLOCK else "⚠️ "
            click.echo(f"{icon} {package.id}: {issue.message}")

        if deep and not blocking:
            try:
                installer.validate_deep(package.id, project_path(project), force=force)
            except AssetLibError as e:
                if all_packages and not isinstance(e, UserInputError):
                    click.echo(f"❌ {package.id}: {e}")
                    failed.append(package.id)
                    continue
                fail(e)

        if blocking:
            failed.append(package.id)
        elif not issues:
            click.echo(f"✅ {package.id}")

    if failed:
        click.echo(f"\n{len(failed)} package(s) failed validation.", err=True)
        sys.exit(1)
