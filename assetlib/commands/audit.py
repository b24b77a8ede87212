"""Audit command implementation."""

import sys
from pathlib import Path

import click

from assetlib import AssetLibError, ConfigError
from assetlib.commands.list import status_icon
from assetlib.commands.utils import fail, load_state, make_installer, project_option, project_path
from assetlib.models import LicenseStatus
from assetlib.policy import classify, parse_statuses


@click.command()
@click.option("--prune", is_flag=True, help="Uninstall packages whose license status is not OK")
@click.option("--dry-run", is_flag=True, help="With --prune: list candidates, remove nothing")
@click.option(
    "--statuses",
    "statuses",
    multiple=True,
    help="With --prune: statuses to remove (default: every non-OK status)",
)
@click.option("--force", "-f", is_flag=True, help="With --prune: skip confirmation and the editor check")
@project_option
@click.pass_context
def audit(ctx, prune: bool, dry_run: bool, statuses: tuple[str, ...], force: bool, project: Path | None):
    """Report license status for every package, optionally pruning installs."""
    if (dry_run or statuses) and not prune:
        raise click.BadOptionUsage("prune", "--dry-run and --statuses require --prune")

    try:
        state = load_state(ctx)
        selected = parse_statuses(statuses) if statuses else None
    except (ConfigError, ValueError) as e:
        fail(e)

    counts = {status: 0 for status in LicenseStatus}
    for package in state.packages:
        status = classify(package, state.licenses)
        counts[status] += 1
        if status != LicenseStatus.OK:
            click.echo(f"{status_icon(status)} {package.id}: {status.value}")

    summary = ", ".join(f"{s.value}={n}" for s, n in counts.items())
    click.echo(f"\n{len(state.packages)} package(s) audited in {state.policy.license_mode.value} mode: {summary}")

    if not prune:
        return

    try:
        report = make_installer(state).prune(
            project_path(project), statuses=selected, dry_run=dry_run, force=force
        )
    except AssetLibError as e:
        fail(e)

    for result in report.removed:
        click.echo(f"✅ Removed {result.package_id}")
    for result in report.failed:
        click.echo(f"❌ {result.package_id}: {result.error}", err=True)
    if report.failed:
        click.echo(f"\n{len(report.failed)} removal(s) failed.", err=True)
        sys.exit(1)
