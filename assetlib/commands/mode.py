"""Mode and status command implementations."""

from pathlib import Path

import click

from assetlib import ConfigError, host, save_policy
from assetlib.cache import ArchiveCache
from assetlib.commands.utils import fail, load_state, project_option, project_path
from assetlib.errors import ProjectNotFound
from assetlib.models import LicenseMode, LicenseStatus
from assetlib.policy import classify
from assetlib.project import load_project


@click.command()
@click.argument("new_mode", required=False, type=click.Choice([m.value for m in LicenseMode]))
@click.pass_context
def mode(ctx, new_mode: str | None):
    """Show or change the license mode (restrictive or permissive)."""
    try:
        state = load_state(ctx)
        if new_mode is None:
            click.echo(f"License mode: {state.policy.license_mode.value}")
            return
        state.policy.license_mode = LicenseMode(new_mode)
        save_policy(state.policy)
    except ConfigError as e:
        fail(e)

    click.echo(f"✅ License mode set to {new_mode}")
    if state.policy.license_mode == LicenseMode.PERMISSIVE:
        click.secho(
            "⚠️  Packages without a commercial license will install with a warning only.",
            fg="yellow",
        )


@click.command()
@project_option
@click.pass_context
def status(ctx, project: Path | None):
    """Summarize mode, registry, cache and project state."""
    try:
        state = load_state(ctx)
    except ConfigError as e:
        fail(e)

    click.echo(f"License mode: {state.policy.license_mode.value}")
    if state.policy.asset_root_url:
        click.echo(f"Asset root:   {state.policy.asset_root_url}")

    counts = {s: 0 for s in LicenseStatus}
    for package in state.packages:
        counts[classify(package, state.licenses)] += 1
    click.echo(f"Packages:     {len(state.packages)}")
    for s, n in counts.items():
        if n:
            click.echo(f"  {s.value}: {n}")
    click.echo(f"Licenses:     {len(state.licenses)}")

    stats = ArchiveCache().stats()
    click.echo(f"Cache:        {stats.count} archive(s), {stats.total_mb:.1f} MB")

    try:
        found = load_project(project_path(project))
        click.echo(f"Project:      {found.name} ({found.root})")
    except ProjectNotFound:
        click.echo("Project:      none detected")

    running = host.is_host_application_running()
    click.echo(f"Editor:       {'running' if running else 'not running'}")
