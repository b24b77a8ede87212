"""Install and uninstall command implementations."""

import logging
from pathlib import Path

import click

from assetlib import AssetLibError, ConfigError
from assetlib.commands.utils import fail, load_state, make_installer, project_option, project_path

_logging = logging.getLogger(__name__)


@click.command()
@click.argument("package_id")
@click.option(
    "--force",
    "-f",
    is_flag=True,
    help="Skip confirmations and override editor-running and engine-version checks",
)
@click.option("--preview", is_flag=True, help="Validate everything but change nothing")
@click.option("--refetch", is_flag=True, help="Download again even if the archive is cached")
@project_option
@click.pass_context
def install(ctx, package_id: str, force: bool, preview: bool, refetch: bool, project: Path | None):
    """Install a registered package into the current project."""
    try:
        state = load_state(ctx)
        installer = make_installer(state)
        outcome = installer.install(
            package_id,
            project_path(project),
            force=force,
            preview_only=preview,
            refetch=refetch,
        )
    except (AssetLibError, ConfigError) as e:
        if isinstance(e, AssetLibError) and e.state is not None:
            _logging.debug(f"install of {package_id} failed at state {e.state.value}")
        fail(e)

    if outcome.previewed:
        click.echo(f"\n🔎 Preview of {package_id} complete, no changes made")
    else:
        click.echo(f"✅ {package_id} installed to {outcome.target}")


@click.command()
@click.argument("package_id")
@click.option("--force", "-f", is_flag=True, help="Skip confirmation and the editor-running check")
@project_option
@click.pass_context
def uninstall(ctx, package_id: str, force: bool, project: Path | None):
    """Delete an installed package from the current project."""
    try:
        state = load_state(ctx)
        removed = make_installer(state).uninstall(package_id, project_path(project), force=force)
    except (AssetLibError, ConfigError) as e:
        fail(e)

    if removed:
        click.echo(f"✅ {package_id} uninstalled")
