"""Open command implementation."""

import click

from assetlib import AssetLibError, ConfigError, host
from assetlib.commands.utils import fail, load_state
from assetlib.errors import PackageNotFound
from assetlib.registry import find_package


@click.command(name="open")
@click.argument("package_id")
@click.option("--archive", is_flag=True, help="Open the archive URL instead of the browse page")
@click.pass_context
def open_package(ctx, package_id: str, archive: bool):
    """Open a package's location in the browser."""
    try:
        state = load_state(ctx)
        package = find_package(state.packages, package_id)
        if package is None:
            raise PackageNotFound(package_id)
    except (AssetLibError, ConfigError) as e:
        fail(e)

    url = package.archive_location if archive else package.cloud_location
    if url:
        click.echo(f"Opening {url}")
        host.open_url(url)
        return

    click.echo(f"'{package_id}' has no {'archive' if archive else 'browse'} location.")
    root = state.policy.asset_root_url
    if root and click.confirm(f"Open the asset root {root} instead?", default=True):
        host.open_url(root)
