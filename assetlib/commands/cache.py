"""Cache command implementations."""

import click

from assetlib import AssetLibError, setup_logging, tui
from assetlib.cache import ArchiveCache
from assetlib.commands.utils import fail


@click.group(invoke_without_command=True)
@click.pass_context
def cache(ctx):
    """Show or clear the archive cache."""
    setup_logging(ctx.obj.get("debug", False) if ctx.obj else False)
    if ctx.invoked_subcommand is None:
        ctx.invoke(cache_stats)


@cache.command(name="stats")
def cache_stats():
    """Show how many archives are cached and their total size."""
    archive_cache = ArchiveCache()
    stats = archive_cache.stats()
    click.echo(f"Cache root: {archive_cache.root}")
    click.echo(f"Archives:   {stats.count}")
    click.echo(f"Size:       {stats.total_mb:.1f} MB")


@cache.command(name="clear")
@click.option("--force", "-f", is_flag=True, help="Do not ask for confirmation")
def cache_clear(force: bool):
    """Delete every cached archive."""
    try:
        removed = ArchiveCache().clear(force=force, confirm=tui.confirm)
    except AssetLibError as e:
        fail(e)

    if removed:
        click.echo(f"✅ Removed {removed} cached archive(s)")
    else:
        click.echo("Cache is already empty.")
