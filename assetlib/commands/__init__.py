"""CLI command definitions for assetlib."""

import click

from assetlib import __version__
from assetlib.commands.audit import audit
from assetlib.commands.cache import cache
from assetlib.commands.install import install, uninstall
from assetlib.commands.list import licenses, list_packages, show
from assetlib.commands.manage import add, remove
from assetlib.commands.mode import mode, status
from assetlib.commands.open import open_package
from assetlib.commands.validate import validate


@click.group()
@click.option("--debug", is_flag=True, help="Enable debug output for troubleshooting")
@click.version_option(__version__, prog_name="assetlib")
@click.pass_context
def cli(ctx, debug):
    """Track, license-check and install asset packs and plugins."""
    ctx.ensure_object(dict)
    ctx.obj["debug"] = debug


@click.command(name="help")
@click.argument("topic", required=False)
@click.pass_context
def help_command(ctx, topic: str | None):
    """Show help for a command, or for assetlib itself."""
    group_ctx = ctx.parent
    if topic is None:
        click.echo(group_ctx.get_help())
        return

    command = cli.get_command(group_ctx, topic)
    if command is None:
        click.echo(f"Error: no such command '{topic}'", err=True)
        ctx.exit(1)
    with click.Context(command, info_name=topic, parent=group_ctx) as sub_ctx:
        click.echo(command.get_help(sub_ctx))


# Register all commands
cli.add_command(list_packages, name="list")
cli.add_command(show)
cli.add_command(open_package, name="open")
cli.add_command(add)
cli.add_command(remove)
cli.add_command(licenses)
cli.add_command(audit)
cli.add_command(install)
cli.add_command(uninstall)
cli.add_command(validate)
cli.add_command(mode)
cli.add_command(status)
cli.add_command(cache)
cli.add_command(help_command, name="help")

__all__ = ["cli"]


if __name__ == "__main__":
    cli()
