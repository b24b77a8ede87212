"""Shared utility functions for commands."""

import sys
from dataclasses import dataclass
from pathlib import Path

import click

from assetlib import fetch, host, setup_logging, tui
from assetlib.cache import ArchiveCache
from assetlib.config import PolicyConfig, load_policy
from assetlib.errors import AssetLibError, format_error, render_exception
from assetlib.installer import Installer
from assetlib.models import License, Package
from assetlib.registry import load_licenses, load_packages, save_packages


@dataclass
class CommandState:
    """Registry, licenses and policy loaded fresh for one command."""
    packages: list[Package]
    licenses: list[License]
    policy: PolicyConfig


def load_state(ctx: click.Context) -> CommandState:
    setup_logging(ctx.obj.get("debug", False) if ctx.obj else False)
    return CommandState(
        packages=load_packages(),
        licenses=load_licenses(),
        policy=load_policy(),
    )


def make_installer(state: CommandState) -> Installer:
    return Installer(
        packages=state.packages,
        licenses=state.licenses,
        policy=state.policy,
        cache=ArchiveCache(),
        confirm=tui.confirm,
        confirm_reuse=tui.confirm_reuse,
        choose_host_level=tui.choose_host_level_resolution,
        is_host_running=host.is_host_application_running,
        fetcher=fetch.download,
        save_registry=save_packages,
    )


def project_option(f):
    return click.option(
        "--project",
        "-p",
        "project",
        type=click.Path(file_okay=False, path_type=Path),
        default=None,
        help="Project directory (default: current directory)",
    )(f)


def project_path(project: Path | None) -> Path:
    return project if project is not None else Path.cwd()


def fail(error: Exception) -> None:
    """Print an error on stderr and exit with status 1."""
    if isinstance(error, AssetLibError):
        click.echo(render_exception(error), err=True)
    else:
        click.echo(format_error(str(error)), err=True)
    sys.exit(1)
