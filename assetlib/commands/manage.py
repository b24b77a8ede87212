"""Add and remove command implementations.

Both only edit the registry. Removing a package never deletes installed
files or the archive in remote storage.
"""

import logging

import click

from assetlib import AssetLibError, ConfigError
from assetlib.commands.utils import fail, load_state
from assetlib.models import Package, PackageType
from assetlib.policy import check_license_gate, describe_status
from assetlib.registry import add_package, remove_package, save_packages

_logging = logging.getLogger(__name__)


@click.command()
@click.argument("package_id")
@click.option("--name", "-n", required=True, help="Display name")
@click.option("--source", default="", help="Where the package comes from (store, author, ...)")
@click.option("--cloud-url", help="Human-browsable location")
@click.option("--archive-url", help="Direct download URL of the zip archive")
@click.option("--category", "categories", multiple=True, help="Category (repeatable)")
@click.option("--tag", "tags", multiple=True, help="Tag (repeatable)")
@click.option("--notes", default="", help="Free-form notes")
@click.option("--license", "license_id", help="License id from 'assetlib licenses'")
@click.option(
    "--type",
    "package_type",
    type=click.Choice([t.value for t in PackageType]),
    default=PackageType.CONTENT.value,
    show_default=True,
)
@click.option("--plugin-folder", help="Plugin folder name (plugins only, default: id)")
@click.option("--version-tag", help="Engine version the package targets, e.g. 5.3")
@click.pass_context
def add(
    ctx,
    package_id: str,
    name: str,
    source: str,
    cloud_url: str | None,
    archive_url: str | None,
    categories: tuple[str, ...],
    tags: tuple[str, ...],
    notes: str,
    license_id: str | None,
    package_type: str,
    plugin_folder: str | None,
    version_tag: str | None,
):
    """Register a new package after checking its license."""
    try:
        state = load_state(ctx)
        package = Package(
            id=package_id,
            name=name,
            source=source,
            cloud_location=cloud_url,
            archive_location=archive_url,
            categories=list(categories),
            tags=list(tags),
            notes=notes,
            license_id=license_id,
            package_type=PackageType(package_type),
            plugin_folder_name=plugin_folder,
            target_version_tag=version_tag,
        )
        gate = check_license_gate(package, state.licenses, state.policy.license_mode)
        packages = add_package(state.packages, package)
        save_packages(packages)
    except (AssetLibError, ConfigError, ValueError) as e:
        fail(e)

    if gate.needs_warning:
        click.secho(
            f"⚠️  {package.id}: license status {gate.status.value} "
            f"({describe_status(gate.status)})",
            fg="yellow",
        )
    click.echo(f"✅ Registered {package.id}")


@click.command()
@click.argument("package_id")
@click.pass_context
def remove(ctx, package_id: str):
    """Remove a package from the registry (installed files are kept)."""
    try:
        state = load_state(ctx)
        packages, removed = remove_package(state.packages, package_id)
        if not removed:
            click.echo(f"Package '{package_id}' not found; registry unchanged.")
            return
        save_packages(packages)
    except ConfigError as e:
        fail(e)

    _logging.debug(f"Removed {package_id} from registry")
    click.echo(f"✅ Removed {package_id} from the registry")
