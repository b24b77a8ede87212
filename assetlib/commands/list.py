"""List, show and licenses command implementations."""

import click

from assetlib import AssetLibError, ConfigError
from assetlib.commands.utils import fail, load_state
from assetlib.errors import PackageNotFound
from assetlib.models import LicenseStatus
from assetlib.policy import classify, describe_status, parse_statuses
from assetlib.registry import find_license, find_package

_STATUS_ICONS = {
    LicenseStatus.OK: "✅",
    LicenseStatus.NON_COMMERCIAL: "⚠️ ",
    LicenseStatus.UNKNOWN_LICENSE: "❓",
    LicenseStatus.NO_LICENSE: "❌",
}


def status_icon(status: LicenseStatus) -> str:
    return _STATUS_ICONS[status]


@click.command(name="list")
@click.option("--category", "-c", help="Only packages in this category")
@click.option("--tag", "-t", help="Only packages with this tag")
@click.option("--status", "-s", "statuses", multiple=True, help="Only packages with this license status")
@click.pass_context
def list_packages(ctx, category: str | None, tag: str | None, statuses: tuple[str, ...]):
    """List registered packages with their license status."""
    try:
        state = load_state(ctx)
        wanted = parse_statuses(statuses) if statuses else None
    except (ConfigError, ValueError) as e:
        fail(e)

    shown = 0
    for package in state.packages:
        if category and category not in package.categories:
            continue
        if tag and tag not in package.tags:
            continue
        status = classify(package, state.licenses)
        if wanted and status not in wanted:
            continue
        click.echo(
            f"{status_icon(status)} {package.id} [{package.package_type.value}] "
            f"{package.name} ({status.value})"
        )
        shown += 1

    if shown == 0:
        click.echo("No packages registered." if not state.packages else "No packages match.")


@click.command()
@click.argument("package_id")
@click.pass_context
def show(ctx, package_id: str):
    """Show every field of a registered package."""
    try:
        state = load_state(ctx)
        package = find_package(state.packages, package_id)
        if package is None:
            raise PackageNotFound(package_id)
    except (AssetLibError, ConfigError) as e:
        fail(e)

    status = classify(package, state.licenses)
    license_record = find_license(state.licenses, package.license_id or "")

    click.echo(f"{package.name} ({package.id})")
    click.echo(f"  Type:        {package.package_type.value}")
    if package.is_plugin:
        click.echo(f"  Folder:      {package.effective_folder_name}")
    click.echo(f"  Source:      {package.source or '-'}")
    click.echo(f"  Browse:      {package.cloud_location or '-'}")
    click.echo(f"  Archive:     {package.archive_location or '-'}")
    click.echo(f"  Categories:  {', '.join(package.categories) or '-'}")
    click.echo(f"  Tags:        {', '.join(package.tags) or '-'}")
    click.echo(f"  Version tag: {package.target_version_tag or '-'}")
    license_name = license_record.name if license_record else (package.license_id or "-")
    click.echo(f"  License:     {license_name}")
    click.echo(f"  Status:      {status_icon(status)} {status.value} ({describe_status(status)})")
    if package.notes:
        click.echo(f"  Notes:       {package.notes}")


@click.command()
@click.pass_context
def licenses(ctx):
    """List known license definitions."""
    try:
        state = load_state(ctx)
    except ConfigError as e:
        fail(e)

    if not state.licenses:
        click.echo("No licenses defined.")
        return

    for lic in state.licenses:
        commercial = "commercial OK" if lic.commercial_allowed else "non-commercial"
        click.echo(f"• {lic.id}: {lic.name} ({commercial})")
        if lic.description:
            click.echo(f"    {lic.description}")
        if lic.text_file:
            click.echo(f"    Text: {lic.text_file}")
