"""Interactive prompts.

- questionary for rich interactive prompts (when a TTY is available)
- click as fallback for CI/headless scenarios
- TTY guards before every interactive prompt
"""

import sys

import click
import questionary
from prompt_toolkit.styles import Style

RESOLUTION_KEEP = "keep"
RESOLUTION_REMOVE = "remove"

_STYLE = Style(
    [
        ("danger", "fg:ansired"),
        ("safe", ""),
    ]
)


def confirm(message: str) -> bool:
    """Yes/no confirmation defaulting to no."""
    return click.confirm(message, default=False)


def confirm_reuse(message: str) -> bool:
    """Yes/no question defaulting to yes; headless sessions take the default."""
    if not sys.stdin.isatty():
        return True
    return click.confirm(message, default=True)


def choose_host_level_resolution(package_id: str, descriptor: str) -> str:
    """Ask what to do with the registry entry of an engine-level plugin.

    Returns RESOLUTION_KEEP or RESOLUTION_REMOVE. Headless sessions keep the
    entry. Both answers abort the install.
    """
    click.secho(
        f"\n❌ '{package_id}' is packaged as an engine plugin ({descriptor}).",
        fg="red",
        bold=True,
    )
    click.echo("   It will not be installed into this project.")

    if not sys.stdin.isatty():
        click.echo("   Keeping the registry entry for reference (non-interactive session).")
        return RESOLUTION_KEEP

    if sys.stdout.isatty():
        selection = questionary.select(
            "What should happen to the registry entry?",
            choices=[
                questionary.Choice(
                    title=[("class:safe", "Keep it for reference only")],
                    value=RESOLUTION_KEEP,
                ),
                questionary.Choice(
                    title=[("class:danger", "Remove it from the registry")],
                    value=RESOLUTION_REMOVE,
                ),
            ],
            style=_STYLE,
        ).ask()
        return selection or RESOLUTION_KEEP

    return click.prompt(
        "Registry entry",
        type=click.Choice([RESOLUTION_KEEP, RESOLUTION_REMOVE]),
        default=RESOLUTION_KEEP,
    )


__all__ = [
    "RESOLUTION_KEEP",
    "RESOLUTION_REMOVE",
    "confirm",
    "confirm_reuse",
    "choose_host_level_resolution",
]
