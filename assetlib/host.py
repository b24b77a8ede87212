"""Host application collaborators: editor process detection and browser."""

import logging

import click
import psutil

_logging = logging.getLogger(__name__)

EDITOR_PROCESS_NAMES = frozenset(
    {
        "unrealeditor",
        "unrealeditor.exe",
        "ue4editor",
        "ue4editor.exe",
        "unrealeditor-cmd",
        "unrealeditor-cmd.exe",
    }
)


def is_host_application_running() -> bool:
    """Return True if an editor process is running.

    Detection errors count as running, so callers block.
    """
    try:
        for proc in psutil.process_iter(["name"]):
            name = (proc.info.get("name") or "").lower()
            if name in EDITOR_PROCESS_NAMES:
                _logging.debug(f"Editor process detected: {name} (pid {proc.pid})")
                return True
    except (psutil.Error, OSError) as e:
        _logging.warning(f"Process detection failed, assuming the editor is running: {e}")
        return True
    return False


def open_url(url: str) -> None:
    _logging.debug(f"Opening {url}")
    click.launch(url)
