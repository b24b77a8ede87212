"""Archive download, verification and extraction."""

import logging
import shutil
import zipfile
from pathlib import Path

import click
import requests

from .errors import ArchiveVerificationError, ExtractionError, FetchError, FilesystemError

_logging = logging.getLogger(__name__)

ZIP_MAGIC = b"PK"
CHUNK_SIZE = 64 * 1024
CONNECT_TIMEOUT = 15
READ_TIMEOUT = 120
USER_AGENT = "assetlib"
FETCHABLE_SCHEMES = ("http://", "https://")


def download(url: str, dest: Path, show_progress: bool = True) -> Path:
    """Stream url into dest.

    Bytes go to a ``.part`` staging file next to dest, which only replaces
    dest once the transfer has finished.

    Raises:
        FetchError: On any network, HTTP or local write failure
    """
    dest.parent.mkdir(parents=True, exist_ok=True)
    staging = dest.with_name(dest.name + ".part")
    _logging.debug(f"Downloading {url} -> {staging}")

    try:
        with requests.get(
            url,
            stream=True,
            timeout=(CONNECT_TIMEOUT, READ_TIMEOUT),
            headers={"User-Agent": USER_AGENT},
        ) as response:
            response.raise_for_status()
            total = _content_length(response)
            with open(staging, "wb") as f:
                chunks = response.iter_content(chunk_size=CHUNK_SIZE)
                if total and show_progress:
                    with click.progressbar(length=total, label="Downloading") as bar:
                        for chunk in chunks:
                            f.write(chunk)
                            bar.update(len(chunk))
                else:
                    received = 0
                    for chunk in chunks:
                        f.write(chunk)
                        received += len(chunk)
                        if show_progress:
                            click.echo(f"\rDownloading... {received / 1048576:.1f} MB", nl=False)
                    if show_progress:
                        click.echo("")
        staging.replace(dest)
    except (requests.RequestException, OSError) as e:
        _remove_quietly(staging)
        raise FetchError(url, e) from e

    return dest


def _content_length(response) -> int | None:
    value = response.headers.get("Content-Length")
    try:
        length = int(value) if value is not None else None
    except ValueError:
        return None
    return length if length and length > 0 else None


def _remove_quietly(path: Path) -> None:
    try:
        path.unlink()
    except FileNotFoundError:
        pass
    except OSError as e:
        _logging.warning(f"Could not remove staging file {path}: {e}")


def is_zip_archive(path: Path) -> bool:
    try:
        with open(path, "rb") as f:
            return f.read(len(ZIP_MAGIC)) == ZIP_MAGIC
    except OSError:
        return False


def diagnostic_copy_path(diagnostics_dir: Path, package_id: str) -> Path:
    return diagnostics_dir / f"assetlib-failed-{package_id}.download"


def is_fetchable_url(url: str | None) -> bool:
    return bool(url) and url.lower().startswith(FETCHABLE_SCHEMES)


def preserve_for_inspection(path: Path, package_id: str, diagnostics_dir: Path) -> Path:
    """Raises:
        FilesystemError: If the copy cannot be written
    """
    target = diagnostic_copy_path(diagnostics_dir, package_id)
    try:
        shutil.copyfile(path, target)
    except OSError as e:
        raise FilesystemError("write diagnostic copy", target, e) from e
    return target


def verify_archive(path: Path, package_id: str, diagnostics_dir: Path) -> None:
    """Check the zip signature before anything is extracted.

    On mismatch the raw payload is copied into diagnostics_dir for a human
    to look at.

    Raises:
        ArchiveVerificationError: If the file does not start with 'PK'
    """
    if is_zip_archive(path):
        return
    try:
        copy = preserve_for_inspection(path, package_id, diagnostics_dir)
    except FilesystemError as e:
        _logging.warning(f"Archive for {package_id} failed magic-byte check: {e}")
        raise ArchiveVerificationError(package_id, None, copy_error=str(e)) from e
    _logging.warning(f"Archive for {package_id} failed magic-byte check, copy at {copy}")
    raise ArchiveVerificationError(package_id, copy)


def extract_archive(archive: Path, dest: Path) -> Path:
    """Extract archive into dest, refusing members that escape dest.

    Raises:
        ExtractionError: If the archive is corrupt or unsafe
    """
    dest.mkdir(parents=True, exist_ok=True)
    root = dest.resolve()
    try:
        with zipfile.ZipFile(archive) as zf:
            for member in zf.infolist():
                member_path = (root / member.filename).resolve()
                if member_path != root and root not in member_path.parents:
                    raise ExtractionError(
                        f"archive member '{member.filename}' would extract outside the target directory"
                    )
            zf.extractall(root)
    except zipfile.BadZipFile as e:
        raise ExtractionError(f"cannot extract {archive.name}: {e}") from e
    except OSError as e:
        raise ExtractionError(f"cannot extract {archive.name}: {e}") from e
    return dest


__all__ = [
    "ZIP_MAGIC",
    "download",
    "is_zip_archive",
    "is_fetchable_url",
    "diagnostic_copy_path",
    "preserve_for_inspection",
    "verify_archive",
    "extract_archive",
]
