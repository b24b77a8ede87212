"""Archive cache keyed by package id.

One file per package lives under a process-wide cache root outside any
project. Entries are overwritten on refetch and only removed by an explicit
clear; nothing expires.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Callable

from .errors import Aborted, FilesystemError
from .fetch import download, is_zip_archive
from .paths import get_cache_dir

_logging = logging.getLogger(__name__)

ARCHIVE_SUFFIX = ".zip"


@dataclass
class CacheStats:
    count: int
    total_bytes: int

    @property
    def total_mb(self) -> float:
        return self.total_bytes / 1048576


@dataclass
class CachedArchive:
    path: Path
    from_cache: bool


def _always(_message: str) -> bool:
    return True


class ArchiveCache:
    def __init__(self, root: Path | None = None):
        self.root = root or get_cache_dir()

    def path_for(self, package_id: str) -> Path:
        return self.root / f"{package_id}{ARCHIVE_SUFFIX}"

    def has(self, package_id: str) -> bool:
        return self.path_for(package_id).is_file()

    def entries(self) -> list[Path]:
        if not self.root.is_dir():
            return []
        return sorted(p for p in self.root.glob(f"*{ARCHIVE_SUFFIX}") if p.is_file())

    def get_or_fetch(
        self,
        package_id: str,
        url: str,
        force_refetch: bool = False,
        reuse: Callable[[str], bool] = _always,
        fetcher: Callable[[str, Path], Path] = download,
    ) -> CachedArchive:
        """Return a local archive for package_id, downloading when needed.

        An existing entry is offered for reuse unless force_refetch is set.
        Entries that no longer look like zip files are refetched.

        Raises:
            FetchError: If a download is needed and fails
            FilesystemError: If the cache directory cannot be created
        """
        cached = self.path_for(package_id)
        if cached.is_file() and not force_refetch:
            if not is_zip_archive(cached):
                _logging.warning(f"Cached archive {cached} is not a zip file, refetching")
            elif reuse(f"Cached archive found for '{package_id}'. Reuse it?"):
                _logging.debug(f"Reusing cached archive {cached}")
                return CachedArchive(path=cached, from_cache=True)

        try:
            self.root.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise FilesystemError("create cache directory", self.root, e) from e
        fetcher(url, cached)
        return CachedArchive(path=cached, from_cache=False)

    def remove(self, package_id: str) -> bool:
        path = self.path_for(package_id)
        if not path.exists():
            return False
        path.unlink()
        return True

    def stats(self) -> CacheStats:
        entries = self.entries()
        return CacheStats(
            count=len(entries),
            total_bytes=sum(p.stat().st_size for p in entries),
        )

    def clear(self, force: bool = False, confirm: Callable[[str], bool] | None = None) -> int:
        """Delete every cache entry and return how many were removed.

        Raises:
            Aborted: If confirmation is required and declined
        """
        entries = self.entries()
        if not entries:
            return 0
        if not force:
            if confirm is None or not confirm(f"Delete {len(entries)} cached archive(s)?"):
                raise Aborted("cache clear cancelled")
        for path in entries:
            path.unlink()
            _logging.debug(f"Removed cached archive {path}")
        return len(entries)


__all__ = ["ArchiveCache", "CacheStats", "CachedArchive"]
