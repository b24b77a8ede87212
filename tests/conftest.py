"""Pytest fixtures and utilities for assetlib tests."""

import json
import tempfile
import zipfile
from pathlib import Path
from typing import Generator

import pytest

from assetlib.cache import ArchiveCache
from assetlib.config import PolicyConfig
from assetlib.installer import Installer
from assetlib.models import License, LicenseMode, Package, PackageType


def make_zip(path: Path, files: dict) -> Path:
    """Write a zip archive containing files (name -> str or bytes)."""
    path.parent.mkdir(parents=True, exist_ok=True)
    with zipfile.ZipFile(path, "w") as zf:
        for name, content in files.items():
            zf.writestr(name, content)
    return path


def zip_bytes(tmp: Path, files: dict) -> bytes:
    return make_zip(tmp / "build.zip", files).read_bytes()


def plugin_descriptor(engine_version: str = "5.3.0", modules: list | None = None) -> str:
    return json.dumps(
        {
            "FileVersion": 3,
            "FriendlyName": "Foo",
            "EngineVersion": engine_version,
            "Modules": modules or [],
        }
    )


class FakeFetcher:
    """Stands in for assetlib.fetch.download, serving bytes per URL."""

    def __init__(self, payloads: dict | None = None):
        self.payloads = payloads or {}
        self.calls = []

    def __call__(self, url: str, dest: Path) -> Path:
        self.calls.append(url)
        dest.parent.mkdir(parents=True, exist_ok=True)
        dest.write_bytes(self.payloads[url])
        return dest


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for test files."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir).resolve()


@pytest.fixture
def project(temp_dir: Path) -> Path:
    """A minimal project: MyGame.uproject plus Content/, engine 5.3."""
    root = temp_dir / "work" / "MyGame"
    (root / "Content").mkdir(parents=True)
    (root / "MyGame.uproject").write_text(
        json.dumps({"FileVersion": 3, "EngineAssociation": "5.3", "Modules": []})
    )
    return root


@pytest.fixture
def isolated_tmp(temp_dir: Path, monkeypatch) -> Path:
    """Route tempfile into a known directory so cleanup can be checked."""
    tmp = temp_dir / "tmp"
    tmp.mkdir()
    monkeypatch.setattr(tempfile, "tempdir", str(tmp))
    return tmp


@pytest.fixture
def isolated_home(temp_dir: Path, monkeypatch) -> Path:
    """Point ASSETLIB_HOME and ASSETLIB_CACHE_DIR into the temp dir."""
    home = temp_dir / "home"
    home.mkdir()
    monkeypatch.setenv("ASSETLIB_HOME", str(home))
    monkeypatch.setenv("ASSETLIB_CACHE_DIR", str(temp_dir / "cache"))
    return home


@pytest.fixture
def licenses() -> list[License]:
    return [
        License(id="CC-BY", name="Creative Commons BY", commercial_allowed=True),
        License(id="CC-BY-NC", name="Creative Commons BY-NC", commercial_allowed=False),
    ]


@pytest.fixture
def make_package():
    def _make(package_id: str = "p1", **kwargs) -> Package:
        kwargs.setdefault("name", package_id.upper())
        kwargs.setdefault("license_id", "CC-BY")
        kwargs.setdefault("archive_location", f"https://example.com/{package_id}.zip")
        return Package(id=package_id, **kwargs)

    return _make


@pytest.fixture
def make_plugin(make_package):
    def _make(package_id: str = "foo", **kwargs) -> Package:
        kwargs.setdefault("package_type", PackageType.PLUGIN)
        kwargs.setdefault("plugin_folder_name", "Foo")
        return make_package(package_id, **kwargs)

    return _make


@pytest.fixture
def make_installer(temp_dir: Path, licenses):
    """Factory for an Installer with every collaborator replaced."""

    def _make(
        packages: list[Package],
        payloads: dict | None = None,
        mode: LicenseMode = LicenseMode.RESTRICTIVE,
        confirm: bool = True,
        host_running: bool = False,
        host_level_choice: str = "keep",
    ) -> Installer:
        saved = []
        installer = Installer(
            packages=packages,
            licenses=licenses,
            policy=PolicyConfig(license_mode=mode),
            cache=ArchiveCache(temp_dir / "cache"),
            confirm=lambda _message: confirm,
            confirm_reuse=lambda _message: True,
            choose_host_level=lambda _id, _descriptor: host_level_choice,
            is_host_running=lambda: host_running,
            fetcher=FakeFetcher(payloads),
            save_registry=saved.append,
        )
        installer.saved = saved
        return installer

    return _make
