"""Tests for the install orchestrator."""

from pathlib import Path
from unittest.mock import patch

import pytest

from assetlib.errors import (
    Aborted,
    ArchiveVerificationError,
    EngineVersionBlocked,
    FilesystemError,
    HostLevelPackageBlocked,
    HostRunning,
    LicenseBlocked,
    MissingArchiveLocation,
    MissingPluginDescriptor,
    PackageNotFound,
    ProjectNotFound,
    UnsupportedArchiveLocation,
)
from assetlib.installer import FindingLevel, InstallState, orchestrator, remove_tree
from assetlib.models import LicenseMode, LicenseStatus
from tests.conftest import plugin_descriptor, zip_bytes

P1_URL = "https://example.com/p1.zip"
FOO_URL = "https://example.com/foo.zip"


def snapshot(root: Path) -> dict:
    """Map of every file and directory under root to its contents (or None)."""
    return {
        p.relative_to(root).as_posix(): (p.read_bytes() if p.is_file() else None)
        for p in sorted(root.rglob("*"))
        if ".assetlib" not in p.relative_to(root).parts
    }


def read_log(project: Path) -> str:
    return (project / ".assetlib" / "assetlib.log").read_text()


@pytest.fixture
def wrapped_zip(temp_dir):
    return zip_bytes(temp_dir, {"ForestPack/Trees/oak.uasset": "oak", "ForestPack/readme.txt": "hi"})


@pytest.fixture
def flat_zip(temp_dir):
    return zip_bytes(temp_dir, {"Trees/oak.uasset": "oak", "Rocks/granite.uasset": "granite", "readme.txt": "hi"})


class TestInstallContent:
    def test_wrapper_is_flattened(self, project, make_package, make_installer, wrapped_zip, isolated_tmp):
        installer = make_installer([make_package()], {P1_URL: wrapped_zip})

        outcome = installer.install("p1", project)

        target = project / "Content" / "AssetLib" / "p1"
        assert outcome.target == target
        assert outcome.state == InstallState.LOGGED
        assert (target / "Trees" / "oak.uasset").read_text() == "oak"
        assert (target / "readme.txt").exists()
        assert not (target / "ForestPack").exists()
        assert "INSTALL p1" in read_log(project)
        assert list(isolated_tmp.iterdir()) == []

    def test_multiple_entries_moved_as_is(self, project, make_package, make_installer, flat_zip):
        installer = make_installer([make_package()], {P1_URL: flat_zip})
        installer.install("p1", project)
        target = project / "Content" / "AssetLib" / "p1"
        assert sorted(p.name for p in target.iterdir()) == ["Rocks", "Trees", "readme.txt"]

    def test_cached_archive_reused(self, project, make_package, make_installer, flat_zip):
        installer = make_installer([make_package()], {P1_URL: flat_zip})
        installer.install("p1", project)
        outcome = installer.install("p1", project, force=True)
        assert outcome.from_cache
        assert installer.fetcher.calls == [P1_URL]

    def test_refetch_downloads_again(self, project, make_package, make_installer, flat_zip):
        installer = make_installer([make_package()], {P1_URL: flat_zip})
        installer.install("p1", project)
        installer.install("p1", project, force=True, refetch=True)
        assert installer.fetcher.calls == [P1_URL, P1_URL]

    def test_existing_target_replaced(self, project, make_package, make_installer, flat_zip):
        target = project / "Content" / "AssetLib" / "p1"
        target.mkdir(parents=True)
        (target / "stale.uasset").write_text("old")
        installer = make_installer([make_package()], {P1_URL: flat_zip})

        installer.install("p1", project)

        assert not (target / "stale.uasset").exists()
        assert (target / "readme.txt").exists()

    def test_declined_overwrite_keeps_existing(self, project, make_package, make_installer, flat_zip):
        target = project / "Content" / "AssetLib" / "p1"
        target.mkdir(parents=True)
        (target / "stale.uasset").write_text("old")
        installer = make_installer([make_package()], {P1_URL: flat_zip}, confirm=False)

        with pytest.raises(Aborted):
            installer.install("p1", project)

        assert (target / "stale.uasset").read_text() == "old"
        assert installer.fetcher.calls == []

    def test_unwritable_target_reported(self, project, make_package, make_installer, flat_zip):
        (project / "Content" / "AssetLib").write_text("not a directory")
        installer = make_installer([make_package()], {P1_URL: flat_zip})

        with pytest.raises(FilesystemError, match="cannot create") as exc_info:
            installer.install("p1", project, force=True)

        assert exc_info.value.state == InstallState.COMPATIBILITY_CHECKED
        assert "FAILED p1 at compatibility-checked: cannot create" in read_log(project)

    def test_version_tag_mismatch_only_warns(self, project, make_package, make_installer, flat_zip, capsys):
        installer = make_installer([make_package(target_version_tag="5.1")], {P1_URL: flat_zip})
        outcome = installer.install("p1", project)
        assert outcome.plan.warnings[0].code == "version-tag-mismatch"
        assert "tagged for 5.1" in capsys.readouterr().err


class TestPreview:
    @pytest.mark.parametrize("archive", ["wrapped_zip", "flat_zip"])
    def test_preview_changes_nothing(self, request, archive, project, make_package, make_installer, isolated_tmp, capsys):
        before = snapshot(project)
        installer = make_installer([make_package()], {P1_URL: request.getfixturevalue(archive)})

        outcome = installer.install("p1", project, preview_only=True)

        assert outcome.previewed
        assert outcome.state == InstallState.LOGGED
        assert snapshot(project) == before
        assert not outcome.target.exists()
        assert list(isolated_tmp.iterdir()) == []
        out = capsys.readouterr().out
        assert "Content/AssetLib/p1" in out
        assert "PREVIEW p1" in read_log(project)

    def test_preview_reports_flattening(self, project, make_package, make_installer, wrapped_zip, capsys):
        installer = make_installer([make_package()], {P1_URL: wrapped_zip})
        outcome = installer.install("p1", project, preview_only=True)
        out = capsys.readouterr().out
        assert outcome.plan.layout.flattens
        assert "Flattening wrapper folder 'ForestPack'" in out
        assert "Trees" in out

    def test_preview_does_not_delete_existing_target(self, project, make_package, make_installer, flat_zip, capsys):
        target = project / "Content" / "AssetLib" / "p1"
        target.mkdir(parents=True)
        (target / "keep.uasset").write_text("keep")
        installer = make_installer([make_package()], {P1_URL: flat_zip}, confirm=False)

        installer.install("p1", project, preview_only=True)

        assert (target / "keep.uasset").read_text() == "keep"
        assert "would be overwritten" in capsys.readouterr().out

    def test_validate_deep_is_preview(self, project, make_package, make_installer, flat_zip):
        installer = make_installer([make_package()], {P1_URL: flat_zip})
        outcome = installer.validate_deep("p1", project)
        assert outcome.previewed
        assert not outcome.target.exists()


class TestGuards:
    def test_not_a_project(self, temp_dir, make_package, make_installer):
        installer = make_installer([make_package()])
        with pytest.raises(ProjectNotFound) as exc_info:
            installer.install("p1", temp_dir)
        assert exc_info.value.state == InstallState.START

    def test_unknown_package(self, project, make_installer):
        with pytest.raises(PackageNotFound):
            make_installer([]).install("ghost", project)

    def test_host_running_blocks(self, project, make_package, make_installer):
        installer = make_installer([make_package()], host_running=True)
        with pytest.raises(HostRunning):
            installer.install("p1", project)

    def test_host_running_forced(self, project, make_package, make_installer, flat_zip, capsys):
        installer = make_installer([make_package()], {P1_URL: flat_zip}, host_running=True)
        installer.install("p1", project, force=True)
        assert "editor appears to be running" in capsys.readouterr().err

    def test_missing_archive_location(self, project, make_package, make_installer):
        installer = make_installer([make_package(archive_location=None)])
        with pytest.raises(MissingArchiveLocation):
            installer.install("p1", project)

    def test_non_http_archive_location(self, project, make_package, make_installer):
        installer = make_installer([make_package(archive_location="ftp://example.com/p1.zip")])
        with pytest.raises(UnsupportedArchiveLocation):
            installer.install("p1", project, preview_only=True)
        assert installer.fetcher.calls == []

    def test_failure_is_logged(self, project, make_package, make_installer):
        installer = make_installer([make_package(archive_location=None)])
        with pytest.raises(MissingArchiveLocation):
            installer.install("p1", project)
        assert "FAILED p1 at license-checked" in read_log(project)


class TestLicenseGate:
    @pytest.mark.parametrize("license_id", [None, "GPL-9", "CC-BY-NC"])
    def test_restrictive_blocks_even_with_force(self, project, make_package, make_installer, license_id):
        installer = make_installer([make_package(license_id=license_id)])
        with pytest.raises(LicenseBlocked) as exc_info:
            installer.install("p1", project, force=True)
        assert exc_info.value.state == InstallState.PROJECT_DETECTED
        assert installer.fetcher.calls == []

    def test_permissive_warns_and_installs(self, project, make_package, make_installer, flat_zip, capsys):
        installer = make_installer(
            [make_package(license_id="CC-BY-NC")], {P1_URL: flat_zip}, mode=LicenseMode.PERMISSIVE
        )
        outcome = installer.install("p1", project)
        assert outcome.license_status == LicenseStatus.NON_COMMERCIAL
        assert outcome.target.exists()
        assert "NON_COMMERCIAL" in capsys.readouterr().err


class TestArchiveVerification:
    def test_html_payload_aborts_before_extraction(self, project, make_package, make_installer, isolated_tmp):
        html = b"<!DOCTYPE html><html><body>Confirm download</body></html>"
        installer = make_installer([make_package()], {P1_URL: html})

        with pytest.raises(ArchiveVerificationError) as exc_info:
            installer.install("p1", project)

        assert exc_info.value.state == InstallState.ARCHIVE_READY
        copy = project.parent / "assetlib-failed-p1.download"
        assert copy.read_bytes() == html
        assert not (project / "Content" / "AssetLib" / "p1").exists()
        assert not installer.cache.has("p1")
        assert list(isolated_tmp.iterdir()) == []


class TestPlugins:
    def test_plugin_installed(self, project, make_plugin, make_installer, temp_dir):
        archive = zip_bytes(temp_dir, {"Foo/Foo.uplugin": plugin_descriptor("5.3.0"), "Foo/Content/x.uasset": "x"})
        installer = make_installer([make_plugin()], {FOO_URL: archive})

        installer.install("foo", project)

        assert (project / "Plugins" / "Foo" / "Foo.uplugin").exists()
        assert (project / "Plugins" / "Foo" / "Content" / "x.uasset").exists()

    def test_missing_descriptor(self, project, make_plugin, make_installer, temp_dir):
        archive = zip_bytes(temp_dir, {"Foo/Content/x.uasset": "x"})
        installer = make_installer([make_plugin()], {FOO_URL: archive})
        with pytest.raises(MissingPluginDescriptor):
            installer.install("foo", project, force=True)
        assert not (project / "Plugins").exists()

    def test_host_level_blocked_even_with_force(self, project, make_plugin, make_installer, temp_dir):
        archive = zip_bytes(temp_dir, {"SomeZip/Engine/Plugins/Foo/Foo.uplugin": plugin_descriptor()})
        installer = make_installer([make_plugin()], {FOO_URL: archive})

        with pytest.raises(HostLevelPackageBlocked) as exc_info:
            installer.install("foo", project, force=True)

        assert exc_info.value.resolution == "keep"
        assert [p.id for p in installer.packages] == ["foo"]
        assert installer.saved == []
        assert not (project / "Plugins").exists()
        assert "BLOCKED foo" in read_log(project)

    def test_host_level_remove_resolution(self, project, make_plugin, make_installer, temp_dir):
        archive = zip_bytes(temp_dir, {"SomeZip/Engine/Plugins/Foo/Foo.uplugin": plugin_descriptor()})
        installer = make_installer([make_plugin()], {FOO_URL: archive}, host_level_choice="remove")

        with pytest.raises(HostLevelPackageBlocked) as exc_info:
            installer.install("foo", project, force=True, preview_only=True)

        assert exc_info.value.resolution == "remove"
        assert installer.packages == []
        assert installer.saved == [[]]
        assert "registry entry: remove" in read_log(project)

    def test_major_mismatch_blocked_without_force(self, project, make_plugin, make_installer, temp_dir):
        archive = zip_bytes(temp_dir, {"Foo/Foo.uplugin": plugin_descriptor("4.27.1")})
        installer = make_installer([make_plugin()], {FOO_URL: archive})

        with pytest.raises(EngineVersionBlocked, match="4.27"):
            installer.install("foo", project)
        assert not (project / "Plugins").exists()

    def test_major_mismatch_forced(self, project, make_plugin, make_installer, temp_dir, capsys):
        archive = zip_bytes(temp_dir, {"Foo/Foo.uplugin": plugin_descriptor("4.27.1")})
        installer = make_installer([make_plugin()], {FOO_URL: archive})

        installer.install("foo", project, force=True)

        assert (project / "Plugins" / "Foo" / "Foo.uplugin").exists()
        assert "continuing because of --force" in capsys.readouterr().err

    @pytest.mark.parametrize("version", ["5.4.0", "5.1.0"])
    def test_minor_mismatch_blocked_without_force(self, project, make_plugin, make_installer, temp_dir, version):
        archive = zip_bytes(temp_dir, {"Foo/Foo.uplugin": plugin_descriptor(version)})
        installer = make_installer([make_plugin()], {FOO_URL: archive})
        with pytest.raises(EngineVersionBlocked):
            installer.install("foo", project)

    def test_compiled_modules_only_warn(self, project, make_plugin, make_installer, temp_dir, capsys):
        descriptor = plugin_descriptor("5.3.0", [{"Name": "Foo", "Type": "Runtime"}])
        archive = zip_bytes(temp_dir, {"Foo/Foo.uplugin": descriptor})
        installer = make_installer([make_plugin()], {FOO_URL: archive})

        outcome = installer.install("foo", project)

        assert [f.code for f in outcome.plan.findings] == ["needs-code-project"]
        assert outcome.plan.findings[0].level == FindingLevel.WARN
        assert "C++" in capsys.readouterr().err


class TestUninstall:
    def test_not_installed_is_noop(self, project, make_package, make_installer):
        assert make_installer([make_package()]).uninstall("p1", project) is False

    def test_removes_files_keeps_registry(self, project, make_package, make_installer):
        target = project / "Content" / "AssetLib" / "p1"
        target.mkdir(parents=True)
        (target / "a.uasset").write_text("a")
        installer = make_installer([make_package(license_id=None)])

        assert installer.uninstall("p1", project) is True

        assert not target.exists()
        assert [p.id for p in installer.packages] == ["p1"]
        assert installer.saved == []
        assert "UNINSTALL p1" in read_log(project)

    def test_declined(self, project, make_package, make_installer):
        target = project / "Content" / "AssetLib" / "p1"
        target.mkdir(parents=True)
        with pytest.raises(Aborted):
            make_installer([make_package()], confirm=False).uninstall("p1", project)
        assert target.exists()

    def test_host_running(self, project, make_package, make_installer):
        with pytest.raises(HostRunning):
            make_installer([make_package()], host_running=True).uninstall("p1", project)


class TestPrune:
    @pytest.fixture
    def mixed_registry(self, project, make_package):
        packages = [
            make_package("ok-installed", license_id="CC-BY"),
            make_package("nc-installed", license_id="CC-BY-NC"),
            make_package("nc-missing", license_id="CC-BY-NC"),
        ]
        for package_id in ("ok-installed", "nc-installed"):
            target = project / "Content" / "AssetLib" / package_id
            target.mkdir(parents=True)
            (target / "a.uasset").write_text("a")
        return packages

    def test_candidates_default_statuses(self, project, mixed_registry, make_installer):
        installer = make_installer(mixed_registry)
        candidates = installer.prune_candidates(project)
        assert [c.package_id for c in candidates] == ["nc-installed"]
        assert candidates[0].status == LicenseStatus.NON_COMMERCIAL

    def test_candidates_explicit_statuses(self, project, mixed_registry, make_installer):
        installer = make_installer(mixed_registry)
        assert installer.prune_candidates(project, {LicenseStatus.NO_LICENSE}) == []

    def test_dry_run_removes_nothing(self, project, mixed_registry, make_installer, capsys):
        installer = make_installer(mixed_registry, host_running=True)
        report = installer.prune(project, dry_run=True)
        assert report.results == []
        assert (project / "Content" / "AssetLib" / "nc-installed").exists()
        assert "nc-installed" in capsys.readouterr().out

    def test_prune_removes_candidates(self, project, mixed_registry, make_installer):
        installer = make_installer(mixed_registry)
        report = installer.prune(project)
        assert [r.package_id for r in report.removed] == ["nc-installed"]
        assert not (project / "Content" / "AssetLib" / "nc-installed").exists()
        assert (project / "Content" / "AssetLib" / "ok-installed").exists()
        assert "PRUNE nc-installed" in read_log(project)

    def test_prune_available_in_permissive_mode(self, project, mixed_registry, make_installer):
        installer = make_installer(mixed_registry, mode=LicenseMode.PERMISSIVE)
        assert [r.package_id for r in installer.prune(project).removed] == ["nc-installed"]

    def test_prune_declined(self, project, mixed_registry, make_installer):
        with pytest.raises(Aborted):
            make_installer(mixed_registry, confirm=False).prune(project)
        assert (project / "Content" / "AssetLib" / "nc-installed").exists()

    def test_prune_host_running(self, project, mixed_registry, make_installer):
        with pytest.raises(HostRunning):
            make_installer(mixed_registry, host_running=True).prune(project)

    def test_partial_failure_continues(self, project, make_package, make_installer):
        packages = [make_package(i, license_id=None) for i in ("a", "b", "c")]
        for package_id in ("a", "b", "c"):
            (project / "Content" / "AssetLib" / package_id).mkdir(parents=True)

        real_remove = orchestrator.remove_tree

        def flaky_remove(path, root):
            if path.name == "b":
                raise PermissionError("locked by another process")
            real_remove(path, root)

        installer = make_installer(packages)
        with patch.object(orchestrator, "remove_tree", side_effect=flaky_remove):
            report = installer.prune(project)

        assert [r.package_id for r in report.removed] == ["a", "c"]
        assert [(r.package_id, r.error) for r in report.failed] == [("b", "locked by another process")]
        assert (project / "Content" / "AssetLib" / "b").exists()


class TestValidateShallow:
    def test_clean_package(self, make_package, make_installer):
        assert make_installer([]).validate_shallow(make_package()) == []

    def test_collects_issues(self, make_package, make_installer):
        package = make_package(license_id=None, archive_location="ftp://old", target_version_tag="latest")
        issues = make_installer([]).validate_shallow(package)
        levels = [(i.level, i.message.split(":")[0]) for i in issues]
        assert (FindingLevel.BLOCK, "NO_LICENSE") in levels
        assert any("not an http(s) URL" in i.message for i in issues)
        assert any("targetVersionTag" in i.message for i in issues)

    def test_permissive_license_issue_is_warning(self, make_package, make_installer):
        installer = make_installer([], mode=LicenseMode.PERMISSIVE)
        [issue] = installer.validate_shallow(make_package(license_id="CC-BY-NC"))
        assert issue.level == FindingLevel.WARN


class TestPruneContainment:
    def test_target_outside_project_fails_alone(self, project, temp_dir, make_package, make_installer):
        outside = temp_dir / "outside"
        outside.mkdir()
        (outside / "keep.uasset").write_text("keep")
        assetlib_dir = project / "Content" / "AssetLib"
        assetlib_dir.mkdir(parents=True)
        (assetlib_dir / "a").symlink_to(outside, target_is_directory=True)
        (assetlib_dir / "b").mkdir()
        installer = make_installer([make_package(i, license_id=None) for i in ("a", "b")])

        report = installer.prune(project, force=True)

        assert [c.package_id for c in report.candidates] == ["a", "b"]
        assert [r.package_id for r in report.removed] == ["b"]
        [failed] = report.failed
        assert failed.package_id == "a"
        assert "outside project root" in failed.error
        assert (outside / "keep.uasset").read_text() == "keep"
        assert (assetlib_dir / "a").is_symlink()
        assert not (assetlib_dir / "b").exists()
        assert "PRUNE-FAILED a" in read_log(project)


class TestRemoveTree:
    def test_os_error_is_wrapped(self, project):
        target = project / "Content" / "AssetLib" / "p1"
        target.mkdir(parents=True)
        with patch("assetlib.installer.installation.shutil.rmtree", side_effect=PermissionError("in use")):
            with pytest.raises(FilesystemError, match="cannot remove .*in use"):
                remove_tree(target, project)
        assert target.exists()
