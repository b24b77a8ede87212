"""Install, preview, uninstall and prune against a project.

The Installer walks each install through the InstallState sequence. Every
failure is an AssetLibError tagged with the state it happened in, and the
temporary extraction directory is removed on every exit path.
"""

import logging
import tempfile
from pathlib import Path
from typing import Callable

import click

from .. import tui
from ..cache import ArchiveCache
from ..config import PolicyConfig
from ..errors import (
    Aborted,
    ArchiveVerificationError,
    AssetLibError,
    EngineVersionBlocked,
    ExtractionError,
    FilesystemError,
    HostLevelPackageBlocked,
    HostRunning,
    MissingArchiveLocation,
    MissingPluginDescriptor,
    PackageNotFound,
    UnsupportedArchiveLocation,
)
from ..fetch import (
    download,
    extract_archive,
    is_fetchable_url,
    preserve_for_inspection,
    verify_archive,
)
from ..host import is_host_application_running
from ..models import License, LicenseStatus, Package
from ..policy import (
    NON_OK_STATUSES,
    Verdict,
    check_license_gate,
    classify,
    describe_status,
    enforce,
)
from ..project import ProjectLog, install_target, load_project, resolve_install_target
from ..registry import find_package, remove_package, save_packages
from ..versions import parse_major_minor
from .inspection import inspect_package
from .installation import apply_plan, remove_tree
from .models import (
    FindingLevel,
    InstallOutcome,
    InstallState,
    PruneCandidate,
    PruneReport,
    PruneResult,
    ValidationIssue,
)
from .planning import plan_install, render_plan

_logging = logging.getLogger(__name__)


def _warn(message: str) -> None:
    click.secho(f"⚠️  {message}", fg="yellow", err=True)


class Installer:
    """Runs package operations against explicitly loaded state.

    Collaborators that touch the user or the outside world are injected so
    tests can replace them: ``confirm`` and ``confirm_reuse`` answer yes/no
    questions, ``choose_host_level`` resolves engine-level plugins,
    ``is_host_running`` detects the editor, ``fetcher`` downloads a URL to a
    path and ``save_registry`` persists the package list.
    """

    def __init__(
        self,
        packages: list[Package],
        licenses: list[License],
        policy: PolicyConfig,
        cache: ArchiveCache | None = None,
        confirm: Callable[[str], bool] = tui.confirm,
        confirm_reuse: Callable[[str], bool] = tui.confirm_reuse,
        choose_host_level: Callable[[str, str], str] = tui.choose_host_level_resolution,
        is_host_running: Callable[[], bool] = is_host_application_running,
        fetcher: Callable[[str, Path], Path] = download,
        save_registry: Callable[[list[Package]], None] = save_packages,
    ):
        self.packages = packages
        self.licenses = licenses
        self.policy = policy
        self.cache = cache or ArchiveCache()
        self.confirm = confirm
        self.confirm_reuse = confirm_reuse
        self.choose_host_level = choose_host_level
        self.is_host_running = is_host_running
        self.fetcher = fetcher
        self.save_registry = save_registry
        self.state = InstallState.START

    def _advance(self, state: InstallState) -> None:
        _logging.debug(f"{self.state.value} -> {state.value}")
        self.state = state

    def _lookup(self, package_id: str) -> Package:
        package = find_package(self.packages, package_id)
        if package is None:
            raise PackageNotFound(package_id)
        return package

    def _guard_host(self, force: bool) -> None:
        if not self.is_host_running():
            return
        if not force:
            raise HostRunning()
        _warn("The editor appears to be running; continuing because of --force")

    def status_of(self, package: Package) -> LicenseStatus:
        return classify(package, self.licenses)

    def install(
        self,
        package_id: str,
        project_path: Path,
        force: bool = False,
        preview_only: bool = False,
        refetch: bool = False,
    ) -> InstallOutcome:
        """Install a registered package into the project containing project_path.

        With preview_only every validation step still runs, including the
        download and extraction, but nothing inside the project changes.

        Raises:
            AssetLibError: Any abort; ``error.state`` names the failing state
        """
        self.state = InstallState.START
        log = None
        try:
            project = load_project(project_path)
            self._advance(InstallState.PROJECT_DETECTED)
            log = ProjectLog(project.root)
            return self._install(project, log, package_id, force, preview_only, refetch)
        except AssetLibError as e:
            e.state = self.state
            if log is not None:
                log.write("FAILED", f"{package_id} at {self.state.value}: {e}")
            raise

    def _install(self, project, log, package_id, force, preview_only, refetch) -> InstallOutcome:
        self._guard_host(force)
        package = self._lookup(package_id)

        gate = check_license_gate(package, self.licenses, self.policy.license_mode)
        if gate.needs_warning:
            _warn(
                f"License status for '{package.id}' is {gate.status.value} "
                f"({describe_status(gate.status)}); continuing in permissive mode"
            )
        self._advance(InstallState.LICENSE_CHECKED)

        if not package.archive_location:
            raise MissingArchiveLocation(package.id)
        if not is_fetchable_url(package.archive_location):
            raise UnsupportedArchiveLocation(package.id, package.archive_location)

        target = resolve_install_target(package, project.root)
        if target.exists():
            if preview_only:
                click.echo(f"Target {target} exists and would be overwritten.")
            elif not force and not self.confirm(f"{target} already exists. Overwrite it?"):
                raise Aborted(f"install of '{package.id}' cancelled")

        with tempfile.TemporaryDirectory(prefix="assetlib-") as workdir:
            archive = self.cache.get_or_fetch(
                package.id,
                package.archive_location,
                force_refetch=refetch,
                reuse=self.confirm_reuse,
                fetcher=self.fetcher,
            )
            self._advance(InstallState.ARCHIVE_READY)

            try:
                verify_archive(archive.path, package.id, project.root.parent)
            except ArchiveVerificationError:
                self.cache.remove(package.id)
                raise
            self._advance(InstallState.ARCHIVE_VERIFIED)

            try:
                extracted = extract_archive(archive.path, Path(workdir) / "extracted")
            except ExtractionError as e:
                try:
                    copy = preserve_for_inspection(archive.path, package.id, project.root.parent)
                except FilesystemError as copy_error:
                    e.hint = f"the archive could not be saved for inspection: {copy_error}"
                else:
                    e.hint = f"the archive was saved for inspection at {copy}"
                raise
            self._advance(InstallState.EXTRACTED)

            layout = inspect_package(extracted)
            self._advance(InstallState.LAYOUT_INSPECTED)

            if package.is_plugin:
                if layout.plugin_descriptor is None:
                    raise MissingPluginDescriptor(package.id)
                if layout.is_host_level:
                    self._resolve_host_level(package, layout.descriptor_relpath, log)

            plan = plan_install(package, project, target, layout)
            for finding in plan.findings:
                if finding.level == FindingLevel.WARN:
                    _warn(finding.message)
                elif force:
                    _warn(f"{finding.message}; continuing because of --force")
                else:
                    raise EngineVersionBlocked(finding.message)
            self._advance(InstallState.COMPATIBILITY_CHECKED)

            outcome = InstallOutcome(
                package_id=package.id,
                target=target,
                previewed=preview_only,
                state=self.state,
                license_status=gate.status,
                plan=plan,
                from_cache=archive.from_cache,
            )

            if preview_only:
                click.echo(render_plan(plan, project.root))
                self._advance(InstallState.PREVIEWED)
                log.write("PREVIEW", f"{package.id} -> {target} (no changes made)")
            else:
                if plan.overwrite:
                    remove_tree(target, project.root)
                apply_plan(plan, project.root)
                self._advance(InstallState.APPLIED)
                log.write(
                    "INSTALL",
                    f"{package.id} -> {target} force={force} flatten={layout.flattens}",
                )

        self._advance(InstallState.LOGGED)
        outcome.state = self.state
        return outcome

    def _resolve_host_level(self, package: Package, descriptor: str, log: ProjectLog) -> None:
        resolution = self.choose_host_level(package.id, descriptor)
        if resolution == tui.RESOLUTION_REMOVE:
            self.packages, _ = remove_package(self.packages, package.id)
            self.save_registry(self.packages)
            click.echo(f"Removed '{package.id}' from the registry.")
        else:
            resolution = tui.RESOLUTION_KEEP
            click.echo(f"Kept '{package.id}' in the registry for reference.")
        log.write(
            "BLOCKED",
            f"{package.id} engine-level plugin ({descriptor}); registry entry: {resolution}",
        )
        raise HostLevelPackageBlocked(package.id, descriptor, resolution)

    def validate_deep(
        self, package_id: str, project_path: Path, force: bool = False
    ) -> InstallOutcome:
        return self.install(package_id, project_path, force=force, preview_only=True)

    def validate_shallow(self, package: Package) -> list[ValidationIssue]:
        """Checks that need neither a project nor a download."""
        issues = []

        def issue(level: FindingLevel, message: str) -> None:
            issues.append(ValidationIssue(package.id, level, message))

        status = self.status_of(package)
        verdict = enforce(status, self.policy.license_mode)
        if verdict == Verdict.BLOCK:
            issue(FindingLevel.BLOCK, f"{status.value}: {describe_status(status)}")
        elif verdict == Verdict.WARN:
            issue(FindingLevel.WARN, f"{status.value}: {describe_status(status)}")

        if not package.archive_location:
            issue(FindingLevel.BLOCK, "no archiveLocation, cannot be installed")
        elif not is_fetchable_url(package.archive_location):
            issue(
                FindingLevel.BLOCK,
                f"archiveLocation is not an http(s) URL: {package.archive_location}",
            )

        tag = package.target_version_tag
        if tag and parse_major_minor(tag) is None:
            issue(FindingLevel.WARN, f"targetVersionTag '{tag}' is not a major.minor version")

        if package.plugin_folder_name and not package.is_plugin:
            issue(FindingLevel.WARN, "pluginFolderName is ignored for content packages")
        return issues

    def uninstall(self, package_id: str, project_path: Path, force: bool = False) -> bool:
        """Remove an installed package's files. The registry is not touched.

        Returns:
            True if files were removed, False if the package was not installed
        """
        project = load_project(project_path)
        package = self._lookup(package_id)
        self._guard_host(force)

        target = resolve_install_target(package, project.root)
        if not target.exists():
            click.echo(f"'{package.id}' is not installed in this project ({target}).")
            return False

        if not force and not self.confirm(f"Delete {target}?"):
            raise Aborted(f"uninstall of '{package.id}' cancelled")

        remove_tree(target, project.root)
        ProjectLog(project.root).write("UNINSTALL", f"{package.id} removed from {target}")
        return True

    def prune_candidates(self, project_root: Path, statuses=None) -> list[PruneCandidate]:
        """Installed packages whose license status is in statuses.

        Targets are not containment-checked here; each removal re-checks
        its own target.
        """
        statuses = set(statuses) if statuses else set(NON_OK_STATUSES)
        candidates = []
        for package in self.packages:
            status = self.status_of(package)
            if status not in statuses:
                continue
            target = install_target(package, project_root)
            if target.exists() or target.is_symlink():
                candidates.append(PruneCandidate(package.id, status, target))
        return candidates

    def prune(
        self,
        project_path: Path,
        statuses=None,
        dry_run: bool = False,
        force: bool = False,
    ) -> PruneReport:
        """Uninstall every installed package whose license status is in statuses.

        One failing removal does not stop the others; each outcome is
        recorded in the returned report.
        """
        project = load_project(project_path)
        if not dry_run:
            self._guard_host(force)

        candidates = self.prune_candidates(project.root, statuses)
        report = PruneReport(candidates=candidates, dry_run=dry_run)
        if not candidates:
            click.echo("No installed packages match the selected license statuses.")
            return report

        click.echo(f"{len(candidates)} installed package(s) selected for removal:")
        for candidate in candidates:
            click.echo(
                f"  • {candidate.package_id} [{candidate.status.value}] "
                f"{candidate.target.relative_to(project.root)}"
            )

        if dry_run:
            click.echo("Dry run: nothing was removed.")
            return report

        if not force and not self.confirm(f"Remove {len(candidates)} package(s)?"):
            raise Aborted("prune cancelled")

        log = ProjectLog(project.root)
        for candidate in candidates:
            try:
                remove_tree(candidate.target, project.root)
            except (AssetLibError, OSError) as e:
                _logging.warning(f"Prune of {candidate.package_id} failed: {e}")
                report.results.append(
                    PruneResult(candidate.package_id, candidate.target, False, str(e))
                )
                log.write("PRUNE-FAILED", f"{candidate.package_id}: {e}")
                continue
            report.results.append(PruneResult(candidate.package_id, candidate.target, True))
            log.write(
                "PRUNE",
                f"{candidate.package_id} [{candidate.status.value}] removed from {candidate.target}",
            )

        return report


__all__ = ["Installer"]
