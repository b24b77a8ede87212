"""Data models for the install pipeline."""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

from ..models import LicenseStatus
from ..versions import EngineVersion


class InstallState(Enum):
    START = "start"
    PROJECT_DETECTED = "project-detected"
    LICENSE_CHECKED = "license-checked"
    ARCHIVE_READY = "archive-ready"
    ARCHIVE_VERIFIED = "archive-verified"
    EXTRACTED = "extracted"
    LAYOUT_INSPECTED = "layout-inspected"
    COMPATIBILITY_CHECKED = "compatibility-checked"
    APPLIED = "applied"
    PREVIEWED = "previewed"
    LOGGED = "logged"


class FindingLevel(Enum):
    WARN = "warn"
    BLOCK = "block"


@dataclass
class Finding:
    level: FindingLevel
    code: str
    message: str

    @property
    def blocks(self) -> bool:
        return self.level == FindingLevel.BLOCK


@dataclass
class PackageLayout:
    root: Path
    wrapper_dir: Path | None = None
    top_level_entries: list[str] = field(default_factory=list)
    plugin_descriptor: Path | None = None
    is_host_level: bool = False
    declared_version: EngineVersion | None = None
    has_compiled_modules: bool = False

    @property
    def flattens(self) -> bool:
        return self.wrapper_dir is not None

    @property
    def source_dir(self) -> Path:
        return self.wrapper_dir or self.root

    @property
    def descriptor_relpath(self) -> str | None:
        if self.plugin_descriptor is None:
            return None
        return self.plugin_descriptor.relative_to(self.root).as_posix()


@dataclass
class InstallPlan:
    package_id: str
    target: Path
    layout: PackageLayout
    overwrite: bool
    findings: list[Finding] = field(default_factory=list)

    @property
    def warnings(self) -> list[Finding]:
        return [f for f in self.findings if not f.blocks]


@dataclass
class InstallOutcome:
    package_id: str
    target: Path
    previewed: bool
    state: InstallState
    license_status: LicenseStatus
    plan: InstallPlan | None = None
    from_cache: bool = False


@dataclass
class PruneCandidate:
    package_id: str
    status: LicenseStatus
    target: Path


@dataclass
class PruneResult:
    package_id: str
    target: Path
    ok: bool
    error: str | None = None


@dataclass
class PruneReport:
    candidates: list[PruneCandidate]
    results: list[PruneResult] = field(default_factory=list)
    dry_run: bool = False

    @property
    def failed(self) -> list[PruneResult]:
        return [r for r in self.results if not r.ok]

    @property
    def removed(self) -> list[PruneResult]:
        return [r for r in self.results if r.ok]


@dataclass
class ValidationIssue:
    package_id: str
    level: FindingLevel
    message: str


__all__ = [
    "InstallState",
    "FindingLevel",
    "Finding",
    "PackageLayout",
    "InstallPlan",
    "InstallOutcome",
    "PruneCandidate",
    "PruneResult",
    "PruneReport",
    "ValidationIssue",
]
