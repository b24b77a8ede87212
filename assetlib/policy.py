"""License policy engine.

``classify`` derives a LicenseStatus from a package's licenseId and the
license records. ``enforce`` maps a status to a verdict under the current
mode. Nothing here reads license text; ``commercial_allowed`` is the only
predicate.
"""

from dataclasses import dataclass
from enum import Enum

from .errors import LicenseBlocked
from .models import License, LicenseMode, LicenseStatus, Package

NON_OK_STATUSES = (
    LicenseStatus.NON_COMMERCIAL,
    LicenseStatus.UNKNOWN_LICENSE,
    LicenseStatus.NO_LICENSE,
)

_STATUS_DESCRIPTIONS = {
    LicenseStatus.OK: "license allows commercial use",
    LicenseStatus.NON_COMMERCIAL: "license does not allow commercial use",
    LicenseStatus.UNKNOWN_LICENSE: "licenseId does not match any known license",
    LicenseStatus.NO_LICENSE: "no licenseId set",
}


class Verdict(Enum):
    ALLOW = "allow"
    WARN = "warn"
    BLOCK = "block"


@dataclass
class GateResult:
    status: LicenseStatus
    verdict: Verdict

    @property
    def needs_warning(self) -> bool:
        return self.verdict == Verdict.WARN


def classify(package: Package, licenses: list[License]) -> LicenseStatus:
    license_id = (package.license_id or "").strip()
    if not license_id:
        return LicenseStatus.NO_LICENSE

    match = next((lic for lic in licenses if lic.id == license_id), None)
    if match is None:
        return LicenseStatus.UNKNOWN_LICENSE
    if not match.commercial_allowed:
        return LicenseStatus.NON_COMMERCIAL
    return LicenseStatus.OK


def enforce(status: LicenseStatus, mode: LicenseMode) -> Verdict:
    if status == LicenseStatus.OK:
        return Verdict.ALLOW
    if mode == LicenseMode.RESTRICTIVE:
        return Verdict.BLOCK
    return Verdict.WARN


def check_license_gate(
    package: Package, licenses: list[License], mode: LicenseMode
) -> GateResult:
    """Run the license gate for a mutating operation.

    Force flags never reach this function; a BLOCK always raises.

    Raises:
        LicenseBlocked: If the verdict is BLOCK
    """
    status = classify(package, licenses)
    verdict = enforce(status, mode)
    if verdict == Verdict.BLOCK:
        raise LicenseBlocked(package.id, status)
    return GateResult(status=status, verdict=verdict)


def describe_status(status: LicenseStatus) -> str:
    return _STATUS_DESCRIPTIONS[status]


def parse_statuses(names) -> set[LicenseStatus]:
    """Parse status names such as 'NO_LICENSE' or 'non_commercial'.

    Raises:
        ValueError: If a name is not a known status
    """
    statuses = set()
    for name in names:
        for part in name.split(","):
            part = part.strip().upper().replace("-", "_")
            if not part:
                continue
            try:
                statuses.add(LicenseStatus(part))
            except ValueError:
                valid = ", ".join(s.value for s in LicenseStatus)
                raise ValueError(f"unknown license status '{part}' (expected one of: {valid})")
    return statuses


__all__ = [
    "NON_OK_STATUSES",
    "Verdict",
    "GateResult",
    "classify",
    "enforce",
    "check_license_gate",
    "describe_status",
    "parse_statuses",
]
