"""Error types and formatting utilities for consistent error messages.

Every abort path in assetlib raises a subclass of ``AssetLibError``. The
command layer catches them at the boundary and prints them with
``format_error`` or ``format_suggestion``.

Error Style Guide:
- User-facing errors use 'Error: ' prefix
- Field errors use structured format: '<entity> field '<field>' <issue>'
- Use present tense: 'must be', 'is required'
- Include actionable hints where helpful
"""


class AssetLibError(Exception):
    """Base class for every error that aborts a command.

    Attributes:
        hint: Optional actionable suggestion shown after the message
        state: Install state the orchestrator was in when the error occurred
    """

    def __init__(self, message: str, hint: str | None = None):
        super().__init__(message)
        self.hint = hint
        self.state = None


class UserInputError(AssetLibError):
    """Missing id, unknown id, or missing required field."""


class PackageNotFound(UserInputError):
    def __init__(self, package_id: str):
        super().__init__(
            f"package '{package_id}' not found in registry",
            hint="run 'assetlib list' to see registered packages",
        )
        self.package_id = package_id


class DuplicatePackage(UserInputError):
    def __init__(self, package_id: str):
        super().__init__(f"package '{package_id}' is already registered")
        self.package_id = package_id


class ProjectNotFound(UserInputError):
    def __init__(self, path):
        super().__init__(
            f"not a project root: {path}",
            hint="run from a directory containing a .uproject file and a Content folder, or pass --project",
        )


class MissingArchiveLocation(UserInputError):
    def __init__(self, package_id: str):
        super().__init__(
            f"package '{package_id}' has no archiveLocation, nothing to fetch"
        )


class UnsupportedArchiveLocation(UserInputError):
    def __init__(self, package_id: str, url: str):
        super().__init__(
            f"archiveLocation of '{package_id}' is not an http(s) URL: {url}",
            hint="point archiveLocation at a direct http:// or https:// download link",
        )
        self.package_id = package_id


class Aborted(UserInputError):
    """The user declined a confirmation prompt."""


class PolicyViolation(AssetLibError):
    """A safety rule blocked the operation."""


class LicenseBlocked(PolicyViolation):
    def __init__(self, package_id: str, status):
        super().__init__(
            f"license check failed for '{package_id}': {status.value}",
            hint="fix the package licenseId or switch to permissive mode with 'assetlib mode permissive'",
        )
        self.package_id = package_id
        self.status = status


class HostRunning(PolicyViolation):
    def __init__(self):
        super().__init__(
            "the editor appears to be running",
            hint="close the editor first, or pass --force to continue anyway",
        )


class HostLevelPackageBlocked(PolicyViolation):
    def __init__(self, package_id: str, descriptor: str, resolution: str):
        super().__init__(
            f"package '{package_id}' is an engine-level plugin ({descriptor}) "
            f"and cannot be installed into a project (registry entry: {resolution})"
        )
        self.package_id = package_id
        self.resolution = resolution


class EngineVersionBlocked(PolicyViolation):
    def __init__(self, message: str):
        super().__init__(message, hint="pass --force to install anyway")


class MissingPluginDescriptor(PolicyViolation):
    def __init__(self, package_id: str):
        super().__init__(
            f"no .uplugin descriptor found in archive for plugin '{package_id}'",
            hint="register the package with --type content if it is not a plugin",
        )


class ExternalIOError(AssetLibError):
    """Network, extraction or filesystem failure."""


class FetchError(ExternalIOError):
    def __init__(self, url: str, cause: Exception | str):
        super().__init__(f"download failed for {url}: {cause}")
        self.url = url


class ArchiveVerificationError(ExternalIOError):
    def __init__(self, package_id: str, diagnostic_path, copy_error: str | None = None):
        if diagnostic_path is not None:
            detail = f"saved for inspection at {diagnostic_path}"
        else:
            detail = f"no copy saved: {copy_error}"
        super().__init__(
            f"downloaded file for '{package_id}' is not a zip archive ({detail})",
            hint=(
                "the host may have returned an HTML confirmation or login page instead of the file; "
                "the link may point to a folder rather than a file; "
                "or the share may not be publicly visible"
            ),
        )
        self.diagnostic_path = diagnostic_path


class ExtractionError(ExternalIOError):
    pass


class FilesystemError(ExternalIOError):
    """A local read, write, move or delete failed."""

    def __init__(self, action: str, path, cause: OSError):
        super().__init__(f"cannot {action} {path}: {cause}")
        self.path = path


class InvariantViolation(AssetLibError):
    """A path escaped the project root. Never suppressible."""


def format_error(message: str) -> str:
    """Format an error message with consistent prefix.

    Examples:
        >>> format_error("file not found")
        'Error: file not found'
    """
    return f"Error: {message}"


def format_field_error(entity: str, field: str, issue: str) -> str:
    """Format a field validation error with structured format.

    Examples:
        >>> format_field_error("Package 'foo'", "id", "must be a non-empty string")
        "Package 'foo' field 'id' must be a non-empty string"
    """
    return f"{entity} field '{field}' {issue}"


def format_suggestion(message: str, suggestion: str) -> str:
    """Format an error message with a helpful suggestion.

    Examples:
        >>> format_suggestion("package 'foo' not found", "run 'assetlib list'")
        "Error: package 'foo' not found. Hint: run 'assetlib list'"
    """
    return f"{format_error(message)}. Hint: {suggestion}"


def render_exception(error: AssetLibError) -> str:
    """Render an AssetLibError for stderr, with its hint when present."""
    if error.hint:
        return format_suggestion(str(error), error.hint)
    return format_error(str(error))


__all__ = [
    "AssetLibError",
    "UserInputError",
    "PackageNotFound",
    "DuplicatePackage",
    "ProjectNotFound",
    "MissingArchiveLocation",
    "UnsupportedArchiveLocation",
    "Aborted",
    "PolicyViolation",
    "LicenseBlocked",
    "HostRunning",
    "HostLevelPackageBlocked",
    "EngineVersionBlocked",
    "MissingPluginDescriptor",
    "ExternalIOError",
    "FetchError",
    "ArchiveVerificationError",
    "ExtractionError",
    "FilesystemError",
    "InvariantViolation",
    "format_error",
    "format_field_error",
    "format_suggestion",
    "render_exception",
]
