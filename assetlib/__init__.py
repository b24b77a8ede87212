"""assetlib: install licensed asset packs and plugins into projects."""

import logging

from .config import ConfigError, PolicyConfig, load_policy, save_policy
from .errors import AssetLibError, format_error, format_suggestion, render_exception
from .models import License, LicenseMode, LicenseStatus, Package, PackageType

__version__ = "0.3.0"

_LOG_FORMAT = "%(levelname)s %(name)s: %(message)s"


def setup_logging(debug: bool = False) -> None:
    """Configure the assetlib logger for the current command.

    WARNING and above go to stderr by default; --debug lowers that to DEBUG.
    The handler is rebuilt on every call so it writes to the current stderr.
    """
    logger = logging.getLogger("assetlib")
    logger.setLevel(logging.DEBUG if debug else logging.WARNING)
    for existing in [h for h in logger.handlers if getattr(h, "_assetlib", False)]:
        logger.removeHandler(existing)
    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(_LOG_FORMAT))
    handler._assetlib = True
    logger.addHandler(handler)


__all__ = [
    "__version__",
    "setup_logging",
    "AssetLibError",
    "ConfigError",
    "License",
    "LicenseMode",
    "LicenseStatus",
    "Package",
    "PackageType",
    "PolicyConfig",
    "format_error",
    "format_suggestion",
    "load_policy",
    "render_exception",
    "save_policy",
]
