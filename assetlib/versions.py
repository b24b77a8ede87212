"""Coarse engine version parsing and comparison."""

import re

_MAJOR_MINOR = re.compile(r"^\s*v?(\d+)\.(\d+)")

EngineVersion = tuple[int, int]


def parse_major_minor(value) -> EngineVersion | None:
    """Parse the first two dot-separated numeric groups of a version string.

    Anything after major.minor is ignored ("5.3.2-hotfix" -> (5, 3)).
    Returns None instead of raising for anything that does not start with
    two numeric groups, including non-strings.

    Examples:
        >>> parse_major_minor("4.27.1")
        (4, 27)
        >>> parse_major_minor("5") is None
        True
    """
    if not isinstance(value, str):
        return None
    match = _MAJOR_MINOR.match(value)
    if not match:
        return None
    return int(match.group(1)), int(match.group(2))


def format_version(version: EngineVersion | None) -> str:
    if version is None:
        return "unknown"
    return f"{version[0]}.{version[1]}"
