"""Document loading and policy configuration.

Registry, license and policy files are JSON documents. They are often edited
by hand, so the loader tolerates // line comments and trailing commas.
"""

import json
import logging
import uuid
from dataclasses import dataclass
from pathlib import Path

from .models import LicenseMode
from .paths import get_policy_path

_logging = logging.getLogger(__name__)

DEFAULT_ASSET_ROOT_URL = ""


class ConfigError(Exception):
    """Raised when a document cannot be read, parsed or validated."""
    pass


def preprocess_jsonish(text: str) -> str:
    """Turn JSON-ish text into strict JSON.

    Comments and trailing commas are replaced by spaces rather than removed,
    so line and column numbers in parse errors still match the source.
    """
    out = list(text)
    n = len(text)
    i = 0
    in_string = False

    while i < n:
        char = text[i]
        if in_string:
            if char == "\\":
                i += 2
                continue
            if char == '"':
                in_string = False
            i += 1
            continue

        if char == '"':
            in_string = True
        elif char == "/" and i + 1 < n and text[i + 1] == "/":
            while i < n and text[i] != "\n":
                out[i] = " "
                i += 1
            continue
        elif char == ",":
            j = i + 1
            while j < n:
                if text[j] in " \t\r\n":
                    j += 1
                elif text.startswith("//", j):
                    while j < n and text[j] != "\n":
                        j += 1
                else:
                    break
            if j < n and text[j] in "]}":
                out[i] = " "
        i += 1

    return "".join(out)


def _format_syntax_error(original_text: str, error: json.JSONDecodeError) -> str:
    lines = original_text.split("\n")
    parts = [f"syntax error at line {error.lineno}, col {error.colno}: {error.msg}"]
    if 1 <= error.lineno <= len(lines):
        parts.append(lines[error.lineno - 1])
        parts.append(" " * (error.colno - 1) + "^")
    return "\n".join(parts)


def load_document(path_or_text: Path | str) -> dict:
    """Load a JSON-ish document from a path or raw text.

    Raises:
        ConfigError: If the file cannot be read, has syntax errors, or is not
            a JSON object.
        TypeError: If path_or_text is neither Path nor str.
    """
    if isinstance(path_or_text, Path):
        try:
            original_text = path_or_text.read_text(encoding="utf-8")
        except FileNotFoundError:
            raise ConfigError(f"File not found: {path_or_text}")
        except PermissionError:
            raise ConfigError(f"Permission denied reading {path_or_text}")
        except UnicodeDecodeError:
            raise ConfigError(f"File is not valid UTF-8: {path_or_text}")
        except OSError as e:
            raise ConfigError(f"Error reading {path_or_text}: {e}")
        where = f"{path_or_text}: "
    elif isinstance(path_or_text, str):
        original_text = path_or_text
        where = ""
    else:
        raise TypeError(
            f"path_or_text must be Path or str, got {type(path_or_text).__name__}"
        )

    try:
        result = json.loads(preprocess_jsonish(original_text))
    except json.JSONDecodeError as e:
        raise ConfigError(where + _format_syntax_error(original_text, e)) from e

    if not isinstance(result, dict):
        raise ConfigError(f"{where}document must be a JSON object, got {type(result).__name__}")
    return result


def write_document(path: Path, data: dict) -> None:
    """Replace a document on disk in one step.

    Writes to a uniquely named sibling first, so a failed write never leaves
    a half-written document behind.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    temp_path = path.with_suffix(f".tmp.{uuid.uuid4().hex[:8]}")
    try:
        with open(temp_path, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2)
            f.write("\n")
        temp_path.replace(path)
    except OSError as e:
        if temp_path.exists():
            temp_path.unlink()
        raise ConfigError(f"Error writing {path}: {e}") from e


@dataclass
class PolicyConfig:
    """Process-wide policy, read at the start of every command."""
    license_mode: LicenseMode = LicenseMode.RESTRICTIVE
    asset_root_url: str = DEFAULT_ASSET_ROOT_URL

    def to_dict(self) -> dict:
        return {
            "assetRootUrl": self.asset_root_url,
            "licenseMode": self.license_mode.value,
        }


def validate_policy(data: dict) -> PolicyConfig:
    """Convert a raw policy document into a PolicyConfig.

    Raises:
        ConfigError: If licenseMode or assetRootUrl has the wrong shape
    """
    mode = data.get("licenseMode", LicenseMode.RESTRICTIVE.value)
    try:
        license_mode = LicenseMode(mode)
    except ValueError:
        raise ConfigError(
            f"licenseMode must be 'restrictive' or 'permissive', got {mode!r}"
        )

    url = data.get("assetRootUrl", DEFAULT_ASSET_ROOT_URL)
    if url is None:
        url = DEFAULT_ASSET_ROOT_URL
    if not isinstance(url, str):
        raise ConfigError(f"assetRootUrl must be a string, got {type(url).__name__}")

    return PolicyConfig(license_mode=license_mode, asset_root_url=url)


def load_policy(path: Path | None = None) -> PolicyConfig:
    """Load the policy document, creating it with defaults on first run."""
    path = path or get_policy_path()
    if not path.exists():
        policy = PolicyConfig()
        _logging.debug(f"Policy file {path} not found, seeding defaults")
        save_policy(policy, path)
        return policy
    return validate_policy(load_document(path))


def save_policy(policy: PolicyConfig, path: Path | None = None) -> None:
    write_document(path or get_policy_path(), policy.to_dict())


__all__ = [
    "ConfigError",
    "PolicyConfig",
    "preprocess_jsonish",
    "load_document",
    "write_document",
    "validate_policy",
    "load_policy",
    "save_policy",
]
