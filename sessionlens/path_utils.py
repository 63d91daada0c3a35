"""Path-safety helpers for resolving caller-supplied locators under a fixed root."""
from __future__ import annotations

from pathlib import Path, PurePosixPath

_SEPARATORS = ("/", "\\")


def normalize_rel_path(raw: str | None) -> str:
    """Normalize a relative locator to POSIX form, rejecting traversal and absolute paths."""
    if not isinstance(raw, str):
        raise ValueError("Locator must be a string")
    value = raw.replace("\\", "/").strip()
    if not value:
        raise ValueError("Locator cannot be empty")
    if value.startswith("/") or PurePosixPath(value).is_absolute() or (len(value) > 1 and value[1] == ":"):
        raise ValueError("Absolute locators are not allowed")

    parts: list[str] = []
    for token in value.split("/"):
        if not token or token == ".":
            continue
        if token == "..":
            raise ValueError("Path traversal is not allowed")
        parts.append(token)
    if not parts:
        raise ValueError("Locator cannot be empty")
    return "/".join(parts)


def validate_path_segment(value: str | None, label: str = "path segment") -> str:
    """Accept a single file or directory name: no separators, no ``..``."""
    if not isinstance(value, str) or not value.strip():
        raise ValueError(f"Invalid {label}")
    if any(sep in value for sep in _SEPARATORS) or ".." in value or "\x00" in value:
        raise ValueError(f"Invalid {label}")
    return value


def is_under(path: Path, root: Path) -> bool:
    try:
        path.resolve(strict=False).relative_to(root.resolve(strict=False))
        return True
    except ValueError:
        return False


def resolve_under(root: Path, *parts: str) -> Path:
    """Join *parts* onto *root* and ensure the result stays strictly inside it."""
    base = root.resolve(strict=False)
    candidate = base.joinpath(*parts).resolve(strict=False)
    if candidate == base or not is_under(candidate, base):
        raise ValueError("Requested path escapes the source root")
    return candidate
