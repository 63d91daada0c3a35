"""Session parser registry for platform-specific implementations."""
from __future__ import annotations

from pathlib import Path
from types import ModuleType

from sessionlens.models import Message, SessionSummary
from sessionlens.parsers.platforms.claude_code import parser as claude_code_parser
from sessionlens.parsers.platforms.codex import parser as codex_parser

# Source tag -> parser module. Every module exposes ``source_root``,
# ``scan_sessions`` and ``parse_session_file``.
PLATFORMS: dict[str, ModuleType] = {
    claude_code_parser.SOURCE: claude_code_parser,
    codex_parser.SOURCE: codex_parser,
}


def get_platform(source: str) -> ModuleType:
    platform = PLATFORMS.get(source) if isinstance(source, str) else None
    if platform is None:
        raise ValueError(f"Unknown session source: {source!r}")
    return platform


def source_roots() -> dict[str, Path]:
    """Directory each platform scans, keyed by source tag."""
    return {source: platform.source_root() for source, platform in PLATFORMS.items()}


def scan_sessions(source: str) -> list[SessionSummary]:
    return get_platform(source).scan_sessions()


def resolve_session_path(source: str, session_id: str, locator: str) -> Path:
    """Validate the caller's locator for *source* and return the session file path.

    Raises ``ValueError`` before any filesystem access when the locator is unsafe.
    """
    if source == claude_code_parser.SOURCE:
        return claude_code_parser.resolve_session_path(session_id, locator)
    return get_platform(source).resolve_session_path(locator)


def parse_session_file(source: str, path: Path) -> list[Message]:
    return get_platform(source).parse_session_file(path)
