"""Codex CLI sessions: ``<codex home>/sessions/**/*.jsonl``.

Two record layouts are on disk. Older files write each item directly
(``{"type": "message", ...}``); newer ones wrap it as
``{"type": "response_item", "timestamp": ..., "payload": {...}}`` and
start with a ``session_meta`` header.
"""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Iterator, NamedTuple

from sessionlens import config
from sessionlens.date_utils import to_epoch_millis
from sessionlens.models import Message, SessionSummary
from sessionlens.parsers.content import extract_block_text, extract_cwd, is_environment_context
from sessionlens.parsers.jsonl import load_records
from sessionlens.parsers.platforms.common import (
    coerce_timestamp,
    drop_empty_messages,
    optional_str,
    scan_files,
)
from sessionlens.parsers.tool_calls import normalize_tool_use
from sessionlens.path_utils import normalize_rel_path, resolve_under

logger = logging.getLogger("sessionlens.parsers")

SOURCE = "codex"
SESSION_SUFFIX = ".jsonl"
DEFAULT_PROJECT = "Codex"
_WRAPPER_TYPE = "response_item"
_HEADER_TYPE = "session_meta"
_TOOL_CALL_TYPES = {"function_call", "custom_tool_call"}
_CONVERSATION_ROLES = {"user", "assistant"}
_PAYLOAD_KEYS = ("arguments", "input", "parameters", "args", "kwargs")


class Unwrapped(NamedTuple):
    timestamp: Any
    record: dict[str, Any] | None


def source_root(codex_dir: Path | None = None) -> Path:
    return (codex_dir or config.CODEX_DIR) / "sessions"


def unwrap_record(raw: Any) -> Unwrapped:
    """Return the semantic payload of a record plus the wrapper's timestamp."""
    if not isinstance(raw, dict):
        return Unwrapped(None, None)
    timestamp = raw.get("timestamp") or None
    payload = raw.get("payload")
    if raw.get("type") == _WRAPPER_TYPE and isinstance(payload, dict):
        return Unwrapped(timestamp, payload)
    return Unwrapped(timestamp, raw)


def _is_message(record: dict[str, Any], role: str | None = None) -> bool:
    if record.get("type") != "message":
        return False
    if role is None:
        return record.get("role") in _CONVERSATION_ROLES
    return record.get("role") == role


def _header_payload(header: dict[str, Any] | None) -> dict[str, Any]:
    if header and header.get("type") == _HEADER_TYPE and isinstance(header.get("payload"), dict):
        return header["payload"]
    return {}


def discover_session_files(root: Path) -> Iterator[tuple[Path, str]]:
    """Yield ``(session_path, locator)`` for every ``.jsonl`` file below *root*."""
    if not root.is_dir():
        return
    try:
        paths = sorted(root.rglob(f"*{SESSION_SUFFIX}"))
    except OSError:
        logger.warning("Unable to walk Codex sessions directory: %s", root, exc_info=True)
        return
    for path in paths:
        if not path.is_file():
            continue
        try:
            locator = path.relative_to(root).as_posix()
        except ValueError:
            continue
        if not locator or locator.startswith(".."):
            continue
        yield path, locator


def _session_identity(path: Path, header: dict[str, Any] | None) -> tuple[str, int]:
    meta = _header_payload(header)
    header = header or {}

    session_id = optional_str(meta.get("id")) or optional_str(header.get("id")) or path.stem
    raw_ts = optional_str(meta.get("timestamp")) or optional_str(header.get("timestamp"))
    return session_id, to_epoch_millis(raw_ts)


def _git_project(header: dict[str, Any] | None) -> str | None:
    meta = _header_payload(header)
    for container in (meta, header or {}):
        git = container.get("git")
        if isinstance(git, dict):
            value = optional_str(git.get("repository_url")) or optional_str(git.get("branch"))
            if value:
                return value
    return None


def summarize_session_file(path: Path, locator: str) -> SessionSummary | None:
    records = load_records(path, max_bytes=config.SESSION_MAX_BYTES)
    if not records:
        return None

    header = records[0]
    session_id, timestamp = _session_identity(path, header)

    cwd: str | None = None
    display = ""
    fallback_display = ""
    message_count = 0

    for raw in records:
        if not cwd and raw.get("type") == _HEADER_TYPE:
            payload = raw.get("payload")
            if isinstance(payload, dict):
                cwd = optional_str(payload.get("cwd"))

        wrapper_ts, record = unwrap_record(raw)
        if record is None or not _is_message(record):
            continue
        message_count += 1

        if record.get("role") != "user" or not record.get("content"):
            continue
        text = extract_block_text(record.get("content"))
        if not cwd:
            cwd = extract_cwd(text)
        if not fallback_display and text.strip():
            fallback_display = text.strip()
        if not display and text.strip() and not is_environment_context(text):
            display = text.strip()
        if not timestamp:
            for candidate in (wrapper_ts, record.get("created_at"), record.get("timestamp")):
                if isinstance(candidate, str):
                    timestamp = to_epoch_millis(candidate)
                    break

    return SessionSummary(
        source=SOURCE,
        id=session_id,
        timestamp=timestamp or 0,
        display=(display or fallback_display)[: config.PREVIEW_CHARS],
        project=cwd or _git_project(header) or DEFAULT_PROJECT,
        locator=locator,
        messageCount=message_count,
    )


def scan_sessions(codex_dir: Path | None = None) -> list[SessionSummary]:
    root = source_root(codex_dir)
    return scan_files(SOURCE, discover_session_files(root), summarize_session_file)


def _default_timestamp(records: list[dict[str, Any]]) -> Any:
    # Many records carry no timestamp of their own; fall back to the first one seen.
    for record in records:
        if record.get("timestamp"):
            return record["timestamp"]
        payload = _header_payload(record)
        if isinstance(payload.get("timestamp"), str):
            return payload["timestamp"]
    return None


def _first_present(record: dict[str, Any], keys: tuple[str, ...]) -> Any:
    for key in keys:
        value = record.get(key)
        if value is not None:
            return value
    return None


def build_messages(records: list[dict[str, Any]], bootstrap_entries: int | None = None) -> list[Message]:
    skip = config.CODEX_BOOTSTRAP_ENTRIES if bootstrap_entries is None else bootstrap_entries
    default_ts = _default_timestamp(records)
    messages: list[Message] = []
    last_assistant: Message | None = None

    for raw in records:
        wrapper_ts, record = unwrap_record(raw)
        if record is None:
            continue
        timestamp = coerce_timestamp(
            record.get("timestamp") or record.get("created_at") or wrapper_ts or default_ts
        )

        if _is_message(record):
            message = Message(
                role=record["role"],
                content=extract_block_text(record.get("content")),
                timestamp=timestamp,
                uuid=optional_str(record.get("id")),
            )
            messages.append(message)
            if message.role == "assistant":
                last_assistant = message
            continue

        if record.get("type") in _TOOL_CALL_TYPES and isinstance(record.get("name"), str):
            call_id = optional_str(record.get("call_id")) or optional_str(record.get("id"))
            if last_assistant is None:
                last_assistant = Message(role="assistant", content="", timestamp=timestamp, uuid=call_id)
                messages.append(last_assistant)
            arguments = record.get("arguments")
            fallback = record.get("command")
            if fallback is None:
                fallback = arguments if isinstance(arguments, str) else ""
            last_assistant.toolUses.append(
                normalize_tool_use(record["name"], _first_present(record, _PAYLOAD_KEYS), fallback, call_id)
            )

    return drop_empty_messages(messages)[max(0, skip):]


def resolve_session_path(locator: str, codex_dir: Path | None = None) -> Path:
    """Validate *locator* and return the session file path under the sessions root."""
    rel = normalize_rel_path(locator)
    return resolve_under(source_root(codex_dir), *rel.split("/"))


def parse_session_file(path: Path) -> list[Message]:
    return build_messages(load_records(path, max_bytes=config.SESSION_MAX_BYTES))
