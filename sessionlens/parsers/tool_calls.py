"""Normalize heterogeneous tool-invocation payloads into ToolUse models."""
from __future__ import annotations

import json
from typing import Any

from sessionlens import config
from sessionlens.models import ToolUse


def truncate_for_display(text: Any, limit: int = config.PAYLOAD_MAX_CHARS) -> str:
    """Cap *text* at *limit* characters, appending a marker with the dropped count."""
    if not isinstance(text, str):
        return ""
    if len(text) <= limit:
        return text
    remaining = len(text) - limit
    return f"{text[:limit]}\n… [truncated {remaining} chars]"


def parse_structured_payload(value: Any) -> dict | list | None:
    """Return *value* as a dict/list, decoding JSON strings; ``None`` otherwise."""
    if value is None:
        return None
    if isinstance(value, (dict, list)):
        return value
    if isinstance(value, str):
        stripped = value.strip()
        if not stripped:
            return None
        try:
            parsed = json.loads(stripped)
        except (json.JSONDecodeError, RecursionError):
            return None
        if isinstance(parsed, (dict, list)):
            return parsed
    return None


def find_command_like_string(
    value: Any,
    depth: int = 0,
    keys: tuple[str, ...] | None = None,
    max_depth: int | None = None,
) -> str | None:
    """Depth-first search for the most command-like string in a payload.

    At each object level the preferred keys are checked in priority order
    before descending into the remaining values.
    """
    keys = config.COMMAND_KEY_PRIORITY if keys is None else keys
    max_depth = config.COMMAND_SEARCH_MAX_DEPTH if max_depth is None else max_depth
    if depth > max_depth or value is None:
        return None

    if isinstance(value, str):
        return value.strip() or None

    if isinstance(value, list):
        for entry in value:
            found = find_command_like_string(entry, depth + 1, keys, max_depth)
            if found:
                return found
        return None

    if not isinstance(value, dict):
        return None

    for key in keys:
        candidate = value.get(key)
        if isinstance(candidate, str) and candidate.strip():
            return candidate.strip()

    for entry in value.values():
        found = find_command_like_string(entry, depth + 1, keys, max_depth)
        if found:
            return found
    return None


def stringify_payload(payload: Any) -> str:
    if payload is None:
        return ""
    if isinstance(payload, str):
        return truncate_for_display(payload)
    try:
        return truncate_for_display(json.dumps(payload, indent=2, ensure_ascii=False))
    except (TypeError, ValueError):
        return truncate_for_display(str(payload))


def _payload_is_redundant(payload: dict | list, command: str) -> bool:
    if not command:
        return False
    if isinstance(payload, dict) and len(payload) == 1:
        only_value = next(iter(payload.values()))
        if isinstance(only_value, str) and only_value.strip() == command:
            return True
    return stringify_payload(payload) == command


def normalize_tool_use(
    name: Any,
    payload_source: Any,
    fallback_text: Any = "",
    call_id: Any = None,
) -> ToolUse:
    payload = parse_structured_payload(payload_source)
    raw_payload_text = payload_source.strip() if isinstance(payload_source, str) else ""
    raw_fallback = fallback_text.strip() if isinstance(fallback_text, str) else ""

    command = ""
    if payload is not None:
        command = find_command_like_string(payload) or ""
    if not command and raw_payload_text and parse_structured_payload(raw_payload_text) is None:
        command = raw_payload_text
    if not command:
        command = raw_fallback

    payload_text = ""
    if payload is not None:
        if not _payload_is_redundant(payload, command):
            payload_text = stringify_payload(payload)
    elif raw_payload_text and raw_payload_text != command:
        payload_text = truncate_for_display(raw_payload_text)
    elif raw_fallback and raw_fallback != command:
        payload_text = truncate_for_display(raw_fallback)

    return ToolUse(
        name=name if isinstance(name, str) and name else "tool",
        command=truncate_for_display(command, config.COMMAND_MAX_CHARS),
        payload=payload_text,
        callId=call_id if isinstance(call_id, str) and call_id else None,
    )
