"""Display-text extraction from the content shapes each platform writes."""
from __future__ import annotations

import re
from typing import Any

_ENVIRONMENT_CONTEXT_TAG = "<environment_context>"
_CWD_PATTERN = re.compile(r"<cwd>([^<]+)</cwd>")

# Block keys that carry displayable text in Codex content arrays, in lookup order.
_CODEX_TEXT_KEYS = ("text", "content")

_BLOCK_SEPARATOR = "\n\n"


def extract_text_content(message: Any) -> str:
    """Join the ``text`` blocks of a Claude message, or return its plain string content."""
    if not isinstance(message, dict):
        return ""
    content = message.get("content")
    if isinstance(content, str):
        return content
    if isinstance(content, list):
        return _BLOCK_SEPARATOR.join(
            block.get("text") or ""
            for block in content
            if isinstance(block, dict) and block.get("type") == "text"
        )
    return ""


def extract_block_text(content: Any) -> str:
    """Join the text-bearing blocks of a Codex ``content`` value."""
    if not content:
        return ""
    if isinstance(content, str):
        return content
    if not isinstance(content, list):
        return ""

    chunks: list[str] = []
    for block in content:
        if not isinstance(block, dict):
            continue
        for key in _CODEX_TEXT_KEYS:
            value = block.get(key)
            if isinstance(value, str):
                if value:
                    chunks.append(value)
                break
    return _BLOCK_SEPARATOR.join(chunks)


def is_environment_context(text: Any) -> bool:
    if not text or not isinstance(text, str):
        return False
    stripped = text.strip()
    return stripped.startswith(_ENVIRONMENT_CONTEXT_TAG) or _ENVIRONMENT_CONTEXT_TAG in stripped


def extract_cwd(text: Any) -> str | None:
    """Pull the working directory out of an environment-context preamble."""
    if not text or not isinstance(text, str):
        return None
    match = _CWD_PATTERN.search(text)
    return match.group(1) if match else None
