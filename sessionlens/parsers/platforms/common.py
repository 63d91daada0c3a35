"""Helpers shared by the platform session parsers."""
from __future__ import annotations

import logging
import time
from pathlib import Path
from typing import Any, Callable, Iterable, Optional

from sessionlens.models import Message, SessionSummary
from sessionlens.observability import record_ingestion, record_parser_failure, start_span

logger = logging.getLogger("sessionlens.parsers")


def coerce_timestamp(value: Any) -> str | int | None:
    """Keep string/int timestamps as-is; collapse anything else to ``None``."""
    if isinstance(value, bool):
        return None
    if isinstance(value, str):
        return value or None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value)
    return None


def optional_str(value: Any) -> str | None:
    return value if isinstance(value, str) and value else None


def drop_empty_messages(messages: Iterable[Message]) -> list[Message]:
    return [message for message in messages if message.has_visible_content()]


def scan_files(
    source: str,
    paths: Iterable[Any],
    summarize: Callable[..., Optional[SessionSummary]],
) -> list[SessionSummary]:
    """Summarize each discovered file, logging and skipping files that fail to read.

    *paths* yields argument tuples passed straight to *summarize*; the first
    element is always the session file path.
    """
    started = time.monotonic()
    sessions: list[SessionSummary] = []
    failures = 0
    with start_span("sessions.scan", {"source": source}):
        for args in paths:
            path: Path = args[0]
            try:
                summary = summarize(*args)
            except Exception:  # noqa: BLE001
                failures += 1
                logger.warning("Error reading %s session file: %s", source, path, exc_info=True)
                record_parser_failure("summary", source=source)
                continue
            if summary is not None:
                sessions.append(summary)

    record_ingestion(
        "session_list",
        "partial" if failures else "success",
        (time.monotonic() - started) * 1000,
        source=source,
    )
    return sessions
