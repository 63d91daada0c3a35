"""Line-level JSONL decoding shared by every session platform."""
from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Iterator

logger = logging.getLogger("sessionlens.parsers")


def decode_line(line: str | bytes) -> dict[str, Any] | None:
    """Decode one JSONL line into a record, or ``None`` if it is not a JSON object."""
    if isinstance(line, bytes):
        line = line.decode("utf-8", errors="replace")
    stripped = line.strip()
    if not stripped:
        return None
    try:
        parsed = json.loads(stripped)
    except (json.JSONDecodeError, RecursionError):
        return None
    return parsed if isinstance(parsed, dict) else None


def read_lines(path: Path, max_bytes: int | None = None) -> list[str]:
    """Read a session file as text lines, stopping at *max_bytes* when given.

    Raises ``OSError`` when the file cannot be read.
    """
    with path.open("rb") as handle:
        if max_bytes and max_bytes > 0:
            data = handle.read(max_bytes + 1)
            if len(data) > max_bytes:
                logger.warning("Session file %s exceeds %d bytes; reading truncated prefix", path, max_bytes)
                data = data[:max_bytes]
        else:
            data = handle.read()
    # Records are newline-delimited only; JSON strings may carry raw U+2028 or U+0085.
    return data.decode("utf-8", errors="replace").split("\n")


def iter_records(path: Path, max_bytes: int | None = None) -> Iterator[dict[str, Any]]:
    """Yield decoded records from a JSONL file, skipping bad lines."""
    for line in read_lines(path, max_bytes=max_bytes):
        record = decode_line(line)
        if record is not None:
            yield record


def load_records(path: Path, max_bytes: int | None = None) -> list[dict[str, Any]]:
    return list(iter_records(path, max_bytes=max_bytes))
