"""Cross-source session list: run every platform scanner, merge, and sort."""
from __future__ import annotations

import logging
from typing import Iterable

from sessionlens.models import SessionSummary
from sessionlens.parsers.platforms import registry

logger = logging.getLogger("sessionlens.directory")


def sort_sessions(sessions: Iterable[SessionSummary]) -> list[SessionSummary]:
    """Newest first; equal timestamps ordered by id ascending."""
    return sorted(sessions, key=lambda session: (-(session.timestamp or 0), session.id))


def collect_sessions() -> list[SessionSummary]:
    """Scan every available source.

    A missing source root contributes nothing. Raises ``FileNotFoundError``
    only when no source root exists at all.
    """
    roots = registry.source_roots()
    available = [source for source, root in roots.items() if root.is_dir()]
    if not available:
        looked_in = " and ".join(str(root) for root in roots.values())
        raise FileNotFoundError(f"No sessions found. Looked in {looked_in}")

    sessions: list[SessionSummary] = []
    for source in available:
        try:
            sessions.extend(registry.scan_sessions(source))
        except Exception:  # noqa: BLE001
            logger.exception("Error reading %s sessions", source)
    return sort_sessions(sessions)
