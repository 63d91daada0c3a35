"""Pydantic models matching the display layer's session contract."""
from __future__ import annotations

from typing import Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

SessionSource = Literal["claude", "codex"]


# ── Session list ────────────────────────────────────────────────────

class SessionSummary(BaseModel):
    source: SessionSource
    id: str
    timestamp: int = 0  # epoch millis, 0 when unknown
    display: str = ""
    project: str = ""
    locator: str = ""
    messageCount: int = 0


class SessionListResponse(BaseModel):
    sessions: list[SessionSummary] = Field(default_factory=list)


# ── Session detail ──────────────────────────────────────────────────

class ToolUse(BaseModel):
    name: str = "tool"
    command: str = ""
    payload: str = ""
    callId: Optional[str] = None


class TrackedFileBackup(BaseModel):
    model_config = ConfigDict(extra="allow")

    version: int = 0
    backupFileName: Optional[str] = None
    backupTime: Union[str, int, None] = None


class SnapshotRef(BaseModel):
    messageId: str
    timestamp: Union[str, int, None] = None
    isUpdate: bool = False
    trackedFiles: dict[str, TrackedFileBackup] = Field(default_factory=dict)


class Message(BaseModel):
    role: Literal["user", "assistant"]
    content: str = ""
    timestamp: Union[str, int, None] = None
    uuid: Optional[str] = None
    toolUses: list[ToolUse] = Field(default_factory=list)
    fileSnapshots: list[SnapshotRef] = Field(default_factory=list)

    def has_visible_content(self) -> bool:
        return bool(self.content.strip()) or bool(self.toolUses) or bool(self.fileSnapshots)


class SessionDetailResponse(BaseModel):
    messages: list[Message] = Field(default_factory=list)


# ── Snapshot files ──────────────────────────────────────────────────

class SnapshotFileResponse(BaseModel):
    content: str = ""
    truncated: Optional[bool] = None
    originalBytes: Optional[int] = None


class ErrorResponse(BaseModel):
    error: str
