"""SessionLens Configuration."""
import os
import sys
from pathlib import Path


def _env_bool(name: str, default: bool = False) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _env_int(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None:
        return default
    try:
        return int(value)
    except ValueError:
        return default


def _env_list(name: str, default: tuple[str, ...]) -> tuple[str, ...]:
    value = os.getenv(name)
    if value is None:
        return default
    items = tuple(token.strip() for token in value.split(",") if token.strip())
    return items or default


def _default_claude_dir() -> Path:
    if sys.platform == "win32":
        appdata = os.getenv("APPDATA")
        base = Path(appdata) if appdata else Path.home() / "AppData" / "Roaming"
        return base / "claude"
    return Path.home() / ".claude"


def _default_codex_dir() -> Path:
    codex_home = os.getenv("CODEX_HOME")
    if codex_home:
        return Path(codex_home).expanduser()
    return Path.home() / ".codex"


# Source roots
CLAUDE_DIR = Path(os.getenv("SESSIONLENS_CLAUDE_DIR") or _default_claude_dir()).expanduser()
CODEX_DIR = Path(os.getenv("SESSIONLENS_CODEX_DIR") or _default_codex_dir()).expanduser()

# Read ceilings
SNAPSHOT_MAX_BYTES = _env_int("SESSIONLENS_SNAPSHOT_MAX_BYTES", 2 * 1024 * 1024)
SESSION_MAX_BYTES = _env_int("SESSIONLENS_SESSION_MAX_BYTES", 64 * 1024 * 1024)

# Display bounds
PREVIEW_CHARS = 100
COMMAND_MAX_CHARS = 4000
PAYLOAD_MAX_CHARS = 12000

# Keys searched, in order, when inferring a readable command from a tool payload.
COMMAND_KEY_PRIORITY = _env_list(
    "SESSIONLENS_COMMAND_KEYS",
    ("cmd", "command", "shell_command", "commandLine", "script", "patch", "query"),
)
COMMAND_SEARCH_MAX_DEPTH = 4

# Leading Codex entries hidden from the detail view (bootstrap/system chatter).
CODEX_BOOTSTRAP_ENTRIES = _env_int("SESSIONLENS_CODEX_BOOTSTRAP_ENTRIES", 2)

# Observability
OTEL_ENABLED = _env_bool("SESSIONLENS_OTEL_ENABLED", False)
OTEL_ENDPOINT = os.getenv("SESSIONLENS_OTEL_ENDPOINT", "http://localhost:4318")
OTEL_SERVICE_NAME = os.getenv("SESSIONLENS_OTEL_SERVICE_NAME", "sessionlens")
PROM_PORT = _env_int("SESSIONLENS_PROM_PORT", 0)

# Server settings
HOST = os.getenv("SESSIONLENS_HOST", "127.0.0.1")
PORT = _env_int("SESSIONLENS_PORT", 8000)

# CORS
FRONTEND_ORIGIN = os.getenv("SESSIONLENS_FRONTEND_ORIGIN", "http://localhost:3000")
