import json
import tempfile
import unittest
from pathlib import Path
from unittest.mock import patch

from fastapi.testclient import TestClient

from sessionlens import config
from sessionlens.main import app
from sessionlens.observability import otel


class SessionsRouterTests(unittest.TestCase):
    def setUp(self) -> None:
        tmpdir = tempfile.TemporaryDirectory()
        self.addCleanup(tmpdir.cleanup)
        self.root = Path(tmpdir.name)
        self.claude_dir = self.root / "claude"
        self.codex_dir = self.root / "codex"
        for name, value in (("CLAUDE_DIR", self.claude_dir), ("CODEX_DIR", self.codex_dir)):
            patcher = patch.object(config, name, value)
            patcher.start()
            self.addCleanup(patcher.stop)
        self.client = TestClient(app)

    def _write(self, path: Path, lines: list[dict]) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text("\n".join(json.dumps(line) for line in lines), encoding="utf-8")

    def test_list_without_sources_is_404(self) -> None:
        response = self.client.get("/api/sessions")

        self.assertEqual(response.status_code, 404)
        self.assertIn("No sessions found", response.json()["detail"])

    def test_list_returns_sorted_sessions(self) -> None:
        self._write(
            self.claude_dir / "projects" / "-p" / "old.jsonl",
            [{"type": "user", "timestamp": "2026-01-01T00:00:00Z", "message": {"content": "old"}}],
        )
        self._write(
            self.claude_dir / "projects" / "-p" / "new.jsonl",
            [{"type": "user", "timestamp": "2026-02-01T00:00:00Z", "message": {"content": "new"}}],
        )

        response = self.client.get("/api/sessions")

        self.assertEqual(response.status_code, 200)
        sessions = response.json()["sessions"]
        self.assertEqual([s["id"] for s in sessions], ["new", "old"])
        self.assertEqual(sessions[0]["display"], "new")
        self.assertEqual(sessions[0]["source"], "claude")

    def test_detail_returns_messages(self) -> None:
        self._write(
            self.claude_dir / "projects" / "-p" / "s1.jsonl",
            [
                {"type": "user", "uuid": "u1", "message": {"content": "hello"}},
                {"type": "assistant", "uuid": "a1", "message": {"content": [{"type": "text", "text": "hi"}]}},
            ],
        )

        response = self.client.get("/api/sessions/claude/s1", params={"locator": "-p"})

        self.assertEqual(response.status_code, 200)
        self.assertEqual([m["content"] for m in response.json()["messages"]], ["hello", "hi"])

    def test_detail_maps_errors_to_status_codes(self) -> None:
        cases = [
            (("claude", "s1", "../.."), 400),
            (("codex", "x", "/etc/passwd"), 400),
            (("codex", "x", "../outside.jsonl"), 400),
            (("gemini", "x", "a.jsonl"), 400),
            (("claude", "missing", "-p"), 404),
            (("codex", "x", "2026/missing.jsonl"), 404),
        ]
        for (source, session_id, locator), status in cases:
            with self.subTest(source=source, locator=locator):
                response = self.client.get(f"/api/sessions/{source}/{session_id}", params={"locator": locator})
                self.assertEqual(response.status_code, status)
                self.assertIn("detail", response.json())

    def test_unknown_source_names_the_tag(self) -> None:
        response = self.client.get("/api/sessions/gemini/x", params={"locator": "a.jsonl"})

        self.assertEqual(response.status_code, 400)
        self.assertIn("gemini", response.json()["detail"])

    def test_detail_requires_locator(self) -> None:
        response = self.client.get("/api/sessions/claude/s1")

        self.assertEqual(response.status_code, 422)

    def test_snapshot_endpoint_omits_unset_fields(self) -> None:
        snapshot = self.claude_dir / "file-history" / "s1" / "abc@v2"
        snapshot.parent.mkdir(parents=True)
        snapshot.write_text("new contents", encoding="utf-8")

        response = self.client.get("/api/sessions/s1/snapshots/abc@v2")

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json(), {"content": "new contents"})

    def test_snapshot_errors(self) -> None:
        response = self.client.get("/api/sessions/s1/snapshots/..secret")
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["detail"], "Invalid file-history request")

        response = self.client.get("/api/sessions/s1/snapshots/abc@v9")
        self.assertEqual(response.status_code, 404)

    def test_health_reports_source_roots(self) -> None:
        (self.codex_dir / "sessions").mkdir(parents=True)

        with patch.object(otel, "_enabled", False):
            payload = self.client.get("/api/health").json()

        self.assertEqual(payload["status"], "ok")
        self.assertFalse(payload["telemetry"])
        self.assertEqual(
            payload["sources"]["claude"],
            {"root": str(self.claude_dir / "projects"), "available": False},
        )
        self.assertTrue(payload["sources"]["codex"]["available"])


if __name__ == "__main__":
    unittest.main()
