import json
import tempfile
import unittest
from pathlib import Path
from unittest.mock import patch

from sessionlens import config
from sessionlens.parsers.platforms.claude_code import parser as claude_parser


def _user(uuid: str, text, timestamp: str = "2026-02-16T10:00:00Z") -> dict:
    return {
        "type": "user",
        "uuid": uuid,
        "timestamp": timestamp,
        "message": {"role": "user", "content": text},
    }


def _assistant(uuid: str, blocks: list[dict], timestamp: str = "2026-02-16T10:00:01Z") -> dict:
    return {
        "type": "assistant",
        "uuid": uuid,
        "timestamp": timestamp,
        "message": {"role": "assistant", "model": "claude-sonnet", "content": blocks},
    }


def _snapshot(message_id: str, files: dict, is_update: bool = False) -> dict:
    return {
        "type": "file-history-snapshot",
        "messageId": message_id,
        "isSnapshotUpdate": is_update,
        "snapshot": {
            "messageId": message_id,
            "timestamp": "2026-02-16T10:00:02Z",
            "trackedFileBackups": files,
        },
    }


class ClaudeCodeParserTests(unittest.TestCase):
    def setUp(self) -> None:
        tmpdir = tempfile.TemporaryDirectory()
        self.addCleanup(tmpdir.cleanup)
        self.claude_dir = Path(tmpdir.name)
        patcher = patch.object(config, "CLAUDE_DIR", self.claude_dir)
        patcher.start()
        self.addCleanup(patcher.stop)

    def _write_session(self, project_dir: str, name: str, lines: list) -> Path:
        path = self.claude_dir / "projects" / project_dir / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(
            "\n".join(line if isinstance(line, str) else json.dumps(line) for line in lines),
            encoding="utf-8",
        )
        return path

    def test_project_name_is_decoded_from_directory(self) -> None:
        self.assertEqual(claude_parser.decode_project_name("-home-dev-app"), "home/dev/app")

    def test_summary_uses_first_user_message(self) -> None:
        self._write_session(
            "-home-dev-app",
            "abc-123.jsonl",
            [
                {"type": "summary", "summary": "Earlier work"},
                _user("u1", "Add a retry to the uploader " + "x" * 200),
                _assistant("a1", [{"type": "text", "text": "On it."}]),
                _user("u2", "Thanks", timestamp="2026-02-16T11:00:00Z"),
            ],
        )

        sessions = claude_parser.scan_sessions()

        self.assertEqual(len(sessions), 1)
        session = sessions[0]
        self.assertEqual(session.source, "claude")
        self.assertEqual(session.id, "abc-123")
        self.assertEqual(session.project, "home/dev/app")
        self.assertEqual(session.locator, "-home-dev-app")
        self.assertEqual(session.timestamp, 1771236000000)
        self.assertEqual(len(session.display), 100)
        self.assertTrue(session.display.startswith("Add a retry"))
        self.assertEqual(session.messageCount, 3)

    def test_agent_sessions_and_sessions_without_prompt_are_skipped(self) -> None:
        self._write_session("-p", "agent-1234.jsonl", [_user("u1", "sidechain")])
        self._write_session("-p", "empty.jsonl", [_assistant("a1", [{"type": "text", "text": "hi"}])])
        self._write_session("-p", "notes.txt", [_user("u1", "not a session")])
        self._write_session("-p", "real.jsonl", [_user("u1", "hello")])

        sessions = claude_parser.scan_sessions()

        self.assertEqual([s.id for s in sessions], ["real"])

    def test_malformed_lines_do_not_count(self) -> None:
        self._write_session(
            "-p",
            "s.jsonl",
            [
                _user("u1", "hello"),
                '{"type": "assistant", "message": ',
                "garbage",
                _assistant("a1", [{"type": "text", "text": "hi"}]),
            ],
        )

        sessions = claude_parser.scan_sessions()
        messages = claude_parser.parse_session_file(self.claude_dir / "projects" / "-p" / "s.jsonl")

        self.assertEqual(sessions[0].messageCount, 2)
        self.assertEqual([m.role for m in messages], ["user", "assistant"])

    def test_unparsable_timestamp_falls_back_to_zero(self) -> None:
        self._write_session("-p", "s.jsonl", [_user("u1", "hello", timestamp="yesterday")])

        self.assertEqual(claude_parser.scan_sessions()[0].timestamp, 0)

    def test_summary_count_matches_detail_roles(self) -> None:
        path = self._write_session(
            "-p",
            "s.jsonl",
            [
                _user("u1", "one"),
                _assistant("a1", [{"type": "text", "text": "two"}]),
                _snapshot("u1", {}),
                _user("u2", [{"type": "text", "text": "three"}]),
                _assistant("a2", [{"type": "tool_use", "id": "t1", "name": "Bash", "input": {"command": "ls"}}]),
            ],
        )

        summary = claude_parser.scan_sessions()[0]
        messages = claude_parser.parse_session_file(path)

        self.assertEqual(summary.messageCount, len([m for m in messages if m.role in {"user", "assistant"}]))

    def test_detail_extracts_text_and_tool_uses(self) -> None:
        path = self._write_session(
            "-p",
            "s.jsonl",
            [
                _user("u1", "list files"),
                _assistant(
                    "a1",
                    [
                        {"type": "text", "text": "Listing."},
                        {"type": "tool_use", "id": "toolu_1", "name": "Bash", "input": {"command": "ls -la"}},
                        {
                            "type": "tool_use",
                            "id": "toolu_2",
                            "name": "Edit",
                            "input": {"file_path": "/repo/a.py", "old_string": "a", "new_string": "b"},
                        },
                    ],
                ),
            ],
        )

        messages = claude_parser.parse_session_file(path)

        self.assertEqual(len(messages), 2)
        user, assistant = messages
        self.assertEqual(user.content, "list files")
        self.assertEqual(user.toolUses, [])
        self.assertEqual(user.timestamp, "2026-02-16T10:00:00Z")
        self.assertEqual(assistant.content, "Listing.")
        self.assertEqual(assistant.uuid, "a1")
        self.assertEqual([t.name for t in assistant.toolUses], ["Bash", "Edit"])
        self.assertEqual(assistant.toolUses[0].command, "ls -la")
        self.assertEqual(assistant.toolUses[0].payload, "")
        self.assertEqual(assistant.toolUses[0].callId, "toolu_1")
        self.assertEqual(assistant.toolUses[1].command, "/repo/a.py")
        self.assertIn('"new_string": "b"', assistant.toolUses[1].payload)

    def test_snapshots_are_joined_by_message_id_keeping_every_version(self) -> None:
        path = self._write_session(
            "-p",
            "s.jsonl",
            [
                _snapshot("u1", {"src/app.py": {"version": 1, "backupFileName": "abc@v1", "backupTime": "t1"}}),
                _user("u1", "edit app"),
                _assistant("a1", [{"type": "text", "text": "done"}]),
                _snapshot(
                    "u1",
                    {"src/app.py": {"version": 2, "backupFileName": "abc@v2", "backupTime": "t2"}},
                    is_update=True,
                ),
                _snapshot("orphan", {"x": {"version": 1, "backupFileName": "x@v1"}}),
            ],
        )

        messages = claude_parser.parse_session_file(path)

        user = messages[0]
        self.assertEqual(len(user.fileSnapshots), 2)
        first, second = user.fileSnapshots
        self.assertFalse(first.isUpdate)
        self.assertTrue(second.isUpdate)
        self.assertEqual(first.trackedFiles["src/app.py"].backupFileName, "abc@v1")
        self.assertEqual(second.trackedFiles["src/app.py"].version, 2)
        self.assertEqual(messages[1].fileSnapshots, [])

    def test_snapshot_alone_keeps_an_otherwise_empty_message(self) -> None:
        path = self._write_session(
            "-p",
            "s.jsonl",
            [
                _user("u1", ""),
                _snapshot("u1", {"a.txt": {"version": 1, "backupFileName": None}}),
                _user("u2", "   "),
                _assistant("a1", [{"type": "thinking", "thinking": "..."}]),
            ],
        )

        messages = claude_parser.parse_session_file(path)

        self.assertEqual([m.uuid for m in messages], ["u1"])
        self.assertIsNone(messages[0].fileSnapshots[0].trackedFiles["a.txt"].backupFileName)

    def test_numeric_snapshot_times_are_kept(self) -> None:
        record = _snapshot("u1", {"a.txt": {"version": 3, "backupFileName": "a@v3", "backupTime": 1771236000000}})
        record["snapshot"]["timestamp"] = 1771236000500
        path = self._write_session("-p", "s.jsonl", [_user("u1", "hi"), record])

        snapshot = claude_parser.parse_session_file(path)[0].fileSnapshots[0]

        self.assertEqual(snapshot.timestamp, 1771236000500)
        self.assertEqual(snapshot.trackedFiles["a.txt"].backupTime, 1771236000000)

    def test_records_without_message_payload_are_ignored(self) -> None:
        path = self._write_session("-p", "s.jsonl", [{"type": "user", "uuid": "u1"}, {"type": "system"}])

        self.assertEqual(claude_parser.parse_session_file(path), [])

    def test_session_path_is_validated(self) -> None:
        path = claude_parser.resolve_session_path("abc", "-home-dev-app")
        self.assertEqual(path, (self.claude_dir / "projects" / "-home-dev-app" / "abc.jsonl").resolve())

        for session_id, locator in (("abc", "../etc"), ("abc", ".."), ("../abc", "-p"), ("abc", "a/b"), ("abc", "")):
            with self.subTest(session_id=session_id, locator=locator):
                with self.assertRaises(ValueError):
                    claude_parser.resolve_session_path(session_id, locator)


if __name__ == "__main__":
    unittest.main()
