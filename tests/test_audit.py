"""Tests for the JSON Lines audit logger."""

import json
import tempfile
from pathlib import Path

from agent_harness.audit import MAX_CONTENT_LENGTH, AuditEvent, AuditLogger


def test_log_writes_json_lines(audit_logger):
    """Each entry is one JSON object with timestamp, event and session id."""
    audit_logger.log(AuditEvent.SESSION_STARTED, session_id="s1", model="m")
    audit_logger.log_tool_call(
        session_id="s1",
        tool_name="add",
        arguments={"a": 1, "b": 2},
        is_error=False,
        mode="default",
    )

    lines = audit_logger.log_path.read_text(encoding="utf-8").splitlines()
    assert len(lines) == 2
    first = json.loads(lines[0])
    assert first["event"] == "session_started"
    assert first["session_id"] == "s1"
    assert first["model"] == "m"
    assert "timestamp" in first
    assert json.loads(lines[1])["arguments"] == {"a": 1, "b": 2}


def test_log_denial(audit_logger):
    """Denials record the reason and mode."""
    audit_logger.log_denial(
        session_id="s1", tool_name="rm", arguments={}, reason="deny list", mode="plan"
    )
    (entry,) = audit_logger.read_entries()
    assert entry["event"] == "tool_denied"
    assert entry["reason"] == "deny list"
    assert entry["mode"] == "plan"


def test_large_values_truncated(audit_logger):
    """Long strings are truncated, including nested ones."""
    big = "x" * (MAX_CONTENT_LENGTH + 500)
    audit_logger.log(AuditEvent.TOOL_INVOKED, session_id="s1", arguments={"blob": [big]})
    (entry,) = audit_logger.read_entries()
    stored = entry["arguments"]["blob"][0]
    assert len(stored) < len(big)
    assert "truncated" in stored


def test_rotation():
    """The file rotates once it exceeds the configured size."""
    with tempfile.TemporaryDirectory() as tmpdir:
        logger = AuditLogger(str(Path(tmpdir) / "audit.jsonl"), rotation_bytes=200)
        for i in range(10):
            logger.log(AuditEvent.TOOL_INVOKED, session_id="s1", index=i, padding="p" * 50)

        files = sorted(p.name for p in Path(tmpdir).iterdir())
        assert "audit.jsonl" in files
        assert len(files) > 1
        assert len(logger.read_entries()) < 10


def test_read_entries_missing_file():
    """Reading a log that was never written returns no entries."""
    with tempfile.TemporaryDirectory() as tmpdir:
        assert AuditLogger(str(Path(tmpdir) / "nested" / "audit.jsonl")).read_entries() == []
