"""Structured JSON audit trail for session tool calls."""

import json
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Optional

MAX_CONTENT_LENGTH = 1000  # Truncate large content to prevent log bloat
DEFAULT_ROTATION_BYTES = 10 * 1024 * 1024


class AuditEvent(str, Enum):
    """Audit event types."""

    SESSION_STARTED = "session_started"
    TOOL_INVOKED = "tool_invoked"
    TOOL_DENIED = "tool_denied"
    APPROVAL_GRANTED = "approval_granted"
    APPROVAL_DENIED = "approval_denied"
    PROMPT_DENIED = "prompt_denied"
    SESSION_COMPLETED = "session_completed"


class AuditLogger:
    """
    Structured JSON audit logger.

    Features:
    - JSON Lines format (one JSON object per line)
    - ISO 8601 UTC timestamps
    - Automatic content truncation
    - Append-only file mode
    - Size-based rotation with timestamped backups
    """

    def __init__(self, log_path: str, rotation_bytes: int = DEFAULT_ROTATION_BYTES):
        """
        Initialize audit logger.

        Args:
            log_path: Path to the JSON Lines audit file
            rotation_bytes: Rotate the file once it grows past this size
        """
        self.log_path = Path(log_path)
        self.rotation_bytes = rotation_bytes
        self.log_path.parent.mkdir(parents=True, exist_ok=True)

    def _rotate_if_needed(self) -> None:
        """Rotate the audit log if it exceeds the configured size."""
        if not self.log_path.exists():
            return
        if self.log_path.stat().st_size < self.rotation_bytes:
            return

        timestamp = datetime.now(timezone.utc).strftime("%Y%m%d%H%M%S")
        rotated_path = self.log_path.with_name(f"{self.log_path.name}.{timestamp}")
        counter = 1
        while rotated_path.exists():
            rotated_path = self.log_path.with_name(
                f"{self.log_path.name}.{timestamp}.{counter}"
            )
            counter += 1
        self.log_path.replace(rotated_path)

    @staticmethod
    def _truncate_content(value: Any, max_length: int = MAX_CONTENT_LENGTH) -> Any:
        """Truncate large string values, recursing into dicts and lists."""
        if isinstance(value, str) and len(value) > max_length:
            return value[:max_length] + f"... [truncated, {len(value)} total chars]"
        elif isinstance(value, dict):
            return {k: AuditLogger._truncate_content(v, max_length) for k, v in value.items()}
        elif isinstance(value, (list, tuple)):
            return [AuditLogger._truncate_content(item, max_length) for item in value]
        return value

    def log(self, event: AuditEvent, session_id: Optional[str] = None, **kwargs: Any) -> None:
        """
        Write structured audit log entry in JSON Lines format.

        Args:
            event: Audit event type
            session_id: Session identifier for correlation
            **kwargs: Additional fields to include in the audit record
        """
        audit_record = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "event": event.value,
            "session_id": session_id,
            **self._truncate_content(kwargs),
        }
        json_line = json.dumps(audit_record, ensure_ascii=False, default=str)

        self._rotate_if_needed()
        with open(self.log_path, "a", encoding="utf-8") as f:
            f.write(json_line + "\n")

    def log_tool_call(
        self,
        session_id: str,
        tool_name: str,
        arguments: Dict[str, Any],
        is_error: bool,
        mode: str,
        receipt: Optional[Dict[str, Any]] = None,
    ) -> None:
        """Log a completed tool invocation."""
        self.log(
            AuditEvent.TOOL_INVOKED,
            session_id=session_id,
            tool_name=tool_name,
            arguments=arguments,
            is_error=is_error,
            mode=mode,
            receipt=receipt,
        )

    def log_denial(
        self,
        session_id: str,
        tool_name: str,
        arguments: Dict[str, Any],
        reason: str,
        mode: str,
    ) -> None:
        """Log a tool call denied by hooks, policy or approval provider."""
        self.log(
            AuditEvent.TOOL_DENIED,
            session_id=session_id,
            tool_name=tool_name,
            arguments=arguments,
            reason=reason,
            mode=mode,
        )

    def read_entries(self) -> list[Dict[str, Any]]:
        """Read all entries of the current log file."""
        if not self.log_path.exists():
            return []
        with open(self.log_path, encoding="utf-8") as f:
            return [json.loads(line) for line in f if line.strip()]
