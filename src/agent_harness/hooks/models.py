"""Hook system models for the session tool-call lifecycle."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional

from ..registry.content import ContentBlock


class HookEvent(str, Enum):
    """Hook execution points in a session."""

    PRE_TOOL_USE = "PreToolUse"
    POST_TOOL_USE = "PostToolUse"
    USER_PROMPT_SUBMIT = "UserPromptSubmit"

    @classmethod
    def parse(cls, value: "str | HookEvent") -> "HookEvent":
        """Parse an event from its wire value or member name."""
        if isinstance(value, HookEvent):
            return value
        for event in cls:
            if value in (event.value, event.name, event.name.lower()):
                return event
        raise ValueError(f"Unknown hook event {value!r}")


class Verdict(str, Enum):
    """Outcome of a single hook or of the folded pipeline."""

    APPROVE = "approve"
    DENY = "deny"
    PASS_THROUGH = "pass_through"


@dataclass(frozen=True)
class HookDecision:
    """
    Decision returned by a pre-tool-use or prompt-submit hook.

    Hooks return one of HookDecision.approve(), HookDecision.deny(reason) or
    HookDecision.pass_through() (returning None means pass-through too).
    """

    verdict: Verdict
    reason: Optional[str] = None
    hook_name: Optional[str] = None

    @classmethod
    def approve(cls, reason: Optional[str] = None) -> "HookDecision":
        return cls(Verdict.APPROVE, reason)

    @classmethod
    def deny(cls, reason: Optional[str] = None) -> "HookDecision":
        return cls(Verdict.DENY, reason)

    @classmethod
    def pass_through(cls) -> "HookDecision":
        return cls(Verdict.PASS_THROUGH)

    @property
    def denied(self) -> bool:
        return self.verdict == Verdict.DENY

    @property
    def approved(self) -> bool:
        return self.verdict == Verdict.APPROVE


@dataclass(frozen=True)
class PreToolUseInput:
    """Payload handed to pre-tool-use hooks."""

    session_id: str
    tool_use_id: str
    tool_name: str
    tool_input: dict[str, Any]
    hook_event: HookEvent = HookEvent.PRE_TOOL_USE


@dataclass(frozen=True)
class PostToolUseInput:
    """Payload handed to post-tool-use hooks. The result is already committed."""

    session_id: str
    tool_use_id: str
    tool_name: str
    tool_input: dict[str, Any]
    content: tuple[ContentBlock, ...]
    is_error: bool
    hook_event: HookEvent = HookEvent.POST_TOOL_USE


@dataclass(frozen=True)
class PromptSubmitInput:
    """Payload handed to prompt-submit hooks."""

    session_id: str
    prompt: str
    hook_event: HookEvent = HookEvent.USER_PROMPT_SUBMIT


@dataclass
class ToolReceipt:
    """
    Trace receipt for a tool call.

    Provides minimal audit trail of hook decisions and execution timing.
    """

    tool_name: str
    tool_use_id: str
    session_id: str
    timestamp_start: datetime
    timestamp_end: Optional[datetime] = None
    success: bool = False
    denied: bool = False
    error: Optional[str] = None
    args_summary: dict[str, Any] = field(default_factory=dict)
    result_summary: Optional[str] = None
    duration_ms: Optional[float] = None
    hooks_applied: list[str] = field(default_factory=list)

    def finalize(
        self,
        success: bool,
        error: Optional[str] = None,
        result_summary: Optional[str] = None,
    ) -> "ToolReceipt":
        """Finalize receipt with execution results."""
        self.timestamp_end = datetime.now(timezone.utc)
        self.success = success
        self.error = error
        self.result_summary = result_summary
        delta = self.timestamp_end - self.timestamp_start
        self.duration_ms = delta.total_seconds() * 1000
        return self

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "tool_name": self.tool_name,
            "tool_use_id": self.tool_use_id,
            "session_id": self.session_id,
            "timestamp_start": self.timestamp_start.isoformat(),
            "timestamp_end": self.timestamp_end.isoformat() if self.timestamp_end else None,
            "success": self.success,
            "denied": self.denied,
            "error": self.error,
            "args_summary": self.args_summary,
            "result_summary": self.result_summary,
            "duration_ms": self.duration_ms,
            "hooks_applied": self.hooks_applied,
        }
