"""Session events streamed to the caller, one at a time, in order."""

from dataclasses import dataclass
from typing import Any, ClassVar, Optional, Union

from ..registry.content import ContentBlock, content_text


@dataclass(frozen=True)
class AssistantText:
    """Natural-language output from the model."""

    text: str
    turn: int
    kind: ClassVar[str] = "assistant"

    def to_dict(self) -> dict[str, Any]:
        return {"kind": self.kind, "text": self.text, "turn": self.turn}


@dataclass(frozen=True)
class ToolInvocationRequest:
    """The model asked to call a tool."""

    tool_use_id: str
    tool_name: str
    raw_arguments: Any
    turn: int
    kind: ClassVar[str] = "toolInvocationRequest"

    def to_dict(self) -> dict[str, Any]:
        return {
            "kind": self.kind,
            "tool_use_id": self.tool_use_id,
            "tool_name": self.tool_name,
            "raw_arguments": self.raw_arguments,
            "turn": self.turn,
        }


@dataclass(frozen=True)
class ToolInvocationResult:
    """Result fed back to the model: success, tool error or denial."""

    tool_use_id: str
    tool_name: str
    is_error: bool
    content: tuple[ContentBlock, ...]
    turn: int
    denied: bool = False
    kind: ClassVar[str] = "toolInvocationResult"

    @property
    def text(self) -> str:
        return content_text(list(self.content))

    def to_dict(self) -> dict[str, Any]:
        return {
            "kind": self.kind,
            "tool_use_id": self.tool_use_id,
            "tool_name": self.tool_name,
            "is_error": self.is_error,
            "denied": self.denied,
            "content": [block.to_dict() for block in self.content],
            "turn": self.turn,
        }


@dataclass(frozen=True)
class TerminalSummary:
    """
    Final event of a session. Nothing follows it.

    subtype is "success" (final answer), "error_max_turns" (turn budget
    exhausted) or "prompt_denied" (a prompt-submit hook rejected the prompt).
    """

    session_id: str
    total_turns: int
    total_cost: float
    subtype: str
    is_error: bool
    duration_ms: float
    result: Optional[str] = None
    kind: ClassVar[str] = "terminal"

    def to_dict(self) -> dict[str, Any]:
        return {
            "kind": self.kind,
            "session_id": self.session_id,
            "total_turns": self.total_turns,
            "total_cost": self.total_cost,
            "subtype": self.subtype,
            "is_error": self.is_error,
            "duration_ms": self.duration_ms,
            "result": self.result,
        }


SessionEvent = Union[AssistantText, ToolInvocationRequest, ToolInvocationResult, TerminalSummary]
