"""Model backend interface and the conversation it reads.

The language model is an external collaborator: an opaque function from
conversation state to either a final answer or a tool call. Cost is an
opaque number reported by the backend with each decision.
"""

from abc import ABC, abstractmethod
from collections import deque
from dataclasses import dataclass, field
from typing import Any, Callable, Iterable, Optional, Union

from ..registry.content import ContentBlock, content_text


# ============================================================================
# CONVERSATION
# ============================================================================


@dataclass(frozen=True)
class UserMessage:
    text: str
    role: str = "user"


@dataclass(frozen=True)
class AssistantMessage:
    text: str
    role: str = "assistant"


@dataclass(frozen=True)
class ToolUse:
    tool_use_id: str
    tool_name: str
    arguments: Any
    role: str = "assistant"


@dataclass(frozen=True)
class ToolResultMessage:
    tool_use_id: str
    tool_name: str
    content: tuple[ContentBlock, ...]
    is_error: bool
    denied: bool = False
    role: str = "user"

    @property
    def text(self) -> str:
        return content_text(list(self.content))


Message = Union[UserMessage, AssistantMessage, ToolUse, ToolResultMessage]


# ============================================================================
# DECISIONS
# ============================================================================


@dataclass(frozen=True)
class FinalAnswer:
    """The model answers in natural language and requests no further tools."""

    text: str
    cost_usd: float = 0.0


@dataclass(frozen=True)
class ToolCall:
    """The model asks to call a tool, optionally with accompanying text."""

    tool_name: str
    arguments: dict[str, Any] = field(default_factory=dict)
    text: Optional[str] = None
    cost_usd: float = 0.0
    tool_use_id: Optional[str] = None


ModelDecision = Union[FinalAnswer, ToolCall]


@dataclass(frozen=True)
class ModelRequest:
    """Everything the backend sees when deciding the next step."""

    session_id: str
    model: str
    system_prompt: Optional[str]
    messages: tuple[Message, ...]
    tools: tuple[dict[str, Any], ...]
    turn: int

    def last_tool_result(self) -> Optional[ToolResultMessage]:
        for message in reversed(self.messages):
            if isinstance(message, ToolResultMessage):
                return message
        return None


class ModelBackend(ABC):
    """Abstract base class for model backends."""

    @abstractmethod
    async def decide(self, request: ModelRequest) -> ModelDecision:
        """
        Decide the next step of the conversation.

        Raises:
            Exception: Any failure is reported to the caller as TransportFailure
        """


class ScriptedModel(ModelBackend):
    """
    Backend replaying a fixed list of decisions.

    Entries are decisions or callables taking the ModelRequest and returning
    a decision. Once the script is exhausted the backend answers final_text.
    """

    def __init__(
        self,
        script: Iterable[Union[ModelDecision, Callable[[ModelRequest], ModelDecision]]] = (),
        final_text: str = "Done.",
    ):
        self._script = deque(script)
        self.final_text = final_text
        self.requests: list[ModelRequest] = []

    @classmethod
    def from_dicts(cls, entries: Iterable[dict[str, Any]], **kwargs: Any) -> "ScriptedModel":
        """
        Build a script from plain dicts, as found in YAML session files.

        ``{"answer": "...", "cost": 0.01}`` is a final answer;
        ``{"tool": "name", "arguments": {...}, "text": "...", "cost": 0.01}``
        is a tool call.
        """
        decisions: list[ModelDecision] = []
        for entry in entries:
            cost = float(entry.get("cost", 0.0))
            if "tool" in entry:
                decisions.append(
                    ToolCall(
                        tool_name=entry["tool"],
                        arguments=dict(entry.get("arguments") or {}),
                        text=entry.get("text"),
                        cost_usd=cost,
                    )
                )
            elif "answer" in entry:
                decisions.append(FinalAnswer(text=str(entry["answer"]), cost_usd=cost))
            else:
                raise ValueError(f"Script entry needs 'tool' or 'answer': {entry}")
        return cls(decisions, **kwargs)

    @property
    def remaining(self) -> int:
        return len(self._script)

    async def decide(self, request: ModelRequest) -> ModelDecision:
        self.requests.append(request)
        if not self._script:
            return FinalAnswer(text=self.final_text)
        entry = self._script.popleft()
        if callable(entry):
            return entry(request)
        return entry


class CallbackModel(ModelBackend):
    """Backend delegating every decision to a function of the request."""

    def __init__(self, fn: Callable[[ModelRequest], ModelDecision]):
        self._fn = fn

    async def decide(self, request: ModelRequest) -> ModelDecision:
        return self._fn(request)
