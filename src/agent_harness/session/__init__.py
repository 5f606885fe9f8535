"""Agent sessions: options, model backends, events, transport and driver."""

from .driver import AgentSession, SessionDriver, query
from .events import (
    AssistantText,
    SessionEvent,
    TerminalSummary,
    ToolInvocationRequest,
    ToolInvocationResult,
)
from .model import (
    AssistantMessage,
    CallbackModel,
    FinalAnswer,
    ModelBackend,
    ModelDecision,
    ModelRequest,
    ScriptedModel,
    ToolCall,
    ToolResultMessage,
    ToolUse,
    UserMessage,
)
from .options import SessionOptions
from .transport import SessionState, SessionTransport, TurnCounter

__all__ = [
    # Driver
    "AgentSession",
    "SessionDriver",
    "query",
    # Options
    "SessionOptions",
    # Events
    "AssistantText",
    "ToolInvocationRequest",
    "ToolInvocationResult",
    "TerminalSummary",
    "SessionEvent",
    # Model
    "ModelBackend",
    "ModelRequest",
    "ModelDecision",
    "FinalAnswer",
    "ToolCall",
    "ScriptedModel",
    "CallbackModel",
    "UserMessage",
    "AssistantMessage",
    "ToolUse",
    "ToolResultMessage",
    # Transport
    "SessionTransport",
    "SessionState",
    "TurnCounter",
]
