"""
agent-harness: a local harness for tool-augmented agent sessions.

A caller submits a prompt plus SessionOptions, iterates the asynchronous
stream of session events and reads the terminal summary. The language model
is pluggable through ModelBackend.
"""

from .config import Config
from .errors import (
    DuplicateToolName,
    FieldViolation,
    HarnessError,
    HookDenied,
    InvalidConfiguration,
    SchemaViolation,
    ToolExecutionError,
    TransportFailure,
    TurnBudgetExhausted,
    UnknownTool,
)
from .governance import PermissionMode
from .hooks import HookDecision, HookEvent, HookMatcher, HookPipeline
from .registry import FieldSpec, ToolDefinition, ToolRegistry, tool
from .session import (
    AgentSession,
    AssistantText,
    FinalAnswer,
    ModelBackend,
    ScriptedModel,
    SessionDriver,
    SessionOptions,
    TerminalSummary,
    ToolCall,
    ToolInvocationRequest,
    ToolInvocationResult,
    query,
)

__version__ = "0.1.0"

__all__ = [
    "__version__",
    "Config",
    # Entry points
    "query",
    "SessionDriver",
    "AgentSession",
    "SessionOptions",
    # Tools
    "tool",
    "ToolDefinition",
    "ToolRegistry",
    "FieldSpec",
    # Hooks and permissions
    "HookPipeline",
    "HookMatcher",
    "HookDecision",
    "HookEvent",
    "PermissionMode",
    # Model
    "ModelBackend",
    "ScriptedModel",
    "FinalAnswer",
    "ToolCall",
    # Events
    "AssistantText",
    "ToolInvocationRequest",
    "ToolInvocationResult",
    "TerminalSummary",
    # Errors
    "HarnessError",
    "InvalidConfiguration",
    "DuplicateToolName",
    "UnknownTool",
    "FieldViolation",
    "SchemaViolation",
    "ToolExecutionError",
    "HookDenied",
    "TurnBudgetExhausted",
    "TransportFailure",
]
