"""Exception hierarchy for the agent harness.

Fatal errors (InvalidConfiguration, TransportFailure) surface to the caller.
Tool-level errors (UnknownTool, SchemaViolation, ToolExecutionError) are
converted into error-flagged tool results at the registry boundary and never
unwind a running session.
"""

from dataclasses import dataclass
from typing import Optional


class HarnessError(Exception):
    """Base class for all harness errors."""


class InvalidConfiguration(HarnessError):
    """Session options or a tool definition are unusable. Raised before start."""


class DuplicateToolName(HarnessError):
    """A tool with the same name is already registered."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Tool '{name}' is already registered")


class UnknownTool(HarnessError):
    """The requested tool is not registered or not allowed for the session."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Unknown tool '{name}'")


@dataclass(frozen=True)
class FieldViolation:
    """One failing field of a tool input."""

    field: str
    message: str

    def __str__(self) -> str:
        return f"{self.field}: {self.message}"


class SchemaViolation(HarnessError):
    """Tool input does not satisfy the input schema.

    Carries every failing field, not just the first one.
    """

    def __init__(self, tool_name: str, violations: list[FieldViolation]):
        self.tool_name = tool_name
        self.violations = list(violations)
        details = "; ".join(str(v) for v in self.violations)
        super().__init__(f"Invalid input for tool '{tool_name}': {details}")

    @property
    def fields(self) -> list[str]:
        """Names of the failing fields, in report order."""
        return [v.field for v in self.violations]


class ToolExecutionError(HarnessError):
    """A tool handler raised or timed out."""

    def __init__(self, tool_name: str, cause: BaseException):
        self.tool_name = tool_name
        self.cause = cause
        detail = str(cause) or type(cause).__name__
        super().__init__(f"Tool '{tool_name}' failed: {detail}")


class HookDenied(HarnessError):
    """A pre-tool-use hook or the permission policy denied a tool call."""

    def __init__(self, tool_name: str, reason: Optional[str] = None):
        self.tool_name = tool_name
        self.reason = reason or "denied"
        super().__init__(f"Permission denied for tool '{tool_name}': {self.reason}")


class TurnBudgetExhausted(HarnessError):
    """The session reached max_turns. Reported as a terminal summary, not raised."""

    def __init__(self, max_turns: int):
        self.max_turns = max_turns
        super().__init__(f"Reached maximum number of turns ({max_turns})")


class TransportFailure(HarnessError):
    """The model backend is unavailable. Fails the whole session."""
