"""Ready-made hooks: tool allow/deny lists and tool usage logging."""

from collections import Counter
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Literal, Optional

from loguru import logger

from .models import HookDecision, HookEvent, PostToolUseInput, PreToolUseInput


def deny_tools(*names: str, reason: Optional[str] = None):
    """
    Pre-tool-use hook denying the named tools.

    Other tools pass through to the permission policy.
    """
    blocked = frozenset(names)

    def hook(payload: PreToolUseInput) -> Optional[HookDecision]:
        if payload.tool_name not in blocked:
            return None
        logger.warning(f"Deny-list hook blocked {payload.tool_name}")
        return HookDecision.deny(reason or f"Tool '{payload.tool_name}' is on the deny list")

    hook.__qualname__ = f"deny_tools({', '.join(sorted(blocked))})"
    return hook


def approve_tools(*names: str, reason: Optional[str] = None):
    """
    Pre-tool-use hook explicitly approving the named tools.

    Other tools pass through to the permission policy.
    """
    allowed = frozenset(names)

    def hook(payload: PreToolUseInput) -> Optional[HookDecision]:
        if payload.tool_name not in allowed:
            return None
        return HookDecision.approve(reason or f"Tool '{payload.tool_name}' approved by hook")

    hook.__qualname__ = f"approve_tools({', '.join(sorted(allowed))})"
    return hook


@dataclass
class ToolUsageEntry:
    """One pre or post observation of a tool call."""

    timestamp: str
    tool: str
    tool_use_id: str
    phase: Literal["pre", "post"]
    success: Optional[bool] = None


@dataclass
class ToolUsageLog:
    """
    Records every tool call seen by the hook pipeline.

    Register ``pre`` and ``post`` (or call ``hooks()``) to observe both
    phases; ``counts()`` summarises completed calls per tool.
    """

    entries: list[ToolUsageEntry] = field(default_factory=list)
    approve: bool = False

    def pre(self, payload: PreToolUseInput) -> Optional[HookDecision]:
        self.entries.append(
            ToolUsageEntry(
                timestamp=datetime.now(timezone.utc).isoformat(),
                tool=payload.tool_name,
                tool_use_id=payload.tool_use_id,
                phase="pre",
            )
        )
        logger.info(
            f"[HOOK] About to use tool: {payload.tool_name} "
            f"({payload.tool_use_id}) input={payload.tool_input}"
        )
        if self.approve:
            return HookDecision.approve("Tool approved by usage log hook")
        return None

    def post(self, payload: PostToolUseInput) -> None:
        self.entries.append(
            ToolUsageEntry(
                timestamp=datetime.now(timezone.utc).isoformat(),
                tool=payload.tool_name,
                tool_use_id=payload.tool_use_id,
                phase="post",
                success=not payload.is_error,
            )
        )
        logger.info(
            f"[HOOK] Completed tool: {payload.tool_name} "
            f"({'error' if payload.is_error else 'ok'}), log entries: {len(self.entries)}"
        )

    def hooks(self) -> dict[HookEvent, list[Any]]:
        """Hook mapping suitable for SessionOptions.hooks."""
        return {HookEvent.PRE_TOOL_USE: [self.pre], HookEvent.POST_TOOL_USE: [self.post]}

    def counts(self) -> dict[str, int]:
        """Completed calls per tool."""
        return dict(Counter(e.tool for e in self.entries if e.phase == "post"))
