"""Hook system for session tool calls.

Hooks are caller-supplied interceptors run immediately before and after each
tool invocation, and on prompt submission.

Key components:
- HookPipeline: ordered hooks per event with deny-dominant folding
- Models: HookDecision, Verdict, hook inputs, ToolReceipt
- Built-ins: deny_tools, approve_tools, ToolUsageLog

Usage:
    pipeline = HookPipeline()
    pipeline.register(HookEvent.PRE_TOOL_USE, deny_tools("delete_file"))

    decision = await pipeline.run_pre(pre_input)
    if decision.denied:
        ...  # feed a denial result back to the model

    await pipeline.run_post(post_input)
"""

from .builtin import ToolUsageEntry, ToolUsageLog, approve_tools, deny_tools
from .models import (
    HookDecision,
    HookEvent,
    PostToolUseInput,
    PreToolUseInput,
    PromptSubmitInput,
    ToolReceipt,
    Verdict,
)
from .pipeline import HookMatcher, HookPipeline, fold_decisions, hook_name

__all__ = [
    # Pipeline
    "HookPipeline",
    "HookMatcher",
    "fold_decisions",
    "hook_name",
    # Models
    "HookDecision",
    "HookEvent",
    "Verdict",
    "PreToolUseInput",
    "PostToolUseInput",
    "PromptSubmitInput",
    "ToolReceipt",
    # Built-ins
    "deny_tools",
    "approve_tools",
    "ToolUsageLog",
    "ToolUsageEntry",
]
