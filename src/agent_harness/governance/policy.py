"""Permission policy engine."""

from dataclasses import dataclass
from typing import Literal

from .modes import PermissionMode


@dataclass
class PolicyDecision:
    """
    Policy decision result.

    Contains the action to take and reasoning.
    """

    action: Literal["allow", "block", "require_approval"]
    requires_approval: bool
    reason: str


def evaluate_policy(
    mode: PermissionMode,
    tool_risk: str,
    tool_name: str,
) -> PolicyDecision:
    """
    Evaluate permission policy based on mode and tool risk.

    Policy Matrix:
    ┌───────────────────┬─────────┬───────────┬───────────┐
    │ Mode              │ Safe    │ Sensitive │ Dangerous │
    ├───────────────────┼─────────┼───────────┼───────────┤
    │ default           │ Allow   │ Approval  │ Approval  │
    │ acceptEdits       │ Allow   │ Allow     │ Approval  │
    │ bypassPermissions │ Allow   │ Allow     │ Allow     │
    │ plan              │ Allow   │ Block     │ Block     │
    └───────────────────┴─────────┴───────────┴───────────┘

    Args:
        mode: Session permission mode
        tool_risk: Tool risk level ("safe", "sensitive", "dangerous")
        tool_name: Tool identifier

    Returns:
        PolicyDecision with action and reasoning

    Unknown risk levels and unknown modes fail safe to require_approval.
    """
    risk = tool_risk.lower() if tool_risk else "unknown"

    if mode == PermissionMode.BYPASS_PERMISSIONS:
        return PolicyDecision(
            action="allow",
            requires_approval=False,
            reason=f"bypassPermissions mode allows all tools (risk={risk})",
        )

    if risk not in {"safe", "sensitive", "dangerous"}:
        return PolicyDecision(
            action="require_approval",
            requires_approval=True,
            reason=f"Unknown risk level '{risk}' for {tool_name} requires approval",
        )

    if risk == "safe" and mode in {
        PermissionMode.DEFAULT,
        PermissionMode.ACCEPT_EDITS,
        PermissionMode.PLAN,
    }:
        return PolicyDecision(
            action="allow",
            requires_approval=False,
            reason=f"{mode.value} mode allows safe tools",
        )

    if mode == PermissionMode.PLAN:
        return PolicyDecision(
            action="block",
            requires_approval=False,
            reason=f"plan mode blocks {risk} tools",
        )

    if mode == PermissionMode.ACCEPT_EDITS and risk == "sensitive":
        return PolicyDecision(
            action="allow",
            requires_approval=False,
            reason="acceptEdits mode allows sensitive tools",
        )

    if mode in {PermissionMode.DEFAULT, PermissionMode.ACCEPT_EDITS}:
        return PolicyDecision(
            action="require_approval",
            requires_approval=True,
            reason=f"{mode.value} mode requires approval for {risk} tools",
        )

    return PolicyDecision(
        action="require_approval",
        requires_approval=True,
        reason=f"Unknown mode '{mode}' requires approval",
    )
