"""Permission governance: modes, policy matrix and approval providers."""

from .approval import (
    ApprovalDecision,
    ApprovalProvider,
    ApprovalRequest,
    ApprovalResponse,
    CallbackApprovalProvider,
    ConsoleApprovalProvider,
    DenyAllApprovalProvider,
)
from .modes import PermissionMode
from .policy import PolicyDecision, evaluate_policy

__all__ = [
    "PermissionMode",
    "PolicyDecision",
    "evaluate_policy",
    "ApprovalDecision",
    "ApprovalProvider",
    "ApprovalRequest",
    "ApprovalResponse",
    "CallbackApprovalProvider",
    "ConsoleApprovalProvider",
    "DenyAllApprovalProvider",
]
