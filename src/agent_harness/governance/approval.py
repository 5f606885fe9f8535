"""Approval providers for tool calls that require permission.

Supports multiple approval mechanisms:
- Deny-all (fail-closed default)
- Caller-supplied callback (sync or async)
- Interactive console prompt
"""

import asyncio
import inspect
import json
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, Optional

from loguru import logger


class ApprovalDecision(str, Enum):
    """User approval decision."""

    APPROVED = "approved"
    DENIED = "denied"
    TIMEOUT = "timeout"
    ERROR = "error"


@dataclass
class ApprovalRequest:
    """Request for approval of a tool invocation.

    Attributes:
        session_id: Session the tool call belongs to
        tool_use_id: Identifier of the tool invocation
        tool_name: Name of the tool requiring approval
        tool_input: Raw arguments supplied by the model
        reason: Why approval is required (from the permission policy)
        timeout_seconds: How long to wait for a response
    """

    session_id: str
    tool_use_id: str
    tool_name: str
    tool_input: Dict[str, Any]
    reason: str
    timeout_seconds: Optional[float] = None


@dataclass
class ApprovalResponse:
    """Response to an approval request."""

    tool_use_id: str
    decision: ApprovalDecision
    reason: Optional[str] = None
    timestamp: float = field(default_factory=time.time)

    def is_approved(self) -> bool:
        """Check if the request was approved."""
        return self.decision == ApprovalDecision.APPROVED


class ApprovalProvider(ABC):
    """Abstract base class for approval providers.

    All methods are async to support GUI interactions, network requests, etc.
    """

    @abstractmethod
    async def request_approval(self, request: ApprovalRequest) -> ApprovalResponse:
        """Request approval for a tool invocation."""

    @abstractmethod
    def get_name(self) -> str:
        """Get human-readable name of this provider."""

    async def resolve(self, request: ApprovalRequest) -> ApprovalResponse:
        """
        Request approval with timeout and fail-closed error handling.

        Provider failures and timeouts are converted to non-approving responses.
        """
        try:
            if request.timeout_seconds:
                return await asyncio.wait_for(
                    self.request_approval(request), timeout=request.timeout_seconds
                )
            return await self.request_approval(request)
        except asyncio.TimeoutError:
            logger.warning(
                f"Approval for {request.tool_name} timed out after "
                f"{request.timeout_seconds}s ({self.get_name()})"
            )
            return ApprovalResponse(
                tool_use_id=request.tool_use_id,
                decision=ApprovalDecision.TIMEOUT,
                reason="approval timed out",
            )
        except Exception as e:
            logger.error(f"Approval provider {self.get_name()} failed: {e}")
            return ApprovalResponse(
                tool_use_id=request.tool_use_id,
                decision=ApprovalDecision.ERROR,
                reason=f"approval provider error: {e}",
            )


class DenyAllApprovalProvider(ApprovalProvider):
    """Denies every request. Used when no approval channel is configured."""

    async def request_approval(self, request: ApprovalRequest) -> ApprovalResponse:
        return ApprovalResponse(
            tool_use_id=request.tool_use_id,
            decision=ApprovalDecision.DENIED,
            reason=f"No approval provider configured ({request.reason})",
        )

    def get_name(self) -> str:
        return "Deny All"


class CallbackApprovalProvider(ApprovalProvider):
    """
    Approval delegated to a caller-supplied function.

    The callback receives the ApprovalRequest and returns either a bool, an
    ApprovalDecision or an ApprovalResponse. It may be sync or async.
    """

    def __init__(self, callback: Callable[[ApprovalRequest], Any], name: str = "Callback"):
        self._callback = callback
        self._name = name

    async def request_approval(self, request: ApprovalRequest) -> ApprovalResponse:
        result = self._callback(request)
        if inspect.isawaitable(result):
            result = await result

        if isinstance(result, ApprovalResponse):
            return result
        if isinstance(result, ApprovalDecision):
            return ApprovalResponse(tool_use_id=request.tool_use_id, decision=result)
        if isinstance(result, bool):
            return ApprovalResponse(
                tool_use_id=request.tool_use_id,
                decision=ApprovalDecision.APPROVED if result else ApprovalDecision.DENIED,
                reason=None if result else "denied by approval callback",
            )
        raise TypeError(
            f"Approval callback returned {type(result).__name__}, "
            "expected bool, ApprovalDecision or ApprovalResponse"
        )

    def get_name(self) -> str:
        return self._name


class ConsoleApprovalProvider(ApprovalProvider):
    """Interactive terminal prompt. EOF on stdin counts as a denial."""

    def __init__(self, input_fn: Callable[[str], str] = input):
        self._input = input_fn

    async def request_approval(self, request: ApprovalRequest) -> ApprovalResponse:
        arguments = json.dumps(request.tool_input, default=str)
        prompt = (
            f"Allow tool '{request.tool_name}' with {arguments}? "
            f"({request.reason}) [y/N]: "
        )
        try:
            answer = await asyncio.to_thread(self._input, prompt)
        except EOFError:
            return ApprovalResponse(
                tool_use_id=request.tool_use_id,
                decision=ApprovalDecision.DENIED,
                reason="no input available",
            )

        if answer.strip().lower() in ("y", "yes"):
            return ApprovalResponse(
                tool_use_id=request.tool_use_id, decision=ApprovalDecision.APPROVED
            )
        return ApprovalResponse(
            tool_use_id=request.tool_use_id,
            decision=ApprovalDecision.DENIED,
            reason="denied by user",
        )

    def get_name(self) -> str:
        return "Console Prompt"
