"""Session transport: the state machine behind one agent session.

States: IDLE -> THINKING -> (AWAITING_TOOL_APPROVAL -> TOOL_RUNNING)* ->
RESPONDING -> TERMINAL. Every model decision is one turn; the session ends
with exactly one TerminalSummary, either on a final answer or when the turn
budget is spent.
"""

import asyncio
import time
import uuid
from datetime import datetime, timezone
from enum import Enum
from typing import Any, AsyncIterator, Optional

from loguru import logger

from ..audit import AuditEvent, AuditLogger
from ..config import Config
from ..errors import (
    FieldViolation,
    HookDenied,
    SchemaViolation,
    TransportFailure,
    TurnBudgetExhausted,
    UnknownTool,
)
from ..governance import (
    ApprovalProvider,
    ApprovalRequest,
    DenyAllApprovalProvider,
    PermissionMode,
    evaluate_policy,
)
from ..hooks import (
    HookDecision,
    HookPipeline,
    PostToolUseInput,
    PreToolUseInput,
    PromptSubmitInput,
    ToolReceipt,
)
from ..registry import TextBlock, ToolDefinition, ToolOutcome, ToolRegistry
from .events import (
    AssistantText,
    SessionEvent,
    TerminalSummary,
    ToolInvocationRequest,
    ToolInvocationResult,
)
from .model import (
    AssistantMessage,
    FinalAnswer,
    Message,
    ModelBackend,
    ModelDecision,
    ModelRequest,
    ToolCall,
    ToolResultMessage,
    ToolUse,
    UserMessage,
)
from .options import SessionOptions


class SessionState(str, Enum):
    """States of the session state machine."""

    IDLE = "idle"
    THINKING = "thinking"
    AWAITING_TOOL_APPROVAL = "awaiting_tool_approval"
    TOOL_RUNNING = "tool_running"
    RESPONDING = "responding"
    TERMINAL = "terminal"


class TurnCounter:
    """Monotonic count of completed turns, bounded by max_turns."""

    def __init__(self, max_turns: int):
        self.max_turns = max_turns
        self._count = 0

    @property
    def count(self) -> int:
        return self._count

    @property
    def exhausted(self) -> bool:
        return self._count >= self.max_turns

    def advance(self) -> int:
        """
        Record one completed turn.

        Raises:
            TurnBudgetExhausted: If the budget is already spent
        """
        if self.exhausted:
            raise TurnBudgetExhausted(self.max_turns)
        self._count += 1
        return self._count


def _summarize(value: Any, max_len: int = Config.MAX_SUMMARY_LENGTH) -> str:
    text = str(value)
    if len(text) > max_len:
        return text[:max_len] + "..."
    return text


class SessionTransport:
    """
    Runs one session and produces its events.

    The transport is single-use: events() may be iterated once. Tool-level
    failures become error results; only TransportFailure escapes the stream.
    """

    def __init__(
        self,
        options: SessionOptions,
        tools: ToolRegistry,
        hooks: HookPipeline,
        model: ModelBackend,
        approval_provider: Optional[ApprovalProvider] = None,
        audit: Optional[AuditLogger] = None,
    ):
        """
        Initialize a transport.

        Args:
            options: Validated session options
            tools: Registry holding exactly the session's allowed tools
            hooks: Hook pipeline built from the options
            model: Model backend deciding each turn
            approval_provider: Decides calls the permission policy escalates
            audit: Optional JSON Lines audit trail
        """
        self.options = options
        self.session_id = options.session_id or f"session_{uuid.uuid4().hex[:12]}"
        self.tools = tools
        self.hooks = hooks
        self.model = model
        self.mode: PermissionMode = options.mode
        self.approval_provider = (
            approval_provider or options.approval_provider or DenyAllApprovalProvider()
        )
        self.audit = audit
        self.turns = TurnCounter(options.max_turns)
        self.messages: list[Message] = []
        self.receipts: list[ToolReceipt] = []
        self.total_cost = 0.0
        self._state = SessionState.IDLE
        self._started = False
        self._started_at = 0.0

    @property
    def state(self) -> SessionState:
        return self._state

    def _transition(self, state: SessionState) -> None:
        if self._state == SessionState.TERMINAL:
            raise RuntimeError(f"Session {self.session_id} is terminal")
        logger.debug(f"Session {self.session_id}: {self._state.value} -> {state.value}")
        self._state = state

    def _audit(self, event: AuditEvent, **kwargs: Any) -> None:
        if self.audit is not None:
            self.audit.log(event, session_id=self.session_id, **kwargs)

    async def events(self) -> AsyncIterator[SessionEvent]:
        """
        Run the session, yielding each event once its payload is complete.

        Raises:
            TransportFailure: If the model backend fails
            RuntimeError: If the transport was already started
        """
        if self._started:
            raise RuntimeError(f"Session {self.session_id} was already started")
        self._started = True
        self._started_at = time.monotonic()

        logger.info(
            f"Starting session {self.session_id} (model={self.options.model}, "
            f"mode={self.mode.value}, max_turns={self.turns.max_turns}, "
            f"tools={[t.name for t in self.tools.get_all()]})"
        )
        self._audit(
            AuditEvent.SESSION_STARTED,
            model=self.options.model,
            mode=self.mode.value,
            allowed_tools=[t.name for t in self.tools.get_all()],
        )

        try:
            prompt_decision = await self.hooks.run_prompt_submit(
                PromptSubmitInput(session_id=self.session_id, prompt=self.options.prompt)
            )
            if prompt_decision.denied:
                self._audit(AuditEvent.PROMPT_DENIED, reason=prompt_decision.reason)
                yield self._finish("prompt_denied", result=prompt_decision.reason)
                return

            self.messages.append(UserMessage(text=self.options.prompt))

            while True:
                self._transition(SessionState.THINKING)
                turn = self.turns.count + 1
                decision = await self._decide(turn)
                self.total_cost += decision.cost_usd

                if isinstance(decision, FinalAnswer):
                    self._transition(SessionState.RESPONDING)
                    self.messages.append(AssistantMessage(text=decision.text))
                    yield AssistantText(text=decision.text, turn=turn)
                    self.turns.advance()
                    yield self._finish("success", result=decision.text)
                    return

                if decision.text:
                    self.messages.append(AssistantMessage(text=decision.text))
                    yield AssistantText(text=decision.text, turn=turn)

                self._transition(SessionState.AWAITING_TOOL_APPROVAL)
                tool_use_id = decision.tool_use_id or f"toolu_{uuid.uuid4().hex[:12]}"
                arguments = decision.arguments
                if isinstance(arguments, dict):
                    arguments = dict(arguments)
                self.messages.append(
                    ToolUse(tool_use_id=tool_use_id, tool_name=decision.tool_name, arguments=arguments)
                )
                yield ToolInvocationRequest(
                    tool_use_id=tool_use_id,
                    tool_name=decision.tool_name,
                    raw_arguments=arguments,
                    turn=turn,
                )

                result = await self._handle_tool_call(tool_use_id, decision.tool_name, arguments, turn)
                self.messages.append(
                    ToolResultMessage(
                        tool_use_id=tool_use_id,
                        tool_name=decision.tool_name,
                        content=result.content,
                        is_error=result.is_error,
                        denied=result.denied,
                    )
                )
                yield result

                self.turns.advance()
                if self.turns.exhausted:
                    logger.warning(
                        f"Session {self.session_id} reached max_turns={self.turns.max_turns}"
                    )
                    yield self._finish("error_max_turns")
                    return
        finally:
            if self._state != SessionState.TERMINAL:
                logger.info(f"Session {self.session_id} closed before completion")
                self._state = SessionState.TERMINAL

    async def _decide(self, turn: int) -> ModelDecision:
        request = ModelRequest(
            session_id=self.session_id,
            model=self.options.model,
            system_prompt=self.options.system_prompt,
            messages=tuple(self.messages),
            tools=tuple(t.describe() for t in self.tools.get_all()),
            turn=turn,
        )
        try:
            decision = await self.model.decide(request)
        except TransportFailure:
            logger.error(f"Session {self.session_id}: model transport failed")
            raise
        except Exception as e:
            logger.error(f"Session {self.session_id}: model backend failed: {e}")
            raise TransportFailure(f"Model backend failed: {e}") from e

        if not isinstance(decision, (FinalAnswer, ToolCall)):
            raise TransportFailure(
                f"Model backend returned {type(decision).__name__}, "
                "expected FinalAnswer or ToolCall"
            )
        return decision

    async def _handle_tool_call(
        self, tool_use_id: str, tool_name: str, arguments: Any, turn: int
    ) -> ToolInvocationResult:
        if tool_name not in self.tools:
            error = UnknownTool(tool_name)
            logger.warning(f"Session {self.session_id}: {error}")
            outcome = ToolOutcome.failure(tool_name, error)
            return self._result(tool_use_id, outcome, turn)

        if not isinstance(arguments, dict):
            error = SchemaViolation(
                tool_name,
                [FieldViolation("<input>", f"expected an object, got {type(arguments).__name__}")],
            )
            logger.warning(f"Session {self.session_id}: {error}")
            return self._result(tool_use_id, ToolOutcome.failure(tool_name, error), turn)

        definition = self.tools.resolve(tool_name)
        receipt = ToolReceipt(
            tool_name=tool_name,
            tool_use_id=tool_use_id,
            session_id=self.session_id,
            timestamp_start=datetime.now(timezone.utc),
            args_summary={k: _summarize(v) for k, v in arguments.items()},
            hooks_applied=["pre_tool_use"],
        )
        self.receipts.append(receipt)

        hook_decision = await self.hooks.run_pre(
            PreToolUseInput(
                session_id=self.session_id,
                tool_use_id=tool_use_id,
                tool_name=tool_name,
                tool_input=dict(arguments),
            )
        )
        denial = await self._authorize(definition, hook_decision, tool_use_id, arguments)
        if denial is not None:
            error = HookDenied(tool_name, denial)
            receipt.denied = True
            receipt.finalize(success=False, error=str(error))
            if self.audit is not None:
                self.audit.log_denial(
                    session_id=self.session_id,
                    tool_name=tool_name,
                    arguments=arguments,
                    reason=denial,
                    mode=self.mode.value,
                )
            return ToolInvocationResult(
                tool_use_id=tool_use_id,
                tool_name=tool_name,
                is_error=True,
                content=(TextBlock(text=str(error)),),
                turn=turn,
                denied=True,
            )

        self._transition(SessionState.TOOL_RUNNING)
        outcome = await self._run_tool(tool_name, arguments)
        receipt.finalize(
            success=not outcome.is_error,
            error=outcome.text if outcome.is_error else None,
            result_summary=None if outcome.is_error else _summarize(outcome.text),
        )

        receipt.hooks_applied.append("post_tool_use")
        annotations = await self.hooks.run_post(
            PostToolUseInput(
                session_id=self.session_id,
                tool_use_id=tool_use_id,
                tool_name=tool_name,
                tool_input=dict(arguments),
                content=tuple(outcome.content),
                is_error=outcome.is_error,
            )
        )
        if annotations:
            logger.debug(f"Post-tool annotations for {tool_use_id}: {annotations}")

        if self.audit is not None:
            self.audit.log_tool_call(
                session_id=self.session_id,
                tool_name=tool_name,
                arguments=arguments,
                is_error=outcome.is_error,
                mode=self.mode.value,
                receipt=receipt.to_dict(),
            )
        return self._result(tool_use_id, outcome, turn)

    async def _authorize(
        self,
        definition: ToolDefinition,
        hook_decision: HookDecision,
        tool_use_id: str,
        arguments: dict[str, Any],
    ) -> Optional[str]:
        """
        Combine hook verdict, permission policy and approval provider.

        Returns:
            None if the call may run, otherwise the denial reason
        """
        if hook_decision.denied:
            return hook_decision.reason or f"denied by hook {hook_decision.hook_name}"

        policy = evaluate_policy(self.mode, definition.risk_level, definition.name)
        if policy.action == "block":
            logger.warning(f"Policy blocked {definition.name}: {policy.reason}")
            return policy.reason
        if hook_decision.approved:
            return None
        if policy.action == "allow":
            return None

        response = await self.approval_provider.resolve(
            ApprovalRequest(
                session_id=self.session_id,
                tool_use_id=tool_use_id,
                tool_name=definition.name,
                tool_input=dict(arguments),
                reason=policy.reason,
            )
        )
        approved = response.is_approved()
        self._audit(
            AuditEvent.APPROVAL_GRANTED if approved else AuditEvent.APPROVAL_DENIED,
            tool_name=definition.name,
            provider=self.approval_provider.get_name(),
            decision=response.decision.value,
            reason=response.reason,
        )
        if approved:
            return None
        return response.reason or f"approval {response.decision.value}"

    async def _run_tool(self, tool_name: str, arguments: dict[str, Any]) -> ToolOutcome:
        task = asyncio.ensure_future(self.tools.execute(tool_name, arguments))
        try:
            return await task
        finally:
            if not task.done():
                logger.debug(f"Session {self.session_id}: cancelling in-flight call to {tool_name}")
                task.cancel()

    @staticmethod
    def _result(tool_use_id: str, outcome: ToolOutcome, turn: int) -> ToolInvocationResult:
        return ToolInvocationResult(
            tool_use_id=tool_use_id,
            tool_name=outcome.tool_name,
            is_error=outcome.is_error,
            content=tuple(outcome.content),
            turn=turn,
        )

    def _finish(self, subtype: str, result: Optional[str] = None) -> TerminalSummary:
        duration_ms = (time.monotonic() - self._started_at) * 1000
        summary = TerminalSummary(
            session_id=self.session_id,
            total_turns=self.turns.count,
            total_cost=self.total_cost,
            subtype=subtype,
            is_error=subtype != "success",
            duration_ms=duration_ms,
            result=result,
        )
        self._transition(SessionState.TERMINAL)
        record = summary.to_dict()
        record.pop("session_id")
        self._audit(AuditEvent.SESSION_COMPLETED, **record)
        logger.info(
            f"Session {self.session_id} finished: {subtype}, "
            f"turns={summary.total_turns}, cost={summary.total_cost:.4f}"
        )
        return summary
