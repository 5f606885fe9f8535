"""Caller-facing session driver.

Usage:
    driver = SessionDriver(registry, model)
    async with driver.run(SessionOptions(prompt="2+2", max_turns=1)) as session:
        async for event in session:
            ...
    print(session.num_turns, session.total_cost_usd)
"""

import dataclasses
from typing import Any, Optional

from loguru import logger

from ..audit import AuditLogger
from ..hooks import HookPipeline
from ..registry import ToolRegistry
from .events import SessionEvent, TerminalSummary
from .model import ModelBackend
from .options import SessionOptions
from .transport import SessionState, SessionTransport


class AgentSession:
    """
    Lazy, forward-only, single-consumption stream of session events.

    Iterate it once with ``async for``. Stopping early is allowed; call
    ``aclose()`` (or use ``async with``) to release the session promptly.
    """

    def __init__(self, transport: SessionTransport):
        self._transport = transport
        self._events = transport.events()
        self._consumed = False
        self.result: Optional[TerminalSummary] = None

    @property
    def session_id(self) -> str:
        return self._transport.session_id

    @property
    def state(self) -> SessionState:
        return self._transport.state

    @property
    def transport(self) -> SessionTransport:
        return self._transport

    @property
    def num_turns(self) -> int:
        return self._transport.turns.count

    @property
    def total_cost_usd(self) -> float:
        return self._transport.total_cost

    def __aiter__(self) -> "AgentSession":
        if self._consumed:
            raise RuntimeError(f"Session {self.session_id} can only be iterated once")
        self._consumed = True
        return self

    async def __anext__(self) -> SessionEvent:
        event = await self._events.__anext__()
        if isinstance(event, TerminalSummary):
            self.result = event
        return event

    async def collect(self) -> list[SessionEvent]:
        """Drain the session and return every event."""
        return [event async for event in self]

    async def aclose(self) -> None:
        """Stop the session, cancelling any in-flight tool call."""
        await self._events.aclose()

    async def __aenter__(self) -> "AgentSession":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()


class SessionDriver:
    """Starts sessions against a tool registry and a model backend."""

    def __init__(
        self,
        registry: ToolRegistry,
        model: ModelBackend,
        audit: Optional[AuditLogger] = None,
    ):
        self.registry = registry
        self.model = model
        self.audit = audit

    def run(self, options: SessionOptions) -> AgentSession:
        """
        Start a session.

        Options are validated here, so a bad configuration fails before any
        event is produced.

        Raises:
            InvalidConfiguration: If the options are unusable
        """
        allowed = options.validate(self.registry)
        audit = self.audit
        if audit is None and options.audit_log_path:
            audit = AuditLogger(options.audit_log_path)

        transport = SessionTransport(
            options=options,
            tools=allowed,
            hooks=HookPipeline(options.hooks),
            model=self.model,
            audit=audit,
        )
        logger.debug(f"Prepared session {transport.session_id} with {len(allowed)} tools")
        return AgentSession(transport)


def query(
    prompt: str,
    options: Optional[SessionOptions] = None,
    *,
    model: ModelBackend,
    registry: Optional[ToolRegistry] = None,
    **overrides: Any,
) -> AgentSession:
    """
    Start a session for a prompt.

    Args:
        prompt: Initial prompt
        options: Base options; prompt and overrides replace their fields
        model: Model backend deciding each turn
        registry: Tools resolvable by name (ToolDefinitions in allowed_tools
            need no registry)
        **overrides: Any SessionOptions field

    Returns:
        AgentSession to iterate
    """
    if options is None:
        options = SessionOptions(prompt=prompt, **overrides)
    else:
        options = dataclasses.replace(options, prompt=prompt, **overrides)
    return SessionDriver(registry or ToolRegistry(), model).run(options)
