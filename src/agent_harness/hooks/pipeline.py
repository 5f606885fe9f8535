"""Hook pipeline for the session tool-call lifecycle."""

import inspect
import re
from dataclasses import dataclass, field
from typing import Any, Callable, Iterable, Mapping, Optional, Union

from loguru import logger

from .models import (
    HookDecision,
    HookEvent,
    PostToolUseInput,
    PreToolUseInput,
    PromptSubmitInput,
    Verdict,
)

Hook = Callable[[Any], Any]


@dataclass
class HookMatcher:
    """
    Group of hooks that only fire for matching tool names.

    matcher is a regular expression that must fully match the tool name
    (e.g. "Write|Edit"); None matches every tool.
    """

    hooks: list[Hook] = field(default_factory=list)
    matcher: Optional[str] = None

    def __post_init__(self) -> None:
        self._pattern = re.compile(self.matcher) if self.matcher else None

    def matches(self, tool_name: Optional[str]) -> bool:
        if self._pattern is None or tool_name is None:
            return True
        return self._pattern.fullmatch(tool_name) is not None


def hook_name(hook: Hook) -> str:
    """Human-readable name of a hook callable."""
    return getattr(hook, "__qualname__", None) or type(hook).__name__


def fold_decisions(decisions: Iterable[HookDecision]) -> HookDecision:
    """
    Fold hook decisions into one aggregate decision.

    Deny dominates: the first DENY wins. Otherwise APPROVE if any hook
    approved, else PASS_THROUGH.
    """
    approval: Optional[HookDecision] = None
    for decision in decisions:
        if decision.verdict == Verdict.DENY:
            return decision
        if decision.verdict == Verdict.APPROVE and approval is None:
            approval = decision
    return approval or HookDecision.pass_through()


class HookPipeline:
    """
    Ordered hook sets keyed by event.

    Features:
    - Registration-order execution, sequential, sync or async hooks
    - Tool-name matchers per hook group
    - Deny-dominant fold for pre-tool-use and prompt-submit hooks
    - Fail-closed: a raising or malformed pre-hook is an implicit deny
    - Post-tool-use hooks are side-effect only; their failures are logged
    """

    def __init__(
        self,
        hooks: Optional[Mapping[Union[HookEvent, str], Iterable[Union[Hook, HookMatcher]]]] = None,
    ):
        self._matchers: dict[HookEvent, list[HookMatcher]] = {
            HookEvent.PRE_TOOL_USE: [],
            HookEvent.POST_TOOL_USE: [],
            HookEvent.USER_PROMPT_SUBMIT: [],
        }
        for event, entries in (hooks or {}).items():
            for entry in entries:
                if isinstance(entry, HookMatcher):
                    self._matchers[HookEvent.parse(event)].append(entry)
                else:
                    self.register(event, entry)

    def register(
        self,
        event: Union[HookEvent, str],
        hook: Hook,
        matcher: Optional[str] = None,
    ) -> None:
        """Register a hook callback for an event."""
        if not callable(hook):
            raise TypeError(f"Hook {hook!r} is not callable")
        self._matchers[HookEvent.parse(event)].append(HookMatcher(hooks=[hook], matcher=matcher))

    def unregister(self, event: Union[HookEvent, str], hook: Hook) -> bool:
        """Unregister a hook callback. Returns False if it was not registered."""
        for group in self._matchers[HookEvent.parse(event)]:
            if hook in group.hooks:
                group.hooks.remove(hook)
                return True
        return False

    def hooks_for(self, event: HookEvent, tool_name: Optional[str] = None) -> list[Hook]:
        """Hooks that apply to an event and tool, in registration order."""
        return [
            hook
            for group in self._matchers[event]
            if group.matches(tool_name)
            for hook in group.hooks
        ]

    def __len__(self) -> int:
        return sum(len(g.hooks) for groups in self._matchers.values() for g in groups)

    @staticmethod
    async def _call(hook: Hook, payload: Any) -> Any:
        result = hook(payload)
        if inspect.isawaitable(result):
            result = await result
        return result

    async def _run_decisions(
        self, event: HookEvent, payload: Any, tool_name: Optional[str]
    ) -> HookDecision:
        decisions: list[HookDecision] = []
        for hook in self.hooks_for(event, tool_name):
            name = hook_name(hook)
            try:
                result = await self._call(hook, payload)
            except Exception as e:
                logger.error(f"{event.value} hook {name} failed: {e}")
                decisions.append(HookDecision(Verdict.DENY, f"Hook {name} failed: {e}", name))
                break

            if result is None:
                continue
            if not isinstance(result, HookDecision):
                logger.error(
                    f"{event.value} hook {name} returned {type(result).__name__}, "
                    "expected HookDecision or None"
                )
                decisions.append(
                    HookDecision(
                        Verdict.DENY,
                        f"Hook {name} returned invalid decision {type(result).__name__}",
                        name,
                    )
                )
                break

            if result.hook_name is None:
                result = HookDecision(result.verdict, result.reason, name)
            decisions.append(result)
            logger.debug(f"{event.value} hook {name}: {result.verdict.value}")
            if result.denied:
                break

        return fold_decisions(decisions)

    async def run_pre(self, payload: PreToolUseInput) -> HookDecision:
        """
        Run pre-tool-use hooks for a pending tool invocation.

        Returns:
            Aggregate HookDecision (deny dominates)
        """
        decision = await self._run_decisions(
            HookEvent.PRE_TOOL_USE, payload, payload.tool_name
        )
        if decision.denied:
            logger.warning(
                f"Pre-tool hooks denied {payload.tool_name} "
                f"({payload.tool_use_id}): {decision.reason}"
            )
        return decision

    async def run_post(self, payload: PostToolUseInput) -> list[Any]:
        """
        Run post-tool-use hooks for side effects.

        Returns:
            Non-None hook return values, usable as logging annotations only
        """
        annotations: list[Any] = []
        for hook in self.hooks_for(HookEvent.POST_TOOL_USE, payload.tool_name):
            try:
                result = await self._call(hook, payload)
            except Exception as e:
                logger.error(f"PostToolUse hook {hook_name(hook)} failed: {e}")
                continue
            if result is not None:
                annotations.append(result)
        return annotations

    async def run_prompt_submit(self, payload: PromptSubmitInput) -> HookDecision:
        """Run prompt-submit hooks. A deny stops the session before the first turn."""
        decision = await self._run_decisions(HookEvent.USER_PROMPT_SUBMIT, payload, None)
        if decision.denied:
            logger.warning(f"Prompt rejected for session {payload.session_id}: {decision.reason}")
        return decision
