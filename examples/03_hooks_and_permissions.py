#!/usr/bin/env python3
"""
Example 3: Hooks and permission modes.

Demonstrates:
- Monitoring tool usage with pre/post hooks (ToolUsageLog)
- A deny-list hook that blocks a tool outright
- Permission modes and an approval callback for sensitive tools
"""

import asyncio

from agent_harness import (
    HookEvent,
    ScriptedModel,
    SessionOptions,
    TerminalSummary,
    ToolInvocationResult,
    ToolRegistry,
    query,
)
from agent_harness.governance import CallbackApprovalProvider
from agent_harness.hooks import ToolUsageLog, deny_tools
from agent_harness.session import FinalAnswer, ToolCall
from agent_harness.tools import TOOLS

DRIVER = {"age": 40, "vehicleValue": 18000, "accidentHistory": 0}


def approve_known_insurers(request):
    """Approval callback: only allow quote requests for the default insurer set."""
    print(f"[APPROVAL] {request.tool_name} requested ({request.reason})")
    return "providers" not in request.tool_input


async def run_hooks_agent():
    print("=== Example 3: Hooks and Permissions ===\n")

    registry = ToolRegistry.from_definitions(TOOLS)
    usage = ToolUsageLog()
    hooks = usage.hooks()
    hooks[HookEvent.PRE_TOOL_USE].append(deny_tools("get_vehicle_info"))

    model = ScriptedModel(
        [
            ToolCall(tool_name="calculate_premium", arguments=DRIVER, cost_usd=0.002),
            ToolCall(
                tool_name="get_vehicle_info",
                arguments={"make": "Ford", "model": "Focus", "year": 2018},
                cost_usd=0.001,
            ),
            ToolCall(tool_name="compare_quotes", arguments=DRIVER, cost_usd=0.002),
            FinalAnswer(text="Acme Mutual offers the cheapest cover.", cost_usd=0.001),
        ]
    )
    options = SessionOptions(
        prompt="Find me the cheapest cover for my 2018 Ford Focus.",
        allowed_tools=[t.name for t in TOOLS],
        # 'default' asks the approval provider before running sensitive tools
        permission_mode="default",
        approval_provider=CallbackApprovalProvider(approve_known_insurers, name="Insurer allowlist"),
        hooks=hooks,
        max_turns=10,
    )

    async for event in query(options.prompt, options, model=model, registry=registry):
        if isinstance(event, ToolInvocationResult):
            status = "DENIED" if event.denied else ("ERROR" if event.is_error else "OK")
            print(f"[{status}] {event.tool_name}: {event.text}\n")
        elif isinstance(event, TerminalSummary):
            print("--- Review Complete ---")
            print("Total cost:", event.total_cost)
            print("Total turns:", event.total_turns)

    print("\nTool Usage Summary:")
    for tool_name, count in usage.counts().items():
        print(f"  {tool_name}: {count} call(s)")


if __name__ == "__main__":
    asyncio.run(run_hooks_agent())
