#!/usr/bin/env python3
"""
Example 2: Agent with custom tools.

Declares tools with the ``tool`` decorator, registers them and lets the
(scripted) model call them. Tool results are fed back to the model, which
uses them in its final answer.
"""

import asyncio
import json

from agent_harness import (
    AssistantText,
    ScriptedModel,
    SessionOptions,
    TerminalSummary,
    ToolInvocationRequest,
    ToolInvocationResult,
    ToolRegistry,
    query,
)
from agent_harness.session import FinalAnswer, ToolCall, ToolResultMessage
from agent_harness.tools import calculate_premium, get_vehicle_info


def summarize(request):
    """Final answer built from the premium result already in the conversation."""
    premium = next(
        json.loads(m.text)
        for m in request.messages
        if isinstance(m, ToolResultMessage) and m.tool_name == "calculate_premium"
    )
    return FinalAnswer(
        text=f"Your estimated annual premium is ${premium['totalPremium']:,.2f}.",
        cost_usd=0.004,
    )


async def run_custom_tools_agent():
    print("=== Example 2: Agent with Custom Tools ===\n")

    registry = ToolRegistry.from_definitions([calculate_premium, get_vehicle_info])
    model = ScriptedModel(
        [
            ToolCall(
                tool_name="calculate_premium",
                arguments={"age": 22, "vehicleValue": 24000, "accidentHistory": 1},
                text="I'll calculate your premium first.",
                cost_usd=0.003,
            ),
            ToolCall(
                tool_name="get_vehicle_info",
                arguments={"make": "Honda", "model": "Accord", "year": 2020},
                cost_usd=0.002,
            ),
            summarize,
        ]
    )
    options = SessionOptions(
        prompt=(
            "I'm 22 years old and want to insure my 2020 Honda Accord worth $24,000. "
            "I've had 1 accident in the past 5 years. "
            "Can you calculate my insurance premium and provide vehicle info?"
        ),
        system_prompt=(
            "You are an insurance agent assistant. Use the available tools to help "
            "calculate premiums and provide vehicle information."
        ),
        allowed_tools=["calculate_premium", "get_vehicle_info"],
        permission_mode="bypassPermissions",
        max_turns=5,
    )

    session = query(options.prompt, options, model=model, registry=registry)
    async for event in session:
        if isinstance(event, AssistantText):
            print("\nAssistant:", event.text)
        elif isinstance(event, ToolInvocationRequest):
            print(f"\n[TOOL REQUEST] {event.tool_name} {event.raw_arguments}")
        elif isinstance(event, ToolInvocationResult):
            print(f"[TOOL RESULT] {event.tool_name}:\n{event.text}")
        elif isinstance(event, TerminalSummary):
            print("\n--- Interaction Complete ---")
            print("Total cost:", event.total_cost)
            print("Total turns:", event.total_turns)


if __name__ == "__main__":
    asyncio.run(run_custom_tools_agent())
