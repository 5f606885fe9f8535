#!/usr/bin/env python3
"""
Example 1: Basic agent.

The simplest session: one prompt, no tools, a single turn. A scripted model
stands in for the language model.
"""

import asyncio

from agent_harness import AssistantText, ScriptedModel, SessionOptions, TerminalSummary, query
from agent_harness.session import FinalAnswer


async def run_basic_agent():
    print("=== Example 1: Basic Agent ===\n")

    model = ScriptedModel(
        [
            FinalAnswer(
                text=(
                    "1. Single responsibility: each unit does one thing.\n"
                    "2. Loose coupling: depend on interfaces, not implementations.\n"
                    "3. Keep it simple: prefer the plainest design that works."
                ),
                cost_usd=0.0012,
            )
        ]
    )
    options = SessionOptions(
        prompt="What are the key principles of good software design? List 3 principles.",
        system_prompt="You are a helpful software engineering mentor. Provide clear, concise explanations.",
        max_turns=1,
    )

    async for event in query(options.prompt, options, model=model):
        if isinstance(event, AssistantText):
            print("Assistant:", event.text)
        elif isinstance(event, TerminalSummary):
            print("\n--- Interaction Complete ---")
            print("Total cost:", event.total_cost)
            print("Total turns:", event.total_turns)


if __name__ == "__main__":
    asyncio.run(run_basic_agent())
