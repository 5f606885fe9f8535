"""Pytest fixtures and test utilities for the agent harness test suite."""

import tempfile
from pathlib import Path
from typing import Any

import pytest

from agent_harness.audit import AuditLogger
from agent_harness.registry import ToolRegistry, tool


# ============================================================================
# TOOL FIXTURES
# ============================================================================


class CallCounter:
    """Records every call made to a tool handler."""

    def __init__(self, result: Any = None):
        self.calls: list[dict[str, Any]] = []
        self.result = result

    @property
    def count(self) -> int:
        return len(self.calls)

    def __call__(self, args: dict[str, Any]) -> Any:
        self.calls.append(args)
        if self.result is not None:
            return self.result
        return args["a"] + args["b"]


@pytest.fixture
def add_handler():
    """Handler for the 'add' tool that counts its calls."""
    return CallCounter()


@pytest.fixture
def add_tool(add_handler):
    """Safe 'add' tool with schema {a: number, b: number}."""
    return tool("add", "Add two numbers", {"a": "number", "b": "number"}, add_handler, risk_level="safe")


@pytest.fixture
def registry(add_tool):
    """Registry holding the 'add' tool, no timeout."""
    return ToolRegistry.from_definitions([add_tool], tool_timeout=None)


# ============================================================================
# AUDIT FIXTURES
# ============================================================================


@pytest.fixture
def audit_logger():
    """Audit logger writing to a temporary JSON Lines file."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield AuditLogger(str(Path(tmpdir) / "audit.jsonl"))

