"""Tests for the command line interface."""

import json
import sys
import tempfile
from pathlib import Path

import pytest
import yaml
from loguru import logger

from agent_harness import cli
from agent_harness.governance import ConsoleApprovalProvider

QUOTE_SESSION = {
    "prompt": "I'm 22 and want to insure my 2020 Honda Accord worth $24,000.",
    "allowed_tools": ["calculate_premium", "get_vehicle_info"],
    "permission_mode": "bypassPermissions",
    "max_turns": 5,
    "script": [
        {
            "tool": "calculate_premium",
            "arguments": {"age": 22, "vehicleValue": 24000, "accidentHistory": 1},
            "text": "Let me calculate that.",
            "cost": 0.002,
        },
        {"answer": "Your premium is $1138.50 per year.", "cost": 0.001},
    ],
}


@pytest.fixture(autouse=True)
def _reset_logging():
    yield
    logger.remove()
    logger.add(sys.stderr)


@pytest.fixture
def session_file():
    """Write a session dict to a temporary YAML file."""
    with tempfile.TemporaryDirectory() as tmpdir:

        def write(data):
            path = Path(tmpdir) / "session.yaml"
            with open(path, "w") as f:
                yaml.dump(data, f)
            return str(path)

        yield write


class TestRun:
    """Tests for the run command."""

    def test_run_success(self, session_file, capsys):
        """A scripted session prints its events and exits 0."""
        code = cli.main(["run", session_file(QUOTE_SESSION)])
        out = capsys.readouterr().out

        assert code == 0
        assert "Assistant: Let me calculate that." in out
        assert "-> calculate_premium" in out
        assert "<- calculate_premium [ok]" in out
        assert '"totalPremium": 1138.5' in out
        assert "Result: success" in out
        assert "Total turns: 2" in out

    def test_run_json(self, session_file, capsys):
        """--json prints one JSON object per event."""
        code = cli.main(["run", session_file(QUOTE_SESSION), "--json"])
        lines = capsys.readouterr().out.strip().splitlines()

        assert code == 0
        events = [json.loads(line) for line in lines]
        assert [e["kind"] for e in events] == [
            "assistant",
            "toolInvocationRequest",
            "toolInvocationResult",
            "assistant",
            "terminal",
        ]
        assert events[-1]["total_cost"] == pytest.approx(0.003)

    def test_max_turns_exit_code(self, session_file, capsys):
        """A session ending in an error summary exits 2."""
        data = dict(QUOTE_SESSION, max_turns=1)
        code = cli.main(["run", session_file(data)])
        assert code == 2
        assert "Result: error_max_turns" in capsys.readouterr().out

    def test_deny_list(self, session_file, capsys):
        """deny_tools in the session file blocks the tool."""
        data = dict(QUOTE_SESSION, deny_tools=["calculate_premium"])
        code = cli.main(["run", session_file(data)])
        assert code == 0
        assert "<- calculate_premium [denied]" in capsys.readouterr().out

    def test_interactive_approval(self, session_file, capsys, monkeypatch):
        """--interactive asks on the terminal for tools needing approval."""
        prompts = []

        def answer_yes(prompt):
            prompts.append(prompt)
            return "y"

        monkeypatch.setattr(
            cli, "ConsoleApprovalProvider", lambda: ConsoleApprovalProvider(input_fn=answer_yes)
        )
        data = {
            "prompt": "Compare quotes",
            "allowed_tools": ["compare_quotes"],
            "script": [
                {
                    "tool": "compare_quotes",
                    "arguments": {"age": 40, "vehicleValue": 10000, "accidentHistory": 0},
                },
                {"answer": "Acme Mutual is cheapest."},
            ],
        }
        code = cli.main(["run", session_file(data), "--interactive"])
        assert code == 0
        assert len(prompts) == 1
        assert "compare_quotes" in prompts[0]
        assert "<- compare_quotes [ok]" in capsys.readouterr().out

    @pytest.mark.parametrize(
        "data",
        [
            {"prompt": "x", "max_turn": 3},
            {"prompt": "x", "allowed_tools": ["not_a_tool"]},
            {"prompt": "x", "script": [{"say": "hello"}]},
            {"prompt": "x", "script": "answer"},
            {"prompt": "x", "tool_timeout": "abc"},
        ],
    )
    def test_invalid_session_file(self, session_file, data):
        """Configuration errors exit 1."""
        assert cli.main(["run", session_file(data)]) == 1

    def test_missing_session_file(self):
        """A missing session file exits 1."""
        assert cli.main(["run", "/nonexistent/session.yaml"]) == 1

    def test_transport_failure(self, session_file, monkeypatch):
        """A failing model backend exits 1."""

        async def offline(self, request):
            raise ConnectionError("offline")

        monkeypatch.setattr(cli.ScriptedModel, "decide", offline)
        assert cli.main(["run", session_file(QUOTE_SESSION)]) == 1


class TestTools:
    """Tests for the tools command."""

    def test_list_default_tools(self, capsys):
        """The default module provides the insurance tools."""
        assert cli.main(["tools"]) == 0
        out = capsys.readouterr().out
        assert "calculate_premium [safe]" in out
        assert "compare_quotes [sensitive]" in out

    def test_unknown_module(self):
        """An unimportable tools module exits 1."""
        assert cli.main(["tools", "--tools-module", "no.such.module"]) == 1

    def test_tools_file(self, capsys):
        """Tools can come from a YAML tool file."""
        with tempfile.TemporaryDirectory() as tmpdir:
            path = Path(tmpdir) / "tools.yaml"
            with open(path, "w") as f:
                yaml.dump(
                    {
                        "tools": [
                            {
                                "name": "premium",
                                "description": "Premium breakdown",
                                "handler": "agent_harness.tools.insurance:premium_breakdown",
                                "risk_level": "safe",
                            }
                        ]
                    },
                    f,
                )
            assert cli.main(["tools", "--tools-file", str(path)]) == 0
        assert "premium [safe]: Premium breakdown" in capsys.readouterr().out


class TestExampleSessions:
    """The session files shipped under examples/sessions run cleanly."""

    SESSIONS = Path(__file__).parent.parent / "examples" / "sessions"

    def test_insurance_quote(self, capsys):
        """acceptEdits lets the sensitive quote comparison run."""
        assert cli.main(["run", str(self.SESSIONS / "insurance_quote.yaml")]) == 0
        out = capsys.readouterr().out
        assert "<- compare_quotes [ok]" in out
        assert "Total turns: 4" in out

    def test_plan_mode(self, capsys):
        """Plan mode blocks the quote comparison but the session still succeeds."""
        assert cli.main(["run", str(self.SESSIONS / "plan_mode.yaml")]) == 0
        out = capsys.readouterr().out
        assert "<- calculate_premium [ok]" in out
        assert "<- compare_quotes [denied]" in out
