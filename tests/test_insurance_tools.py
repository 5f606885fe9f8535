"""Tests for the insurance example tools."""

import json

import pytest

from agent_harness.errors import SchemaViolation
from agent_harness.registry import ToolRegistry
from agent_harness.session import (
    FinalAnswer,
    ScriptedModel,
    SessionOptions,
    ToolCall,
    ToolInvocationResult,
    query,
)
from agent_harness.tools import TOOLS
from agent_harness.tools.insurance import premium_breakdown


@pytest.fixture
def insurance_registry():
    return ToolRegistry.from_definitions(TOOLS, tool_timeout=None)


class TestPremiumCalculation:
    """Tests for the premium formula."""

    def test_young_driver_with_accident(self):
        """22-year-old, $24,000 car, one accident."""
        breakdown = premium_breakdown(22, 24000, 1)
        # (500 * 1.5 + 240) * 1.15
        assert breakdown["totalPremium"] == 1138.5
        assert breakdown["ageFactor"] == 1.5
        assert breakdown["vehicleValueSurcharge"] == 240.0
        assert breakdown["basePremium"] == 500
        assert breakdown["accidentSurcharge"] == pytest.approx(170.78, abs=0.01)

    def test_middle_aged_clean_record(self):
        """No age factor, no accidents."""
        breakdown = premium_breakdown(40, 10000, 0)
        assert breakdown["totalPremium"] == 600.0
        assert breakdown["ageFactor"] == 1.0
        assert breakdown["accidentSurcharge"] == 0

    def test_senior_driver(self):
        """Drivers over 65 get a 1.2 factor."""
        assert premium_breakdown(70, 0, 0)["totalPremium"] == 600.0


class TestToolSchemas:
    """The tools validate their inputs."""

    @pytest.mark.parametrize(
        "arguments,field",
        [
            ({"age": 15, "vehicleValue": 1000, "accidentHistory": 0}, "age"),
            ({"age": 30, "vehicleValue": -1, "accidentHistory": 0}, "vehicleValue"),
            ({"age": 30, "vehicleValue": 1000, "accidentHistory": 11}, "accidentHistory"),
        ],
    )
    def test_premium_bounds(self, insurance_registry, arguments, field):
        """Out-of-range premium inputs name the failing field."""
        with pytest.raises(SchemaViolation) as exc_info:
            insurance_registry.validate("calculate_premium", arguments)
        assert exc_info.value.fields == [field]

    def test_vehicle_year_range(self, insurance_registry):
        """Vehicle year must be between 1990 and 2025."""
        with pytest.raises(SchemaViolation) as exc_info:
            insurance_registry.validate(
                "get_vehicle_info", {"make": "Honda", "model": "Accord", "year": 1985}
            )
        assert exc_info.value.fields == ["year"]


class TestToolExecution:
    """The tools run through the registry."""

    @pytest.mark.asyncio
    async def test_calculate_premium(self, insurance_registry):
        """The premium tool returns the breakdown as JSON."""
        outcome = await insurance_registry.execute(
            "calculate_premium", {"age": 22, "vehicleValue": 24000, "accidentHistory": 1}
        )
        assert not outcome.is_error
        assert json.loads(outcome.text)["totalPremium"] == 1138.5

    @pytest.mark.asyncio
    async def test_get_vehicle_info(self, insurance_registry):
        """The vehicle lookup echoes the vehicle with canned ratings."""
        outcome = await insurance_registry.execute(
            "get_vehicle_info", {"make": "Honda", "model": "Accord", "year": 2020}
        )
        info = json.loads(outcome.text)
        assert info["make"] == "Honda"
        assert info["safetyRating"] == 4.5
        assert info["theftRate"] == "Low"

    @pytest.mark.asyncio
    async def test_compare_quotes_sorted(self, insurance_registry):
        """Quotes come back cheapest first."""
        outcome = await insurance_registry.execute(
            "compare_quotes", {"age": 40, "vehicleValue": 10000, "accidentHistory": 0}
        )
        data = json.loads(outcome.text)
        prices = [q["annualPremium"] for q in data["quotes"]]
        assert prices == sorted(prices)
        assert data["cheapest"] == "Acme Mutual"
        assert prices[0] == 570.0

    @pytest.mark.asyncio
    async def test_compare_quotes_unknown_provider(self, insurance_registry):
        """Unknown insurers are a tool error."""
        outcome = await insurance_registry.execute(
            "compare_quotes",
            {"age": 40, "vehicleValue": 10000, "accidentHistory": 0, "providers": ["Nobody Ltd"]},
        )
        assert outcome.is_error
        assert "Nobody Ltd" in outcome.text


class TestInsuranceSession:
    """The insurance tools inside a session."""

    @pytest.mark.asyncio
    async def test_quote_conversation(self, insurance_registry):
        """Premium and vehicle lookups complete a session under bypassPermissions."""
        model = ScriptedModel(
            [
                ToolCall(
                    tool_name="calculate_premium",
                    arguments={"age": 22, "vehicleValue": 24000, "accidentHistory": 1},
                ),
                ToolCall(
                    tool_name="get_vehicle_info",
                    arguments={"make": "Honda", "model": "Accord", "year": 2020},
                ),
                FinalAnswer(text="Your premium is $1138.50."),
            ]
        )
        options = SessionOptions(
            prompt="I'm 22 and want to insure my 2020 Honda Accord worth $24,000.",
            allowed_tools=["calculate_premium", "get_vehicle_info"],
            permission_mode="bypassPermissions",
            max_turns=5,
        )
        session = query(options.prompt, options, model=model, registry=insurance_registry)
        events = await session.collect()
        assert events[-1].subtype == "success"
        assert session.num_turns == 3

    @pytest.mark.asyncio
    async def test_compare_quotes_needs_approval(self, insurance_registry):
        """compare_quotes is sensitive: default mode without approval denies it."""
        model = ScriptedModel(
            [
                ToolCall(
                    tool_name="compare_quotes",
                    arguments={"age": 40, "vehicleValue": 10000, "accidentHistory": 0},
                )
            ]
        )
        session = query(
            "Compare quotes",
            model=model,
            registry=insurance_registry,
            allowed_tools=["compare_quotes"],
        )
        events = await session.collect()
        (result,) = [e for e in events if isinstance(e, ToolInvocationResult)]
        assert result.denied
