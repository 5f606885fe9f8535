"""Insurance example tools: premium calculator, vehicle lookup, quote comparison.

The vehicle lookup and the quote comparison return canned data; there is no
real database or insurer behind them.
"""

from typing import Any

from loguru import logger

from ..registry import JsonBlock, tool

BASE_PREMIUM = 500.0

# Relative price level of each mock insurer
PROVIDER_FACTORS: dict[str, float] = {
    "Acme Mutual": 0.95,
    "Shield Direct": 1.0,
    "RoadSafe Insurance": 1.08,
}


def _age_factor(age: float) -> float:
    if age < 25:
        return 1.5
    if age > 65:
        return 1.2
    return 1.0


def premium_breakdown(age: float, vehicle_value: float, accident_history: float) -> dict[str, Any]:
    """
    Compute the premium and its components.

    The accident surcharge is reported relative to the premium after the
    accident multiplier has been applied.
    """
    premium = BASE_PREMIUM * _age_factor(age)
    premium += vehicle_value * 0.01
    premium *= 1 + accident_history * 0.15

    return {
        "basePremium": BASE_PREMIUM,
        "ageFactor": _age_factor(age),
        "vehicleValueSurcharge": round(vehicle_value * 0.01, 2),
        "accidentSurcharge": round(premium * accident_history * 0.15, 2),
        "totalPremium": round(premium, 2),
    }


@tool(
    "calculate_premium",
    "Calculate insurance premium based on risk factors",
    {
        "age": {"type": "number", "minimum": 16, "maximum": 100, "description": "Driver age"},
        "vehicleValue": {
            "type": "number",
            "minimum": 0,
            "description": "Vehicle value in dollars",
        },
        "accidentHistory": {
            "type": "number",
            "minimum": 0,
            "maximum": 10,
            "description": "Number of accidents in past 5 years",
        },
    },
    risk_level="safe",
)
def calculate_premium(args: dict[str, Any]) -> JsonBlock:
    logger.info(f"[TOOL CALLED] calculate_premium with args: {args}")
    return JsonBlock(
        data=premium_breakdown(args["age"], args["vehicleValue"], args["accidentHistory"])
    )


@tool(
    "get_vehicle_info",
    "Get detailed information about a vehicle by make and model",
    {
        "make": {"type": "string", "min_length": 1, "description": "Vehicle make (e.g., Toyota)"},
        "model": {"type": "string", "min_length": 1, "description": "Vehicle model (e.g., Camry)"},
        "year": {"type": "integer", "minimum": 1990, "maximum": 2025, "description": "Vehicle year"},
    },
    risk_level="safe",
)
async def get_vehicle_info(args: dict[str, Any]) -> JsonBlock:
    logger.info(f"[TOOL CALLED] get_vehicle_info with args: {args}")
    return JsonBlock(
        data={
            "make": args["make"],
            "model": args["model"],
            "year": args["year"],
            "safetyRating": 4.5,
            "averageValue": 25000,
            "theftRate": "Low",
            "repairCost": "Medium",
        }
    )


@tool(
    "compare_quotes",
    "Request premium quotes from several insurers and rank them by price",
    {
        "age": {"type": "number", "minimum": 16, "maximum": 100, "description": "Driver age"},
        "vehicleValue": {"type": "number", "minimum": 0, "description": "Vehicle value in dollars"},
        "accidentHistory": {
            "type": "number",
            "minimum": 0,
            "maximum": 10,
            "description": "Number of accidents in past 5 years",
        },
        "providers": {
            "type": "array",
            "required": False,
            "min_length": 1,
            "description": f"Insurers to ask (default: all of {sorted(PROVIDER_FACTORS)})",
        },
    },
    # Shares the driver's details with third parties
    risk_level="sensitive",
)
def compare_quotes(args: dict[str, Any]) -> JsonBlock:
    logger.info(f"[TOOL CALLED] compare_quotes with args: {args}")
    providers = args.get("providers") or list(PROVIDER_FACTORS)
    unknown = [p for p in providers if p not in PROVIDER_FACTORS]
    if unknown:
        raise ValueError(f"Unknown insurer(s): {unknown}")

    total = premium_breakdown(args["age"], args["vehicleValue"], args["accidentHistory"])[
        "totalPremium"
    ]
    quotes = sorted(
        (
            {"provider": name, "annualPremium": round(total * PROVIDER_FACTORS[name], 2)}
            for name in providers
        ),
        key=lambda q: q["annualPremium"],
    )
    return JsonBlock(data={"quotes": quotes, "cheapest": quotes[0]["provider"]})


TOOLS = [calculate_premium, get_vehicle_info, compare_quotes]
