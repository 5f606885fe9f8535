"""Ready-made example tools."""

from .insurance import TOOLS, calculate_premium, compare_quotes, get_vehicle_info

__all__ = ["TOOLS", "calculate_premium", "compare_quotes", "get_vehicle_info"]
