"""
Organic matter balance engine.

Computes how much effective organic matter is supplied to the soil versus how
much soil organic matter degrades, per field and as an area-weighted farm
average.
"""
from ombalance.balance.farm import (
    OrganicMatterBalanceCalculator,
    calculate_organic_matter_balance,
    get_organic_matter_balance,
)
from ombalance.balance.field import calculate_organic_matter_balance_field
from ombalance.core.logging_config import setup_logging

__version__ = "0.1.0"

__all__ = [
    "OrganicMatterBalanceCalculator",
    "calculate_organic_matter_balance",
    "calculate_organic_matter_balance_field",
    "get_organic_matter_balance",
    "setup_logging",
]
