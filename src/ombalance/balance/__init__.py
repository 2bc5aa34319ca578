"""Supply, degradation and balance calculations."""
from ombalance.balance.supply import calculate_organic_matter_supply
from ombalance.balance.degradation import calculate_organic_matter_degradation
from ombalance.balance.field import (
    calculate_organic_matter_balance_field,
    calculate_organic_matter_balance_field_decimal,
)
from ombalance.balance.cache import (
    InMemoryCalculationCache,
    NullCalculationCache,
    generate_calculation_hash,
    with_calculation_cache,
)
from ombalance.balance.farm import (
    OrganicMatterBalanceCalculator,
    aggregate_field_results,
    calculate_organic_matter_balance,
    get_organic_matter_balance,
)

__all__ = [
    "calculate_organic_matter_supply",
    "calculate_organic_matter_degradation",
    "calculate_organic_matter_balance_field",
    "calculate_organic_matter_balance_field_decimal",
    # Caching
    "InMemoryCalculationCache",
    "NullCalculationCache",
    "generate_calculation_hash",
    "with_calculation_cache",
    # Farm
    "OrganicMatterBalanceCalculator",
    "aggregate_field_results",
    "calculate_organic_matter_balance",
    "get_organic_matter_balance",
]
