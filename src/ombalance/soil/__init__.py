"""Soil analysis combination and pedotransfer conversions."""
from ombalance.soil.analysis import combine_soil_analyses, sort_by_sampling_date
from ombalance.soil.conversions import (
    calculate_bulk_density,
    calculate_carbon_nitrogen_ratio,
    calculate_organic_carbon,
    calculate_organic_matter,
)

__all__ = [
    "combine_soil_analyses",
    "sort_by_sampling_date",
    # Conversions
    "calculate_bulk_density",
    "calculate_carbon_nitrogen_ratio",
    "calculate_organic_carbon",
    "calculate_organic_matter",
]
