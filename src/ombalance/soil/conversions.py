"""
Conversions between soil organic matter, organic carbon, C/N ratio and bulk density.
Used to estimate soil parameters that were not measured directly.

All functions return None when a required input is missing. As in the lab
data these formulas were fitted on, a zero reading counts as missing.
"""
from decimal import Decimal
from typing import Optional, Tuple, Union

from ombalance.core.constants import (
    BULK_DENSITY_RANGE,
    CARBON_FRACTION_OF_OM,
    CN_RATIO_RANGE,
    MG_PER_G,
    ORGANIC_CARBON_RANGE,
    ORGANIC_MATTER_RANGE,
    OTHER_DENSITY_POLYNOMIAL,
    PERCENT_TO_G_PER_KG,
    SANDY_DENSITY_INTERCEPT,
    SANDY_DENSITY_SLOPE,
    SANDY_SOIL_TYPES,
)
from ombalance.core.types import to_decimal

Number = Union[Decimal, float, int]


def clamp(value: Decimal, bounds: Tuple[Decimal, Decimal]) -> Decimal:
    """Clamp value into the inclusive (lower, upper) range"""
    lower, upper = bounds
    if value > upper:
        return upper
    if value < lower:
        return lower
    return value


def calculate_organic_carbon(som_loi: Optional[Number]) -> Optional[Decimal]:
    """
    Estimate organic carbon (g C/kg) from organic matter (% LOI).

    Args:
        som_loi: Soil organic matter content (%), loss on ignition

    Returns:
        Organic carbon clamped to [0.1, 600], or None
    """
    if not som_loi:
        return None

    organic_carbon = to_decimal(som_loi) * CARBON_FRACTION_OF_OM * PERCENT_TO_G_PER_KG
    return clamp(organic_carbon, ORGANIC_CARBON_RANGE)


def calculate_organic_matter(organic_carbon: Optional[Number]) -> Optional[Decimal]:
    """
    Estimate organic matter (% LOI) from organic carbon (g C/kg).

    Inverse of calculate_organic_carbon, clamped to [0.5, 75].
    """
    if not organic_carbon:
        return None

    som_loi = to_decimal(organic_carbon) / PERCENT_TO_G_PER_KG / CARBON_FRACTION_OF_OM
    return clamp(som_loi, ORGANIC_MATTER_RANGE)


def calculate_carbon_nitrogen_ratio(
    organic_carbon: Optional[Number],
    total_nitrogen: Optional[Number]
) -> Optional[Decimal]:
    """
    Calculate the C/N ratio of the soil.

    Args:
        organic_carbon: Organic carbon (g C/kg)
        total_nitrogen: Total nitrogen (mg N/kg)

    Returns:
        C/N ratio clamped to [5, 40], or None
    """
    if not organic_carbon or not total_nitrogen:
        return None

    cn_ratio = to_decimal(organic_carbon) / (to_decimal(total_nitrogen) / MG_PER_G)
    return clamp(cn_ratio, CN_RATIO_RANGE)


def calculate_bulk_density(
    som_loi: Optional[Number],
    soil_type: Optional[str]
) -> Optional[Decimal]:
    """
    Estimate bulk density (g/cm³) from organic matter and soil type.

    Sandy and loess soils use a reciprocal relation; clay and peat soils use
    a quartic polynomial in organic matter.

    Args:
        som_loi: Soil organic matter content (%)
        soil_type: Agricultural soil type

    Returns:
        Bulk density clamped to [0.5, 3], or None
    """
    if not som_loi or not soil_type:
        return None

    loi = to_decimal(som_loi)
    soil_type = getattr(soil_type, "value", soil_type)
    if soil_type in SANDY_SOIL_TYPES:
        density = Decimal(1) / (loi * SANDY_DENSITY_SLOPE + SANDY_DENSITY_INTERCEPT)
    else:
        density = Decimal(0)
        # Highest power first
        for power, coefficient in zip(range(len(OTHER_DENSITY_POLYNOMIAL) - 1, -1, -1),
                                      OTHER_DENSITY_POLYNOMIAL):
            density += coefficient * loi ** power

    return clamp(density, BULK_DENSITY_RANGE)
