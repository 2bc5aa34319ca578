"""
Model coefficients, clamp bounds, and system-wide constants.
"""
from decimal import Decimal
from typing import Final, FrozenSet, Tuple

# Soil property clamp ranges (lower, upper)
ORGANIC_CARBON_RANGE: Final[Tuple[Decimal, Decimal]] = (Decimal("0.1"), Decimal("600"))  # g C/kg
ORGANIC_MATTER_RANGE: Final[Tuple[Decimal, Decimal]] = (Decimal("0.5"), Decimal("75"))  # % LOI
CN_RATIO_RANGE: Final[Tuple[Decimal, Decimal]] = (Decimal("5"), Decimal("40"))
BULK_DENSITY_RANGE: Final[Tuple[Decimal, Decimal]] = (Decimal("0.5"), Decimal("3"))  # g/cm³

# van Bemmelen style conversion between organic matter and organic carbon
CARBON_FRACTION_OF_OM: Final[Decimal] = Decimal("0.5")
PERCENT_TO_G_PER_KG: Final[Decimal] = Decimal("10")

# Bulk density pedotransfer coefficients
SANDY_SOIL_TYPES: Final[FrozenSet[str]] = frozenset({"dekzand", "dalgrond", "duinzand", "loess"})
SANDY_DENSITY_SLOPE: Final[Decimal] = Decimal("0.02525")
SANDY_DENSITY_INTERCEPT: Final[Decimal] = Decimal("0.6541")
# x^4, x^3, x^2, x, constant
OTHER_DENSITY_POLYNOMIAL: Final[Tuple[Decimal, ...]] = (
    Decimal("0.00000067"),
    Decimal("-0.00007792"),
    Decimal("0.00314712"),
    Decimal("-0.06039523"),
    Decimal("1.33932206"),
)

# SOM degradation
GRASSLAND_CROP_ROTATION: Final[str] = "grass"
DEPTH_GRASSLAND_CM: Final[Decimal] = Decimal("10")
DEPTH_ARABLE_CM: Final[Decimal] = Decimal("30")
# Regional average annual temperature; fixed for now
AVERAGE_ANNUAL_TEMPERATURE_C: Final[Decimal] = Decimal("9.3")
REFERENCE_TEMPERATURE_C: Final[Decimal] = Decimal("13")
Q10_TEMPERATURE_STEP_C: Final[Decimal] = Decimal("10")
DEGRADATION_LN_COEFFICIENT: Final[Decimal] = Decimal("-0.008934")
DEGRADATION_INTERCEPT: Final[Decimal] = Decimal("0.038228")
MAX_ANNUAL_DEGRADATION: Final[Decimal] = Decimal("3500")  # kg OM/ha/yr
DAYS_PER_YEAR: Final[Decimal] = Decimal("365")

# Unit conversions
G_PER_KG: Final[Decimal] = Decimal("1000")
MG_PER_G: Final[Decimal] = Decimal("1000")
G_CM3_TO_KG_M3: Final[Decimal] = Decimal("1000")

# Fertilizer supply buckets
MANURE: Final[str] = "manure"
COMPOST: Final[str] = "compost"
OTHER: Final[str] = "other"

# Farm aggregation
DEFAULT_BATCH_SIZE: Final[int] = 50

# Soil parameters that can be combined (and partly estimated) across analyses
ESTIMABLE_SOIL_PARAMETERS: Final[Tuple[str, ...]] = (
    "som_loi",
    "organic_carbon",
    "total_nitrogen",
    "cn_ratio",
    "bulk_density",
    "soil_type",
)

# Parameters the organic matter balance needs from the combined soil analysis
BALANCE_SOIL_PARAMETERS: Final[Tuple[str, ...]] = ("som_loi", "bulk_density", "soil_type")

# Cache function names
FIELD_BALANCE_FUNCTION: Final[str] = "calculate_organic_matter_balance_field"
FARM_BALANCE_FUNCTION: Final[str] = "calculate_organic_matter_balance"

# Bump whenever a formula or coefficient changes so cached results are invalidated
CALCULATOR_VERSION: Final[str] = "2025.1"
