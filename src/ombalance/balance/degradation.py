"""
Degradation of soil organic matter (SOM).

Annual SOM turnover is estimated from organic matter content, bulk density and
the depth of the topsoil that is considered, corrected for the regional
average temperature. The result is negative (a loss) in kg OM/ha over the
time frame.
"""
import logging
from decimal import Decimal
from typing import Mapping, Optional, Sequence

from ombalance.core.constants import (
    AVERAGE_ANNUAL_TEMPERATURE_C,
    DAYS_PER_YEAR,
    DEGRADATION_INTERCEPT,
    DEGRADATION_LN_COEFFICIENT,
    DEPTH_ARABLE_CM,
    DEPTH_GRASSLAND_CM,
    G_CM3_TO_KG_M3,
    GRASSLAND_CROP_ROTATION,
    MAX_ANNUAL_DEGRADATION,
    Q10_TEMPERATURE_STEP_C,
    REFERENCE_TEMPERATURE_C,
)
from ombalance.core.exceptions import DegradationCalculationError, ErrorContext
from ombalance.core.types import (
    ZERO,
    CatalogueID,
    LandUse,
    OrganicMatterDegradation,
    to_decimal,
)
from ombalance.data.contracts import Cultivation, CultivationDetail, TimeFrame
from ombalance.soil.analysis import CombinedSoilAnalysis

logger = logging.getLogger("ombalance.balance.degradation")


def determine_land_use(
    cultivations: Sequence[Cultivation],
    cultivation_details: Mapping[CatalogueID, CultivationDetail]
) -> LandUse:
    """Grassland if any cultivation belongs to the grass rotation, else arable"""
    for cultivation in cultivations:
        detail = cultivation_details.get(cultivation.catalogue_id)
        if detail is not None and detail.crop_rotation == GRASSLAND_CROP_ROTATION:
            return LandUse.GRASSLAND
    return LandUse.ARABLE


def temperature_correction(temperature_c: Decimal = AVERAGE_ANNUAL_TEMPERATURE_C) -> Decimal:
    """Q10 rate correction: the rate doubles per 10 °C relative to 13 °C"""
    exponent = (temperature_c - REFERENCE_TEMPERATURE_C) / Q10_TEMPERATURE_STEP_C
    return Decimal(2) ** exponent


def calculate_years(time_frame: TimeFrame) -> Decimal:
    """Length of the time frame in years, counting both end days"""
    days = (time_frame.end - time_frame.start).days + 1
    return Decimal(days) / DAYS_PER_YEAR


def calculate_annual_degradation(
    som_loi: Decimal,
    bulk_density: Decimal,
    land_use: LandUse
) -> Decimal:
    """
    Annual SOM degradation in kg OM/ha/yr, clamped to [0, 3500].

    Args:
        som_loi: Soil organic matter content (%), must be positive
        bulk_density: Bulk density (g/cm³)
        land_use: Grassland (10 cm topsoil) or arable (30 cm)
    """
    depth = DEPTH_GRASSLAND_CM if land_use == LandUse.GRASSLAND else DEPTH_ARABLE_CM
    rate = som_loi.ln() * DEGRADATION_LN_COEFFICIENT + DEGRADATION_INTERCEPT

    annual = (
        som_loi
        * depth
        * (bulk_density * G_CM3_TO_KG_M3)
        * rate
        * temperature_correction()
    )

    if annual < ZERO:
        return ZERO
    if annual > MAX_ANNUAL_DEGRADATION:
        return MAX_ANNUAL_DEGRADATION
    return annual


def calculate_organic_matter_degradation(
    soil_analysis: CombinedSoilAnalysis,
    cultivations: Sequence[Cultivation],
    cultivation_details: Mapping[CatalogueID, CultivationDetail],
    time_frame: TimeFrame
) -> OrganicMatterDegradation:
    """
    SOM degradation of a field over the time frame.

    Without organic matter or bulk density data the degradation cannot be
    known and is reported as zero, not as an error.
    """
    som_loi: Optional[Decimal] = to_decimal(soil_analysis.get("som_loi"))
    bulk_density: Optional[Decimal] = to_decimal(soil_analysis.get("bulk_density"))

    if som_loi is None or bulk_density is None:
        logger.debug("No organic matter or bulk density available, degradation set to 0")
        return OrganicMatterDegradation(total=ZERO)

    land_use = determine_land_use(cultivations, cultivation_details)

    # ln() is undefined for non-positive values
    if som_loi <= ZERO:
        return OrganicMatterDegradation(total=ZERO)

    try:
        annual = calculate_annual_degradation(som_loi, bulk_density, land_use)
        total = annual * calculate_years(time_frame)
    except ArithmeticError as e:
        raise DegradationCalculationError(
            f"Failed to calculate organic matter degradation: {e}",
            context=ErrorContext(component="degradation"),
        ) from e

    logger.debug(f"Degradation ({land_use.value}): {annual} kg OM/ha/yr")
    return OrganicMatterDegradation(total=-total)
