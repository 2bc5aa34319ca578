"""
Combination of multiple soil analyses into one representative record per field.
"""
import logging
from decimal import Decimal
from typing import Dict, Iterable, List, Optional, Sequence, Union

from ombalance.core.constants import ESTIMABLE_SOIL_PARAMETERS
from ombalance.core.exceptions import MissingSoilParameterError
from ombalance.core.types import to_decimal
from ombalance.data.contracts import SoilAnalysis
from ombalance.soil.conversions import (
    calculate_bulk_density,
    calculate_carbon_nitrogen_ratio,
    calculate_organic_carbon,
    calculate_organic_matter,
)

logger = logging.getLogger("ombalance.soil.analysis")

SoilValue = Union[Decimal, str]
CombinedSoilAnalysis = Dict[str, Optional[SoilValue]]

# Non-numeric parameters are passed through unchanged
_CATEGORICAL_PARAMETERS = frozenset({"soil_type"})


def sort_by_sampling_date(analyses: Iterable[SoilAnalysis]) -> List[SoilAnalysis]:
    """Most recent first; undated analyses follow in input order"""
    analyses = list(analyses)
    dated = [a for a in analyses if a.sampling_date is not None]
    undated = [a for a in analyses if a.sampling_date is None]
    # sorted() is stable, so analyses on the same date keep their input order
    dated = sorted(dated, key=lambda a: a.sampling_date, reverse=True)
    return dated + undated


def _value(analysis: SoilAnalysis, parameter: str) -> Optional[SoilValue]:
    raw = getattr(analysis, parameter)
    if raw is None:
        return None
    if parameter in _CATEGORICAL_PARAMETERS:
        return getattr(raw, "value", raw)
    return to_decimal(raw)


def _estimate_missing(combined: CombinedSoilAnalysis) -> None:
    """Fill gaps from other measured values, in a fixed priority order"""
    if combined["organic_carbon"] is None and combined["som_loi"] is not None:
        combined["organic_carbon"] = calculate_organic_carbon(combined["som_loi"])
    if combined["som_loi"] is None and combined["organic_carbon"] is not None:
        combined["som_loi"] = calculate_organic_matter(combined["organic_carbon"])

    if (combined["cn_ratio"] is None
            and combined["organic_carbon"] is not None
            and combined["total_nitrogen"] is not None):
        combined["cn_ratio"] = calculate_carbon_nitrogen_ratio(
            combined["organic_carbon"], combined["total_nitrogen"]
        )

    if (combined["bulk_density"] is None
            and combined["som_loi"] is not None
            and combined["soil_type"] is not None):
        combined["bulk_density"] = calculate_bulk_density(
            combined["som_loi"], combined["soil_type"]
        )


def combine_soil_analyses(
    analyses: Iterable[SoilAnalysis],
    parameters: Sequence[str],
    estimate_missing: bool = False
) -> CombinedSoilAnalysis:
    """
    Combine soil analyses into a single record with the most recent value of
    each parameter.

    Args:
        analyses: Soil analyses of one field, in any order
        parameters: Parameters the caller needs
        estimate_missing: Estimate absent parameters from measured ones

    Returns:
        Mapping of each requested parameter to its value (Decimal, or str
        for the soil type)

    Raises:
        ValueError: If an unknown parameter is requested
        MissingSoilParameterError: If requested parameters remain missing
    """
    unknown = [p for p in parameters if p not in ESTIMABLE_SOIL_PARAMETERS]
    if unknown:
        raise ValueError(f"Unknown soil parameters requested: {', '.join(unknown)}")

    ordered = sort_by_sampling_date(analyses)

    combined: CombinedSoilAnalysis = {}
    for parameter in ESTIMABLE_SOIL_PARAMETERS:
        combined[parameter] = None
        for analysis in ordered:
            value = _value(analysis, parameter)
            # 0 is a measured value, only None counts as missing
            if value is not None:
                combined[parameter] = value
                break

    if estimate_missing:
        _estimate_missing(combined)

    selected = {parameter: combined[parameter] for parameter in parameters}

    missing = [parameter for parameter, value in selected.items() if value is None]
    if missing:
        raise MissingSoilParameterError(missing)

    logger.debug(f"Combined {len(ordered)} soil analyses into {sorted(selected)}")
    return selected

