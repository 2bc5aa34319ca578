"""
Organic matter balance of a single field.
"""
import logging
from types import MappingProxyType
from typing import Iterable, Mapping, TypeVar

from ombalance.core.constants import BALANCE_SOIL_PARAMETERS
from ombalance.core.types import (
    CatalogueID,
    OrganicMatterBalanceField,
    OrganicMatterDegradation,
    OrganicMatterSupply,
)
from ombalance.data.contracts import (
    OrganicMatterBalanceFieldInput,
    OrganicMatterBalanceFieldNumeric,
)
from ombalance.balance.degradation import calculate_organic_matter_degradation
from ombalance.balance.numeric import project_field_balance
from ombalance.balance.supply import calculate_organic_matter_supply
from ombalance.soil.analysis import combine_soil_analyses

logger = logging.getLogger("ombalance.balance.field")

D = TypeVar("D")


def build_catalogue_lookup(details: Iterable[D]) -> Mapping[CatalogueID, D]:
    """Read-only catalogue_id -> detail mapping; later duplicates win"""
    return MappingProxyType({detail.catalogue_id: detail for detail in details})


def calculate_organic_matter_balance_field_decimal(
    field_input: OrganicMatterBalanceFieldInput
) -> OrganicMatterBalanceField:
    """
    Balance of one field with full Decimal precision.

    Errors from the soil or supply calculation propagate to the caller.
    """
    field = field_input.field_input.field

    # Buffer strips receive no fertilizer and are not balanced
    if field.is_buffer_strip:
        logger.debug(f"Field {field.field_id} is a buffer strip, balance set to 0")
        supply = OrganicMatterSupply()
        degradation = OrganicMatterDegradation()
        return OrganicMatterBalanceField(
            field_id=field.field_id,
            balance=supply.total + degradation.total,
            supply=supply,
            degradation=degradation,
        )

    fertilizer_details = build_catalogue_lookup(field_input.fertilizer_details)
    cultivation_details = build_catalogue_lookup(field_input.cultivation_details)
    records = field_input.field_input

    soil_analysis = combine_soil_analyses(
        records.soil_analyses,
        BALANCE_SOIL_PARAMETERS,
        estimate_missing=True,
    )

    supply = calculate_organic_matter_supply(
        records.cultivations,
        records.fertilizer_applications,
        cultivation_details,
        fertilizer_details,
        field_input.time_frame,
    )

    degradation = calculate_organic_matter_degradation(
        soil_analysis,
        records.cultivations,
        cultivation_details,
        field_input.time_frame,
    )

    return OrganicMatterBalanceField(
        field_id=field.field_id,
        balance=supply.total + degradation.total,
        supply=supply,
        degradation=degradation,
    )


def calculate_organic_matter_balance_field(
    field_input: OrganicMatterBalanceFieldInput
) -> OrganicMatterBalanceFieldNumeric:
    """
    Balance of one field as plain numbers (kg OM/ha).

    balance = EOM supply + SOM degradation, where degradation is negative.
    This is a pure function of its input, suitable for caching.
    """
    return project_field_balance(calculate_organic_matter_balance_field_decimal(field_input))
