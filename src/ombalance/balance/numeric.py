"""
Projection of the internal Decimal results to plain numbers.

Values are rounded half-up (away from zero) to whole kg OM/ha. Report
renderers depend on this rounding.
"""
from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable, List

from ombalance.core.types import (
    Contribution,
    FertilizerCategorySupply,
    OrganicMatterBalance,
    OrganicMatterBalanceField,
    OrganicMatterDegradation,
    OrganicMatterSupply,
)
from ombalance.data.contracts import (
    ContributionNumeric,
    CultivationSupplyNumeric,
    FertilizerCategorySupplyNumeric,
    FertilizerSupplyNumeric,
    OrganicMatterBalanceFieldNumeric,
    OrganicMatterBalanceNumeric,
    OrganicMatterDegradationNumeric,
    OrganicMatterSupplyNumeric,
    ResidueSupplyNumeric,
)

_WHOLE = Decimal("1")


def to_number(value: Decimal) -> int:
    """Round a Decimal half-up to the nearest integer"""
    return int(value.quantize(_WHOLE, rounding=ROUND_HALF_UP))


def _project_contributions(contributions: Iterable[Contribution]) -> List[ContributionNumeric]:
    return [ContributionNumeric(id=c.id, value=to_number(c.value)) for c in contributions]


def _project_category(category: FertilizerCategorySupply) -> FertilizerCategorySupplyNumeric:
    return FertilizerCategorySupplyNumeric(
        total=to_number(category.total),
        applications=_project_contributions(category.applications),
    )


def project_supply(supply: OrganicMatterSupply) -> OrganicMatterSupplyNumeric:
    fertilizers = supply.fertilizers
    return OrganicMatterSupplyNumeric(
        total=to_number(supply.total),
        fertilizers=FertilizerSupplyNumeric(
            total=to_number(fertilizers.total),
            manure=_project_category(fertilizers.manure),
            compost=_project_category(fertilizers.compost),
            other=_project_category(fertilizers.other),
        ),
        cultivations=CultivationSupplyNumeric(
            total=to_number(supply.cultivations.total),
            cultivations=_project_contributions(supply.cultivations.cultivations),
        ),
        residues=ResidueSupplyNumeric(
            total=to_number(supply.residues.total),
            cultivations=_project_contributions(supply.residues.cultivations),
        ),
    )


def project_degradation(degradation: OrganicMatterDegradation) -> OrganicMatterDegradationNumeric:
    return OrganicMatterDegradationNumeric(total=to_number(degradation.total))


def project_field_balance(field_balance: OrganicMatterBalanceField) -> OrganicMatterBalanceFieldNumeric:
    """Numeric version of a field balance"""
    return OrganicMatterBalanceFieldNumeric(
        field_id=field_balance.field_id,
        balance=to_number(field_balance.balance),
        supply=project_supply(field_balance.supply),
        degradation=project_degradation(field_balance.degradation),
    )


def project_farm_balance(farm_balance: OrganicMatterBalance) -> OrganicMatterBalanceNumeric:
    """
    Numeric version of the farm balance.

    The per-field results are already numeric and are passed through as is.
    """
    return OrganicMatterBalanceNumeric(
        balance=to_number(farm_balance.balance),
        supply=to_number(farm_balance.supply),
        degradation=to_number(farm_balance.degradation),
        fields=list(farm_balance.fields),
        has_errors=farm_balance.has_errors,
        field_error_messages=list(farm_balance.field_error_messages),
    )
