"""
Supply of effective organic matter (EOM) to a field.

Three independent sources are summed: fertilizer applications, the
cultivations themselves and crop residues left on the field. All values are
in kg EOM/ha.
"""
import logging
from decimal import Decimal
from typing import List, Mapping, Sequence

from ombalance.core.constants import COMPOST, G_PER_KG, MANURE, OTHER
from ombalance.core.exceptions import (
    ErrorContext,
    MissingCatalogueEntryError,
    SupplyCalculationError,
)
from ombalance.core.types import (
    ZERO,
    CatalogueID,
    Contribution,
    CultivationSupply,
    FertilizerCategorySupply,
    FertilizerSupply,
    OrganicMatterSupply,
    ResidueSupply,
    to_decimal,
)
from ombalance.data.contracts import (
    Cultivation,
    CultivationDetail,
    FertilizerApplication,
    FertilizerDetail,
    TimeFrame,
)

logger = logging.getLogger("ombalance.balance.supply")


def calculate_supply_by_fertilizers(
    applications: Sequence[FertilizerApplication],
    fertilizer_details: Mapping[CatalogueID, FertilizerDetail]
) -> FertilizerSupply:
    """
    EOM supplied by fertilizer applications, split into manure, compost and other.

    The catalogue gives EOM in g per kg product and applications are in kg
    product per ha, so each application supplies ``amount * eom / 1000``.
    Fertilizers without an EOM value (most mineral fertilizers) supply nothing.

    Raises:
        MissingCatalogueEntryError: If an application references a fertilizer
            that is not in the catalogue
    """
    totals = {MANURE: ZERO, COMPOST: ZERO, OTHER: ZERO}
    entries: dict = {MANURE: [], COMPOST: [], OTHER: []}

    for application in applications:
        detail = fertilizer_details.get(application.catalogue_id)
        if detail is None:
            raise MissingCatalogueEntryError(
                f"Fertilizer application {application.application_id} has no fertilizer "
                f"details for fertilizer {application.catalogue_id}",
                catalogue_id=application.catalogue_id,
                context=ErrorContext(component="supply", operation="fertilizers"),
            )
        if detail.eom is None:
            continue

        amount = to_decimal(application.amount) if application.amount is not None else ZERO
        value = amount * to_decimal(detail.eom) / G_PER_KG

        # Everything that is not manure or compost is booked as other
        category = detail.fertilizer_type if detail.fertilizer_type in (MANURE, COMPOST) else OTHER
        totals[category] += value
        entries[category].append(Contribution(id=application.application_id, value=value))

    return FertilizerSupply(
        total=totals[MANURE] + totals[COMPOST] + totals[OTHER],
        manure=FertilizerCategorySupply(totals[MANURE], tuple(entries[MANURE])),
        compost=FertilizerCategorySupply(totals[COMPOST], tuple(entries[COMPOST])),
        other=FertilizerCategorySupply(totals[OTHER], tuple(entries[OTHER])),
    )


def calculate_supply_by_cultivations(
    cultivations: Sequence[Cultivation],
    cultivation_details: Mapping[CatalogueID, CultivationDetail]
) -> CultivationSupply:
    """
    EOM supplied by the crops themselves.

    The catalogue value is already an annual figure and is not scaled by how
    long the cultivation lasted.
    """
    total = ZERO
    contributions: List[Contribution] = []

    for cultivation in cultivations:
        detail = cultivation_details.get(cultivation.catalogue_id)
        if detail is None or not detail.eom:
            continue

        value = to_decimal(detail.eom)
        total += value
        contributions.append(Contribution(id=cultivation.cultivation_id, value=value))

    return CultivationSupply(total=total, cultivations=tuple(contributions))


def calculate_supply_by_residues(
    cultivations: Sequence[Cultivation],
    cultivation_details: Mapping[CatalogueID, CultivationDetail],
    time_frame: TimeFrame
) -> ResidueSupply:
    """
    EOM supplied by crop residues.

    Residues count when they were left on the field and the cultivation
    ended within the time frame (both ends inclusive).
    """
    total = ZERO
    contributions: List[Contribution] = []

    for cultivation in cultivations:
        if not cultivation.crop_residue_left:
            continue
        if cultivation.end is None:
            continue
        if not (time_frame.start <= cultivation.end <= time_frame.end):
            continue

        detail = cultivation_details.get(cultivation.catalogue_id)
        if detail is None or not detail.eom_residues:
            continue

        value = to_decimal(detail.eom_residues)
        total += value
        contributions.append(Contribution(id=cultivation.cultivation_id, value=value))

    return ResidueSupply(total=total, cultivations=tuple(contributions))


def calculate_organic_matter_supply(
    cultivations: Sequence[Cultivation],
    fertilizer_applications: Sequence[FertilizerApplication],
    cultivation_details: Mapping[CatalogueID, CultivationDetail],
    fertilizer_details: Mapping[CatalogueID, FertilizerDetail],
    time_frame: TimeFrame
) -> OrganicMatterSupply:
    """
    Total EOM supply of a field from all sources.

    Raises:
        SupplyCalculationError: If any of the sources cannot be calculated;
            the underlying error is kept as ``__cause__``
    """
    try:
        fertilizers = calculate_supply_by_fertilizers(fertilizer_applications, fertilizer_details)
        crops = calculate_supply_by_cultivations(cultivations, cultivation_details)
        residues = calculate_supply_by_residues(cultivations, cultivation_details, time_frame)
    except Exception as e:
        raise SupplyCalculationError(
            f"Failed to calculate organic matter supply: {e}",
            context=ErrorContext(component="supply"),
        ) from e

    total: Decimal = fertilizers.total + crops.total + residues.total
    logger.debug(
        f"Supply: fertilizers={fertilizers.total} cultivations={crops.total} "
        f"residues={residues.total}"
    )

    return OrganicMatterSupply(
        total=total,
        fertilizers=fertilizers,
        cultivations=crops,
        residues=residues,
    )
