"""
Shared fixtures and factories for the organic matter balance tests.
"""
from datetime import date
from typing import List, Optional

import pytest

from ombalance.balance import farm
from ombalance.core.config import set_config
from ombalance.data.contracts import (
    ContributionNumeric,
    Cultivation,
    CultivationDetail,
    CultivationSupplyNumeric,
    FertilizerApplication,
    FertilizerCategorySupplyNumeric,
    FertilizerDetail,
    FertilizerSupplyNumeric,
    FieldBalanceSuccess,
    FieldDetails,
    FieldInput,
    OrganicMatterBalanceFieldInput,
    OrganicMatterBalanceFieldNumeric,
    OrganicMatterDegradationNumeric,
    OrganicMatterSupplyNumeric,
    ResidueSupplyNumeric,
    SoilAnalysis,
    TimeFrame,
)


@pytest.fixture(autouse=True)
def reset_global_state():
    """Every test starts from the default configuration and empty shared caches"""
    set_config(None)
    farm._shared_caches.clear()
    yield
    set_config(None)
    farm._shared_caches.clear()


@pytest.fixture
def time_frame() -> TimeFrame:
    return TimeFrame(start=date(2023, 1, 1), end=date(2023, 12, 31))


@pytest.fixture
def cultivation_details() -> List[CultivationDetail]:
    return [
        CultivationDetail(catalogue_id="wheat", crop_rotation="cereal", eom=863, eom_residues=1200),
        CultivationDetail(catalogue_id="grass", crop_rotation="grass", eom=1500, eom_residues=None),
        CultivationDetail(catalogue_id="potato", crop_rotation="potato", eom=0, eom_residues=400),
    ]


@pytest.fixture
def fertilizer_details() -> List[FertilizerDetail]:
    return [
        FertilizerDetail(catalogue_id="cattle-slurry", eom=33, fertilizer_type="manure"),
        FertilizerDetail(catalogue_id="green-compost", eom=180, fertilizer_type="compost"),
        FertilizerDetail(catalogue_id="can", eom=None, fertilizer_type="mineral"),
        FertilizerDetail(catalogue_id="digestate", eom=20, fertilizer_type="other"),
    ]


def make_soil_analysis(
    analysis_id: str = "soil-1",
    sampling_date: Optional[date] = date(2022, 3, 1),
    som_loi: Optional[float] = 3.0,
    bulk_density: Optional[float] = 1.3,
    soil_type: Optional[str] = "zeeklei",
    **kwargs
) -> SoilAnalysis:
    return SoilAnalysis(
        analysis_id=analysis_id,
        sampling_date=sampling_date,
        som_loi=som_loi,
        bulk_density=bulk_density,
        soil_type=soil_type,
        **kwargs
    )


def make_field_input(
    field_id: str = "field-1",
    area_ha: Optional[float] = 10.0,
    is_buffer_strip: bool = False,
    cultivations: Optional[List[Cultivation]] = None,
    fertilizer_applications: Optional[List[FertilizerApplication]] = None,
    soil_analyses: Optional[List[SoilAnalysis]] = None,
) -> FieldInput:
    if cultivations is None:
        cultivations = [
            Cultivation(
                cultivation_id=f"{field_id}-wheat",
                catalogue_id="wheat",
                start=date(2022, 10, 15),
                end=date(2023, 8, 1),
                crop_residue_left=True,
            )
        ]
    if fertilizer_applications is None:
        fertilizer_applications = [
            FertilizerApplication(
                application_id=f"{field_id}-slurry",
                catalogue_id="cattle-slurry",
                amount=30000,
                applied_on=date(2023, 3, 15),
            )
        ]
    if soil_analyses is None:
        soil_analyses = [make_soil_analysis()]

    return FieldInput(
        field=FieldDetails(field_id=field_id, area_ha=area_ha, is_buffer_strip=is_buffer_strip),
        cultivations=cultivations,
        fertilizer_applications=fertilizer_applications,
        soil_analyses=soil_analyses,
    )


def make_field_balance_input(
    field_input: FieldInput,
    fertilizer_details: List[FertilizerDetail],
    cultivation_details: List[CultivationDetail],
    time_frame: TimeFrame,
) -> OrganicMatterBalanceFieldInput:
    return OrganicMatterBalanceFieldInput(
        field_input=field_input,
        fertilizer_details=fertilizer_details,
        cultivation_details=cultivation_details,
        time_frame=time_frame,
    )


def make_field_result(
    field_id: str,
    area_ha: float,
    supply: int,
    degradation: int,
    is_buffer_strip: bool = False,
) -> FieldBalanceSuccess:
    """Successful numeric field result with the given totals"""
    empty_category = FertilizerCategorySupplyNumeric(total=0, applications=[])
    balance = OrganicMatterBalanceFieldNumeric(
        field_id=field_id,
        balance=supply + degradation,
        supply=OrganicMatterSupplyNumeric(
            total=supply,
            fertilizers=FertilizerSupplyNumeric(
                total=0, manure=empty_category, compost=empty_category, other=empty_category
            ),
            cultivations=CultivationSupplyNumeric(
                total=supply,
                cultivations=[ContributionNumeric(id=f"{field_id}-crop", value=supply)],
            ),
            residues=ResidueSupplyNumeric(total=0, cultivations=[]),
        ),
        degradation=OrganicMatterDegradationNumeric(total=degradation),
    )
    return FieldBalanceSuccess(
        field_id=field_id,
        area_ha=area_ha,
        is_buffer_strip=is_buffer_strip,
        balance=balance,
    )
