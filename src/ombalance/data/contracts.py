"""
Data contracts and schemas for the organic matter balance engine.
Inputs arrive already fetched and authorized; these models only validate shape.
Numeric inputs are kept as Decimal; floats are converted through their string form.
"""
from datetime import date
from decimal import Decimal
from typing import Annotated, List, Literal, Optional, Union
from enum import Enum
from pydantic import BaseModel, ConfigDict, Field, model_validator
import pandas as pd

from ombalance.core.types import CatalogueID, FieldID


class SoilType(str, Enum):
    """Agricultural soil types"""
    MOERIGE_KLEI = "moerige_klei"
    RIVIERKLEI = "rivierklei"
    DEKZAND = "dekzand"
    ZEEKLEI = "zeeklei"
    DALGROND = "dalgrond"
    VEEN = "veen"
    LOESS = "loess"
    DUINZAND = "duinzand"
    MAASKLEI = "maasklei"


class CropRotation(str, Enum):
    """Crop rotation classes of the cultivation catalogue"""
    OTHER = "other"
    CLOVER = "clover"
    NATURE = "nature"
    POTATO = "potato"
    GRASS = "grass"
    RAPESEED = "rapeseed"
    STARCH = "starch"
    MAIZE = "maize"
    CEREAL = "cereal"
    SUGARBEET = "sugarbeet"
    ALFALFA = "alfalfa"
    CATCHCROP = "catchcrop"


class FertilizerType(str, Enum):
    """Fertilizer categories of the fertilizer catalogue"""
    MANURE = "manure"
    COMPOST = "compost"
    MINERAL = "mineral"
    OTHER = "other"


class _Contract(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True, use_enum_values=True)


# --- Input contracts ---

class TimeFrame(_Contract):
    """Calculation period, both ends inclusive"""
    start: date
    end: date

    @model_validator(mode="after")
    def validate_order(self):
        if self.end < self.start:
            raise ValueError("time frame end must not be before start")
        return self


class FieldDetails(_Contract):
    """Core details of a field"""
    field_id: FieldID
    name: Optional[str] = None
    area_ha: Optional[Decimal] = Field(default=None, ge=0)
    is_buffer_strip: bool = False
    start: Optional[date] = None
    end: Optional[date] = None


class Cultivation(_Contract):
    """A cultivation on a field"""
    cultivation_id: str
    catalogue_id: CatalogueID
    name: Optional[str] = None
    start: Optional[date] = None
    end: Optional[date] = None  # termination date
    crop_residue_left: Optional[bool] = None


class FertilizerApplication(_Contract):
    """A fertilizer application on a field"""
    application_id: str
    catalogue_id: CatalogueID
    amount: Optional[Decimal] = Field(default=None, ge=0)  # kg product / ha
    applied_on: Optional[date] = None
    method: Optional[str] = None
    name: Optional[str] = None


class SoilAnalysis(_Contract):
    """A (partial) soil analysis record"""
    analysis_id: str
    sampling_date: Optional[date] = None
    som_loi: Optional[Decimal] = Field(default=None, ge=0)  # % (loss on ignition)
    organic_carbon: Optional[Decimal] = Field(default=None, ge=0)  # g C / kg
    total_nitrogen: Optional[Decimal] = Field(default=None, ge=0)  # mg N / kg
    cn_ratio: Optional[Decimal] = Field(default=None, ge=0)
    bulk_density: Optional[Decimal] = Field(default=None, ge=0)  # g / cm³
    soil_type: Optional[SoilType] = None


class FieldInput(_Contract):
    """All records of one field needed for the balance"""
    field: FieldDetails
    cultivations: List[Cultivation] = Field(default_factory=list)
    fertilizer_applications: List[FertilizerApplication] = Field(default_factory=list)
    soil_analyses: List[SoilAnalysis] = Field(default_factory=list)


class CultivationDetail(_Contract):
    """Cultivation catalogue entry"""
    catalogue_id: CatalogueID
    crop_rotation: Optional[CropRotation] = None
    eom: Optional[Decimal] = None  # kg EOM / ha / yr
    eom_residues: Optional[Decimal] = None  # kg EOM / ha / yr


class FertilizerDetail(_Contract):
    """Fertilizer catalogue entry"""
    catalogue_id: CatalogueID
    eom: Optional[Decimal] = None  # g EOM / kg product
    fertilizer_type: Optional[FertilizerType] = None


class OrganicMatterBalanceInput(_Contract):
    """Complete input for the farm-level calculation"""
    fields: List[FieldInput]
    fertilizer_details: List[FertilizerDetail] = Field(default_factory=list)
    cultivation_details: List[CultivationDetail] = Field(default_factory=list)
    time_frame: TimeFrame


class OrganicMatterBalanceFieldInput(_Contract):
    """
    Input of the field-level calculation.

    Carries only the catalogue entries the field references, so the
    calculation is a pure function of this object and can be cached on it.
    """
    field_input: FieldInput
    fertilizer_details: List[FertilizerDetail] = Field(default_factory=list)
    cultivation_details: List[CultivationDetail] = Field(default_factory=list)
    time_frame: TimeFrame


# --- Numeric output contracts ---

class ContributionNumeric(_Contract):
    id: str
    value: int


class FertilizerCategorySupplyNumeric(_Contract):
    total: int
    applications: List[ContributionNumeric]


class FertilizerSupplyNumeric(_Contract):
    total: int
    manure: FertilizerCategorySupplyNumeric
    compost: FertilizerCategorySupplyNumeric
    other: FertilizerCategorySupplyNumeric


class CultivationSupplyNumeric(_Contract):
    total: int
    cultivations: List[ContributionNumeric]


class ResidueSupplyNumeric(_Contract):
    total: int
    cultivations: List[ContributionNumeric]


class OrganicMatterSupplyNumeric(_Contract):
    total: int
    fertilizers: FertilizerSupplyNumeric
    cultivations: CultivationSupplyNumeric
    residues: ResidueSupplyNumeric


class OrganicMatterDegradationNumeric(_Contract):
    total: int


class OrganicMatterBalanceFieldNumeric(_Contract):
    """Balance of a single field in kg OM/ha"""
    field_id: FieldID
    balance: int
    supply: OrganicMatterSupplyNumeric
    degradation: OrganicMatterDegradationNumeric


class FieldBalanceSuccess(_Contract):
    status: Literal["ok"] = "ok"
    field_id: FieldID
    area_ha: Decimal
    is_buffer_strip: bool
    balance: OrganicMatterBalanceFieldNumeric


class FieldBalanceFailure(_Contract):
    status: Literal["error"] = "error"
    field_id: FieldID
    area_ha: Decimal
    is_buffer_strip: bool
    error_message: str


OrganicMatterBalanceFieldResultNumeric = Annotated[
    Union[FieldBalanceSuccess, FieldBalanceFailure],
    Field(discriminator="status"),
]


class OrganicMatterBalanceNumeric(_Contract):
    """Farm-level balance as area-weighted averages in kg OM/ha"""
    balance: int
    supply: int
    degradation: int
    fields: List[OrganicMatterBalanceFieldResultNumeric]
    has_errors: bool
    field_error_messages: List[str]

    def to_frame(self) -> pd.DataFrame:
        """One row per field, for report tables"""
        rows = []
        for result in self.fields:
            row = {
                "field_id": result.field_id,
                "area_ha": float(result.area_ha),
                "is_buffer_strip": result.is_buffer_strip,
                "balance": None,
                "supply": None,
                "degradation": None,
                "error_message": None,
            }
            if isinstance(result, FieldBalanceSuccess):
                row["balance"] = result.balance.balance
                row["supply"] = result.balance.supply.total
                row["degradation"] = result.balance.degradation.total
            else:
                row["error_message"] = result.error_message
            rows.append(row)

        return pd.DataFrame(
            rows,
            columns=[
                "field_id", "area_ha", "is_buffer_strip",
                "balance", "supply", "degradation", "error_message",
            ],
        )
