"""
Ombalance Data Package.

Input and output contracts of the balance calculation.
"""

from ombalance.data.contracts import (
    SoilType,
    CropRotation,
    FertilizerType,
    TimeFrame,
    FieldDetails,
    Cultivation,
    FertilizerApplication,
    SoilAnalysis,
    FieldInput,
    CultivationDetail,
    FertilizerDetail,
    OrganicMatterBalanceInput,
    OrganicMatterBalanceFieldInput,
    OrganicMatterBalanceFieldNumeric,
    FieldBalanceSuccess,
    FieldBalanceFailure,
    OrganicMatterBalanceNumeric,
)

__all__ = [
    "SoilType",
    "CropRotation",
    "FertilizerType",
    "TimeFrame",
    "FieldDetails",
    "Cultivation",
    "FertilizerApplication",
    "SoilAnalysis",
    "FieldInput",
    "CultivationDetail",
    "FertilizerDetail",
    "OrganicMatterBalanceInput",
    "OrganicMatterBalanceFieldInput",
    "OrganicMatterBalanceFieldNumeric",
    "FieldBalanceSuccess",
    "FieldBalanceFailure",
    "OrganicMatterBalanceNumeric",
]
