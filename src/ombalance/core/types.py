"""
Type definitions and type aliases for the organic matter balance engine.
Internal results are kept as Decimal so no precision is lost before the
numeric boundary.
"""
from decimal import Decimal
from typing import Any, Awaitable, Callable, List, Optional, Protocol, Tuple, TypeVar, runtime_checkable
from dataclasses import dataclass, field
from enum import Enum
from typing_extensions import TypeAlias


# Type aliases for clarity
FieldID: TypeAlias = str
CatalogueID: TypeAlias = str
KgOMPerHa: TypeAlias = Decimal

T = TypeVar("T")

ZERO = Decimal(0)


class LandUse(str, Enum):
    """Land use classes for degradation depth"""
    GRASSLAND = "grassland"
    ARABLE = "arable"


@dataclass(frozen=True)
class Contribution:
    """Supply contributed by a single application or cultivation"""
    id: str
    value: KgOMPerHa


@dataclass(frozen=True)
class FertilizerCategorySupply:
    total: KgOMPerHa = ZERO
    applications: Tuple[Contribution, ...] = ()


@dataclass(frozen=True)
class FertilizerSupply:
    """EOM supplied by fertilizers, split into manure, compost and other"""
    total: KgOMPerHa = ZERO
    manure: FertilizerCategorySupply = field(default_factory=FertilizerCategorySupply)
    compost: FertilizerCategorySupply = field(default_factory=FertilizerCategorySupply)
    other: FertilizerCategorySupply = field(default_factory=FertilizerCategorySupply)


@dataclass(frozen=True)
class CultivationSupply:
    """EOM supplied by the crops themselves"""
    total: KgOMPerHa = ZERO
    cultivations: Tuple[Contribution, ...] = ()


@dataclass(frozen=True)
class ResidueSupply:
    """EOM supplied by crop residues left on the field"""
    total: KgOMPerHa = ZERO
    cultivations: Tuple[Contribution, ...] = ()


@dataclass(frozen=True)
class OrganicMatterSupply:
    total: KgOMPerHa = ZERO
    fertilizers: FertilizerSupply = field(default_factory=FertilizerSupply)
    cultivations: CultivationSupply = field(default_factory=CultivationSupply)
    residues: ResidueSupply = field(default_factory=ResidueSupply)


@dataclass(frozen=True)
class OrganicMatterDegradation:
    """SOM degradation over the time frame, negative for a loss"""
    total: KgOMPerHa = ZERO


@dataclass(frozen=True)
class OrganicMatterBalanceField:
    field_id: FieldID
    balance: KgOMPerHa
    supply: OrganicMatterSupply
    degradation: OrganicMatterDegradation


@dataclass(frozen=True)
class OrganicMatterBalance:
    """Farm-level balance as area-weighted averages (kg OM/ha)"""
    balance: KgOMPerHa
    supply: KgOMPerHa
    degradation: KgOMPerHa
    fields: List[Any]  # numeric per-field results, see data.contracts
    has_errors: bool
    field_error_messages: List[str]


# Protocol definitions for dependency injection
@runtime_checkable
class CalculationCache(Protocol):
    """Protocol for calculation caches"""

    async def get_or_compute(self, key: str, compute: Callable[[], Awaitable[T]]) -> T:
        """Return the cached value for key, computing and storing it on a miss"""
        ...


def to_decimal(value: Any) -> Optional[Decimal]:
    """
    Convert a caller-supplied number to Decimal without binary float noise.

    Floats go through their shortest string representation, so 0.1 becomes
    Decimal("0.1") rather than its exact binary expansion.
    """
    if value is None:
        return None
    if isinstance(value, Decimal):
        return value
    if isinstance(value, bool):
        raise TypeError("Cannot convert bool to Decimal")
    if isinstance(value, (int, str)):
        return Decimal(value)
    if isinstance(value, float):
        return Decimal(str(value))
    raise TypeError(f"Cannot convert {type(value).__name__} to Decimal")
