"""
Farm-level organic matter balance.
Evaluates all fields in bounded batches and aggregates the results to an
area-weighted farm balance.
"""
import asyncio
import logging
from decimal import Decimal
from typing import Dict, List, Mapping, Optional, Sequence

from ombalance.core.config import OMBalanceConfig, get_config
from ombalance.core.constants import FARM_BALANCE_FUNCTION, FIELD_BALANCE_FUNCTION
from ombalance.core.exceptions import ConfigurationError, ErrorContext, handle_exception
from ombalance.core.types import ZERO, CatalogueID, CalculationCache, OrganicMatterBalance
from ombalance.data.contracts import (
    CultivationDetail,
    FertilizerDetail,
    FieldBalanceFailure,
    FieldBalanceSuccess,
    FieldInput,
    OrganicMatterBalanceFieldInput,
    OrganicMatterBalanceFieldResultNumeric,
    OrganicMatterBalanceInput,
    OrganicMatterBalanceNumeric,
    TimeFrame,
)
from ombalance.balance.cache import (
    InMemoryCalculationCache,
    NullCalculationCache,
    with_calculation_cache,
)
from ombalance.balance.field import build_catalogue_lookup, calculate_organic_matter_balance_field
from ombalance.balance.numeric import project_farm_balance


def build_field_balance_input(
    field_input: FieldInput,
    fertilizer_details: Mapping[CatalogueID, FertilizerDetail],
    cultivation_details: Mapping[CatalogueID, CultivationDetail],
    time_frame: TimeFrame
) -> OrganicMatterBalanceFieldInput:
    """
    Input of the field calculation with only the catalogue entries the field uses.

    References to unknown catalogue entries are left out here; the supply
    calculation reports them.
    """
    fertilizer_ids = dict.fromkeys(a.catalogue_id for a in field_input.fertilizer_applications)
    cultivation_ids = dict.fromkeys(c.catalogue_id for c in field_input.cultivations)

    return OrganicMatterBalanceFieldInput(
        field_input=field_input,
        fertilizer_details=[fertilizer_details[i] for i in fertilizer_ids if i in fertilizer_details],
        cultivation_details=[cultivation_details[i] for i in cultivation_ids if i in cultivation_details],
        time_frame=time_frame,
    )


def aggregate_field_results(
    results: Sequence[OrganicMatterBalanceFieldResultNumeric],
    has_errors: bool,
    field_error_messages: Sequence[str]
) -> OrganicMatterBalanceNumeric:
    """
    Area-weighted farm averages of supply, degradation and balance.

    Only fields without errors that are not buffer strips are weighted. All
    field results, including failures and buffer strips, are kept in the
    output. A farm without weighted area gets a balance of 0.
    """
    total_supply = ZERO
    total_degradation = ZERO
    total_area = ZERO

    for result in results:
        if not isinstance(result, FieldBalanceSuccess) or result.is_buffer_strip:
            continue
        area = result.area_ha
        total_area += area
        total_supply += Decimal(result.balance.supply.total) * area
        total_degradation += Decimal(result.balance.degradation.total) * area

    if total_area == ZERO:
        supply = ZERO
        degradation = ZERO
    else:
        supply = total_supply / total_area
        degradation = total_degradation / total_area

    failures = sum(1 for r in results if isinstance(r, FieldBalanceFailure))

    farm_balance = OrganicMatterBalance(
        balance=supply + degradation,
        supply=supply,
        degradation=degradation,
        fields=list(results),
        has_errors=has_errors or failures > 0,
        field_error_messages=list(field_error_messages),
    )
    return project_farm_balance(farm_balance)


class OrganicMatterBalanceCalculator:
    """
    Calculates the organic matter balance of a farm.

    Fields are evaluated concurrently within a batch and batches run one after
    another, so at most ``batch_size`` field calculations are pending at once.
    A failing field is reported on its own result and never aborts the farm.
    """

    def __init__(
        self,
        config: Optional[OMBalanceConfig] = None,
        cache: Optional[CalculationCache] = None,
        batch_size: Optional[int] = None
    ):
        self.config = config or get_config()
        self.logger = logging.getLogger("ombalance.balance.farm")

        self.batch_size = batch_size if batch_size is not None else self.config.balance.batch_size
        if self.batch_size <= 0:
            raise ConfigurationError(
                f"batch_size must be positive, got {self.batch_size}",
                ErrorContext(component="farm", details={"batch_size": self.batch_size}),
            )

        if cache is None:
            if self.config.cache.enabled:
                cache = InMemoryCalculationCache(max_entries=self.config.cache.max_entries)
            else:
                cache = NullCalculationCache()
        self.cache = cache

        self._calculate_field = with_calculation_cache(
            calculate_organic_matter_balance_field,
            FIELD_BALANCE_FUNCTION,
            self.config.balance.calculator_version,
            self.cache,
        )

    async def calculate(self, balance_input: OrganicMatterBalanceInput) -> OrganicMatterBalanceNumeric:
        """
        Balance of all fields of the farm plus the area-weighted farm average.

        Args:
            balance_input: Fields, catalogues and time frame

        Returns:
            Numeric farm balance; field results keep the input order
        """
        fields = balance_input.fields
        self.logger.info(
            f"Calculating organic matter balance for {len(fields)} fields "
            f"({balance_input.time_frame.start} to {balance_input.time_frame.end})"
        )

        # Shared by all field tasks, read-only
        fertilizer_details = build_catalogue_lookup(balance_input.fertilizer_details)
        cultivation_details = build_catalogue_lookup(balance_input.cultivation_details)

        results: List[OrganicMatterBalanceFieldResultNumeric] = []
        field_error_messages: List[str] = []
        has_errors = False

        for start in range(0, len(fields), self.batch_size):
            batch = fields[start:start + self.batch_size]
            self.logger.debug(f"Evaluating fields {start + 1}-{start + len(batch)}")

            batch_results = await asyncio.gather(*[
                self._evaluate_field(
                    field_input,
                    fertilizer_details,
                    cultivation_details,
                    balance_input.time_frame,
                )
                for field_input in batch
            ])

            for result in batch_results:
                if isinstance(result, FieldBalanceFailure):
                    has_errors = True
                    field_error_messages.append(f"[{result.field_id}] {result.error_message}")
            results.extend(batch_results)

        farm = aggregate_field_results(results, has_errors, field_error_messages)
        self.logger.info(
            f"Farm balance: {farm.balance} kg OM/ha "
            f"(supply {farm.supply}, degradation {farm.degradation}, "
            f"{len(field_error_messages)} failed fields)"
        )
        return farm

    async def _evaluate_field(
        self,
        field_input: FieldInput,
        fertilizer_details: Mapping[CatalogueID, FertilizerDetail],
        cultivation_details: Mapping[CatalogueID, CultivationDetail],
        time_frame: TimeFrame
    ) -> OrganicMatterBalanceFieldResultNumeric:
        field = field_input.field
        area_ha = field.area_ha if field.area_ha is not None else ZERO

        try:
            field_balance_input = build_field_balance_input(
                field_input, fertilizer_details, cultivation_details, time_frame
            )
            balance = await self._calculate_field(field_balance_input)
        except Exception as e:
            error = handle_exception(e, ErrorContext(field_id=field.field_id, component="farm"))
            self.logger.warning(f"Field calculation failed: {error.describe()}")
            return FieldBalanceFailure(
                field_id=field.field_id,
                area_ha=area_ha,
                is_buffer_strip=field.is_buffer_strip,
                error_message=str(e),
            )

        return FieldBalanceSuccess(
            field_id=field.field_id,
            area_ha=area_ha,
            is_buffer_strip=field.is_buffer_strip,
            balance=balance,
        )


_shared_caches: Dict[str, CalculationCache] = {}


def _shared_cache(config: OMBalanceConfig) -> CalculationCache:
    """Process-wide cache per calculator version"""
    version = config.balance.calculator_version
    if version not in _shared_caches:
        if config.cache.enabled:
            _shared_caches[version] = InMemoryCalculationCache(config.cache.max_entries)
        else:
            _shared_caches[version] = NullCalculationCache()
    return _shared_caches[version]


async def calculate_organic_matter_balance(
    balance_input: OrganicMatterBalanceInput,
    *,
    batch_size: Optional[int] = None,
    cache: Optional[CalculationCache] = None
) -> OrganicMatterBalanceNumeric:
    """Farm balance with the global configuration"""
    config = get_config()
    calculator = OrganicMatterBalanceCalculator(
        config=config,
        cache=cache if cache is not None else _shared_cache(config),
        batch_size=batch_size,
    )
    return await calculator.calculate(balance_input)


async def get_organic_matter_balance(
    balance_input: OrganicMatterBalanceInput,
    cache: Optional[CalculationCache] = None
) -> OrganicMatterBalanceNumeric:
    """
    Cached farm balance.

    Identical input returns the stored farm result without evaluating any
    field again.
    """
    config = get_config()
    cache = cache if cache is not None else _shared_cache(config)

    async def calculate(farm_input: OrganicMatterBalanceInput) -> OrganicMatterBalanceNumeric:
        return await calculate_organic_matter_balance(farm_input, cache=cache)

    cached = with_calculation_cache(
        calculate, FARM_BALANCE_FUNCTION, config.balance.calculator_version, cache
    )
    return await cached(balance_input)
