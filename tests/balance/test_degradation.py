"""
Tests for soil organic matter degradation.
"""
import math
from datetime import date
from decimal import Decimal

import numpy as np
import pytest

from ombalance.balance.degradation import (
    calculate_annual_degradation,
    calculate_organic_matter_degradation,
    calculate_years,
    determine_land_use,
    temperature_correction,
)
from ombalance.core.types import LandUse
from ombalance.data.contracts import Cultivation, TimeFrame


def expected_annual(som_loi, bulk_density, depth_cm):
    rate = math.log(som_loi) * -0.008934 + 0.038228
    return som_loi * depth_cm * bulk_density * 1000 * rate * 2 ** ((9.3 - 13) / 10)


def soil(som_loi, bulk_density, soil_type="zeeklei"):
    return {
        "som_loi": None if som_loi is None else Decimal(str(som_loi)),
        "bulk_density": None if bulk_density is None else Decimal(str(bulk_density)),
        "soil_type": soil_type,
    }


@pytest.fixture
def cultivation_map(cultivation_details):
    return {d.catalogue_id: d for d in cultivation_details}


@pytest.fixture
def arable_cultivations():
    return [Cultivation(cultivation_id="c1", catalogue_id="wheat", end=date(2023, 8, 1))]


@pytest.fixture
def grass_cultivations():
    return [
        Cultivation(cultivation_id="c1", catalogue_id="wheat"),
        Cultivation(cultivation_id="c2", catalogue_id="grass"),
    ]


class TestLandUse:

    def test_any_grass_rotation_is_grassland(self, grass_cultivations, cultivation_map):
        assert determine_land_use(grass_cultivations, cultivation_map) == LandUse.GRASSLAND

    def test_default_is_arable(self, arable_cultivations, cultivation_map):
        assert determine_land_use(arable_cultivations, cultivation_map) == LandUse.ARABLE
        assert determine_land_use([], cultivation_map) == LandUse.ARABLE

    def test_unknown_cultivation_is_ignored(self, cultivation_map):
        cultivations = [Cultivation(cultivation_id="c1", catalogue_id="unknown")]
        assert determine_land_use(cultivations, cultivation_map) == LandUse.ARABLE


class TestHelpers:

    def test_temperature_correction(self):
        assert float(temperature_correction()) == pytest.approx(2 ** -0.37, rel=1e-12)
        assert temperature_correction(Decimal(13)) == Decimal(1)

    @pytest.mark.parametrize("start,end,years", [
        (date(2023, 1, 1), date(2023, 12, 31), 1),
        (date(2021, 1, 1), date(2023, 12, 31), 3),
        (date(2023, 1, 1), date(2023, 1, 1), 1 / 365),
    ])
    def test_years_counts_both_end_days(self, start, end, years):
        assert float(calculate_years(TimeFrame(start=start, end=end))) == pytest.approx(years)


class TestAnnualDegradation:

    def test_arable(self):
        result = calculate_annual_degradation(Decimal(3), Decimal("1.3"), LandUse.ARABLE)
        assert float(result) == pytest.approx(expected_annual(3, 1.3, 30), rel=1e-9)

    def test_grassland_uses_shallower_layer(self):
        arable = calculate_annual_degradation(Decimal(3), Decimal("1.3"), LandUse.ARABLE)
        grassland = calculate_annual_degradation(Decimal(3), Decimal("1.3"), LandUse.GRASSLAND)
        assert float(grassland) == pytest.approx(float(arable) / 3)

    def test_capped_at_maximum(self):
        assert calculate_annual_degradation(Decimal(45), Decimal(1), LandUse.ARABLE) == Decimal(3500)

    def test_negative_rate_is_clamped_to_zero(self):
        assert calculate_annual_degradation(Decimal(100), Decimal(1), LandUse.ARABLE) == Decimal(0)

    def test_within_bounds_over_sweep(self):
        for som_loi in np.linspace(0.5, 75, 50):
            for bulk_density in (0.8, 1.2, 1.6):
                result = calculate_annual_degradation(
                    Decimal(str(float(som_loi))), Decimal(str(bulk_density)), LandUse.ARABLE
                )
                assert Decimal(0) <= result <= Decimal(3500)


class TestOrganicMatterDegradation:

    def test_one_year_arable_at_cap(self, arable_cultivations, cultivation_map, time_frame):
        result = calculate_organic_matter_degradation(
            soil(45, 1.0), arable_cultivations, cultivation_map, time_frame
        )
        assert result.total == Decimal(-3500)

    def test_scales_with_years(self, arable_cultivations, cultivation_map):
        time_frame = TimeFrame(start=date(2021, 1, 1), end=date(2023, 12, 31))
        result = calculate_organic_matter_degradation(
            soil(45, 1.0), arable_cultivations, cultivation_map, time_frame
        )
        assert result.total == Decimal(-10500)

    def test_scales_linearly_below_cap(self, arable_cultivations, cultivation_map, time_frame):
        three_years = TimeFrame(start=date(2021, 1, 1), end=date(2023, 12, 31))

        one = calculate_organic_matter_degradation(
            soil(3, 1.3), arable_cultivations, cultivation_map, time_frame
        )
        three = calculate_organic_matter_degradation(
            soil(3, 1.3), arable_cultivations, cultivation_map, three_years
        )

        assert -one.total < Decimal(3500)
        assert float(three.total) == pytest.approx(3 * float(one.total), rel=1e-12)

    def test_grassland(self, grass_cultivations, cultivation_map, time_frame):
        result = calculate_organic_matter_degradation(
            soil(3, 1.3), grass_cultivations, cultivation_map, time_frame
        )
        assert float(result.total) == pytest.approx(-expected_annual(3, 1.3, 10), rel=1e-9)

    def test_always_a_loss(self, arable_cultivations, cultivation_map, time_frame):
        result = calculate_organic_matter_degradation(
            soil(3, 1.3), arable_cultivations, cultivation_map, time_frame
        )
        assert result.total < 0

    def test_no_degradation_for_very_high_organic_matter(
        self, arable_cultivations, cultivation_map, time_frame
    ):
        result = calculate_organic_matter_degradation(
            soil(100, 1.0), arable_cultivations, cultivation_map, time_frame
        )
        assert result.total == Decimal(0)

    @pytest.mark.parametrize("som_loi,bulk_density", [(None, 1.3), (3, None), (0, 1.3)])
    def test_zero_without_usable_data(
        self, arable_cultivations, cultivation_map, time_frame, som_loi, bulk_density
    ):
        result = calculate_organic_matter_degradation(
            soil(som_loi, bulk_density), arable_cultivations, cultivation_map, time_frame
        )
        assert result.total == Decimal(0)
