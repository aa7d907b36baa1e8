import math

import pytest

from agents.subagents.solar_calculator.calculator import (
    CO2_TONS_PER_MWH,
    GENERATION_FACTOR,
    HEADROOM,
    PANEL_POWER_WATTS,
    PRICE_PER_KWP,
    ROOF_AREA_PER_KWP,
    SEASONALITY,
    InvalidEstimateInput,
    estimate,
    payback_years,
)
from models.schemas import SolarPotential


def potential(max_panels, area=None):
    data = {"maxArrayPanelsCount": max_panels}
    if area is not None:
        data["wholeRoofStats"] = {"areaMeters2": area}
    return SolarPotential.model_validate(data)


class TestBillOnlySizing:

    @pytest.mark.parametrize("tariff,bill", [(0.92, 300.0), (1.15, 850.0), (0.78, 120.0), (0.9, 45.5)])
    def test_system_size_comes_from_bill_and_tariff(self, tariff, bill):
        result = estimate(tariff, bill, None)
        assert result.system_size_kw == bill / tariff / GENERATION_FACTOR
        assert result.roof_quality == "Good"

    def test_panel_count_rounds_up(self):
        result = estimate(0.92, 300.0, None)
        assert result.max_panels == math.ceil(result.system_size_kw * 1000 / PANEL_POWER_WATTS)

    def test_roof_area_estimated_from_size(self):
        result = estimate(0.92, 300.0, None)
        assert result.roof_area_sq_meters == pytest.approx(result.system_size_kw * ROOF_AREA_PER_KWP)

    def test_financial_chain(self):
        result = estimate(0.92, 300.0, None)
        production = result.system_size_kw * GENERATION_FACTOR
        assert result.monthly_production_kwh == pytest.approx(production)
        assert result.monthly_savings_value == pytest.approx(production * 0.92)
        assert result.annual_savings == pytest.approx(result.monthly_savings_value * 12)
        assert result.annual_savings == pytest.approx(3600.0)
        assert result.estimated_cost == pytest.approx(result.system_size_kw * PRICE_PER_KWP)
        assert result.payback_period_years == pytest.approx(result.estimated_cost / result.annual_savings)
        assert result.co2_offset_tons == pytest.approx(production * 12 / 1000 * CO2_TONS_PER_MWH)


class TestRoofSizing:

    def test_small_roof_limits_the_system(self):
        # 4 panels * 550 W = 2.2 kWp, below the ~2.84 kWp the bill needs
        result = estimate(0.92, 300.0, potential(4))
        assert result.roof_quality == "Fair"
        assert result.system_size_kw == pytest.approx(2.2)
        assert result.max_panels == 4

    def test_large_roof_gets_headroom(self):
        result = estimate(0.92, 300.0, potential(40))
        needed = 300.0 / 0.92 / GENERATION_FACTOR
        assert result.roof_quality == "Excellent"
        assert result.system_size_kw == pytest.approx(needed * HEADROOM)

    def test_roof_exactly_at_need_is_excellent(self):
        # 10 panels = 5.5 kWp; at R$ 0.50/kWh a R$ 316.25 bill needs exactly 5.5 kWp
        result = estimate(0.5, 316.25, potential(10))
        assert result.roof_quality == "Excellent"
        assert result.system_size_kw == pytest.approx(5.5)

    def test_roof_area_from_provider_when_present(self):
        result = estimate(0.92, 300.0, potential(40, area=87.5))
        assert result.roof_area_sq_meters == 87.5

    def test_empty_roof_has_no_payback(self):
        result = estimate(0.92, 300.0, potential(0))
        assert result.system_size_kw == 0
        assert result.annual_savings == 0
        assert result.payback_period_years is None
        assert result.roof_quality == "Fair"


class TestMonthlySavings:

    def test_curve_sums_to_twelve(self):
        assert len(SEASONALITY) == 12
        assert sum(SEASONALITY) == pytest.approx(12.0, abs=1e-12)

    def test_summer_beats_winter(self):
        assert SEASONALITY[0] > SEASONALITY[5]
        assert SEASONALITY[11] > SEASONALITY[6]

    @pytest.mark.parametrize("panels", [None, 4, 40])
    def test_twelve_months_adding_up_to_annual(self, panels):
        result = estimate(0.92, 300.0, potential(panels) if panels is not None else None)
        assert len(result.monthly_savings) == 12
        assert sum(result.monthly_savings) == pytest.approx(result.annual_savings)


class TestPayback:

    def test_payback_is_cost_over_savings(self):
        assert payback_years(30000.0, 3000.0) == 10.0

    def test_zero_savings_has_no_payback(self):
        assert payback_years(30000.0, 0.0) is None


class TestInvalidInput:

    @pytest.mark.parametrize("bill", [0, -10, float("nan"), float("inf"), "abc", None])
    def test_bad_bill(self, bill):
        with pytest.raises(InvalidEstimateInput):
            estimate(0.92, bill, None)

    @pytest.mark.parametrize("tariff", [0, -0.5])
    def test_bad_tariff(self, tariff):
        with pytest.raises(InvalidEstimateInput):
            estimate(tariff, 300.0, None)

    def test_is_a_value_error(self):
        with pytest.raises(ValueError, match="monthly_bill"):
            estimate(0.92, 0, None)

    @pytest.mark.parametrize("tariff,bill", [(0.92, 1e308), (1e-305, 300.0)])
    def test_figures_that_overflow_are_rejected(self, tariff, bill):
        with pytest.raises(InvalidEstimateInput, match="out of range"):
            estimate(tariff, bill, None)

    def test_overflow_is_rejected_with_roof_data_too(self):
        with pytest.raises(InvalidEstimateInput):
            estimate(0.92, 1e308, potential(10 ** 306))
