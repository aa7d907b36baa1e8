import math
from typing import List, Optional

from models.schemas import EstimateResult, SolarPotential

GENERATION_FACTOR = 115.0  # kWh generated per installed kWp per month (Brazil, losses included)
PANEL_POWER_WATTS = 550.0
PRICE_PER_KWP = 3200.0  # installed R$/kWp, kit + labour
CO2_TONS_PER_MWH = 0.085
HEADROOM = 1.2  # margin for future consumption when the roof allows it
ROOF_AREA_PER_KWP = 6.0  # m2

# January first. Southern hemisphere: summer produces more.
SEASONALITY = (1.15, 1.10, 1.05, 0.95, 0.85, 0.80, 0.85, 0.95, 1.00, 1.05, 1.10, 1.15)


class InvalidEstimateInput(ValueError):
    pass


def require_positive(name: str, value) -> float:
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise InvalidEstimateInput(f"{name} must be a number, got {value!r}")
    if not math.isfinite(number) or number <= 0:
        raise InvalidEstimateInput(f"{name} must be greater than zero, got {value!r}")
    return number


def bill_derived_capacity_kw(tariff: float, monthly_bill: float) -> float:
    target_kwh_month = monthly_bill / tariff
    return target_kwh_month / GENERATION_FACTOR


def roof_capacity_kw(solar_potential: SolarPotential) -> float:
    return solar_potential.maxArrayPanelsCount * PANEL_POWER_WATTS / 1000.0


def payback_years(estimated_cost: float, annual_savings: float) -> Optional[float]:
    if annual_savings <= 0:
        return None
    return estimated_cost / annual_savings


def seasonal_savings(monthly_savings_value: float) -> List[float]:
    return [monthly_savings_value * factor for factor in SEASONALITY]


def estimate(tariff: float, monthly_bill: float, solar_potential: Optional[SolarPotential] = None) -> EstimateResult:
    """Size the system and compute the financial figures.

    With roof data the system is the smaller of what fits on the roof and what
    the bill needs (plus headroom). Without it, sizing comes from the bill only.
    """
    tariff = require_positive("tariff", tariff)
    monthly_bill = require_positive("monthly_bill", monthly_bill)

    needed_kw = bill_derived_capacity_kw(tariff, monthly_bill)

    if solar_potential is not None:
        roof_kw = roof_capacity_kw(solar_potential)
        system_size_kw = min(roof_kw, needed_kw * HEADROOM)
        roof_quality = "Excellent" if roof_kw >= needed_kw else "Fair"
        max_panels = solar_potential.maxArrayPanelsCount
    else:
        system_size_kw = needed_kw
        roof_quality = "Good"
        max_panels = None

    monthly_production_kwh = system_size_kw * GENERATION_FACTOR
    monthly_savings_value = monthly_production_kwh * tariff
    annual_savings = monthly_savings_value * 12
    estimated_cost = system_size_kw * PRICE_PER_KWP
    payback = payback_years(estimated_cost, annual_savings)
    co2_offset_tons = monthly_production_kwh * 12 / 1000.0 * CO2_TONS_PER_MWH

    if solar_potential is not None and solar_potential.wholeRoofStats is not None:
        roof_area = solar_potential.wholeRoofStats.areaMeters2
    else:
        roof_area = system_size_kw * ROOF_AREA_PER_KWP

    if not all(math.isfinite(v) for v in (system_size_kw, annual_savings, estimated_cost, co2_offset_tons)):
        raise InvalidEstimateInput(
            f"monthly_bill={monthly_bill!r} with tariff={tariff!r} is out of range for an estimate"
        )
    if max_panels is None:
        max_panels = math.ceil(system_size_kw * 1000 / PANEL_POWER_WATTS)

    return EstimateResult(
        tariff=tariff,
        monthly_bill=monthly_bill,
        system_size_kw=system_size_kw,
        max_panels=max_panels,
        monthly_production_kwh=monthly_production_kwh,
        monthly_savings_value=monthly_savings_value,
        annual_savings=annual_savings,
        monthly_savings=seasonal_savings(monthly_savings_value),
        estimated_cost=estimated_cost,
        payback_period_years=payback,
        co2_offset_tons=co2_offset_tons,
        roof_quality=roof_quality,
        roof_area_sq_meters=roof_area,
    )
