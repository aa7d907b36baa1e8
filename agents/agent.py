import logging
import uuid
from typing import Optional

from models.schemas import SolarReport
from tools.geocoding_client import GeocodingClient
from tools.solar_api_client import SolarAPIClient
from tools.tariff_tool import lookup_tariff
from .subagents.solar_calculator.calculator import estimate
from .subagents.report_synthesis.agent import ReportSynthesisAgent

logger = logging.getLogger(__name__)


class ReportPipeline:
    """Address + monthly bill -> SolarReport.

    Steps run strictly one after another: geocode, solar potential, tariff,
    estimate, narrative. Only invalid numeric input can make build() raise.
    """

    def __init__(self, geocoder: Optional[GeocodingClient] = None,
                 solar_client: Optional[SolarAPIClient] = None,
                 narrator: Optional[ReportSynthesisAgent] = None):
        self.geocoder = geocoder or GeocodingClient()
        self.solar_client = solar_client or SolarAPIClient()
        self.narrator = narrator or ReportSynthesisAgent()

    @classmethod
    def direct(cls) -> "ReportPipeline":
        """Pipeline that skips the local proxy tier (used by the proxy server itself)."""
        return cls(
            geocoder=GeocodingClient(proxy_base_url=""),
            solar_client=SolarAPIClient(proxy_base_url=""),
            narrator=ReportSynthesisAgent(proxy_base_url=""),
        )

    def build(self, address: str, monthly_bill: float) -> SolarReport:
        address = (address or "").strip()
        if not address:
            raise ValueError("address must not be empty")

        location = self.geocoder.resolve_address(address)
        potential = self.solar_client.get_solar_potential(location.latitude, location.longitude)
        tariff = lookup_tariff(address)
        facts = estimate(tariff, monthly_bill, potential)
        logger.info(
            f"Estimate for '{address}': {facts.system_size_kw:.2f} kWp, "
            f"R$ {facts.annual_savings:.0f}/year, roof {facts.roof_quality}"
        )
        narrative = self.narrator.run(address, facts)

        return SolarReport(
            id=uuid.uuid4().hex,
            address=address,
            latitude=location.latitude,
            longitude=location.longitude,
            location_kind=location.kind,
            monthly_bill=facts.monthly_bill,
            system_size_kw=facts.system_size_kw,
            annual_savings=facts.annual_savings,
            monthly_savings=facts.monthly_savings,
            estimated_cost=facts.estimated_cost,
            payback_period_years=facts.payback_period_years,
            co2_offset_tons=facts.co2_offset_tons,
            roof_quality=narrative.roof_quality,
            local_energy_rate=tariff,
            summary=narrative.summary,
            max_panels=facts.max_panels,
            roof_area_sq_meters=facts.roof_area_sq_meters,
            solar_potential=potential,
        )


def build_report(address: str, monthly_bill: float) -> SolarReport:
    return ReportPipeline().build(address, monthly_bill)
