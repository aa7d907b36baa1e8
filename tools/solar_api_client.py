import logging
from typing import Optional

import requests
from pydantic import ValidationError

import config
from models.schemas import SolarPotential

logger = logging.getLogger(__name__)


def parse_building_insights(data) -> Optional[SolarPotential]:
    """Validates the solarPotential object of a buildingInsights response."""
    if not isinstance(data, dict) or not data.get("solarPotential"):
        return None
    try:
        return SolarPotential.model_validate(data["solarPotential"])
    except ValidationError as e:
        logger.warning(f"Failed to parse Solar API response: {e.error_count()} validation errors")
        return None


class SolarAPIClient:
    def __init__(self, api_key: Optional[str] = None, proxy_base_url: Optional[str] = None,
                 session=None, timeout: Optional[float] = None):
        self.api_key = config.GOOGLE_SOLAR_KEY if api_key is None else api_key
        self.proxy_base_url = config.PROXY_BASE_URL if proxy_base_url is None else proxy_base_url
        self.session = session or requests.Session()
        self.timeout = timeout or config.HTTP_TIMEOUT_SECONDS
        self.base_url = config.SOLAR_INSIGHTS_URL

    def fetch_raw(self, latitude: float, longitude: float):
        """Returns (status_code, payload). status_code is None on network failure."""
        params = {
            "location.latitude": latitude,
            "location.longitude": longitude,
            "requiredQuality": "HIGH",
            "key": self.api_key,
        }
        try:
            resp = self.session.get(self.base_url, params=params, timeout=self.timeout)
        except requests.RequestException as e:
            logger.warning(f"Solar API request failed: {e}")
            return None, None
        if not resp.ok:
            # Outside coverage the API answers 404
            logger.warning(f"Solar API HTTP {resp.status_code}: {resp.text[:200]}")
            return resp.status_code, None
        try:
            return resp.status_code, resp.json()
        except ValueError:
            logger.warning("Solar API returned a non-JSON body")
            return resp.status_code, None

    def call_api(self, latitude: float, longitude: float) -> Optional[dict]:
        _, payload = self.fetch_raw(latitude, longitude)
        return payload

    def call_proxy(self, latitude: float, longitude: float) -> Optional[dict]:
        if not self.proxy_base_url:
            return None
        url = f"{self.proxy_base_url.rstrip('/')}/solar-potential"
        try:
            resp = self.session.get(url, params={"lat": latitude, "lng": longitude}, timeout=self.timeout)
            if not resp.ok:
                logger.warning(f"Solar proxy HTTP {resp.status_code}")
                return None
            return resp.json()
        except (requests.RequestException, ValueError) as e:
            logger.warning(f"Solar proxy unavailable: {e}")
            return None

    def get_solar_potential(self, latitude: float, longitude: float) -> Optional[SolarPotential]:
        """Proxy, then provider. None when neither yields a usable solarPotential."""
        for tier, call in (("proxy", self.call_proxy), ("direct", self.call_api)):
            potential = parse_building_insights(call(latitude, longitude))
            if potential is not None:
                logger.info(f"Solar potential via {tier}: {potential.maxArrayPanelsCount} panels max")
                return potential

        logger.warning(f"No solar potential for ({latitude}, {longitude}); using bill-based sizing.")
        return None


def fetch_solar_potential(latitude: float, longitude: float) -> Optional[SolarPotential]:
    return SolarAPIClient().get_solar_potential(latitude, longitude)
