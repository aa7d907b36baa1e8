import logging
from typing import Optional

import requests
from pydantic import ValidationError

import config
from models.schemas import AddressResolution, GeocodeResponse

logger = logging.getLogger(__name__)

# Praça da Sé, São Paulo
BASE_LATITUDE = -23.5505
BASE_LONGITUDE = -46.6333
SYNTHETIC_MARKER = " (Simulado)"


def address_hash(address: str) -> int:
    return sum(ord(ch) for ch in address)


def synthetic_resolution(address: str) -> AddressResolution:
    """Stable demo coordinate near the base point, derived from the address text."""
    h = address_hash(address)
    return AddressResolution(
        kind="synthetic",
        latitude=BASE_LATITUDE + (h % 100) / 10000,
        longitude=BASE_LONGITUDE + (h % 50) / 10000,
        formatted_address=address + SYNTHETIC_MARKER,
    )


def parse_geocode_payload(data) -> Optional[AddressResolution]:
    """Accepts only an explicit OK status with at least one result."""
    try:
        parsed = GeocodeResponse.model_validate(data)
    except ValidationError as e:
        logger.warning(f"Unexpected geocoding payload: {e.error_count()} validation errors")
        return None
    if parsed.status != "OK" or not parsed.results:
        logger.warning(f"Geocoding provider status: {parsed.status}")
        return None
    first = parsed.results[0]
    return AddressResolution(
        kind="resolved",
        latitude=first.geometry.location.lat,
        longitude=first.geometry.location.lng,
        formatted_address=first.formatted_address,
    )


class GeocodingClient:
    def __init__(self, api_key: Optional[str] = None, proxy_base_url: Optional[str] = None,
                 session=None, timeout: Optional[float] = None):
        self.api_key = config.GOOGLE_API_KEY if api_key is None else api_key
        self.proxy_base_url = config.PROXY_BASE_URL if proxy_base_url is None else proxy_base_url
        self.session = session or requests.Session()
        self.timeout = timeout or config.HTTP_TIMEOUT_SECONDS
        self.base_url = config.GEOCODING_URL

    def call_api(self, address: str) -> Optional[dict]:
        """Raw provider response, or None on network error / non-2xx."""
        params = {"address": address, "key": self.api_key}
        try:
            resp = self.session.get(self.base_url, params=params, timeout=self.timeout)
            if not resp.ok:
                logger.warning(f"Geocoding API HTTP {resp.status_code}")
                return None
            return resp.json()
        except (requests.RequestException, ValueError) as e:
            logger.warning(f"Geocoding API request failed: {e}")
            return None

    def call_proxy(self, address: str) -> Optional[dict]:
        if not self.proxy_base_url:
            return None
        url = f"{self.proxy_base_url.rstrip('/')}/coordinates"
        try:
            resp = self.session.get(url, params={"address": address}, timeout=self.timeout)
            if not resp.ok:
                logger.warning(f"Geocoding proxy HTTP {resp.status_code}")
                return None
            return resp.json()
        except (requests.RequestException, ValueError) as e:
            logger.warning(f"Geocoding proxy unavailable: {e}")
            return None

    def resolve_address(self, address: str) -> AddressResolution:
        """Proxy, then provider, then a synthetic coordinate. Never raises."""
        for tier, call in (("proxy", self.call_proxy), ("direct", self.call_api)):
            data = call(address)
            if data is None:
                continue
            result = parse_geocode_payload(data)
            if result is not None:
                logger.info(f"Address resolved via {tier}: {result.formatted_address}")
                return result

        logger.warning(f"Geocoding failed for '{address}'. Using synthetic coordinates.")
        return synthetic_resolution(address)


def resolve_address(address: str) -> AddressResolution:
    return GeocodingClient().resolve_address(address)
