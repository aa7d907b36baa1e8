from tools.tariff_tool import lookup_tariff, BRAZIL_TARIFFS, NATIONAL_AVERAGE_TARIFF
from tools.geocoding_client import GeocodingClient, resolve_address
from tools.solar_api_client import SolarAPIClient, fetch_solar_potential

__all__ = [
    "lookup_tariff",
    "BRAZIL_TARIFFS",
    "NATIONAL_AVERAGE_TARIFF",
    "GeocodingClient",
    "resolve_address",
    "SolarAPIClient",
    "fetch_solar_potential",
]
