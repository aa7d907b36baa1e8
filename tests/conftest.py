import pytest
import requests

from agents.agent import ReportPipeline
from agents.subagents.report_synthesis.agent import ReportSynthesisAgent
from tools.geocoding_client import GeocodingClient
from tools.solar_api_client import SolarAPIClient

PROXY = "http://proxy.test/api"


class FakeResponse:
    def __init__(self, status_code=200, payload=None, text="", content=b""):
        self.status_code = status_code
        self._payload = payload
        self.text = text
        self.content = content

    @property
    def ok(self):
        return 200 <= self.status_code < 400

    def json(self):
        if self._payload is None:
            raise ValueError("No JSON object could be decoded")
        return self._payload


class FakeSession:
    """Routes requests by URL substring. A route value may be a FakeResponse or an exception."""

    def __init__(self, routes=None):
        self.routes = routes or {}
        self.calls = []

    def _dispatch(self, method, url, **kwargs):
        self.calls.append((method, url, kwargs))
        for fragment, outcome in self.routes.items():
            if fragment in url:
                if isinstance(outcome, Exception):
                    raise outcome
                return outcome
        raise requests.ConnectionError(f"no route for {url}")

    def get(self, url, **kwargs):
        return self._dispatch("GET", url, **kwargs)

    def post(self, url, **kwargs):
        return self._dispatch("POST", url, **kwargs)

    def urls(self):
        return [url for _, url, _ in self.calls]


class FakeGenerated:
    def __init__(self, text):
        self.text = text


class FakeModels:
    def __init__(self, text=None, error=None):
        self.text = text
        self.error = error
        self.prompts = []

    def generate_content(self, model, contents, config=None):
        self.prompts.append(contents)
        if self.error is not None:
            raise self.error
        return FakeGenerated(self.text)


class FakeChat:
    def __init__(self, text=None, error=None):
        self.text = text
        self.error = error
        self.messages = []

    def send_message(self, message):
        self.messages.append(message)
        if self.error is not None:
            raise self.error
        return FakeGenerated(self.text)


class FakeChats:
    def __init__(self, chat):
        self.chat = chat
        self.created = []

    def create(self, model, history=None, config=None):
        self.created.append({"model": model, "history": history, "config": config})
        return self.chat


class FakeGenaiClient:
    def __init__(self, text=None, error=None, chat_text=None, chat_error=None):
        self.models = FakeModels(text=text, error=error)
        self.chats = FakeChats(FakeChat(text=chat_text, error=chat_error))


def geocode_ok(lat=-23.5614, lng=-46.6559, address="Av. Paulista, 1000 - Bela Vista, São Paulo - SP, Brasil"):
    return {
        "status": "OK",
        "results": [
            {"formatted_address": address, "geometry": {"location": {"lat": lat, "lng": lng}}},
        ],
    }


def building_insights(max_panels=40, area=120.0):
    return {
        "name": "buildings/ChIJ",
        "solarPotential": {
            "maxArrayPanelsCount": max_panels,
            "panelCapacityWatts": 400,
            "maxSunshineHoursPerYear": 1850.5,
            "wholeRoofStats": {
                "areaMeters2": area,
                "sunshineQuantiles": [1200, 1500, 1800],
                "groundAreaMeters2": 100.0,
            },
            "roofSegmentStats": [
                {
                    "pitchDegrees": 18.5,
                    "azimuthDegrees": 350.0,
                    "stats": {"areaMeters2": 60.0, "sunshineQuantiles": [1300, 1700], "groundAreaMeters2": 57.0},
                    "center": {"latitude": -23.5614, "longitude": -46.6559},
                }
            ],
            "solarPanelConfigs": [
                {
                    "panelsCount": 4,
                    "yearlyEnergyDcKwh": 2400.0,
                    "roofSegmentSummaries": [{"segmentIndex": 0, "panelsCount": 4}],
                    "solarPanels": [
                        {
                            "center": {"latitude": -23.56141, "longitude": -46.65591},
                            "orientation": "LANDSCAPE",
                            "segmentIndex": 0,
                            "yearlyEnergyDcKwh": 600.0,
                        }
                    ],
                }
            ],
        },
    }


@pytest.fixture
def offline_session():
    return FakeSession()


@pytest.fixture
def offline_pipeline(offline_session):
    """Every provider is unreachable and the LLM fails: the pipeline must still produce reports."""
    return ReportPipeline(
        geocoder=GeocodingClient(api_key="k", proxy_base_url="", session=offline_session),
        solar_client=SolarAPIClient(api_key="k", proxy_base_url="", session=offline_session),
        narrator=ReportSynthesisAgent(
            proxy_base_url="", api_key="k", session=offline_session,
            genai_client=FakeGenaiClient(error=RuntimeError("quota exceeded")),
        ),
    )
