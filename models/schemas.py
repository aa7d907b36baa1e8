from datetime import datetime, timezone
from pydantic import BaseModel, ConfigDict, Field, model_validator
from typing import List, Literal, Optional, Dict, Any

RoofQuality = Literal["Excellent", "Good", "Fair", "Poor"]
ROOF_QUALITY_LABELS = ("Excellent", "Good", "Fair", "Poor")

LeadStatus = Literal["available", "sold"]
PipelineStage = Literal["Novo", "Contatado", "Visita", "Fechado"]
PIPELINE_STAGES = ("Novo", "Contatado", "Visita", "Fechado")


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


# --- Requests ---

class AddressInput(BaseModel):
    address: str = Field(..., min_length=1)
    monthly_bill: float = 300.0


class LeadInput(BaseModel):
    name: str = Field(..., min_length=1)
    email: str = Field(..., min_length=3)
    phone: str = Field(..., min_length=1)
    report_id: Optional[str] = None


class PipelineStageInput(BaseModel):
    stage: str


class GenerateReportInput(BaseModel):
    prompt: str
    modelId: Optional[str] = None
    config: Optional[Dict[str, Any]] = None


class ChatTurn(BaseModel):
    role: Literal["user", "model"]
    text: str


class ChatInput(BaseModel):
    message: str
    history: List[ChatTurn] = Field(default_factory=list)
    systemInstruction: Optional[str] = None


class ReportChatInput(BaseModel):
    message: str = Field(..., min_length=1)
    history: List[ChatTurn] = Field(default_factory=list)


# --- Geocoding provider ---

class LatLng(BaseModel):
    lat: float
    lng: float


class GeocodeGeometry(BaseModel):
    location: LatLng


class GeocodeResult(BaseModel):
    formatted_address: str
    geometry: GeocodeGeometry


class GeocodeResponse(BaseModel):
    status: str
    results: List[GeocodeResult] = Field(default_factory=list)


class AddressResolution(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["resolved", "synthetic"]
    latitude: float
    longitude: float
    formatted_address: str

    @property
    def is_synthetic(self) -> bool:
        return self.kind == "synthetic"


# --- Solar provider (buildingInsights) ---

class LatLngLiteral(BaseModel):
    latitude: float
    longitude: float


class LatLngBox(BaseModel):
    sw: LatLngLiteral
    ne: LatLngLiteral


class SizeAndSunshineStats(BaseModel):
    areaMeters2: float = 0.0
    sunshineQuantiles: List[float] = Field(default_factory=list)
    groundAreaMeters2: Optional[float] = None


class RoofSegmentStat(BaseModel):
    pitchDegrees: Optional[float] = None
    azimuthDegrees: Optional[float] = None
    stats: Optional[SizeAndSunshineStats] = None
    center: Optional[LatLngLiteral] = None
    boundingBox: Optional[LatLngBox] = None
    planeHeightAtCenterMeters: Optional[float] = None


class SolarPanel(BaseModel):
    center: LatLngLiteral
    orientation: Literal["LANDSCAPE", "PORTRAIT"]
    segmentIndex: Optional[int] = None
    yearlyEnergyDcKwh: float


class SolarPanelConfig(BaseModel):
    panelsCount: int
    yearlyEnergyDcKwh: float
    roofSegmentSummaries: List[Dict[str, Any]] = Field(default_factory=list)
    solarPanels: List[SolarPanel] = Field(default_factory=list)


class WholeRoofStats(BaseModel):
    areaMeters2: float
    boundingBox: Optional[LatLngBox] = None


class SolarPotential(BaseModel):
    model_config = ConfigDict(frozen=True)

    maxArrayPanelsCount: int = Field(..., ge=0)
    panelCapacityWatts: Optional[float] = None
    maxSunshineHoursPerYear: Optional[float] = None
    roofSegmentStats: List[RoofSegmentStat] = Field(default_factory=list)
    solarPanelConfigs: List[SolarPanelConfig] = Field(default_factory=list)
    wholeRoofStats: Optional[WholeRoofStats] = None


# --- Estimate / report ---

class EstimateResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    tariff: float
    monthly_bill: float
    system_size_kw: float
    max_panels: int
    monthly_production_kwh: float
    monthly_savings_value: float
    annual_savings: float
    monthly_savings: List[float]
    estimated_cost: float
    payback_period_years: Optional[float]
    co2_offset_tons: float
    roof_quality: RoofQuality
    roof_area_sq_meters: float


class NarrativeResult(BaseModel):
    summary: str
    roof_quality: RoofQuality
    source: Literal["proxy", "direct", "fallback"]


class SolarReport(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    address: str
    latitude: float
    longitude: float
    location_kind: Literal["resolved", "synthetic"]
    monthly_bill: float
    system_size_kw: float
    annual_savings: float
    monthly_savings: List[float]
    estimated_cost: float
    payback_period_years: Optional[float]
    co2_offset_tons: float
    roof_quality: RoofQuality
    local_energy_rate: float
    summary: str
    sunlight_hours: float = 2000.0
    max_panels: int = 0
    roof_area_sq_meters: Optional[float] = None
    solar_potential: Optional[SolarPotential] = None
    generated_at: datetime = Field(default_factory=utc_now)

    @model_validator(mode="before")
    @classmethod
    def _twelve_months(cls, data: Any) -> Any:
        # Always 12 entries; uniform split when upstream data is short or malformed.
        if isinstance(data, dict):
            months = data.get("monthly_savings")
            annual = data.get("annual_savings")
            valid = isinstance(months, (list, tuple)) and len(months) == 12 and all(
                isinstance(m, (int, float)) for m in months
            )
            if not valid and isinstance(annual, (int, float)):
                data = {**data, "monthly_savings": [annual / 12.0] * 12}
        return data


# --- Marketplace ---

class InstallerProfile(BaseModel):
    id: str
    name: str
    company: str
    credits: float
    rating: float
    location: LatLng


class Lead(BaseModel):
    model_config = ConfigDict(validate_assignment=True)

    id: str
    homeowner_name: str
    email: str
    phone_number: str
    address: str
    latitude: float
    longitude: float
    estimated_system_size: float
    generated_at: datetime = Field(default_factory=utc_now)
    status: LeadStatus = "available"
    price: float
    pipeline_status: Optional[PipelineStage] = None
    report_id: Optional[str] = None
    distance_km: Optional[float] = None


class MarketplaceSummary(BaseModel):
    sold_count: int
    available_count: int
    total_invested: float
    credits_remaining: float
