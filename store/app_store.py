import logging
import math
import threading
import uuid
from typing import Dict, List, Optional

import config
from agents.agent import ReportPipeline
from agents.subagents.solar_calculator.calculator import require_positive
from models.schemas import (
    PIPELINE_STAGES,
    InstallerProfile,
    LatLng,
    Lead,
    MarketplaceSummary,
    SolarReport,
)

logger = logging.getLogger(__name__)

EARTH_RADIUS_KM = 6371.0


class StoreError(Exception):
    pass


class LeadNotFoundError(StoreError):
    pass


class LeadAlreadySoldError(StoreError):
    pass


class InsufficientCreditsError(StoreError):
    pass


class InvalidPipelineStageError(StoreError):
    pass


class ReportNotFoundError(StoreError):
    pass


class ReportInProgressError(StoreError):
    pass


def haversine_km(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    phi1, phi2 = math.radians(lat1), math.radians(lat2)
    dphi = math.radians(lat2 - lat1)
    dlmb = math.radians(lon2 - lon1)
    a = math.sin(dphi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(dlmb / 2) ** 2
    return 2 * EARTH_RADIUS_KM * math.asin(math.sqrt(a))


def default_installer() -> InstallerProfile:
    return InstallerProfile(
        id="inst-1",
        name="Carlos Souza",
        company="SolarTech Instalações",
        credits=config.INSTALLER_STARTING_CREDITS,
        rating=4.8,
        location=LatLng(lat=-23.5505, lng=-46.6333),
    )


def demo_leads() -> List[Lead]:
    return [
        Lead(
            id="1",
            homeowner_name="Ana Silva",
            email="ana.silva@exemplo.com.br",
            phone_number="(11) 99876-5432",
            address="Av. Paulista, 1000, São Paulo, SP",
            latitude=-23.5614,
            longitude=-46.6559,
            estimated_system_size=8.5,
            price=45.0,
        )
    ]


class AppStore:
    """Session state: reports, leads and the installer profile.

    All changes go through the action methods (or dispatch()). State lives in
    memory only; reset() brings back the initial session.
    """

    ACTIONS = ("submit_address", "capture_lead", "buy_lead", "advance_pipeline_stage", "reset")

    def __init__(self, pipeline: Optional[ReportPipeline] = None, seed_demo_leads: bool = True,
                 lead_price: Optional[float] = None):
        self.pipeline = pipeline or ReportPipeline()
        self.seed_demo_leads = seed_demo_leads
        self.lead_price = config.LEAD_PRICE if lead_price is None else lead_price
        self._lock = threading.Lock()
        self._in_flight = set()
        self._init_state()

    def _init_state(self):
        self.reports: Dict[str, SolarReport] = {}
        self.latest_report: Optional[SolarReport] = None
        self.leads: List[Lead] = demo_leads() if self.seed_demo_leads else []
        self.installer: InstallerProfile = default_installer()

    def reset(self):
        with self._lock:
            self._init_state()
        logger.info("Store reset to initial session state")

    def dispatch(self, action: str, **payload):
        if action not in self.ACTIONS:
            raise ValueError(f"Unknown action: {action}")
        return getattr(self, action)(**payload)

    # --- reports ---

    def submit_address(self, address: str, monthly_bill: float = 300.0) -> SolarReport:
        monthly_bill = require_positive("monthly_bill", monthly_bill)
        key = ((address or "").strip().lower(), monthly_bill)
        with self._lock:
            if key in self._in_flight:
                raise ReportInProgressError(f"A report for '{address}' is already being generated")
            self._in_flight.add(key)
        try:
            report = self.pipeline.build(address, monthly_bill)
        finally:
            with self._lock:
                self._in_flight.discard(key)

        with self._lock:
            self.reports[report.id] = report
            self.latest_report = report
        return report

    def get_report(self, report_id: str) -> SolarReport:
        report = self.reports.get(report_id)
        if report is None:
            raise ReportNotFoundError(f"Report {report_id} not found")
        return report

    # --- leads ---

    def capture_lead(self, name: str, email: str, phone: str, report_id: Optional[str] = None) -> Lead:
        with self._lock:
            if report_id is not None:
                report = self.reports.get(report_id)
                if report is None:
                    raise ReportNotFoundError(f"Report {report_id} not found")
            else:
                report = self.latest_report
                if report is None:
                    raise ReportNotFoundError("No report generated yet")

            lead = Lead(
                id=uuid.uuid4().hex[:9],
                homeowner_name=name,
                email=email,
                phone_number=phone,
                address=report.address,
                latitude=report.latitude,
                longitude=report.longitude,
                estimated_system_size=report.system_size_kw,
                price=self.lead_price,
                report_id=report.id,
            )
            self.leads.insert(0, lead)
        logger.info(f"Lead {lead.id} captured for {lead.address}")
        return lead.model_copy()

    def _find_lead(self, lead_id: str) -> Lead:
        for lead in self.leads:
            if lead.id == lead_id:
                return lead
        raise LeadNotFoundError(f"Lead {lead_id} not found")

    def list_leads(self, status: Optional[str] = None) -> List[Lead]:
        here = self.installer.location
        with self._lock:
            leads = [lead for lead in self.leads if status is None or lead.status == status]
            return [
                lead.model_copy(update={
                    "distance_km": round(haversine_km(here.lat, here.lng, lead.latitude, lead.longitude), 1)
                })
                for lead in leads
            ]

    def buy_lead(self, lead_id: str) -> Lead:
        with self._lock:
            lead = self._find_lead(lead_id)
            if lead.status == "sold":
                raise LeadAlreadySoldError(f"Lead {lead_id} was already sold")
            if self.installer.credits < lead.price:
                raise InsufficientCreditsError(
                    f"Lead costs {lead.price:.2f} but only {self.installer.credits:.2f} credits remain"
                )
            self.installer = self.installer.model_copy(update={"credits": self.installer.credits - lead.price})
            lead.status = "sold"
            lead.pipeline_status = "Novo"
            sold = lead.model_copy()
        logger.info(f"Lead {lead_id} sold to {self.installer.company}")
        return sold

    def advance_pipeline_stage(self, lead_id: str, stage: str) -> Lead:
        if stage not in PIPELINE_STAGES:
            raise InvalidPipelineStageError(f"Unknown pipeline stage: {stage}")
        with self._lock:
            lead = self._find_lead(lead_id)
            if lead.status != "sold":
                raise InvalidPipelineStageError(f"Lead {lead_id} must be bought before entering the pipeline")
            lead.pipeline_status = stage
            return lead.model_copy()

    def marketplace_summary(self) -> MarketplaceSummary:
        with self._lock:
            sold = [lead for lead in self.leads if lead.status == "sold"]
            return MarketplaceSummary(
                sold_count=len(sold),
                available_count=len(self.leads) - len(sold),
                total_invested=sum(lead.price for lead in sold),
                credits_remaining=self.installer.credits,
            )
