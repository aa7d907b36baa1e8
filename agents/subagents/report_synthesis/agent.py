import logging
from typing import Optional

import requests
from google import genai
from google.genai import types

import config
import agents.subagents.report_synthesis.prompt as prompts
from models.schemas import ROOF_QUALITY_LABELS, EstimateResult, NarrativeResult
from .helper import format_brl, parse_gemini_json

logger = logging.getLogger(__name__)

TEMPERATURE = 0.2


def build_prompt(address: str, facts: EstimateResult) -> str:
    payback = (
        f"{facts.payback_period_years:.1f} anos"
        if facts.payback_period_years is not None
        else "indefinido"
    )
    data_context = prompts.DATA_CONTEXT.format(
        address=address,
        tariff=facts.tariff,
        system_size_kw=facts.system_size_kw,
        annual_savings=format_brl(facts.annual_savings),
        estimated_cost=format_brl(facts.estimated_cost),
        payback=payback,
        roof_quality=facts.roof_quality,
    )
    return prompts.SYSTEM_INSTRUCTIONS + prompts.TASK_PROMPT.format(data_context=data_context)


def fallback_summary(facts: EstimateResult) -> str:
    return prompts.FALLBACK_SUMMARY.format(
        system_size_kw=facts.system_size_kw,
        annual_savings=round(facts.annual_savings),
    )


class ReportSynthesisAgent:
    """Turns computed estimate facts into a one-paragraph summary.

    Tries the local proxy, then Gemini directly. Any failure ends in a
    templated sentence built from the facts; run() never raises.
    """

    def __init__(self, proxy_base_url: Optional[str] = None, api_key: Optional[str] = None,
                 model: Optional[str] = None, session=None, genai_client=None,
                 timeout: Optional[float] = None):
        self.proxy_base_url = config.PROXY_BASE_URL if proxy_base_url is None else proxy_base_url
        self.api_key = config.GOOGLE_API_KEY if api_key is None else api_key
        self.model = model or config.GEMINI_MODEL
        self.session = session or requests.Session()
        self.timeout = timeout or config.HTTP_TIMEOUT_SECONDS
        self._genai_client = genai_client

    @property
    def genai_client(self):
        if self._genai_client is None:
            self._genai_client = genai.Client(api_key=self.api_key)
        return self._genai_client

    def _via_proxy(self, prompt: str) -> Optional[str]:
        if not self.proxy_base_url:
            return None
        url = f"{self.proxy_base_url.rstrip('/')}/generate-report"
        body = {"modelId": self.model, "prompt": prompt, "config": {"temperature": TEMPERATURE}}
        try:
            resp = self.session.post(url, json=body, timeout=self.timeout)
            if not resp.ok:
                logger.warning(f"Report proxy HTTP {resp.status_code}")
                return None
            text = resp.json().get("text")
            return text if isinstance(text, str) else None
        except (requests.RequestException, ValueError, AttributeError) as e:
            logger.warning(f"Report proxy unavailable: {e}")
            return None

    def _via_client(self, prompt: str) -> Optional[str]:
        try:
            response = self.genai_client.models.generate_content(
                model=self.model,
                contents=prompt,
                config=types.GenerateContentConfig(temperature=TEMPERATURE),
            )
            return response.text if isinstance(response.text, str) else None
        except Exception as e:
            logger.error(f"Gemini generation failed: {e}")
            return None

    def run(self, address: str, facts: EstimateResult) -> NarrativeResult:
        prompt = build_prompt(address, facts)

        for source, call in (("proxy", self._via_proxy), ("direct", self._via_client)):
            text = call(prompt)
            if not text:
                continue
            parsed = parse_gemini_json(text)
            summary = parsed.get("summary")
            if isinstance(summary, str) and summary.strip():
                quality = parsed.get("roofQuality")
                if quality not in ROOF_QUALITY_LABELS:
                    quality = facts.roof_quality
                return NarrativeResult(summary=summary.strip(), roof_quality=quality, source=source)
            logger.warning(f"Unusable summary from {source}; trying next option")

        logger.warning("AI generation failed, using default summary")
        return NarrativeResult(summary=fallback_summary(facts), roof_quality=facts.roof_quality, source="fallback")


def generate_summary(address: str, facts: EstimateResult) -> NarrativeResult:
    return ReportSynthesisAgent().run(address, facts)
