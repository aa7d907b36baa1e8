import logging
from typing import List, Optional

import requests
from google import genai
from google.genai import types

import config
from models.schemas import ChatTurn, SolarReport
from . import prompt

logger = logging.getLogger(__name__)


def report_context(report: Optional[SolarReport]) -> str:
    """Compact description of a report for the chat system instruction."""
    if report is None:
        return prompt.NO_CONTEXT
    payback = f"{report.payback_period_years:.1f} anos" if report.payback_period_years is not None else "indefinido"
    return (
        f"Endereço {report.address}; sistema {report.system_size_kw:.2f} kWp; "
        f"economia anual R$ {round(report.annual_savings)}; custo R$ {round(report.estimated_cost)}; "
        f"payback {payback}; telhado {report.roof_quality}; tarifa R$ {report.local_energy_rate:.2f}/kWh."
    )


def build_system_instruction(context: Optional[str]) -> str:
    return prompt.SYSTEM_INSTRUCTIONS.format(context=context or prompt.NO_CONTEXT)


def to_genai_history(history: List[ChatTurn]) -> List[types.Content]:
    return [types.Content(role=turn.role, parts=[types.Part(text=turn.text)]) for turn in history]


class SolarExpertChat:
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

    def _via_proxy(self, history: List[ChatTurn], message: str, system_instruction: str) -> Optional[str]:
        if not self.proxy_base_url:
            return None
        url = f"{self.proxy_base_url.rstrip('/')}/chat"
        body = {
            "history": [turn.model_dump() for turn in history],
            "message": message,
            "systemInstruction": system_instruction,
        }
        try:
            resp = self.session.post(url, json=body, timeout=self.timeout)
            if not resp.ok:
                logger.warning(f"Chat proxy HTTP {resp.status_code}")
                return None
            text = resp.json().get("text")
            return text if isinstance(text, str) else None
        except (requests.RequestException, ValueError, AttributeError) as e:
            logger.warning(f"Chat proxy unavailable: {e}")
            return None

    def _via_client(self, history: List[ChatTurn], message: str, system_instruction: str) -> Optional[str]:
        try:
            chat = self.genai_client.chats.create(
                model=self.model,
                history=to_genai_history(history),
                config=types.GenerateContentConfig(system_instruction=system_instruction),
            )
            text = chat.send_message(message).text
            return text if isinstance(text, str) else None
        except Exception as e:
            logger.error(f"Gemini chat failed: {e}")
            return None

    def reply(self, history: List[ChatTurn], message: str, context: Optional[str] = None) -> str:
        system_instruction = build_system_instruction(context)
        for call in (self._via_proxy, self._via_client):
            text = call(history, message, system_instruction)
            if text:
                return text
        return prompt.OFFLINE_REPLY


def chat_with_solar_expert(history: List[ChatTurn], message: str, context: Optional[str] = None) -> str:
    return SolarExpertChat().reply(history, message, context)
