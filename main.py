import os
import logging
from datetime import datetime, timezone
from typing import List, Optional

import requests
import uvicorn
from fastapi import Depends, FastAPI, HTTPException, Query, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response
from google import genai
from google.genai import types

import config
from agents.agent import ReportPipeline
from agents.subagents.solar_expert_chat.agent import SolarExpertChat, report_context, to_genai_history
from models.schemas import (
    AddressInput,
    ChatInput,
    GenerateReportInput,
    InstallerProfile,
    Lead,
    LeadInput,
    MarketplaceSummary,
    PipelineStageInput,
    ReportChatInput,
    SolarReport,
)
from store.app_store import (
    AppStore,
    InsufficientCreditsError,
    InvalidPipelineStageError,
    LeadAlreadySoldError,
    LeadNotFoundError,
    ReportInProgressError,
    ReportNotFoundError,
    StoreError,
)
from tools.geocoding_client import GeocodingClient
from tools.solar_api_client import SolarAPIClient

logging.basicConfig(level=config.LOG_LEVEL)
logger = logging.getLogger(__name__)

app = FastAPI(title="SolarSavian API", version="1.0.0")

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

if not config.GOOGLE_API_KEY:
    logger.error("GOOGLE_API_KEY is not set; upstream calls will fail.")
else:
    logger.info(f"Server initialized with API Key: {config.GOOGLE_API_KEY[:8]}...")

STORE_ERROR_STATUS = {
    LeadNotFoundError: 404,
    ReportNotFoundError: 404,
    LeadAlreadySoldError: 409,
    InvalidPipelineStageError: 409,
    ReportInProgressError: 409,
    InsufficientCreditsError: 402,
}

INVALID_INPUT_MESSAGE = "Não foi possível gerar o relatório: informe um endereço e uma conta de luz maior que zero."

# The server is the proxy, so its own pipeline talks to the providers directly.
_store = AppStore(pipeline=ReportPipeline.direct())
_http = requests.Session()
_genai_client = None


def get_store() -> AppStore:
    return _store


def get_http_session():
    return _http


def get_genai_client():
    global _genai_client
    if _genai_client is None:
        _genai_client = genai.Client(api_key=config.GOOGLE_API_KEY)
    return _genai_client


@app.exception_handler(StoreError)
async def store_error_handler(request: Request, exc: StoreError):
    status = STORE_ERROR_STATUS.get(type(exc), 400)
    return JSONResponse(status_code=status, content={"error": str(exc)})


# --- Proxy routes ---

@app.get("/api/health")
def health():
    return {"status": "online", "timestamp": datetime.now(timezone.utc).isoformat()}


@app.get("/api/coordinates")
def coordinates(address: Optional[str] = None, session=Depends(get_http_session)):
    if not address:
        raise HTTPException(status_code=400, detail="Address is required")
    data = GeocodingClient(proxy_base_url="", session=session).call_api(address)
    if data is None:
        raise HTTPException(status_code=500, detail="Failed to fetch coordinates")
    return data


@app.get("/api/solar-potential")
def solar_potential(lat: Optional[float] = None, lng: Optional[float] = None,
                    session=Depends(get_http_session)):
    if lat is None or lng is None:
        raise HTTPException(status_code=400, detail="Lat and Lng are required")
    status, data = SolarAPIClient(proxy_base_url="", session=session).fetch_raw(lat, lng)
    if status is None:
        raise HTTPException(status_code=500, detail="Internal Server Error")
    if status == 404:
        raise HTTPException(status_code=404, detail="No solar data found for location")
    if data is None:
        raise HTTPException(status_code=status if status >= 400 else 502, detail="Solar API Error")
    return data


@app.get("/api/static-map")
def static_map(lat: Optional[float] = None, lng: Optional[float] = None,
               zoom: int = 19, size: str = "600x400", session=Depends(get_http_session)):
    if lat is None or lng is None:
        raise HTTPException(status_code=400, detail="Missing parameters")
    params = {
        "center": f"{lat},{lng}",
        "zoom": zoom,
        "size": size,
        "maptype": "satellite",
        "markers": f"color:orange|{lat},{lng}",
        "key": config.GOOGLE_API_KEY,
    }
    try:
        resp = session.get(config.STATIC_MAP_URL, params=params, timeout=config.HTTP_TIMEOUT_SECONDS)
    except requests.RequestException as e:
        logger.error(f"Static Map Error: {e}")
        raise HTTPException(status_code=500, detail="Error fetching map")
    if not resp.ok:
        logger.error(f"Static Map Error: HTTP {resp.status_code}")
        raise HTTPException(status_code=500, detail="Error fetching map")
    return Response(content=resp.content, media_type="image/png")


@app.post("/api/generate-report")
def generate_report(body: GenerateReportInput, client=Depends(get_genai_client)):
    try:
        response = client.models.generate_content(
            model=body.modelId or config.GEMINI_MODEL,
            contents=body.prompt,
            config=types.GenerateContentConfig(**(body.config or {})),
        )
    except Exception as e:
        logger.error(f"Gemini Report Error: {e}")
        raise HTTPException(status_code=500, detail=str(e) or "Failed to generate report")
    return {"text": response.text}


@app.post("/api/chat")
def chat(body: ChatInput, client=Depends(get_genai_client)):
    try:
        session = client.chats.create(
            model=config.GEMINI_MODEL,
            history=to_genai_history(body.history),
            config=types.GenerateContentConfig(
                system_instruction=body.systemInstruction,
                tools=[types.Tool(google_search=types.GoogleSearch())],
            ),
        )
        result = session.send_message(body.message)
    except Exception as e:
        logger.error(f"Gemini Chat Error: {e}")
        raise HTTPException(status_code=500, detail=str(e) or "Failed to chat")
    return {"text": result.text}


# --- Homeowner / marketplace routes ---

@app.post("/api/reports", response_model=SolarReport)
def create_report(body: AddressInput, store: AppStore = Depends(get_store)):
    try:
        return store.submit_address(body.address, body.monthly_bill)
    except ValueError as e:
        logger.warning(f"Rejected report request: {e}")
        raise HTTPException(status_code=422, detail=INVALID_INPUT_MESSAGE)


@app.get("/api/reports/{report_id}", response_model=SolarReport)
def read_report(report_id: str, store: AppStore = Depends(get_store)):
    return store.get_report(report_id)


@app.post("/api/reports/{report_id}/chat")
def chat_about_report(report_id: str, body: ReportChatInput, store: AppStore = Depends(get_store),
                      session=Depends(get_http_session), client=Depends(get_genai_client)):
    report = store.get_report(report_id)
    # This server is the proxy, so the expert talks to Gemini directly.
    expert = SolarExpertChat(proxy_base_url="", session=session, genai_client=client)
    return {"text": expert.reply(body.history, body.message, report_context(report))}


@app.get("/api/leads", response_model=List[Lead])
def list_leads(status: Optional[str] = Query(None), store: AppStore = Depends(get_store)):
    return store.list_leads(status)


@app.post("/api/leads", response_model=Lead, status_code=201)
def capture_lead(body: LeadInput, store: AppStore = Depends(get_store)):
    return store.capture_lead(body.name, body.email, body.phone, report_id=body.report_id)


@app.post("/api/leads/{lead_id}/buy", response_model=Lead)
def buy_lead(lead_id: str, store: AppStore = Depends(get_store)):
    return store.buy_lead(lead_id)


@app.post("/api/leads/{lead_id}/pipeline", response_model=Lead)
def advance_pipeline(lead_id: str, body: PipelineStageInput, store: AppStore = Depends(get_store)):
    return store.advance_pipeline_stage(lead_id, body.stage)


@app.get("/api/installer", response_model=InstallerProfile)
def installer(store: AppStore = Depends(get_store)):
    return store.installer


@app.get("/api/marketplace/summary", response_model=MarketplaceSummary)
def marketplace_summary(store: AppStore = Depends(get_store)):
    return store.marketplace_summary()


@app.post("/api/store/reset")
def reset_store(store: AppStore = Depends(get_store)):
    store.reset()
    return {"message": "OK"}


if __name__ == "__main__":
    uvicorn.run(app, host="0.0.0.0", port=int(os.environ.get("PORT", config.PORT)))
