# codeleap/main.py
import logging
import os
import random
from typing import Optional

from dotenv import load_dotenv
from fastapi import APIRouter, FastAPI, HTTPException, Query, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import HTMLResponse, JSONResponse, RedirectResponse
from starlette.concurrency import run_in_threadpool

from .errors import InvalidApiKeyError, RateLimitedError
from .formatter import format_code
from .generator import fallback_response, generate_challenge, make_seed
from .llm import current_model_id, validate_key
from .preview import build_preview_document, should_show_preview
from .rate_limit import SlidingWindowLimiter
from .schemas import (
    AnswerRequest,
    ApiKeyRequest,
    Difficulty,
    FormatRequest,
    GenerateRequest,
    HistoryPage,
    Language,
    PreviewRequest,
    SessionGenerateRequest,
    ValidateKeyResponse,
    normalize_difficulty,
    normalize_language,
)
from .session import QuizSession
from .storage import JsonFileStore, KeyValueStore, MemoryStore

load_dotenv()

logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

RL_PER_MIN = int(os.getenv("RL_MAX_PER_MINUTE", "5"))
RL_PER_DAY = int(os.getenv("RL_MAX_PER_DAY", "50"))

router = APIRouter()


def _client_ip(req: Request) -> str:
    xff = req.headers.get("x-forwarded-for")
    if xff:
        return xff.split(",")[0].strip()
    real = req.headers.get("x-real-ip")
    if real:
        return real.strip()
    return req.client.host if req.client else "unknown"


def _session(req: Request) -> QuizSession:
    return req.app.state.session


def _optional_language(v: Optional[str]) -> Optional[Language]:
    if not v:
        return None
    try:
        return normalize_language(v)
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e))


def _optional_difficulty(v: Optional[str]) -> Optional[Difficulty]:
    if not v:
        return None
    try:
        return normalize_difficulty(v)
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e))


# ------------------- ROOT & HEALTH -------------------
@router.get("/", include_in_schema=False)
def root():
    return RedirectResponse(url="/docs", status_code=302)


@router.get("/health")
def health(req: Request):
    limiter: SlidingWindowLimiter = req.app.state.limiter
    return {
        "status": "ok",
        "model": current_model_id(),
        "limits": {
            "per_minute": limiter.max_per_minute,
            "per_day": limiter.max_per_day,
        },
    }


# ------------------- META -------------------
@router.get("/meta", response_class=JSONResponse)
def meta():
    return {
        "languages": [lang.value for lang in Language],
        "difficulties": [d.value for d in Difficulty],
        "example": {
            "language": "javascript",
            "difficulty": "easy",
            "apiKey": "<your provider key>",
        },
    }


# ------------------- STATELESS GENERATION -------------------
@router.post("/api/generate-challenge", response_class=JSONResponse)
def generate_post(req: Request, body: GenerateRequest):
    if not body.api_key:
        raise HTTPException(status_code=400, detail="API key is required")

    decision = req.app.state.limiter.allow(_client_ip(req))
    if not decision.allowed:
        logger.info("Local rate limit hit: %s", decision.message)
        resp = fallback_response(
            body.language, body.difficulty, make_seed(), RateLimitedError.notice, rate_limited=True,
        )
        return JSONResponse(content=resp.to_wire(), headers={"Retry-After": str(decision.retry_after or 60)})

    try:
        resp = generate_challenge(body.language, body.difficulty, body.api_key, random.Random())
    except InvalidApiKeyError as e:
        raise HTTPException(status_code=401, detail=str(e))
    return JSONResponse(content=resp.to_wire())


@router.post("/api/validate-key", response_class=JSONResponse)
def validate_key_post(body: ApiKeyRequest):
    valid, error = validate_key(body.api_key)
    return JSONResponse(content=ValidateKeyResponse(valid=valid, error=error).model_dump(by_alias=True))


# ------------------- FORMAT & PREVIEW -------------------
@router.post("/api/format", response_class=JSONResponse)
def format_post(body: FormatRequest):
    return {"code": format_code(body.code, body.language), "language": body.language.value}


@router.post("/api/preview", response_class=HTMLResponse)
def preview_post(body: PreviewRequest):
    if not should_show_preview(body.code):
        raise HTTPException(status_code=422, detail="Snippet has no HTML elements to preview")
    return build_preview_document(body.code)


# ------------------- SESSION: KEY & THEME -------------------
@router.get("/api/session/key")
def session_key_status(req: Request):
    return {"hasKey": _session(req).api_key is not None}


@router.post("/api/session/key", response_class=JSONResponse)
async def session_key_save(req: Request, body: ApiKeyRequest):
    valid, error = await run_in_threadpool(_session(req).save_api_key, body.api_key)
    return JSONResponse(content=ValidateKeyResponse(valid=valid, error=error).model_dump(by_alias=True))


@router.delete("/api/session/key")
def session_key_clear(req: Request):
    _session(req).clear_api_key()
    return {"hasKey": False}


@router.get("/api/session/theme")
def session_theme(req: Request):
    return {"theme": _session(req).theme}


@router.post("/api/session/theme")
def session_theme_toggle(req: Request):
    return {"theme": _session(req).toggle_theme()}


# ------------------- SESSION: CHALLENGES -------------------
@router.post("/api/session/generate", response_class=JSONResponse)
async def session_generate(req: Request, body: SessionGenerateRequest):
    session = _session(req)
    if session.is_generating:
        raise HTTPException(status_code=409, detail="Generation already in progress")
    try:
        resp = await session.generate(body.language, body.difficulty)
    except InvalidApiKeyError as e:
        raise HTTPException(status_code=401, detail=str(e))
    if resp is None:
        raise HTTPException(status_code=409, detail="Generation was cancelled")
    return JSONResponse(content=resp.to_wire())


@router.post("/api/session/cancel")
def session_cancel(req: Request):
    return {"cancelled": _session(req).cancel()}


@router.get("/api/session/current", response_class=JSONResponse)
def session_current(req: Request):
    session = _session(req)
    challenge = session.current
    if challenge is None:
        raise HTTPException(status_code=404, detail="No challenge yet")
    return {
        "state": session.state.value,
        "challenge": challenge.to_wire(),
        "formattedCode": format_code(challenge.code, challenge.language),
        "showPreview": challenge.language == Language.HTML and should_show_preview(challenge.code),
    }


@router.post("/api/session/answer", response_class=JSONResponse)
def session_answer(req: Request, body: AnswerRequest):
    challenge = _session(req).answer(body.answer)
    if challenge is None:
        raise HTTPException(status_code=409, detail="Nothing to answer or already answered")
    return {"challenge": challenge.to_wire(), "correct": challenge.answered_correctly}


@router.get("/api/session/history", response_class=JSONResponse)
def session_history(
    req: Request,
    language: Optional[str] = Query(None, description="javascript | html | css"),
    difficulty: Optional[str] = Query(None, description="easy | medium | hard"),
):
    items = _session(req).history.filter(_optional_language(language), _optional_difficulty(difficulty))
    page = HistoryPage(count=len(items), challenges=items).model_dump(by_alias=True, mode="json")
    for wire, challenge in zip(page["challenges"], items):
        wire["codePreview"] = challenge.code_preview()
    return page


@router.delete("/api/session/history")
def session_history_clear(req: Request):
    _session(req).clear_history()
    return {"cleared": True}


@router.get("/api/session/stats", response_class=JSONResponse)
def session_stats(req: Request):
    return _session(req).history.stats().model_dump(by_alias=True)


# ------------------- APP -------------------
def _default_store() -> KeyValueStore:
    path = os.getenv("CODELEAP_STORE_PATH")
    if path:
        return JsonFileStore(path)
    return MemoryStore()


def create_app(
    session: Optional[QuizSession] = None,
    limiter: Optional[SlidingWindowLimiter] = None,
) -> FastAPI:
    app = FastAPI(
        title="CodeLeap Challenge Service",
        description="AI-generated code review challenges (JavaScript/HTML/CSS) with a curated offline fallback.",
        version="1.0.0",
    )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.state.session = session or QuizSession(_default_store())
    app.state.limiter = limiter or SlidingWindowLimiter(max_per_minute=RL_PER_MIN, max_per_day=RL_PER_DAY)
    app.include_router(router)
    return app


app = create_app()
