# ============================================================
# Gemini Studio FastAPI App
# ------------------------------------------------------------
# This app wires everything together:
#   - /chat mode dispatch with conversation history
#   - /project-builder structured project plans
#   - /generate typed access to every generation mode
#   - Gemini or Echo model clients behind one Gateway
# ============================================================

from datetime import datetime, timezone
from typing import Any, Dict, List, Literal, Optional, Union
import logging
import sqlite3

from fastapi import Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from starlette.exceptions import HTTPException as StarletteHTTPException

# --- Local imports ---
from studio.settings import settings
from studio.logging_setup import configure_logging
from studio.interactions import InteractionLog
from studio.generate import (
    ConversationTurn,
    Gateway,
    GenerationFailure,
    GenerationRequest,
    GenerationResult,
    GenerationTimeout,
    InvalidRequest,
    Mode,
)
from studio.generate.clients.echo_dev_client import EchoDevClient
from studio.generate.dispatch import DEFAULT_CHAT_MODE, dispatch_chat, resolve_chat_mode
from studio.generate.retry import RetryConfig, RetryManager

configure_logging(settings.LOG_LEVEL)
logger = logging.getLogger("studio.app")

# ------------------------------------------------------------
# 🔧 Model client selection
# ------------------------------------------------------------
if settings.GEMINI_API_KEY:
    from studio.generate.clients.gemini_client import GeminiClient
    model_client = GeminiClient(
        api_key=settings.GEMINI_API_KEY,
        model=settings.GEMINI_MODEL,
        base_url=settings.GEMINI_BASE_URL,
        timeout=settings.PROVIDER_TIMEOUT_S,
    )
else:
    logger.warning("GEMINI_API_KEY not set; using EchoDevClient")
    model_client = EchoDevClient()

gateway = Gateway(model_client=model_client, history_max_turns=settings.HISTORY_MAX_TURNS)
retry_manager = RetryManager(
    RetryConfig(
        max_attempts=settings.RETRY_MAX_ATTEMPTS,
        backoff_factor=settings.RETRY_BACKOFF_FACTOR,
        initial_delay=settings.RETRY_INITIAL_DELAY,
        max_delay=settings.RETRY_MAX_DELAY,
    )
)
interaction_log = InteractionLog(settings.INTERACTION_LOG_PATH) if settings.INTERACTION_LOG_PATH else None


def get_gateway() -> Gateway:
    return gateway


def get_retry_manager() -> RetryManager:
    return retry_manager


def get_interaction_log() -> Optional[InteractionLog]:
    return interaction_log

# ------------------------------------------------------------
# 🚀 FastAPI init
# ------------------------------------------------------------
app = FastAPI(title="Gemini Studio API", version="0.3")

# ------------------------------------------------------------
# 📦 Pydantic models
# ------------------------------------------------------------
class ChatTurn(BaseModel):
    role: Literal["user", "assistant"]
    content: str

class ChatRequest(BaseModel):
    message: Optional[str] = None
    mode: Optional[str] = None
    conversationHistory: Optional[List[ChatTurn]] = None

class ProjectBuilderRequest(BaseModel):
    prompt: Optional[str] = None
    projectType: Optional[str] = None
    requirements: Optional[List[str]] = None
    buildContext: Optional[Dict[str, Any]] = None

class GenerateRequest(BaseModel):
    mode: Mode
    primaryText: str
    auxiliaryParameters: Dict[str, Union[str, List[str]]] = {}

# ------------------------------------------------------------
# ⚠️ Error envelopes
# ------------------------------------------------------------
@app.exception_handler(InvalidRequest)
def invalid_request_handler(request: Request, exc: InvalidRequest):
    body = {"error": exc.message}
    if exc.details:
        body["details"] = exc.details
    return JSONResponse(status_code=400, content=body)

@app.exception_handler(RequestValidationError)
def validation_error_handler(request: Request, exc: RequestValidationError):
    details = "; ".join(
        f"{'.'.join(str(p) for p in err.get('loc', ()))}: {err.get('msg', '')}" for err in exc.errors()
    )
    return JSONResponse(status_code=400, content={"error": "Invalid request", "details": details})

@app.exception_handler(StarletteHTTPException)
def http_error_handler(request: Request, exc: StarletteHTTPException):
    if exc.status_code == 405:
        return JSONResponse(status_code=405, content={"error": "Method not allowed"}, headers=exc.headers)
    return JSONResponse(status_code=exc.status_code, content={"error": exc.detail}, headers=exc.headers)

@app.exception_handler(Exception)
def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=500, content={"error": "Internal server error", "details": str(exc)})


def _timestamp() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def _failure_response(summary: str, exc: GenerationFailure) -> JSONResponse:
    if isinstance(exc, GenerationTimeout):
        summary = "Generation timed out"
    body = {"error": summary, "details": str(exc)}
    if exc.retries_exhausted:
        body["retriesExhausted"] = True
    return JSONResponse(status_code=500, content=body)


def _record(log: Optional[InteractionLog], mode: str, prompt: str,
            result: Optional[GenerationResult] = None, failure: Optional[GenerationFailure] = None):
    if log is None:
        return
    if failure is not None:
        log.record(mode, prompt, success=False, error=str(failure))
    else:
        log.record(mode, prompt, response=result.raw_text if result else None)

# ------------------------------------------------------------
# 💬 Chat route (mode dispatch)
# ------------------------------------------------------------
@app.post("/chat")
def chat(
    req: Optional[ChatRequest] = None,
    gw: Gateway = Depends(get_gateway),
    retries: RetryManager = Depends(get_retry_manager),
    log: Optional[InteractionLog] = Depends(get_interaction_log),
):
    if req is None or not req.message:
        raise InvalidRequest("Message is required")

    mode = req.mode or DEFAULT_CHAT_MODE
    handled_as = resolve_chat_mode(mode)
    history = [ConversationTurn(role=t.role, content=t.content) for t in (req.conversationHistory or [])]

    try:
        result = retries.execute(lambda: dispatch_chat(gw, req.message, handled_as, history))
    except GenerationFailure as e:
        logger.error("Chat request failed: %s", e)
        _record(log, handled_as, req.message, failure=e)
        return _failure_response("Failed to process chat message", e)

    _record(log, handled_as, req.message, result=result)
    return {
        "success": True,
        "response": result.raw_text,
        "mode": mode,
        "timestamp": _timestamp(),
        "historyClipped": bool(result.meta.get("history_clipped", False)),
    }

# ------------------------------------------------------------
# 🏗️ Project builder route (structured output)
# ------------------------------------------------------------
@app.post("/project-builder")
def project_builder(
    req: Optional[ProjectBuilderRequest] = None,
    gw: Gateway = Depends(get_gateway),
    retries: RetryManager = Depends(get_retry_manager),
    log: Optional[InteractionLog] = Depends(get_interaction_log),
):
    if req is None or not req.prompt:
        raise InvalidRequest("Prompt is required")

    try:
        result = retries.execute(lambda: gw.generate_project_plan(
            req.prompt,
            req.projectType or "web",
            req.requirements or [],
            req.buildContext or {},
        ))
    except GenerationFailure as e:
        logger.error("Project builder request failed: %s", e)
        _record(log, Mode.PROJECT_PLAN.value, req.prompt, failure=e)
        return _failure_response("Failed to generate project plan", e)

    _record(log, Mode.PROJECT_PLAN.value, req.prompt, result=result)
    if result.structured is not None:
        plan = result.structured
    else:
        plan = {
            "analysis": result.raw_text,
            "error": "Could not parse structured project plan",
            "parseError": result.parse_error,
        }
    return {"success": True, "projectPlan": plan, "timestamp": _timestamp()}

# ------------------------------------------------------------
# 🧰 Generic generation route
# ------------------------------------------------------------
@app.post("/generate")
def generate(
    req: GenerateRequest,
    gw: Gateway = Depends(get_gateway),
    retries: RetryManager = Depends(get_retry_manager),
    log: Optional[InteractionLog] = Depends(get_interaction_log),
):
    if not req.primaryText.strip():
        raise InvalidRequest("primaryText is required")

    request = GenerationRequest(
        mode=req.mode,
        primary_text=req.primaryText,
        auxiliary_parameters=req.auxiliaryParameters,
    )
    try:
        result = retries.execute(lambda: gw.run(request))
    except GenerationFailure as e:
        logger.error("Generate request failed: %s", e)
        _record(log, req.mode.value, req.primaryText, failure=e)
        return _failure_response("Failed to generate content", e)

    _record(log, req.mode.value, req.primaryText, result=result)
    return {
        "success": True,
        "mode": req.mode.value,
        "response": result.raw_text,
        "structured": result.structured,
        "parseError": result.parse_error,
        "timestamp": _timestamp(),
    }

# ------------------------------------------------------------
# 📊 Interaction stats
# ------------------------------------------------------------
@app.get("/stats")
def stats(log: Optional[InteractionLog] = Depends(get_interaction_log)):
    if log is None:
        return {"enabled": False}
    try:
        counts = log.stats()
    except (sqlite3.Error, OSError) as e:
        logger.error("Could not read interaction stats: %s", e)
        return {"enabled": True, "error": "Interaction log unavailable", "details": str(e)}
    return {"enabled": True, **counts}

# ------------------------------------------------------------
# 🧭 Health checks
# ------------------------------------------------------------
@app.get("/healthz")
def healthz():
    return {
        "ok": True,
        "env": settings.ENV,
        "debug": settings.DEBUG,
        "app": settings.app_name,
        "engine": type(model_client).__name__,
    }

@app.get("/health")
def health():
    return {"status": "healthy", "env": settings.ENV, "timestamp": _timestamp()}

@app.get("/")
def hello():
    return {"message": "Gemini Studio service running."}
