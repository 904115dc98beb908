# nekos/main.py
import logging, time, uuid
from contextlib import asynccontextmanager
from typing import Any, List, Optional, Union

from fastapi import Body, Depends, FastAPI, Query, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from pydantic import BaseModel, Field
from pydantic import ValidationError as SchemaError

# Rate limiting
from slowapi import Limiter
from slowapi.util import get_remote_address
from slowapi.middleware import SlowAPIMiddleware
from slowapi.errors import RateLimitExceeded

from .errors import ConfigurationError, IntentViolationError, NekosError, ValidationError
from .facade import NekoClient, get_client
from .settings import (
    get_allowed_origins, get_rate_limit_per_min, get_startup_intent, is_intent_endpoint_enabled,
)

# =========================
# Environment & Constants
# =========================
RATE_LIMIT_PER_MIN = get_rate_limit_per_min()
API_VERSION = "v2"

ERROR_STATUS = {
    ConfigurationError: 409,
    ValidationError: 422,
    IntentViolationError: 403,
}

# =========================
# Logging
# =========================
logger = logging.getLogger("nekos.api")
logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(message)s")


# =========================
# App Setup
# =========================
def get_neko_client() -> NekoClient:
    """Dependency hook; tests override it with a client over a fixture catalog."""
    return get_client()


@asynccontextmanager
async def lifespan(app: FastAPI):
    intent = get_startup_intent()
    if intent is not None:
        metadata, content_type = intent
        client = get_client()
        if not client.gate.is_locked:
            client.configure_intent(metadata=metadata, content_type=content_type)
    yield


limiter = Limiter(key_func=get_remote_address, default_limits=[f"{RATE_LIMIT_PER_MIN}/minute"])
app = FastAPI(title="Local Nekos API", lifespan=lifespan)
app.state.limiter = limiter
app.add_middleware(SlowAPIMiddleware)

app.add_middleware(
    CORSMiddleware,
    allow_origins=get_allowed_origins(),
    allow_credentials=False,
    allow_methods=["GET", "POST"],
    allow_headers=["*"],
)

# =========================
# Schemas
# =========================
class FetchRequest(BaseModel):
    # Passed through untouched; the normalizer owns amount validation
    amount: Any = 1
    actions: Optional[Union[str, List[str]]] = None
    search: Optional[Union[str, List[str]]] = None
    type: Optional[Union[int, str]] = None
    mode: Optional[Union[int, str]] = None
    dupe: bool = False


class IntentRequest(BaseModel):
    metadata: Optional[Union[bool, int, List[str]]] = None
    type: Optional[Union[int, str]] = Field(default=None)


# =========================
# Routes
# =========================
@app.get("/health")
def health(client: NekoClient = Depends(get_neko_client)):
    return {"status": "ok", "version": API_VERSION, "intent_locked": client.gate.is_locked}


@app.get("/api/actions")
def actions(client: NekoClient = Depends(get_neko_client)):
    return client.list_actions()


@app.get("/api/count")
def count(client: NekoClient = Depends(get_neko_client)):
    return client.count()


@app.get("/api/load")
def load(client: NekoClient = Depends(get_neko_client)):
    return client.load_all()


@app.post("/api/fetch", summary="Fetch")
@limiter.limit(f"{RATE_LIMIT_PER_MIN}/minute")
def fetch_post(body: FetchRequest, request: Request, client: NekoClient = Depends(get_neko_client)):
    """JSON endpoint. Returns one item when amount is 1, otherwise a list."""
    started = time.time()
    result = client.fetch(
        amount=body.amount, actions=body.actions, search=body.search,
        content_type=body.type, mode=body.mode, allow_duplicates=body.dupe,
    )
    _log_fetch(request, "/api/fetch", body.amount, result, started)
    return result


@app.post("/api/intent")
def intent(body: Any = Body(None), client: NekoClient = Depends(get_neko_client)):
    # Flag first: a disabled endpoint answers 404 whatever the body holds
    if not is_intent_endpoint_enabled():
        return error_json("NOT_FOUND", "Intent endpoint is disabled.", 404)
    try:
        body = IntentRequest.model_validate(body or {})
    except SchemaError:
        return error_json("VALIDATION_ERROR", "Invalid input.", 422)
    cfg = client.configure_intent(metadata=body.metadata, content_type=body.type)
    return {
        "type": int(cfg.content_type),
        "actions": list(cfg.allowed_categories),
        "metadata": cfg.metadata.mode,
        "fields": sorted(cfg.metadata.fields),
    }


@app.get("/api/{action}")
@limiter.limit(f"{RATE_LIMIT_PER_MIN}/minute")
def fetch_action(
    action: str,
    request: Request,
    amount: int = Query(1),
    search: Optional[List[str]] = Query(None),
    client: NekoClient = Depends(get_neko_client),
):
    started = time.time()
    result = client.fetch(amount=amount, actions=action, search=search)
    _log_fetch(request, f"/api/{action}", amount, result, started)
    return result


def _log_fetch(request: Request, path: str, amount: Any, result: Any, started: float) -> None:
    returned = len(result) if isinstance(result, list) else 1
    latency_ms = int((time.time() - started) * 1000)
    logger.info("FETCH ip=%s path=%s amount=%s returned=%s latency_ms=%s",
                get_remote_address(request), path, amount, returned, latency_ms)


# =========================
# Error Normalization
# =========================
def error_json(code: str, message: str, status: int = 400, request_id: Optional[str] = None) -> JSONResponse:
    return JSONResponse(status_code=status, content={"error": {"code": code, "message": message}, "request_id": request_id or str(uuid.uuid4())})


@app.exception_handler(NekosError)
async def nekos_error_handler(request: Request, exc: NekosError):
    status = next((s for cls, s in ERROR_STATUS.items() if isinstance(exc, cls)), 400)
    logger.warning("[%s] %s %s: %s", exc.code, request.method, request.url.path, exc)
    return error_json(exc.code, str(exc)[:400], status)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc): return error_json("VALIDATION_ERROR", "Invalid input.", 422)


@app.exception_handler(RateLimitExceeded)
async def ratelimit_handler(request: Request, exc: RateLimitExceeded): return error_json("RATE_LIMITED", "Too many requests. Please try again in a minute.", 429)
