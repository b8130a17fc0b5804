import logging
import time
import uuid
from contextlib import asynccontextmanager

import httpx
from fastapi import Depends, FastAPI, HTTPException, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.api.deps import get_relay
from app.api.qpay import router as qpay_router
from app.core.config import QPayConfig, cors_origins_list, settings
from app.core.errors import RelayError
from app.logging import request_id_var, setup_logging
from app.schemas.payment import HealthResponse
from app.services.qpay import QPayRelay

setup_logging(level=logging.INFO)
log = logging.getLogger("qpay_relay")


def _log_startup(config: QPayConfig) -> None:
    missing = config.missing_credentials()
    if missing:
        # Eksik olsa da süreç durmaz (hata ayıklama için)
        log.error("Missing required environment variables: %s", ", ".join(missing))
        log.error("Server starting anyway for debugging...")
    log.info("QPay API URL: %s", config.api_url)
    log.info("Merchant configured: %s", "yes" if config.merchant else "NO")
    log.info("Merchant user configured: %s", "yes" if config.merchant_user else "NO")
    log.info("Secret key: %s", "Configured" if config.secret_key else "Not configured")


@asynccontextmanager
async def lifespan(app: FastAPI):
    config = QPayConfig.from_settings(settings)
    _log_startup(config)
    async with httpx.AsyncClient(timeout=config.timeout_seconds) as http:
        app.state.relay = QPayRelay(config, http)
        log.info("MEKS QPay relay ready (environment=%s)", config.environment)
        yield
    app.state.relay = None


app = FastAPI(
    title="MEKS QPay Relay",
    description="Mobil/web istemci ile QPay ödeme altyapısı arasında durumsuz aracı",
    lifespan=lifespan,
)


@app.exception_handler(RelayError)
def relay_error_handler(request: Request, exc: RelayError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content=jsonable_encoder(exc.envelope()))


@app.exception_handler(RequestValidationError)
def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errs = jsonable_encoder(exc.errors())
    log.warning(
        "Request validation error (422): path=%s method=%s detail=%s",
        request.url.path,
        request.method,
        errs,
    )
    return JSONResponse(status_code=422, content={"success": False, "error": "Invalid request", "details": errs})


@app.exception_handler(HTTPException)
def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    detail = exc.detail if isinstance(exc.detail, str) else str(exc.detail)
    return JSONResponse(status_code=exc.status_code, content={"success": False, "error": detail})


@app.exception_handler(Exception)
def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    log.exception("Unhandled exception: path=%s %s", request.url.path, exc)
    return JSONResponse(
        status_code=500,
        content={"success": False, "error": "Internal server error", "message": str(exc)},
    )


@app.middleware("http")
async def request_id_and_latency(request: Request, call_next):
    # Üst katman (mobil istemci, proxy) gönderdiyse aynı kimlik korunur
    request.state.request_id = request.headers.get("x-request-id") or str(uuid.uuid4())
    token = request_id_var.set(request.state.request_id)
    start = time.perf_counter()
    try:
        response = await call_next(request)
        latency_ms = (time.perf_counter() - start) * 1000
        response.headers["X-Request-ID"] = request.state.request_id
        log.info(
            "method=%s path=%s status=%s latency_ms=%.2f",
            request.method,
            request.url.path,
            response.status_code,
            latency_ms,
        )
    finally:
        request_id_var.reset(token)
    return response


app.add_middleware(
    CORSMiddleware,
    allow_origins=cors_origins_list(),
    allow_methods=["*"],
    allow_headers=["*"],
)
app.include_router(qpay_router)


@app.get("/health", response_model=HealthResponse)
def health(relay: QPayRelay = Depends(get_relay)):
    return relay.health()


def run() -> None:
    """`qpay-relay` komutu: uvicorn ile PORT üzerinde başlatır."""
    import uvicorn

    uvicorn.run("app.main:app", host="0.0.0.0", port=settings.port, log_config=None)
