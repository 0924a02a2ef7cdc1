# backend/servicedesk/main.py
import json
import logging

from fastapi import FastAPI, Depends, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.encoders import jsonable_encoder
from sqlalchemy import text
from sqlalchemy.orm import Session
from starlette.exceptions import HTTPException as StarletteHTTPException

from servicedesk.core.logging_config import configure_logging

configure_logging()

from servicedesk.core.api import ok, fail, service_error_response, UTF8JSONResponse
from servicedesk.core.config import CORS_ALLOW_ORIGINS
from servicedesk.core.db import get_db
from servicedesk.core.errors import ServiceError

# --- Routers ---
from servicedesk.routers.requests import router as requests_router
from servicedesk.routers.sessions import router as sessions_router
from servicedesk.routers.materials import router as materials_router
from servicedesk.routers.products import router as products_router
from servicedesk.routers.orders import router as orders_router
from servicedesk.routers.order_lines import router as order_lines_router
from servicedesk.routers.receipts import router as receipts_router
from servicedesk.routers.invoices import router as invoices_router

logger = logging.getLogger(__name__)

app = FastAPI(title="Service Desk", default_response_class=UTF8JSONResponse)


# -----------------------------
# Error envelope
# -----------------------------
@app.exception_handler(ServiceError)
async def service_error_to_envelope(request: Request, exc: ServiceError):
    return service_error_response(exc)


@app.exception_handler(StarletteHTTPException)
async def http_exception_to_envelope(request: Request, exc: StarletteHTTPException):
    return fail(
        str(exc.detail) if exc.detail else exc.__class__.__name__,
        exc.status_code,
        "unauthorized" if exc.status_code == 401 else "http",
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_to_envelope(request: Request, exc: RequestValidationError):
    return fail(
        "Validation error",
        422,
        "validation",
        errors=jsonable_encoder(exc.errors()),
    )


# -----------------------------
# CORS (.env)
# -----------------------------
def _parse_origins(env_val):
    if not env_val or env_val.strip() == "*":
        return ["*"]
    try:
        parsed = json.loads(env_val)
        if isinstance(parsed, list):
            return [str(x) for x in parsed]
    except ValueError:
        pass
    return [s.strip() for s in env_val.split(",") if s.strip()]


ALLOWED_ORIGINS = _parse_origins(CORS_ALLOW_ORIGINS)
logger.info("CORS allow_origins = %s", ALLOWED_ORIGINS)

app.add_middleware(
    CORSMiddleware,
    allow_origins=ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ---- Health ----
@app.get("/health")
def health():
    return ok({"service": "servicedesk"})


@app.get("/db-ping")
def db_ping(db: Session = Depends(get_db)):
    val = db.execute(text("SELECT 1")).scalar()
    return ok({"db": "ok", "select1": val})


# =========================
# Routers
# =========================
app.include_router(requests_router)      # /requests
app.include_router(sessions_router)      # /sessions, /sessions/{id}/materials
app.include_router(materials_router)     # /materials
app.include_router(products_router)      # /products
app.include_router(orders_router)        # /orders, lines, receipts
app.include_router(order_lines_router)   # /order-lines
app.include_router(receipts_router)      # /receipts
app.include_router(invoices_router)      # /invoices

logger.info("routes registered: %s", len(app.routes))
