# backend/servicedesk/core/config.py
import os
from decimal import Decimal

from dotenv import dotenv_values, load_dotenv, find_dotenv

# Project root (backend/) and its .env
BASE_DIR = os.path.abspath(os.path.join(os.path.dirname(__file__), "..", ".."))
DEFAULT_DOTENV = os.path.join(BASE_DIR, ".env")


def _norm_key(k: str) -> str:
    return k.replace("\ufeff", "").strip() if isinstance(k, str) else k


# Load .env without overriding what CI / the shell already exported
dotenv_path = DEFAULT_DOTENV if os.path.exists(DEFAULT_DOTENV) else find_dotenv(filename=".env", usecwd=True)
if dotenv_path:
    cfg = dotenv_values(dotenv_path, encoding="utf-8-sig")
    for k, v in cfg.items():
        nk = _norm_key(k)
        if v is not None and (nk not in os.environ or not os.environ[nk].strip()):
            os.environ[nk] = v
    load_dotenv(dotenv_path, override=False)


def _choice(name: str, default: str, allowed: tuple) -> str:
    val = (os.getenv(name) or default).strip().lower()
    if val not in allowed:
        raise RuntimeError(f"{name} must be one of {allowed}, got {val!r}")
    return val


# ---- Database ----
DATABASE_URL = os.environ.get("MSSQL_DSN") or os.environ.get("DATABASE_URL")

# ---- Caller tokens (issued by the identity service, only verified here) ----
JWT_SECRET = os.getenv("JWT_SECRET", "dev-secret-change-me")
JWT_ALG = os.getenv("JWT_ALG", "HS256")

# ---- HTTP ----
CORS_ALLOW_ORIGINS = os.getenv("CORS_ALLOW_ORIGINS", "*")

# ---- Logging ----
LOG_LEVEL = (os.getenv("LOG_LEVEL") or "INFO").upper()
SQL_LOG_LEVEL = (os.getenv("SQL_LOG_LEVEL") or "WARNING").upper()

# ---- Atomic units ----
TX_MAX_ATTEMPTS = max(1, int(os.getenv("TX_MAX_ATTEMPTS", "3")))

# resum: re-read every sibling line; delta: add (new - old) to the stored subtotal
AGGREGATE_STRATEGY = _choice("AGGREGATE_STRATEGY", "resum", ("resum", "delta"))

# strict: only graph edges are legal; permissive: any known status may be set
REQUEST_STATUS_MODE = _choice("REQUEST_STATUS_MODE", "strict", ("strict", "permissive"))
SESSION_STATUS_MODE = _choice("SESSION_STATUS_MODE", "permissive", ("strict", "permissive"))
ORDER_STATUS_MODE = _choice("ORDER_STATUS_MODE", "permissive", ("strict", "permissive"))

# ---- Billing ----
INVOICE_DEFAULT_TAX_RATE = Decimal(os.getenv("INVOICE_DEFAULT_TAX_RATE", "20"))
INVOICE_DUE_DAYS = int(os.getenv("INVOICE_DUE_DAYS", "30"))
