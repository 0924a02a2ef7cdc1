# backend/servicedesk/core/api.py
"""
Response envelopes.

Success: {"ok": true, "data": ...}
Failure: {"ok": false, "error": <reason>, "meta": {"kind": <kind>, ...}}
"""
from __future__ import annotations
from typing import Any, Dict, Optional
from fastapi.responses import JSONResponse

from .errors import ServiceError


# UTF-8 charset on every JSON response
class UTF8JSONResponse(JSONResponse):
    media_type = "application/json; charset=utf-8"


def ok(data: Any = True, meta: Optional[Dict[str, Any]] = None, status_code: int = 200):
    payload: Dict[str, Any] = {"ok": True, "data": data}
    if meta:
        payload["meta"] = meta
    return UTF8JSONResponse(content=payload, status_code=status_code)


def fail(error: str, status_code: int, kind: str, **details: Any):
    """Failure envelope; `kind` is one of the ServiceError kinds (or unauthorized/http)."""
    payload: Dict[str, Any] = {"ok": False, "error": error, "meta": {"kind": kind, **details}}
    return UTF8JSONResponse(content=payload, status_code=status_code)


def service_error_response(exc: ServiceError):
    return fail(exc.reason, exc.status_code, exc.kind)
