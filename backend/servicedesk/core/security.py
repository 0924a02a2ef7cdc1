# backend/servicedesk/core/security.py
from datetime import datetime, timedelta, timezone

from fastapi import HTTPException, status, Request
from fastapi.security.utils import get_authorization_scheme_param
from jose import jwt, JWTError

from .capabilities import Caller, CapabilityCheck, grant_check
from .config import JWT_SECRET, JWT_ALG


def _cred_exc() -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Authentication required",
        headers={"WWW-Authenticate": "Bearer"},
    )


# ---- Caller tokens ----
def create_caller_token(sub: str, grants: dict, expires_minutes: int = 60) -> str:
    """Mint a caller token (tooling and tests; real tokens come from the identity service)."""
    expire = datetime.now(tz=timezone.utc) + timedelta(minutes=expires_minutes)
    payload = {"sub": sub, "grants": grants, "exp": expire}
    return jwt.encode(payload, JWT_SECRET, algorithm=JWT_ALG)


# ---- Tolerant Authorization header parsing ----
def _extract_bearer_token(request: Request) -> str:
    """
    Parses the 'Authorization' header leniently:
      - extra spaces:     "Bearer   <JWT>"
      - doubled scheme:   "Bearer Bearer <JWT>"
      - quoted value:     Authorization: "Bearer <JWT>"
    """
    auth = request.headers.get("Authorization")
    if not auth:
        raise _cred_exc()

    auth = str(auth).strip().strip('"').strip("'")
    scheme, param = get_authorization_scheme_param(auth)
    if not scheme or scheme.lower() != "bearer":
        raise _cred_exc()

    token = (param or "").strip()
    if token.lower().startswith("bearer "):
        token = token.split(None, 1)[1].strip()
    token = token.replace(" ", "")
    if not token:
        raise _cred_exc()
    return token


def decode_caller(token: str) -> Caller:
    try:
        claims = jwt.decode(token, JWT_SECRET, algorithms=[JWT_ALG])
    except JWTError:
        raise _cred_exc()
    if not claims.get("sub"):
        raise _cred_exc()
    try:
        return Caller.from_claims(claims)
    except (AttributeError, TypeError, ValueError):
        # signed but malformed grants (non-numeric manager_id, grants not a mapping)
        raise _cred_exc()


# ---- FastAPI dependencies ----
def get_caller(request: Request) -> Caller:
    return decode_caller(_extract_bearer_token(request))


def get_capability_check() -> CapabilityCheck:
    # overridable through app.dependency_overrides
    return grant_check
