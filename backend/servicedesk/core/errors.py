# backend/servicedesk/core/errors.py
"""
Failure taxonomy of the engine.

Every failure is an HTTPException subclass so routers and services keep
raising the way FastAPI expects; `kind` tags the failure for callers.
"""
from fastapi import HTTPException, status


class ServiceError(HTTPException):
    kind = "internal"
    http_status = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, detail: str):
        super().__init__(status_code=self.http_status, detail=detail)

    @property
    def reason(self) -> str:
        return str(self.detail)


class ValidationFailed(ServiceError):
    kind = "validation"
    # 422 Unprocessable Content
    http_status = 422


class NotFound(ServiceError):
    kind = "not_found"
    http_status = status.HTTP_404_NOT_FOUND


class Forbidden(ServiceError):
    kind = "forbidden"
    http_status = status.HTTP_403_FORBIDDEN


class Conflict(ServiceError):
    kind = "conflict"
    http_status = status.HTTP_409_CONFLICT


class InternalError(ServiceError):
    kind = "internal"
    http_status = status.HTTP_500_INTERNAL_SERVER_ERROR
