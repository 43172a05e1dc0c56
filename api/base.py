"""
Response envelope shared by every endpoint.

Success and failure have the same shape: {success, data, error, meta}.
meta.request_id matches the X-Request-ID header set by
RequestIDMiddleware, so a client report can be traced to the server log.
"""

from typing import Any
from datetime import datetime
from uuid import uuid4

from pydantic import BaseModel, Field
from starlette.requests import Request

from utils.timezone import now_utc


class APIError(BaseModel):
    code: str = Field(..., description="Machine-readable error code")
    message: str = Field(..., description="Human-readable message, backend text included where relevant")


class APIMeta(BaseModel):
    timestamp: datetime = Field(..., description="Response time (UTC)")
    request_id: str = Field(..., description="Request identifier for tracing")


class APIResponse(BaseModel):
    success: bool
    data: Any | None = None
    error: APIError | None = None
    meta: APIMeta


def request_id_of(request: Request) -> str | None:
    """The id RequestIDMiddleware assigned, if it ran for this request."""
    return getattr(request.state, "request_id", None)


def _meta(request_id: str | None) -> APIMeta:
    return APIMeta(timestamp=now_utc(), request_id=request_id or str(uuid4()))


def success_response(data: Any, request_id: str | None = None) -> APIResponse:
    return APIResponse(success=True, data=data, meta=_meta(request_id))


def error_response(code: str, message: str, request_id: str | None = None) -> APIResponse:
    return APIResponse(
        success=False,
        error=APIError(code=code, message=message),
        meta=_meta(request_id),
    )


class ErrorCodes:
    """Error codes used in APIError.code."""

    # 401 / 403
    NOT_AUTHENTICATED = "NOT_AUTHENTICATED"
    SESSION_EXPIRED = "SESSION_EXPIRED"
    AUTHORIZATION_DENIED = "AUTHORIZATION_DENIED"

    # 404
    NOT_FOUND = "NOT_FOUND"

    # 400 / 422
    INVALID_REQUEST = "INVALID_REQUEST"
    VALIDATION_ERROR = "VALIDATION_ERROR"

    # 5xx
    BACKEND_ERROR = "BACKEND_ERROR"
    INTERNAL_ERROR = "INTERNAL_ERROR"
    SERVICE_UNAVAILABLE = "SERVICE_UNAVAILABLE"
