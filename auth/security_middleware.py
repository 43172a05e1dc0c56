"""Session cookie authentication for the billing API."""

import logging

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse

from auth.session import SessionManager
from auth.exceptions import SessionExpiredError
from api.base import error_response, request_id_of, ErrorCodes
from utils.user_context import user_context

logger = logging.getLogger(__name__)


def _unauthorized(request: Request, code: str, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=401,
        content=error_response(code, message, request_id_of(request)).model_dump(mode="json"),
    )


class AuthMiddleware(BaseHTTPMiddleware):
    """
    Resolve the session cookie to an operator and role.

    On success the request carries request.state.user_id, .role and
    .session, and database access inside the request is scoped to that
    user for row level security. Routes read the acting user from
    request.state and pass it to services explicitly.

    Health checks and API docs are served without a session.
    """

    PUBLIC_PATHS = frozenset({"/health", "/docs", "/redoc", "/openapi.json"})

    def __init__(self, app, session_manager: SessionManager, cookie_name: str = "session_token"):
        super().__init__(app)
        self._session_manager = session_manager
        self._cookie_name = cookie_name

    def _is_public_path(self, path: str) -> bool:
        return path in self.PUBLIC_PATHS or path.startswith("/docs/")

    async def dispatch(self, request: Request, call_next):
        if self._is_public_path(request.url.path):
            return await call_next(request)

        token = request.cookies.get(self._cookie_name)
        if not token:
            return _unauthorized(request, ErrorCodes.NOT_AUTHENTICATED, "Authentication required")

        try:
            session = self._session_manager.validate_session(token)
        except SessionExpiredError as e:
            logger.info(f"Rejected session on {request.method} {request.url.path}: {e}")
            return _unauthorized(request, ErrorCodes.SESSION_EXPIRED, "Session has expired")

        request.state.user_id = session.user_id
        request.state.role = session.role
        request.state.session = session

        with user_context(session.user_id):
            return await call_next(request)
