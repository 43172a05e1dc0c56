"""Authentication and authorization modules."""

from auth.exceptions import (
    AuthError,
    SessionExpiredError,
    AccessDeniedError,
)
from auth.types import Session, UserRole
from auth.config import AuthConfig
from auth.permissions import Access, can_access, require_access
from auth.session import SessionManager
from auth.security_middleware import AuthMiddleware
