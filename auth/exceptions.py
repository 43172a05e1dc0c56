"""Typed exceptions for auth failures."""


class AuthError(Exception):
    """Base class for authentication/authorization errors."""


class SessionExpiredError(AuthError):
    """Session has expired or never existed. User must log in again."""


class AccessDeniedError(AuthError):
    """The user's role does not grant access to the requested data or action."""

    def __init__(self, role: str, resource: str, access: str):
        self.role = role
        self.resource = resource
        self.access = access
        super().__init__(f"Role '{role}' is not allowed to {access} {resource}")
