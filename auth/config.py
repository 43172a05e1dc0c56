"""Session settings, overridable from the environment."""

import os

from pydantic import BaseModel, Field

_TRUE_VALUES = {"1", "true", "yes", "on"}


class AuthConfig(BaseModel):
    """
    How this service treats the sessions it finds in Valkey.

    Logins are issued elsewhere; this service only validates sessions and
    slides their expiry forward.
    """

    session_expiry_hours: int = Field(
        default=720,  # 30 days
        ge=1,
        le=2160,
        description="Session lifetime in hours",
    )
    session_extend_on_activity: bool = Field(
        default=True,
        description="Slide expiry forward on every authenticated request",
    )
    session_cookie_name: str = Field(
        default="session_token",
        min_length=1,
        description="Cookie carrying the session token",
    )

    @classmethod
    def from_env(cls) -> "AuthConfig":
        """
        Build from SESSION_EXPIRY_HOURS, SESSION_EXTEND_ON_ACTIVITY and
        SESSION_COOKIE_NAME. Unset variables keep their defaults; invalid
        values raise pydantic.ValidationError at startup.
        """
        overrides = {}
        if "SESSION_EXPIRY_HOURS" in os.environ:
            overrides["session_expiry_hours"] = os.environ["SESSION_EXPIRY_HOURS"]
        if "SESSION_EXTEND_ON_ACTIVITY" in os.environ:
            overrides["session_extend_on_activity"] = (
                os.environ["SESSION_EXTEND_ON_ACTIVITY"].strip().lower() in _TRUE_VALUES
            )
        if "SESSION_COOKIE_NAME" in os.environ:
            overrides["session_cookie_name"] = os.environ["SESSION_COOKIE_NAME"]
        return cls(**overrides)
