"""Authentication models."""

import time

from pydantic import BaseModel, Field

from hla.core.constants import CacheConstants


class LoginRequest(BaseModel):
    email: str
    password: str = Field(repr=False)


class LoginResponse(BaseModel):
    """Body returned by ``POST /auth/login``."""

    access_token: str = Field(repr=False)
    token_type: str = "Bearer"
    expires_in: int
    refresh_token: str = Field(repr=False)
    user_id: int
    email: str
    name: str | None = None


class AuthSession(BaseModel):
    """Stored login session."""

    access_token: str = Field(repr=False)
    refresh_token: str = Field(repr=False)
    expires_at: float
    user_id: int
    email: str
    name: str | None = None

    @classmethod
    def from_login(cls, response: LoginResponse, now: float | None = None) -> "AuthSession":
        issued = time.time() if now is None else now
        return cls(
            access_token=response.access_token,
            refresh_token=response.refresh_token,
            expires_at=issued + response.expires_in,
            user_id=response.user_id,
            email=response.email,
            name=response.name,
        )

    def is_expired(self, now: float | None = None) -> bool:
        """True once the token is within the safety margin of its expiry."""
        current = time.time() if now is None else now
        return current >= self.expires_at - CacheConstants.SESSION_EXPIRY_MARGIN

    @property
    def remaining_seconds(self) -> float:
        return max(0.0, self.expires_at - time.time())
