from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING, Any, Dict, Optional, Union

from fastapi import APIRouter, Request, status
from pydantic import BaseModel, ConfigDict, Field

from ...application.use_cases.login import IssuedToken
from ...domain.value_objects import Registration
from .errors import error_message

# at least one non-blank character
NICK_PATTERN = r"^\s*\S"

if TYPE_CHECKING:
    from .deps import FastAPIAuthorization


class LoginRequest(BaseModel):
    nick: str = Field(min_length=1, pattern=NICK_PATTERN)
    password: str = Field(min_length=1)


class RegisterRequest(BaseModel):
    """Registration body; profile fields beyond nick/password/rol pass through."""

    model_config = ConfigDict(extra="allow")

    nick: str = Field(min_length=1, pattern=NICK_PATTERN)
    password: str = Field(min_length=1)
    # older clients send the role as a number
    rol: Optional[Union[int, str]] = None


class AuthResponse(BaseModel):
    token: str
    token_type: str = "Bearer"
    subject: str
    role: Optional[str] = None
    expires_at: Optional[datetime] = None
    profile: Dict[str, Any] = Field(default_factory=dict)

    @classmethod
    def from_issued(cls, issued: IssuedToken) -> "AuthResponse":
        return cls(
            token=issued.token,
            subject=str(issued.principal.subject),
            role=issued.principal.role,
            expires_at=issued.expires_at,
            profile=dict(issued.principal.profile),
        )


class LogoutResponse(BaseModel):
    message: str
    revoked: bool


def create_auth_router(fastapi_auth: "FastAPIAuthorization") -> APIRouter:
    """
    Login, registration and logout under the configured prefix, plus the
    generic error path. Login, registration and error are on the public
    allow-list; registration additionally bypasses the authenticator.
    """
    auth = fastapi_auth.auth
    paths = auth.paths
    router = APIRouter(tags=["auth"])

    @router.post(paths.login, response_model=AuthResponse)
    def login(body: LoginRequest) -> AuthResponse:
        return AuthResponse.from_issued(auth.login(body.nick, body.password))

    @router.post(paths.register, response_model=AuthResponse)
    def register(body: RegisterRequest) -> AuthResponse:
        registration = Registration(
            nick=body.nick,
            password=body.password,
            role=str(body.rol) if body.rol is not None else None,
            profile=dict(body.model_extra or {}),
        )
        return AuthResponse.from_issued(auth.register(registration))

    @router.post(paths.logout, response_model=LogoutResponse)
    def logout(request: Request) -> LogoutResponse:
        outcome = auth.logout(request.headers.get("Authorization"))
        if outcome.already_expired:
            return LogoutResponse(message="Token already expired", revoked=False)
        return LogoutResponse(message="Logout successful. Token revoked.", revoked=True)

    @router.get(paths.error, status_code=status.HTTP_500_INTERNAL_SERVER_ERROR)
    def error() -> Dict[str, Any]:
        return error_message(status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal error")

    return router
