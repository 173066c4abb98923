from __future__ import annotations

import logging

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from ...domain.exceptions import (
    AuthenticationError,
    AuthorizationError,
    InvalidCredentialsError,
    MalformedTokenError,
    MissingCredentialHeaderError,
    SubjectAlreadyExistsError,
    TokenExpiredError,
    TokenRevokedError,
)

logger = logging.getLogger(__name__)


def error_message(status_code: int, message: str) -> dict[str, object]:
    """Uniform error body: {"status": <int>, "message": <str>}."""
    return {"status": status_code, "message": message}


def _json_error(status_code: int, message: str, *, bearer: bool = False) -> JSONResponse:
    headers = {"WWW-Authenticate": "Bearer"} if bearer else None
    return JSONResponse(
        status_code=status_code,
        content=error_message(status_code, message),
        headers=headers,
    )


def install_exception_handlers(app: FastAPI) -> None:
    """
    Register handlers translating domain auth errors raised inside route
    handlers into JSON error bodies.
    """

    @app.exception_handler(MissingCredentialHeaderError)
    async def _missing_header(_: Request, exc: MissingCredentialHeaderError) -> JSONResponse:
        return _json_error(status.HTTP_400_BAD_REQUEST, str(exc))

    @app.exception_handler(InvalidCredentialsError)
    async def _bad_credentials(_: Request, exc: InvalidCredentialsError) -> JSONResponse:
        logger.info("Login rejected: invalid credentials")
        return _json_error(status.HTTP_401_UNAUTHORIZED, str(exc) or "Invalid credentials")

    @app.exception_handler(TokenRevokedError)
    @app.exception_handler(TokenExpiredError)
    @app.exception_handler(MalformedTokenError)
    async def _token_error(_: Request, exc: AuthenticationError) -> JSONResponse:
        return _json_error(status.HTTP_401_UNAUTHORIZED, str(exc), bearer=True)

    @app.exception_handler(AuthenticationError)
    async def _unauthenticated(_: Request, exc: AuthenticationError) -> JSONResponse:
        return _json_error(status.HTTP_401_UNAUTHORIZED, str(exc) or "Not authenticated", bearer=True)

    @app.exception_handler(AuthorizationError)
    async def _forbidden(_: Request, exc: AuthorizationError) -> JSONResponse:
        return _json_error(status.HTTP_403_FORBIDDEN, str(exc))

    @app.exception_handler(SubjectAlreadyExistsError)
    async def _conflict(_: Request, exc: SubjectAlreadyExistsError) -> JSONResponse:
        return _json_error(status.HTTP_409_CONFLICT, str(exc))
