from __future__ import annotations

import logging

from starlette.requests import Request
from starlette.responses import JSONResponse
from starlette.types import ASGIApp, Receive, Scope, Send

from ...domain.entities import Identity
from ...domain.exceptions import TokenRevokedError
from ..common.auth_factory import AuthDependencies
from .security import IDENTITY_STATE_KEY

logger = logging.getLogger(__name__)


class RequestAuthenticatorMiddleware:
    """
    Pure ASGI middleware running the request authenticator once per request.

    - Paths in the route policy's exempt set (registration) are passed
      straight through, untouched.
    - Otherwise the Authorization header is checked and the resulting
      Identity (or ANONYMOUS) is stored on `request.state.identity`.
      An identity already present on the request is never overwritten.
    - A revoked token ends the request here with 401; malformed and
      expired tokens fall through as anonymous.

    Authorization (who may call what) is left to route dependencies.
    """

    def __init__(self, app: ASGIApp, *, auth: AuthDependencies) -> None:
        self.app = app
        self.auth = auth

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        request = Request(scope)
        if self.auth.route_policy.is_exempt(request.url.path):
            await self.app(scope, receive, send)
            return

        state = scope.setdefault("state", {})
        if isinstance(state.get(IDENTITY_STATE_KEY), Identity):
            await self.app(scope, receive, send)
            return

        try:
            result = self.auth.authenticate_request(request.headers.get("Authorization"))
        except TokenRevokedError as exc:
            logger.info("Revoked token used for: %s %s", request.method, request.url.path)
            response = JSONResponse(
                status_code=401,
                content={"detail": str(exc)},
                headers={"WWW-Authenticate": 'Bearer error="invalid_token"'},
            )
            await response(scope, receive, send)
            return

        state[IDENTITY_STATE_KEY] = result.principal
        await self.app(scope, receive, send)
