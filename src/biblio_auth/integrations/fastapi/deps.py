from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Optional

from fastapi import Depends, FastAPI, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials

from ...domain.entities import Identity
from ...domain.exceptions import AuthenticationError, AuthorizationError
from ..common.auth_factory import AuthDependencies
from .decorators import FastAPIDecorators
from .errors import install_exception_handlers
from .middleware import RequestAuthenticatorMiddleware
from .routes import create_auth_router
from .security import bearer_scheme, get_request_principal


@dataclass(slots=True)
class FastAPIAuthorization:
    """
    FastAPI integration for biblio_auth.

    Built on top of the framework-agnostic AuthDependencies facade. The
    request authenticator middleware publishes the caller's principal on
    each request; the dependencies below only read it and decide.
    """

    auth: AuthDependencies

    # ------------------------------------------------------------------ #
    # Wiring
    # ------------------------------------------------------------------ #

    def install(self, app: FastAPI, *, include_router: bool = True) -> FastAPI:
        """
        Add the authenticator middleware, the JSON error handlers and
        (optionally) the login / registration / logout / error routes.
        """
        app.add_middleware(RequestAuthenticatorMiddleware, auth=self.auth)
        install_exception_handlers(app)
        if include_router:
            app.include_router(create_auth_router(self))
        return app

    def decorators(self) -> FastAPIDecorators:
        return FastAPIDecorators(auth=self.auth)

    # ------------------------------------------------------------------ #
    # Base dependencies
    # ------------------------------------------------------------------ #

    async def get_current_identity(
            self,
            request: Request,
            _credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    ) -> Identity:
        """Dependency: Require authentication."""
        try:
            return self.auth.authorize(get_request_principal(request))
        except AuthenticationError as exc:
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail=str(exc),
                headers={"WWW-Authenticate": "Bearer"},
            ) from exc

    async def get_optional_identity(self, request: Request) -> Identity | None:
        """Dependency: Optional authentication (None for anonymous callers)."""
        principal = get_request_principal(request)
        return principal if isinstance(principal, Identity) else None

    async def enforce_route_policy(self, request: Request) -> None:
        """
        App-wide dependency: every path outside the public allow-list needs
        an identity.

            app = FastAPI(dependencies=[Depends(fastapi_auth.enforce_route_policy)])
        """
        if self.auth.route_policy.is_public(request.url.path):
            return
        await self.get_current_identity(request)

    # ------------------------------------------------------------------ #
    # Authorization dependency factories
    # ------------------------------------------------------------------ #

    def require_roles(self, *roles: str) -> Callable:
        """
        Dependency factory: require any of the given roles.
        """

        async def dependency(
                identity: Identity = Depends(self.get_current_identity),
        ) -> Identity:
            try:
                return self.auth.authorize(identity, roles)
            except AuthorizationError as exc:
                raise HTTPException(status_code=status.HTTP_403_FORBIDDEN,
                                    detail=str(exc)) from exc

        return dependency
