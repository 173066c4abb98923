from __future__ import annotations

import inspect
from dataclasses import dataclass
from functools import wraps
from typing import Any, Callable, ParamSpec, TypeVar

from fastapi import HTTPException, status
from starlette.requests import Request

from ...domain.entities import Identity
from ...domain.exceptions import AuthenticationError, AuthorizationError
from ..common.auth_factory import AuthDependencies
from .security import get_request_principal

P = ParamSpec("P")
R = TypeVar("R")

INJECTED_PARAM = "current_user"


def _hide_injected_param(wrapper: Callable[..., Any], func: Callable[..., Any]) -> Callable[..., Any]:
    """
    Drop `current_user` from the signature FastAPI sees, so it is not
    mistaken for a request body or query parameter.
    """
    sig = inspect.signature(func, eval_str=True)
    params = [p for name, p in sig.parameters.items() if name != INJECTED_PARAM]
    wrapper.__signature__ = sig.replace(parameters=params)  # type: ignore[attr-defined]
    return wrapper


@dataclass(slots=True)
class FastAPIDecorators:
    """
    Decorator-based auth helpers for FastAPI route handlers.

    Built on top of the framework-agnostic `AuthDependencies` facade. The
    decorators never look at the token themselves: they read the principal
    that RequestAuthenticatorMiddleware stored on the request.

    Usage example in your FastAPI app:

        # app/auth.py
        from biblio_auth.integrations.fastapi import create_fastapi_auth

        fastapi_auth = create_fastapi_auth(settings=settings, credential_store=users)
        auth_decorators = fastapi_auth.decorators()

        # app/routes.py
        @router.get("/prestecs/overdue")
        @auth_decorators.require_roles("ADMIN")
        async def overdue(request: Request, current_user: Identity):
            ...

    All decorators will:
      - Read the principal from the request
      - Optionally authorize against roles
      - Inject `current_user` (Identity, or None for optional_auth) into kwargs
      - Translate domain errors into HTTPException
    """

    auth: AuthDependencies

    # ------------------------------------------------------------------ #
    # helpers
    # ------------------------------------------------------------------ #

    @staticmethod
    def _extract_request(args: tuple[Any, ...], kwargs: dict[str, Any]) -> Request:
        """Extract Request object from function arguments."""
        if "request" in kwargs and isinstance(kwargs["request"], Request):
            return kwargs["request"]

        for arg in args:
            if isinstance(arg, Request):
                return arg

        raise ValueError(
            "Request object not found. "
            "Ensure your route has a 'request: Request' parameter."
        )

    def _resolve(self, args: tuple[Any, ...], kwargs: dict[str, Any], roles: tuple[str, ...]) -> Identity:
        request = self._extract_request(args, kwargs)
        try:
            return self.auth.authorize(get_request_principal(request), roles)
        except AuthorizationError as exc:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=str(exc),
            ) from exc
        except AuthenticationError as exc:
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail=str(exc),
                headers={"WWW-Authenticate": "Bearer"},
            ) from exc

    def _wrap(self, func: Callable[P, R], roles: tuple[str, ...]) -> Callable[P, Any]:
        @wraps(func)
        async def async_impl(*args: P.args, **kwargs: P.kwargs) -> Any:
            kwargs[INJECTED_PARAM] = self._resolve(args, kwargs, roles)
            return await func(*args, **kwargs)  # type: ignore[misc]

        @wraps(func)
        def sync_impl(*args: P.args, **kwargs: P.kwargs) -> Any:
            kwargs[INJECTED_PARAM] = self._resolve(args, kwargs, roles)
            return func(*args, **kwargs)

        wrapper = async_impl if inspect.iscoroutinefunction(func) else sync_impl
        return _hide_injected_param(wrapper, func)

    # ------------------------------------------------------------------ #
    # decorators
    # ------------------------------------------------------------------ #

    def authenticated(self, func: Callable[P, R]) -> Callable[P, Any]:
        """
        Decorator: require authentication.

        Injects `current_user: Identity` into kwargs.
        """
        return self._wrap(func, ())

    def optional_auth(self, func: Callable[P, R]) -> Callable[P, Any]:
        """
        Decorator: optional authentication.

        Injects `current_user: Identity | None` into kwargs.
        """

        @wraps(func)
        async def async_impl(*args: P.args, **kwargs: P.kwargs) -> Any:
            principal = get_request_principal(self._extract_request(args, kwargs))
            kwargs[INJECTED_PARAM] = principal if isinstance(principal, Identity) else None
            return await func(*args, **kwargs)  # type: ignore[misc]

        @wraps(func)
        def sync_impl(*args: P.args, **kwargs: P.kwargs) -> Any:
            principal = get_request_principal(self._extract_request(args, kwargs))
            kwargs[INJECTED_PARAM] = principal if isinstance(principal, Identity) else None
            return func(*args, **kwargs)

        wrapper = async_impl if inspect.iscoroutinefunction(func) else sync_impl
        return _hide_injected_param(wrapper, func)

    def require_roles(self, *roles: str):
        """
        Decorator: require any of the given roles.

        Also injects `current_user` into kwargs.
        """

        def decorator(func: Callable[P, R]) -> Callable[P, Any]:
            return self._wrap(func, roles)

        return decorator
