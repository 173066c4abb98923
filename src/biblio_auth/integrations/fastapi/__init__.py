from __future__ import annotations

from typing import Optional

from ...config.settings import AuthSettings
from ...domain.ports import CredentialStore, RevocationRegistry, TokenCodec
from .decorators import FastAPIDecorators
from .deps import FastAPIAuthorization
from .middleware import RequestAuthenticatorMiddleware
from ..common.auth_factory import create_auth_dependencies, AuthDependencies


def create_fastapi_auth(
    *,
    settings: AuthSettings,
    credential_store: CredentialStore,
    revocation_registry: Optional[RevocationRegistry] = None,
    token_codec: Optional[TokenCodec] = None,
) -> FastAPIAuthorization:
    """
    High-level helper for FastAPI apps:

    - Creates AuthDependencies from the settings and your credential store
    - Wraps them in FastAPIAuthorization, exposing:

        fastapi_auth.install(app)
        fastapi_auth.get_current_identity
        fastapi_auth.get_optional_identity
        fastapi_auth.enforce_route_policy
        fastapi_auth.require_roles(...)
    """
    auth: AuthDependencies = create_auth_dependencies(
        settings=settings,
        credential_store=credential_store,
        revocation_registry=revocation_registry,
        token_codec=token_codec,
    )
    return FastAPIAuthorization(auth=auth)


__all__ = [
    "FastAPIAuthorization",
    "FastAPIDecorators",
    "RequestAuthenticatorMiddleware",
    "create_fastapi_auth",
]
