"""
biblio_auth

Stateless-token authentication and access revocation for the library
backend, in a clean-architecture core that framework integrations
(FastAPI) and the calling-side client build on.
"""

__version__ = "0.1.0"

from .domain.entities import (
    ANONYMOUS,
    AuthenticationResult,
    DecodedToken,
    DecodeResult,
    Identity,
    Principal,
)
from .domain.constants import AuthState, DecodeFailure
from .domain.exceptions import (
    AuthenticationError,
    AuthorizationError,
    InvalidCredentialsError,
    MalformedTokenError,
    MissingCredentialHeaderError,
    RemoteRevocationUnreachableError,
    SubjectAlreadyExistsError,
    TokenExpiredError,
    TokenRevokedError,
)
from .domain.value_objects import Registration, RoutePolicy, Subject
from .domain.ports import CredentialStore, RevocationClient, RevocationRegistry, SessionStorage, TokenCodec

from .application.use_cases.authenticate import AuthenticateRequestUseCase, extract_bearer_token
from .application.use_cases.authorize import AuthorizeAccessUseCase
from .application.use_cases.login import IssuedToken, IssueTokenUseCase
from .application.use_cases.revoke import RevocationOutcome, RevokeTokenUseCase

from .adapters.jwt.codec import JWTTokenCodec
from .adapters.memory.revocation_registry import InMemoryRevocationRegistry

from .config import AuthSettings, ClientSettings, settings_from_env, client_settings_from_env
from .integrations.common.auth_factory import AuthDependencies, create_auth_dependencies

__all__ = [
    "__version__",
    # domain core
    "ANONYMOUS",
    "AuthenticationResult",
    "AuthState",
    "DecodedToken",
    "DecodeFailure",
    "DecodeResult",
    "Identity",
    "Principal",
    "Registration",
    "RoutePolicy",
    "Subject",
    # ports
    "CredentialStore",
    "RevocationClient",
    "RevocationRegistry",
    "SessionStorage",
    "TokenCodec",
    # exceptions
    "AuthenticationError",
    "AuthorizationError",
    "InvalidCredentialsError",
    "MalformedTokenError",
    "MissingCredentialHeaderError",
    "RemoteRevocationUnreachableError",
    "SubjectAlreadyExistsError",
    "TokenExpiredError",
    "TokenRevokedError",
    # use cases
    "AuthenticateRequestUseCase",
    "AuthorizeAccessUseCase",
    "IssueTokenUseCase",
    "IssuedToken",
    "RevokeTokenUseCase",
    "RevocationOutcome",
    "extract_bearer_token",
    # adapters
    "JWTTokenCodec",
    "InMemoryRevocationRegistry",
    # config / wiring
    "AuthSettings",
    "ClientSettings",
    "settings_from_env",
    "client_settings_from_env",
    "AuthDependencies",
    "create_auth_dependencies",
]
