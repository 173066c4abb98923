from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Optional, Union

from ...adapters.jwt.codec import JWTTokenCodec
from ...adapters.memory.revocation_registry import InMemoryRevocationRegistry
from ...application.use_cases.authenticate import AuthenticateRequestUseCase
from ...application.use_cases.authorize import AuthorizeAccessUseCase
from ...application.use_cases.login import IssuedToken, IssueTokenUseCase
from ...application.use_cases.revoke import RevocationOutcome, RevokeTokenUseCase
from ...config.settings import AuthPaths, AuthSettings
from ...domain.entities import AuthenticationResult, Identity, _Anonymous
from ...domain.ports import CredentialStore, RevocationRegistry, TokenCodec
from ...domain.value_objects import Registration, RoutePolicy


@dataclass(slots=True)
class AuthDependencies:
    """
    Framework-agnostic auth facade.

    Integrations (FastAPI, the CLI, etc.) adapt this to their own
    dependency / middleware systems. It owns the single revocation registry
    of the process: the request authenticator and the logout handler both
    reach it through here.
    """

    authenticate_use_case: AuthenticateRequestUseCase
    authorize_use_case: AuthorizeAccessUseCase
    issue_use_case: IssueTokenUseCase
    revoke_use_case: RevokeTokenUseCase
    route_policy: RoutePolicy
    paths: AuthPaths

    # --- Core operations --------------------------------------------------

    def authenticate_request(self, authorization: Optional[str]) -> AuthenticationResult:
        """Authorization header -> AuthenticationResult (or TokenRevokedError)."""
        return self.authenticate_use_case.execute(authorization)

    def authorize(
            self,
            principal: Union[Identity, _Anonymous],
            roles: Iterable[str] = (),
    ) -> Identity:
        """Check a role requirement on the request's principal."""
        return self.authorize_use_case.execute(principal, roles)

    def login(self, nick: str, password: str) -> IssuedToken:
        return self.issue_use_case.login(nick, password)

    def register(self, registration: Registration) -> IssuedToken:
        return self.issue_use_case.register(registration)

    def logout(self, authorization: Optional[str]) -> RevocationOutcome:
        return self.revoke_use_case.execute(authorization)

    def revoke_token_id(self, token_id: str) -> RevocationOutcome:
        return self.revoke_use_case.revoke_token_id(token_id)

    # --- Accessors --------------------------------------------------------

    @property
    def token_codec(self) -> TokenCodec:
        return self.authenticate_use_case.token_codec

    @property
    def revocation_registry(self) -> RevocationRegistry:
        return self.authenticate_use_case.revocation_registry


def create_token_codec(settings: AuthSettings) -> JWTTokenCodec:
    return JWTTokenCodec(
        settings.secret_key,
        ttl_seconds=settings.token_ttl_seconds,
        algorithm=settings.algorithm,
        leeway_seconds=settings.leeway_seconds,
    )


def create_auth_dependencies(
        *,
        settings: AuthSettings,
        credential_store: CredentialStore,
        revocation_registry: Optional[RevocationRegistry] = None,
        token_codec: Optional[TokenCodec] = None,
) -> AuthDependencies:
    """
    High-level factory: settings + credential store -> AuthDependencies.

    - builds a JWTTokenCodec from the settings (unless one is given)
    - creates the process revocation registry (unless one is given)
    - wires the authenticate / authorize / issue / revoke use cases
    - returns an AuthDependencies facade.
    """
    codec: TokenCodec = token_codec if token_codec is not None else create_token_codec(settings)

    registry: RevocationRegistry
    if revocation_registry is not None:
        registry = revocation_registry
    else:
        registry = InMemoryRevocationRegistry(
            grace_seconds=max(settings.revocation_grace_seconds, settings.leeway_seconds),
            purge_interval_seconds=settings.revocation_purge_interval_seconds,
        )

    paths = settings.paths
    policy = RoutePolicy(
        exempt_paths=[paths.register],
        public_paths=[paths.login, paths.register, paths.error],
    )

    return AuthDependencies(
        authenticate_use_case=AuthenticateRequestUseCase(
            token_codec=codec,
            revocation_registry=registry,
        ),
        authorize_use_case=AuthorizeAccessUseCase(),
        issue_use_case=IssueTokenUseCase(
            credential_store=credential_store,
            token_codec=codec,
        ),
        revoke_use_case=RevokeTokenUseCase(
            token_codec=codec,
            revocation_registry=registry,
        ),
        route_policy=policy,
        paths=paths,
    )
