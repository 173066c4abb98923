# tests/conftest.py
from datetime import datetime, timedelta, timezone

import pytest
from fastapi import Depends, FastAPI
from fastapi.testclient import TestClient

from biblio_auth.adapters.jwt.codec import JWTTokenCodec
from biblio_auth.adapters.memory.revocation_registry import InMemoryRevocationRegistry
from biblio_auth.config.settings import AuthSettings
from biblio_auth.domain.entities import Identity, Principal
from biblio_auth.domain.exceptions import InvalidCredentialsError, SubjectAlreadyExistsError
from biblio_auth.domain.value_objects import Registration, Subject
from biblio_auth.integrations.fastapi import create_fastapi_auth

SECRET = "0123456789abcdef0123456789abcdef-test-secret"


class FakeCredentialStore:
    """Plain-text credential store standing in for the user repository."""

    def __init__(self) -> None:
        self.users = {
            "admin": ("admin-pass", "ADMIN", {"nom": "Ada"}),
            "reader": ("reader-pass", "USER", {}),
        }

    def authenticate(self, nick: str, password: str) -> Principal:
        entry = self.users.get(nick)
        if entry is None or entry[0] != password:
            raise InvalidCredentialsError("Invalid nick or password")
        return Principal(subject=Subject(nick), role=entry[1], profile=entry[2])

    def register(self, registration: Registration) -> Principal:
        if registration.nick in self.users:
            raise SubjectAlreadyExistsError(f"Nick '{registration.nick}' already exists")
        role = registration.role or "USER"
        self.users[registration.nick] = (registration.password, role, dict(registration.profile))
        return Principal(subject=Subject(registration.nick), role=role, profile=registration.profile)


def past_clock(days: int = 2):
    return lambda: datetime.now(timezone.utc) - timedelta(days=days)


@pytest.fixture
def settings() -> AuthSettings:
    return AuthSettings(secret_key=SECRET)


@pytest.fixture
def codec(settings) -> JWTTokenCodec:
    return JWTTokenCodec(settings.secret_key, ttl_seconds=settings.token_ttl_seconds)


@pytest.fixture
def expired_codec(settings) -> JWTTokenCodec:
    """Same secret, but issues tokens dated two days ago (already expired)."""
    return JWTTokenCodec(settings.secret_key, clock=past_clock())


@pytest.fixture
def registry() -> InMemoryRevocationRegistry:
    return InMemoryRevocationRegistry()


@pytest.fixture
def credential_store() -> FakeCredentialStore:
    return FakeCredentialStore()


@pytest.fixture
def fastapi_auth(settings, credential_store, registry, codec):
    return create_fastapi_auth(
        settings=settings,
        credential_store=credential_store,
        revocation_registry=registry,
        token_codec=codec,
    )


@pytest.fixture
def app(fastapi_auth) -> FastAPI:
    app = FastAPI()
    fastapi_auth.install(app)

    @app.get("/biblioteca/llibres")
    async def list_books(identity: Identity = Depends(fastapi_auth.get_current_identity)):
        return {"subject": str(identity.subject), "role": identity.role}

    @app.get("/biblioteca/usuaris")
    async def list_users(identity: Identity = Depends(fastapi_auth.require_roles("ADMIN"))):
        return {"subject": str(identity.subject)}

    @app.get("/biblioteca/whoami")
    async def whoami(identity=Depends(fastapi_auth.get_optional_identity)):
        return {"subject": str(identity.subject) if identity else None}

    return app


@pytest.fixture
def client(app):
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def bearer():
    def _headers(token: str) -> dict:
        return {"Authorization": f"Bearer {token}"}
    return _headers
