# tests/test_fastapi_integration.py
import jwt
import pytest
from fastapi import Depends, FastAPI, Request
from fastapi.testclient import TestClient

from biblio_auth.domain.entities import Identity
from biblio_auth.domain.value_objects import Subject

LOGIN = "/biblioteca/auth/login"
REGISTER = "/biblioteca/auth/afegirUsuari"
LOGOUT = "/biblioteca/auth/logout"


def _login(client, nick="admin", password="admin-pass") -> str:
    response = client.post(LOGIN, json={"nick": nick, "password": password})
    assert response.status_code == 200, response.text
    return response.json()["token"]


# --- login / registration ------------------------------------------------


def test_login_returns_bearer_token_and_profile(client):
    response = client.post(LOGIN, json={"nick": "admin", "password": "admin-pass"})

    assert response.status_code == 200
    body = response.json()
    assert body["token_type"] == "Bearer"
    assert body["subject"] == "admin"
    assert body["role"] == "ADMIN"
    assert body["profile"] == {"nom": "Ada"}
    assert body["expires_at"]


def test_login_with_bad_credentials(client):
    response = client.post(LOGIN, json={"nick": "admin", "password": "nope"})

    assert response.status_code == 401
    assert response.json() == {"status": 401, "message": "Invalid nick or password"}


def test_login_validates_body(client):
    assert client.post(LOGIN, json={"nick": ""}).status_code == 422


def test_register_issues_token_and_keeps_profile(client, credential_store):
    response = client.post(
        REGISTER,
        json={"nick": "nova", "password": "pw", "nom": "Nova", "cognom1": "Vidal"},
    )

    assert response.status_code == 200, response.text
    body = response.json()
    assert body["subject"] == "nova"
    assert body["role"] == "USER"
    assert credential_store.users["nova"][2] == {"nom": "Nova", "cognom1": "Vidal"}


@pytest.mark.parametrize("path", [REGISTER, LOGIN])
def test_blank_nick_is_a_validation_error(client, path):
    response = client.post(path, json={"nick": "   ", "password": "pw"})

    assert response.status_code == 422


@pytest.mark.parametrize("rol, expected", [(2, "2"), ("ADMIN", "ADMIN"), (None, "USER")])
def test_register_accepts_numeric_or_text_role(client, rol, expected):
    response = client.post(REGISTER, json={"nick": "nova", "password": "pw", "rol": rol})

    assert response.status_code == 200, response.text
    assert response.json()["role"] == expected


def test_register_duplicate_is_conflict(client):
    response = client.post(REGISTER, json={"nick": "admin", "password": "pw"})

    assert response.status_code == 409
    assert response.json()["status"] == 409


def test_register_bypasses_the_authenticator(client, bearer):
    token = _login(client)
    client.post(LOGOUT, headers=bearer(token))

    # a revoked token on the registration path is ignored, not refused
    response = client.post(REGISTER, json={"nick": "nova", "password": "pw"}, headers=bearer(token))
    assert response.status_code == 200


# --- request authenticator -----------------------------------------------


def test_protected_route_without_header(client):
    response = client.get("/biblioteca/llibres")

    assert response.status_code == 401
    assert response.headers["www-authenticate"] == "Bearer"


def test_protected_route_with_valid_token(client, bearer):
    response = client.get("/biblioteca/llibres", headers=bearer(_login(client)))

    assert response.status_code == 200
    assert response.json() == {"subject": "admin", "role": "ADMIN"}


@pytest.mark.parametrize("header", ["Bearer garbage", "Basic YWRtaW46YWRtaW4="])
def test_unusable_credentials_fall_through_as_anonymous(client, header):
    assert client.get("/biblioteca/whoami", headers={"Authorization": header}).json() == {"subject": None}
    assert client.get("/biblioteca/llibres", headers={"Authorization": header}).status_code == 401


def test_expired_token_falls_through_as_anonymous(client, expired_codec, bearer):
    token = expired_codec.issue("admin", {"role": "ADMIN"})

    assert client.get("/biblioteca/whoami", headers=bearer(token)).json() == {"subject": None}


def test_expired_revoked_token_is_anonymous_not_refused(client, expired_codec, registry, bearer):
    token = expired_codec.issue("admin", {"role": "ADMIN"})
    registry.revoke(jwt.decode(token, options={"verify_signature": False})["jti"])

    response = client.get("/biblioteca/whoami", headers=bearer(token))

    assert response.status_code == 200
    assert response.json() == {"subject": None}


def test_revoked_token_is_refused_before_the_route(client, bearer):
    token = _login(client)
    assert client.post(LOGOUT, headers=bearer(token)).status_code == 200

    for path in ("/biblioteca/llibres", "/biblioteca/whoami"):
        response = client.get(path, headers=bearer(token))
        assert response.status_code == 401
        assert response.json() == {"detail": "Token has been revoked"}
        assert "invalid_token" in response.headers["www-authenticate"]


def test_other_tokens_survive_a_logout(client, bearer):
    first = _login(client)
    second = _login(client)
    client.post(LOGOUT, headers=bearer(first))

    assert client.get("/biblioteca/llibres", headers=bearer(second)).status_code == 200


def test_role_requirement(client, bearer):
    admin = _login(client)
    reader = _login(client, "reader", "reader-pass")

    assert client.get("/biblioteca/usuaris", headers=bearer(admin)).status_code == 200
    response = client.get("/biblioteca/usuaris", headers=bearer(reader))
    assert response.status_code == 403
    assert "ADMIN" in response.json()["detail"]


def test_identity_set_by_an_outer_layer_is_kept(fastapi_auth, codec, bearer):
    app = FastAPI()
    fastapi_auth.install(app, include_router=False)

    @app.get("/biblioteca/whoami")
    async def whoami(identity=Depends(fastapi_auth.get_optional_identity)):
        return {"subject": str(identity.subject)}

    preset = Identity(subject=Subject("gateway-user"), token_id="outer", role="USER")

    @app.middleware("http")
    async def outer_authenticator(request: Request, call_next):
        request.scope.setdefault("state", {})["identity"] = preset
        return await call_next(request)

    with TestClient(app) as client:
        response = client.get("/biblioteca/whoami", headers=bearer(codec.issue("admin")))

    assert response.json() == {"subject": "gateway-user"}


# --- logout ----------------------------------------------------------------


def test_logout_without_header(client):
    response = client.post(LOGOUT)

    assert response.status_code == 400
    assert response.json() == {
        "status": 400,
        "message": "Token not found or header not in 'Bearer' format",
    }


def test_logout_with_malformed_token(client, bearer):
    response = client.post(LOGOUT, headers=bearer("garbage"))

    assert response.status_code == 401
    assert response.json()["status"] == 401


def test_logout_with_expired_token_succeeds(client, expired_codec, registry, bearer):
    response = client.post(LOGOUT, headers=bearer(expired_codec.issue("admin")))

    assert response.status_code == 200
    assert response.json() == {"message": "Token already expired", "revoked": False}
    assert len(registry) == 0


def test_logout_revokes_token(client, codec, registry, bearer):
    token = _login(client)

    response = client.post(LOGOUT, headers=bearer(token))

    assert response.json() == {"message": "Logout successful. Token revoked.", "revoked": True}
    assert registry.is_revoked(codec.decode(token).token.token_id)


def test_second_logout_with_same_token_is_refused(client, bearer):
    token = _login(client)
    client.post(LOGOUT, headers=bearer(token))

    response = client.post(LOGOUT, headers=bearer(token))
    assert response.status_code == 401
    assert response.json() == {"detail": "Token has been revoked"}


# --- misc --------------------------------------------------------------------


def test_error_route(client):
    response = client.get("/error")

    assert response.status_code == 500
    assert response.json() == {"status": 500, "message": "Internal error"}


def test_route_policy_dependency(fastapi_auth, bearer):
    app = FastAPI(dependencies=[Depends(fastapi_auth.enforce_route_policy)])
    fastapi_auth.install(app)

    @app.get("/biblioteca/llibres")
    async def list_books():
        return []

    with TestClient(app) as client:
        assert client.get("/biblioteca/llibres").status_code == 401
        token = _login(client)
        assert client.get("/biblioteca/llibres", headers=bearer(token)).status_code == 200
        assert client.get("/error").status_code == 500


def test_decorators(fastapi_auth, bearer):
    app = FastAPI()
    fastapi_auth.install(app)
    decorators = fastapi_auth.decorators()

    @app.get("/biblioteca/prestecs")
    @decorators.authenticated
    async def loans(request: Request, current_user: Identity):
        return {"subject": str(current_user.subject)}

    @app.get("/biblioteca/sancions")
    @decorators.require_roles("ADMIN")
    def sanctions(request: Request, current_user: Identity):
        return {"role": current_user.role}

    @app.get("/biblioteca/cataleg")
    @decorators.optional_auth
    async def catalogue(request: Request, current_user: Identity):
        return {"subject": str(current_user.subject) if current_user else None}

    with TestClient(app) as client:
        reader = _login(client, "reader", "reader-pass")
        admin = _login(client)

        assert client.get("/biblioteca/prestecs").status_code == 401
        assert client.get("/biblioteca/prestecs", headers=bearer(reader)).json() == {"subject": "reader"}
        assert client.get("/biblioteca/sancions", headers=bearer(reader)).status_code == 403
        assert client.get("/biblioteca/sancions", headers=bearer(admin)).json() == {"role": "ADMIN"}
        assert client.get("/biblioteca/cataleg").json() == {"subject": None}
        assert client.get("/biblioteca/cataleg", headers=bearer(admin)).json() == {"subject": "admin"}
