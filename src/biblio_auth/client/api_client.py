from __future__ import annotations

import logging
from typing import Any, Dict, Optional

import httpx

from ..config.settings import ClientSettings
from ..domain.exceptions import InvalidCredentialsError, RemoteRevocationUnreachableError
from .session import ClientSessionManager, TeardownOutcome
from .storage import storage_from_settings

logger = logging.getLogger(__name__)


class LibraryApiClient:
    """
    Minimal async client for the library backend.

    - logs in and keeps the token in a ClientSessionManager
    - attaches `Authorization: Bearer <token>` to every call except login
    - drops the local session when the server answers 401/403 on anything
      other than login or logout
    - implements the RevocationClient port used at logout / teardown
    """

    def __init__(
        self,
        settings: ClientSettings,
        *,
        session: Optional[ClientSessionManager] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.s = settings
        self._transport = transport
        self._client = self._new_client()
        self.session = session or ClientSessionManager(
            storage_from_settings(settings),
            teardown_timeout=settings.teardown_timeout_seconds,
        )
        self.session.bind_revocation_client(self)

    def _new_client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self.s.base_url_slash,
            transport=self._transport,
            verify=self.s.verify_ssl,
            timeout=self.s.request_timeout_seconds,
        )

    async def close(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> "LibraryApiClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.close()

    # ------------------------------------------------------------------ #
    # requests
    # ------------------------------------------------------------------ #

    def _auth_headers(self, path: str) -> dict[str, str]:
        token = self.session.current_token()
        if token is None or self._is_path(path, self.s.paths.login):
            return {}
        return {"Authorization": f"Bearer {token}"}

    async def request(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        """
        Send a request with the current bearer token (unless it is the login
        call). The response is returned as-is; status handling is the caller's.
        """
        headers = {**kwargs.pop("headers", {}), **self._auth_headers(path)}
        resp = await self._client.request(method, self._relative(path), headers=headers, **kwargs)

        if resp.status_code in (401, 403) and not (
            self._is_path(path, self.s.paths.login) or self._is_path(path, self.s.paths.logout)
        ):
            logger.error("Error %s on %s - clearing session token", resp.status_code, path)
            self.session.clear()

        return resp

    @staticmethod
    def _is_path(path: str, target: str) -> bool:
        return "/" + path.lstrip("/") == target

    @staticmethod
    def _relative(path: str) -> str:
        # keep any path component of base_url
        return path.lstrip("/")

    # ------------------------------------------------------------------ #
    # auth endpoints
    # ------------------------------------------------------------------ #

    async def login(self, nick: str, password: str) -> Dict[str, Any]:
        """
        Log in and persist the returned token.

        Raises:
            InvalidCredentialsError on 401
            httpx.HTTPStatusError on any other error status
        """
        resp = await self.request(
            "POST", self.s.paths.login, json={"nick": nick, "password": password}
        )
        if resp.status_code == 401:
            raise InvalidCredentialsError("Invalid nick or password")
        resp.raise_for_status()

        payload = resp.json()
        self.session.save(payload["token"])
        return payload

    async def register(self, nick: str, password: str, **profile: Any) -> Dict[str, Any]:
        """
        Create a user. The current session, if any, is left untouched
        (an admin creating accounts stays logged in as themselves).
        """
        resp = await self.request(
            "POST", self.s.paths.register, json={"nick": nick, "password": password, **profile}
        )
        resp.raise_for_status()
        return resp.json()

    async def logout(self) -> TeardownOutcome:
        return await self.session.logout()

    # ------------------------------------------------------------------ #
    # RevocationClient port
    # ------------------------------------------------------------------ #

    async def revoke(self, token: str) -> None:
        """
        Ask the server to revoke `token`.

        Uses a short-lived client so it also works from a teardown hook
        running in a fresh event loop.

        Raises:
            RemoteRevocationUnreachableError
        """
        try:
            async with self._new_client() as client:
                resp = await client.post(
                    self._relative(self.s.paths.logout),
                    headers={"Authorization": f"Bearer {token}"},
                )
                resp.raise_for_status()
        except httpx.HTTPStatusError as exc:
            raise RemoteRevocationUnreachableError(
                f"Logout rejected: {exc.response.status_code} {exc.response.text}"
            ) from exc
        except httpx.HTTPError as exc:
            raise RemoteRevocationUnreachableError(f"Logout request failed: {exc}") from exc
