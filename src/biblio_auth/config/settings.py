from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

DEFAULT_AUTH_PREFIX = "/biblioteca/auth"
DEFAULT_ERROR_PATH = "/error"
MIN_SECRET_KEY_BYTES = 32


@dataclass(frozen=True, slots=True)
class AuthPaths:
    """
    Endpoint paths shared by the server routes and the client.
    """
    prefix: str = DEFAULT_AUTH_PREFIX
    error: str = DEFAULT_ERROR_PATH

    @property
    def _base(self) -> str:
        return "/" + self.prefix.strip("/")

    @property
    def login(self) -> str:
        return f"{self._base}/login"

    @property
    def register(self) -> str:
        return f"{self._base}/afegirUsuari"

    @property
    def logout(self) -> str:
        return f"{self._base}/logout"


@dataclass(slots=True)
class AuthSettings:
    """
    Server-side token settings.

    Host code decides how to construct this (env, config file, etc.).
    The signing secret is always supplied from outside.
    """
    secret_key: str
    token_ttl_seconds: int = 60 * 60 * 24
    algorithm: str = "HS256"
    leeway_seconds: int = 0

    auth_prefix: str = DEFAULT_AUTH_PREFIX
    error_path: str = DEFAULT_ERROR_PATH

    # Revocation registry housekeeping
    revocation_grace_seconds: float = 60.0
    revocation_purge_interval_seconds: float = 300.0

    def __post_init__(self) -> None:
        if len((self.secret_key or "").encode("utf-8")) < MIN_SECRET_KEY_BYTES:
            raise ValueError(
                f"secret_key must be at least {MIN_SECRET_KEY_BYTES} bytes for HMAC signing"
            )
        if self.token_ttl_seconds <= 0:
            raise ValueError("token_ttl_seconds must be positive")

    @property
    def paths(self) -> AuthPaths:
        return AuthPaths(prefix=self.auth_prefix, error=self.error_path)


@dataclass(slots=True)
class ClientSettings:
    """
    Client-side connection and session settings.
    """
    base_url: str
    auth_prefix: str = DEFAULT_AUTH_PREFIX
    request_timeout_seconds: float = 30.0
    teardown_timeout_seconds: float = 5.0
    verify_ssl: bool = True

    # Where the session token is persisted; None keeps it in memory only.
    session_file: Optional[str] = None

    @property
    def paths(self) -> AuthPaths:
        return AuthPaths(prefix=self.auth_prefix)

    @property
    def base_url_slash(self) -> str:
        b = self.base_url.strip()
        return b if b.endswith("/") else b + "/"
