from __future__ import annotations

import os
from typing import Optional

from .settings import DEFAULT_AUTH_PREFIX, AuthSettings, ClientSettings


def _bool(key: str, default: bool = True) -> bool:
    raw = os.getenv(key)
    if raw is None:
        return default
    return str(raw).strip().lower() in {"1", "true", "yes", "on"}


def _number(key: str, default: float) -> float:
    raw = os.getenv(key)
    if raw is None or not raw.strip():
        return default
    try:
        return float(raw)
    except ValueError as exc:
        raise RuntimeError(f"{key} must be a number, got {raw!r}") from exc


def _require(*keys: str) -> dict[str, str]:
    values = {k: os.getenv(k) for k in keys}
    missing = [k for k, v in values.items() if not v]
    if missing:
        raise RuntimeError(f"Missing biblio_auth settings: {', '.join(missing)}")
    return {k: v for k, v in values.items() if v}


def settings_from_env() -> AuthSettings:
    """
    Build server settings from BIBLIO_AUTH_* environment variables.

    BIBLIO_AUTH_SECRET_KEY is mandatory; everything else has a default.
    """
    required = _require("BIBLIO_AUTH_SECRET_KEY")

    return AuthSettings(
        secret_key=required["BIBLIO_AUTH_SECRET_KEY"],
        token_ttl_seconds=int(_number("BIBLIO_AUTH_TOKEN_TTL_SECONDS", 60 * 60 * 24)),
        leeway_seconds=int(_number("BIBLIO_AUTH_LEEWAY_SECONDS", 0)),
        auth_prefix=os.getenv("BIBLIO_AUTH_PREFIX") or DEFAULT_AUTH_PREFIX,
        revocation_grace_seconds=_number("BIBLIO_AUTH_REVOCATION_GRACE_SECONDS", 60.0),
        revocation_purge_interval_seconds=_number(
            "BIBLIO_AUTH_REVOCATION_PURGE_INTERVAL_SECONDS", 300.0
        ),
    )


def client_settings_from_env(session_file: Optional[str] = None) -> ClientSettings:
    """Build client settings from BIBLIO_API_* / BIBLIO_* environment variables."""
    required = _require("BIBLIO_API_BASE_URL")

    return ClientSettings(
        base_url=required["BIBLIO_API_BASE_URL"],
        auth_prefix=os.getenv("BIBLIO_AUTH_PREFIX") or DEFAULT_AUTH_PREFIX,
        request_timeout_seconds=_number("BIBLIO_REQUEST_TIMEOUT_SECONDS", 30.0),
        teardown_timeout_seconds=_number("BIBLIO_TEARDOWN_TIMEOUT_SECONDS", 5.0),
        verify_ssl=_bool("VERIFY_SSL", True),
        session_file=session_file or os.getenv("BIBLIO_SESSION_FILE") or None,
    )
