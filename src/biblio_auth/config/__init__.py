"""
biblio_auth.config

- AuthSettings: server-side signing and revocation settings.
- ClientSettings: base URL, timeouts and session file for the client.
- AuthPaths: login / registration / logout / error paths shared by both.
- settings_from_env / client_settings_from_env:
    convenience readers for env-driven deployments.
"""

from __future__ import annotations

from .env import client_settings_from_env, settings_from_env
from .settings import AuthPaths, AuthSettings, ClientSettings

__all__ = [
    "AuthPaths",
    "AuthSettings",
    "ClientSettings",
    "settings_from_env",
    "client_settings_from_env",
]
