"""
biblio_auth.client

Calling-side session handling:

- ClientSessionManager: holds the current token; logout / teardown try a
  bounded server-side revoke, then always clear the local token.
- InMemorySessionStorage / FileSessionStorage: where the token lives.
- LibraryApiClient: httpx-based client adding the bearer header and
  implementing the server revoke call.
- install_teardown_hook: forced logout at interpreter exit.
"""

from __future__ import annotations

from .api_client import LibraryApiClient
from .session import ClientSessionManager, TeardownOutcome, install_teardown_hook
from .storage import FileSessionStorage, InMemorySessionStorage, storage_from_settings

__all__ = [
    "ClientSessionManager",
    "TeardownOutcome",
    "install_teardown_hook",
    "InMemorySessionStorage",
    "FileSessionStorage",
    "storage_from_settings",
    "LibraryApiClient",
]
