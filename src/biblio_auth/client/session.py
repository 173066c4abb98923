from __future__ import annotations

import asyncio
import atexit
import logging
from enum import Enum
from typing import Optional

from ..domain.exceptions import RemoteRevocationUnreachableError
from ..domain.ports import RevocationClient, SessionStorage

logger = logging.getLogger(__name__)


class TeardownOutcome(Enum):
    NO_SESSION = "no_session"
    REVOKED = "revoked"
    FAILED = "failed"
    TIMED_OUT = "timed_out"


class ClientSessionManager:
    """
    Client-side owner of the current access token.

    - save / clear replace or remove the whole token, nothing in between
    - on_teardown (and logout) run a two-step protocol:
        1) attempt the server-side revoke, bounded by `teardown_timeout`
        2) clear the local token, whatever step 1 did

    Step 2 runs in a `finally`, so the local session is gone even if step 1
    fails, times out or the task is cancelled.
    """

    def __init__(
        self,
        storage: SessionStorage,
        revocation_client: Optional[RevocationClient] = None,
        *,
        teardown_timeout: float = 5.0,
    ) -> None:
        self._storage = storage
        self._revocation_client = revocation_client
        self._teardown_timeout = teardown_timeout

    def bind_revocation_client(self, revocation_client: RevocationClient) -> None:
        self._revocation_client = revocation_client

    # ------------------------------------------------------------------ #
    # token slot
    # ------------------------------------------------------------------ #

    def current_token(self) -> Optional[str]:
        token = self._storage.load()
        return token or None

    def has_active_session(self) -> bool:
        return self.current_token() is not None

    def save(self, token: str) -> None:
        if not token:
            raise ValueError("Refusing to save an empty token")
        self._storage.store(token)

    def clear(self) -> None:
        self._storage.erase()

    # ------------------------------------------------------------------ #
    # logout / teardown
    # ------------------------------------------------------------------ #

    async def on_teardown(self) -> TeardownOutcome:
        """Forced logout when the application shuts down."""
        token = self.current_token()
        if token is None:
            return TeardownOutcome.NO_SESSION

        try:
            outcome = await self._attempt_remote_revoke(token)
        finally:
            self.clear()

        logger.info("Local session cleared on teardown (%s)", outcome.value)
        return outcome

    async def logout(self) -> TeardownOutcome:
        """Explicit user logout; same protocol as teardown."""
        return await self.on_teardown()

    def teardown_blocking(self) -> TeardownOutcome:
        """
        Run on_teardown from synchronous code (the atexit hook).

        Inside a running event loop the remote revoke cannot be awaited
        here, so the local token is only cleared.
        """
        try:
            asyncio.get_running_loop()
        except RuntimeError:
            return asyncio.run(self.on_teardown())

        logger.warning("teardown_blocking called inside a running loop; clearing session locally only")
        if not self.has_active_session():
            return TeardownOutcome.NO_SESSION
        self.clear()
        return TeardownOutcome.FAILED

    async def _attempt_remote_revoke(self, token: str) -> TeardownOutcome:
        if self._revocation_client is None:
            logger.warning("No revocation client bound; clearing session locally only")
            return TeardownOutcome.FAILED

        try:
            await asyncio.wait_for(
                self._revocation_client.revoke(token),
                timeout=self._teardown_timeout,
            )
        except asyncio.TimeoutError:
            logger.warning(
                "Server-side logout timed out after %.1fs", self._teardown_timeout
            )
            return TeardownOutcome.TIMED_OUT
        except RemoteRevocationUnreachableError as exc:
            logger.warning("Server-side logout failed: %s", exc)
            return TeardownOutcome.FAILED

        return TeardownOutcome.REVOKED


def install_teardown_hook(manager: ClientSessionManager) -> None:
    """
    Register a forced logout to run when the interpreter exits.

    The hook runs in its own event loop.
    """
    atexit.register(manager.teardown_blocking)
