import logging
import threading
import time
from datetime import datetime
from typing import Callable, Dict, Optional

from ...domain.ports import RevocationRegistry

logger = logging.getLogger(__name__)


class InMemoryRevocationRegistry(RevocationRegistry):
    """
    Thread-safe, process-local set of revoked token identifiers.

    Created once at process start and injected into the request
    authenticator and the logout handler; it is never persisted, so it is
    not a source of truth across several server instances or restarts.

    Writers serialize on a lock. Readers do a single dict membership test,
    which is atomic under the GIL, so `is_revoked` never waits on a writer
    and sees every `revoke` that has already returned.

    Entries remember the revoked token's expiry. Once that expiry (plus a
    grace margin covering the codec's leeway) has passed, the codec rejects
    the token on its own, so the entry can be dropped. Entries revoked
    without an expiry are kept for the life of the process.
    """

    def __init__(
        self,
        *,
        grace_seconds: float = 60.0,
        purge_interval_seconds: float = 300.0,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._revoked: Dict[str, Optional[float]] = {}
        self._lock = threading.Lock()
        self._grace = grace_seconds
        self._purge_interval = purge_interval_seconds
        self._clock = clock
        self._last_purge = clock()

    # ------------------------------------------------------------------ #
    # Port implementation
    # ------------------------------------------------------------------ #

    def revoke(self, token_id: str, expires_at: Optional[datetime] = None) -> None:
        """
        Idempotently mark `token_id` as revoked.

        Revoking an identifier twice keeps the later of the two expiries.
        """
        if not token_id:
            raise ValueError("token_id must be a non-empty string")

        exp = expires_at.timestamp() if expires_at is not None else None
        with self._lock:
            if token_id in self._revoked:
                current = self._revoked[token_id]
                if current is None or exp is None:
                    exp = None
                else:
                    exp = max(current, exp)
            self._revoked[token_id] = exp
            self._maybe_purge_locked()

        logger.info("Token revoked", extra={"token_id": token_id})

    def is_revoked(self, token_id: str) -> bool:
        return token_id in self._revoked

    # ------------------------------------------------------------------ #
    # Housekeeping
    # ------------------------------------------------------------------ #

    def purge_expired(self) -> int:
        """Drop entries whose token has expired. Returns count removed."""
        with self._lock:
            return self._purge_locked()

    def __len__(self) -> int:
        return len(self._revoked)

    def __contains__(self, token_id: object) -> bool:
        return token_id in self._revoked

    def _maybe_purge_locked(self) -> None:
        if self._clock() - self._last_purge >= self._purge_interval:
            self._purge_locked()

    def _purge_locked(self) -> int:
        now = self._clock()
        self._last_purge = now
        cutoff = now - self._grace
        expired = [
            tid for tid, exp in self._revoked.items()
            if exp is not None and exp < cutoff
        ]
        for tid in expired:
            del self._revoked[tid]
        if expired:
            logger.debug("Purged expired revocation entries", extra={"count": len(expired)})
        return len(expired)

