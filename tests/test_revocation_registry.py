# tests/test_revocation_registry.py
import threading
from datetime import datetime, timedelta, timezone

import pytest

from biblio_auth.adapters.memory.revocation_registry import InMemoryRevocationRegistry


class FakeClock:
    def __init__(self, start: float = 1_700_000_000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


def _at(clock: FakeClock, seconds: float) -> datetime:
    return datetime.fromtimestamp(clock.now + seconds, tz=timezone.utc)


def test_unknown_token_is_not_revoked(registry):
    assert registry.is_revoked("never-seen") is False
    assert len(registry) == 0


def test_revoke_is_idempotent(registry):
    registry.revoke("jti-1")
    registry.revoke("jti-1")

    assert registry.is_revoked("jti-1")
    assert len(registry) == 1
    assert "jti-1" in registry


def test_revoke_rejects_empty_identifier(registry):
    with pytest.raises(ValueError):
        registry.revoke("")


def test_concurrent_revocations_are_all_visible():
    registry = InMemoryRevocationRegistry()
    ids = [f"jti-{n}" for n in range(400)]
    stale = []
    start = threading.Barrier(8)

    def writer(chunk):
        start.wait()
        for token_id in chunk:
            registry.revoke(token_id)
            if not registry.is_revoked(token_id):
                stale.append(token_id)

    threads = [threading.Thread(target=writer, args=(ids[i::8],)) for i in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert stale == []
    assert len(registry) == len(ids)
    assert all(registry.is_revoked(token_id) for token_id in ids)


def test_purge_drops_only_entries_past_expiry_and_grace():
    clock = FakeClock()
    registry = InMemoryRevocationRegistry(grace_seconds=60, clock=clock)
    registry.revoke("short", expires_at=_at(clock, 10))
    registry.revoke("long", expires_at=_at(clock, 3600))
    registry.revoke("forever")

    clock.advance(30)
    assert registry.purge_expired() == 0

    clock.advance(100)
    assert registry.purge_expired() == 1
    assert not registry.is_revoked("short")
    assert registry.is_revoked("long")
    assert registry.is_revoked("forever")

    clock.advance(10 * 3600)
    assert registry.purge_expired() == 1
    assert registry.is_revoked("forever")


def test_revoke_purges_at_most_once_per_interval():
    clock = FakeClock()
    registry = InMemoryRevocationRegistry(grace_seconds=0, purge_interval_seconds=300, clock=clock)
    registry.revoke("old", expires_at=_at(clock, 1))

    clock.advance(10)
    registry.revoke("a", expires_at=_at(clock, 3600))
    assert registry.is_revoked("old")

    clock.advance(300)
    registry.revoke("b", expires_at=_at(clock, 3600))
    assert not registry.is_revoked("old")
    assert registry.is_revoked("a")
    assert registry.is_revoked("b")


def test_revoking_again_keeps_the_later_expiry():
    clock = FakeClock()
    registry = InMemoryRevocationRegistry(grace_seconds=0, clock=clock)
    registry.revoke("jti", expires_at=_at(clock, 10))
    registry.revoke("jti", expires_at=_at(clock, 1000))

    clock.advance(500)
    registry.purge_expired()
    assert registry.is_revoked("jti")


def test_revoking_without_expiry_pins_the_entry():
    clock = FakeClock()
    registry = InMemoryRevocationRegistry(grace_seconds=0, clock=clock)
    registry.revoke("jti", expires_at=_at(clock, 10))
    registry.revoke("jti")

    clock.advance(timedelta(days=30).total_seconds())
    registry.purge_expired()
    assert registry.is_revoked("jti")
