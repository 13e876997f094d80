from datetime import datetime, timedelta, timezone

import pytest

from models.revoked_token import RevokedTokenRegistry

T0 = datetime(2026, 1, 1, tzinfo=timezone.utc)


class FakeClock:
    def __init__(self, now=T0):
        self.now = now

    def __call__(self):
        return self.now


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def registry(clock):
    return RevokedTokenRegistry(retention=timedelta(hours=2), clock=clock)


def test_revoke_marks_token(registry):
    assert registry.is_revoked("tok") is False
    registry.revoke("tok", expires_at=T0 + timedelta(hours=1))
    assert registry.is_revoked("tok") is True
    assert registry.is_revoked("other") is False


def test_revoke_is_idempotent(registry):
    registry.revoke("tok", expires_at=T0 + timedelta(hours=1))
    registry.revoke("tok", expires_at=T0 + timedelta(hours=1))
    assert registry.is_revoked("tok") is True
    assert len(registry) == 1


def test_entries_survive_until_natural_expiry(registry, clock):
    registry.revoke("tok", expires_at=T0 + timedelta(hours=1))
    clock.now = T0 + timedelta(minutes=59)
    registry.revoke("other", expires_at=T0 + timedelta(hours=1))
    assert registry.is_revoked("tok") is True


def test_expired_entries_are_pruned_lazily(registry, clock):
    registry.revoke("old", expires_at=T0 + timedelta(minutes=5))
    registry.revoke("new", expires_at=T0 + timedelta(hours=1))

    clock.now = T0 + timedelta(minutes=10)
    registry.revoke("newer", expires_at=T0 + timedelta(hours=1))

    assert registry.is_revoked("old") is False
    assert registry.is_revoked("new") is True
    assert len(registry) == 2


def test_unknown_expiry_uses_retention(registry, clock):
    registry.revoke("opaque")
    assert registry.prune(T0 + timedelta(hours=1)) == 0
    assert registry.is_revoked("opaque") is True
    assert registry.prune(T0 + timedelta(hours=2)) == 1
    assert registry.is_revoked("opaque") is False


def test_later_expiry_wins(registry):
    registry.revoke("tok", expires_at=T0 + timedelta(hours=1))
    registry.revoke("tok", expires_at=T0 + timedelta(minutes=1))
    assert registry.prune(T0 + timedelta(minutes=30)) == 0
    assert registry.is_revoked("tok") is True


def test_superseded_expiry_is_not_evicted_early(registry):
    registry.revoke("tok", expires_at=T0 + timedelta(minutes=1))
    registry.revoke("tok", expires_at=T0 + timedelta(hours=1))

    assert registry.prune(T0 + timedelta(minutes=30)) == 0
    assert registry.is_revoked("tok") is True
    assert registry.prune(T0 + timedelta(hours=1)) == 1
    assert registry.is_revoked("tok") is False


def test_prune_evicts_in_expiry_order(registry):
    for minutes in (30, 10, 50, 20, 40):
        registry.revoke(f"tok-{minutes}", expires_at=T0 + timedelta(minutes=minutes))

    assert registry.prune(T0 + timedelta(minutes=25)) == 2
    assert registry.is_revoked("tok-10") is False
    assert registry.is_revoked("tok-20") is False
    assert registry.is_revoked("tok-30") is True
    assert len(registry) == 3
