from datetime import datetime, timedelta

from musicos.db import SessionLocal
from musicos.services.security import (
    CsrfTokenStore,
    MemoryRateLimitStorage,
    RateLimiter,
    SqlRateLimitStorage,
)


class Clock:
    def __init__(self):
        self.now = datetime(2026, 3, 1, 9, 0)

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += timedelta(seconds=seconds)


def _limiter_window(storage):
    clock = Clock()
    limiter = RateLimiter(storage, max_attempts=3, window_seconds=60, clock=clock)
    assert [limiter.check("login:1.2.3.4") for _ in range(4)] == [True, True, True, False]
    # other identifiers are counted separately
    assert limiter.check("login:5.6.7.8")
    clock.advance(61)
    assert limiter.check("login:1.2.3.4")
    return limiter, clock


def test_rate_limiter_memory():
    _limiter_window(MemoryRateLimitStorage())


def test_rate_limiter_sql():
    _limiter_window(SqlRateLimitStorage(SessionLocal))


def test_rate_limiter_purge():
    storage = MemoryRateLimitStorage()
    limiter, clock = _limiter_window(storage)
    clock.advance(30)
    # the four hits from the first minute go, the one after the window stays
    assert limiter.purge_expired() == 4
    assert storage.count_since("login:1.2.3.4", datetime(2000, 1, 1)) == 1


def test_rate_limiter_purge_sql():
    storage = SqlRateLimitStorage(SessionLocal)
    limiter, clock = _limiter_window(storage)
    clock.advance(30)
    assert limiter.purge_expired() == 4


def test_csrf_token_single_use():
    store = CsrfTokenStore(ttl_seconds=60)
    token = store.issue()
    assert store.validate(token)
    assert not store.validate(token)


def test_csrf_token_rejects_unknown_and_missing():
    store = CsrfTokenStore()
    assert not store.validate("forjado")
    assert not store.validate(None)
    assert not store.validate("")


def test_csrf_token_expires():
    clock = Clock()
    store = CsrfTokenStore(ttl_seconds=60, clock=clock)
    token = store.issue()
    clock.advance(61)
    assert not store.validate(token)


def test_csrf_purge():
    clock = Clock()
    store = CsrfTokenStore(ttl_seconds=60, clock=clock)
    store.issue()
    clock.advance(30)
    kept = store.issue()
    clock.advance(31)
    assert store.purge_expired() == 1
    assert store.validate(kept)
