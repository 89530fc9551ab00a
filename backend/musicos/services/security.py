"""
Rate limiting and CSRF tokens.

Both take their clock as a constructor argument; the rate limiter also takes
its storage backend, so the SQL backend can be shared by several processes.
"""
import logging
import secrets
import threading
from collections import defaultdict
from datetime import datetime, timedelta
from typing import Callable, Dict, List

from sqlalchemy import func

from musicos.models.rate_limit import RateLimitHit
from musicos.utils.clock import utcnow

log = logging.getLogger("security")


class MemoryRateLimitStorage:
    def __init__(self):
        self._hits: Dict[str, List[datetime]] = defaultdict(list)
        self._lock = threading.Lock()

    def count_since(self, identifier: str, since: datetime) -> int:
        with self._lock:
            hits = [t for t in self._hits.get(identifier, ()) if t > since]
            self._hits[identifier] = hits
            return len(hits)

    def record(self, identifier: str, at: datetime):
        with self._lock:
            self._hits[identifier].append(at)

    def purge(self, before: datetime) -> int:
        removed = 0
        with self._lock:
            for key in list(self._hits):
                kept = [t for t in self._hits[key] if t > before]
                removed += len(self._hits[key]) - len(kept)
                if kept:
                    self._hits[key] = kept
                else:
                    del self._hits[key]
        return removed


class SqlRateLimitStorage:
    """Hits stored in rate_limit_hits; uses short-lived sessions of its own."""

    def __init__(self, session_factory: Callable):
        self.session_factory = session_factory

    def count_since(self, identifier: str, since: datetime) -> int:
        with self.session_factory() as s:
            return (
                s.query(func.count(RateLimitHit.id))
                .filter(RateLimitHit.identifier == identifier, RateLimitHit.hit_at > since)
                .scalar()
                or 0
            )

    def record(self, identifier: str, at: datetime):
        with self.session_factory() as s:
            s.add(RateLimitHit(identifier=identifier, hit_at=at))
            s.commit()

    def purge(self, before: datetime) -> int:
        with self.session_factory() as s:
            removed = (
                s.query(RateLimitHit)
                .filter(RateLimitHit.hit_at <= before)
                .delete(synchronize_session=False)
            )
            s.commit()
            return removed


class RateLimiter:
    """Sliding window: at most max_attempts hits per identifier per window."""

    def __init__(self, storage, max_attempts: int = 5, window_seconds: int = 900, clock=utcnow):
        self.storage = storage
        self.max_attempts = max_attempts
        self.window = timedelta(seconds=window_seconds)
        self.clock = clock

    def check(self, identifier: str) -> bool:
        now = self.clock()
        if self.storage.count_since(identifier, now - self.window) >= self.max_attempts:
            log.warning("rate limit exceeded for %s", identifier)
            return False
        self.storage.record(identifier, now)
        return True

    def purge_expired(self) -> int:
        return self.storage.purge(self.clock() - self.window)


class CsrfTokenStore:
    """Single-use tokens that expire after ttl_seconds."""

    def __init__(self, ttl_seconds: int = 3600, clock=utcnow):
        self.ttl = timedelta(seconds=ttl_seconds)
        self.clock = clock
        self._tokens: Dict[str, datetime] = {}
        self._lock = threading.Lock()

    def issue(self) -> str:
        token = secrets.token_urlsafe(24)
        with self._lock:
            self._tokens[token] = self.clock() + self.ttl
        return token

    def validate(self, token: str) -> bool:
        if not token:
            return False
        with self._lock:
            expires_at = self._tokens.pop(token, None)
        if expires_at is None:
            log.warning("csrf token rejected: unknown")
            return False
        if self.clock() > expires_at:
            log.warning("csrf token rejected: expired")
            return False
        return True

    def purge_expired(self) -> int:
        now = self.clock()
        with self._lock:
            stale = [t for t, exp in self._tokens.items() if exp < now]
            for t in stale:
                del self._tokens[t]
        return len(stale)
