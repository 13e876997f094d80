"""
RevokedTokenRegistry: raw token strings rejected regardless of signature or
remaining lifetime (filled on logout and refresh rotation).

Each entry remembers when its token expires naturally. Once that moment has
passed the token fails verification on its own, so the entry is dropped
lazily on the next revoke() to keep the set bounded. A min-heap ordered by
expiry means eviction only touches entries that are due.
"""
from __future__ import annotations

import heapq
import logging
import threading
from datetime import datetime, timedelta, timezone
from typing import Callable, Dict, List, Optional, Tuple

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class RevokedTokenRegistry:

    def __init__(self, retention: timedelta = timedelta(days=1),
                 clock: Callable[[], datetime] = _utcnow):
        # retention applies to tokens revoked without a known expiry
        self._lock = threading.Lock()
        self._entries: Dict[str, datetime] = {}
        # (keep_until, token); may hold stale pairs superseded by a later expiry
        self._expiry_heap: List[Tuple[datetime, str]] = []
        self._retention = retention
        self._clock = clock

    def revoke(self, token: str, expires_at: Optional[datetime] = None) -> None:
        """Add token to the revoked set. Revoking twice is the same as once."""
        now = self._clock()
        with self._lock:
            self._prune_locked(now)
            keep_until = expires_at or (now + self._retention)
            current = self._entries.get(token)
            if current is None or keep_until > current:
                self._entries[token] = keep_until
                heapq.heappush(self._expiry_heap, (keep_until, token))

    def is_revoked(self, token: str) -> bool:
        with self._lock:
            return token in self._entries

    def prune(self, now: Optional[datetime] = None) -> int:
        """Drop entries past their natural expiry, return how many went."""
        with self._lock:
            return self._prune_locked(now or self._clock())

    def _prune_locked(self, now: datetime) -> int:
        evicted = 0
        heap = self._expiry_heap
        while heap and heap[0][0] <= now:
            keep_until, token = heapq.heappop(heap)
            if self._entries.get(token) == keep_until:
                del self._entries[token]
                evicted += 1
        if evicted:
            logger.debug("Evicted %d expired revoked tokens", evicted)
        return evicted

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
