"""In-memory store of issued-but-unconsumed challenge nonces."""

from __future__ import annotations

import time
from collections.abc import Callable
from threading import Lock
from typing import Final, NamedTuple

from pow_quote.core.errors import DuplicateNonceError

DEFAULT_TTL_SECONDS: Final[float] = 300.0


class _Entry(NamedTuple):
    expiry: float
    issued_at: int | None


class NonceStore:
    """Key-presence set with per-entry expiry.

    Each entry may carry the unix time its challenge was issued, so the
    verifier can check freshness against the server's record instead of the
    date echoed back by the client. Expiry only bounds memory held by
    abandoned challenges. Every operation runs under one lock, so
    check-and-set sequences are atomic for all callers.
    """

    def __init__(
        self,
        ttl_seconds: float = DEFAULT_TTL_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if ttl_seconds <= 0:
            raise ValueError("ttl_seconds must be positive")
        self._ttl_seconds = float(ttl_seconds)
        self._clock = clock
        self._entries: dict[str, _Entry] = {}
        self._lock = Lock()

    @property
    def ttl_seconds(self) -> float:
        return self._ttl_seconds

    def add(self, key: str, issued_at: int | None = None) -> None:
        """Register a nonce, optionally with the unix time its challenge was issued.

        Raises:
            DuplicateNonceError: If the key is already present and not expired.
        """
        now = self._clock()
        with self._lock:
            if self._live(key, now) is not None:
                raise DuplicateNonceError(f"nonce {key!r} is already outstanding")
            self._entries[key] = _Entry(now + self._ttl_seconds, issued_at)

    def exists(self, key: str) -> bool:
        """Return True if the key is present and not expired."""
        now = self._clock()
        with self._lock:
            return self._live(key, now) is not None

    def issued_at(self, key: str) -> int | None:
        """Return the recorded issue time of a live key, or None."""
        now = self._clock()
        with self._lock:
            entry = self._live(key, now)
            return entry.issued_at if entry is not None else None

    def remove(self, key: str) -> None:
        """Forget a nonce; unknown keys are ignored."""
        with self._lock:
            self._entries.pop(key, None)

    def consume(self, key: str) -> bool:
        """Atomically remove a live key.

        Returns:
            True for exactly one caller per added key, False if the key was
            missing, expired, or already consumed.
        """
        now = self._clock()
        with self._lock:
            if self._live(key, now) is None:
                return False
            del self._entries[key]
            return True

    def purge_expired(self) -> int:
        """Drop expired entries and return how many were removed."""
        now = self._clock()
        with self._lock:
            expired = [key for key, entry in self._entries.items() if entry.expiry <= now]
            for key in expired:
                del self._entries[key]
        return len(expired)

    def __len__(self) -> int:
        now = self._clock()
        with self._lock:
            return sum(1 for entry in self._entries.values() if entry.expiry > now)

    def _live(self, key: str, now: float) -> _Entry | None:
        # Caller holds the lock.
        entry = self._entries.get(key)
        if entry is None:
            return None
        if entry.expiry <= now:
            del self._entries[key]
            return None
        return entry
