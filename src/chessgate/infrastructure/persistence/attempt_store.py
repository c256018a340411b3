from __future__ import annotations

from datetime import datetime, timedelta, timezone
from threading import Lock
from typing import Callable, Dict
from uuid import UUID

from src.chessgate.domain.puzzle import PuzzleAttempt, PuzzleAttemptRepository

DEFAULT_ATTEMPT_TTL_SECONDS = 3600
DEFAULT_MAX_ATTEMPTS = 10_000


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class InMemoryPuzzleAttemptRepository(PuzzleAttemptRepository):
    """Process-local registry of live attempts; nothing outlives the process.

    Attempts idle for longer than ``ttl_seconds`` (measured from
    ``updated_at``) are dropped, and once ``max_attempts`` are held the
    least recently updated attempt makes room for a new one.
    """

    def __init__(
        self,
        *,
        ttl_seconds: int = DEFAULT_ATTEMPT_TTL_SECONDS,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1.")
        self._attempts: Dict[UUID, PuzzleAttempt] = {}
        self._lock = Lock()
        self._ttl = timedelta(seconds=ttl_seconds)
        self._max_attempts = max_attempts
        self._clock = clock

    def create(self, attempt: PuzzleAttempt) -> PuzzleAttempt:
        with self._lock:
            if attempt.id in self._attempts:
                raise ValueError(f"Attempt {attempt.id} already exists.")
            self._evict_expired()
            while len(self._attempts) >= self._max_attempts:
                oldest = min(self._attempts.values(), key=lambda item: item.updated_at)
                del self._attempts[oldest.id]
            self._attempts[attempt.id] = attempt
        return attempt

    def get(self, attempt_id: UUID) -> PuzzleAttempt | None:
        with self._lock:
            attempt = self._attempts.get(attempt_id)
            if attempt is not None and self._is_expired(attempt):
                del self._attempts[attempt_id]
                return None
            return attempt

    def save(self, attempt: PuzzleAttempt) -> PuzzleAttempt:
        with self._lock:
            if attempt.id not in self._attempts:
                raise ValueError(f"Attempt {attempt.id} not found.")
            self._attempts[attempt.id] = attempt
        return attempt

    def delete(self, attempt_id: UUID) -> bool:
        with self._lock:
            return self._attempts.pop(attempt_id, None) is not None

    def evict_expired(self) -> int:
        """Drop idle attempts and return how many were removed."""
        with self._lock:
            return self._evict_expired()

    def _evict_expired(self) -> int:
        expired = [key for key, item in self._attempts.items() if self._is_expired(item)]
        for key in expired:
            del self._attempts[key]
        return len(expired)

    def _is_expired(self, attempt: PuzzleAttempt) -> bool:
        return self._clock() - attempt.updated_at > self._ttl

    def __len__(self) -> int:
        with self._lock:
            return len(self._attempts)


__all__ = [
    "DEFAULT_ATTEMPT_TTL_SECONDS",
    "DEFAULT_MAX_ATTEMPTS",
    "InMemoryPuzzleAttemptRepository",
]
