# rate_limit.py
"""Login attempt limiting keyed by client IP.

The limiter talks to an AttemptStore so the in-memory store can be swapped
for a shared one (Redis or similar) when running more than one process.
"""
import abc
import threading
import time
from dataclasses import dataclass
from typing import Callable, Dict, Optional

import config


class RateLimitExceeded(Exception):
    def __init__(self, retry_after: int):
        self.retry_after = retry_after
        super().__init__(f"Too many attempts, retry in {retry_after}s")


@dataclass
class Attempt:
    count: int
    reset_at: float


class AttemptStore(abc.ABC):
    """Counters that expire after a window."""

    @abc.abstractmethod
    def get(self, key: str) -> Optional[Attempt]:
        """Live counter for `key`, or None once its window has passed."""

    @abc.abstractmethod
    def increment(self, key: str, window_seconds: int) -> Attempt:
        """Count one attempt, opening a new window when none is live."""

    @abc.abstractmethod
    def reset(self, key: str) -> None:
        """Forget `key`."""

    @abc.abstractmethod
    def sweep(self) -> int:
        """Drop expired counters and return how many were removed."""


class InMemoryAttemptStore(AttemptStore):
    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self._clock = clock
        self._lock = threading.Lock()
        self._attempts: Dict[str, Attempt] = {}

    def get(self, key):
        with self._lock:
            attempt = self._attempts.get(key)
            if attempt and self._clock() >= attempt.reset_at:
                del self._attempts[key]
                return None
            return attempt

    def increment(self, key, window_seconds):
        now = self._clock()
        with self._lock:
            attempt = self._attempts.get(key)
            if attempt is None or now >= attempt.reset_at:
                attempt = Attempt(count=0, reset_at=now + window_seconds)
                self._attempts[key] = attempt
            attempt.count += 1
            return Attempt(attempt.count, attempt.reset_at)

    def reset(self, key):
        with self._lock:
            self._attempts.pop(key, None)

    def sweep(self):
        now = self._clock()
        with self._lock:
            expired = [key for key, attempt in self._attempts.items() if now >= attempt.reset_at]
            for key in expired:
                del self._attempts[key]
        return len(expired)


class LoginRateLimiter:
    def __init__(self, store: AttemptStore, max_attempts: int = config.LOGIN_MAX_ATTEMPTS,
                 window_seconds: int = config.LOGIN_WINDOW_SECONDS,
                 clock: Callable[[], float] = time.monotonic):
        self.store = store
        self.max_attempts = max_attempts
        self.window_seconds = window_seconds
        self._clock = clock

    def check(self, ip: str) -> None:
        attempt = self.store.get(ip)
        if attempt and attempt.count >= self.max_attempts:
            retry_after = max(1, int(attempt.reset_at - self._clock()))
            raise RateLimitExceeded(retry_after)

    def register_failure(self, ip: str) -> int:
        self.store.sweep()
        return self.store.increment(ip, self.window_seconds).count

    def register_success(self, ip: str) -> None:
        self.store.reset(ip)


login_rate_limiter = LoginRateLimiter(InMemoryAttemptStore())
