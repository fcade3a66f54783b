# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

import time
from collections import deque
from collections.abc import Callable
from dataclasses import dataclass
from threading import Lock

from sessionauth.shared.logging import logger


@dataclass
class LoginAttempt:
    timestamp: float
    success: bool
    ip_address: str | None = None


class LoginAttemptsTracker:
    """Counts failed logins per identity and locks it for a cooldown.

    Identities with no failure inside the window and no active lockout are
    dropped, both on their own next attempt and by a periodic sweep.
    """

    def __init__(
        self,
        *,
        max_attempts: int = 5,
        window_seconds: float = 60 * 60,
        lockout_seconds: float = 15 * 60,
        time_provider: Callable[[], float] | None = None,
        sweep_every: int = 256,
    ) -> None:
        if max_attempts <= 0:
            raise ValueError("max_attempts must be greater than zero")
        self._max_attempts = max_attempts
        self._window = window_seconds
        self._lockout = lockout_seconds
        self._now = time_provider or time.time
        self._attempts: dict[str, deque[LoginAttempt]] = {}
        self._lock = Lock()
        self._lockouts: dict[str, float] = {}  # identity -> unlock_time
        self._sweep_every = max(1, sweep_every)
        self._calls_since_sweep = 0

    def record_attempt(
        self, identity: str, success: bool, ip_address: str | None = None
    ) -> None:
        with self._lock:
            self._maybe_sweep()
            if success:
                self._attempts.pop(identity, None)
                if self._lockouts.pop(identity, None) is not None:
                    logger.info(f"login_attempts: cleared lockout for identity={identity}")
                return

            attempts = self._attempts.get(identity)
            if attempts is None:
                attempts = deque(maxlen=self._max_attempts * 2)
                self._attempts[identity] = attempts
            self._drop_stale(attempts)
            attempts.append(
                LoginAttempt(timestamp=self._now(), success=False, ip_address=ip_address)
            )
            self._check_and_lock(identity)

    def is_locked(self, identity: str) -> bool:
        with self._lock:
            unlock_time = self._lockouts.get(identity)
            if unlock_time is None:
                return False

            if self._now() >= unlock_time:
                del self._lockouts[identity]
                logger.info(f"login_attempts: lockout expired for identity={identity}")
                return False

            return True

    def get_lockout_remaining(self, identity: str) -> float:
        with self._lock:
            unlock_time = self._lockouts.get(identity)
            if unlock_time is None:
                return 0.0
            return max(0.0, unlock_time - self._now())

    def get_failed_attempts_count(self, identity: str) -> int:
        with self._lock:
            return len(self._recent_failures(identity))

    def tracked_identities(self) -> int:
        with self._lock:
            return len(self._attempts.keys() | self._lockouts.keys())

    def clear_attempts(self, identity: str) -> None:
        with self._lock:
            self._attempts.pop(identity, None)
            self._lockouts.pop(identity, None)
            logger.info(f"login_attempts: cleared all attempts for identity={identity}")

    def _drop_stale(self, attempts: deque[LoginAttempt]) -> None:
        cutoff = self._now() - self._window
        while attempts and attempts[0].timestamp <= cutoff:
            attempts.popleft()

    def _maybe_sweep(self) -> None:
        self._calls_since_sweep += 1
        if self._calls_since_sweep < self._sweep_every:
            return
        self._calls_since_sweep = 0

        now = self._now()
        for identity in [i for i, unlock in self._lockouts.items() if now >= unlock]:
            del self._lockouts[identity]
        for identity in list(self._attempts):
            attempts = self._attempts[identity]
            self._drop_stale(attempts)
            if not attempts:
                del self._attempts[identity]

    def _recent_failures(self, identity: str) -> list[LoginAttempt]:
        attempts = self._attempts.get(identity)
        if not attempts:
            return []
        cutoff = self._now() - self._window
        return [a for a in attempts if not a.success and a.timestamp > cutoff]

    def _check_and_lock(self, identity: str) -> None:
        failed_attempts = self._recent_failures(identity)
        if len(failed_attempts) < self._max_attempts:
            return

        self._lockouts[identity] = self._now() + self._lockout
        self._attempts.pop(identity, None)

        ips = {attempt.ip_address for attempt in failed_attempts if attempt.ip_address}
        logger.warning(
            f"login_attempts: ACCOUNT LOCKED identity={identity} "
            f"failed_attempts={len(failed_attempts)} "
            f"lockout_duration={self._lockout}s "
            f"ip_addresses={list(ips) if ips else 'unknown'}"
        )


__all__ = ["LoginAttempt", "LoginAttemptsTracker"]
