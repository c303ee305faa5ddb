"""
Circuit breakers for the Google Routes and Geocoding calls.

A breaker opens after a run of consecutive failures and rejects calls until
its recovery window has passed. Then a single trial call goes through while
the others are still rejected. The outcome of that call closes or reopens the
breaker.
"""

from __future__ import annotations

import functools
import logging
import time
from enum import StrEnum

logger = logging.getLogger(__name__)


class CircuitState(StrEnum):
    CLOSED = "closed"
    OPEN = "open"
    HALF_OPEN = "half-open"


class CircuitOpen(Exception):
    """Raised instead of calling a provider whose breaker is open."""

    def __init__(self, service: str, resets_in: float) -> None:
        super().__init__(f"{service} temporarily disabled (retry in {resets_in:.0f}s)")
        self.service = service
        self.resets_in = resets_in


class CircuitBreaker:
    def __init__(
        self,
        service: str,
        *,
        failure_threshold: int = 5,
        recovery_timeout: float = 60.0,
    ) -> None:
        self.service = service
        self.failure_threshold = failure_threshold
        self.recovery_timeout = recovery_timeout
        self.reset()

    def reset(self) -> None:
        self._failures = 0
        self._opened_at: float | None = None
        self._state = CircuitState.CLOSED
        self._trial_in_flight = False

    def release_trial(self) -> None:
        self._trial_in_flight = False

    def _elapsed(self) -> float:
        if self._opened_at is None:
            return 0.0
        return time.monotonic() - self._opened_at

    def _open(self) -> None:
        self._state = CircuitState.OPEN
        self._opened_at = time.monotonic()
        self._trial_in_flight = False

    @property
    def state(self) -> CircuitState:
        if self._state is CircuitState.OPEN and self._elapsed() >= self.recovery_timeout:
            self._state = CircuitState.HALF_OPEN
        return self._state

    def record_success(self) -> None:
        if self._state is not CircuitState.CLOSED:
            logger.info("%s recovered, closing circuit", self.service)
        self.reset()

    def record_failure(self) -> None:
        self._failures += 1
        state = self.state
        if state is CircuitState.HALF_OPEN:
            self._open()
            logger.warning("%s trial call failed, circuit open again", self.service)
        elif state is CircuitState.CLOSED and self._failures >= self.failure_threshold:
            self._open()
            logger.warning(
                "%s failed %d times in a row, opening circuit for %.0fs",
                self.service,
                self._failures,
                self.recovery_timeout,
            )

    def check(self) -> bool:
        """Raise :class:`CircuitOpen` unless a call may go through now.

        While half-open only one trial call is admitted at a time. Returns
        True when the admitted call is that trial call.
        """
        state = self.state
        if state is CircuitState.OPEN:
            resets_in = max(0.0, self.recovery_timeout - self._elapsed())
            raise CircuitOpen(self.service, resets_in)
        if state is CircuitState.HALF_OPEN:
            if self._trial_in_flight:
                raise CircuitOpen(self.service, 0.0)
            self._trial_in_flight = True
            return True
        return False


routes_breaker = CircuitBreaker("Google Routes", failure_threshold=5, recovery_timeout=60)
geocoding_breaker = CircuitBreaker(
    "Google Geocoding",
    failure_threshold=10,
    recovery_timeout=30,
)


def with_circuit_breaker(breaker: CircuitBreaker):
    """Guard an async provider call with ``breaker``."""

    def decorator(fn):
        @functools.wraps(fn)
        async def wrapper(*args, **kwargs):
            is_trial = breaker.check()
            try:
                result = await fn(*args, **kwargs)
            except Exception:
                breaker.record_failure()
                raise
            else:
                breaker.record_success()
                return result
            finally:
                # also frees the trial slot when the call is cancelled
                if is_trial:
                    breaker.release_trial()

        return wrapper

    return decorator
