"""
Circuit breakers for external dependencies.

Each guarded dependency (language model, vector store) gets its own
breaker. A breaker counts failures inside a rolling window; reaching the
threshold opens it, and while open every call gets the fallback without
touching the dependency. After the cool-down a single trial call is let
through: success closes the breaker, failure opens it again.

State lives behind one lock per breaker so concurrent requests (and
worker threads) see consistent counts.

Dependencies: threading (stdlib), bookrag.configs
System role: Resilience wrapper around LLM and vector store calls
"""

import logging
import threading
import time
from collections import deque
from collections.abc import Awaitable, Callable
from enum import Enum
from typing import TypeVar

from bookrag.configs.resilience import ResilienceSettings
from bookrag.core.exceptions import CircuitOpenError

logger = logging.getLogger(__name__)

ResultT = TypeVar("ResultT")

LLM_DEPENDENCY = "llm"
VECTOR_STORE_DEPENDENCY = "vector_store"

GENERATION_FALLBACK_MESSAGE = (
    "The answer service is temporarily unavailable, so I can't generate a response right now. "
    "Please try again in a moment, or use keyword search to browse the matching passages directly."
)


class BreakerState(str, Enum):
    """Circuit breaker states."""

    CLOSED = "closed"
    OPEN = "open"
    HALF_OPEN = "half_open"


class CircuitBreaker:
    """Rolling-window circuit breaker for one dependency."""

    def __init__(
        self,
        name: str,
        failure_threshold: int = 5,
        window_seconds: float = 60.0,
        cooldown_seconds: float = 30.0,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        """
        Initialize breaker.

        Args:
            name: Dependency name used in logs and errors
            failure_threshold: Failures within the window that open the breaker
            window_seconds: Length of the rolling failure window
            cooldown_seconds: Time spent open before a trial call is allowed
            clock: Monotonic time source (injectable for tests)
        """
        if failure_threshold <= 0:
            raise ValueError("failure_threshold must be positive")

        self.name = name
        self.failure_threshold = failure_threshold
        self.window_seconds = window_seconds
        self.cooldown_seconds = cooldown_seconds
        self._clock = clock

        self._lock = threading.Lock()
        self._failures: deque[float] = deque()
        self._state = BreakerState.CLOSED
        self._opened_at = 0.0
        self._trial_in_flight = False

    @property
    def state(self) -> BreakerState:
        with self._lock:
            return self._current_state()

    def _current_state(self) -> BreakerState:
        # Caller holds the lock.
        if self._state is BreakerState.OPEN and self._clock() - self._opened_at >= self.cooldown_seconds:
            self._state = BreakerState.HALF_OPEN
            self._trial_in_flight = False
        return self._state

    def allow_request(self) -> bool:
        """
        Decide whether a call may reach the dependency.

        In half-open state only the first caller gets True; it becomes the
        trial call and must report back via record_success/record_failure.

        Returns:
            bool: True if the call should be issued
        """
        with self._lock:
            state = self._current_state()
            if state is BreakerState.CLOSED:
                return True
            if state is BreakerState.HALF_OPEN and not self._trial_in_flight:
                self._trial_in_flight = True
                logger.info(f"{__name__}:allow_request - Letting trial call through", extra={"dependency": self.name})
                return True
            return False

    def record_success(self) -> None:
        with self._lock:
            if self._state is not BreakerState.CLOSED:
                logger.info(f"{__name__}:record_success - Breaker closed", extra={"dependency": self.name})
            self._state = BreakerState.CLOSED
            self._failures.clear()
            self._trial_in_flight = False

    def release_trial(self) -> None:
        """
        Give back a trial slot whose call ended without an outcome.

        A cancelled trial call says nothing about the dependency, so the
        breaker stays half-open and the next caller may try.
        """
        with self._lock:
            if self._state is BreakerState.HALF_OPEN and self._trial_in_flight:
                self._trial_in_flight = False
                logger.info(f"{__name__}:release_trial - Trial call abandoned", extra={"dependency": self.name})

    def record_failure(self) -> None:
        with self._lock:
            now = self._clock()
            state = self._current_state()
            if state is BreakerState.HALF_OPEN:
                self._trip(now)
                return

            self._failures.append(now)
            while self._failures and now - self._failures[0] > self.window_seconds:
                self._failures.popleft()
            if state is BreakerState.CLOSED and len(self._failures) >= self.failure_threshold:
                self._trip(now)

    def _trip(self, now: float) -> None:
        # Caller holds the lock.
        self._state = BreakerState.OPEN
        self._opened_at = now
        self._trial_in_flight = False
        self._failures.clear()
        logger.warning(
            f"{__name__}:_trip - Breaker opened",
            extra={"dependency": self.name, "cooldown_seconds": self.cooldown_seconds},
        )

    async def call(
        self,
        func: Callable[[], Awaitable[ResultT]],
        fallback: Callable[[], ResultT] | None = None,
    ) -> ResultT:
        """
        Run ``func`` through the breaker.

        Args:
            func: Zero-argument coroutine factory issuing the guarded call
            fallback: Value factory used when the breaker refuses the call.
                When omitted, CircuitOpenError is raised instead.

        Returns:
            Result of ``func`` or of ``fallback``

        Raises:
            CircuitOpenError: Breaker open and no fallback given
            Exception: Whatever ``func`` raised (after recording the failure)
        """
        if not self.allow_request():
            logger.info(f"{__name__}:call - Short-circuited", extra={"dependency": self.name})
            if fallback is None:
                raise CircuitOpenError(self.name)
            return fallback()

        try:
            result = await func()
        except Exception:
            self.record_failure()
            raise
        except BaseException:
            self.release_trial()
            raise
        self.record_success()
        return result


class BreakerRegistry:
    """One breaker per dependency name, created on first use."""

    def __init__(
        self,
        settings: ResilienceSettings | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._settings = settings or ResilienceSettings()
        self._clock = clock
        self._breakers: dict[str, CircuitBreaker] = {}
        self._lock = threading.Lock()

    def get(self, name: str) -> CircuitBreaker:
        with self._lock:
            if name not in self._breakers:
                self._breakers[name] = CircuitBreaker(
                    name=name,
                    failure_threshold=self._settings.failure_threshold,
                    window_seconds=self._settings.window_seconds,
                    cooldown_seconds=self._settings.cooldown_seconds,
                    clock=self._clock,
                )
            return self._breakers[name]

    def states(self) -> dict[str, str]:
        with self._lock:
            breakers = list(self._breakers.values())
        return {breaker.name: breaker.state.value for breaker in breakers}
