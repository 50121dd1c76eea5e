"""Circuit breaker for search provider calls.

Blocks calls to a failing provider for a cool-down period and retries
transient failures with exponential backoff before giving up.
"""

from __future__ import annotations

import asyncio
import random
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Awaitable, Callable

import structlog

from decision_research.core.exceptions import CircuitOpenError

logger = structlog.get_logger(__name__)


class CircuitState(Enum):
    """Circuit breaker states.

    CLOSED: Normal operation, calls pass through
    OPEN: Provider failing, calls rejected immediately
    HALF_OPEN: Cool-down elapsed, next call probes recovery
    """

    CLOSED = "closed"
    OPEN = "open"
    HALF_OPEN = "half_open"


@dataclass
class CircuitBreaker:
    """Circuit breaker with optional retries.

    Example:
        >>> breaker = CircuitBreaker(failure_threshold=5, timeout=300.0)
        >>> results = await breaker.call_with_retries(client.search_once, "query", retries=2)

    Attributes:
        failure_threshold: Consecutive failures before opening the circuit
        timeout: Seconds the circuit stays open before a HALF_OPEN probe
        name: Label used in log events
    """

    failure_threshold: int = 5
    timeout: float = 60.0
    name: str = "search"

    state: CircuitState = field(default=CircuitState.CLOSED, init=False)
    failure_count: int = field(default=0, init=False)
    last_failure_time: float | None = field(default=None, init=False)

    async def call(
        self,
        func: Callable[..., Awaitable[Any]],
        *args: Any,
        retry_on: Callable[[Exception], bool] | None = None,
        **kwargs: Any,
    ) -> Any:
        """Execute ``func`` once under circuit protection.

        Errors rejected by ``retry_on`` propagate without counting as failures.

        Raises:
            CircuitOpenError: If the circuit is open and the cool-down has not elapsed
            Exception: Whatever ``func`` raises
        """
        self._before_call()
        try:
            result = await func(*args, **kwargs)
        except Exception as e:
            if retry_on is None or retry_on(e):
                self._on_failure()
            raise
        self._on_success()
        return result

    async def call_with_retries(
        self,
        func: Callable[..., Awaitable[Any]],
        *args: Any,
        retries: int = 2,
        backoff_base: float = 0.5,
        backoff_factor: float = 2.0,
        jitter: bool = True,
        retry_on: Callable[[Exception], bool] | None = None,
        **kwargs: Any,
    ) -> Any:
        """Execute ``func`` with circuit protection and bounded retries.

        The last error is re-raised once retries are exhausted; there is no
        fallback value, so callers see provider failures.

        Args:
            func: Async function to call
            *args: Positional args for func
            retries: Retries after the first attempt
            backoff_base: Initial delay in seconds
            backoff_factor: Exponential multiplier
            jitter: Whether to add jitter to delays
            retry_on: Predicate for errors worth retrying (default: all). Other
                errors are raised at once and leave the failure count alone
            **kwargs: Keyword args for func
        """
        delay = backoff_base
        attempts = retries + 1

        for attempt in range(attempts):
            try:
                return await self.call(func, *args, retry_on=retry_on, **kwargs)
            except CircuitOpenError:
                raise
            except Exception as e:
                if retry_on is not None and not retry_on(e):
                    raise
                if attempt >= attempts - 1:
                    raise
                logger.warning(
                    "circuit_breaker_retry",
                    breaker=self.name,
                    attempt=attempt + 1,
                    retries=retries,
                    error=str(e),
                )
                await self._sleep(delay, jitter=jitter)
                delay *= backoff_factor

        # attempts >= 1, so the loop always returns or raises
        raise RuntimeError("unreachable")

    def _before_call(self) -> None:
        if self.state != CircuitState.OPEN:
            return
        if not self._should_attempt_reset():
            raise CircuitOpenError(f"Circuit breaker '{self.name}' open - provider unavailable")
        self.state = CircuitState.HALF_OPEN

    async def _sleep(self, delay: float, jitter: bool = True) -> None:
        """Async sleep helper with optional jitter."""
        actual = delay * (1.0 + random.random()) if jitter else delay
        await asyncio.sleep(actual)

    def _on_success(self) -> None:
        self.failure_count = 0
        self.state = CircuitState.CLOSED

    def _on_failure(self) -> None:
        self.failure_count += 1
        self.last_failure_time = time.monotonic()

        if self.state == CircuitState.HALF_OPEN or self.failure_count >= self.failure_threshold:
            if self.state != CircuitState.OPEN:
                logger.warning(
                    "circuit_breaker_opened", breaker=self.name, failures=self.failure_count
                )
            self.state = CircuitState.OPEN

    def _should_attempt_reset(self) -> bool:
        if self.last_failure_time is None:
            return True
        return time.monotonic() - self.last_failure_time >= self.timeout
