"""
Resilience patterns for the Google Ads client.

Provides:
- Exponential backoff retry
- Circuit breaker
"""
import asyncio
import random
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Optional

from core.observability import get_logger

logger = get_logger(__name__)


class CircuitState(Enum):
    """Circuit breaker states."""
    CLOSED = "closed"        # Normal operation
    OPEN = "open"            # Failing, reject requests
    HALF_OPEN = "half_open"  # Probing recovery


@dataclass
class RetryConfig:
    """Configuration for retry behavior."""
    max_attempts: int = 3
    base_delay: float = 1.0  # seconds
    max_delay: float = 30.0  # seconds
    exponential_base: float = 2.0
    jitter: float = 0.1  # random jitter factor

    def delay_for(self, attempt: int) -> float:
        """Backoff delay after the given (1-based) failed attempt, without jitter."""
        return min(self.base_delay * (self.exponential_base ** (attempt - 1)), self.max_delay)


@dataclass
class CircuitBreakerConfig:
    """Configuration for circuit breaker."""
    failure_threshold: int = 5  # failures before opening
    recovery_timeout: float = 60.0  # seconds before probing again
    half_open_requests: int = 1  # probes allowed while half-open


class CircuitOpenError(Exception):
    """Raised when circuit breaker is open."""
    pass


@dataclass
class CircuitBreaker:
    """
    Circuit breaker around an upstream dependency.

    States:
    - CLOSED: requests pass through, failures are counted
    - OPEN: requests are rejected until recovery_timeout elapses
    - HALF_OPEN: a limited number of probe requests decide the next state
    """
    config: CircuitBreakerConfig = field(default_factory=CircuitBreakerConfig)
    state: CircuitState = CircuitState.CLOSED
    failure_count: int = 0
    last_failure_time: float = 0
    half_open_attempts: int = 0

    def __post_init__(self):
        self._lock = asyncio.Lock()

    async def can_execute(self) -> bool:
        """Check if a request may proceed."""
        async with self._lock:
            if self.state == CircuitState.CLOSED:
                return True

            if self.state == CircuitState.OPEN:
                if time.time() - self.last_failure_time < self.config.recovery_timeout:
                    return False
                logger.info("Circuit breaker entering half-open state")
                self.state = CircuitState.HALF_OPEN
                self.half_open_attempts = 0

            if self.half_open_attempts < self.config.half_open_requests:
                self.half_open_attempts += 1
                return True
            return False

    async def record_success(self) -> None:
        async with self._lock:
            if self.state == CircuitState.HALF_OPEN:
                logger.info("Circuit breaker closing after successful probe")
                self.state = CircuitState.CLOSED
            self.failure_count = 0

    async def record_failure(self) -> None:
        async with self._lock:
            self.failure_count += 1
            self.last_failure_time = time.time()

            if self.state == CircuitState.HALF_OPEN:
                logger.warning("Circuit breaker re-opening after failed probe")
                self.state = CircuitState.OPEN
            elif self.failure_count >= self.config.failure_threshold:
                if self.state != CircuitState.OPEN:
                    logger.warning(
                        f"Circuit breaker opening after {self.failure_count} failures"
                    )
                self.state = CircuitState.OPEN

    def release_half_open_slot(self) -> None:
        """Give back a half-open slot whose request ended without an outcome."""
        if self.state == CircuitState.HALF_OPEN and self.half_open_attempts > 0:
            self.half_open_attempts -= 1

    @property
    def is_open(self) -> bool:
        """Check if circuit is open (rejecting requests)."""
        return self.state == CircuitState.OPEN


async def retry_with_backoff(
    func: Callable[..., Any],
    *args,
    config: Optional[RetryConfig] = None,
    retryable_exceptions: tuple = (Exception,),
    **kwargs
) -> Any:
    """
    Await func(*args, **kwargs), retrying with exponential backoff.

    Only exceptions listed in retryable_exceptions are retried; anything
    else propagates on the first attempt.

    Raises:
        The last exception once max_attempts is exhausted
    """
    config = config or RetryConfig()

    for attempt in range(1, config.max_attempts + 1):
        try:
            return await func(*args, **kwargs)
        except retryable_exceptions as e:
            if attempt == config.max_attempts:
                logger.error(
                    f"All {config.max_attempts} retry attempts failed",
                    extra={"error": str(e)}
                )
                raise

            delay = config.delay_for(attempt)
            delay += delay * config.jitter * random.random()

            logger.warning(
                f"Attempt {attempt} failed, retrying in {delay:.2f}s",
                extra={"attempt": attempt, "delay": delay, "error": str(e)}
            )
            await asyncio.sleep(delay)
