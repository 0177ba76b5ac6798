"""
Circuit breaker for database access.

After ``failure_threshold`` consecutive connection-level failures the
breaker opens and every call fails immediately with
:class:`CircuitBreakerError` until ``recovery_timeout`` has elapsed. The
next call is then let through as a probe (HALF_OPEN): success closes the
circuit, failure re-opens it.

Only the exception types listed in ``expected_exceptions`` count as
failures; integrity errors and other domain errors pass straight through
without touching the circuit state.
"""

import logging
import time
from enum import Enum
from typing import Any, Awaitable, Callable, Tuple, Type

from sqlalchemy.exc import InterfaceError, OperationalError

from investpro.core.config import settings

logger = logging.getLogger(__name__)


class CircuitState(str, Enum):
    """Possible states of a circuit breaker."""

    CLOSED = "closed"
    OPEN = "open"
    HALF_OPEN = "half_open"


class CircuitBreakerError(Exception):
    """Raised when a call is rejected because the circuit is open."""

    def __init__(self, name: str, retry_after: float):
        self.name = name
        self.retry_after = retry_after
        super().__init__(
            f"Circuit breaker '{name}' is open; retry after {retry_after:.1f}s"
        )


class CircuitBreaker:
    """
    Async circuit breaker.

    Parameters
    ----------
    name : str
        Identifier used in logs and health output.
    failure_threshold : int
        Consecutive failures before the circuit opens.
    recovery_timeout : float
        Seconds spent OPEN before a probe call is allowed.
    expected_exceptions : tuple
        Exception types that count as failures.
    """

    def __init__(
        self,
        name: str,
        failure_threshold: int = 5,
        recovery_timeout: float = 30.0,
        expected_exceptions: Tuple[Type[BaseException], ...] = (Exception,),
    ):
        self.name = name
        self.failure_threshold = failure_threshold
        self.recovery_timeout = recovery_timeout
        self.expected_exceptions = expected_exceptions

        self._state = CircuitState.CLOSED
        self._failure_count = 0
        self._success_count = 0
        self._opened_at: float = 0.0

    @property
    def state(self) -> CircuitState:
        """Current state; an expired OPEN circuit reports HALF_OPEN."""
        if (
            self._state == CircuitState.OPEN
            and time.monotonic() - self._opened_at >= self.recovery_timeout
        ):
            self._state = CircuitState.HALF_OPEN
            logger.info("Circuit '%s' half-open, allowing a probe call", self.name)
        return self._state

    def reset(self) -> None:
        """Force the circuit back to CLOSED with zeroed counters."""
        self._state = CircuitState.CLOSED
        self._failure_count = 0
        self._opened_at = 0.0

    def _on_success(self) -> None:
        if self._state != CircuitState.CLOSED:
            logger.info(
                "Circuit '%s' closed after %d failures", self.name, self._failure_count
            )
        self._state = CircuitState.CLOSED
        self._failure_count = 0
        self._success_count += 1

    def _on_failure(self, exc: BaseException) -> None:
        self._failure_count += 1
        if (
            self._state == CircuitState.HALF_OPEN
            or self._failure_count >= self.failure_threshold
        ):
            self._state = CircuitState.OPEN
            self._opened_at = time.monotonic()
            logger.error(
                "Circuit '%s' opened after %d failures (last: %s: %s)",
                self.name,
                self._failure_count,
                type(exc).__name__,
                exc,
            )
        else:
            logger.warning(
                "Circuit '%s' failure %d/%d: %s",
                self.name,
                self._failure_count,
                self.failure_threshold,
                exc,
            )

    async def call(
        self, func: Callable[..., Awaitable[Any]], *args: Any, **kwargs: Any
    ) -> Any:
        """Await ``func(*args, **kwargs)`` unless the circuit is open."""
        if self.state == CircuitState.OPEN:
            retry_after = self.recovery_timeout - (time.monotonic() - self._opened_at)
            raise CircuitBreakerError(self.name, max(retry_after, 0.0))

        try:
            result = await func(*args, **kwargs)
        except self.expected_exceptions as exc:
            self._on_failure(exc)
            raise
        self._on_success()
        return result

    def get_status(self) -> dict:
        """Snapshot for the health endpoint."""
        return {
            "name": self.name,
            "state": self.state.value,
            "failure_count": self._failure_count,
            "failure_threshold": self.failure_threshold,
            "success_count": self._success_count,
            "recovery_timeout_s": self.recovery_timeout,
        }


db_circuit_breaker = CircuitBreaker(
    name="database",
    failure_threshold=settings.CB_FAILURE_THRESHOLD,
    recovery_timeout=settings.CB_RECOVERY_TIMEOUT,
    expected_exceptions=(
        OperationalError,
        InterfaceError,
        ConnectionError,
        TimeoutError,
    ),
)
