#!/usr/bin/env python3
"""
Circuit breaker guarding the cluster status source
Stops hammering an unreachable API server for many consecutive cycles
"""

import logging
import threading
import time
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Callable, Dict, Optional

from .errors import CircuitOpenError

logger = logging.getLogger(__name__)


class CircuitState(Enum):
    """Circuit breaker states"""
    CLOSED = "closed"        # Normal operation
    OPEN = "open"            # Failures detected, calls fail fast
    HALF_OPEN = "half_open"  # Testing if the service recovered


class CircuitBreaker:
    """
    Circuit breaker to prevent repeated calls to a failing service

    States:
    - CLOSED: Normal operation, all calls pass through
    - OPEN: Too many consecutive failures, calls fail fast with CircuitOpenError
    - HALF_OPEN: Recovery timeout elapsed, one trial call passes through
    """

    def __init__(
        self,
        failure_threshold: int = 5,
        recovery_timeout: float = 60,
        expected_exception: type = Exception,
        name: str = "circuit_breaker",
        clock: Callable[[], float] = time.monotonic
    ):
        """
        Initialize circuit breaker

        Args:
            failure_threshold: Consecutive failures before opening the circuit
            recovery_timeout: Seconds to wait before attempting recovery
            expected_exception: Exception type counted as a failure
            name: Name of this circuit breaker
            clock: Monotonic time source
        """
        if failure_threshold < 1:
            raise ValueError("failure_threshold must be >= 1")

        self.failure_threshold = failure_threshold
        self.recovery_timeout = recovery_timeout
        self.expected_exception = expected_exception
        self.name = name
        self._clock = clock
        self._lock = threading.Lock()

        self.failure_count = 0
        self.state = CircuitState.CLOSED
        self._opened_at: Optional[float] = None
        self.last_failure_time: Optional[datetime] = None

        logger.info(
            f"Circuit breaker '{name}' initialized: "
            f"threshold={failure_threshold}, timeout={recovery_timeout}s"
        )

    def call(self, func: Callable, *args, **kwargs) -> Any:
        """
        Execute function with circuit breaker protection

        Raises:
            CircuitOpenError: If the circuit is open
            Exception: Whatever func raises
        """
        with self._lock:
            if self.state == CircuitState.OPEN:
                if self._should_attempt_reset():
                    self.state = CircuitState.HALF_OPEN
                    logger.info(f"Circuit '{self.name}' entering HALF_OPEN state")
                else:
                    raise CircuitOpenError(
                        f"Circuit breaker '{self.name}' is OPEN. "
                        f"Retry after {self.retry_after():.0f}s"
                    )

        try:
            result = func(*args, **kwargs)
        except self.expected_exception:
            self._on_failure()
            raise

        self._on_success()
        return result

    def retry_after(self) -> float:
        """Seconds until a trial call is allowed; 0 unless the circuit is open"""
        if self.state != CircuitState.OPEN or self._opened_at is None:
            return 0.0
        return max(0.0, self._opened_at + self.recovery_timeout - self._clock())

    def _should_attempt_reset(self) -> bool:
        if self._opened_at is None:
            return True
        return self._clock() >= self._opened_at + self.recovery_timeout

    def _on_success(self):
        with self._lock:
            if self.state == CircuitState.HALF_OPEN:
                logger.info(f"Circuit '{self.name}' closed after successful recovery")
            self.failure_count = 0
            self.state = CircuitState.CLOSED
            self._opened_at = None

    def _on_failure(self):
        with self._lock:
            self.failure_count += 1
            self.last_failure_time = datetime.now(timezone.utc)

            if self.state == CircuitState.HALF_OPEN or self.failure_count >= self.failure_threshold:
                self.state = CircuitState.OPEN
                self._opened_at = self._clock()
                logger.error(
                    f"Circuit '{self.name}' opened after {self.failure_count} failures"
                )
            else:
                logger.warning(
                    f"Circuit '{self.name}' failure {self.failure_count}/"
                    f"{self.failure_threshold}"
                )

    def reset(self):
        """Manually reset the circuit breaker"""
        with self._lock:
            self.failure_count = 0
            self.state = CircuitState.CLOSED
            self._opened_at = None
            self.last_failure_time = None
        logger.info(f"Circuit '{self.name}' manually reset")

    def get_state(self) -> Dict[str, Any]:
        """Get current circuit breaker state"""
        return {
            "name": self.name,
            "state": self.state.value,
            "failure_count": self.failure_count,
            "failure_threshold": self.failure_threshold,
            "retry_after": round(self.retry_after(), 1),
            "last_failure": self.last_failure_time.isoformat() if self.last_failure_time else None
        }
