#!/usr/bin/env python3
"""
Exception types raised by the health monitor and scaling simulator
"""

from typing import Optional


class HealthScalerError(Exception):
    """Base for all errors raised by healthscaler."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class QueryError(HealthScalerError):
    """Raised when the cluster status source is unreachable or returns garbage."""

    def __init__(self, message: str, cause: Optional[BaseException] = None) -> None:
        super().__init__(message)
        self.cause = cause


class CircuitOpenError(QueryError):
    """Raised instead of querying while the circuit breaker is open."""


class ConfigurationError(HealthScalerError):
    """Raised when the effective configuration cannot be used."""
