#!/usr/bin/env python3
# CUI // SP-CTI
"""php2node Resilience Package: Errors, Retry, Circuit Breaker."""

from php2node.resilience.circuit_breaker import (  # noqa: F401
    BreakerSettings,
    CircuitBreaker,
    CircuitState,
    get_all_breakers,
    get_circuit_breaker,
)
from php2node.resilience.errors import (  # noqa: F401
    ConfigurationError,
    ConversionInProgressError,
    DelegateAuthError,
    DelegateError,
    PermanentError,
    PhpParseError,
    Php2NodeError,
    ProjectError,
    RateLimitedError,
    ServiceUnavailableError,
    TransientError,
)
from php2node.resilience.retry import call_with_retry, linear_backoff  # noqa: F401
