#!/usr/bin/env python3
# CUI // SP-CTI
"""php2node Resilience: Circuit Breaker.

Guards the remote conversion service. After ``failure_threshold``
consecutive failures the breaker opens and every file skips straight to
the local AST fallback; after ``recovery_timeout_seconds`` one trial call
is let through (half-open) and its outcome closes or re-opens the circuit.

Usage:
    from php2node.resilience.circuit_breaker import get_circuit_breaker

    breaker = get_circuit_breaker("conversion_delegate")
    if breaker.allow_request():
        try:
            reply = call_service()
        except ServiceError:
            breaker.record_failure()
            raise
        breaker.record_success()
"""

import logging
import threading
import time
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Callable, Dict

import yaml

BASE_DIR = Path(__file__).resolve().parent.parent.parent
CONFIG_PATH = BASE_DIR / "args" / "resilience_config.yaml"

logger = logging.getLogger("php2node.resilience.circuit_breaker")


class CircuitState(Enum):
    CLOSED = "closed"
    OPEN = "open"
    HALF_OPEN = "half_open"


@dataclass(frozen=True)
class BreakerSettings:
    failure_threshold: int = 5
    recovery_timeout_seconds: float = 30
    half_open_max_calls: int = 1


def _load_config(config_path: Path = CONFIG_PATH) -> dict:
    """The ``circuit_breaker`` section of args/resilience_config.yaml."""
    if not config_path.exists():
        return {}
    try:
        with open(config_path, "r", encoding="utf-8") as f:
            config = yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError) as exc:
        logger.warning("Could not read %s: %s - using defaults", config_path, exc)
        return {}
    return config.get("circuit_breaker", {}) or {}


def settings_for(service_name: str) -> BreakerSettings:
    """Defaults, then the ``default`` block, then the service's own overrides."""
    config = _load_config()
    merged = {}
    merged.update(config.get("default", {}) or {})
    merged.update((config.get("services", {}) or {}).get(service_name, {}) or {})
    known = BreakerSettings.__dataclass_fields__
    return BreakerSettings(**{k: v for k, v in merged.items() if k in known})


class CircuitBreaker:
    """Thread-safe CLOSED -> OPEN -> HALF_OPEN state machine for one service."""

    def __init__(self, service_name: str, failure_threshold: int = 5,
                 recovery_timeout_seconds: float = 30, half_open_max_calls: int = 1,
                 clock: Callable[[], float] = time.monotonic):
        self.service_name = service_name
        self.failure_threshold = failure_threshold
        self.recovery_timeout = recovery_timeout_seconds
        self.half_open_max_calls = half_open_max_calls
        self._clock = clock

        self._state = CircuitState.CLOSED
        self._failures = 0
        self._trial_calls = 0
        self._trial_successes = 0
        self._opened_at = 0.0
        self._lock = threading.Lock()

    @classmethod
    def from_settings(cls, service_name: str, settings: BreakerSettings, **kwargs):
        return cls(
            service_name,
            failure_threshold=settings.failure_threshold,
            recovery_timeout_seconds=settings.recovery_timeout_seconds,
            half_open_max_calls=settings.half_open_max_calls,
            **kwargs,
        )

    def allow_request(self) -> bool:
        with self._lock:
            if self._state == CircuitState.OPEN:
                if self._clock() - self._opened_at < self.recovery_timeout:
                    return False
                self._move_to(CircuitState.HALF_OPEN)
                self._trial_calls = 0
                self._trial_successes = 0
            if self._state == CircuitState.HALF_OPEN:
                if self._trial_calls >= self.half_open_max_calls:
                    return False
                self._trial_calls += 1
            return True

    def record_success(self):
        with self._lock:
            if self._state == CircuitState.HALF_OPEN:
                self._trial_successes += 1
                if self._trial_successes < self.half_open_max_calls:
                    return
                self._move_to(CircuitState.CLOSED)
            self._failures = 0

    def record_failure(self):
        with self._lock:
            self._failures += 1
            if self._state == CircuitState.HALF_OPEN or (
                self._state == CircuitState.CLOSED and self._failures >= self.failure_threshold
            ):
                self._opened_at = self._clock()
                self._move_to(CircuitState.OPEN)

    def get_state(self) -> CircuitState:
        with self._lock:
            return self._state

    def get_stats(self) -> dict:
        with self._lock:
            return {
                "service": self.service_name,
                "state": self._state.value,
                "failure_count": self._failures,
                "failure_threshold": self.failure_threshold,
                "recovery_timeout_seconds": self.recovery_timeout,
            }

    def _move_to(self, state: CircuitState):
        # Caller holds the lock.
        if state != self._state:
            logger.info("Circuit breaker '%s': %s -> %s",
                        self.service_name, self._state.value, state.value)
        self._state = state


# ---------------------------------------------------------------------------
# Registry: one breaker per service name
# ---------------------------------------------------------------------------
_registry: Dict[str, CircuitBreaker] = {}
_registry_lock = threading.Lock()


def get_circuit_breaker(service_name: str) -> CircuitBreaker:
    """Shared breaker for ``service_name``, created from config on first use."""
    with _registry_lock:
        breaker = _registry.get(service_name)
        if breaker is None:
            breaker = CircuitBreaker.from_settings(service_name, settings_for(service_name))
            _registry[service_name] = breaker
        return breaker


def get_all_breakers() -> Dict[str, dict]:
    """Stats of every breaker created so far, keyed by service name."""
    with _registry_lock:
        return {name: breaker.get_stats() for name, breaker in _registry.items()}
