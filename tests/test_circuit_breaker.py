# CUI // SP-CTI
"""Tests for php2node.resilience.circuit_breaker."""
import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from unittest.mock import patch

from php2node.resilience.circuit_breaker import (
    BreakerSettings,
    CircuitBreaker,
    CircuitState,
    _load_config,
    get_all_breakers,
    get_circuit_breaker,
    settings_for,
)


# ---------------------------------------------------------------------------
# Helpers / Fixtures
# ---------------------------------------------------------------------------
class FakeClock:
    def __init__(self):
        self.now = 1000.0

    def __call__(self):
        return self.now


def _make_cb(threshold=3, recovery=30, half_open_max=1):
    clock = FakeClock()
    cb = CircuitBreaker(
        "test-svc",
        failure_threshold=threshold,
        recovery_timeout_seconds=recovery,
        half_open_max_calls=half_open_max,
        clock=clock,
    )
    return cb, clock


def _trip(cb):
    for _ in range(cb.failure_threshold):
        cb.record_failure()


# ---------------------------------------------------------------------------
# State machine
# ---------------------------------------------------------------------------
class TestStates:

    def test_initial_state_is_closed(self):
        cb, _ = _make_cb()
        assert cb.get_state() == CircuitState.CLOSED
        assert cb.allow_request() is True

    def test_trips_after_threshold(self):
        cb, _ = _make_cb(threshold=3)
        cb.record_failure()
        cb.record_failure()
        assert cb.get_state() == CircuitState.CLOSED
        cb.record_failure()
        assert cb.get_state() == CircuitState.OPEN
        assert cb.allow_request() is False

    def test_success_resets_failure_count(self):
        cb, _ = _make_cb(threshold=3)
        cb.record_failure()
        cb.record_failure()
        cb.record_success()
        cb.record_failure()
        assert cb.get_state() == CircuitState.CLOSED

    def test_stays_open_until_recovery_timeout(self):
        cb, clock = _make_cb(recovery=30)
        _trip(cb)
        clock.now += 29
        assert cb.allow_request() is False
        clock.now += 1
        assert cb.allow_request() is True
        assert cb.get_state() == CircuitState.HALF_OPEN

    def test_half_open_admits_limited_trial_calls(self):
        cb, clock = _make_cb(half_open_max=1)
        _trip(cb)
        clock.now += 30
        assert cb.allow_request() is True
        assert cb.allow_request() is False

    def test_half_open_success_closes(self):
        cb, clock = _make_cb()
        _trip(cb)
        clock.now += 30
        cb.allow_request()
        cb.record_success()
        assert cb.get_state() == CircuitState.CLOSED
        assert cb.get_stats()["failure_count"] == 0

    def test_half_open_needs_all_trial_successes(self):
        cb, clock = _make_cb(half_open_max=2)
        _trip(cb)
        clock.now += 30
        cb.allow_request()
        cb.record_success()
        assert cb.get_state() == CircuitState.HALF_OPEN
        cb.allow_request()
        cb.record_success()
        assert cb.get_state() == CircuitState.CLOSED

    def test_half_open_failure_reopens(self):
        cb, clock = _make_cb()
        _trip(cb)
        clock.now += 30
        cb.allow_request()
        cb.record_failure()
        assert cb.get_state() == CircuitState.OPEN
        assert cb.allow_request() is False


# ---------------------------------------------------------------------------
# Configuration and registry
# ---------------------------------------------------------------------------
class TestSettings:

    def test_service_overrides_default_block(self):
        config = {
            "default": {"failure_threshold": 5, "recovery_timeout_seconds": 30},
            "services": {"conversion_delegate": {"failure_threshold": 3, "recovery_timeout_seconds": 60}},
        }
        with patch("php2node.resilience.circuit_breaker._load_config", return_value=config):
            assert settings_for("conversion_delegate") == BreakerSettings(3, 60, 1)
            assert settings_for("elsewhere") == BreakerSettings(5, 30, 1)

    def test_unknown_keys_are_ignored(self):
        with patch("php2node.resilience.circuit_breaker._load_config",
                   return_value={"default": {"colour": "red"}}):
            assert settings_for("svc") == BreakerSettings()

    def test_missing_file(self, tmp_path):
        assert _load_config(tmp_path / "nope.yaml") == {}

    def test_bad_yaml(self, tmp_path):
        path = tmp_path / "bad.yaml"
        path.write_text("circuit_breaker: [unclosed", encoding="utf-8")
        assert _load_config(path) == {}


class TestRegistry:

    def test_same_instance_per_service(self):
        assert get_circuit_breaker("groq") is get_circuit_breaker("groq")
        assert get_circuit_breaker("groq") is not get_circuit_breaker("other")

    def test_bundled_config_applies_to_delegate(self):
        cb = get_circuit_breaker("conversion_delegate")
        assert cb.failure_threshold == 3
        assert cb.recovery_timeout == 60

    def test_get_all_breakers_reports_each_service(self):
        _trip(get_circuit_breaker("svc"))
        get_circuit_breaker("other")
        stats = get_all_breakers()
        assert stats["svc"]["state"] == "open"
        assert stats["other"]["state"] == "closed"
