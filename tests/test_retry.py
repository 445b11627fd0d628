# CUI // SP-CTI
"""Tests for php2node.resilience.retry."""
import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from unittest.mock import MagicMock, call

import pytest

from php2node.resilience.retry import call_with_retry, linear_backoff


class TestLinearBackoff:

    def test_grows_linearly(self):
        assert [linear_backoff(n) for n in (1, 2, 3)] == [1.0, 2.0, 3.0]

    def test_scales_with_base_delay(self):
        assert linear_backoff(3, 0.5) == 1.5


class TestCallWithRetry:

    def test_first_success_returns_without_sleeping(self, no_sleep):
        func = MagicMock(return_value="ok")
        assert call_with_retry(func, sleep=no_sleep) == "ok"
        assert func.call_count == 1
        no_sleep.assert_not_called()

    def test_succeeds_after_failures(self, no_sleep):
        func = MagicMock(side_effect=[ValueError("a"), ValueError("b"), "ok"])
        assert call_with_retry(func, max_attempts=3, sleep=no_sleep) == "ok"
        assert no_sleep.call_args_list == [call(1.0), call(2.0)]

    def test_exactly_max_attempts_then_raises_last(self, no_sleep):
        func = MagicMock(side_effect=[ValueError("first"), ValueError("second"), ValueError("third")])
        with pytest.raises(ValueError, match="third"):
            call_with_retry(func, max_attempts=3, sleep=no_sleep)
        assert func.call_count == 3
        assert no_sleep.call_count == 2

    def test_non_retryable_propagates_immediately(self, no_sleep):
        func = MagicMock(side_effect=KeyError("k"))
        with pytest.raises(KeyError):
            call_with_retry(func, retryable_exceptions=(ValueError,), sleep=no_sleep)
        assert func.call_count == 1

    def test_on_retry_callback(self, no_sleep):
        on_retry = MagicMock()
        func = MagicMock(side_effect=[ValueError("x"), "ok"])
        call_with_retry(func, on_retry=on_retry, base_delay=0.5, sleep=no_sleep)
        attempt, exc, delay = on_retry.call_args[0]
        assert (attempt, delay) == (1, 0.5)
        assert isinstance(exc, ValueError)

    def test_rejects_zero_attempts(self):
        with pytest.raises(ValueError):
            call_with_retry(lambda: None, max_attempts=0)

