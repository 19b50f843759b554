import pytest

from gst_core.errors import ParseError, RetryableError
from gst_utils.retry import call_with_backoff


@pytest.fixture
def sleeps(monkeypatch):
    calls = []
    monkeypatch.setattr("gst_utils.retry.time.sleep", calls.append)
    return calls


def _flaky(failures, exc=RetryableError):
    state = {"calls": 0}

    def fn(x, y=0):
        state["calls"] += 1
        if state["calls"] <= failures:
            raise exc("transient")
        return x + y

    fn.state = state
    return fn


def test_returns_first_success(sleeps):
    fn = _flaky(0)
    assert call_with_backoff(fn, 1, y=2) == 3
    assert sleeps == []


def test_retries_with_exponential_backoff(sleeps):
    fn = _flaky(2)
    assert call_with_backoff(fn, 1, max_attempts=3, backoff_factor=2.0) == 1
    assert fn.state["calls"] == 3
    assert sleeps == [1.0, 2.0]


def test_reraises_after_last_attempt(sleeps):
    fn = _flaky(10)
    with pytest.raises(RetryableError):
        call_with_backoff(fn, 1, max_attempts=4, backoff_factor=3)
    assert fn.state["calls"] == 4
    assert sleeps == [1, 3, 9]


def test_non_retryable_propagates_immediately(sleeps):
    fn = _flaky(1, exc=ParseError)
    with pytest.raises(ParseError):
        call_with_backoff(fn, 1)
    assert fn.state["calls"] == 1
    assert sleeps == []


def test_custom_retryable_exceptions(sleeps):
    fn = _flaky(1, exc=ConnectionError)
    assert call_with_backoff(fn, 5, retryable_exceptions=(ConnectionError,)) == 5
    assert sleeps == [1.0]
