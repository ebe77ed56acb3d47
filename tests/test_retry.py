"""Tests for retry_operation: attempt counting, None-as-failure, backoff schedule, non-retryable errors."""

import pytest

from utils import retry as retry_module
from utils.errors import AuthenticationExpiredError, RetryExhaustedError
from utils.retry import retry_operation


@pytest.fixture
def sleeps(monkeypatch):
    """Record backoff delays instead of sleeping."""
    recorded = []

    async def fake_sleep(seconds):
        recorded.append(seconds)

    monkeypatch.setattr(retry_module.asyncio, "sleep", fake_sleep)
    return recorded


class TestRetryOperation:
    @pytest.mark.parametrize("max_retries", [1, 3, 5])
    async def test_always_failing_runs_exactly_n_times(self, sleeps, max_retries):
        calls = []

        def operation():
            calls.append(1)
            raise RuntimeError("backend down")

        with pytest.raises(RetryExhaustedError) as exc_info:
            await retry_operation(operation, max_retries=max_retries, delay=0.01)

        assert len(calls) == max_retries
        assert f"after {max_retries} attempts" in str(exc_info.value)
        assert "backend down" in str(exc_info.value)
        assert exc_info.value.attempts == max_retries
        assert isinstance(exc_info.value.last_error, RuntimeError)

    async def test_backoff_doubles_between_attempts(self, sleeps):
        async def operation():
            raise ValueError("nope")

        with pytest.raises(RetryExhaustedError):
            await retry_operation(operation, max_retries=4, delay=1.0)

        # no sleep after the final attempt
        assert sleeps == [1.0, 2.0, 4.0]

    async def test_none_result_counts_as_failure(self, sleeps):
        results = iter([None, None, "summary"])
        calls = []

        async def operation():
            calls.append(1)
            return next(results)

        assert await retry_operation(operation, max_retries=3, delay=0) == "summary"
        assert len(calls) == 3

    async def test_always_none_exhausts(self, sleeps):
        with pytest.raises(RetryExhaustedError) as exc_info:
            await retry_operation(lambda: None, max_retries=2, delay=0)
        assert "after 2 attempts" in exc_info.value.message

    async def test_first_success_returns_without_sleeping(self, sleeps):
        assert await retry_operation(lambda: {"ok": True}) == {"ok": True}
        assert sleeps == []

    async def test_give_up_on_reraises_at_once(self, sleeps):
        calls = []

        async def operation():
            calls.append(1)
            raise AuthenticationExpiredError("Unauthorized", 401)

        with pytest.raises(AuthenticationExpiredError):
            await retry_operation(operation, max_retries=3, delay=1.0, give_up_on=(AuthenticationExpiredError,))

        assert len(calls) == 1
        assert sleeps == []

    async def test_other_errors_still_retried_with_give_up_on(self, sleeps):
        results = iter([ValueError("flaky"), "ok"])

        async def operation():
            outcome = next(results)
            if isinstance(outcome, Exception):
                raise outcome
            return outcome

        assert await retry_operation(operation, delay=1.0, give_up_on=(AuthenticationExpiredError,)) == "ok"
        assert sleeps == [1.0]

    async def test_non_callable_is_rejected(self):
        with pytest.raises(TypeError, match="Operation must be a function"):
            await retry_operation("not a function")
