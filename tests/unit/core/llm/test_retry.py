"""Unit tests for retry with exponential backoff."""

from __future__ import annotations

import pytest

from conftest import FakeStatusError, run_async
from lifelens.core.llm.retry import RetryPolicy, is_transient, with_retries


class _Flaky:
    """Fails with the scripted errors, then returns 'ok'."""

    def __init__(self, *errors: BaseException) -> None:
        self.errors = list(errors)
        self.calls = 0

    async def __call__(self) -> str:
        self.calls += 1
        if self.errors:
            raise self.errors.pop(0)
        return "ok"


class _Sleeps:
    def __init__(self) -> None:
        self.delays: list[float] = []

    async def __call__(self, seconds: float) -> None:
        self.delays.append(seconds)


class TestRetryPolicy:
    def test_exponential_delays(self):
        policy = RetryPolicy(attempts=3, base_ms=600)
        assert policy.delay_seconds(0, 0.0) == pytest.approx(0.6)
        assert policy.delay_seconds(1, 0.0) == pytest.approx(1.2)
        assert policy.delay_seconds(2, 0.0) == pytest.approx(2.4)

    def test_jitter_adds_up_to_150ms(self):
        policy = RetryPolicy(base_ms=800)
        assert policy.delay_seconds(0, 1.0) == pytest.approx(0.95)


class TestIsTransient:
    @pytest.mark.parametrize("status", [429, 500, 502, 503, 504])
    def test_transient_status(self, status):
        assert is_transient(FakeStatusError(status))

    @pytest.mark.parametrize("status", [400, 401, 403, 404, 422])
    def test_permanent_status(self, status):
        assert not is_transient(FakeStatusError(status))

    def test_status_attribute(self):
        exc = RuntimeError("gateway")
        exc.status = 503
        assert is_transient(exc)

    def test_message_fallback(self):
        assert is_transient(RuntimeError("Upstream returned 429 Too Many Requests"))
        assert not is_transient(RuntimeError("Invalid API key"))
        assert not is_transient(RuntimeError("took 4290ms"))


class TestWithRetries:
    def test_success_first_try(self):
        fn, sleeps = _Flaky(), _Sleeps()
        assert run_async(with_retries(fn, RetryPolicy(), sleep=sleeps)) == "ok"
        assert fn.calls == 1
        assert sleeps.delays == []

    def test_single_attempt_raises_without_sleeping(self):
        err = FakeStatusError(503)
        fn, sleeps = _Flaky(err), _Sleeps()
        with pytest.raises(FakeStatusError) as info:
            run_async(with_retries(fn, RetryPolicy(attempts=1), sleep=sleeps))
        assert info.value is err
        assert fn.calls == 1
        assert sleeps.delays == []

    def test_recovers_after_transient_errors(self):
        fn, sleeps = _Flaky(FakeStatusError(429), FakeStatusError(503)), _Sleeps()
        result = run_async(
            with_retries(fn, RetryPolicy(attempts=3, base_ms=600), sleep=sleeps, jitter=lambda: 0.5)
        )
        assert result == "ok"
        assert fn.calls == 3
        assert sleeps.delays == [pytest.approx(0.675), pytest.approx(1.275)]

    def test_exhausted_reraises_last_error(self):
        last = FakeStatusError(503, "still down")
        fn, sleeps = _Flaky(FakeStatusError(429), FakeStatusError(500), last), _Sleeps()
        with pytest.raises(FakeStatusError) as info:
            run_async(with_retries(fn, RetryPolicy(attempts=3), sleep=sleeps, jitter=lambda: 0.0))
        assert info.value is last
        assert fn.calls == 3
        assert len(sleeps.delays) == 2

    def test_permanent_error_not_retried(self):
        fn, sleeps = _Flaky(FakeStatusError(401)), _Sleeps()
        with pytest.raises(FakeStatusError):
            run_async(with_retries(fn, RetryPolicy(attempts=3), sleep=sleeps))
        assert fn.calls == 1
        assert sleeps.delays == []

    def test_zero_attempts_rejected(self):
        with pytest.raises(ValueError):
            run_async(with_retries(_Flaky(), RetryPolicy(attempts=0)))
