import pytest

from studio.generate.errors import GenerationFailure
from studio.generate.retry import RetryConfig, RetryManager


class Flaky:
    def __init__(self, failures, retryable=True, retry_after=None):
        self.failures = failures
        self.retryable = retryable
        self.retry_after = retry_after
        self.calls = 0

    def __call__(self):
        self.calls += 1
        if self.calls <= self.failures:
            raise GenerationFailure("chat", "busy", retryable=self.retryable, retry_after=self.retry_after)
        return "ok"


def _manager(max_attempts=3, sleeps=None):
    sleeps = sleeps if sleeps is not None else []
    config = RetryConfig(max_attempts=max_attempts, initial_delay=1.0, backoff_factor=2.0, max_delay=3.0)
    return RetryManager(config, sleep=sleeps.append)


def test_recovers_after_transient_failures():
    sleeps = []
    func = Flaky(failures=2)
    assert _manager(sleeps=sleeps).execute(func) == "ok"
    assert func.calls == 3
    assert len(sleeps) == 2
    assert 1.0 <= sleeps[0] <= 1.1
    assert 2.0 <= sleeps[1] <= 2.2


def test_non_retryable_failure_is_not_retried():
    func = Flaky(failures=1, retryable=False)
    with pytest.raises(GenerationFailure) as info:
        _manager().execute(func)
    assert func.calls == 1
    assert info.value.retries_exhausted is False


def test_exhaustion_is_flagged():
    func = Flaky(failures=10)
    with pytest.raises(GenerationFailure) as info:
        _manager(max_attempts=3).execute(func)
    assert func.calls == 3
    assert info.value.retries_exhausted is True


def test_retry_after_hint_is_capped():
    sleeps = []
    func = Flaky(failures=1, retry_after=30.0)
    _manager(sleeps=sleeps).execute(func)
    assert sleeps == [3.0]


def test_other_exceptions_propagate():
    def boom():
        raise ValueError("bad input")
    with pytest.raises(ValueError):
        _manager().execute(boom)
