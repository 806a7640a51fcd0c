"""
tests/unit/test_convergence_engine.py
Verify the retry-until-deadline loop with a fake clock: pass on first match,
fail only after the deadline, report the last observation.
"""

import pytest

from meshguard.assertion import ConvergenceAsserter, RetryPolicy
from meshguard.base.config import RetryConfig
from meshguard.catalog import ExpectedOutcome, Fixture
from meshguard.errors import AssertionTimeout, ConfigError, ErrorCode
from meshguard.executor import ProbeResult


class ScriptedProbe:
    """Returns `before` until `converge_after` calls have been made, then `after`."""

    def __init__(self, converge_after, before=None, after=None):
        self.calls = 0
        self.timeouts = []
        self.converge_after = converge_after
        self.before = before or ProbeResult(status_code=200)
        self.after = after or ProbeResult(status_code=401)

    def __call__(self, fixture, timeout=None):
        self.calls += 1
        self.timeouts.append(timeout)
        if self.converge_after is not None and self.calls > self.converge_after:
            return self.after
        return self.before


@pytest.fixture
def fixture():
    return Fixture(name="jwt-simple-no-token", host="example.com")


@pytest.fixture
def expected():
    return ExpectedOutcome(status_code=401)


def _asserter(clock, delay=0.25, timeout=30.0):
    return ConvergenceAsserter(RetryPolicy(delay=delay, timeout=timeout), clock=clock, sleep=clock.sleep)


def test_passes_immediately_without_sleeping(clock, fixture, expected):
    probe = ScriptedProbe(converge_after=0)
    verdict = _asserter(clock).check(fixture, expected, probe)

    assert verdict.passed
    assert verdict.attempts == 1
    assert clock.sleeps == []
    assert verdict.reason == "matched"


def test_passes_once_policy_converges(clock, fixture, expected):
    probe = ScriptedProbe(converge_after=7)
    verdict = _asserter(clock).check(fixture, expected, probe)

    assert verdict.passed
    assert verdict.attempts == 8
    assert clock.sleeps == [0.25] * 7
    assert verdict.elapsed_seconds == pytest.approx(1.75)


def test_never_converging_fails_at_deadline(clock, fixture, expected):
    probe = ScriptedProbe(converge_after=None)
    verdict = _asserter(clock).check(fixture, expected, probe)

    assert not verdict.passed
    assert 30.0 <= verdict.elapsed_seconds <= 30.25
    assert verdict.attempts == probe.calls
    assert verdict.last_result.status_code == 200
    assert verdict.mismatches == ["got response code 200, want 401"]
    assert "did not converge" in verdict.reason
    assert "last observed status=200" in verdict.reason


class SlowTarget:
    """Hangs for up to `hang` seconds of fake time per call, cut short by the timeout it is handed."""

    def __init__(self, clock, hang=5.0):
        self.clock = clock
        self.hang = hang
        self.timeouts = []

    def __call__(self, fixture, timeout=None):
        self.timeouts.append(timeout)
        self.clock.now += min(self.hang, timeout)
        return ProbeResult(error="TransportError: read timed out")


def test_first_attempt_gets_deadline_plus_delay(clock, fixture, expected):
    probe = ScriptedProbe(converge_after=0)
    _asserter(clock).check(fixture, expected, probe)

    assert probe.timeouts == [pytest.approx(30.25)]


def test_slow_target_still_fails_within_deadline_plus_delay(clock, fixture, expected):
    target = SlowTarget(clock)
    verdict = _asserter(clock).check(fixture, expected, target)

    assert not verdict.passed
    assert 30.0 <= verdict.elapsed_seconds <= 30.25
    assert verdict.attempts == 6
    assert clock.sleeps == [0.25] * 5
    assert target.timeouts[-1] == pytest.approx(4.0)
    assert target.timeouts == sorted(target.timeouts, reverse=True)


def test_last_sleep_is_capped_by_remaining_time(clock, fixture, expected):
    probe = ScriptedProbe(converge_after=None)
    verdict = _asserter(clock, delay=4.0, timeout=10.0).check(fixture, expected, probe)

    assert clock.sleeps == [4.0, 4.0, 2.0]
    assert verdict.elapsed_seconds == pytest.approx(10.0)
    assert verdict.attempts == 4


def test_zero_timeout_makes_a_single_attempt(clock, fixture, expected):
    probe = ScriptedProbe(converge_after=None)
    verdict = _asserter(clock, timeout=0.0).check(fixture, expected, probe)

    assert not verdict.passed
    assert verdict.attempts == 1


def test_transport_errors_are_retried_until_deadline(clock, fixture, expected):
    probe = ScriptedProbe(converge_after=None, before=ProbeResult(error="TransportError: connection refused"))
    verdict = _asserter(clock, timeout=2.0).check(fixture, expected, probe)

    assert not verdict.passed
    assert verdict.last_result.error == "TransportError: connection refused"
    assert verdict.elapsed_seconds == pytest.approx(2.0)
    assert "transport error" in verdict.reason


def test_transport_error_then_recovery_passes(clock, fixture, expected):
    probe = ScriptedProbe(converge_after=3, before=ProbeResult(error="TransportError: refused"))
    assert _asserter(clock).check(fixture, expected, probe).passed


def test_raise_for_failure(clock, fixture, expected):
    verdict = _asserter(clock, timeout=1.0).check(fixture, expected, ScriptedProbe(converge_after=None))
    with pytest.raises(AssertionTimeout) as exc:
        verdict.raise_for_failure()
    assert exc.value.code == ErrorCode.ASSERTION_TIMEOUT
    assert exc.value.verdict is verdict


def test_retry_policy_validation():
    with pytest.raises(ValueError):
        RetryPolicy(delay=0)
    with pytest.raises(ValueError):
        RetryPolicy(timeout=-1)


def test_retry_policy_from_config():
    policy = RetryPolicy.from_config(RetryConfig(delay_seconds=0.5, timeout_seconds=12))
    assert policy.delay == 0.5
    assert policy.timeout == 12


def test_defaults():
    policy = ConvergenceAsserter().policy
    assert policy.delay == 0.25
    assert policy.timeout == 30.0


def test_verdict_to_dict(clock, fixture, expected):
    verdict = _asserter(clock, timeout=0.5).check(fixture, expected, ScriptedProbe(converge_after=None))
    data = verdict.to_dict()
    assert data["name"] == "jwt-simple-no-token"
    assert data["passed"] is False
    assert data["last_result"]["status_code"] == 200
    assert data["expected"] == "status=401"


@pytest.mark.parametrize("retry", [RetryConfig(delay_seconds=0), RetryConfig(timeout_seconds=-5)])
def test_retry_policy_from_bad_config_is_config_error(retry):
    with pytest.raises(ConfigError) as exc:
        RetryPolicy.from_config(retry)
    assert exc.value.code == ErrorCode.CONFIG_INVALID
