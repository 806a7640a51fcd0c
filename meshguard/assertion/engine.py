"""
meshguard/assertion/engine.py

Purpose:
    Convergence-aware assertion: turns "the policy eventually takes effect"
    into a bounded test assertion.

Algorithm:
    1. Probe. If the observation matches the expectation, pass immediately.
    2. Otherwise, if the deadline (measured from the first attempt) has
       passed, fail with the last observation attached.
    3. Otherwise sleep min(delay, time left) and go to 1.

    A case that never converges fails no earlier than the deadline and no
    later than deadline + one delay. Each attempt is handed the time left
    until that bound, so a hung probe is cut short instead of overrunning it.
    Transport errors are ordinary mismatches; a target that is never reachable
    ends as a deadline failure like any other.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Callable, Optional

from meshguard.base.config import RetryConfig
from meshguard.catalog.models import ExpectedOutcome, Fixture
from meshguard.errors import ConfigError
from meshguard.executor.models import ProbeResult

from .models import CaseVerdict
from .oracle import OutcomeOracle

logger = logging.getLogger(__name__)

# Called as probe_fn(fixture, timeout=seconds_left)
ProbeFn = Callable[..., ProbeResult]


@dataclass(frozen=True)
class RetryPolicy:
    delay: float = 0.25
    timeout: float = 30.0

    def __post_init__(self):
        if self.delay <= 0:
            raise ValueError(f"delay must be positive, got {self.delay}")
        if self.timeout < 0:
            raise ValueError(f"timeout must not be negative, got {self.timeout}")

    @classmethod
    def from_config(cls, config: RetryConfig) -> "RetryPolicy":
        try:
            return cls(delay=config.delay_seconds, timeout=config.timeout_seconds)
        except ValueError as e:
            raise ConfigError(f"Invalid retry settings: {e}", details={"retry": vars(config)}) from e


class ConvergenceAsserter:
    """
    Single-threaded and blocking. `clock` and `sleep` are injectable so the
    deadline behavior can be verified without waiting.
    """

    def __init__(
        self,
        policy: Optional[RetryPolicy] = None,
        oracle: Optional[OutcomeOracle] = None,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.policy = policy or RetryPolicy()
        self._oracle = oracle or OutcomeOracle()
        self._clock = clock
        self._sleep = sleep

    def check(self, fixture: Fixture, expected: ExpectedOutcome, probe_fn: ProbeFn) -> CaseVerdict:
        start = self._clock()
        attempts = 0

        while True:
            attempts += 1
            budget = self.policy.timeout + self.policy.delay - (self._clock() - start)
            result = probe_fn(fixture, timeout=budget)
            mismatches = self._oracle.mismatches(expected, result)
            elapsed = self._clock() - start

            if not mismatches:
                logger.debug("[%s] converged on attempt %d after %.2fs", fixture.name, attempts, elapsed)
                return CaseVerdict(
                    name=fixture.name,
                    passed=True,
                    attempts=attempts,
                    elapsed_seconds=elapsed,
                    expected=expected.describe(),
                    last_result=result,
                )

            logger.debug("[%s] attempt %d: %s", fixture.name, attempts, "; ".join(mismatches))

            if elapsed >= self.policy.timeout:
                return CaseVerdict(
                    name=fixture.name,
                    passed=False,
                    attempts=attempts,
                    elapsed_seconds=elapsed,
                    expected=expected.describe(),
                    last_result=result,
                    mismatches=mismatches,
                )

            self._sleep(min(self.policy.delay, self.policy.timeout - elapsed))
