"""
meshguard/assertion/oracle.py

Purpose:
    The "Judge". Compares one ProbeResult against an ExpectedOutcome.

Rules:
    - Status code must match exactly.
    - Every expected header must match exactly (names case-insensitive).
    - An expected empty value means "absent or empty".
    - A transport error never matches.
"""

from __future__ import annotations

from typing import List

from meshguard.catalog.models import ExpectedOutcome
from meshguard.executor.models import ProbeResult


class OutcomeOracle:
    def mismatches(self, expected: ExpectedOutcome, result: ProbeResult) -> List[str]:
        """Return human-readable mismatches; an empty list means the result matches."""
        if not result.ok:
            return [f"transport error: {result.error}"]

        problems: List[str] = []
        if result.status_code != expected.status_code:
            problems.append(f"got response code {result.status_code}, want {expected.status_code}")

        for name, want in expected.headers.items():
            got = result.header(name)
            if want == "":
                if got:
                    problems.append(f"header {name}: got {got!r}, want absent or empty")
            elif got != want:
                problems.append(f"header {name}: got {got!r}, want {want!r}")

        return problems

    def matches(self, expected: ExpectedOutcome, result: ProbeResult) -> bool:
        return not self.mismatches(expected, result)
