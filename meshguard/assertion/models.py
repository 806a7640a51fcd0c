"""
meshguard/assertion/models.py
CaseVerdict: the pass/fail outcome of one fixture in one run.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from meshguard.errors import AssertionTimeout
from meshguard.executor.models import ProbeResult


@dataclass(frozen=True)
class CaseVerdict:
    name: str
    passed: bool
    attempts: int = 0
    elapsed_seconds: float = 0.0
    expected: str = ""
    last_result: Optional[ProbeResult] = None
    mismatches: List[str] = field(default_factory=list)
    # Set when the case could not be evaluated at all (bad fixture, harness bug)
    error: Optional[str] = None

    @property
    def reason(self) -> str:
        if self.passed:
            return "matched"
        if self.error:
            return self.error
        observed = self.last_result.describe() if self.last_result else "nothing observed"
        return (
            f"did not converge after {self.attempts} attempt(s) in {self.elapsed_seconds:.2f}s; "
            f"expected {self.expected}, last observed {observed}: {'; '.join(self.mismatches)}"
        )

    def raise_for_failure(self) -> None:
        if not self.passed:
            raise AssertionTimeout(f"{self.name}: {self.reason}", verdict=self)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "passed": self.passed,
            "attempts": self.attempts,
            "elapsed_seconds": round(self.elapsed_seconds, 3),
            "expected": self.expected,
            "mismatches": list(self.mismatches),
            "error": self.error,
            "last_result": self.last_result.to_dict() if self.last_result else None,
        }
