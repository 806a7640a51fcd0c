"""
meshguard/executor/models.py

Purpose:
    Data structures produced by a single probe.

Semantics:
    - CallResponse: what the call surface returned (status + observed headers).
    - ProbeResult: one attempt's observation. A transport failure is recorded
      in `error` instead of being raised, so the assertion engine can treat it
      as just another non-matching observation. Never persisted.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Optional


def _lookup(headers: Dict[str, str], name: str) -> Optional[str]:
    lowered = name.lower()
    for key, value in headers.items():
        if key.lower() == lowered:
            return value
    return None


@dataclass(frozen=True)
class CallResponse:
    status_code: int
    headers: Dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class ProbeResult:
    status_code: Optional[int] = None
    headers: Dict[str, str] = field(default_factory=dict)
    error: Optional[str] = None
    duration_ms: float = 0.0

    @classmethod
    def from_response(cls, response: CallResponse, duration_ms: float = 0.0) -> "ProbeResult":
        return cls(status_code=response.status_code, headers=dict(response.headers), duration_ms=duration_ms)

    @classmethod
    def from_error(cls, error: Exception, duration_ms: float = 0.0) -> "ProbeResult":
        return cls(error=f"{type(error).__name__}: {error}", duration_ms=duration_ms)

    @property
    def ok(self) -> bool:
        return self.error is None

    def header(self, name: str) -> Optional[str]:
        """Case-insensitive header lookup; None when absent."""
        return _lookup(self.headers, name)

    def describe(self) -> str:
        if self.error:
            return f"transport error ({self.error})"
        return f"status={self.status_code}"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "status_code": self.status_code,
            "headers": dict(self.headers),
            "error": self.error,
            "duration_ms": round(self.duration_ms, 2),
        }
