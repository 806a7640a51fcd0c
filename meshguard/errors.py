"""
meshguard/errors.py

Structured error taxonomy for meshguard.

ERROR CODE FORMAT:
- APPLY_XXX: Policy submission to a scope failed (fatal to the run)
- PROVISION_XXX: Workload or edge resolution failed (fatal to the run)
- ASSERT_XXX: A case never matched its expectation before the deadline
- TRANSPORT_XXX: A single probe did not complete (captured, never fatal)
- CONFIG_XXX: Configuration, token or template problems

USAGE:
    from meshguard.errors import ApplyError

    raise ApplyError(
        "kubectl apply exited with status 1",
        details={"namespace": "authn-jwt-1234", "stderr": "..."},
    )
"""

from __future__ import annotations

import json
from enum import Enum
from typing import Any, Dict, Optional


class ErrorCode(Enum):
    # Policy binding
    APPLY_FAILED = "APPLY_001"
    RELEASE_FAILED = "APPLY_002"

    # Provisioning
    PROVISION_FAILED = "PROVISION_001"
    PROVISION_NOT_FOUND = "PROVISION_002"

    # Assertion engine
    ASSERTION_TIMEOUT = "ASSERT_001"

    # Transport
    TRANSPORT_FAILED = "TRANSPORT_001"
    TRANSPORT_TIMEOUT = "TRANSPORT_002"

    # Config
    CONFIG_INVALID = "CONFIG_001"
    CONFIG_MISSING_REQUIRED = "CONFIG_002"
    CONFIG_UNKNOWN_SCENARIO = "CONFIG_003"


class MeshGuardError(Exception):
    """
    Base exception class for meshguard with structured error information.

    Attributes:
        code: ErrorCode enum value (e.g., "APPLY_001")
        message: Human-readable error message
        details: Optional dictionary with additional context
    """

    default_code: ErrorCode = ErrorCode.CONFIG_INVALID

    def __init__(
        self,
        message: str,
        details: Optional[Dict[str, Any]] = None,
        code: Optional[ErrorCode] = None,
    ):
        self.code = code or self.default_code
        self.message = message
        self.details = details or {}

        # Build exception message with code for easy debugging
        super().__init__(f"[{self.code.value}] {message}")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "code": self.code.value,
            "message": self.message,
            "details": self.details,
        }

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), default=str)


class ApplyError(MeshGuardError):
    """Policy submission (or removal) against a scope failed."""

    default_code = ErrorCode.APPLY_FAILED


class ProvisionError(MeshGuardError):
    """A workload or the edge gateway could not be resolved."""

    default_code = ErrorCode.PROVISION_FAILED


class TransportError(MeshGuardError):
    """A single probe failed to complete. Captured in ProbeResult, never raised past the probe."""

    default_code = ErrorCode.TRANSPORT_FAILED


class ConfigError(MeshGuardError):
    default_code = ErrorCode.CONFIG_INVALID


class AssertionTimeout(MeshGuardError):
    """
    Retries were exhausted before the observed behavior matched the expectation.

    Carries the final verdict so callers can report the last observed state.
    """

    default_code = ErrorCode.ASSERTION_TIMEOUT

    def __init__(self, message: str, verdict: Any = None, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, details=details)
        self.verdict = verdict


__all__ = [
    "ErrorCode",
    "MeshGuardError",
    "ApplyError",
    "ProvisionError",
    "TransportError",
    "ConfigError",
    "AssertionTimeout",
]
