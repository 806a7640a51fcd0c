"""
meshguard/executor/harness.py

Purpose:
    The abstract interfaces of the probe layer.

    - CallSurface: issues exactly one HTTP call, raises TransportError on failure.
    - Probe: turns a Fixture into a ProbeResult. Implementations:
        * MeshProbe (source workload -> target workload)
        * EdgeProbe (external client -> ingress gateway)
      A run picks one Probe for its whole catalog.
"""

from __future__ import annotations

from typing import List, Optional, Protocol, Tuple, runtime_checkable

from meshguard.catalog.models import CallPath, Fixture, Workload

from .models import CallResponse, ProbeResult


@runtime_checkable
class CallSurface(Protocol):
    def call(
        self,
        url: str,
        headers: List[Tuple[str, str]],
        *,
        source: Optional[Workload] = None,
        host: Optional[str] = None,
        timeout: Optional[float] = None,
    ) -> CallResponse:
        """
        Issue one request. `source` is the calling workload (mesh path),
        `host` overrides the Host header (edge path). `timeout` caps the
        call below the configured request timeout.
        """
        ...


@runtime_checkable
class Probe(Protocol):
    call_path: CallPath

    def probe(self, fixture: Fixture, timeout: Optional[float] = None) -> ProbeResult:
        """
        Issue exactly one call for the fixture, bounded by `timeout` seconds
        when given. No retries at this layer.
        Must capture transport errors in the result rather than raise them.
        """
        ...
