"""
meshguard/executor/edge.py
Edge probe: an external client calls the ingress gateway with a virtual host.

The gateway address is a property of the provisioned edge component. It is
resolved once per run (EdgeGateway) and never re-resolved per probe.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Optional

from meshguard.catalog.models import CallPath, Fixture, Scheme
from meshguard.errors import TransportError

from .harness import CallSurface
from .models import ProbeResult

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EdgeGateway:
    # host[:port] of the gateway as reachable from the harness
    address: str
    scheme: Scheme = Scheme.HTTP

    def url(self, path: str) -> str:
        return f"{self.scheme.value}://{self.address}{path}"


class EdgeProbe:
    call_path = CallPath.EDGE

    def __init__(self, gateway: EdgeGateway, surface: CallSurface):
        self.gateway = gateway
        self._surface = surface

    def probe(self, fixture: Fixture, timeout: Optional[float] = None) -> ProbeResult:
        if fixture.call_path != CallPath.EDGE:
            raise ValueError(f"EdgeProbe cannot run mesh fixture {fixture.name!r}")

        url = self.gateway.url(fixture.path)
        start = time.perf_counter()
        try:
            response = self._surface.call(url, fixture.request_headers(), host=fixture.host, timeout=timeout)
        except TransportError as e:
            logger.debug("[%s] %s (Host: %s) -> %s", fixture.name, url, fixture.host, e.message)
            return ProbeResult.from_error(e, duration_ms=(time.perf_counter() - start) * 1000)
        return ProbeResult.from_response(response, duration_ms=(time.perf_counter() - start) * 1000)
