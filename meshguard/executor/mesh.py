"""
meshguard/executor/mesh.py
In-mesh probe: the fixture's source workload calls its target workload directly.
"""

from __future__ import annotations

import logging
import time
from typing import Optional

from meshguard.catalog.models import CallPath, Fixture
from meshguard.errors import TransportError

from .harness import CallSurface
from .models import ProbeResult

logger = logging.getLogger(__name__)


class MeshProbe:
    call_path = CallPath.MESH

    def __init__(self, surface: CallSurface):
        self._surface = surface

    def probe(self, fixture: Fixture, timeout: Optional[float] = None) -> ProbeResult:
        if fixture.call_path != CallPath.MESH:
            raise ValueError(f"MeshProbe cannot run edge fixture {fixture.name!r}")

        url = fixture.target.url(fixture.port_name, fixture.scheme, fixture.path)
        start = time.perf_counter()
        try:
            response = self._surface.call(url, fixture.request_headers(), source=fixture.source, timeout=timeout)
        except TransportError as e:
            logger.debug("[%s] %s -> %s", fixture.name, url, e.message)
            return ProbeResult.from_error(e, duration_ms=(time.perf_counter() - start) * 1000)
        return ProbeResult.from_response(response, duration_ms=(time.perf_counter() - start) * 1000)
