"""
meshguard/runner/runner.py

Purpose:
    Runs one catalog through one probe, case by case, in catalog order.

Semantics:
    - Sequential: no two cases probe concurrently.
    - Isolation: a failing or crashing case is recorded and the loop moves on.
    - Homogeneous: the probe's call path must match the catalog's.
"""

from __future__ import annotations

import logging
from typing import Optional

from meshguard.assertion.engine import ConvergenceAsserter
from meshguard.assertion.models import CaseVerdict
from meshguard.catalog.catalog import FixtureCatalog
from meshguard.catalog.models import CallPath
from meshguard.executor.edge import EdgeGateway, EdgeProbe
from meshguard.executor.harness import CallSurface, Probe
from meshguard.executor.mesh import MeshProbe

from .models import StageReport

logger = logging.getLogger(__name__)


def select_probe(call_path: CallPath, surface: CallSurface, gateway: Optional[EdgeGateway] = None) -> Probe:
    """Pick the probe implementation for a whole run."""
    if call_path == CallPath.MESH:
        return MeshProbe(surface)
    if gateway is None:
        raise ValueError("Edge runs need a resolved EdgeGateway")
    return EdgeProbe(gateway, surface)


class ScenarioRunner:
    def __init__(self, asserter: Optional[ConvergenceAsserter] = None):
        self._asserter = asserter or ConvergenceAsserter()

    def run(self, catalog: FixtureCatalog, probe: Probe, name: Optional[str] = None) -> StageReport:
        if catalog.call_path is not None and catalog.call_path != probe.call_path:
            raise ValueError(
                f"Catalog {catalog.name!r} holds {catalog.call_path.value} fixtures but the probe is {probe.call_path.value}"
            )

        report = StageReport(name=name or catalog.name, call_path=probe.call_path)
        logger.info("Running %s (%d cases, %s path)", report.name, len(catalog), probe.call_path.value)

        for fixture, expected in catalog:
            try:
                verdict = self._asserter.check(fixture, expected, probe.probe)
            except Exception as e:
                logger.error("[%s] could not be evaluated: %s", fixture.name, e, exc_info=True)
                verdict = CaseVerdict(
                    name=fixture.name,
                    passed=False,
                    expected=expected.describe(),
                    error=f"{type(e).__name__}: {e}",
                )

            if verdict.passed:
                logger.info("PASS %s (%d attempt(s), %.2fs)", verdict.name, verdict.attempts, verdict.elapsed_seconds)
            else:
                logger.warning("FAIL %s: %s", verdict.name, verdict.reason)
            report.verdicts.append(verdict)

        logger.info(
            "%s: %d/%d passed",
            report.name,
            len(report.verdicts) - len(report.failures),
            len(report.verdicts),
        )
        return report
