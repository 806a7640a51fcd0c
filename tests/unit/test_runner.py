"""
tests/unit/test_runner.py
Verify ScenarioRunner: catalog order, per-case isolation and call-path homogeneity.
"""

import pytest

from meshguard.assertion import ConvergenceAsserter, RetryPolicy
from meshguard.catalog import CallPath, CatalogBuilder
from meshguard.executor import ProbeResult
from meshguard.runner import EXIT_CASE_FAILURE, EXIT_OK, EXIT_SETUP_FAILURE, ScenarioReport, ScenarioRunner


class MockProbe:
    """Answers from a {fixture name: status} table; raises for names in `explode`."""

    def __init__(self, statuses, call_path=CallPath.MESH, explode=()):
        self.call_path = call_path
        self.statuses = statuses
        self.explode = set(explode)
        self.seen = []

    def probe(self, fixture, timeout=None):
        self.seen.append(fixture.name)
        if fixture.name in self.explode:
            raise KeyError(fixture.name)
        return ProbeResult(status_code=self.statuses[fixture.name])


@pytest.fixture
def runner(clock):
    return ScenarioRunner(ConvergenceAsserter(RetryPolicy(delay=0.25, timeout=1.0), clock=clock, sleep=clock.sleep))


@pytest.fixture
def catalog(workloads):
    return (
        CatalogBuilder("jwt", source=workloads["a"])
        .mesh("one", workloads["b"], expect=200)
        .mesh("two", workloads["b"], expect=401)
        .mesh("three", workloads["c"], expect=200)
        .build()
    )


def test_all_pass_in_catalog_order(runner, catalog):
    probe = MockProbe({"one": 200, "two": 401, "three": 200})
    report = runner.run(catalog, probe)

    assert [v.name for v in report.verdicts] == ["one", "two", "three"]
    assert probe.seen == ["one", "two", "three"]
    assert report.passed
    assert report.name == "jwt"
    assert report.call_path == CallPath.MESH


def test_failing_case_does_not_stop_the_run(runner, catalog):
    probe = MockProbe({"one": 200, "two": 200, "three": 200})
    report = runner.run(catalog, probe, name="stage")

    assert report.name == "stage"
    assert [v.passed for v in report.verdicts] == [True, False, True]
    assert [v.name for v in report.failures] == ["two"]
    assert not report.passed


def test_crashing_case_is_recorded_as_failure(runner, catalog):
    probe = MockProbe({"one": 200, "three": 200}, explode={"two"})
    report = runner.run(catalog, probe)

    two = report.verdicts[1]
    assert not two.passed
    assert two.error.startswith("KeyError")
    assert two.reason == two.error
    assert report.verdicts[2].passed


def test_probe_path_must_match_catalog(runner, catalog):
    with pytest.raises(ValueError, match="holds mesh fixtures"):
        runner.run(catalog, MockProbe({}, call_path=CallPath.EDGE))


def test_stage_to_dict(runner, catalog):
    report = runner.run(catalog, MockProbe({"one": 200, "two": 200, "three": 200}))
    data = report.to_dict()
    assert data["call_path"] == "mesh"
    assert data["total"] == 3
    assert data["failed"] == 1


def test_scenario_report_exit_codes(runner, catalog):
    passing = runner.run(catalog, MockProbe({"one": 200, "two": 401, "three": 200}))
    failing = runner.run(catalog, MockProbe({"one": 200, "two": 200, "three": 200}))

    assert ScenarioReport("s", [passing]).exit_code == EXIT_OK
    assert ScenarioReport("s", [passing, failing]).exit_code == EXIT_CASE_FAILURE
    aborted = ScenarioReport("s", [passing], error={"code": "APPLY_001", "message": "denied", "details": {}})
    assert aborted.exit_code == EXIT_SETUP_FAILURE
    assert not aborted.passed
