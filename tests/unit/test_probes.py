"""
tests/unit/test_probes.py
Verify MeshProbe and EdgeProbe build the right call and capture transport errors.
"""

import pytest

from meshguard.catalog import CallPath, Fixture
from meshguard.errors import TransportError
from meshguard.executor import CallResponse, CallSurface, EdgeGateway, EdgeProbe, MeshProbe, Probe
from meshguard.runner import select_probe


class MockSurface:
    def __init__(self, response=None, error=None):
        self.calls = []
        self.response = response or CallResponse(200, {"X-Test-Payload": "abc"})
        self.error = error

    def call(self, url, headers, *, source=None, host=None, timeout=None):
        self.calls.append({"url": url, "headers": headers, "source": source, "host": host, "timeout": timeout})
        if self.error:
            raise self.error
        return self.response


@pytest.fixture
def mesh_fixture(workloads):
    return Fixture(name="jwt-simple-valid-token", source=workloads["a"], target=workloads["b"], path="/index.html", token="h.p.s")


@pytest.fixture
def edge_fixture():
    return Fixture(name="allow healthz", host="example.com", path="/healthz")


def test_protocols():
    surface = MockSurface()
    assert isinstance(surface, CallSurface)
    assert isinstance(MeshProbe(surface), Probe)
    assert isinstance(EdgeProbe(EdgeGateway("203.0.113.10"), surface), Probe)


def test_mesh_probe_calls_target_from_source(mesh_fixture, workloads):
    surface = MockSurface()
    result = MeshProbe(surface).probe(mesh_fixture)

    assert result.ok
    assert result.status_code == 200
    assert result.header("x-test-payload") == "abc"
    call = surface.calls[0]
    assert call["url"] == "http://b.authn-jwt-1.svc.cluster.local:80/index.html"
    assert call["source"] == workloads["a"]
    assert call["host"] is None
    assert ("Authorization", "Bearer h.p.s") in call["headers"]


def test_mesh_probe_captures_transport_error(mesh_fixture):
    surface = MockSurface(error=TransportError("Failed calling http://b: connection refused"))
    result = MeshProbe(surface).probe(mesh_fixture)

    assert not result.ok
    assert result.status_code is None
    assert "TransportError" in result.error
    assert "connection refused" in result.describe()


def test_mesh_probe_rejects_edge_fixture(edge_fixture):
    with pytest.raises(ValueError):
        MeshProbe(MockSurface()).probe(edge_fixture)


def test_edge_probe_targets_gateway_with_host(edge_fixture):
    surface = MockSurface(response=CallResponse(200))
    result = EdgeProbe(EdgeGateway("203.0.113.10:8080"), surface).probe(edge_fixture)

    assert result.status_code == 200
    call = surface.calls[0]
    assert call["url"] == "http://203.0.113.10:8080/healthz"
    assert call["host"] == "example.com"
    assert call["source"] is None


def test_edge_probe_rejects_mesh_fixture(mesh_fixture):
    with pytest.raises(ValueError):
        EdgeProbe(EdgeGateway("gw"), MockSurface()).probe(mesh_fixture)


def test_select_probe():
    surface = MockSurface()
    assert isinstance(select_probe(CallPath.MESH, surface), MeshProbe)
    probe = select_probe(CallPath.EDGE, surface, EdgeGateway("gw"))
    assert isinstance(probe, EdgeProbe)
    assert probe.gateway.address == "gw"
    with pytest.raises(ValueError):
        select_probe(CallPath.EDGE, surface)


def test_mesh_and_edge_calls_carry_time_left(mesh_fixture, edge_fixture):
    surface = MockSurface()
    MeshProbe(surface).probe(mesh_fixture, timeout=2.5)
    EdgeProbe(EdgeGateway("gw"), surface).probe(edge_fixture, timeout=1.5)
    MeshProbe(surface).probe(mesh_fixture)

    assert [c["timeout"] for c in surface.calls] == [2.5, 1.5, None]
