"""
tests/unit/test_transport.py
Verify HttpCallSurface against httpx.MockTransport: one request per call,
no redirects, Host override, echo reflection and error mapping.
"""

import httpx
import pytest

from meshguard.base.config import TransportConfig
from meshguard.catalog import Workload
from meshguard.errors import ErrorCode, TransportError
from meshguard.executor import HttpCallSurface, parse_reflected_headers

ECHO_BODY = (
    "ServiceVersion=v1\n"
    "[1 body] RequestHeader=X-Test-Payload:eyJpc3MiOiJ4In0\n"
    "RequestHeader=Authorization:\n"
    "RequestHeader=Host:b.ns.svc.cluster.local\n"
)


class RecordingHandler:
    def __init__(self, response_factory):
        self.requests = []
        self._factory = response_factory

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self._factory(request)


def _surface(handler):
    return HttpCallSurface(TransportConfig(request_timeout=1.0), transport=httpx.MockTransport(handler))


def test_parse_reflected_headers():
    reflected = parse_reflected_headers(ECHO_BODY)
    assert reflected == {
        "X-Test-Payload": "eyJpc3MiOiJ4In0",
        "Authorization": "",
        "Host": "b.ns.svc.cluster.local",
    }


def test_parse_reflected_headers_ignores_other_lines():
    assert parse_reflected_headers("hello\nServiceVersion=v1\n") == {}


def test_call_sends_headers_and_returns_status():
    handler = RecordingHandler(lambda req: httpx.Response(401, text="Jwt is missing"))
    with _surface(handler) as surface:
        resp = surface.call("http://b.ns.svc.cluster.local:80/", [("Authorization", "Bearer t"), ("X-A", "1")])

    assert resp.status_code == 401
    assert len(handler.requests) == 1
    req = handler.requests[0]
    assert req.headers["Authorization"] == "Bearer t"
    assert req.headers["X-A"] == "1"
    assert req.headers["User-Agent"].startswith("meshguard/")


def test_call_sets_host_header_for_edge():
    handler = RecordingHandler(lambda req: httpx.Response(200))
    with _surface(handler) as surface:
        surface.call("http://203.0.113.10/", [], host="example.com")
    assert handler.requests[0].headers["Host"] == "example.com"


def test_redirects_are_observed_not_followed():
    handler = RecordingHandler(lambda req: httpx.Response(302, headers={"Location": "http://idp/login"}))
    with _surface(handler) as surface:
        resp = surface.call("http://b/", [])
    assert resp.status_code == 302
    assert len(handler.requests) == 1


def test_reflected_headers_shadow_response_headers():
    handler = RecordingHandler(
        lambda req: httpx.Response(200, headers={"authorization": "leaked", "x-envoy-upstream-service-time": "3"}, text=ECHO_BODY)
    )
    with _surface(handler) as surface:
        resp = surface.call("http://c/", [])

    assert resp.headers["Authorization"] == ""
    assert "authorization" not in resp.headers
    assert resp.headers["X-Test-Payload"] == "eyJpc3MiOiJ4In0"
    assert resp.headers["x-envoy-upstream-service-time"] == "3"


def test_connect_error_maps_to_transport_error():
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    with _surface(handler) as surface:
        with pytest.raises(TransportError) as exc:
            surface.call("http://b/", [])
    assert exc.value.code == ErrorCode.TRANSPORT_FAILED
    assert exc.value.details["error_type"] == "ConnectError"


def test_timeout_maps_to_transport_timeout():
    def handler(request):
        raise httpx.ReadTimeout("timed out", request=request)

    with _surface(handler) as surface:
        with pytest.raises(TransportError) as exc:
            surface.call("http://b/", [])
    assert exc.value.code == ErrorCode.TRANSPORT_TIMEOUT


def test_client_pooled_per_source_proxy():
    handler = RecordingHandler(lambda req: httpx.Response(200))
    a = Workload(name="a", namespace="ns", proxy="http://a-proxy:15001")
    other = Workload(name="x", namespace="ns", proxy="http://x-proxy:15001")
    surface = _surface(handler)

    surface.call("http://b/", [], source=a)
    surface.call("http://c/", [], source=a)
    surface.call("http://b/", [], source=other)
    assert len(surface._clients) == 2

    surface.close()
    assert surface._clients == {}


def test_call_timeout_caps_request_timeout():
    handler = RecordingHandler(lambda req: httpx.Response(200))
    with _surface(handler) as surface:
        surface.call("http://b/", [], timeout=0.4)
        surface.call("http://b/", [], timeout=30.0)
        surface.call("http://b/", [])

    assert handler.requests[0].extensions["timeout"]["read"] == 0.4
    assert handler.requests[1].extensions["timeout"]["read"] == 1.0
    assert handler.requests[2].extensions["timeout"]["read"] == 1.0


def test_timeout_details_report_the_capped_value():
    def handler(request):
        raise httpx.ReadTimeout("timed out", request=request)

    with _surface(handler) as surface:
        with pytest.raises(TransportError) as exc:
            surface.call("http://b/", [], timeout=0.25)
    assert exc.value.details["timeout"] == 0.25
