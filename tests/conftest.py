"""Pytest configuration for meshguard."""
import base64
import json
import os

import pytest

from meshguard.base.config import set_config
from meshguard.catalog import TokenSet, Workload


def pytest_configure():
    os.environ.setdefault("MESHGUARD_LOG_LEVEL", "DEBUG")


def make_jwt(claims: dict) -> str:
    """Unsigned, JWT-shaped token. Good enough for fixtures: nothing here validates signatures."""
    def seg(obj) -> str:
        return base64.urlsafe_b64encode(json.dumps(obj).encode()).decode().rstrip("=")
    return f"{seg({'alg': 'RS256', 'typ': 'JWT'})}.{seg(claims)}.c2lnbmF0dXJl"


class FakeClock:
    """Monotonic clock whose time only moves when sleep() is called."""

    def __init__(self, start: float = 1000.0):
        self.now = start
        self.sleeps = []

    def __call__(self) -> float:
        return self.now

    def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds


@pytest.fixture(autouse=True)
def reset_config():
    set_config(None)
    yield
    set_config(None)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def tokens():
    return TokenSet(
        issuer1=make_jwt({"iss": "test-issuer-1@istio.io", "sub": "sub-1", "exp": 4685989700}),
        issuer2=make_jwt({"iss": "test-issuer-2@istio.io", "sub": "sub-2", "exp": 4685989700}),
        expired=make_jwt({"iss": "test-issuer-1@istio.io", "sub": "sub-1", "exp": 1}),
        invalid="invalid-token",
    )


@pytest.fixture
def workloads():
    return {
        name: Workload(name=name, namespace="authn-jwt-1", ports={"http": 80, "grpc": 7070})
        for name in ("a", "b", "c", "d", "e")
    }


@pytest.fixture
def jwt():
    return make_jwt
