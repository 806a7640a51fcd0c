"""
meshguard/catalog/models.py
Data models for request fixtures.

Workload       : Handle to a running workload that can send and receive calls.
Fixture        : One named request: who calls whom, on which path, with what headers.
ExpectedOutcome: The status code (mandatory) and sparse header values to observe.
"""

from __future__ import annotations

from enum import Enum
from typing import Dict, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

AUTHORIZATION_HEADER = "Authorization"


class Scheme(str, Enum):
    HTTP = "http"
    HTTPS = "https"


class CallPath(str, Enum):
    MESH = "mesh"   # workload -> workload, inside the mesh
    EDGE = "edge"   # external client -> ingress gateway


class Workload(BaseModel):
    """
    A workload resolved by the provisioning collaborator.

    `proxy` is the outbound proxy through which calls *from* this workload are
    issued; it is what makes the mesh attribute a call to this identity.
    """
    model_config = ConfigDict(frozen=True)

    name: str = Field(min_length=1, max_length=63)
    namespace: str = Field(min_length=1, max_length=63)
    ports: Dict[str, int] = Field(default_factory=lambda: {"http": 80})
    cluster_domain: str = "cluster.local"
    proxy: Optional[str] = None

    @property
    def host(self) -> str:
        return f"{self.name}.{self.namespace}.svc.{self.cluster_domain}"

    def port(self, port_name: str) -> int:
        try:
            return self.ports[port_name]
        except KeyError:
            raise ValueError(
                f"Workload {self.name!r} has no port named {port_name!r} (known: {sorted(self.ports)})"
            ) from None

    def url(self, port_name: str, scheme: Scheme, path: str) -> str:
        return f"{scheme.value}://{self.host}:{self.port(port_name)}{path}"


class Fixture(BaseModel):
    """
    A named request scenario. Immutable once constructed.

    Mesh fixtures carry a source and a target workload; edge fixtures carry the
    virtual host presented to the gateway instead. Headers are an ordered
    multimap (pairs, duplicates allowed). A token, when set, is sent as a
    bearer Authorization header on either path.
    """
    model_config = ConfigDict(frozen=True)

    name: str = Field(min_length=1, max_length=256)
    source: Optional[Workload] = None
    target: Optional[Workload] = None
    host: Optional[str] = None
    path: str = "/"
    headers: Tuple[Tuple[str, str], ...] = ()
    token: Optional[str] = None
    port_name: str = "http"
    scheme: Scheme = Scheme.HTTP

    @field_validator("path")
    @classmethod
    def validate_path(cls, v: str) -> str:
        v = v.strip() or "/"
        return v if v.startswith("/") else "/" + v

    @model_validator(mode="after")
    def validate_call_path(self) -> "Fixture":
        if self.target is not None and self.host is not None:
            raise ValueError(f"Fixture {self.name!r}: set either target (mesh) or host (edge), not both")
        if self.target is None and not self.host:
            raise ValueError(f"Fixture {self.name!r}: a target workload or an edge host is required")
        if self.target is not None and self.source is None:
            raise ValueError(f"Fixture {self.name!r}: mesh fixtures need a source workload")
        return self

    @property
    def call_path(self) -> CallPath:
        return CallPath.MESH if self.target is not None else CallPath.EDGE

    def request_headers(self) -> List[Tuple[str, str]]:
        """Headers to put on the wire, in order, with the bearer token appended."""
        headers = list(self.headers)
        if self.token:
            headers.append((AUTHORIZATION_HEADER, f"Bearer {self.token}"))
        return headers


class ExpectedOutcome(BaseModel):
    """
    What a converged mesh must return for a fixture.

    `headers` is sparse: only the listed names are checked, by exact value.
    An empty expected value asserts the header is absent or empty.
    """
    model_config = ConfigDict(frozen=True)

    status_code: int = Field(ge=100, le=599)
    headers: Dict[str, str] = Field(default_factory=dict)

    def describe(self) -> str:
        if not self.headers:
            return f"status={self.status_code}"
        pairs = ", ".join(f"{k}={v!r}" for k, v in self.headers.items())
        return f"status={self.status_code} headers[{pairs}]"
