"""
meshguard/scenarios/ingress_authn.py
Mesh-wide RequestAuthentication plus authorization on the ingress gateway.

The same global policy is checked on both paths:
    - in-mesh: tokens are optional, but a bad token is still rejected
    - edge: the gateway authorization requires a principal per virtual host
"""

from __future__ import annotations

from typing import Mapping

from meshguard.catalog import CatalogBuilder, FixtureCatalog, TokenSet, Workload
from meshguard.catalog.models import CallPath
from meshguard.runner.scenario import Scenario, Stage

OK = 200
UNAUTHORIZED = 401
FORBIDDEN = 403


def build_mesh_catalog(w: Mapping[str, Workload], tokens: TokenSet) -> FixtureCatalog:
    b = w["b"]
    return (
        CatalogBuilder("ingress-request-authn/in-mesh", source=w["a"])
        .mesh("in-mesh-with-expired-token", b, token=tokens.expired, expect=UNAUTHORIZED)
        .mesh("in-mesh-without-token", b, expect=OK)
        .build()
    )


def build_edge_catalog(w: Mapping[str, Workload], tokens: TokenSet) -> FixtureCatalog:
    return (
        CatalogBuilder("ingress-request-authn/edge")
        .edge("deny without token", "example.com", expect=FORBIDDEN)
        .edge("allow with sub-1 token", "example.com", token=tokens.issuer1, expect=OK)
        .edge("deny with sub-2 token", "example.com", token=tokens.issuer2, expect=FORBIDDEN)
        .edge("deny with expired token", "example.com", token=tokens.expired, expect=UNAUTHORIZED)
        .edge("allow with sub-1 token on any.com", "any-request-principlal-ok.com", token=tokens.issuer1, expect=OK)
        .edge("allow with sub-2 token on any.com", "any-request-principlal-ok.com", token=tokens.issuer2, expect=OK)
        .edge("deny without token on any.com", "any-request-principlal-ok.com", expect=FORBIDDEN)
        .edge("deny with token on other host", "other-host.com", token=tokens.issuer1, expect=FORBIDDEN)
        .edge("allow healthz", "example.com", path="/healthz", expect=OK)
        .build()
    )


SCENARIO = Scenario(
    name="ingress-request-authn",
    description="Global RequestAuthentication with ingress authorization (mesh and edge paths)",
    workloads=("a", "b"),
    stages=(
        Stage("in-mesh", CallPath.MESH, build_mesh_catalog),
        Stage("edge", CallPath.EDGE, build_edge_catalog),
    ),
    root_templates=("testdata/requestauthn/global-jwt.yaml.tmpl",),
    tenant_templates=("testdata/requestauthn/ingress.yaml.tmpl",),
)
