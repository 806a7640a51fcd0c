"""
meshguard/scenarios/request_authn.py
RequestAuthentication (beta API), with and without an authorization policy.

Workloads:
    a - caller
    b - RequestAuthentication + AuthorizationPolicy requiring a request principal
    c - RequestAuthentication for both issuers, payload copied to X-Test-Payload
    d - no policy at all
    e - RequestAuthentication that forwards the original token
"""

from __future__ import annotations

from typing import Mapping

from meshguard.catalog import AUTHORIZATION_HEADER, CatalogBuilder, FixtureCatalog, TokenSet, Workload
from meshguard.catalog.models import CallPath
from meshguard.runner.scenario import Scenario, Stage

OK = 200
UNAUTHORIZED = 401
FORBIDDEN = 403

PAYLOAD_HEADER = "X-Test-Payload"


def build_catalog(w: Mapping[str, Workload], tokens: TokenSet) -> FixtureCatalog:
    b, c, d, e = w["b"], w["c"], w["d"], w["e"]
    payload1 = tokens.payload(tokens.issuer1)
    payload2 = tokens.payload(tokens.issuer2)

    return (
        CatalogBuilder("request-authn", source=w["a"])
        .mesh("valid-token-noauthz", c, token=tokens.issuer1, expect=OK,
              expect_headers={AUTHORIZATION_HEADER: "", PAYLOAD_HEADER: payload1})
        .mesh("valid-token-2-noauthz", c, token=tokens.issuer2, expect=OK,
              expect_headers={AUTHORIZATION_HEADER: "", PAYLOAD_HEADER: payload2})
        .mesh("expired-token-noauthz", c, token=tokens.expired, expect=UNAUTHORIZED)
        .mesh("no-token-noauthz", c, expect=OK)
        # b is configured with authorization: only requests with a valid JWT succeed
        .mesh("valid-token", b, token=tokens.issuer1, expect=OK,
              expect_headers={AUTHORIZATION_HEADER: ""})
        .mesh("expired-token", b, token=tokens.expired, expect=UNAUTHORIZED)
        .mesh("no-token", b, expect=FORBIDDEN)
        .mesh("no-authn-authz", d, expect=OK)
        .mesh("valid-token-forward", e, token=tokens.issuer1, expect=OK,
              expect_headers={AUTHORIZATION_HEADER: f"Bearer {tokens.issuer1}", PAYLOAD_HEADER: payload1})
        .build()
    )


SCENARIO = Scenario(
    name="request-authn",
    description="RequestAuthentication with and without AuthorizationPolicy (mesh path)",
    workloads=("a", "b", "c", "d", "e"),
    stages=(Stage("request-authn", CallPath.MESH, build_catalog),),
    tenant_templates=(
        "testdata/requestauthn/b-authn-authz.yaml.tmpl",
        "testdata/requestauthn/c-authn.yaml.tmpl",
        "testdata/requestauthn/e-authn.yaml.tmpl",
    ),
)
