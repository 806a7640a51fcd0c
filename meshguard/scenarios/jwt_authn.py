"""
meshguard/scenarios/jwt_authn.py
JWT origin authentication: simple policy, path-scoped policies, two issuers.

Workloads:
    a - caller
    b - requires a token from issuer 1
    c - requires a token except on excluded paths (/health_check, /guest*)
    d - requires a token only on included paths (/something-confidential)
    e - issuer 1 on /testing-istio-jwt*, issuer 2 everywhere else
"""

from __future__ import annotations

from typing import Mapping

from meshguard.catalog import CatalogBuilder, FixtureCatalog, TokenSet, Workload
from meshguard.catalog.models import CallPath
from meshguard.runner.scenario import Scenario, Stage

OK = 200
UNAUTHORIZED = 401


def build_catalog(w: Mapping[str, Workload], tokens: TokenSet) -> FixtureCatalog:
    b, c, d, e = w["b"], w["c"], w["d"], w["e"]
    return (
        CatalogBuilder("jwt-authn", source=w["a"])
        .mesh("jwt-simple-valid-token", b, token=tokens.issuer1, expect=OK)
        .mesh("jwt-simple-expired-token", b, token=tokens.expired, expect=UNAUTHORIZED)
        .mesh("jwt-simple-no-token", b, expect=UNAUTHORIZED)
        .mesh("jwt-excluded-paths-no-token[/health_check]", c, path="/health_check", expect=OK)
        .mesh("jwt-excluded-paths-no-token[/guest-us]", c, path="/guest-us", expect=OK)
        .mesh("jwt-excluded-paths-no-token[/index.html]", c, path="/index.html", expect=UNAUTHORIZED)
        .mesh("jwt-excluded-paths-valid-token", c, path="/index.html", token=tokens.issuer1, expect=OK)
        .mesh("jwt-included-paths-no-token[/index.html]", d, path="/index.html", expect=OK)
        .mesh("jwt-included-paths-no-token[/something-confidential]", d, path="/something-confidential", expect=UNAUTHORIZED)
        .mesh("jwt-included-paths-valid-token", d, path="/something-confidential", token=tokens.issuer1, expect=OK)
        .mesh("jwt-two-issuers-no-token", e, expect=UNAUTHORIZED)
        .mesh("jwt-two-issuers-token2", e, token=tokens.issuer2, expect=OK)
        .mesh("jwt-two-issuers-token1", e, token=tokens.issuer1, expect=UNAUTHORIZED)
        .mesh("jwt-two-issuers-invalid-token", e, path="/testing-istio-jwt", token=tokens.invalid, expect=UNAUTHORIZED)
        .mesh("jwt-two-issuers-token1[/testing-istio-jwt]", e, path="/testing-istio-jwt", token=tokens.issuer1, expect=OK)
        .mesh("jwt-two-issuers-token2[/testing-istio-jwt]", e, path="/testing-istio-jwt", token=tokens.issuer2, expect=UNAUTHORIZED)
        .mesh("jwt-wrong-issuers", e, path="/wrong_issuer", token=tokens.issuer1, expect=UNAUTHORIZED)
        .build()
    )


SCENARIO = Scenario(
    name="jwt-authn",
    description="JWT authn policy: simple, path-scoped and two-issuer origins (mesh path)",
    workloads=("a", "b", "c", "d", "e"),
    stages=(Stage("jwt-authn", CallPath.MESH, build_catalog),),
    tenant_templates=(
        "testdata/jwt/simple-jwt-policy.yaml.tmpl",
        "testdata/jwt/jwt-with-paths.yaml.tmpl",
        "testdata/jwt/two-issuers.yaml.tmpl",
    ),
)
