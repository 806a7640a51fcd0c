"""
meshguard/catalog
Fixture catalogs: request descriptions paired with expected outcomes.

Usage:
    from meshguard.catalog import CatalogBuilder

    catalog = (
        CatalogBuilder("jwt", source=a)
        .mesh("jwt-simple-no-token", b, expect=401)
        .build()
    )
"""

from meshguard.catalog.models import (
    AUTHORIZATION_HEADER,
    CallPath,
    ExpectedOutcome,
    Fixture,
    Scheme,
    Workload,
)
from meshguard.catalog.catalog import CatalogBuilder, FixtureCatalog
from meshguard.catalog.tokens import TokenSet, payload_segment

__all__ = [
    "AUTHORIZATION_HEADER",
    "CallPath",
    "CatalogBuilder",
    "ExpectedOutcome",
    "Fixture",
    "FixtureCatalog",
    "Scheme",
    "TokenSet",
    "Workload",
    "payload_segment",
]
