"""
meshguard/catalog/catalog.py

FixtureCatalog: ordered, pure-data list of (Fixture, ExpectedOutcome) pairs.
CatalogBuilder: assembles a catalog from literal data, filling in the shared
                 source workload, port name and scheme.
"""

from __future__ import annotations

from typing import Dict, Iterable, Iterator, List, Mapping, Optional, Sequence, Tuple, Union

from .models import CallPath, ExpectedOutcome, Fixture, Scheme, Workload

Case = Tuple[Fixture, ExpectedOutcome]
HeaderInput = Union[Mapping[str, str], Sequence[Tuple[str, str]], None]


class FixtureCatalog:
    """
    Iteration order is insertion order and is used as the reporting order.
    Names are unique; a catalog never mixes mesh and edge fixtures.
    """

    def __init__(self, name: str = "", cases: Iterable[Case] = ()):
        self.name = name
        self._cases: List[Case] = []
        self._names: set = set()
        for fixture, expected in cases:
            self.add_case(fixture, expected)

    def add_case(self, fixture: Fixture, expected: ExpectedOutcome) -> "FixtureCatalog":
        if fixture.name in self._names:
            raise ValueError(f"Duplicate fixture name {fixture.name!r} in catalog {self.name!r}")
        path = self.call_path
        if path is not None and fixture.call_path != path:
            raise ValueError(
                f"Catalog {self.name!r} holds {path.value} fixtures; {fixture.name!r} is {fixture.call_path.value}"
            )
        self._cases.append((fixture, expected))
        self._names.add(fixture.name)
        return self

    def all_cases(self) -> List[Case]:
        return list(self._cases)

    @property
    def call_path(self) -> Optional[CallPath]:
        if not self._cases:
            return None
        return self._cases[0][0].call_path

    def __len__(self) -> int:
        return len(self._cases)

    def __iter__(self) -> Iterator[Case]:
        return iter(self._cases)

    def __repr__(self) -> str:
        return f"FixtureCatalog(name={self.name!r}, cases={len(self._cases)})"


def _header_pairs(headers: HeaderInput) -> Tuple[Tuple[str, str], ...]:
    if not headers:
        return ()
    if isinstance(headers, Mapping):
        return tuple((str(k), str(v)) for k, v in headers.items())
    return tuple((str(k), str(v)) for k, v in headers)


class CatalogBuilder:
    """
    Example:
        catalog = (
            CatalogBuilder("jwt", source=a)
            .mesh("jwt-simple-valid-token", b, token=tokens.issuer1, expect=200)
            .mesh("jwt-simple-no-token", b, expect=401)
            .build()
        )
    """

    def __init__(
        self,
        name: str,
        *,
        source: Optional[Workload] = None,
        port_name: str = "http",
        scheme: Scheme = Scheme.HTTP,
    ):
        self._catalog = FixtureCatalog(name)
        self._source = source
        self._port_name = port_name
        self._scheme = scheme

    def mesh(
        self,
        name: str,
        target: Workload,
        *,
        expect: int,
        path: str = "/",
        token: Optional[str] = None,
        headers: HeaderInput = None,
        expect_headers: Optional[Dict[str, str]] = None,
        source: Optional[Workload] = None,
    ) -> "CatalogBuilder":
        fixture = Fixture(
            name=name,
            source=source or self._source,
            target=target,
            path=path,
            headers=_header_pairs(headers),
            token=token,
            port_name=self._port_name,
            scheme=self._scheme,
        )
        self._catalog.add_case(fixture, ExpectedOutcome(status_code=expect, headers=expect_headers or {}))
        return self

    def edge(
        self,
        name: str,
        host: str,
        *,
        expect: int,
        path: str = "/",
        token: Optional[str] = None,
        headers: HeaderInput = None,
        expect_headers: Optional[Dict[str, str]] = None,
    ) -> "CatalogBuilder":
        fixture = Fixture(
            name=name,
            host=host,
            path=path,
            headers=_header_pairs(headers),
            token=token,
            scheme=self._scheme,
        )
        self._catalog.add_case(fixture, ExpectedOutcome(status_code=expect, headers=expect_headers or {}))
        return self

    def build(self) -> FixtureCatalog:
        return self._catalog
