"""
meshguard/policy/models.py
Data models for policy scopes and applied bundles.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Tuple


class ScopeKind(str, Enum):
    TENANT = "tenant"   # isolated namespace, cleaned up independently
    ROOT = "root"       # mesh-wide; shared by every test


@dataclass(frozen=True)
class Scope:
    kind: ScopeKind
    namespace: str

    @classmethod
    def tenant(cls, namespace: str) -> "Scope":
        return cls(ScopeKind.TENANT, namespace)

    @classmethod
    def root(cls, namespace: str) -> "Scope":
        return cls(ScopeKind.ROOT, namespace)

    @property
    def is_root(self) -> bool:
        return self.kind == ScopeKind.ROOT

    def __str__(self) -> str:
        return f"{self.kind.value}:{self.namespace}"


@dataclass
class PolicyBundle:
    """
    Rendered policy documents applied to one scope.
    `released` flips once the control plane has accepted their removal.
    """
    scope: Scope
    documents: Tuple[str, ...]
    released: bool = field(default=False, compare=False)

    def __len__(self) -> int:
        return len(self.documents)
