"""
meshguard/policy
Policy scopes, bundles and their apply/release lifecycle.

Usage:
    binding = PolicyBinding(control_plane)
    with binding.bind(Scope.tenant(ns), documents):
        ...  # probe; documents are removed on every exit path
"""

from meshguard.policy.models import PolicyBundle, Scope, ScopeKind
from meshguard.policy.binding import ControlPlane, PolicyBinding
from meshguard.policy.templates import load_template, render

__all__ = [
    "ControlPlane",
    "PolicyBinding",
    "PolicyBundle",
    "Scope",
    "ScopeKind",
    "load_template",
    "render",
]
