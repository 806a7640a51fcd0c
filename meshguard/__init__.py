"""
meshguard
Eventual-consistency conformance harness for mesh authentication policies.

Applies policy documents to a mesh, then probes workloads (in-mesh or through
the edge gateway) until the observed responses match each fixture's expected
outcome or a per-case deadline expires.
"""

__version__ = "0.1.0"
