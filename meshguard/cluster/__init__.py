"""
meshguard/cluster
kubectl-backed implementations of the external collaborators:
policy application (KubectlControlPlane) and workload/edge resolution.
"""

from meshguard.cluster.kubectl import Kubectl, KubectlError
from meshguard.cluster.control_plane import KubectlControlPlane
from meshguard.cluster.provisioning import (
    EdgeProvisioner,
    IngressEdgeProvisioner,
    ServiceWorkloadProvisioner,
    StaticEdgeProvisioner,
    WorkloadProvisioner,
)

__all__ = [
    "EdgeProvisioner",
    "IngressEdgeProvisioner",
    "Kubectl",
    "KubectlControlPlane",
    "KubectlError",
    "ServiceWorkloadProvisioner",
    "StaticEdgeProvisioner",
    "WorkloadProvisioner",
]
