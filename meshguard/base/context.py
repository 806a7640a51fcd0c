"""
meshguard/base/context.py
Run-scoped context: every collaborator a scenario run needs, passed explicitly.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from meshguard.assertion.engine import ConvergenceAsserter, RetryPolicy
from meshguard.base.config import MeshGuardConfig
from meshguard.catalog.tokens import TokenSet
from meshguard.cluster.control_plane import KubectlControlPlane
from meshguard.cluster.kubectl import Kubectl
from meshguard.cluster.provisioning import (
    EdgeProvisioner,
    IngressEdgeProvisioner,
    ServiceWorkloadProvisioner,
    StaticEdgeProvisioner,
    WorkloadProvisioner,
)
from meshguard.executor.harness import CallSurface
from meshguard.executor.transport import HttpCallSurface
from meshguard.policy.binding import PolicyBinding


@dataclass
class RunContext:
    """Created once per run. Holds the policy binding, resolvers, call surface and assertion engine."""
    config: MeshGuardConfig
    binding: PolicyBinding
    workloads: WorkloadProvisioner
    surface: CallSurface
    asserter: ConvergenceAsserter
    tokens: Optional[TokenSet] = None
    edge: Optional[EdgeProvisioner] = None

    @classmethod
    def from_config(cls, config: MeshGuardConfig, tokens: Optional[TokenSet] = None) -> "RunContext":
        """Wire the kubectl + httpx implementations from configuration."""
        kubectl = Kubectl(binary=config.mesh.kubectl, context=config.mesh.kube_context)

        if config.edge.address:
            edge: EdgeProvisioner = StaticEdgeProvisioner(config.edge.address)
        else:
            edge = IngressEdgeProvisioner(
                kubectl,
                service=config.edge.service,
                namespace=config.edge.namespace,
                port=config.edge.port,
            )

        return cls(
            config=config,
            binding=PolicyBinding(KubectlControlPlane(kubectl)),
            workloads=ServiceWorkloadProvisioner(
                kubectl,
                cluster_domain=config.mesh.cluster_domain,
                source_proxy=config.mesh.source_proxy,
            ),
            surface=HttpCallSurface(config.transport),
            asserter=ConvergenceAsserter(RetryPolicy.from_config(config.retry)),
            tokens=tokens,
            edge=edge,
        )

    def close(self) -> None:
        close = getattr(self.surface, "close", None)
        if callable(close):
            close()
