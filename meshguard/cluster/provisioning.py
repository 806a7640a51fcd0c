"""
meshguard/cluster/provisioning.py

Resolves already-running workloads and the edge gateway into handles the
probes can use. Nothing is created here: deploying workloads and injecting
sidecars happens outside the harness.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional, Protocol, runtime_checkable

from meshguard.catalog.models import Scheme, Workload
from meshguard.errors import ErrorCode, ProvisionError
from meshguard.executor.edge import EdgeGateway
from meshguard.policy.models import Scope

from .kubectl import Kubectl, KubectlError

logger = logging.getLogger(__name__)


@runtime_checkable
class WorkloadProvisioner(Protocol):
    def provision(self, name: str, scope: Scope) -> Workload: ...


@runtime_checkable
class EdgeProvisioner(Protocol):
    def provision(self) -> EdgeGateway: ...


class ServiceWorkloadProvisioner:
    """
    Resolves a workload from its Kubernetes Service: the in-mesh host name
    comes from name/namespace, the named ports from the Service spec.
    """

    def __init__(self, kubectl: Kubectl, cluster_domain: str = "cluster.local", source_proxy: Optional[str] = None):
        self._kubectl = kubectl
        self._cluster_domain = cluster_domain
        self._source_proxy = source_proxy

    def provision(self, name: str, scope: Scope) -> Workload:
        try:
            svc = self._kubectl.get_json("service", name, namespace=scope.namespace)
        except KubectlError as e:
            raise ProvisionError(
                f"Workload {name!r} not found in {scope.namespace}: {e}",
                details={"name": name, "namespace": scope.namespace},
                code=ErrorCode.PROVISION_NOT_FOUND,
            ) from e

        ports = _service_ports(svc)
        if not ports:
            raise ProvisionError(f"Service {name!r} in {scope.namespace} exposes no ports")

        workload = Workload(
            name=name,
            namespace=scope.namespace,
            ports=ports,
            cluster_domain=self._cluster_domain,
            proxy=self._source_proxy,
        )
        logger.info("Resolved workload %s (ports: %s)", workload.host, ports)
        return workload


def _service_ports(svc: Dict[str, Any]) -> Dict[str, int]:
    ports: Dict[str, int] = {}
    for entry in svc.get("spec", {}).get("ports", []) or []:
        if "port" not in entry:
            continue
        ports[entry.get("name") or str(entry["port"])] = int(entry["port"])
    return ports


class StaticEdgeProvisioner:
    def __init__(self, address: str, scheme: Scheme = Scheme.HTTP):
        self._address = address
        self._scheme = scheme

    def provision(self) -> EdgeGateway:
        if not self._address:
            raise ProvisionError("No edge gateway address configured")
        return EdgeGateway(address=self._address, scheme=self._scheme)


class IngressEdgeProvisioner:
    """Reads the load-balancer address of the ingress gateway Service."""

    def __init__(self, kubectl: Kubectl, service: str = "istio-ingressgateway", namespace: str = "istio-system", port: int = 80):
        self._kubectl = kubectl
        self._service = service
        self._namespace = namespace
        self._port = port

    def provision(self) -> EdgeGateway:
        try:
            svc = self._kubectl.get_json("service", self._service, namespace=self._namespace)
        except KubectlError as e:
            raise ProvisionError(
                f"Edge gateway service {self._namespace}/{self._service} not found: {e}",
                code=ErrorCode.PROVISION_NOT_FOUND,
            ) from e

        ingress = (svc.get("status", {}).get("loadBalancer", {}).get("ingress") or [{}])[0]
        host = ingress.get("ip") or ingress.get("hostname")
        if not host:
            raise ProvisionError(
                f"Edge gateway {self._namespace}/{self._service} has no load-balancer address yet",
                details={"service": self._service, "namespace": self._namespace},
            )

        address = host if self._port == 80 else f"{host}:{self._port}"
        logger.info("Resolved edge gateway at %s", address)
        return EdgeGateway(address=address)
