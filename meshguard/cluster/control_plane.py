"""
meshguard/cluster/control_plane.py
ControlPlane backed by `kubectl apply|delete -f -` in the scope's namespace.
"""

from __future__ import annotations

import logging
from typing import List

from meshguard.errors import ApplyError, ErrorCode
from meshguard.policy.models import Scope

from .kubectl import Kubectl, KubectlError

logger = logging.getLogger(__name__)


def join_documents(documents: List[str]) -> str:
    return "\n---\n".join(doc.strip() for doc in documents) + "\n"


class KubectlControlPlane:
    def __init__(self, kubectl: Kubectl):
        self._kubectl = kubectl

    def apply(self, scope: Scope, documents: List[str]) -> None:
        if not documents:
            return
        try:
            out = self._kubectl.run("apply", "-f", "-", namespace=scope.namespace, input=join_documents(documents))
        except KubectlError as e:
            raise ApplyError(
                f"kubectl apply to {scope} failed: {e}",
                details={"namespace": scope.namespace, "stderr": e.stderr},
            ) from e
        logger.debug("kubectl apply (%s): %s", scope, out.strip())

    def delete(self, scope: Scope, documents: List[str]) -> None:
        if not documents:
            return
        try:
            self._kubectl.run(
                "delete", "--ignore-not-found", "-f", "-",
                namespace=scope.namespace,
                input=join_documents(documents),
            )
        except KubectlError as e:
            raise ApplyError(
                f"kubectl delete in {scope} failed: {e}",
                details={"namespace": scope.namespace, "stderr": e.stderr},
                code=ErrorCode.RELEASE_FAILED,
            ) from e
