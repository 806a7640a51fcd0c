"""
meshguard/policy/binding.py

Purpose:
    Applies rendered policy documents to a scope and guarantees their removal.

Semantics:
    - apply(): submit documents; ApplyError if the control plane refuses them.
      A refused apply is rolled back best-effort so nothing half-applied lingers.
    - release(): idempotent. A released bundle never reaches the control plane
      again and releasing it touches no other scope.
    - bind(): context manager; release runs on every exit path.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Iterable, Iterator, List, Protocol, runtime_checkable

from meshguard.errors import ApplyError, ErrorCode, MeshGuardError

from .models import PolicyBundle, Scope

logger = logging.getLogger(__name__)


@runtime_checkable
class ControlPlane(Protocol):
    """
    The policy application API of the mesh. Documents are opaque strings.
    Implementations raise on failure (any exception type).
    """

    def apply(self, scope: Scope, documents: List[str]) -> None: ...

    def delete(self, scope: Scope, documents: List[str]) -> None: ...


class PolicyBinding:
    def __init__(self, control_plane: ControlPlane):
        self._control_plane = control_plane

    def apply(self, scope: Scope, documents: Iterable[str]) -> PolicyBundle:
        docs = tuple(d for d in documents if d.strip())
        logger.info("Applying %d policy document(s) to %s", len(docs), scope)

        try:
            self._control_plane.apply(scope, list(docs))
        except Exception as e:
            logger.error("Policy apply to %s failed: %s", scope, e)
            self._rollback(scope, docs)
            if isinstance(e, ApplyError):
                raise
            raise ApplyError(
                f"Control plane rejected policy for {scope}: {e}",
                details={"scope": str(scope), "documents": len(docs)},
            ) from e

        return PolicyBundle(scope=scope, documents=docs)

    def release(self, bundle: PolicyBundle) -> None:
        if bundle.released:
            logger.debug("Bundle for %s already released", bundle.scope)
            return

        logger.info("Releasing %d policy document(s) from %s", len(bundle), bundle.scope)
        try:
            self._control_plane.delete(bundle.scope, list(bundle.documents))
        except Exception as e:
            if isinstance(e, MeshGuardError):
                raise
            raise ApplyError(
                f"Control plane failed to remove policy from {bundle.scope}: {e}",
                details={"scope": str(bundle.scope)},
                code=ErrorCode.RELEASE_FAILED,
            ) from e
        bundle.released = True

    @contextmanager
    def bind(self, scope: Scope, documents: Iterable[str]) -> Iterator[PolicyBundle]:
        bundle = self.apply(scope, documents)
        try:
            yield bundle
        finally:
            self.release(bundle)

    def _rollback(self, scope: Scope, docs: tuple) -> None:
        if not docs:
            return
        try:
            self._control_plane.delete(scope, list(docs))
        except Exception:
            # The apply error is the one worth surfacing
            logger.warning("Rollback of partially applied policy on %s failed", scope, exc_info=True)
