"""
meshguard/runner/scenario.py

Purpose:
    A Scenario bundles one end-to-end check: the policies to
    apply (root and/or tenant), the workloads it talks to, and one or more
    stages, each a homogeneous catalog for the mesh or the edge path.

    ScenarioHarness executes a scenario against a RunContext:
        1. render + apply root policy, then tenant policy
        2. resolve workloads (and the edge gateway when a stage needs it)
        3. run every stage through ScenarioRunner
        4. release policies in reverse application order, on every exit path

    Setup errors (ApplyError, ProvisionError, ConfigError) abort the scenario
    and are recorded on the report once the release has run. Anything else
    raised during setup is wrapped as a ConfigError (or a ProvisionError when a
    provisioner raised it). If a release fails while unwinding, the error that
    triggered the unwind is kept under details["during"].
"""

from __future__ import annotations

import logging
from contextlib import ExitStack
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Mapping, Optional, Tuple

from meshguard.base.context import RunContext
from meshguard.catalog.catalog import FixtureCatalog
from meshguard.catalog.models import CallPath, Workload
from meshguard.catalog.tokens import TokenSet
from meshguard.errors import ConfigError, ErrorCode, MeshGuardError, ProvisionError
from meshguard.executor.edge import EdgeGateway
from meshguard.policy.models import Scope
from meshguard.policy.templates import load_template, render

from .models import ScenarioReport
from .runner import ScenarioRunner, select_probe

logger = logging.getLogger(__name__)

CatalogFactory = Callable[[Mapping[str, Workload], TokenSet], FixtureCatalog]


@dataclass(frozen=True)
class Stage:
    name: str
    call_path: CallPath
    build: CatalogFactory


@dataclass(frozen=True)
class Scenario:
    name: str
    description: str
    workloads: Tuple[str, ...]
    stages: Tuple[Stage, ...]
    tenant_templates: Tuple[str, ...] = ()
    root_templates: Tuple[str, ...] = ()
    template_package: str = "meshguard.scenarios"
    # Additional template parameters besides Namespace/RootNamespace
    extra: Dict[str, str] = field(default_factory=dict)

    def __post_init__(self):
        if self.root_templates and not self.tenant_templates:
            raise ValueError(f"Scenario {self.name!r}: root-scope policy must be paired with a tenant-scope policy")
        if not self.stages:
            raise ValueError(f"Scenario {self.name!r} has no stages")

    @property
    def needs_edge(self) -> bool:
        return any(stage.call_path == CallPath.EDGE for stage in self.stages)

    def render(self, templates: Tuple[str, ...], params: Mapping[str, str]) -> List[str]:
        return render([load_template(self.template_package, t) for t in templates], params)


class ScenarioHarness:
    def __init__(self, context: RunContext, runner: Optional[ScenarioRunner] = None):
        self._context = context
        self._runner = runner or ScenarioRunner(context.asserter)

    def execute(self, scenario: Scenario) -> ScenarioReport:
        report = ScenarioReport(scenario=scenario.name)
        setup_failures: List[Exception] = []
        try:
            self._execute(scenario, report, setup_failures)
        except Exception as e:
            error = _as_setup_error(e)
            logger.error("Scenario %s aborted: %s", scenario.name, error, exc_info=error is not e)
            report.error = error.to_dict()

            # Keep the error that triggered the unwind next to a failed release
            first = setup_failures[0] if setup_failures else None
            if first is not None and first is not e:
                during = _as_setup_error(first)
                logger.error("Scenario %s: release failed during handling of: %s", scenario.name, during)
                report.error["details"] = {**report.error["details"], "during": during.to_dict()}
        return report

    def _execute(self, scenario: Scenario, report: ScenarioReport, setup_failures: List[Exception]) -> None:
        ctx = self._context
        mesh = ctx.config.mesh
        if not mesh.namespace:
            raise ConfigError("No tenant namespace configured", code=ErrorCode.CONFIG_MISSING_REQUIRED)
        if ctx.tokens is None:
            raise ConfigError("No fixture tokens loaded", code=ErrorCode.CONFIG_MISSING_REQUIRED)

        tenant = Scope.tenant(mesh.namespace)
        root = Scope.root(mesh.root_namespace)
        params = {"Namespace": tenant.namespace, "RootNamespace": root.namespace, **scenario.extra}

        # Render everything up front: a template error must not leave a half-applied run
        root_docs = scenario.render(scenario.root_templates, params)
        tenant_docs = scenario.render(scenario.tenant_templates, params)

        with ExitStack() as stack:
            try:
                if root_docs:
                    stack.enter_context(ctx.binding.bind(root, root_docs))
                if tenant_docs:
                    stack.enter_context(ctx.binding.bind(tenant, tenant_docs))

                workloads = {name: self._provision(name, tenant) for name in scenario.workloads}
                gateway = self._resolve_edge() if scenario.needs_edge else None

                for stage in scenario.stages:
                    catalog = stage.build(workloads, ctx.tokens)
                    probe = select_probe(stage.call_path, ctx.surface, gateway)
                    report.stages.append(self._runner.run(catalog, probe, name=stage.name))
            except Exception as e:
                setup_failures.append(e)
                raise

    def _provision(self, name: str, scope: Scope) -> Workload:
        try:
            return self._context.workloads.provision(name, scope)
        except MeshGuardError:
            raise
        except Exception as e:
            raise ProvisionError(
                f"Workload {name!r} could not be resolved: {type(e).__name__}: {e}",
                details={"name": name, "namespace": scope.namespace, "error_type": type(e).__name__},
            ) from e

    def _resolve_edge(self) -> EdgeGateway:
        if self._context.edge is None:
            raise ProvisionError("Scenario needs the edge gateway but no edge provisioner is configured")
        try:
            return self._context.edge.provision()
        except MeshGuardError:
            raise
        except Exception as e:
            raise ProvisionError(
                f"Edge gateway could not be resolved: {type(e).__name__}: {e}",
                details={"error_type": type(e).__name__},
            ) from e


def _as_setup_error(error: Exception) -> MeshGuardError:
    """Structured form of anything that aborted a scenario outside a case."""
    if isinstance(error, MeshGuardError):
        return error
    wrapped = ConfigError(
        f"Scenario setup failed with {type(error).__name__}: {error}",
        details={"error_type": type(error).__name__},
    )
    wrapped.__cause__ = error
    return wrapped
