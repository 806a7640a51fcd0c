#!/usr/bin/env python3
"""
meshguard CLI

Runs a built-in scenario against the current cluster and reports one result
per case. Exit status: 0 all cases passed, 1 a case failed, 2 setup failed.

Usage:
    meshguard list
    meshguard run jwt-authn --namespace authn-jwt-1 --tokens tokens.json
    meshguard run ingress-request-authn --namespace req-authn-ingress-1 \
        --tokens tokens.json --edge-address 203.0.113.10 --report-dir reports
"""

from __future__ import annotations

import argparse
import dataclasses
import logging
import sys
from typing import List, Optional

from meshguard.base.config import MeshGuardConfig, set_config, setup_logging
from meshguard.base.context import RunContext
from meshguard.catalog.tokens import TokenSet
from meshguard.errors import ConfigError
from meshguard.runner import EXIT_SETUP_FAILURE, ScenarioHarness, create_report_bundle, render_summary
from meshguard.scenarios import get_scenario, list_scenarios

logger = logging.getLogger("meshguard.cli")


def _apply_overrides(config: MeshGuardConfig, args: argparse.Namespace) -> MeshGuardConfig:
    mesh = config.mesh
    if args.namespace:
        mesh = dataclasses.replace(mesh, namespace=args.namespace)
    if args.root_namespace:
        mesh = dataclasses.replace(mesh, root_namespace=args.root_namespace)

    edge = config.edge
    if args.edge_address:
        edge = dataclasses.replace(edge, address=args.edge_address)

    retry = config.retry
    if args.timeout is not None:
        retry = dataclasses.replace(retry, timeout_seconds=args.timeout)
    if args.delay is not None:
        retry = dataclasses.replace(retry, delay_seconds=args.delay)

    tokens = config.tokens
    if args.tokens:
        tokens = dataclasses.replace(tokens, path=args.tokens)

    return dataclasses.replace(config, mesh=mesh, edge=edge, retry=retry, tokens=tokens)


def run_list(args: argparse.Namespace) -> int:
    """Print the built-in scenarios."""
    for scenario in list_scenarios():
        stages = ", ".join(f"{s.name}[{s.call_path.value}]" for s in scenario.stages)
        print(f"{scenario.name:<24} {scenario.description}")
        print(f"{'':<24} stages: {stages}")
    return 0


def run_scenario(args: argparse.Namespace) -> int:
    """Execute one scenario and report per-case verdicts."""
    try:
        config = _apply_overrides(MeshGuardConfig.from_env(), args)
        set_config(config)
        setup_logging(config)

        scenario = get_scenario(args.scenario)
        tokens = TokenSet.load(config.tokens.path)
        context = RunContext.from_config(config, tokens=tokens)
    except ConfigError as e:
        logger.error("%s", e)
        return EXIT_SETUP_FAILURE

    try:
        report = ScenarioHarness(context).execute(scenario)
    finally:
        context.close()

    print(render_summary(report))
    if args.report_dir:
        bundle = create_report_bundle(report, args.report_dir)
        logger.info("Report written to %s", bundle.folder)
    return report.exit_code


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="meshguard", description="Mesh authentication policy conformance harness")
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    list_parser = subparsers.add_parser("list", help="List built-in scenarios")
    list_parser.set_defaults(func=run_list)

    run_parser = subparsers.add_parser("run", help="Run a scenario")
    run_parser.add_argument("scenario", help="Scenario name (see `meshguard list`)")
    run_parser.add_argument("--namespace", help="Tenant namespace holding the test workloads")
    run_parser.add_argument("--root-namespace", help="Mesh root namespace (default istio-system)")
    run_parser.add_argument("--tokens", help="JSON file with issuer1/issuer2/expired/invalid tokens")
    run_parser.add_argument("--edge-address", help="Ingress gateway host[:port]; skips Service lookup")
    run_parser.add_argument("--report-dir", help="Write report.md/report.json under this directory")
    run_parser.add_argument("--timeout", type=float, help="Per-case convergence deadline in seconds")
    run_parser.add_argument("--delay", type=float, help="Delay between attempts in seconds")
    run_parser.set_defaults(func=run_scenario)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if not hasattr(args, "func"):
        parser.print_help()
        return EXIT_SETUP_FAILURE
    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
