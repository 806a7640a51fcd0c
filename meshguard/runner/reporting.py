# meshguard/runner/reporting.py - console summary and report bundle generation

from __future__ import annotations

import json
import os
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import List

from .models import ScenarioReport


@dataclass
class ReportBundle:
    folder: str
    markdown_path: str
    json_path: str


def render_summary(report: ScenarioReport) -> str:
    """One line per case, suitable for a terminal."""
    lines: List[str] = []
    for stage in report.stages:
        lines.append(f"== {stage.name} ({stage.call_path.value})")
        for verdict in stage.verdicts:
            mark = "PASS" if verdict.passed else "FAIL"
            lines.append(f"  {mark} {verdict.name}")
            if not verdict.passed:
                lines.append(f"       {verdict.reason}")
    if report.error:
        lines.append(f"!! aborted: [{report.error['code']}] {report.error['message']}")
    total = len(report.verdicts)
    failed = sum(1 for v in report.verdicts if not v.passed)
    lines.append(f"{report.scenario}: {total - failed}/{total} passed, exit {report.exit_code}")
    return "\n".join(lines)


def create_report_bundle(report: ScenarioReport, base_dir: str = "reports") -> ReportBundle:
    """
    Export the scenario report into markdown + JSON files.
    Returns the created bundle metadata.
    """
    os.makedirs(base_dir, exist_ok=True)
    timestamp = datetime.now(timezone.utc).strftime("%Y%m%d-%H%M%S")
    bundle_dir = os.path.join(base_dir, f"{report.scenario}-{timestamp}")
    os.makedirs(bundle_dir, exist_ok=True)

    summary = report.to_dict()
    summary["generated_at"] = timestamp

    md_path = os.path.join(bundle_dir, "report.md")
    json_path = os.path.join(bundle_dir, "report.json")

    with open(md_path, "w", encoding="utf-8") as fh:
        fh.write(_render_markdown(report, timestamp))

    with open(json_path, "w", encoding="utf-8") as fh:
        json.dump(summary, fh, indent=2)

    return ReportBundle(folder=bundle_dir, markdown_path=md_path, json_path=json_path)


def _render_markdown(report: ScenarioReport, timestamp: str) -> str:
    lines = [
        f"# Scenario report: {report.scenario}",
        "",
        f"Generated: {timestamp}",
        f"Result: {'PASS' if report.passed else 'FAIL'} (exit {report.exit_code})",
        "",
    ]

    if report.error:
        lines.extend([
            "## Aborted",
            "",
            f"`{report.error['code']}` {report.error['message']}",
            "",
        ])

    for stage in report.stages:
        lines.extend([
            f"## {stage.name} ({stage.call_path.value})",
            "",
            "| Case | Result | Attempts | Elapsed (s) | Detail |",
            "| --- | --- | --- | --- | --- |",
        ])
        for v in stage.verdicts:
            detail = "" if v.passed else v.reason.replace("|", "\\|")
            lines.append(
                f"| {v.name} | {'PASS' if v.passed else 'FAIL'} | {v.attempts} | {v.elapsed_seconds:.2f} | {detail} |"
            )
        lines.append("")

    return "\n".join(lines)
