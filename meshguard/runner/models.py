"""
meshguard/runner/models.py

StageReport   : verdicts of one homogeneous catalog run (mesh or edge).
ScenarioReport: all stages of a scenario plus any fatal setup error.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from meshguard.assertion.models import CaseVerdict
from meshguard.catalog.models import CallPath

EXIT_OK = 0
EXIT_CASE_FAILURE = 1
EXIT_SETUP_FAILURE = 2


@dataclass
class StageReport:
    name: str
    call_path: CallPath
    verdicts: List[CaseVerdict] = field(default_factory=list)

    @property
    def passed(self) -> bool:
        return all(v.passed for v in self.verdicts)

    @property
    def failures(self) -> List[CaseVerdict]:
        return [v for v in self.verdicts if not v.passed]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "call_path": self.call_path.value,
            "passed": self.passed,
            "total": len(self.verdicts),
            "failed": len(self.failures),
            "verdicts": [v.to_dict() for v in self.verdicts],
        }


@dataclass
class ScenarioReport:
    scenario: str
    stages: List[StageReport] = field(default_factory=list)
    # Structured ApplyError/ProvisionError/ConfigError that aborted the run
    error: Optional[Dict[str, Any]] = None

    @property
    def verdicts(self) -> List[CaseVerdict]:
        return [v for stage in self.stages for v in stage.verdicts]

    @property
    def passed(self) -> bool:
        return self.error is None and all(stage.passed for stage in self.stages)

    @property
    def exit_code(self) -> int:
        if self.error is not None:
            return EXIT_SETUP_FAILURE
        return EXIT_OK if self.passed else EXIT_CASE_FAILURE

    def to_dict(self) -> Dict[str, Any]:
        verdicts = self.verdicts
        return {
            "scenario": self.scenario,
            "passed": self.passed,
            "exit_code": self.exit_code,
            "error": self.error,
            "total": len(verdicts),
            "failed": sum(1 for v in verdicts if not v.passed),
            "stages": [s.to_dict() for s in self.stages],
        }
