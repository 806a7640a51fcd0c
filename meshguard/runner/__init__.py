from .models import EXIT_CASE_FAILURE, EXIT_OK, EXIT_SETUP_FAILURE, ScenarioReport, StageReport
from .runner import ScenarioRunner, select_probe
from .scenario import Scenario, ScenarioHarness, Stage
from .reporting import ReportBundle, create_report_bundle, render_summary

__all__ = [
    "EXIT_CASE_FAILURE",
    "EXIT_OK",
    "EXIT_SETUP_FAILURE",
    "ReportBundle",
    "Scenario",
    "ScenarioHarness",
    "ScenarioReport",
    "ScenarioRunner",
    "Stage",
    "StageReport",
    "create_report_bundle",
    "render_summary",
    "select_probe",
]
