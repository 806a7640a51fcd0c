from .models import CaseVerdict
from .oracle import OutcomeOracle
from .engine import ConvergenceAsserter, RetryPolicy

__all__ = [
    "CaseVerdict",
    "ConvergenceAsserter",
    "OutcomeOracle",
    "RetryPolicy",
]
