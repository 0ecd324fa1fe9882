from .aggregate import tally
from .classifier import classify
from .config import GatePolicy, RunSettings, load_settings
from .decision import decide
from .enforce import classify_environment, enforce
from .ingest import load_report, parse_report
from .models import (
    DeploymentEnvironment,
    EnforcementOutcome,
    ExitAction,
    GateResult,
    GateStatus,
    SeverityTier,
    TierCounts,
)
from .pipeline import evaluate, run_gate

__version__ = "0.1.0"

__all__ = [
    "DeploymentEnvironment",
    "EnforcementOutcome",
    "ExitAction",
    "GatePolicy",
    "GateResult",
    "GateStatus",
    "RunSettings",
    "SeverityTier",
    "TierCounts",
    "classify",
    "classify_environment",
    "decide",
    "enforce",
    "evaluate",
    "load_report",
    "load_settings",
    "parse_report",
    "run_gate",
    "tally",
]
