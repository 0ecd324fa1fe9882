# scout_gate/ci.py
"""GitHub Actions plumbing: step outputs, job summary, annotations."""

from __future__ import annotations

import os
from typing import Mapping, Optional

from scout_gate.log import get_logger
from scout_gate.models import EnforcementOutcome

logger = get_logger("ci")


def step_outputs(outcome: EnforcementOutcome) -> dict:
    result = outcome.result
    return {
        "CRITICAL_VULNS": result.counts.critical,
        "HIGH_VULNS": result.counts.high,
        "MEDIUM_VULNS": result.counts.medium,
        "LOW_VULNS": result.counts.low,
        "SECURITY_GATE": result.status.value,
        "GATE_ACTION": outcome.action.value,
        "BRANCH": result.branch,
        "IMAGE_NAME": result.image,
    }


def export_outputs(outcome: EnforcementOutcome, env: Optional[Mapping[str, str]] = None) -> bool:
    """Append step outputs to $GITHUB_OUTPUT. Returns False when not in Actions."""
    env = os.environ if env is None else env
    gh_out = env.get("GITHUB_OUTPUT")
    if not gh_out:
        return False
    try:
        with open(gh_out, "a", encoding="utf-8") as f:
            for key, value in step_outputs(outcome).items():
                f.write(f"{key}={value}\n")
    except OSError as exc:
        logger.warning("Could not write GITHUB_OUTPUT: %s", exc)
        return False
    return True


def append_step_summary(markdown: str, env: Optional[Mapping[str, str]] = None) -> bool:
    env = os.environ if env is None else env
    summary_file = env.get("GITHUB_STEP_SUMMARY")
    if not summary_file:
        return False
    try:
        with open(summary_file, "a", encoding="utf-8") as f:
            f.write(markdown)
            f.write("\n")
    except OSError as exc:
        logger.warning("Could not write GITHUB_STEP_SUMMARY: %s", exc)
        return False
    return True


def print_outcome(outcome: EnforcementOutcome) -> None:
    result = outcome.result
    print("")
    print("🛡️ Security Scan Results:")
    print(f"Critical: {result.counts.critical}")
    print(f"High: {result.counts.high}")
    print(f"Medium: {result.counts.medium}")
    print(f"🚦 Security Gate: {result.status.value}")
    print("")
    for msg in outcome.messages:
        print(msg)
    if outcome.annotation:
        print(outcome.annotation)
