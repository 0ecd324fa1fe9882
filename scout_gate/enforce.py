# scout_gate/enforce.py

from __future__ import annotations

from typing import List, Optional

from scout_gate.config import DEFAULT_PROTECTED_BRANCH
from scout_gate.models import DeploymentEnvironment, EnforcementOutcome, ExitAction, GateResult

REF_PREFIX = "refs/heads/"


def _short_branch(branch: str) -> str:
    branch = (branch or "").strip()
    if branch.startswith(REF_PREFIX):
        return branch[len(REF_PREFIX):]
    return branch


def classify_environment(branch: str, protected_branch: str = DEFAULT_PROTECTED_BRANCH) -> DeploymentEnvironment:
    """Production when the branch is the protected release branch."""
    if _short_branch(branch) and _short_branch(branch) == _short_branch(protected_branch):
        return DeploymentEnvironment.PRODUCTION
    return DeploymentEnvironment.DEVELOPMENT


def _count_lines(result: GateResult) -> List[str]:
    c = result.counts
    return [
        f"Critical vulnerabilities: {c.critical}",
        f"High vulnerabilities: {c.high}",
        f"Medium vulnerabilities: {c.medium}",
    ]


def enforce(
    result: GateResult,
    environment: Optional[DeploymentEnvironment] = None,
    protected_branch: str = DEFAULT_PROTECTED_BRANCH,
) -> EnforcementOutcome:
    """Map a gate result to an exit action.

    Without an explicit environment, the result's branch is compared against
    ``protected_branch`` (pass the configured ``GatePolicy.protected_branch``).
    """
    environment = environment or classify_environment(result.branch, protected_branch)

    if not result.status.blocked:
        return EnforcementOutcome(
            result=result,
            environment=environment,
            action=ExitAction.CONTINUE,
            messages=("Security gate passed, proceeding with deployment.",),
        )

    messages = ["SECURITY GATE FAILED", *_count_lines(result)]

    if environment is DeploymentEnvironment.PRODUCTION:
        messages += [
            "PRODUCTION DEPLOYMENT BLOCKED",
            f"Branch '{result.branch}' is protected - strict security enforcement is active.",
            "Please address security vulnerabilities before proceeding.",
        ]
        return EnforcementOutcome(
            result=result,
            environment=environment,
            action=ExitAction.ABORT,
            messages=tuple(messages),
            annotation=(
                "::error::Production deployment blocked due to security vulnerabilities "
                f"({result.status.value}: critical={result.counts.critical}, high={result.counts.high})"
            ),
        )

    messages += [
        "DEVELOPMENT BRANCH WARNING",
        "Security issues detected, but allowing deployment on non-production branch.",
        "Please address these issues before merging to the protected branch.",
    ]
    return EnforcementOutcome(
        result=result,
        environment=environment,
        action=ExitAction.CONTINUE_WITH_WARNING,
        messages=tuple(messages),
        annotation=(
            "::warning::Security vulnerabilities detected - recommended to fix before production "
            f"({result.status.value}: critical={result.counts.critical}, high={result.counts.high})"
        ),
    )
