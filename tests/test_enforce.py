"""Unit tests for branch-aware enforcement."""

from __future__ import annotations

import pytest

from scout_gate.enforce import classify_environment, enforce
from scout_gate.models import (
    DeploymentEnvironment,
    ExitAction,
    GateResult,
    GateStatus,
    TierCounts,
)


def gate_result(status: GateStatus, branch: str = "main", **counts: int) -> GateResult:
    return GateResult(
        counts=TierCounts(**counts),
        status=status,
        image="acr.example.io/app:latest",
        branch=branch,
        commit="abc1234",
        timestamp="2026-10-19T00:00:00Z",
    )


@pytest.mark.parametrize(
    "branch, protected, env",
    [
        ("main", "main", DeploymentEnvironment.PRODUCTION),
        ("refs/heads/main", "main", DeploymentEnvironment.PRODUCTION),
        ("release", "release", DeploymentEnvironment.PRODUCTION),
        ("dev", "main", DeploymentEnvironment.DEVELOPMENT),
        ("main-hotfix", "main", DeploymentEnvironment.DEVELOPMENT),
        ("", "main", DeploymentEnvironment.DEVELOPMENT),
    ],
)
def test_classify_environment(branch, protected, env) -> None:
    assert classify_environment(branch, protected) is env


@pytest.mark.parametrize("env", list(DeploymentEnvironment))
def test_pass_continues_everywhere(env) -> None:
    outcome = enforce(gate_result(GateStatus.PASS), env)
    assert outcome.action is ExitAction.CONTINUE
    assert outcome.exit_code == 0
    assert outcome.annotation is None


def test_block_critical_on_protected_branch_aborts() -> None:
    result = gate_result(GateStatus.BLOCK_CRITICAL, critical=2, high=1, medium=4)
    outcome = enforce(result, DeploymentEnvironment.PRODUCTION)
    assert outcome.action is ExitAction.ABORT
    assert outcome.exit_code == 1
    assert outcome.annotation.startswith("::error::")
    assert "Critical vulnerabilities: 2" in outcome.messages
    assert "High vulnerabilities: 1" in outcome.messages
    assert "Medium vulnerabilities: 4" in outcome.messages
    assert "PRODUCTION DEPLOYMENT BLOCKED" in outcome.messages


def test_block_critical_elsewhere_warns() -> None:
    result = gate_result(GateStatus.BLOCK_CRITICAL, branch="dev", critical=2)
    outcome = enforce(result, DeploymentEnvironment.DEVELOPMENT)
    assert outcome.action is ExitAction.CONTINUE_WITH_WARNING
    assert outcome.exit_code == 0
    assert outcome.annotation.startswith("::warning::")
    assert "BLOCK_CRITICAL" in outcome.annotation


def test_block_high_follows_same_asymmetry() -> None:
    result = gate_result(GateStatus.BLOCK_HIGH, high=6)
    assert enforce(result, DeploymentEnvironment.PRODUCTION).action is ExitAction.ABORT
    assert enforce(result, DeploymentEnvironment.DEVELOPMENT).action is ExitAction.CONTINUE_WITH_WARNING


def test_environment_defaults_from_branch() -> None:
    assert enforce(gate_result(GateStatus.BLOCK_HIGH, branch="main", high=9)).exit_code == 1
    assert enforce(gate_result(GateStatus.BLOCK_HIGH, branch="feature/x", high=9)).exit_code == 0


def test_environment_default_uses_given_protected_branch() -> None:
    result = gate_result(GateStatus.BLOCK_CRITICAL, branch="release", critical=1)
    assert enforce(result).exit_code == 0
    assert enforce(result, protected_branch="release").action is ExitAction.ABORT
    assert enforce(gate_result(GateStatus.BLOCK_CRITICAL, branch="main", critical=1), protected_branch="release").exit_code == 0
