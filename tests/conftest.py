"""Pytest configuration and fixtures for scout-gate tests."""
import pytest

from scout_gate.log import logger as gate_logger

GATE_ENV = (
    "GITHUB_OUTPUT",
    "GITHUB_STEP_SUMMARY",
    "GITHUB_REF_NAME",
    "GITHUB_SHA",
    "GITHUB_REPOSITORY",
    "GITHUB_RUN_ID",
    "IMAGE_NAME",
    "SLACK_WEBHOOK_URL",
    "GATE_PROTECTED_BRANCH",
    "GATE_HIGH_THRESHOLD",
    "GATE_CRITICAL_THRESHOLD",
    "GATE_TIER_PRIORITY",
    "GATE_REPORT_DIR",
    "GATE_IO_TIMEOUT",
    "GATE_LOG_LEVEL",
)


@pytest.fixture(autouse=True)
def isolated_env(monkeypatch, tmp_path):
    """Keep CI variables from the host out of tests and run in a temp dir."""
    for key in GATE_ENV:
        monkeypatch.delenv(key, raising=False)
    monkeypatch.chdir(tmp_path)
    yield
    # handlers bound to a captured stderr must not outlive the test
    for handler in list(gate_logger.handlers):
        gate_logger.removeHandler(handler)
