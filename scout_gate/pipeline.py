# scout_gate/pipeline.py

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping, Optional, Sequence

from scout_gate import ci
from scout_gate.aggregate import tally
from scout_gate.classifier import DEFAULT_STRATEGIES, classify
from scout_gate.config import GatePolicy, RunSettings
from scout_gate.decision import decide
from scout_gate.enforce import classify_environment, enforce
from scout_gate.ingest import Source, load_report
from scout_gate.log import get_logger
from scout_gate.models import (
    DeploymentEnvironment,
    EnforcementOutcome,
    GateResult,
    ReportArtifacts,
    ScanReport,
)
from scout_gate.notify import send_gate_notification
from scout_gate.report import load_enrichment, now_utc, render_summary, write_reports

logger = get_logger("pipeline")


@dataclass(frozen=True)
class GateRun:
    report: ScanReport
    outcome: EnforcementOutcome
    artifacts: ReportArtifacts

    @property
    def result(self) -> GateResult:
        return self.outcome.result

    @property
    def exit_code(self) -> int:
        return self.outcome.exit_code


def evaluate(
    report: ScanReport,
    policy: Optional[GatePolicy] = None,
    image: str = "unknown",
    branch: str = "unknown",
    commit: str = "unknown",
    timestamp: Optional[str] = None,
    strategies: Sequence[Any] = DEFAULT_STRATEGIES,
) -> GateResult:
    """Classify, tally and decide. Pure apart from the default timestamp."""
    classification = classify(report, strategies)
    counts = tally(classification)
    status = decide(counts, policy)

    notes = ()
    if report.degraded and report.reason:
        notes = (f"Input: {report.reason}",)

    return GateResult(
        counts=counts,
        status=status,
        image=image,
        branch=branch,
        commit=commit,
        timestamp=timestamp or now_utc(),
        degraded_input=report.degraded,
        dark_data_fallback=classification.dark_data_fallback,
        unscored=classification.unscored,
        notes=notes,
    )


def run_gate(
    source: Source,
    settings: Optional[RunSettings] = None,
    environment: Optional[DeploymentEnvironment] = None,
    sbom: Optional[str] = None,
    recommendations: Optional[str] = None,
    pdf: bool = False,
    timestamp: Optional[str] = None,
    env: Optional[Mapping[str, str]] = None,
) -> GateRun:
    """Run every stage and persist the report before anyone acts on the outcome."""
    settings = settings or RunSettings()
    policy = settings.policy

    report = load_report(source, timeout=settings.io_timeout)
    result = evaluate(
        report,
        policy,
        image=settings.image,
        branch=settings.branch,
        commit=settings.commit,
        timestamp=timestamp,
    )
    if environment is None:
        environment = classify_environment(settings.branch, policy.protected_branch)
    outcome = enforce(result, environment, policy.protected_branch)

    logger.info(
        "Gate %s (critical=%d high=%d medium=%d) on %s -> %s",
        result.status.value,
        result.counts.critical,
        result.counts.high,
        result.counts.medium,
        environment.value,
        outcome.action.value,
    )

    enrichments = [
        load_enrichment("SBOM", sbom),
        load_enrichment("Base image recommendations", recommendations),
    ]
    enrichments = [e for e in enrichments if e.path]

    scan_path = str(source) if isinstance(source, (str, Path)) else None
    artifacts = write_reports(
        result,
        outcome,
        settings.report_dir,
        scan_path=scan_path,
        scan_usable=not report.degraded,
        enrichments=enrichments,
        policy=policy,
        timeout=settings.io_timeout,
        pdf=pdf,
    )
    for err in artifacts.errors:
        logger.warning("Report issue: %s", err)

    ci.export_outputs(outcome, env)
    ci.append_step_summary(render_summary(result, outcome, enrichments, policy), env)
    send_gate_notification(outcome, settings.slack_webhook, env)

    return GateRun(report=report, outcome=outcome, artifacts=artifacts)
