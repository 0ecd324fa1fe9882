# scout_gate/report.py
"""
Gate report artifacts.

Writes, into the report directory:
  - gate-result.json              machine-readable record for later steps
  - docker-security-summary.md    human-readable summary
  - scout-cves.sarif              the scan that was gated (or a minimal SARIF)
  - any available enrichment files (SBOM, recommendations)

``write_reports`` never raises. The JSON record and the summary are staged
first and renamed into place together, record last, so a reader never sees
one without the other.
"""

from __future__ import annotations

import json
import os
import shutil
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Sequence

from scout_gate.config import DEFAULT_IO_TIMEOUT, GatePolicy
from scout_gate.decision import block_reason
from scout_gate.fsio import atomic_write_json, run_with_timeout, stage_text
from scout_gate.ingest import MINIMAL_SARIF
from scout_gate.log import get_logger
from scout_gate.models import (
    EnforcementOutcome,
    Enrichment,
    GateResult,
    GateStatus,
    ReportArtifacts,
    TierCounts,
)
from scout_gate.pdf import render_pdf

logger = get_logger("report")

SCHEMA_VERSION = "1.0"
RECORD_NAME = "gate-result.json"
SUMMARY_NAME = "docker-security-summary.md"
SARIF_NAME = "scout-cves.sarif"

SEVERITY_ROWS = (
    ("🔴 Critical", "critical"),
    ("🟠 High", "high"),
    ("🟡 Medium", "medium"),
    ("🔵 Low", "low"),
    ("⚪ None", "none"),
)


def now_utc() -> str:
    return datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


# =====================================================
# Enrichments
# =====================================================
def _load_json(path: Path) -> Optional[Any]:
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except Exception as exc:  # noqa: BLE001
        logger.warning("Failed to load %s: %s", path, exc)
        return None


def load_enrichment(name: str, path: Optional[str]) -> Enrichment:
    """Describe an optional artifact. Missing or broken files are just unavailable."""
    if not path:
        return Enrichment(name=name)
    p = Path(path)
    try:
        if not p.is_file() or p.stat().st_size == 0:
            return Enrichment(name=name, path=str(p), available=False, detail="not generated")
        data = _load_json(p)
        if data is None:
            return Enrichment(name=name, path=str(p), available=False, detail="unreadable")
        detail = _enrichment_detail(data)
    except Exception as exc:  # noqa: BLE001
        logger.warning("Failed to inspect %s: %s", p, exc)
        return Enrichment(name=name, path=str(p), available=False, detail="unreadable")
    return Enrichment(name=name, path=str(p), available=True, detail=detail)


def _enrichment_detail(data: Any) -> str:
    if not isinstance(data, dict):
        return ""
    if isinstance(data.get("packages"), list):
        return f"{len(data['packages'])} package(s)"
    if isinstance(data.get("runs"), list):
        results = sum(
            len(run["results"])
            for run in data["runs"]
            if isinstance(run, dict) and isinstance(run.get("results"), list)
        )
        return f"{results} recommendation(s)"
    return ""


# =====================================================
# Record + summary
# =====================================================
def _notes(result: GateResult) -> List[str]:
    notes = list(result.notes)
    if result.degraded_input:
        notes.append("Scan report missing or unreadable; an empty report was used.")
    if result.dark_data_fallback:
        notes.append(
            "No finding reached Medium or above; all findings counted as Medium "
            "(conservative fallback, not a measured severity)."
        )
    if result.unscored:
        notes.append(f"{result.unscored} finding(s) had no extractable severity score.")
    return notes


def build_record(
    result: GateResult,
    outcome: Optional[EnforcementOutcome] = None,
    enrichments: Sequence[Enrichment] = (),
    policy: Optional[GatePolicy] = None,
) -> Dict[str, Any]:
    policy = policy or GatePolicy()
    return {
        "schema_version": SCHEMA_VERSION,
        "meta": {
            "image": result.image,
            "branch": result.branch,
            "commit": result.commit,
            "generated_at": result.timestamp,
        },
        "counts": result.counts.as_dict(),
        "total": result.counts.total,
        "security_gate": result.status.value,
        "reason": block_reason(result.counts, result.status, policy),
        "enforcement": {
            "environment": outcome.environment.value if outcome else None,
            "action": outcome.action.value if outcome else None,
            "exit_code": outcome.exit_code if outcome else None,
        },
        "policy": {
            "critical_threshold": policy.critical_threshold,
            "high_threshold": policy.high_threshold,
            "tier_priority": [t.value for t in policy.tier_priority],
            "protected_branch": policy.protected_branch,
        },
        "degraded_input": result.degraded_input,
        "dark_data_fallback": result.dark_data_fallback,
        "unscored": result.unscored,
        "notes": _notes(result),
        "enrichments": [
            {"name": e.name, "path": e.path, "available": e.available, "detail": e.detail}
            for e in enrichments
        ],
    }


def _verdict_lines(result: GateResult, policy: GatePolicy) -> List[str]:
    reason = block_reason(result.counts, result.status, policy)
    if result.status is GateStatus.BLOCK_CRITICAL:
        return [
            "## ❌ Security Gate: BLOCKED",
            f"**Reason:** {reason}",
            "**Action:** Deployment blocked for security",
        ]
    if result.status is GateStatus.BLOCK_HIGH:
        return [
            "## ⚠️ Security Gate: BLOCKED",
            f"**Reason:** {reason}",
            "**Action:** Deployment blocked - please remediate high-severity issues",
        ]
    return [
        "## ✅ Security Gate: PASSED",
        "**Status:** Safe to deploy",
        "**Action:** Proceeding with deployment",
    ]


def render_summary(
    result: GateResult,
    outcome: Optional[EnforcementOutcome] = None,
    enrichments: Sequence[Enrichment] = (),
    policy: Optional[GatePolicy] = None,
) -> str:
    policy = policy or GatePolicy()
    counts: TierCounts = result.counts

    md: List[str] = []
    md.append("# Docker Security Scan Report")
    md.append("")
    md.append(f"**Generated:** {result.timestamp}")
    md.append(f"**Image:** `{result.image}`")
    md.append(f"**Branch:** `{result.branch}`")
    md.append(f"**Commit:** `{result.commit}`")
    md.append(f"**Security Gate:** {result.status.value}")
    md.append("")

    md.append("## Vulnerability Summary")
    md.append("")
    md.append("| Severity Level | Count |")
    md.append("|----------------|-------|")
    for label, key in SEVERITY_ROWS:
        md.append(f"| {label} | {getattr(counts, key)} |")
    md.append(f"| **Total** | {counts.total} |")
    md.append("")

    md.extend(_verdict_lines(result, policy))
    if outcome is not None:
        md.append(
            f"**Enforcement:** `{outcome.action.value}` "
            f"({outcome.environment.value} environment, exit code {outcome.exit_code})"
        )
    md.append("")

    notes = _notes(result)
    if notes:
        md.append("## Notes")
        md.append("")
        for note in notes:
            md.append(f"- {note}")
        md.append("")

    md.append("## Files Generated")
    md.append("")
    md.append(f"- `{SARIF_NAME}` - Vulnerability details in SARIF format")
    md.append(f"- `{RECORD_NAME}` - Machine-readable gate result")
    for e in enrichments:
        name = Path(e.path).name if e.path else e.name
        if e.available:
            suffix = f" ({e.detail})" if e.detail else ""
            md.append(f"- `{name}` - {e.name}{suffix}")
        else:
            md.append(f"- `{name}` - {e.name} not available")
    md.append("")

    md.append("## Next Steps")
    md.append("")
    md.append("1. Review detailed vulnerabilities in GitHub Security tab")
    md.append("2. Check base image recommendations for updates")
    md.append("3. Update dependencies if vulnerabilities found")
    md.append("4. Re-run scan after fixes")
    md.append("")

    return "\n".join(md)


# =====================================================
# Writing
# =====================================================
def _copy_scan(out_dir: Path, scan_path: Optional[str], usable: bool) -> Optional[Path]:
    target = out_dir / SARIF_NAME
    if usable:
        if not scan_path or not Path(scan_path).is_file():
            return None
        if Path(scan_path).resolve() != target.resolve():
            tmp = target.with_name(f".{SARIF_NAME}.tmp")
            shutil.copyfile(scan_path, tmp)
            os.replace(tmp, target)
        return target
    logger.warning("No usable scan output, writing minimal SARIF to %s", target)
    return atomic_write_json(target, MINIMAL_SARIF)


def _copy_enrichments(out_dir: Path, enrichments: Iterable[Enrichment], artifacts: ReportArtifacts) -> None:
    for e in enrichments:
        if not e.available or not e.path:
            continue
        src = Path(e.path)
        dst = out_dir / src.name
        try:
            if src.resolve() != dst.resolve():
                shutil.copyfile(src, dst)
            artifacts.copied.append(str(dst))
        except OSError as exc:
            logger.warning("Could not copy %s: %s", src, exc)
            artifacts.errors.append(f"copy {src.name}: {exc}")


def _write_pair(out_dir: Path, record: Dict[str, Any], summary: str) -> None:
    record_path = out_dir / RECORD_NAME
    summary_path = out_dir / SUMMARY_NAME
    staged = []
    try:
        staged.append(stage_text(summary_path, summary))
        staged.append(stage_text(record_path, json.dumps(record, indent=2, sort_keys=True) + "\n"))
        os.replace(staged[0], summary_path)
        os.replace(staged[1], record_path)
    finally:
        for tmp in staged:
            tmp.unlink(missing_ok=True)


def write_reports(
    result: GateResult,
    outcome: Optional[EnforcementOutcome],
    out_dir: str | Path,
    scan_path: Optional[str] = None,
    scan_usable: bool = True,
    enrichments: Sequence[Enrichment] = (),
    policy: Optional[GatePolicy] = None,
    timeout: float = DEFAULT_IO_TIMEOUT,
    pdf: bool = False,
) -> ReportArtifacts:
    """Persist the record and summary (plus extras). Never raises."""
    artifacts = ReportArtifacts()
    out = Path(out_dir)

    try:
        record = build_record(result, outcome, enrichments, policy)
        summary = render_summary(result, outcome, enrichments, policy)
    except Exception as exc:  # noqa: BLE001
        logger.exception("Failed to render gate report")
        artifacts.errors.append(f"render: {exc}")
        return artifacts

    try:
        out.mkdir(parents=True, exist_ok=True)
        run_with_timeout(_write_pair, timeout, out, record, summary)
        artifacts.record = str(out / RECORD_NAME)
        artifacts.summary = str(out / SUMMARY_NAME)
        logger.info("Security report written to %s", out)
    except Exception as exc:  # noqa: BLE001
        logger.error("Failed to write gate report to %s: %s", out, exc)
        artifacts.errors.append(f"write: {exc}")
        return artifacts

    try:
        sarif = run_with_timeout(_copy_scan, timeout, out, scan_path, scan_usable)
        artifacts.sarif = str(sarif) if sarif else None
    except Exception as exc:  # noqa: BLE001
        logger.warning("Failed to store scan SARIF: %s", exc)
        artifacts.errors.append(f"sarif: {exc}")

    _copy_enrichments(out, enrichments, artifacts)

    if pdf:
        try:
            artifacts.pdf = str(render_pdf(result, outcome, out, policy))
        except Exception as exc:  # noqa: BLE001
            logger.warning("PDF summary skipped: %s", exc)
            artifacts.errors.append(f"pdf: {exc}")

    return artifacts
