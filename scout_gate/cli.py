#!/usr/bin/env python3
"""
gate-eval: Docker Scout CVE security gate.

Exit code:
  0 = continue (gate passed, or blocked on a non-protected branch)
  1 = blocked on the protected branch
  2 = usage / configuration error
"""

from __future__ import annotations

import argparse
import sys
from dataclasses import replace
from typing import List, Optional

from scout_gate.ci import print_outcome
from scout_gate.config import ConfigError, GatePolicy, load_settings, parse_tier_priority
from scout_gate.log import setup_logging
from scout_gate.models import DeploymentEnvironment
from scout_gate.pipeline import run_gate


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(
        prog="gate-eval",
        description="Classify Docker Scout CVE findings and gate the deployment.",
    )
    ap.add_argument("--input", "-i", help="Path to scout-cves.sarif (missing file is allowed)")
    ap.add_argument("--branch", help="Branch being built (default: $GITHUB_REF_NAME)")
    ap.add_argument("--protected-branch", help="Release branch with strict enforcement (default: main)")
    ap.add_argument(
        "--environment",
        choices=[e.value for e in DeploymentEnvironment],
        help="Override the environment derived from the branch",
    )
    ap.add_argument("--high-threshold", type=int, help="Block when High count is greater than this (default: 5)")
    ap.add_argument("--critical-threshold", type=int, help="Block when Critical count is greater than this (default: 0)")
    ap.add_argument("--tier-priority", help="Order tiers are checked in, e.g. critical,high")
    ap.add_argument("--image", help="Image reference (default: $IMAGE_NAME)")
    ap.add_argument("--commit", help="Commit id (default: $GITHUB_SHA)")
    ap.add_argument("--out", "-o", help="Report directory (default: security-reports)")
    ap.add_argument("--sbom", help="Optional SBOM file to attach")
    ap.add_argument("--recommendations", help="Optional recommendations SARIF to attach")
    ap.add_argument("--pdf", action="store_true", help="Also render a PDF summary")
    ap.add_argument("--slack-webhook", help="Slack webhook for blocked gates (default: $SLACK_WEBHOOK_URL)")
    ap.add_argument("--timeout", type=float, help="Timeout in seconds for report I/O (default: 30)")
    ap.add_argument("--log-level", help="Logging level (default: INFO)")
    return ap


def main(argv: Optional[List[str]] = None) -> int:
    ap = build_parser()
    args = ap.parse_args(argv)

    try:
        settings = load_settings()
        policy = settings.policy
        policy = GatePolicy(
            high_threshold=policy.high_threshold if args.high_threshold is None else args.high_threshold,
            critical_threshold=policy.critical_threshold if args.critical_threshold is None else args.critical_threshold,
            tier_priority=parse_tier_priority(args.tier_priority) if args.tier_priority else policy.tier_priority,
            protected_branch=args.protected_branch or policy.protected_branch,
        )
        settings = replace(
            settings,
            policy=policy,
            branch=args.branch or settings.branch,
            image=args.image or settings.image,
            commit=args.commit or settings.commit,
            report_dir=args.out or settings.report_dir,
            io_timeout=settings.io_timeout if args.timeout is None else args.timeout,
            slack_webhook=args.slack_webhook or settings.slack_webhook,
            log_level=args.log_level or settings.log_level,
        )
    except ConfigError as exc:
        ap.error(str(exc))

    if settings.io_timeout <= 0:
        ap.error("--timeout must be positive")

    setup_logging(settings.log_level)

    environment = DeploymentEnvironment(args.environment) if args.environment else None
    run = run_gate(
        args.input,
        settings,
        environment=environment,
        sbom=args.sbom,
        recommendations=args.recommendations,
        pdf=args.pdf,
    )

    print_outcome(run.outcome)
    if run.artifacts.summary:
        print(f"📋 Security report created: {run.artifacts.summary}")
    return run.exit_code


if __name__ == "__main__":
    sys.exit(main())
