from __future__ import annotations

import io
import os
from pathlib import Path
from typing import Optional

from reportlab.lib.pagesizes import A4
from reportlab.pdfgen import canvas

from scout_gate.config import GatePolicy
from scout_gate.decision import block_reason
from scout_gate.fsio import stage_bytes
from scout_gate.models import EnforcementOutcome, GateResult

PDF_NAME = "docker-security-summary.pdf"


def render_pdf(
    result: GateResult,
    outcome: Optional[EnforcementOutcome],
    out_dir: str | Path,
    policy: Optional[GatePolicy] = None,
) -> Path:
    """One-page PDF of the gate verdict, for audit attachments."""
    policy = policy or GatePolicy()
    buf = io.BytesIO()
    c = canvas.Canvas(buf, pagesize=A4)
    w, h = A4

    y = h - 72

    def line(txt, size=12, dy=18):
        nonlocal y
        c.setFont("Helvetica", size)
        c.drawString(72, y, txt)
        y -= dy

    line("Docker Security Scan Report", 16, 26)
    line(f"Image: {result.image}", 11)
    line(f"Branch: {result.branch}", 11)
    line(f"Commit: {result.commit}", 11)
    line(f"Generated: {result.timestamp}", 11)
    line("", 11, 10)

    line(f"Security Gate: {result.status.value}", 14, 24)
    line(block_reason(result.counts, result.status, policy), 11)
    if outcome is not None:
        line(f"Enforcement: {outcome.action.value} ({outcome.environment.value})", 11)

    line("", 11, 14)
    line("Vulnerability Summary", 13, 20)
    for tier, count in result.counts.as_dict().items():
        line(f"{tier.capitalize()}: {count}")
    line(f"Total: {result.counts.total}")

    if result.degraded_input or result.dark_data_fallback:
        line("", 11, 14)
        line("Notes", 13, 20)
        if result.degraded_input:
            line("Scan report missing or unreadable; an empty report was used.", 10)
        if result.dark_data_fallback:
            line("All findings counted as Medium (no severity reached Medium or above).", 10)

    c.showPage()
    c.save()

    target = Path(out_dir) / PDF_NAME
    tmp = stage_bytes(target, buf.getvalue())
    os.replace(tmp, target)
    return target
