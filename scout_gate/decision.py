# scout_gate/decision.py

from __future__ import annotations

from typing import Optional

from scout_gate.config import BLOCKING_TIERS, GatePolicy
from scout_gate.models import GateStatus, SeverityTier, TierCounts

_DEFAULT_POLICY = GatePolicy()


def decide(counts: TierCounts, policy: Optional[GatePolicy] = None) -> GateStatus:
    """Gate status from tier counts alone. Branch plays no part here."""
    policy = policy or _DEFAULT_POLICY
    for tier in policy.tier_priority:
        if counts[tier] > policy.threshold_for(tier):
            return BLOCKING_TIERS[tier]
    return GateStatus.PASS


def block_reason(counts: TierCounts, status: GateStatus, policy: Optional[GatePolicy] = None) -> str:
    policy = policy or _DEFAULT_POLICY
    if status is GateStatus.BLOCK_CRITICAL:
        limit = policy.threshold_for(SeverityTier.CRITICAL)
        if limit == 0:
            return f"Critical vulnerabilities detected ({counts.critical} found)"
        return f"Too many critical vulnerabilities ({counts.critical} > {limit})"
    if status is GateStatus.BLOCK_HIGH:
        limit = policy.threshold_for(SeverityTier.HIGH)
        return f"Too many high-severity vulnerabilities ({counts.high} > {limit})"
    return "No blocking vulnerabilities above policy thresholds"
