# scout_gate/classifier.py
"""
Severity classification.

A score is pulled out of each finding by trying extraction strategies in a
fixed order; the first one that yields a number wins:

  1. ``severity``           (result properties)
  2. ``security-severity``  (result properties)
  3. ``ruleIndex`` ordinal
  4. 0.0

The score and the SARIF level then pick a tier. If a non-empty report ends
up with no Critical, High or Medium findings at all, every finding is moved
to Medium so an unreadable report cannot pass as clean.
"""

from __future__ import annotations

import math
from typing import Any, Iterable, Optional, Sequence, Tuple

from scout_gate.log import get_logger
from scout_gate.models import (
    LEVELS,
    Classification,
    ClassifiedFinding,
    Finding,
    RawFinding,
    ScanReport,
    SeverityTier,
)

logger = get_logger("classifier")

CRITICAL_MIN = 9.0
HIGH_MIN = 7.0
MEDIUM_MIN = 4.0
SCORE_MAX = 10.0


def to_score(value: Any) -> Optional[float]:
    """Coerce a severity candidate to a float, or None if it is not numeric."""
    if value is None or isinstance(value, bool):
        return None
    if not isinstance(value, (int, float, str)):
        return None
    try:
        score = float(value.strip() if isinstance(value, str) else value)
    except (OverflowError, ValueError):
        return None
    if not math.isfinite(score):
        return None
    return min(max(score, 0.0), SCORE_MAX)


# =====================================================
# Extraction strategies
# =====================================================
class PropertyScore:
    """Read a numeric property carried by the result itself."""

    def __init__(self, key: str) -> None:
        self.key = key
        self.name = key

    def extract(self, raw: RawFinding) -> Optional[float]:
        return to_score(raw.properties.get(self.key))

    def __repr__(self) -> str:
        return f"PropertyScore({self.key!r})"


class RulePropertyScore:
    """Read a numeric property from the rule a result points at.

    Not part of the default order. Pass it to ``classify`` explicitly to let
    rule-level ``security-severity`` (where Docker Scout puts it) count.
    """

    def __init__(self, key: str) -> None:
        self.key = key
        self.name = f"rule:{key}"

    def extract(self, raw: RawFinding) -> Optional[float]:
        return to_score(raw.rule_properties.get(self.key))

    def __repr__(self) -> str:
        return f"RulePropertyScore({self.key!r})"


class RuleOrdinalScore:
    name = "ruleIndex"

    def extract(self, raw: RawFinding) -> Optional[float]:
        return to_score(raw.rule_index)

    def __repr__(self) -> str:
        return "RuleOrdinalScore()"


DEFAULT_STRATEGIES: Tuple[Any, ...] = (
    PropertyScore("severity"),
    PropertyScore("security-severity"),
    RuleOrdinalScore(),
)


def extract_score(raw: RawFinding, strategies: Sequence[Any] = DEFAULT_STRATEGIES) -> Tuple[float, str]:
    for strategy in strategies:
        score = strategy.extract(raw)
        if score is not None:
            return score, strategy.name
    return 0.0, "default"


def normalize_level(level: Optional[str]) -> str:
    if isinstance(level, str) and level.strip().lower() in LEVELS:
        return level.strip().lower()
    return "note"


def to_finding(raw: RawFinding, strategies: Sequence[Any] = DEFAULT_STRATEGIES) -> Finding:
    score, source = extract_score(raw, strategies)
    return Finding(
        level=normalize_level(raw.level),
        severity_score=score,
        rule_id=raw.rule_id,
        score_source=source,
    )


# =====================================================
# Tiering
# =====================================================
def tier_for(level: str, score: float) -> SeverityTier:
    if level == "error" and score >= CRITICAL_MIN:
        return SeverityTier.CRITICAL
    if level == "error" and score >= HIGH_MIN:
        return SeverityTier.HIGH
    if level == "warning" and MEDIUM_MIN <= score < HIGH_MIN:
        return SeverityTier.MEDIUM
    if score > 0.0:
        return SeverityTier.LOW
    return SeverityTier.NONE


def _gating_tiers_empty(findings: Iterable[ClassifiedFinding]) -> bool:
    gating = (SeverityTier.CRITICAL, SeverityTier.HIGH, SeverityTier.MEDIUM)
    return not any(cf.tier in gating for cf in findings)


def classify(
    report: ScanReport | Iterable[RawFinding],
    strategies: Sequence[Any] = DEFAULT_STRATEGIES,
) -> Classification:
    raws = report.findings if isinstance(report, ScanReport) else tuple(report)

    classified = []
    unscored = 0
    for raw in raws:
        finding = to_finding(raw, strategies)
        if finding.score_source == "default":
            unscored += 1
        classified.append(ClassifiedFinding(finding=finding, tier=tier_for(finding.level, finding.severity_score)))

    if classified and _gating_tiers_empty(classified):
        logger.warning(
            "No Critical/High/Medium finding among %d result(s); "
            "counting all of them as Medium (%d without a severity score).",
            len(classified),
            unscored,
        )
        classified = [
            ClassifiedFinding(finding=cf.finding, tier=SeverityTier.MEDIUM, reclassified=True)
            for cf in classified
        ]
        return Classification(findings=tuple(classified), dark_data_fallback=True, unscored=unscored)

    return Classification(findings=tuple(classified), dark_data_fallback=False, unscored=unscored)
