from __future__ import annotations

from collections import Counter
from typing import Iterable

from scout_gate.models import Classification, ClassifiedFinding, SeverityTier, TierCounts


def tally(classified: Classification | Iterable[ClassifiedFinding]) -> TierCounts:
    """Count classified findings per tier."""
    findings = classified.findings if isinstance(classified, Classification) else classified
    counter = Counter(cf.tier for cf in findings)
    return TierCounts(**{tier.value: counter.get(tier, 0) for tier in SeverityTier})
