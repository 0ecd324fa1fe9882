# scout_gate/models.py

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Mapping, Optional, Tuple


# =====================================================
# Enumerations
# =====================================================
class SeverityTier(str, Enum):
    CRITICAL = "critical"
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"
    NONE = "none"


class GateStatus(str, Enum):
    PASS = "PASS"
    BLOCK_CRITICAL = "BLOCK_CRITICAL"
    BLOCK_HIGH = "BLOCK_HIGH"

    @property
    def blocked(self) -> bool:
        return self is not GateStatus.PASS


class ExitAction(str, Enum):
    CONTINUE = "continue"
    CONTINUE_WITH_WARNING = "continue_with_warning"
    ABORT = "abort"

    @property
    def exit_code(self) -> int:
        return 1 if self is ExitAction.ABORT else 0


class DeploymentEnvironment(str, Enum):
    PRODUCTION = "production"
    DEVELOPMENT = "development"


LEVELS = ("error", "warning", "note")


# =====================================================
# Ingestion
# =====================================================
@dataclass(frozen=True)
class RawFinding:
    """One SARIF result, flattened out of its run."""

    level: Optional[str] = None
    rule_id: str = ""
    properties: Mapping[str, Any] = field(default_factory=dict)
    rule_properties: Mapping[str, Any] = field(default_factory=dict)
    rule_index: Any = None


@dataclass(frozen=True)
class ScanReport:
    findings: Tuple[RawFinding, ...] = ()
    degraded: bool = False
    reason: Optional[str] = None
    source: str = "<none>"
    tool_name: Optional[str] = None

    def __len__(self) -> int:
        return len(self.findings)


# =====================================================
# Classification
# =====================================================
@dataclass(frozen=True)
class Finding:
    level: str = "note"
    severity_score: float = 0.0
    rule_id: str = ""
    score_source: str = "default"


@dataclass(frozen=True)
class ClassifiedFinding:
    finding: Finding
    tier: SeverityTier
    reclassified: bool = False


@dataclass(frozen=True)
class Classification:
    findings: Tuple[ClassifiedFinding, ...] = ()
    dark_data_fallback: bool = False
    unscored: int = 0


@dataclass(frozen=True)
class TierCounts:
    critical: int = 0
    high: int = 0
    medium: int = 0
    low: int = 0
    none: int = 0

    def __post_init__(self) -> None:
        for tier in SeverityTier:
            if getattr(self, tier.value) < 0:
                raise ValueError(f"negative count for tier {tier.value}")

    def __getitem__(self, tier: SeverityTier) -> int:
        return getattr(self, SeverityTier(tier).value)

    @property
    def total(self) -> int:
        return sum(self[tier] for tier in SeverityTier)

    def as_dict(self) -> Dict[str, int]:
        return {tier.value: self[tier] for tier in SeverityTier}


# =====================================================
# Decision / enforcement
# =====================================================
@dataclass(frozen=True)
class GateResult:
    counts: TierCounts
    status: GateStatus
    image: str
    branch: str
    commit: str
    timestamp: str
    degraded_input: bool = False
    dark_data_fallback: bool = False
    unscored: int = 0
    notes: Tuple[str, ...] = ()


@dataclass(frozen=True)
class EnforcementOutcome:
    result: GateResult
    environment: DeploymentEnvironment
    action: ExitAction
    messages: Tuple[str, ...] = ()
    annotation: Optional[str] = None

    @property
    def exit_code(self) -> int:
        return self.action.exit_code


# =====================================================
# Reporting
# =====================================================
@dataclass(frozen=True)
class Enrichment:
    """Optional side artifact (SBOM, base image recommendations)."""

    name: str
    path: Optional[str] = None
    available: bool = False
    detail: str = ""


@dataclass
class ReportArtifacts:
    record: Optional[str] = None
    summary: Optional[str] = None
    sarif: Optional[str] = None
    pdf: Optional[str] = None
    copied: list = field(default_factory=list)
    errors: list = field(default_factory=list)

    @property
    def complete(self) -> bool:
        return self.record is not None and self.summary is not None
