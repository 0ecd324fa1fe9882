# scout_gate/config.py

from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Mapping, Optional, Sequence, Tuple

from dotenv import load_dotenv

from scout_gate.models import GateStatus, SeverityTier

# =====================================================
# Defaults
# =====================================================
DEFAULT_PROTECTED_BRANCH = "main"
DEFAULT_HIGH_THRESHOLD = 5
DEFAULT_CRITICAL_THRESHOLD = 0
DEFAULT_TIER_PRIORITY: Tuple[SeverityTier, ...] = (SeverityTier.CRITICAL, SeverityTier.HIGH)
DEFAULT_REPORT_DIR = "security-reports"
DEFAULT_IO_TIMEOUT = 30.0

# tiers that can block, and the status each one produces
BLOCKING_TIERS = {
    SeverityTier.CRITICAL: GateStatus.BLOCK_CRITICAL,
    SeverityTier.HIGH: GateStatus.BLOCK_HIGH,
}


class ConfigError(ValueError):
    pass


def parse_tier_priority(value: str | Sequence[str]) -> Tuple[SeverityTier, ...]:
    """Parse ``"critical,high"`` (or a list of names) into blocking tiers."""
    if isinstance(value, str):
        names = [v.strip() for v in value.split(",") if v.strip()]
    else:
        names = [str(v).strip() for v in value]

    tiers = []
    for name in names:
        try:
            tier = SeverityTier(name.lower())
        except ValueError:
            raise ConfigError(f"unknown severity tier: {name!r}") from None
        if tier not in BLOCKING_TIERS:
            raise ConfigError(f"tier {name!r} cannot block the gate")
        if tier in tiers:
            raise ConfigError(f"tier {name!r} listed twice")
        tiers.append(tier)

    if not tiers:
        raise ConfigError("tier priority must name at least one tier")
    return tuple(tiers)


@dataclass(frozen=True)
class GatePolicy:
    """Thresholds for the gate decision.

    A tier blocks when its count is strictly greater than its threshold.
    Tiers are checked in ``tier_priority`` order and the first one over
    its threshold decides the status.
    """

    high_threshold: int = DEFAULT_HIGH_THRESHOLD
    critical_threshold: int = DEFAULT_CRITICAL_THRESHOLD
    tier_priority: Tuple[SeverityTier, ...] = DEFAULT_TIER_PRIORITY
    protected_branch: str = DEFAULT_PROTECTED_BRANCH

    def __post_init__(self) -> None:
        if self.high_threshold < 0 or self.critical_threshold < 0:
            raise ConfigError("thresholds must be non-negative")
        priority = self.tier_priority
        if not isinstance(priority, str):
            priority = [t.value if isinstance(t, SeverityTier) else t for t in priority]
        object.__setattr__(self, "tier_priority", parse_tier_priority(priority))
        if not self.protected_branch:
            raise ConfigError("protected branch must not be empty")

    def threshold_for(self, tier: SeverityTier) -> int:
        if tier is SeverityTier.CRITICAL:
            return self.critical_threshold
        if tier is SeverityTier.HIGH:
            return self.high_threshold
        raise ConfigError(f"no threshold for tier {tier.value}")


@dataclass(frozen=True)
class RunSettings:
    """Per-invocation values that are not policy."""

    policy: GatePolicy = field(default_factory=GatePolicy)
    report_dir: str = DEFAULT_REPORT_DIR
    io_timeout: float = DEFAULT_IO_TIMEOUT
    image: str = "unknown"
    branch: str = "unknown"
    commit: str = "unknown"
    slack_webhook: Optional[str] = None
    log_level: str = "INFO"


# =====================================================
# Environment loading
# =====================================================
def _env_int(env: Mapping[str, str], key: str, default: int) -> int:
    raw = env.get(key)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        raise ConfigError(f"{key} must be an integer, got {raw!r}") from None


def _env_float(env: Mapping[str, str], key: str, default: float) -> float:
    raw = env.get(key)
    if raw is None or raw.strip() == "":
        return default
    try:
        return float(raw)
    except ValueError:
        raise ConfigError(f"{key} must be a number, got {raw!r}") from None


def load_settings(env: Optional[Mapping[str, str]] = None, dotenv: bool = True) -> RunSettings:
    """Build settings from ``.env`` and the process environment."""
    if env is None:
        if dotenv:
            load_dotenv()
        env = os.environ

    policy = GatePolicy(
        high_threshold=_env_int(env, "GATE_HIGH_THRESHOLD", DEFAULT_HIGH_THRESHOLD),
        critical_threshold=_env_int(env, "GATE_CRITICAL_THRESHOLD", DEFAULT_CRITICAL_THRESHOLD),
        tier_priority=parse_tier_priority(env.get("GATE_TIER_PRIORITY") or "critical,high"),
        protected_branch=env.get("GATE_PROTECTED_BRANCH") or DEFAULT_PROTECTED_BRANCH,
    )

    return RunSettings(
        policy=policy,
        report_dir=env.get("GATE_REPORT_DIR") or DEFAULT_REPORT_DIR,
        io_timeout=_env_float(env, "GATE_IO_TIMEOUT", DEFAULT_IO_TIMEOUT),
        image=env.get("IMAGE_NAME") or "unknown",
        branch=env.get("GITHUB_REF_NAME") or "unknown",
        commit=env.get("GITHUB_SHA") or "unknown",
        slack_webhook=env.get("SLACK_WEBHOOK_URL") or None,
        log_level=env.get("GATE_LOG_LEVEL") or "INFO",
    )
