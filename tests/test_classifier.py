"""Unit tests for severity score extraction, tiering and the dark-data fallback."""

from __future__ import annotations

import math

import pytest

from scout_gate.classifier import (
    DEFAULT_STRATEGIES,
    PropertyScore,
    RuleOrdinalScore,
    RulePropertyScore,
    classify,
    extract_score,
    normalize_level,
    tier_for,
    to_finding,
    to_score,
)
from scout_gate.models import RawFinding, ScanReport, SeverityTier


def raw(level="error", props=None, rule_props=None, rule_index=None) -> RawFinding:
    return RawFinding(
        level=level,
        rule_id="CVE-2024-0001",
        properties=props or {},
        rule_properties=rule_props or {},
        rule_index=rule_index,
    )


@pytest.mark.parametrize(
    "value, expected",
    [
        (7.5, 7.5),
        (9, 9.0),
        ("8.1", 8.1),
        (" 4 ", 4.0),
        (0, 0.0),
        (12.0, 10.0),
        (-3, 0.0),
        (None, None),
        (True, None),
        ("HIGH", None),
        ("", None),
        ([9.0], None),
        (math.nan, None),
        (math.inf, None),
        (10**400, None),
        ("1e400", None),
    ],
)
def test_to_score(value, expected) -> None:
    assert to_score(value) == expected


def test_severity_wins_over_security_severity() -> None:
    finding = raw(props={"severity": 9.5, "security-severity": 2.0}, rule_index=4)
    assert extract_score(finding) == (9.5, "severity")


def test_security_severity_used_when_severity_missing() -> None:
    finding = raw(props={"security-severity": "7.2"}, rule_index=4)
    assert extract_score(finding) == (7.2, "security-severity")


def test_rule_properties_ignored_by_default() -> None:
    finding = raw(props={"security-severity": 5.0}, rule_props={"severity": 9.9})
    assert extract_score(finding) == (5.0, "security-severity")

    finding = raw(rule_props={"security-severity": "9.8"}, rule_index=0)
    assert extract_score(finding) == (0.0, "ruleIndex")


def test_rule_level_score_only_when_requested() -> None:
    finding = raw(rule_props={"security-severity": "9.8"}, rule_index=0)
    strategies = (*DEFAULT_STRATEGIES[:2], RulePropertyScore("security-severity"), DEFAULT_STRATEGIES[2])
    assert extract_score(finding, strategies) == (9.8, "rule:security-severity")


def test_rule_level_score_does_not_block_by_default() -> None:
    report = ScanReport(findings=(raw(rule_props={"security-severity": "9.8"}, rule_index=0),))
    result = classify(report)
    assert result.dark_data_fallback is True
    assert result.findings[0].tier is SeverityTier.MEDIUM


def test_non_numeric_severity_falls_through() -> None:
    finding = raw(props={"severity": "CRITICAL", "security-severity": "9.0"})
    assert extract_score(finding) == (9.0, "security-severity")

    finding = raw(props={"severity": False}, rule_index=3)
    assert extract_score(finding) == (3.0, "ruleIndex")


def test_zero_is_a_value_not_a_miss() -> None:
    finding = raw(props={"severity": 0, "security-severity": 9.8})
    assert extract_score(finding) == (0.0, "severity")


def test_rule_ordinal_fallback_and_default() -> None:
    assert extract_score(raw(rule_index=8)) == (8.0, "ruleIndex")
    assert extract_score(raw()) == (0.0, "default")


def test_strategies_are_injectable() -> None:
    finding = raw(props={"severity": 2.0, "cvss": "9.9"})
    assert extract_score(finding, [PropertyScore("cvss")]) == (9.9, "cvss")
    assert extract_score(finding, [RuleOrdinalScore()]) == (0.0, "default")
    assert [s.name for s in DEFAULT_STRATEGIES] == ["severity", "security-severity", "ruleIndex"]


@pytest.mark.parametrize(
    "level, expected",
    [("error", "error"), ("WARNING", "warning"), (" note ", "note"), ("none", "note"), (None, "note"), ("", "note")],
)
def test_normalize_level(level, expected) -> None:
    assert normalize_level(level) == expected


def test_to_finding_defaults_missing_level_to_note() -> None:
    finding = to_finding(raw(level=None, props={"severity": 9.9}))
    assert finding.level == "note"
    assert finding.severity_score == 9.9
    assert finding.rule_id == "CVE-2024-0001"


@pytest.mark.parametrize(
    "level, score, tier",
    [
        ("error", 10.0, SeverityTier.CRITICAL),
        ("error", 9.0, SeverityTier.CRITICAL),
        ("error", 8.99, SeverityTier.HIGH),
        ("error", 7.0, SeverityTier.HIGH),
        ("error", 6.99, SeverityTier.LOW),
        ("warning", 4.0, SeverityTier.MEDIUM),
        ("warning", 6.99, SeverityTier.MEDIUM),
        ("warning", 7.0, SeverityTier.LOW),
        ("warning", 9.5, SeverityTier.LOW),
        ("warning", 3.99, SeverityTier.LOW),
        ("note", 9.5, SeverityTier.LOW),
        ("note", 0.0, SeverityTier.NONE),
        ("error", 0.0, SeverityTier.NONE),
    ],
)
def test_tier_table(level, score, tier) -> None:
    assert tier_for(level, score) is tier


def test_classify_keeps_order_and_counts_unscored() -> None:
    report = ScanReport(findings=(raw(props={"severity": 9.5}), raw(level="warning", props={"severity": 5.0}), raw()))
    result = classify(report)
    assert [cf.tier for cf in result.findings] == [SeverityTier.CRITICAL, SeverityTier.MEDIUM, SeverityTier.NONE]
    assert result.unscored == 1
    assert result.dark_data_fallback is False


def test_dark_data_fallback_moves_everything_to_medium() -> None:
    report = ScanReport(findings=(raw(), raw(level="warning"), raw(level=None)))
    result = classify(report)
    assert result.dark_data_fallback is True
    assert result.unscored == 3
    assert all(cf.tier is SeverityTier.MEDIUM for cf in result.findings)
    assert all(cf.reclassified for cf in result.findings)


def test_dark_data_fallback_also_covers_scored_low_findings() -> None:
    report = ScanReport(findings=(raw(props={"severity": 5.0}), raw(level="note", props={"severity": 9.0})))
    result = classify(report)
    assert result.dark_data_fallback is True
    assert result.unscored == 0
    assert [cf.tier for cf in result.findings] == [SeverityTier.MEDIUM, SeverityTier.MEDIUM]


def test_no_fallback_when_a_gating_tier_is_present() -> None:
    report = ScanReport(findings=(raw(level="warning", props={"severity": 4.5}), raw(), raw()))
    result = classify(report)
    assert result.dark_data_fallback is False
    assert [cf.tier for cf in result.findings] == [SeverityTier.MEDIUM, SeverityTier.NONE, SeverityTier.NONE]


def test_empty_report_has_no_fallback() -> None:
    result = classify(ScanReport())
    assert result.findings == ()
    assert result.dark_data_fallback is False


def test_classify_accepts_plain_iterables() -> None:
    result = classify([raw(props={"severity": 7.5})])
    assert result.findings[0].tier is SeverityTier.HIGH
