# scout_gate/ingest.py
"""
Load a Docker Scout CVE report (SARIF 2.1.0) into a ScanReport.

Nothing here raises on bad input. A missing, empty, unreadable, timed out
or unparseable report becomes an empty ScanReport flagged ``degraded`` so
the gate still runs and the report still gets written.
"""

from __future__ import annotations

import io
import json
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Union

from scout_gate.config import DEFAULT_IO_TIMEOUT
from scout_gate.fsio import run_with_timeout
from scout_gate.log import get_logger
from scout_gate.models import RawFinding, ScanReport

logger = get_logger("ingest")

MINIMAL_SARIF: Dict[str, Any] = {
    "version": "2.1.0",
    "runs": [{"tool": {"driver": {"name": "Docker Scout"}}, "results": []}],
}

Source = Union[str, Path, bytes, bytearray, io.IOBase, None]


def _degraded(source: str, reason: str) -> ScanReport:
    logger.warning("Scan report degraded (%s): %s. Using empty report.", source, reason)
    return ScanReport(findings=(), degraded=True, reason=reason, source=source)


def _read_source(source: Source) -> bytes:
    if isinstance(source, (bytes, bytearray)):
        return bytes(source)
    if isinstance(source, (str, Path)):
        return Path(source).read_bytes()
    data = source.read()
    if isinstance(data, str):
        return data.encode("utf-8")
    return data or b""


def _describe(source: Source) -> str:
    if isinstance(source, (str, Path)):
        return str(source)
    return "<stream>"


# =====================================================
# Public API
# =====================================================
def load_report(source: Source, timeout: float = DEFAULT_IO_TIMEOUT) -> ScanReport:
    """Read and parse a scan report from a path, bytes or a stream."""
    if source is None:
        return _degraded("<none>", "no report given")

    name = _describe(source)
    if isinstance(source, (str, Path)):
        try:
            if not Path(source).is_file():
                return _degraded(name, "report file not found")
        except OSError as exc:
            return _degraded(name, f"read failed: {exc}")

    try:
        raw = run_with_timeout(_read_source, timeout, source)
    except (OSError, ValueError) as exc:
        return _degraded(name, f"read failed: {exc}")

    if not raw or not raw.strip():
        return _degraded(name, "report is empty")

    try:
        data = json.loads(raw.decode("utf-8-sig"))
    except (ValueError, RecursionError) as exc:
        return _degraded(name, f"invalid JSON: {exc}")

    return parse_report(data, source=name)


def parse_report(data: Any, source: str = "<memory>") -> ScanReport:
    """Flatten ``runs[].results[]`` of already decoded SARIF."""
    if not isinstance(data, dict) or not isinstance(data.get("runs"), list):
        return _degraded(source, "not a SARIF document (no runs list)")

    findings: List[RawFinding] = []
    tool_name: Optional[str] = None

    for run in data["runs"]:
        if not isinstance(run, dict):
            continue
        driver = _as_dict(_as_dict(run.get("tool")).get("driver"))
        if tool_name is None and isinstance(driver.get("name"), str):
            tool_name = driver["name"]

        rules = driver.get("rules")
        rules = rules if isinstance(rules, list) else []

        results = run.get("results")
        if not isinstance(results, list):
            continue
        for result in results:
            if isinstance(result, dict):
                findings.append(_normalize_result(result, rules))

    logger.info("Ingested %d finding(s) from %s", len(findings), source)
    return ScanReport(findings=tuple(findings), degraded=False, source=source, tool_name=tool_name)


# =====================================================
# Helpers
# =====================================================
def _as_dict(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _find_rule(result: Mapping[str, Any], rules: List[Any]) -> Dict[str, Any]:
    index = result.get("ruleIndex")
    if isinstance(index, int) and not isinstance(index, bool) and 0 <= index < len(rules):
        return _as_dict(rules[index])

    rule_id = result.get("ruleId")
    if rule_id:
        for rule in rules:
            if isinstance(rule, dict) and rule.get("id") == rule_id:
                return rule
    return {}


def _normalize_result(result: Mapping[str, Any], rules: List[Any]) -> RawFinding:
    rule = _find_rule(result, rules)
    level = result.get("level")
    rule_id = result.get("ruleId")

    return RawFinding(
        level=level if isinstance(level, str) else None,
        rule_id=str(rule_id) if rule_id is not None else "",
        properties=dict(_as_dict(result.get("properties"))),
        rule_properties=dict(_as_dict(rule.get("properties"))),
        rule_index=result.get("ruleIndex"),
    )
