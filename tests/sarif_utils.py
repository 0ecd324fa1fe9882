"""Builders for small SARIF documents used across the tests."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, List, Optional


def result(level: Optional[str] = "error", score: Any = None, key: str = "severity", **extra: Any) -> Dict[str, Any]:
    r: Dict[str, Any] = {"ruleId": extra.pop("rule_id", "CVE-2024-0001"), "message": {"text": "finding"}}
    if level is not None:
        r["level"] = level
    if score is not None:
        r["properties"] = {key: score}
    r.update(extra)
    return r


def sarif(*results: Dict[str, Any], rules: Optional[List[Dict[str, Any]]] = None) -> Dict[str, Any]:
    driver: Dict[str, Any] = {"name": "docker scout"}
    if rules is not None:
        driver["rules"] = rules
    return {"version": "2.1.0", "runs": [{"tool": {"driver": driver}, "results": list(results)}]}


def write_sarif(path: Path, doc: Dict[str, Any]) -> Path:
    path.write_text(json.dumps(doc), encoding="utf-8")
    return path
