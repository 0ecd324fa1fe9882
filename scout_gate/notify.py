import os
from typing import Any, Dict, Mapping, Optional

import requests

from scout_gate.log import get_logger
from scout_gate.models import EnforcementOutcome, ExitAction

logger = get_logger("notify")

SLACK_TIMEOUT = 10


def _run_url(env: Mapping[str, str]) -> Optional[str]:
    repo = env.get("GITHUB_REPOSITORY")
    run_id = env.get("GITHUB_RUN_ID")
    if not repo or not run_id:
        return None
    server = env.get("GITHUB_SERVER_URL", "https://github.com")
    return f"{server}/{repo}/actions/runs/{run_id}"


def build_payload(outcome: EnforcementOutcome, env: Optional[Mapping[str, str]] = None) -> Dict[str, Any]:
    env = os.environ if env is None else env
    result = outcome.result
    counts = result.counts

    if outcome.action is ExitAction.ABORT:
        headline = ":rotating_light: *SECURITY GATE FAILED - PRODUCTION DEPLOYMENT BLOCKED*"
    else:
        headline = ":warning: *SECURITY GATE WARNING*"

    blocks = [
        {
            "type": "section",
            "text": {
                "type": "mrkdwn",
                "text": (
                    f"{headline}\n"
                    f"*Image:* `{result.image}`\n"
                    f"*Branch:* `{result.branch}`\n"
                    f"*Gate:* `{result.status.value}`"
                ),
            },
        },
        {
            "type": "section",
            "text": {
                "type": "mrkdwn",
                "text": (
                    f"• Critical: *{counts.critical}*\n"
                    f"• High: *{counts.high}*\n"
                    f"• Medium: *{counts.medium}*"
                ),
            },
        },
    ]

    url = _run_url(env)
    if url:
        blocks.append({
            "type": "actions",
            "elements": [
                {
                    "type": "button",
                    "text": {"type": "plain_text", "text": "View Pipeline Run"},
                    "url": url,
                }
            ],
        })

    return {"text": headline, "blocks": blocks}


def send_gate_notification(
    outcome: EnforcementOutcome,
    webhook: Optional[str],
    env: Optional[Mapping[str, str]] = None,
) -> bool:
    """Post blocked gates to Slack. Failures are logged, never raised."""
    if not outcome.result.status.blocked:
        return False
    if not webhook:
        logger.info("SLACK_WEBHOOK_URL not set. Skipping notification.")
        return False

    try:
        response = requests.post(webhook, json=build_payload(outcome, env), timeout=SLACK_TIMEOUT)
        response.raise_for_status()
    except requests.exceptions.RequestException as e:
        logger.warning("Failed to send Slack notification: %s", e)
        return False

    logger.info("Slack notification sent successfully.")
    return True
