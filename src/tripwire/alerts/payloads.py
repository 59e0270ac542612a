"""Payload builders for leak alerts.

Two shapes: Slack Block Kit (summary + detail sections) and a flat generic
webhook record. Builders are pure and expect an already validated event.
"""

from __future__ import annotations

from tripwire.models import Event, format_timestamp

WEBHOOK_EVENT_TYPE = "secret.detected"
SHORT_SHA_LENGTH = 7


def short_sha(commit_sha: str) -> str:
    """Abbreviate a commit hash to its first 7 characters."""
    if len(commit_sha) > SHORT_SHA_LENGTH:
        return commit_sha[:SHORT_SHA_LENGTH]
    return commit_sha


def _section(text: str) -> dict:
    return {"type": "section", "text": {"type": "mrkdwn", "text": text}}


def build_chat_payload(event: Event) -> dict:
    """Build a Slack incoming-webhook message for a leak event.

    The summary shows the short commit; the detail block always shows the full hash.
    """
    summary = (
        f":rotating_light: Secret detected in {event.repository} "
        f"on {event.branch} ({short_sha(event.commit_sha)})"
    )

    detail = "\n".join([
        f"*Repo:* `{event.repository}`",
        f"*Branch:* `{event.branch}`",
        f"*Commit:* `{event.commit_sha}`",
        f"*Rule:* `{event.rule}`",
        f"*File:* `{event.file_path}`",
        f"*Author:* `{event.author}`",
        f"*Detected:* `{format_timestamp(event.detected_at)}`",
    ])

    return {
        "text": summary,
        "blocks": [_section(summary), _section(detail)],
    }


def build_webhook_payload(event: Event) -> dict:
    """Build the flat ``secret.detected`` record for generic webhook consumers."""
    return {
        "event": WEBHOOK_EVENT_TYPE,
        "repository": event.repository,
        "branch": event.branch,
        "commit_sha": event.commit_sha,
        "rule": event.rule,
        "file_path": event.file_path,
        "author": event.author,
        "detected_at": format_timestamp(event.detected_at),
    }
