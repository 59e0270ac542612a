"""Alert pipeline — render leak events and deliver them to Slack or webhooks."""

from tripwire.alerts.dispatcher import (
    AlertSender,
    send_chat_sync,
    send_webhook_sync,
    validate_webhook_url,
)
from tripwire.alerts.payloads import (
    WEBHOOK_EVENT_TYPE,
    build_chat_payload,
    build_webhook_payload,
    short_sha,
)

__all__ = [
    "AlertSender",
    "WEBHOOK_EVENT_TYPE",
    "build_chat_payload",
    "build_webhook_payload",
    "send_chat_sync",
    "send_webhook_sync",
    "short_sha",
    "validate_webhook_url",
]
