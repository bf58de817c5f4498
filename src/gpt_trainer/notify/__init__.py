"""Error notifications.

Modules:
    notifier: Level-filtered alerting for the event log
    webhook: Slack, Discord and generic webhook delivery
"""

from gpt_trainer.notify.notifier import DEFAULT_NOTIFY_LEVELS, ErrorNotifier
from gpt_trainer.notify.webhook import (
    WebhookError,
    compute_hmac_signature,
    detect_webhook_type,
    format_discord_payload,
    format_generic_payload,
    format_slack_payload,
    send_error_webhook,
)

__all__ = [
    "DEFAULT_NOTIFY_LEVELS",
    "ErrorNotifier",
    "WebhookError",
    "compute_hmac_signature",
    "detect_webhook_type",
    "format_discord_payload",
    "format_generic_payload",
    "format_slack_payload",
    "send_error_webhook",
]
