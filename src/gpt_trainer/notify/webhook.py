"""Error alert webhooks for Slack, Discord, and generic HTTP endpoints."""

import hashlib
import hmac
import json
import time
import urllib.error
import urllib.request
from datetime import datetime, timezone
from typing import Any, Literal, Optional

from gpt_trainer._version import __version__

WebhookType = Literal["slack", "discord", "generic"]

MESSAGE_PREVIEW_LENGTH = 50


class WebhookError(Exception):
    """Exception raised when webhook sending fails."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


def detect_webhook_type(url: str) -> WebhookType:
    """Auto-detect webhook type from URL.

    Args:
        url: Webhook URL.

    Returns:
        Detected webhook type: 'slack', 'discord', or 'generic'.
    """
    url_lower = url.lower()
    if "hooks.slack.com" in url_lower:
        return "slack"
    if "discord.com/api/webhooks" in url_lower or "discordapp.com/api/webhooks" in url_lower:
        return "discord"
    return "generic"


def alert_subject(level: str, message: str) -> str:
    """One-line alert title, e.g. "ERROR Alert: API Error (get_tag): ..."."""
    return f"{level} Alert: {message[:MESSAGE_PREVIEW_LENGTH]}"


def format_generic_payload(
    level: str,
    message: str,
    context: Optional[dict] = None,
    event: str = "error_alert",
) -> dict[str, Any]:
    """Format payload for generic HTTP webhooks.

    Args:
        level: Log level that triggered the alert.
        message: Full error message.
        context: Structured error context.
        event: Event type identifier.

    Returns:
        Generic JSON payload.
    """
    return {
        "event": event,
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "level": level,
        "subject": alert_subject(level, message),
        "message": message,
        "context": context or {},
        "source": "gpt-trainer-client",
    }


def format_slack_payload(
    level: str,
    message: str,
    context: Optional[dict] = None,
) -> dict[str, Any]:
    """Format payload for Slack incoming webhooks.

    Args:
        level: Log level that triggered the alert.
        message: Full error message.
        context: Structured error context.

    Returns:
        Slack Block Kit message payload.
    """
    if level == "CRITICAL":
        color = "#FF0000"
        emoji = ":rotating_light:"
    else:
        color = "#FF6600"
        emoji = ":warning:"

    blocks: list[dict[str, Any]] = [
        {
            "type": "header",
            "text": {
                "type": "plain_text",
                "text": f"{emoji} {alert_subject(level, message)}",
                "emoji": True,
            },
        },
        {
            "type": "section",
            "text": {"type": "mrkdwn", "text": message},
        },
    ]
    if context:
        blocks.append(
            {
                "type": "section",
                "text": {
                    "type": "mrkdwn",
                    "text": "```" + json.dumps(context, indent=2, default=str) + "```",
                },
            }
        )
    blocks.append(
        {
            "type": "context",
            "elements": [
                {
                    "type": "mrkdwn",
                    "text": f"Sent by gpt-trainer-client at {datetime.now(timezone.utc).strftime('%Y-%m-%d %H:%M:%S UTC')}",
                },
            ],
        }
    )
    return {"attachments": [{"color": color, "blocks": blocks}]}


def format_discord_payload(
    level: str,
    message: str,
    context: Optional[dict] = None,
) -> dict[str, Any]:
    """Format payload for Discord webhooks.

    Args:
        level: Log level that triggered the alert.
        message: Full error message.
        context: Structured error context.

    Returns:
        Discord embed message payload.
    """
    color = 0xFF0000 if level == "CRITICAL" else 0xFF6600
    fields = [
        {"name": str(key), "value": str(value)[:1024], "inline": True}
        for key, value in (context or {}).items()
        if key != "traceback"
    ]
    return {
        "embeds": [
            {
                "title": alert_subject(level, message),
                "description": message,
                "color": color,
                "fields": fields[:25],
                "footer": {"text": "gpt-trainer-client"},
                "timestamp": datetime.now(timezone.utc).isoformat(),
            },
        ],
    }


def compute_hmac_signature(payload: bytes, secret: str) -> str:
    """Compute HMAC-SHA256 signature for webhook payload.

    Args:
        payload: JSON payload as bytes.
        secret: Webhook secret key.

    Returns:
        HMAC signature as hex string.
    """
    return hmac.new(
        secret.encode("utf-8"),
        payload,
        hashlib.sha256,
    ).hexdigest()


def send_error_webhook(
    url: str,
    level: str,
    message: str,
    context: Optional[dict] = None,
    webhook_type: Optional[WebhookType] = None,
    secret: Optional[str] = None,
    timeout: int = 10,
) -> bool:
    """Send an error alert to a webhook.

    Args:
        url: Webhook URL.
        level: Log level that triggered the alert.
        message: Full error message.
        context: Structured error context.
        webhook_type: Override auto-detected webhook type.
        secret: Optional secret for HMAC signing (generic webhooks only).
        timeout: Request timeout in seconds.

    Returns:
        True if webhook was sent successfully.

    Raises:
        WebhookError: If the webhook request fails.
    """
    if webhook_type is None:
        webhook_type = detect_webhook_type(url)

    if webhook_type == "slack":
        payload = format_slack_payload(level, message, context)
    elif webhook_type == "discord":
        payload = format_discord_payload(level, message, context)
    else:
        payload = format_generic_payload(level, message, context)

    payload_bytes = json.dumps(payload, default=str).encode("utf-8")

    headers = {
        "Content-Type": "application/json",
        "User-Agent": f"gpt-trainer-client/{__version__}",
    }

    if secret and webhook_type == "generic":
        signature = compute_hmac_signature(payload_bytes, secret)
        headers["X-GPT-Trainer-Signature"] = f"sha256={signature}"
        headers["X-GPT-Trainer-Timestamp"] = str(int(time.time()))

    req = urllib.request.Request(
        url,
        data=payload_bytes,
        headers=headers,
        method="POST",
    )

    try:
        with urllib.request.urlopen(req, timeout=timeout) as response:
            status = response.status
            if status < 200 or status >= 300:
                raise WebhookError(f"Webhook returned status {status}", status)
            return True
    except WebhookError:
        raise
    except urllib.error.HTTPError as e:
        raise WebhookError(f"Webhook request failed: {e.code} {e.reason}", e.code) from e
    except urllib.error.URLError as e:
        raise WebhookError(f"Webhook connection failed: {e.reason}") from e
    except Exception as e:
        raise WebhookError(f"Webhook error: {e}") from e


__all__ = [
    "WebhookType",
    "WebhookError",
    "detect_webhook_type",
    "alert_subject",
    "format_generic_payload",
    "format_slack_payload",
    "format_discord_payload",
    "compute_hmac_signature",
    "send_error_webhook",
]
