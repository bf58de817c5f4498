"""Error notifications for ERROR and CRITICAL events."""

from __future__ import annotations

import sys
from typing import Callable, Iterable, Optional

from gpt_trainer.notify.webhook import WebhookError, send_error_webhook

DEFAULT_NOTIFY_LEVELS = ("ERROR", "CRITICAL")


class ErrorNotifier:
    """Sends alerts for high-severity events to a webhook.

    Args:
        webhook_url: Destination URL. Empty disables sending.
        secret: HMAC secret for generic webhooks.
        enabled: Master switch for notifications.
        levels: Levels that trigger an alert.
        sender: Function used to deliver the alert; injectable for tests.
    """

    def __init__(
        self,
        webhook_url: Optional[str],
        secret: Optional[str] = None,
        enabled: bool = True,
        levels: Iterable[str] = DEFAULT_NOTIFY_LEVELS,
        sender: Callable[..., bool] = send_error_webhook,
    ):
        self.webhook_url = webhook_url
        self.secret = secret
        self.enabled = enabled
        self.levels = {level.upper() for level in levels}
        self._sender = sender

    def should_notify(self, level: str) -> bool:
        return bool(self.enabled and self.webhook_url and level.upper() in self.levels)

    def send_notification(self, level: str, message: str, context: Optional[dict] = None) -> bool:
        """Send an alert if notifications are enabled for this level.

        Delivery failures are reported on stderr and never raised, so a
        broken webhook cannot break logging.

        Returns:
            True if an alert was delivered.
        """
        if not self.should_notify(level):
            return False
        try:
            return self._sender(
                self.webhook_url,
                level.upper(),
                message,
                context or {},
                secret=self.secret,
            )
        except WebhookError as e:
            print(f"Warning: error notification failed: {e}", file=sys.stderr)
            return False


__all__ = ["DEFAULT_NOTIFY_LEVELS", "ErrorNotifier"]
