"""
Adapter: Webhook notifier.

Implements the Notifier port by POSTing each notification as JSON to
every configured webhook URL. With no URLs configured, notifications are
only logged.

Delivery failures are counted and logged per URL; they never raise.
"""

import logging
from datetime import datetime, timezone
from urllib.parse import urlparse

import httpx

from app.domain.copytrade.entities import Notification
from app.domain.copytrade.ports import Notifier

logger = logging.getLogger(__name__)


def _notification_to_dict(notification: Notification) -> dict:
    """Serialize a Notification for JSON transport."""
    return {
        "action": notification.action,
        "user_id": notification.user_id,
        "description": notification.description,
        "metadata": {k: str(v) if v is not None else None for k, v in notification.metadata.items()},
        "status": "unread",
        "sent_at": datetime.now(timezone.utc).isoformat(),
    }


class WebhookNotifier(Notifier):
    """Fan-out notifier over HTTP webhooks.

    Args:
        webhook_urls: URLs to POST notifications to.
        timeout: HTTP timeout in seconds for each webhook call.
        client: Optional pre-built httpx client (tests inject a mock transport).
    """

    def __init__(
        self,
        webhook_urls: list[str] | None = None,
        timeout: float = 5.0,
        client: httpx.Client | None = None,
    ) -> None:
        self._webhook_urls: list[str] = []
        for url in webhook_urls or []:
            self.add_webhook(url)
        self._client = client or httpx.Client(timeout=timeout)
        self._stats = {"notifications": 0, "webhook_calls": 0, "errors": 0}

    @property
    def stats(self) -> dict:
        return dict(self._stats)

    def add_webhook(self, url: str) -> None:
        """Register a webhook URL.

        Raises:
            ValueError: If the URL is not http/https.
        """
        parsed = urlparse(url)
        if parsed.scheme not in ("http", "https"):
            msg = f"Invalid webhook URL scheme: {parsed.scheme}"
            raise ValueError(msg)
        if url not in self._webhook_urls:
            self._webhook_urls.append(url)
            logger.info("Webhook registered: %s", url)

    def notify(self, notification: Notification) -> None:
        self._stats["notifications"] += 1
        logger.info(
            "Notification created: %s - %s",
            notification.action,
            notification.description,
        )

        payload = _notification_to_dict(notification)
        for url in self._webhook_urls:
            self._stats["webhook_calls"] += 1
            try:
                response = self._client.post(url, json=payload)
                response.raise_for_status()
            except httpx.HTTPError as exc:
                self._stats["errors"] += 1
                logger.warning("Webhook %s failed: %s", url, exc)

    def close(self) -> None:
        self._client.close()
