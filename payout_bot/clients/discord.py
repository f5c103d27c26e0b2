"""
Discord webhook client.
"""

from typing import Any, Dict, Optional

import requests
import structlog

from ..core.errors import NotificationError

logger = structlog.get_logger(__name__)


class DiscordWebhook:
    """Posts JSON messages to a Discord channel webhook."""

    def __init__(
        self,
        url: str,
        timeout: float = 10.0,
        session: Optional[requests.Session] = None
    ):
        if not url:
            raise ValueError("webhook url is required")
        self.url = url
        self.timeout = timeout
        self.session = session or requests.Session()

    def send(self, payload: Dict[str, Any]) -> None:
        """Send a webhook message.

        Raises:
            NotificationError: If Discord rejects the message
        """
        try:
            response = self.session.post(self.url, json=payload, timeout=self.timeout)
            response.raise_for_status()
        except requests.RequestException as e:
            raise NotificationError(f"Discord webhook failed: {e}", channel="discord") from e
        logger.info("discord_message_sent", embeds=len(payload.get("embeds", [])))
