"""Webhook alert sink with a client-side cooldown.

``notify()`` is fire-and-forget: delivery failures are logged, never
raised. At most one alert is sent per cooldown window; a failed delivery
re-opens the window so the next alert is attempted.
"""

import logging
import time

import httpx

logger = logging.getLogger(__name__)

DEFAULT_COOLDOWN = 30 * 60.0


class WebhookNotifier:
    """Post ``{"content": "**title**\\nmessage"}`` to a chat webhook.

    Disabled (every call is a logged no-op) when ``webhook_url`` is None.
    """

    def __init__(
        self,
        webhook_url: str | None,
        cooldown: float = DEFAULT_COOLDOWN,
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._webhook_url = webhook_url
        self._cooldown = cooldown
        self._timeout = timeout
        self._transport = transport
        self._last_sent: float | None = None

    @property
    def enabled(self) -> bool:
        return bool(self._webhook_url)

    def _in_cooldown(self) -> bool:
        return (
            self._last_sent is not None
            and time.monotonic() - self._last_sent < self._cooldown
        )

    async def notify(self, title: str, message: str) -> bool:
        """Send an alert unless disabled or cooling down.

        Returns:
            True if the webhook accepted the alert.
        """
        if self._in_cooldown():
            logger.debug("[Notification] Cooldown active, skipping %r", title)
            return False
        if not self.enabled:
            logger.warning("[Notification] No webhook configured, skipping %r", title)
            return False

        self._last_sent = time.monotonic()
        payload = {"content": f"**{title}**\n{message}"}
        try:
            async with httpx.AsyncClient(
                timeout=self._timeout, transport=self._transport
            ) as client:
                response = await client.post(self._webhook_url, json=payload)
                response.raise_for_status()
        except httpx.HTTPError as exc:
            logger.error("[Notification] Failed to send %r: %s", title, exc)
            self._last_sent = None
            return False

        logger.info("[Notification] Sent: %s", title)
        return True
