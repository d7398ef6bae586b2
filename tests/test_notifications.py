"""Tests for the webhook notifier and its cooldown."""

import json

import httpx
import pytest

from vlrsync.notifications import WebhookNotifier

WEBHOOK = "https://discord.example/api/webhooks/1/abc"


def _recording(status: int = 204):
    posted: list[dict] = []

    def handler(request: httpx.Request) -> httpx.Response:
        posted.append(json.loads(request.content))
        return httpx.Response(status)

    return handler, posted


class TestWebhookNotifier:

    @pytest.mark.asyncio
    async def test_posts_formatted_content(self):
        handler, posted = _recording()
        notifier = WebhookNotifier(WEBHOOK, transport=httpx.MockTransport(handler))

        assert await notifier.notify("vlr.gg unreachable", "connection refused") is True

        assert posted == [{"content": "**vlr.gg unreachable**\nconnection refused"}]

    @pytest.mark.asyncio
    async def test_disabled_without_url(self):
        handler, posted = _recording()
        notifier = WebhookNotifier(None, transport=httpx.MockTransport(handler))

        assert notifier.enabled is False
        assert await notifier.notify("title", "message") is False
        assert posted == []

    @pytest.mark.asyncio
    async def test_second_alert_within_cooldown_skipped(self):
        handler, posted = _recording()
        notifier = WebhookNotifier(WEBHOOK, cooldown=1800, transport=httpx.MockTransport(handler))

        await notifier.notify("first", "a")
        assert await notifier.notify("second", "b") is False

        assert len(posted) == 1

    @pytest.mark.asyncio
    async def test_alert_after_cooldown_sent(self):
        handler, posted = _recording()
        notifier = WebhookNotifier(WEBHOOK, cooldown=1800, transport=httpx.MockTransport(handler))

        await notifier.notify("first", "a")
        notifier._last_sent -= 1801
        assert await notifier.notify("second", "b") is True

        assert len(posted) == 2

    @pytest.mark.asyncio
    async def test_failed_delivery_reopens_cooldown(self):
        handler, posted = _recording(status=500)
        notifier = WebhookNotifier(WEBHOOK, transport=httpx.MockTransport(handler))

        assert await notifier.notify("first", "a") is False
        assert await notifier.notify("second", "b") is False

        # Both attempts reached the webhook: the failure did not start a cooldown
        assert len(posted) == 2
