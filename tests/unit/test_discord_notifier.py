"""
Unit tests for the Discord webhook notifier.
"""
from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest

from nutrilens.domain.models.nutrition import NutritionAnalysis
from nutrilens.domain.models.photo import UploadedFile
from nutrilens.infrastructure.notifications.discord_notifier import DiscordNotifier
from tests.fakes import make_photo

UPLOAD = UploadedFile(url="https://utfs.io/f/abc123", key="abc123", size=6)


def _field(payload, name):
    return next(field for field in payload["embeds"][0]["fields"] if field["name"] == name)


class TestBuildPayload:
    def test_with_analysis(self):
        analysis = NutritionAnalysis(
            calories=320.0, protein=12.0, sodium=410.0, vitamin_c=0.02, description="Avocado toast"
        )

        payload = DiscordNotifier.build_payload(make_photo(), UPLOAD, analysis)

        embed = payload["embeds"][0]
        assert embed["color"] == DiscordNotifier.SUCCESS_COLOR
        assert embed["image"] == {"url": UPLOAD.url}
        assert _field(payload, "Food Description")["value"] == "Avocado toast"
        assert _field(payload, "Macronutrients")["value"] == "Calories: 320\nProtein: 12g"
        assert _field(payload, "Vitamins")["value"] == "C: 0.02g"
        assert _field(payload, "Minerals")["value"] == "Sodium: 410mg"
        assert "nutrition analysis completed" in payload["content"]

    def test_without_analysis(self):
        payload = DiscordNotifier.build_payload(make_photo(), UPLOAD, None)

        assert payload["embeds"][0]["color"] == DiscordNotifier.DEGRADED_COLOR
        assert _field(payload, "AI Analysis")["value"] == "Nutrition analysis failed"
        assert _field(payload, "CDN URL")["value"] == UPLOAD.url


class TestNotify:
    @pytest.mark.asyncio
    async def test_posts_to_webhook(self):
        client = MagicMock(spec=httpx.AsyncClient)
        client.post = AsyncMock(
            return_value=httpx.Response(204, request=httpx.Request("POST", "https://discord.test/hook"))
        )
        notifier = DiscordNotifier(http_client=client, webhook_url="https://discord.test/hook")

        await notifier.notify(make_photo(), UPLOAD, None)

        assert client.post.await_args.args[0] == "https://discord.test/hook"

    @pytest.mark.asyncio
    async def test_failure_is_swallowed(self):
        client = MagicMock(spec=httpx.AsyncClient)
        client.post = AsyncMock(side_effect=httpx.ConnectError("no route"))
        notifier = DiscordNotifier(http_client=client, webhook_url="https://discord.test/hook")

        await notifier.notify(make_photo(), UPLOAD, None)

    @pytest.mark.asyncio
    async def test_without_webhook_nothing_is_sent(self):
        client = MagicMock(spec=httpx.AsyncClient)
        client.post = AsyncMock()

        await DiscordNotifier(http_client=client, webhook_url="").notify(make_photo(), UPLOAD, None)

        client.post.assert_not_called()
