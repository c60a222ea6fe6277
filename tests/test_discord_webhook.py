from __future__ import annotations

import asyncio
import json

import httpx

from golive.services import DiscordWebhookSender

HOOK_URL = "https://discordapp.com/api/webhooks/123/abc"


def _sender(handler) -> DiscordWebhookSender:
    return DiscordWebhookSender(HOOK_URL, httpx.AsyncClient(transport=httpx.MockTransport(handler)))


def test_send_posts_content_json() -> None:
    requests: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return httpx.Response(204)

    assert asyncio.run(_sender(handler).send("cool\\_streamer is now live!"))
    assert str(requests[0].url) == HOOK_URL
    assert json.loads(requests[0].content) == {"content": "cool\\_streamer is now live!"}


def test_send_failures_are_reported_not_raised() -> None:
    def rejected(request: httpx.Request) -> httpx.Response:
        return httpx.Response(404, json={"message": "Unknown Webhook"})

    def unreachable(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("dns failure", request=request)

    assert asyncio.run(_sender(rejected).send("hi")) is False
    assert asyncio.run(_sender(unreachable).send("hi")) is False
