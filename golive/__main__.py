"""Relay entry point: ``python -m golive`` or the ``golive-relay`` script."""

import asyncio
import logging
import signal
import sys

import httpx
from pydantic import ValidationError

from golive.core.config import RelaySettings, get_settings
from golive.core.errors import RelayError
from golive.core.logging import setup_logging
from golive.core.webhook_server import WebhookServer
from golive.relay import GoLiveRelay
from golive.services import (
    AlertFormatter,
    DiscordWebhookSender,
    DisplayNameCache,
    IdentityResolver,
    NotificationClassifier,
    SubscriptionManager,
)
from golive.storage import SessionStartTracker, build_store

logger = logging.getLogger("golive")


async def run(settings: RelaySettings) -> None:
    store = build_store(settings)
    await store.init()

    # One client for Twitch, one for Discord
    twitch_http = httpx.AsyncClient(timeout=10.0)
    discord_http = httpx.AsyncClient(timeout=10.0)

    resolver = IdentityResolver(settings.twitch_client_id, DisplayNameCache(), twitch_http)
    relay = GoLiveRelay(
        resolver=resolver,
        subscriptions=SubscriptionManager(settings.twitch_client_id, twitch_http),
        classifier=NotificationClassifier(SessionStartTracker(store)),
        formatter=AlertFormatter(resolver, settings.twitch_url),
        sender=DiscordWebhookSender(settings.discord_hook_url, discord_http),
        channel_names=settings.channel_names,
        callback_url=settings.callback_url,
    )
    server = WebhookServer(relay, settings.host, settings.port, store_backend=store.name)

    stop_event = asyncio.Event()
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, stop_event.set)
        except NotImplementedError:
            # Windows event loops have no signal handlers; KeyboardInterrupt still works
            pass

    try:
        # Listener first so the hub's confirmation GET can be answered
        await server.start()
        logger.info(f"Subscribing to {len(settings.channel_names)} channel(s): {settings.twitch_users}")
        await relay.start_subscriptions()
        await stop_event.wait()
        logger.info("Shutdown requested")
    finally:
        if settings.unsubscribe_on_shutdown:
            await relay.stop_subscriptions()
        await server.stop()
        await twitch_http.aclose()
        await discord_http.aclose()
        await store.close()


def main() -> None:
    try:
        settings = get_settings()
    except ValidationError as e:
        setup_logging()
        logger.error(f"Environment validation failed: {e}")
        sys.exit(1)

    setup_logging(settings.log_level)

    try:
        asyncio.run(run(settings))
    except KeyboardInterrupt:
        logger.warning("Shutting down due to KeyboardInterrupt...")
    except RelayError as e:
        logger.error(f"Relay failed to start: {type(e).__name__}: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
