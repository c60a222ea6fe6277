"""HTTP listener for Twitch webhook callbacks plus health endpoints"""

import asyncio
import json
import logging
import time
from typing import TYPE_CHECKING

from aiohttp import web
from pydantic import ValidationError

from golive.core.config import NOTIFY_ENDPOINT
from golive.models import NotificationPayload
from golive.services import Denied

if TYPE_CHECKING:
    from golive.relay import GoLiveRelay

logger = logging.getLogger(__name__)

SERVICE_NAME = "golive-relay"


class WebhookServer:
    """Serves ``/notify`` for the hub plus liveness endpoints"""

    def __init__(
        self,
        relay: "GoLiveRelay",
        host: str = "0.0.0.0",
        port: int = 3001,
        store_backend: str = "memory",
        heartbeat_interval: float = 300.0,
    ) -> None:
        self.relay = relay
        self.host = host
        self.port = port
        self.store_backend = store_backend
        self.heartbeat_interval = heartbeat_interval
        self.app = web.Application()
        self.runner: web.AppRunner | None = None
        self._start_time: float = time.time()
        self._heartbeat_task: asyncio.Task | None = None
        self._setup_routes()

    def _setup_routes(self) -> None:
        """Configure HTTP routes"""
        self.app.router.add_get(f"/{NOTIFY_ENDPOINT}", self.handle_handshake)
        self.app.router.add_post(f"/{NOTIFY_ENDPOINT}", self.handle_notify)
        self.app.router.add_get("/", self.handle_root)
        self.app.router.add_get("/health", self.handle_health)
        self.app.router.add_get("/status", self.handle_status)
        self.app.router.add_get("/ping", self.handle_ping)

    async def handle_handshake(self, request: web.Request) -> web.Response:
        """Hub verification: echo the challenge, or accept a denial silently"""
        result = self.relay.handle_handshake(request.query)
        if isinstance(result, Denied):
            return web.Response(status=200, text="")
        return web.Response(status=200, text=result.challenge)

    async def handle_notify(self, request: web.Request) -> web.Response:
        """Notification batch delivery"""
        try:
            body = await request.json()
            payload = NotificationPayload.model_validate(body)
        except (UnicodeDecodeError, json.JSONDecodeError, ValidationError) as e:
            logger.warning(f"Rejected malformed notification body: {type(e).__name__}: {e}")
            return web.json_response({"error": "malformed notification body"}, status=400)

        alerts = await self.relay.handle_notifications(payload)
        return web.json_response({"received": len(payload.data), "alerts": alerts})

    async def handle_root(self, request: web.Request) -> web.Response:
        """Root endpoint - minimal service info"""
        return web.json_response({"service": SERVICE_NAME, "status": "running"})

    async def handle_health(self, request: web.Request) -> web.Response:
        """Health check endpoint, always 200 (liveness)"""
        ready = bool(self.relay.subscribed_ids)
        return web.json_response(
            {"status": "healthy" if ready else "starting", "ready": ready},
        )

    async def handle_status(self, request: web.Request) -> web.Response:
        """Detailed status"""
        return web.json_response(
            {
                "service": SERVICE_NAME,
                "uptime_seconds": int(time.time() - self._start_time),
                "subscribed_channels": len(self.relay.subscribed_ids),
                "notifications_received": self.relay.notifications_received,
                "alerts_sent": self.relay.alerts_sent,
                "store": self.store_backend,
            }
        )

    async def handle_ping(self, request: web.Request) -> web.Response:
        """Ping endpoint"""
        return web.Response(text="pong")

    async def _heartbeat(self) -> None:
        """Periodic heartbeat: log uptime and relay counters"""
        while True:
            await asyncio.sleep(self.heartbeat_interval)
            uptime = int(time.time() - self._start_time)
            logger.info(
                f"Heartbeat: uptime={uptime}s, channels={len(self.relay.subscribed_ids)}, "
                f"notifications={self.relay.notifications_received}, "
                f"alerts={self.relay.alerts_sent}"
            )

    async def start(self) -> None:
        """Start the listener"""
        try:
            self.runner = web.AppRunner(self.app)
            await self.runner.setup()

            site = web.TCPSite(self.runner, self.host, self.port)
            await site.start()

            self._heartbeat_task = asyncio.create_task(self._heartbeat())

            logger.info(f"Webhook server started on {self.host}:{self.port}")
            logger.info(f"  GET/POST http://{self.host}:{self.port}/{NOTIFY_ENDPOINT} - Twitch hub")
            logger.info(f"  GET http://{self.host}:{self.port}/status - Detailed status")

        except Exception as e:
            logger.exception(f"Failed to start webhook server: {e}")
            raise

    async def stop(self) -> None:
        """Stop the listener"""
        if self._heartbeat_task:
            self._heartbeat_task.cancel()
        if self.runner:
            try:
                await self.runner.cleanup()
                logger.info("Webhook server stopped")
            except Exception as e:
                logger.exception(f"Error stopping webhook server: {e}")
