"""Discord webhook sender"""

import logging

import httpx

logger = logging.getLogger(__name__)


class DiscordWebhookSender:
    """Posts plain text messages to one Discord channel webhook.

    Fire-and-forget: failures are logged and never raised, and there is no
    retry.
    """

    def __init__(self, webhook_url: str, http: httpx.AsyncClient | None = None):
        self.webhook_url = webhook_url

        # Shared HTTP client, reuses TCP connections across requests
        self._http = http or httpx.AsyncClient(timeout=10.0)

    async def close(self) -> None:
        """Close the shared HTTP client. Call on app shutdown."""
        await self._http.aclose()

    async def send(self, message: str) -> bool:
        """Send *message*; returns whether Discord accepted it."""
        try:
            response = await self._http.post(self.webhook_url, json={"content": message})
        except httpx.HTTPError as e:
            logger.error(f"Discord webhook request failed: {type(e).__name__}: {e}")
            return False

        if not response.is_success:
            logger.error(
                f"Discord webhook rejected message: HTTP {response.status_code} {response.text[:200]}"
            )
            return False

        logger.info(f"Sent alert: {message}")
        return True
