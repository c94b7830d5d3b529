import logging
from typing import Any

import httpx

from app.config import Settings, get_settings

logger = logging.getLogger(__name__)

USER_AGENT = "DiscordBot (https://github.com/discord/discord-example-app, 1.0.0)"


class DiscordAPIError(Exception):
    """Raised when the Discord REST API answers with a non-2xx status."""

    def __init__(self, method: str, endpoint: str, status_code: int, body: Any):
        super().__init__(f"{method} {endpoint} failed with {status_code}: {body}")
        self.method = method
        self.endpoint = endpoint
        self.status_code = status_code
        self.body = body


class DiscordClient:
    """Async client for the Discord REST endpoints the bot calls out-of-band."""

    def __init__(
        self,
        settings: Settings | None = None,
        http_client: httpx.AsyncClient | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self._settings = settings or get_settings()
        self._http_client = http_client
        self._transport = transport

    @property
    def application_id(self) -> str:
        return self._settings.DISCORD_APP_ID

    async def _get_http_client(self) -> httpx.AsyncClient:
        """Get or create the httpx async client."""
        if self._http_client is None or self._http_client.is_closed:
            self._http_client = httpx.AsyncClient(
                base_url=self._settings.DISCORD_API_BASE_URL.rstrip("/") + "/",
                headers={
                    "Authorization": f"Bot {self._settings.DISCORD_BOT_TOKEN}",
                    "Content-Type": "application/json; charset=UTF-8",
                    "User-Agent": USER_AGENT,
                },
                timeout=10.0,
                transport=self._transport,
            )
        return self._http_client

    async def request(self, endpoint: str, method: str = "GET", body: Any = None) -> httpx.Response:
        """Send a request to the Discord API.

        Raises:
            DiscordAPIError: If the response status is not 2xx.
        """
        client = await self._get_http_client()
        response = await client.request(method, endpoint.lstrip("/"), json=body)
        if response.is_error:
            try:
                data = response.json()
            except ValueError:
                data = response.text
            logger.debug("Discord API error for %s %s: %s", method, endpoint, data)
            raise DiscordAPIError(method, endpoint, response.status_code, data)
        return response

    def _webhook_message_endpoint(self, token: str, message_id: str) -> str:
        return f"webhooks/{self.application_id}/{token}/messages/{message_id}"

    async def delete_message(self, token: str, message_id: str) -> None:
        """Delete a message sent through the interaction webhook."""
        await self.request(self._webhook_message_endpoint(token, message_id), method="DELETE")

    async def edit_message(self, token: str, message_id: str, body: dict[str, Any]) -> None:
        """Patch a message sent through the interaction webhook."""
        await self.request(self._webhook_message_endpoint(token, message_id), method="PATCH", body=body)

    async def install_global_commands(self, commands: list[dict[str, Any]]) -> None:
        """Bulk overwrite the application's global commands."""
        endpoint = f"applications/{self.application_id}/commands"
        await self.request(endpoint, method="PUT", body=commands)
        logger.info("Installed %d global commands", len(commands))

    async def close(self) -> None:
        """Close the httpx client."""
        if self._http_client and not self._http_client.is_closed:
            await self._http_client.aclose()
            self._http_client = None


_discord_client: DiscordClient | None = None


def get_discord_client() -> DiscordClient:
    """Get the singleton DiscordClient."""
    global _discord_client
    if _discord_client is None:
        logger.info("Initializing Discord REST client")
        _discord_client = DiscordClient()
    return _discord_client


async def close_discord_client() -> None:
    global _discord_client
    if _discord_client is not None:
        await _discord_client.close()
        _discord_client = None
        logger.debug("Discord REST client closed")
