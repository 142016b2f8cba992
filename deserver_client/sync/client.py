"""
Sync Client

HTTP transport to the remote authority: event posts, the command poll and
module downloads. Any transport failure marks the session disconnected.
"""

from __future__ import annotations

from urllib.parse import quote

import httpx

from deserver_client.errors import TransportError
from deserver_client.logging import get_logger
from deserver_client.sync.protocol import OutboundMessage, create_ack_message
from deserver_client.sync.state import SessionContext
from deserver_client.wire.decoder import extract_command_array, extract_string_array

logger = get_logger("sync.client")

JSON_HEADERS = {"Content-Type": "application/json"}


class SessionClient:
    """
    Async HTTP client bound to one session.

    The base URL is read from the session config when the underlying client
    is first created, so server discovery can still adjust host and port
    before the first request.
    """

    def __init__(
        self,
        session: SessionContext,
        transport: httpx.AsyncBaseTransport | None = None,
        sync_transport: httpx.BaseTransport | None = None,
    ):
        self.session = session
        self._transport = transport
        self._sync_transport = sync_transport
        self._client: httpx.AsyncClient | None = None

    @property
    def base_url(self) -> str:
        return self.session.config.server.base_url

    @property
    def timeout(self) -> float:
        return self.session.config.server.timeout

    async def _ensure_client(self) -> httpx.AsyncClient:
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                timeout=self.timeout,
                transport=self._transport,
            )
        return self._client

    async def close(self) -> None:
        if self._client and not self._client.is_closed:
            await self._client.aclose()
            self._client = None

    async def _request(self, method: str, url: str, **kwargs) -> httpx.Response:
        client = await self._ensure_client()
        try:
            resp = await client.request(method, url, **kwargs)
            resp.raise_for_status()
        except httpx.HTTPError as e:
            logger.warning(f"{method} {url} failed: {e!r}")
            self.session.mark_disconnected(str(e) or type(e).__name__)
            raise TransportError(f"{method} {url} failed") from e
        return resp

    async def send(self, message: OutboundMessage) -> None:
        """
        Post one event body.

        Raises:
            TransportError: on timeout, connection failure or a non-2xx status.
        """
        await self._request("POST", "/", content=message.to_json(), headers=JSON_HEADERS)

    async def post_event(self, message: OutboundMessage) -> bool:
        """Post one event body; False when it did not get through."""
        try:
            await self.send(message)
        except TransportError:
            return False
        return True

    def send_ack(self, cmd: str, label: str) -> None:
        """Acknowledge a command in the background."""
        message = create_ack_message(self.session.identity, cmd, label)
        self.session.spawn(self.post_event(message), name=f"ack-{cmd}")

    async def fetch_commands(self) -> list[str]:
        """
        Poll for pending commands.

        Returns:
            Raw command payloads in server order; an absent or empty array
            both yield [].
        """
        resp = await self._request("GET", "/cmd", params={"steamID": self.session.identity.steam_id})
        if not resp.text:
            return []
        return extract_command_array(resp.text) or []

    async def fetch_mod_list(self) -> list[str]:
        resp = await self._request("GET", "/mods")
        return [name.strip() for name in extract_string_array(resp.text, "mods") or [] if name.strip()]

    async def fetch_mod(self, file: str) -> bytes:
        resp = await self._request("GET", f"/mods/{quote(file)}")
        return resp.content

    def post_blocking(self, message: OutboundMessage) -> bool:
        """
        Post synchronously, bounded by the configured timeout.

        Used for the initial handshake and the shutdown disconnect, which
        happen outside the event loop's periodic tasks.
        """
        try:
            with httpx.Client(base_url=self.base_url, timeout=self.timeout, transport=self._sync_transport) as client:
                resp = client.post("/", content=message.to_json(), headers=JSON_HEADERS)
                resp.raise_for_status()
        except httpx.HTTPError as e:
            logger.warning(f"Blocking {message.event.value} to {self.base_url} failed: {e!r}")
            return False
        return True
