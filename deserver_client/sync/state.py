"""
Session State

Identity of the local player and the per-agent session context shared by
every loop and task.
"""

from __future__ import annotations

import asyncio
from collections.abc import Coroutine
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Protocol

from deserver_client.config import ClientConfig
from deserver_client.logging import get_logger
from deserver_client.world.model import Node

logger = get_logger("sync.state")

DEFAULT_PLAYER_NAME = "Ghost"
DEFAULT_STEAM_ID = "Unknown"


@dataclass(frozen=True)
class Identity:
    """Who this client reports as."""

    player_name: str = DEFAULT_PLAYER_NAME
    steam_id: str = DEFAULT_STEAM_ID


class IdentityProvider(Protocol):
    """Host hook returning the signed-in player, or None when unavailable."""

    def fetch(self) -> Identity | None: ...


def resolve_identity(provider: IdentityProvider | None, config: ClientConfig | None = None) -> Identity:
    """
    Fetch the identity once, falling back to the Ghost/Unknown defaults.

    Values set in the configuration win over the provider, which lets the
    headless runner pick a name without a host.
    """
    identity = None
    if provider is not None:
        try:
            identity = provider.fetch()
        except Exception as e:
            logger.warning(f"Identity provider failed: {e}")
    identity = identity or Identity()

    if config is not None and (config.player_name or config.steam_id):
        identity = Identity(
            player_name=config.player_name or identity.player_name,
            steam_id=config.steam_id or identity.steam_id,
        )
    return identity


class ConnectionState(Enum):
    DISCONNECTED = "disconnected"
    CONNECTED = "connected"


@dataclass
class SessionContext:
    """Mutable state of one running agent."""

    config: ClientConfig
    identity: Identity = field(default_factory=Identity)
    state: ConnectionState = ConnectionState.DISCONNECTED
    player: Node | None = None
    last_axis: dict[str, float] = field(default_factory=dict)
    last_paused: bool | None = None
    _tasks: set[asyncio.Task] = field(default_factory=set, repr=False)

    @property
    def connected(self) -> bool:
        return self.state is ConnectionState.CONNECTED

    def mark_connected(self) -> None:
        if self.state is not ConnectionState.CONNECTED:
            logger.info(f"Connected to {self.config.server.base_url}")
        self.state = ConnectionState.CONNECTED

    def mark_disconnected(self, reason: str = "") -> None:
        if self.state is not ConnectionState.DISCONNECTED:
            logger.warning(f"Lost connection to {self.config.server.base_url}: {reason}")
        self.state = ConnectionState.DISCONNECTED

    def spawn(self, coro: Coroutine[Any, Any, Any], name: str | None = None) -> asyncio.Task:
        """Run a coroutine as an independent task on the running loop."""
        task = asyncio.get_running_loop().create_task(coro, name=name)
        self._tasks.add(task)
        task.add_done_callback(self._task_done)
        return task

    def _task_done(self, task: asyncio.Task) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            return
        if exc := task.exception():
            logger.error(f"Background task {task.get_name()} failed: {exc}")

    @property
    def background_tasks(self) -> set[asyncio.Task]:
        return set(self._tasks)

    async def drain(self) -> None:
        """Wait for every spawned task still in flight."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)
