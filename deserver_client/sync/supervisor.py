"""
Connection Supervisor

Owns the connection state machine and the two periodic loops that run while
connected: the heartbeat (player transform plus world snapshot) and the
command poller.

    DISCONNECTED --handshake ok--> CONNECTED
    CONNECTED --any transport failure--> DISCONNECTED
    DISCONNECTED --heartbeat or handshake ok--> CONNECTED
"""

from __future__ import annotations

import asyncio

from deserver_client.commands.interpreter import CommandInterpreter
from deserver_client.errors import TransportError
from deserver_client.logging import get_logger
from deserver_client.sync.client import SessionClient
from deserver_client.sync.protocol import (
    create_connect_message,
    create_disconnect_message,
    create_objects_message,
    create_pos_message,
)
from deserver_client.sync.snapshot import serialize_snapshot
from deserver_client.sync.state import SessionContext
from deserver_client.world.model import Node, WorldModel

logger = get_logger("sync.supervisor")


class ConnectionSupervisor:
    """Drives handshake, heartbeat and command polling for one session."""

    def __init__(
        self,
        session: SessionContext,
        client: SessionClient,
        world: WorldModel,
        interpreter: CommandInterpreter,
    ):
        self.session = session
        self.client = client
        self.world = world
        self.interpreter = interpreter

    # -- connection -----------------------------------------------------------

    def handshake(self) -> bool:
        """Blocking initial connect, bounded by the configured timeout."""
        ok = self.client.post_blocking(create_connect_message(self.session.identity))
        if ok:
            self.session.mark_connected()
        else:
            self.session.mark_disconnected("initial handshake failed")
        return ok

    async def connect(self) -> bool:
        ok = await self.client.post_event(create_connect_message(self.session.identity))
        if ok:
            self.session.mark_connected()
        return ok

    def disconnect(self) -> bool:
        """Best-effort blocking disconnect for shutdown."""
        return self.client.post_blocking(create_disconnect_message(self.session.identity))

    # -- heartbeat ------------------------------------------------------------

    def _player(self) -> Node | None:
        player = self.session.player
        if player is None or not player.alive:
            player = self.world.find(self.session.config.player_node)
            self.session.player = player
        return player

    async def heartbeat(self) -> bool:
        """
        Push the player transform, then the world snapshot.

        Returns:
            True when both posts got through; the first failure aborts the
            cycle (the client has already marked the session disconnected).
        """
        player = self._player()
        camera = self.world.main_camera()
        pos = create_pos_message(
            self.session.identity,
            position=player.position if player is not None else None,
            rotation=player.euler_angles if player is not None else None,
            camera=camera.position if camera is not None else None,
        )
        if not await self.client.post_event(pos):
            return False

        objects = create_objects_message(self.session.identity, serialize_snapshot(self.world))
        if not await self.client.post_event(objects):
            return False

        self.session.mark_connected()
        return True

    # -- command poll ---------------------------------------------------------

    async def poll(self) -> int:
        """
        Fetch pending commands and apply them in server order.

        Returns:
            Number of commands applied.
        """
        try:
            commands = await self.client.fetch_commands()
        except TransportError:
            return 0
        for payload in commands:
            self.interpreter.apply(payload)
        if commands:
            logger.debug(f"Applied {len(commands)} command(s)")
        return len(commands)

    # -- loops ----------------------------------------------------------------

    async def connection_loop(self) -> None:
        loops = self.session.config.loops
        while True:
            if not self.session.connected and not await self.connect():
                await asyncio.sleep(loops.retry_interval)
                continue
            if not await self.heartbeat():
                await asyncio.sleep(loops.retry_interval)
                continue
            await asyncio.sleep(loops.objects_interval)

    async def poll_loop(self) -> None:
        # Each poll completes before the next is scheduled
        interval = self.session.config.loops.poll_interval
        while True:
            if self.session.connected:
                await self.poll()
            await asyncio.sleep(interval)
