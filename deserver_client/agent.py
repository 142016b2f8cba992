"""
Sync Agent

Wires the world model, scheduler, interpreter and network loops into one
object the host drives. The host calls tick(dt) once per frame from the
agent's event loop; everything else runs as tasks on that loop.
"""

from __future__ import annotations

import asyncio

import httpx

from deserver_client.animation.scheduler import AnimationScheduler, FrameSignal
from deserver_client.commands.interpreter import CommandInterpreter
from deserver_client.config import ClientConfig, get_config
from deserver_client.logging import bind_identity, get_logger
from deserver_client.sync.client import SessionClient
from deserver_client.sync.discovery import apply_discovery
from deserver_client.sync.inputs import InputForwarder, PauseMonitor
from deserver_client.sync.modules import ModuleLoader, ModuleSync
from deserver_client.sync.state import IdentityProvider, SessionContext, resolve_identity
from deserver_client.sync.supervisor import ConnectionSupervisor
from deserver_client.world.model import InputSource, WorldModel

logger = get_logger("agent")


class SyncAgent:
    """One client session against one server."""

    def __init__(
        self,
        world: WorldModel,
        config: ClientConfig | None = None,
        input_source: InputSource | None = None,
        identity_provider: IdentityProvider | None = None,
        module_loader: ModuleLoader | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        sync_transport: httpx.BaseTransport | None = None,
    ):
        self.world = world
        self.config = config or get_config()
        self.identity_provider = identity_provider

        self.scheduler = AnimationScheduler()
        self.frames = FrameSignal()
        self.session = SessionContext(self.config)
        self.client = SessionClient(self.session, transport=transport, sync_transport=sync_transport)

        self.modules = ModuleSync(self.session, self.client, module_loader) if module_loader else None
        self.interpreter = CommandInterpreter(
            world,
            self.scheduler,
            self.client,
            modules=self.modules,
            player_node=self.config.player_node,
        )
        self.supervisor = ConnectionSupervisor(self.session, self.client, world, self.interpreter)
        self.pause = PauseMonitor(self.session, self.client, world)
        self.inputs = (
            InputForwarder(self.session, self.client, input_source, self.frames) if input_source else None
        )

        self._loops: list[asyncio.Task] = []

    @property
    def running(self) -> bool:
        return bool(self._loops)

    async def start(self) -> None:
        """
        Discover the server, resolve identity, handshake and start the loops.

        The handshake blocks the event loop for at most the configured
        timeout; the loops start whether or not it succeeded.
        """
        if self.running:
            logger.warning("Agent already started")
            return

        apply_discovery(self.world, self.config.server)
        self.session.identity = resolve_identity(self.identity_provider, self.config)
        bind_identity(self.session.identity.player_name)
        logger.info(
            f"Starting as {self.session.identity.player_name} "
            f"against {self.config.server.base_url}"
        )
        self.supervisor.handshake()

        self._loops = [
            asyncio.create_task(self.supervisor.connection_loop(), name="connection"),
            asyncio.create_task(self.supervisor.poll_loop(), name="poll"),
            asyncio.create_task(self.pause.run(), name="pause"),
        ]
        if self.inputs is not None:
            self._loops.append(asyncio.create_task(self.inputs.run(), name="input"))
        if self.modules is not None:
            self._loops.append(asyncio.create_task(self.modules.run(), name="modules"))

    def tick(self, dt: float) -> None:
        """Advance animations and release frame waiters; call once per host frame."""
        self.scheduler.tick(dt)
        self.frames.fire(dt)

    async def shutdown(self) -> None:
        """Stop the loops, say goodbye and close the HTTP client."""
        loops, self._loops = self._loops, []
        for task in loops:
            task.cancel()
        await asyncio.gather(*loops, return_exceptions=True)

        for task in self.session.background_tasks:
            task.cancel()
        await self.session.drain()

        self.supervisor.disconnect()
        await self.client.close()
        logger.info("Agent stopped")

    async def run(self, fps: float = 30.0, stop: asyncio.Event | None = None) -> None:
        """
        Run headless: start, then tick at a fixed rate until stopped.

        Args:
            fps: Frames per second for the tick loop.
            stop: Optional event that ends the run when set.
        """
        frame = 1.0 / fps
        loop = asyncio.get_running_loop()
        await self.start()
        try:
            last = loop.time()
            while stop is None or not stop.is_set():
                await asyncio.sleep(frame)
                now = loop.time()
                self.tick(now - last)
                last = now
        finally:
            await self.shutdown()
