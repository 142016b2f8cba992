"""
Input Forwarding

Per-frame key and axis reports, and pause-menu state reports.
"""

from __future__ import annotations

import asyncio

from deserver_client.animation.scheduler import FrameSignal
from deserver_client.logging import get_logger
from deserver_client.sync.client import SessionClient
from deserver_client.sync.protocol import (
    create_axis_message,
    create_input_message,
    create_pause_message,
)
from deserver_client.sync.state import SessionContext
from deserver_client.world.model import InputSource, WorldModel

logger = get_logger("sync.inputs")


class InputForwarder:
    """Posts pressed keys and moved axes once per host frame."""

    def __init__(
        self,
        session: SessionContext,
        client: SessionClient,
        source: InputSource,
        frames: FrameSignal,
    ):
        self.session = session
        self.client = client
        self.source = source
        self.frames = frames

    async def forward_frame(self) -> int:
        """
        Report this frame's input.

        Keys go out in the order the source reports them, then every
        configured axis whose raw value moved past the threshold since it
        was last sent. Nothing is sent while disconnected.

        Returns:
            Number of posts made.
        """
        keys = self.source.keys_down()
        if not self.session.connected:
            return 0

        identity = self.session.identity
        posts = 0
        for key in keys:
            await self.client.post_event(create_input_message(identity, key))
            posts += 1

        settings = self.session.config.input
        for axis in settings.axes:
            value = self.source.axis(axis)
            previous = self.session.last_axis.get(axis, 0.0)
            if abs(value - previous) > settings.axis_threshold:
                await self.client.post_event(create_axis_message(identity, axis, value))
                self.session.last_axis[axis] = value
                posts += 1
        return posts

    async def run(self) -> None:
        while True:
            await self.frames.next_frame()
            await self.forward_frame()


class PauseMonitor:
    """Reports whether any pause menu is open, on start and on each change."""

    def __init__(self, session: SessionContext, client: SessionClient, world: WorldModel):
        self.session = session
        self.client = client
        self.world = world

    def is_paused(self) -> bool:
        return any(self.world.find(name) is not None for name in self.session.config.input.pause_menus)

    async def report_initial(self) -> None:
        paused = self.is_paused()
        self.session.last_paused = paused
        await self.client.post_event(create_pause_message(self.session.identity, paused))

    async def check(self) -> bool:
        """Post the pause state if it changed; True when a post was made."""
        paused = self.is_paused()
        if paused == self.session.last_paused:
            return False
        logger.debug(f"Pause state -> {'on' if paused else 'off'}")
        await self.client.post_event(create_pause_message(self.session.identity, paused))
        self.session.last_paused = paused
        return True

    async def run(self) -> None:
        await self.report_initial()
        interval = self.session.config.loops.pause_interval
        while True:
            await self.check()
            await asyncio.sleep(interval)
