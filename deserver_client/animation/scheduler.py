"""
Animation Scheduler

Cooperative, frame-stepped task runner. The host drives it with tick(dt) once
per frame; tasks are explicit state machines advanced by step(dt).
"""

from __future__ import annotations

import asyncio
from enum import Enum
from typing import Protocol

from deserver_client.logging import get_logger

logger = get_logger("animation.scheduler")


class TaskStatus(Enum):
    PENDING = "pending"
    DONE = "done"


class AnimationTask(Protocol):
    """Anything the scheduler can advance one frame at a time."""

    def step(self, dt: float) -> TaskStatus:
        """Advance by dt seconds and report whether more steps are needed."""


class AnimationScheduler:
    """
    Steps scheduled tasks once per tick, in scheduling order.

    Tasks scheduled while a tick is running (a timeline replaying a tween,
    for example) are first stepped on the following tick.
    """

    def __init__(self):
        self._active: list[AnimationTask] = []
        self._incoming: list[AnimationTask] = []
        self._now = 0.0

    @property
    def now(self) -> float:
        """Scheduler clock: total dt seen so far."""
        return self._now

    @property
    def pending(self) -> int:
        return len(self._active) + len(self._incoming)

    def schedule(self, task: AnimationTask) -> AnimationTask:
        self._incoming.append(task)
        return task

    def tick(self, dt: float) -> None:
        self._now += dt
        self._active.extend(self._incoming)
        self._incoming.clear()

        survivors = []
        for task in self._active:
            try:
                status = task.step(dt)
            except Exception:
                logger.exception(f"Animation task {task!r} failed; dropping it")
                continue
            if status is TaskStatus.PENDING:
                survivors.append(task)
        self._active = survivors


class FrameSignal:
    """Lets coroutines wait for the next host frame."""

    def __init__(self):
        self._waiters: list[asyncio.Future] = []

    async def next_frame(self) -> float:
        """Wait until the host ticks; returns that frame's dt."""
        future = asyncio.get_running_loop().create_future()
        self._waiters.append(future)
        return await future

    def fire(self, dt: float) -> None:
        waiters, self._waiters = self._waiters, []
        for future in waiters:
            if not future.done():
                future.set_result(dt)
