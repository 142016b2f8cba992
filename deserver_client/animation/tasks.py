"""
Animation Tasks

Tween (position/rotation/scale), turn (rotation only) and timeline replay.
Each completes exactly once; a task whose target node has been destroyed
ends silently without its completion callback.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence

from deserver_client.animation.scheduler import AnimationScheduler, TaskStatus
from deserver_client.wire.decoder import TimelineEntry
from deserver_client.world.model import Node
from deserver_client.world.spatial import Quaternion, Vector3

OnComplete = Callable[[], None]


def _progress(elapsed: float, duration: float) -> float:
    if duration <= 0:
        return 1.0
    return max(0.0, min(1.0, elapsed / duration))


class TweenTask:
    """Interpolates any combination of position, rotation and scale.

    Channels passed as None are left alone.
    """

    def __init__(
        self,
        node: Node,
        duration: float,
        end_position: Vector3 | None = None,
        end_rotation: Quaternion | None = None,
        end_scale: Vector3 | None = None,
        on_complete: OnComplete | None = None,
    ):
        self.node = node
        self.duration = duration
        self.elapsed = 0.0
        self.end_position = end_position
        self.end_rotation = end_rotation
        self.end_scale = end_scale
        self.on_complete = on_complete

        self.start_position = node.position
        self.start_rotation = node.rotation
        self.start_scale = node.local_scale

    def __repr__(self) -> str:
        return f"TweenTask({self.node.name!r}, {self.elapsed:.3f}/{self.duration})"

    def step(self, dt: float) -> TaskStatus:
        if not self.node.alive:
            return TaskStatus.DONE

        self.elapsed += dt
        t = _progress(self.elapsed, self.duration)
        if t >= 1.0:
            self._apply_end()
            if self.on_complete:
                self.on_complete()
            return TaskStatus.DONE

        if self.end_position is not None:
            self.node.position = self.start_position.lerp(self.end_position, t)
        if self.end_rotation is not None:
            self.node.rotation = self.start_rotation.slerp(self.end_rotation, t)
        if self.end_scale is not None:
            self.node.local_scale = self.start_scale.lerp(self.end_scale, t)
        return TaskStatus.PENDING

    def _apply_end(self) -> None:
        if self.end_position is not None:
            self.node.position = self.end_position
        if self.end_rotation is not None:
            self.node.rotation = self.end_rotation
        if self.end_scale is not None:
            self.node.local_scale = self.end_scale


class TurnTask(TweenTask):
    """Rotation-only tween along the shortest arc."""

    def __init__(
        self,
        node: Node,
        end_rotation: Quaternion,
        duration: float,
        on_complete: OnComplete | None = None,
    ):
        super().__init__(node, duration, end_rotation=end_rotation, on_complete=on_complete)

    def __repr__(self) -> str:
        return f"TurnTask({self.node.name!r}, {self.elapsed:.3f}/{self.duration})"


class TimelineTask:
    """
    Replays sub-command payloads at offsets from its creation time.

    Entries must already be sorted by offset. Every entry that has come due
    by the current step is replayed, in order; after the last one the
    completion callback fires once.
    """

    def __init__(
        self,
        scheduler: AnimationScheduler,
        entries: Sequence[TimelineEntry],
        replay: Callable[[str], None],
        on_complete: OnComplete | None = None,
    ):
        self.scheduler = scheduler
        self.start = scheduler.now
        self.entries = list(entries)
        self.replay = replay
        self.on_complete = on_complete
        self._next = 0

    def __repr__(self) -> str:
        return f"TimelineTask({self._next}/{len(self.entries)} replayed)"

    def step(self, dt: float) -> TaskStatus:
        now = self.scheduler.now
        while self._next < len(self.entries):
            entry = self.entries[self._next]
            if self.start + max(0.0, entry.offset) > now:
                return TaskStatus.PENDING
            self._next += 1
            self.replay(entry.payload)

        if self.on_complete:
            self.on_complete()
        return TaskStatus.DONE
