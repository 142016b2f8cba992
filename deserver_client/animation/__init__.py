"""Frame-stepped animation and timeline tasks."""

from deserver_client.animation.scheduler import AnimationScheduler, AnimationTask, FrameSignal, TaskStatus
from deserver_client.animation.tasks import TimelineTask, TurnTask, TweenTask

__all__ = [
    "AnimationScheduler",
    "AnimationTask",
    "FrameSignal",
    "TaskStatus",
    "TimelineTask",
    "TurnTask",
    "TweenTask",
]
