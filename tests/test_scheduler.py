"""
Tests for the animation scheduler, its tasks and the frame signal.
"""

import asyncio

import pytest

from deserver_client.animation import (
    AnimationScheduler,
    FrameSignal,
    TaskStatus,
    TimelineTask,
    TurnTask,
    TweenTask,
)
from deserver_client.wire import TimelineEntry
from deserver_client.world import Quaternion, SceneNode, Vector3


class CountingTask:
    """Task that finishes after a fixed number of steps."""

    def __init__(self, steps, log, name):
        self.remaining = steps
        self.log = log
        self.name = name

    def step(self, dt):
        self.log.append(self.name)
        self.remaining -= 1
        return TaskStatus.DONE if self.remaining <= 0 else TaskStatus.PENDING


class TestAnimationScheduler:
    """Tests for AnimationScheduler."""

    def test_steps_in_scheduling_order_and_reaps(self):
        scheduler = AnimationScheduler()
        log = []
        scheduler.schedule(CountingTask(1, log, "a"))
        scheduler.schedule(CountingTask(2, log, "b"))

        scheduler.tick(0.1)
        assert log == ["a", "b"]
        assert scheduler.pending == 1

        scheduler.tick(0.1)
        assert log == ["a", "b", "b"]
        assert scheduler.pending == 0

    def test_tasks_scheduled_during_tick_wait_for_next_tick(self):
        scheduler = AnimationScheduler()
        log = []

        class Spawner:
            def step(self, dt):
                log.append("spawner")
                scheduler.schedule(CountingTask(1, log, "child"))
                return TaskStatus.DONE

        scheduler.schedule(Spawner())
        scheduler.tick(0.1)
        assert log == ["spawner"]
        scheduler.tick(0.1)
        assert log == ["spawner", "child"]

    def test_clock_advances_by_dt(self):
        scheduler = AnimationScheduler()
        scheduler.tick(0.25)
        scheduler.tick(0.5)
        assert scheduler.now == pytest.approx(0.75)

    def test_failing_task_is_dropped(self):
        scheduler = AnimationScheduler()
        log = []

        class Broken:
            def step(self, dt):
                raise ValueError("bad")

        scheduler.schedule(Broken())
        scheduler.schedule(CountingTask(1, log, "ok"))
        scheduler.tick(0.1)
        assert log == ["ok"]
        assert scheduler.pending == 0


class TestTweenTask:
    """Tests for TweenTask."""

    def test_progress_and_exact_end(self):
        node = SceneNode("Cube")
        done = []
        task = TweenTask(node, 1.0, end_position=Vector3(0, 3, 0), on_complete=lambda: done.append(1))

        assert task.step(0.25) is TaskStatus.PENDING
        assert node.position.y == pytest.approx(0.75)
        assert task.step(0.25) is TaskStatus.PENDING
        assert task.step(10.0) is TaskStatus.DONE
        assert node.position == Vector3(0, 3, 0)
        assert done == [1]

    def test_untouched_channels(self):
        node = SceneNode("Cube", local_scale=Vector3(2, 2, 2))
        task = TweenTask(node, 1.0, end_position=Vector3(1, 0, 0))
        task.step(1.0)
        assert node.local_scale == Vector3(2, 2, 2)
        assert node.rotation == Quaternion.identity()

    def test_rotation_slerps(self):
        node = SceneNode("Cube")
        task = TweenTask(node, 2.0, end_rotation=Quaternion.from_euler(0, 90, 0))
        task.step(1.0)
        assert node.rotation.angle_to(Quaternion.from_euler(0, 45, 0)) == pytest.approx(0, abs=1e-3)

    def test_dead_target_ends_silently(self):
        node = SceneNode("Cube")
        done = []
        task = TweenTask(node, 1.0, end_position=Vector3(1, 0, 0), on_complete=lambda: done.append(1))
        node._mark_destroyed()
        assert task.step(5.0) is TaskStatus.DONE
        assert done == []
        assert node.position == Vector3.zero()


class TestTurnTask:
    """Tests for TurnTask."""

    def test_turn_reaches_end(self):
        node = SceneNode("Cube")
        done = []
        end = Quaternion.from_euler(0, 0, 90)
        task = TurnTask(node, end, 0.5, on_complete=lambda: done.append(1))
        assert task.step(0.25) is TaskStatus.PENDING
        assert task.step(0.25) is TaskStatus.DONE
        assert node.rotation == end
        assert done == [1]


class TestTimelineTask:
    """Tests for TimelineTask."""

    def test_replays_due_entries_in_order(self):
        scheduler = AnimationScheduler()
        replayed = []
        done = []
        entries = [TimelineEntry(0.0, "a"), TimelineEntry(0.0, "b"), TimelineEntry(2.0, "c")]
        scheduler.schedule(TimelineTask(scheduler, entries, replayed.append, lambda: done.append(1)))

        scheduler.tick(0.1)
        assert replayed == ["a", "b"]
        scheduler.tick(1.0)
        assert replayed == ["a", "b"]
        scheduler.tick(1.0)
        assert replayed == ["a", "b", "c"]
        assert done == [1]
        assert scheduler.pending == 0

    def test_offsets_measured_from_creation(self):
        scheduler = AnimationScheduler()
        scheduler.tick(5.0)
        replayed = []
        scheduler.schedule(TimelineTask(scheduler, [TimelineEntry(1.0, "late")], replayed.append))
        scheduler.tick(0.5)
        assert replayed == []
        scheduler.tick(0.5)
        assert replayed == ["late"]

    def test_negative_offset_treated_as_zero(self):
        scheduler = AnimationScheduler()
        replayed = []
        scheduler.schedule(TimelineTask(scheduler, [TimelineEntry(-3.0, "now")], replayed.append))
        scheduler.tick(0.0)
        assert replayed == ["now"]

    def test_empty_timeline_completes_on_first_step(self):
        scheduler = AnimationScheduler()
        done = []
        scheduler.schedule(TimelineTask(scheduler, [], lambda p: None, lambda: done.append(1)))
        scheduler.tick(0.0)
        assert done == [1]


class TestFrameSignal:
    """Tests for FrameSignal."""

    def test_waiters_resolve_on_fire(self):
        async def _run():
            signal = FrameSignal()
            waiter = asyncio.create_task(signal.next_frame())
            await asyncio.sleep(0)
            signal.fire(0.016)
            return await waiter

        assert asyncio.run(_run()) == pytest.approx(0.016)

    def test_fire_without_waiters(self):
        FrameSignal().fire(0.1)
