"""Tests for timer scheduling."""

import asyncio
import time

import pytest

from mudrules.models import RuleClass, Timer
from mudrules.pipeline import TimerScheduler, index_classes


async def _shutdown(scheduler: TimerScheduler) -> None:
    await scheduler.shutdown()


class TestTimerScheduler:
    """Tests for installing and firing timers."""

    @pytest.mark.asyncio
    async def test_one_shot_fires_once_and_reports(self, evaluator, recorder):
        """Test a one-shot timer fires exactly once, then is reported."""
        deactivated = []
        scheduler = TimerScheduler(evaluator, on_deactivate=deactivated.append)
        timer = Timer(name="once", interval=20, one_shot=True, script='send("boom")')

        scheduler.install([timer], {})
        assert scheduler.active_timer_ids == [timer.id]
        await asyncio.sleep(0.12)

        assert recorder.sent == ["boom"]
        assert deactivated == [timer.id]
        assert scheduler.active_timer_ids == []
        assert timer.active
        await _shutdown(scheduler)

    @pytest.mark.asyncio
    async def test_repeating_timer_keeps_firing(self, evaluator, recorder):
        scheduler = TimerScheduler(evaluator)
        scheduler.install([Timer(interval=20, script='send("tick")')], {})
        await asyncio.sleep(0.13)

        assert recorder.sent.count("tick") >= 3
        assert len(scheduler.active_timer_ids) == 1
        await _shutdown(scheduler)

    @pytest.mark.asyncio
    async def test_reinstall_cancels_previous_callbacks(self, evaluator, recorder):
        """Test that replacing the list leaves one callback per timer."""
        scheduler = TimerScheduler(evaluator)
        timer = Timer(interval=50, script='send("tick")')

        scheduler.install([timer], {})
        first_tasks = list(scheduler._tasks.values())
        scheduler.install([timer], {})
        await asyncio.sleep(0)

        assert all(task.cancelled() for task in first_tasks)
        assert scheduler.active_timer_ids == [timer.id]

        await asyncio.sleep(0.08)
        assert recorder.sent == ["tick"]
        await _shutdown(scheduler)

    @pytest.mark.asyncio
    async def test_failing_script_does_not_cancel_schedule(self, evaluator, recorder):
        scheduler = TimerScheduler(evaluator)
        timer = Timer(interval=20, script='raise ValueError("nope")')
        scheduler.install([timer], {})
        await asyncio.sleep(0.1)

        assert len(recorder.echoed) >= 2
        assert scheduler.active_timer_ids == [timer.id]
        await _shutdown(scheduler)

    @pytest.mark.asyncio
    async def test_disabled_timers_are_not_scheduled(self, evaluator, recorder):
        off = RuleClass(name="off", active=False)
        timers = [
            Timer(interval=20, script='send("a")', active=False),
            Timer(interval=20, script='send("b")', class_id=off.id),
        ]
        handle = TimerScheduler(evaluator).install(timers, index_classes([off]))
        await asyncio.sleep(0.06)

        assert handle.timer_ids == ()
        assert recorder.sent == []

    @pytest.mark.asyncio
    async def test_stale_handle_is_ignored(self, evaluator):
        """Test that disposing an old install does not cancel the new one."""
        scheduler = TimerScheduler(evaluator)
        timer = Timer(interval=1000, script="")
        old = scheduler.install([timer], {})
        new = scheduler.install([timer], {})

        scheduler.dispose(old)
        assert scheduler.active_timer_ids == [timer.id]

        scheduler.dispose(new)
        assert scheduler.active_timer_ids == []
        await asyncio.sleep(0)

    @pytest.mark.asyncio
    async def test_cancel_single_timer(self, evaluator):
        scheduler = TimerScheduler(evaluator)
        keep = Timer(interval=1000, script="")
        drop = Timer(interval=1000, script="")
        scheduler.install([keep, drop], {})

        assert scheduler.cancel(drop.id)
        assert not scheduler.cancel(drop.id)
        assert scheduler.active_timer_ids == [keep.id]
        await _shutdown(scheduler)

    @pytest.mark.asyncio
    async def test_deactivation_callback_error_is_contained(self, evaluator, recorder):
        def explode(timer_id):
            raise RuntimeError("persistence down")

        scheduler = TimerScheduler(evaluator, on_deactivate=explode)
        scheduler.install([Timer(interval=10, one_shot=True, script='send("x")')], {})
        await asyncio.sleep(0.06)

        assert recorder.sent == ["x"]
        assert scheduler.active_timer_ids == []

    @pytest.mark.asyncio
    async def test_stalled_loop_does_not_burst(self, evaluator, recorder):
        """Test that ticks missed while the loop was blocked are dropped."""
        scheduler = TimerScheduler(evaluator)
        scheduler.install([Timer(interval=50, script='send("tick")')], {})
        await asyncio.sleep(0.06)
        assert recorder.sent == ["tick"]

        time.sleep(0.5)
        before = len(recorder.sent)
        await asyncio.sleep(0.01)

        assert len(recorder.sent) - before <= 2

        await asyncio.sleep(0.12)
        assert len(recorder.sent) - before >= 2
        await _shutdown(scheduler)


class TestTimerShutdown:
    """Tests for awaiting cancelled timer callbacks."""

    @pytest.mark.asyncio
    async def test_shutdown_waits_for_cancelled_tasks(self, evaluator):
        scheduler = TimerScheduler(evaluator)
        scheduler.install([Timer(interval=1000, script=""), Timer(interval=20, script="")], {})
        tasks = list(scheduler._tasks.values())

        await scheduler.shutdown()

        assert all(task.done() for task in tasks)
        assert scheduler.active_timer_ids == []

    @pytest.mark.asyncio
    async def test_shutdown_ignores_stale_handle(self, evaluator):
        scheduler = TimerScheduler(evaluator)
        timer = Timer(interval=1000, script="")
        old = scheduler.install([timer], {})
        new = scheduler.install([timer], {})

        await scheduler.shutdown(old)
        assert scheduler.active_timer_ids == [timer.id]

        await scheduler.shutdown(new)
        assert scheduler.active_timer_ids == []

    @pytest.mark.asyncio
    async def test_shutdown_with_nothing_installed(self, evaluator):
        await TimerScheduler(evaluator).shutdown()
