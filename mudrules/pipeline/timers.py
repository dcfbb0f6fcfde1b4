"""Interval scheduling for timer rules.

Every install cancels whatever this scheduler had running and starts one
asyncio task per enabled timer. Tasks sleep until their next deadline, run
the script, and repeat; one-shot timers stop after the first fire and are
reported through `on_deactivate` so the owner can persist `active=False`.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Callable, Mapping, Optional, Sequence

from mudrules.errors import SandboxUnavailable
from mudrules.models import RuleClass, Timer
from mudrules.sandbox import ScriptSandbox

from .class_gate import enabled_rules

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TimerHandle:
    """Identifies one install of the timer list."""

    generation: int
    timer_ids: tuple[str, ...]


class TimerScheduler:
    """Owns the scheduled callbacks for one session."""

    def __init__(
        self,
        sandbox: ScriptSandbox,
        on_deactivate: Optional[Callable[[str], None]] = None,
    ):
        self.sandbox = sandbox
        self.on_deactivate = on_deactivate
        self._tasks: dict[str, asyncio.Task[None]] = {}
        self._generation = 0

    @property
    def active_timer_ids(self) -> list[str]:
        """Ids of timers that currently have a live callback."""
        return [timer_id for timer_id, task in self._tasks.items() if not task.done()]

    def install(self, timers: Sequence[Timer], classes_by_id: Mapping[str, RuleClass]) -> TimerHandle:
        """Replace every scheduled callback with the given timer list.

        Must be called from within a running event loop.
        """
        self.cancel_all()
        self._generation += 1

        for timer in enabled_rules(timers, classes_by_id):
            if timer.id in self._tasks:
                logger.warning("Duplicate timer id %s; keeping the first", timer.id)
                continue
            self._tasks[timer.id] = asyncio.create_task(
                self._run_timer(timer), name=f"timer:{timer.id}"
            )

        logger.info("Installed %d timer(s) (generation %d)", len(self._tasks), self._generation)
        return TimerHandle(generation=self._generation, timer_ids=tuple(self._tasks))

    def dispose(self, handle: Optional[TimerHandle] = None) -> None:
        """Cancel the callbacks of an install; a stale handle is ignored."""
        if handle is not None and handle.generation != self._generation:
            logger.debug("Ignoring dispose of stale timer generation %d", handle.generation)
            return
        self.cancel_all()

    async def shutdown(self, handle: Optional[TimerHandle] = None) -> None:
        """Like `dispose`, then wait until the cancelled callbacks have finished."""
        if handle is not None and handle.generation != self._generation:
            logger.debug("Ignoring shutdown of stale timer generation %d", handle.generation)
            return
        current = asyncio.current_task()
        tasks = [task for task in self._tasks.values() if task is not current]
        self.cancel_all()
        await asyncio.gather(*tasks, return_exceptions=True)

    def cancel_all(self) -> None:
        for task in self._tasks.values():
            task.cancel()
        if self._tasks:
            logger.debug("Cancelled %d timer callback(s)", len(self._tasks))
        self._tasks.clear()

    def cancel(self, timer_id: str) -> bool:
        """Cancel a single timer's callback."""
        task = self._tasks.pop(timer_id, None)
        if task is None:
            return False
        task.cancel()
        return True

    async def _run_timer(self, timer: Timer) -> None:
        loop = asyncio.get_running_loop()
        interval = timer.interval / 1000.0
        deadline = loop.time() + interval

        while True:
            await asyncio.sleep(max(0.0, deadline - loop.time()))
            deadline += interval
            await self._fire(timer)

            if timer.one_shot:
                if self._tasks.get(timer.id) is asyncio.current_task():
                    del self._tasks[timer.id]
                self._report_deactivation(timer)
                return

            now = loop.time()
            if deadline <= now:
                # missed ticks after a stall are dropped, not replayed
                skipped = int((now - deadline) // interval) + 1
                logger.debug("Timer %s skipped %d missed tick(s)", timer.id, skipped)
                deadline += skipped * interval

    async def _fire(self, timer: Timer) -> None:
        logger.debug("Timer %s (%s) fired", timer.id, timer.name)
        try:
            result = await self.sandbox.run(timer.script)
        except SandboxUnavailable as exc:
            logger.error("Timer %s not run: %s", timer.name or timer.id, exc)
            return
        except Exception as exc:
            logger.error("Timer %s execution error: %s", timer.name or timer.id, exc)
            return
        if not result.ok:
            logger.info("Timer %s script failed; schedule continues", timer.name or timer.id)

    def _report_deactivation(self, timer: Timer) -> None:
        if self.on_deactivate is None:
            return
        try:
            self.on_deactivate(timer.id)
        except Exception as exc:
            logger.error("Deactivation callback failed for timer %s: %s", timer.id, exc)
