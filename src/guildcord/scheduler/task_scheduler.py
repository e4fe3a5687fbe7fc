"""
One-shot delayed task scheduler.

Backs command cooldown expiry. Jobs are kept in a min-heap ordered by due time
and drained by a single background runner task that sleeps on an
:class:`asyncio.Condition` until the earliest job is due or a new job arrives.
"""

import asyncio
import heapq
import inspect
from typing import Any, Callable, Set

from guildcord.util.logger import get_logger

logger = get_logger("task_scheduler")


class TaskScheduler:
    """
    Central scheduler for fire-and-forget delayed callbacks.

    Attributes:
        heap (list): Min-heap of (run_at, job_id, callback) tuples.
        pending_ids (set): Job IDs scheduled and not yet run or cancelled.
        cancelled_ids (set): Job IDs cancelled while still in the heap.
        counter (int): Monotonically increasing job ID counter.
        runner_task (asyncio.Task | None): Background task processing the schedule.
        condition (asyncio.Condition): Coordination primitive for runner wakeup.
    """

    def __init__(self) -> None:
        self.heap: list[tuple[float, int, Callable[[], Any]]] = []
        self.pending_ids: Set[int] = set()
        self.cancelled_ids: Set[int] = set()
        self.counter: int = 0
        self.runner_task: asyncio.Task[None] | None = None
        self.condition: asyncio.Condition = asyncio.Condition()
        self._notify_tasks: Set[asyncio.Task] = set()

    def ensure_runner(self) -> None:
        """Create the background runner task if it's not already active."""
        loop = asyncio.get_running_loop()
        if self.runner_task is None or self.runner_task.done():
            self.runner_task = loop.create_task(self.run(), name="guildcord-task-scheduler")

    def schedule_once(self, delay_ms: int, callback: Callable[[], Any]) -> int:
        """
        Run ``callback`` once after ``delay_ms`` milliseconds.

        ``callback`` may be a plain callable or a coroutine function. Must be called
        from a running event loop.

        Returns:
            int: Job ID usable with :meth:`cancel`.
        """
        loop = asyncio.get_running_loop()
        self.ensure_runner()

        self.counter += 1
        job_id = self.counter
        run_at = loop.time() + max(delay_ms, 0) / 1000
        heapq.heappush(self.heap, (run_at, job_id, callback))
        self.pending_ids.add(job_id)

        task = loop.create_task(self._wake_runner())
        self._notify_tasks.add(task)
        task.add_done_callback(self._notify_tasks.discard)
        return job_id

    async def _wake_runner(self) -> None:
        async with self.condition:
            self.condition.notify_all()

    def cancel(self, job_id: int) -> bool:
        """
        Cancel a scheduled job.

        The job stays in the heap and is skipped by the runner when it surfaces.

        Returns:
            bool: True if a pending job was cancelled, False if it already ran or is unknown.
        """
        if job_id not in self.pending_ids:
            return False
        self.pending_ids.discard(job_id)
        self.cancelled_ids.add(job_id)
        return True

    @property
    def pending_count(self) -> int:
        return len(self.pending_ids)

    async def shutdown(self) -> None:
        """Stop the runner and drop every pending job. Safe to call multiple times."""
        if self.runner_task:
            self.runner_task.cancel()
        self.heap.clear()
        self.pending_ids.clear()
        self.cancelled_ids.clear()

        if self.runner_task:
            try:
                await self.runner_task
            except asyncio.CancelledError:
                pass
            finally:
                self.runner_task = None

    async def run(self) -> None:
        """
        Main background loop that runs jobs when their timers elapse.

        Runs until the scheduler is shut down. A failing callback is logged and the
        loop moves on to the next job.
        """
        loop = asyncio.get_running_loop()
        while True:
            async with self.condition:
                # Skip over cancelled jobs at the top of the heap
                while self.heap and self.heap[0][1] in self.cancelled_ids:
                    _, job_id, _ = heapq.heappop(self.heap)
                    self.cancelled_ids.discard(job_id)

                if not self.heap:
                    await self.condition.wait()
                    continue

                run_at, _, _ = self.heap[0]
                delay = run_at - loop.time()

                if delay > 0:
                    try:
                        await asyncio.wait_for(self.condition.wait(), timeout=delay)
                    except asyncio.TimeoutError:
                        pass
                    continue

                _, job_id, callback = heapq.heappop(self.heap)
                self.pending_ids.discard(job_id)

            try:
                await self.execute(callback)
            except asyncio.CancelledError:
                raise
            except Exception as exc:
                logger.error("[TASK SCHEDULER] Scheduled job %s failed: %s", job_id, exc)

    async def execute(self, callback: Callable[[], Any]) -> None:
        result = callback()
        if inspect.isawaitable(result):
            await result
