"""Detached asyncio tasks with an error channel and shutdown draining."""

from __future__ import annotations

import asyncio
import logging
from collections import deque
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Callable, Coroutine, Deque, Dict, Optional, Set

from .metrics import incr as metrics_incr

logger = logging.getLogger(__name__)


@dataclass
class FailedTask:
    name: str
    context: Dict[str, Any]
    error: BaseException
    failed_at: datetime = field(default_factory=datetime.utcnow)


AlertHook = Callable[[FailedTask], None]


class TaskRegistry:
    """Keeps strong references to fire-and-forget tasks.

    Callers never await what they spawn. Exceptions raised by a task are
    logged, recorded in ``failures`` (bounded) and handed to ``alert_hook``;
    they never reach the code that spawned the task. Nothing is retried.
    """

    def __init__(self, alert_hook: Optional[AlertHook] = None, max_failures: int = 500):
        self._tasks: Set[asyncio.Task] = set()
        self.failures: Deque[FailedTask] = deque(maxlen=max_failures)
        self.alert_hook = alert_hook

    def __len__(self) -> int:
        return len(self._tasks)

    def spawn(self, coro: Coroutine[Any, Any, Any], *, name: str, **context: Any) -> asyncio.Task:
        task = asyncio.get_running_loop().create_task(coro, name=name)
        self._tasks.add(task)
        task.add_done_callback(lambda t: self._on_done(t, context))
        return task

    def _on_done(self, task: asyncio.Task, context: Dict[str, Any]) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            logger.warning("Background task %s cancelled %s", task.get_name(), context)
            return
        exc = task.exception()
        if exc is None:
            return
        logger.error(
            "Background task %s failed %s: %s",
            task.get_name(),
            context,
            exc,
            exc_info=(type(exc), exc, exc.__traceback__),
        )
        metrics_incr("background.task_failed_total", tags={"task": task.get_name().split(":", 1)[0]})
        failure = FailedTask(name=task.get_name(), context=dict(context), error=exc)
        self.failures.append(failure)
        if self.alert_hook is not None:
            try:
                self.alert_hook(failure)
            except Exception:
                logger.exception("Alert hook raised for task %s", task.get_name())

    async def drain(self, timeout: Optional[float] = None) -> int:
        """Wait for in-flight tasks; cancel stragglers after ``timeout``.

        Returns the number of tasks that had to be cancelled.
        """
        pending = set(self._tasks)
        if not pending:
            return 0
        logger.info("Draining %d background task(s)", len(pending))
        _, still_running = await asyncio.wait(pending, timeout=timeout)
        for task in still_running:
            task.cancel()
        if still_running:
            await asyncio.gather(*still_running, return_exceptions=True)
            logger.warning("Cancelled %d background task(s) after %.1fs", len(still_running), timeout or 0.0)
        return len(still_running)
