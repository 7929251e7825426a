import inspect
import logging
from contextlib import nullcontext
from dataclasses import dataclass
from typing import TYPE_CHECKING

import anyio.to_thread

from .exceptions import WorkflowError
from .task import TaskRunContext, is_async_task, resolve_task_fn

if TYPE_CHECKING:  # pragma: no cover
    from collections.abc import Mapping
    from typing import Any

    from anyio import CapacityLimiter

    from .task import Task
    from .tracker import TaskTracker

logger = logging.getLogger(__name__)


@dataclass
class TaskRunner:
    """Attempts a single task of a run, recording the outcome on `tracker`."""

    tasks: "Mapping[str, Task]"
    tracker: "TaskTracker"
    context: "Any" = None
    run_sync_in_thread: bool = True
    thread_limiter: "CapacityLimiter | None" = None

    def __post_init__(self) -> None:
        self._run_context = TaskRunContext(
            context=self.context, get_task_result=self.tracker.get_result
        )
        # resolved once per run and keyed by id, so task bodies need not be hashable
        self._task_fns: "dict[str, Any]" = {}

    def _blocking_dependencies(self, task: "Task") -> tuple[list[str], list[str]]:
        errored_dependencies: list[str] = []
        skipped_dependencies: list[str] = []

        for dep in task.dependencies:
            if self.tracker.is_errored(dep):
                errored_dependencies.append(dep)
            if self.tracker.is_skipped(dep):
                skipped_dependencies.append(dep)

        return errored_dependencies, skipped_dependencies

    async def _invoke(self, task: "Task") -> "Any":
        task_fn = self._task_fns.get(task.id)
        if task_fn is None:
            task_fn = self._task_fns[task.id] = resolve_task_fn(task)

        if is_async_task(task):
            result = task_fn(self._run_context)
        elif self.run_sync_in_thread:
            # trio refuses worker functions that return a coroutine, so the result
            # leaves the thread boxed and any awaitable is awaited on the loop
            (result,) = await anyio.to_thread.run_sync(
                lambda: (task_fn(self._run_context),), limiter=self.thread_limiter
            )
        else:
            result = task_fn(self._run_context)

        if inspect.isawaitable(result):
            result = await result

        return result

    async def run(self, task_id: str, limiter: "CapacityLimiter | None" = None) -> None:
        task = self.tasks[task_id]

        errored_dependencies, skipped_dependencies = self._blocking_dependencies(task)
        if errored_dependencies or skipped_dependencies:
            self.tracker.skip(task_id, errored_dependencies, skipped_dependencies)
            return

        async with limiter if limiter is not None else nullcontext():
            self.tracker.start(task_id)

            try:
                result = await self._invoke(task)
            except WorkflowError:
                raise
            except Exception as e:
                logger.debug("Task '%s' failed.", task_id, exc_info=True)
                self.tracker.error(task_id, e)
            else:
                self.tracker.finish(task_id, result)
