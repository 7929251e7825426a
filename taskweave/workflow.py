"""
Workflow module for the taskweave framework.
"""

import logging
from types import MappingProxyType
from typing import TYPE_CHECKING, Generic, TypeVar

import anyio
import sniffio

from .config import Config
from .events import EventEmitter, WorkflowStart
from .exceptions import DuplicateTaskError, SelfDependencyError
from .execution_plan import ExecutionPlan
from .executor import ConcurrentExecutor, SerialExecutor, StagedExecutor, get_executor
from .runner import TaskRunner
from .task import Task
from .tracker import TaskTracker
from .validation import validate_task_graph

if TYPE_CHECKING:  # pragma: no cover
    from collections.abc import Awaitable, Callable, Iterable, Mapping
    from typing import Any

    from .events import WorkflowSummary
    from .executor import Executor
    from .topology import Topology

C = TypeVar("C")

logger = logging.getLogger(__name__)


class Workflow(Generic[C]):
    """
    A validated, runnable set of tasks. The task order and the tasks themselves are
    fixed at build time; register more tasks and build again to change them.
    """

    def __init__(
        self,
        *,
        topology: "Topology",
        tasks: "Mapping[str, Task]",
        executor: "Executor",
        config: Config,
    ) -> None:
        self.topology = topology
        self.tasks: "Mapping[str, Task]" = MappingProxyType(dict(tasks))
        self.executor = executor
        self.config = config
        self.emitter = EventEmitter()

    @property
    def task_order(self) -> tuple[str, ...]:
        return self.topology.order

    async def run(self, context: C | None = None) -> "WorkflowSummary":
        """
        Attempt every task in the task order and return which finished, errored or
        were skipped. Task failures never abort the run; construction errors raised
        from within a task body do.
        """
        logger.info(
            "Starting workflow of %d task(s) with %r.",
            len(self.task_order),
            self.executor,
        )
        self.emitter.emit(
            "workflow_start", WorkflowStart(context=context, task_order=self.task_order)
        )

        tracker = TaskTracker(self.emitter)
        runner = TaskRunner(
            tasks=self.tasks,
            tracker=tracker,
            context=context,
            run_sync_in_thread=self.config.run_sync_in_thread,
            thread_limiter=(
                anyio.CapacityLimiter(self.config.thread_limit)
                if self.config.thread_limit
                else None
            ),
        )

        await self.executor.execute(
            ExecutionPlan(task_order=self.task_order, tasks=self.tasks, runner=runner)
        )

        summary = tracker.get_summary()
        logger.info(
            "Workflow finished: %d finished, %d errored, %d skipped.",
            len(summary.tasks_finished),
            len(summary.tasks_errored),
            len(summary.tasks_skipped),
        )
        self.emitter.emit("workflow_finish", summary)

        return summary

    def __call__(
        self, context: C | None = None
    ) -> "Awaitable[WorkflowSummary] | WorkflowSummary":
        """
        Run the workflow. Inside an event loop this returns the `run` coroutine;
        outside of one it blocks until the run completes.
        """
        try:
            sniffio.current_async_library()
            return self.run(context)
        except sniffio.AsyncLibraryNotFoundError:
            return anyio.run(self.run, context, backend=self.config.async_backend)

    def __str__(self) -> str:
        return str(self.topology)


class WorkflowBuilder(Generic[C]):
    """
    Registry of tasks from which workflows are built.

    ```python
    builder = WorkflowBuilder()

    @builder.task("foo")
    async def foo(ctx: TaskRunContext) -> str:
        return json.dumps(ctx.context)

    @builder.task("bar", dependencies=["foo"])
    async def bar(ctx: TaskRunContext) -> int:
        return len(ctx.get_task_result("foo"))

    summary = await builder.build_concurrent().run({"hello": "world"})
    ```
    """

    def __init__(self, **settings: "Any") -> None:
        self.config = Config(**settings)
        self._tasks: dict[str, Task] = {}

    @property
    def tasks(self) -> "Mapping[str, Task]":
        return MappingProxyType(self._tasks)

    def add_task(self, task: "Task | Mapping[str, Any]") -> Task:
        if not isinstance(task, Task):
            task = Task.model_validate(task)

        if task.id in self._tasks:
            raise DuplicateTaskError(task.id)
        elif task.id in task.dependencies:
            raise SelfDependencyError(task.id)

        self._tasks[task.id] = task
        logger.debug("Registered task '%s'.", task.id)
        return task

    def add_tasks(self, *tasks: "Task | Mapping[str, Any]") -> None:
        for task in tasks:
            self.add_task(task)

    def task(
        self, id: str, dependencies: "Iterable[str]" = ()
    ) -> "Callable[[Callable[..., Any]], Task]":
        """Register the decorated function as the body of task `id`."""

        def _register(fn: "Callable[..., Any]") -> Task:
            return self.add_task(Task(id=id, dependencies=tuple(dependencies), run=fn))

        return _register

    def build(
        self,
        selection: "Iterable[str] | str | None" = None,
        executor: "Executor | None" = None,
    ) -> Workflow[C]:
        """
        Validate the registered tasks and build a workflow running `selection` (every
        task by default) plus whatever it transitively depends on.
        """
        if isinstance(selection, str):
            selection = [selection]

        topology = validate_task_graph(self._tasks, selection)

        if executor is None:
            executor = get_executor(
                self.config.default_executor, self.config.concurrency_limit
            )

        logger.debug("Built workflow with task order %s.", topology.order)
        return Workflow(
            topology=topology,
            tasks={task_id: self._tasks[task_id] for task_id in topology.order},
            executor=executor,
            config=self.config,
        )

    def build_serial(
        self, selection: "Iterable[str] | str | None" = None
    ) -> Workflow[C]:
        return self.build(selection, SerialExecutor())

    def build_concurrent(
        self, selection: "Iterable[str] | str | None" = None, limit: int | None = None
    ) -> Workflow[C]:
        return self.build(selection, ConcurrentExecutor(limit=limit))

    def build_staged(
        self, selection: "Iterable[str] | str | None" = None, limit: int | None = None
    ) -> Workflow[C]:
        return self.build(selection, StagedExecutor(limit=limit))
