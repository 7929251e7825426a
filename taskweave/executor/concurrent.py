from typing import TYPE_CHECKING

import anyio
from pydantic import PositiveInt, validate_call

from .base import Executor

if TYPE_CHECKING:  # pragma: no cover
    from taskweave.execution_plan import ExecutionPlan


class ConcurrentExecutor(Executor):
    """
    Schedules every task at once. Each task waits only for its direct dependencies to
    reach a terminal state, so unrelated branches of the graph run side by side.

    At most `limit` task bodies run at any instant. Tasks waiting on dependencies do
    not hold a slot.
    """

    @validate_call
    def __init__(self, limit: PositiveInt | None = None) -> None:
        self.limit = limit

    async def dispatch(self, plan: "ExecutionPlan") -> None:
        limiter = anyio.CapacityLimiter(self.limit) if self.limit else None
        completed: dict[str, anyio.Event] = {
            task_id: anyio.Event() for task_id in plan.task_order
        }

        async def _wait_then_run(task_id: str) -> None:
            for dep in plan.dependencies(task_id):
                await completed[dep].wait()

            await plan.runner.run(task_id, limiter)
            completed[task_id].set()

        async with anyio.create_task_group() as tg:
            for task_id in plan.task_order:
                tg.start_soon(_wait_then_run, task_id, name=f"{plan.uuid}:{task_id}")

    def __repr__(self) -> str:
        return f"{type(self).__name__}(limit={self.limit})"
