from typing import TYPE_CHECKING

import anyio
from pydantic import PositiveInt, validate_call

from .base import Executor

if TYPE_CHECKING:  # pragma: no cover
    from collections.abc import Mapping, Sequence

    from taskweave.execution_plan import ExecutionPlan
    from taskweave.task import Task


def compute_stages(
    task_order: "Sequence[str]", tasks: "Mapping[str, Task]"
) -> list[list[str]]:
    """
    Partition a task order by height: 0 for tasks without dependencies, otherwise one
    more than the highest dependency. Stage `n` holds every task of height `n`, in
    task order.
    """
    heights: dict[str, int] = {}
    stages: list[list[str]] = []

    for task_id in task_order:
        height = max((heights[dep] for dep in tasks[task_id].dependencies), default=-1)
        height += 1
        heights[task_id] = height

        if height == len(stages):
            stages.append([])

        stages[height].append(task_id)

    return stages


class StagedExecutor(Executor):
    """
    Runs tasks in waves. Every task of a stage runs concurrently (at most `limit` at
    once), and a stage starts only once the previous one has fully completed.
    """

    @validate_call
    def __init__(self, limit: PositiveInt | None = None) -> None:
        self.limit = limit

    async def dispatch(self, plan: "ExecutionPlan") -> None:
        for stage in compute_stages(plan.task_order, plan.tasks):
            limiter = anyio.CapacityLimiter(self.limit) if self.limit else None

            async with anyio.create_task_group() as tg:
                for task_id in stage:
                    tg.start_soon(
                        plan.runner.run, task_id, limiter, name=f"{plan.uuid}:{task_id}"
                    )

    def __repr__(self) -> str:
        return f"{type(self).__name__}(limit={self.limit})"
