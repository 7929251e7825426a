from typing import TYPE_CHECKING

from .base import Executor

if TYPE_CHECKING:  # pragma: no cover
    from taskweave.execution_plan import ExecutionPlan


class SerialExecutor(Executor):
    """Runs one task at a time, strictly in task order."""

    async def dispatch(self, plan: "ExecutionPlan") -> None:
        for task_id in plan.task_order:
            await plan.runner.run(task_id)
