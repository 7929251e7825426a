import logging
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:  # pragma: no cover
    from taskweave.execution_plan import ExecutionPlan

logger = logging.getLogger(__name__)


def _flatten(group: BaseExceptionGroup) -> list[BaseException]:
    leaves: list[BaseException] = []

    for exc in group.exceptions:
        if isinstance(exc, BaseExceptionGroup):
            leaves.extend(_flatten(exc))
        else:
            leaves.append(exc)

    return leaves


class Executor(ABC):
    """
    Drives a `TaskRunner` across a plan's task order. Every id on the order is
    attempted or skipped exactly once, never before its dependencies have been.
    """

    async def execute(self, plan: "ExecutionPlan") -> None:
        logger.debug(
            "Executing %d task(s) for run '%s' with %s.",
            len(plan.task_order),
            plan.uuid,
            type(self).__name__,
        )
        try:
            await self.dispatch(plan)
        except ExceptionGroup as group:
            # task groups wrap whatever aborted the run; surface a lone error as-is so
            # every executor raises the same type
            leaves = _flatten(group)
            if len(leaves) == 1:
                raise leaves[0] from None

            raise

    @abstractmethod
    async def dispatch(self, plan: "ExecutionPlan") -> None:
        raise NotImplementedError()

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"
