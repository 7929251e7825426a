from dataclasses import dataclass, field
from typing import TYPE_CHECKING
from uuid import UUID, uuid4

if TYPE_CHECKING:  # pragma: no cover
    from collections.abc import Mapping

    from .runner import TaskRunner
    from .task import Task


@dataclass(frozen=True, kw_only=True)
class ExecutionPlan:
    """Everything an executor needs for one run of a built workflow."""

    task_order: tuple[str, ...]
    tasks: "Mapping[str, Task]"
    runner: "TaskRunner"
    uuid: UUID = field(default_factory=uuid4)

    def dependencies(self, task_id: str) -> tuple[str, ...]:
        return self.tasks[task_id].dependencies
