import inspect
from collections.abc import Callable
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Generic, TypeVar

from fast_depends import inject
from pydantic import BaseModel, ConfigDict, Field, field_validator

if TYPE_CHECKING:  # pragma: no cover
    from collections.abc import Awaitable

    TaskFn = Callable[..., Awaitable[Any] | Any]

C = TypeVar("C")


@dataclass(frozen=True, slots=True)
class TaskRunContext(Generic[C]):
    """What a task body receives when it runs."""

    context: C
    """The payload passed to `Workflow.run`. Shared by every task; do not mutate it."""

    get_task_result: Callable[[str], Any]
    """Look up the result of a finished dependency by id."""


class Task(BaseModel):
    id: str = Field(min_length=1)
    dependencies: tuple[str, ...] = ()
    run: Callable[..., Any]

    model_config = ConfigDict(extra="forbid", frozen=True)

    @field_validator("dependencies")
    @classmethod
    def _dedupe_dependencies(cls, dependencies: tuple[str, ...]) -> tuple[str, ...]:
        return tuple(dict.fromkeys(dependencies))

    def __str__(self) -> str:
        return self.id


def _declares_injected_parameters(fn: "TaskFn") -> bool:
    # the first positional parameter is the run context, anything else is resolved
    # through fast_depends
    try:
        parameters = inspect.signature(fn).parameters
    except (TypeError, ValueError):
        return False

    return len(parameters) > 1


def resolve_task_fn(task: Task) -> "TaskFn":
    """The task body, wrapped with `fast_depends.inject` if it asks for injection."""
    if _declares_injected_parameters(task.run):
        return inject(task.run, cast=False)

    return task.run


def is_async_task(task: Task) -> bool:
    fn = task.run
    return inspect.iscoroutinefunction(fn) or inspect.iscoroutinefunction(
        getattr(fn, "__call__", None)
    )
