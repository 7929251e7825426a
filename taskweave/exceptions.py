from typing import TYPE_CHECKING

if TYPE_CHECKING:  # pragma: no cover
    from typing import Any


class TaskweaveError(Exception):
    def __init__(self, *args: "Any", **kwargs: "Any") -> None:
        super().__init__(*args, **kwargs)


##
## WORKFLOW CONSTRUCTION
##


class WorkflowError(TaskweaveError):
    """
    Structural errors. These are never recorded against a task; they propagate out of
    the build or run that raised them.
    """

    def __init__(self, message: str) -> None:
        super().__init__(message)


class WorkflowConstructionError(WorkflowError):
    pass


class DuplicateTaskError(WorkflowConstructionError):
    def __init__(self, task_id: str) -> None:
        self.task_id = task_id
        super().__init__(f"Task '{task_id}' is registered twice.")


class SelfDependencyError(WorkflowConstructionError):
    def __init__(self, task_id: str) -> None:
        self.task_id = task_id
        super().__init__(f"Task '{task_id}' depends on itself.")


class CyclicGraphError(WorkflowConstructionError):
    def __init__(self, cycles: list[tuple[str, ...]]) -> None:
        self.cycles = cycles
        cycle_str = "\n  ".join(" -> ".join((*cycle, cycle[0])) for cycle in cycles)
        super().__init__(
            "Workflows cannot contain dependency cycles. Offending cycles:\n"
            f"  {cycle_str}"
        )


class UnregisteredDependencyError(WorkflowConstructionError):
    def __init__(self, task_id: str) -> None:
        self.task_id = task_id
        super().__init__(
            f"Task '{task_id}' is not registered. Register it with `add_task` before"
            " building a workflow that requires it."
        )


class TrackerStateError(WorkflowError):
    def __init__(self, task_id: str, state: str) -> None:
        self.task_id = task_id
        self.state = state
        super().__init__(
            f"Task '{task_id}' is already {state} and cannot be recorded again."
        )


##
## TASK EXECUTION
##


class TaskError(TaskweaveError):
    """Errors recorded as the failure of the task that raised them."""

    def __init__(self, message: str) -> None:
        super().__init__(message)


class TaskFailedError(TaskError):
    def __init__(self, task_id: str, value: "Any") -> None:
        self.task_id = task_id
        self.value = value
        super().__init__(f"Task '{task_id}' failed with a non-exception value: {value!r}")


class TaskResultError(TaskError):
    def __init__(self, task_id: str, reason: str) -> None:
        self.task_id = task_id
        super().__init__(
            f"Requested the result of task '{task_id}', {reason}. Check that"
            f" '{task_id}' is declared as a dependency of the requesting task."
        )


class ErroredResultError(TaskResultError):
    def __init__(self, task_id: str) -> None:
        super().__init__(task_id, "which raised an error")


class SkippedResultError(TaskResultError):
    def __init__(self, task_id: str) -> None:
        super().__init__(task_id, "which was skipped")


class UnfinishedResultError(TaskResultError):
    def __init__(self, task_id: str) -> None:
        super().__init__(task_id, "which has not finished")


##
## EVENTS
##


class UnknownEventError(TaskweaveError):
    def __init__(self, event_name: str) -> None:
        super().__init__(f"'{event_name}' is not a workflow event.")
