import logging
import threading
from enum import Enum
from typing import TYPE_CHECKING

from .events import TaskFinish, TaskSkip, TaskStart, TaskThrow, WorkflowSummary
from .exceptions import (
    ErroredResultError,
    SkippedResultError,
    TaskFailedError,
    TrackerStateError,
    UnfinishedResultError,
)

if TYPE_CHECKING:  # pragma: no cover
    from collections.abc import Sequence
    from typing import Any

    from .events import EventEmitter

logger = logging.getLogger(__name__)


class TaskState(Enum):
    UNSTARTED = "unstarted"
    RUNNING = "running"
    FINISHED = "finished"
    ERRORED = "errored"
    SKIPPED = "skipped"


class TaskTracker:
    """
    Per-run record of which tasks finished (with their results), errored or were
    skipped. Every transition is emitted on `emitter` before it is recorded.

    Each task id may be classified at most once. Reads and writes are serialized by a
    lock since synchronous task bodies read results from worker threads.
    """

    def __init__(self, emitter: "EventEmitter") -> None:
        self.emitter = emitter

        self._lock = threading.Lock()
        self._running: set[str] = set()
        self._finished: dict[str, "Any"] = {}
        self._errored: dict[str, BaseException] = {}
        self._skipped: dict[str, tuple[tuple[str, ...], tuple[str, ...]]] = {}

    def _state(self, task_id: str) -> TaskState:
        if task_id in self._finished:
            return TaskState.FINISHED
        elif task_id in self._errored:
            return TaskState.ERRORED
        elif task_id in self._skipped:
            return TaskState.SKIPPED
        elif task_id in self._running:
            return TaskState.RUNNING

        return TaskState.UNSTARTED

    def state(self, task_id: str) -> TaskState:
        with self._lock:
            return self._state(task_id)

    def _ensure_unclassified(self, task_id: str) -> None:
        with self._lock:
            state = self._state(task_id)

        if state not in (TaskState.UNSTARTED, TaskState.RUNNING):
            raise TrackerStateError(task_id, state.value)

    def is_finished(self, task_id: str) -> bool:
        with self._lock:
            return task_id in self._finished

    def is_errored(self, task_id: str) -> bool:
        with self._lock:
            return task_id in self._errored

    def is_skipped(self, task_id: str) -> bool:
        with self._lock:
            return task_id in self._skipped

    def get_result(self, task_id: str) -> "Any":
        with self._lock:
            if task_id in self._errored:
                raise ErroredResultError(task_id)
            elif task_id in self._skipped:
                raise SkippedResultError(task_id)
            elif task_id not in self._finished:
                raise UnfinishedResultError(task_id)

            return self._finished[task_id]

    def start(self, task_id: str) -> None:
        self._ensure_unclassified(task_id)
        logger.debug("Task '%s' started.", task_id)

        self.emitter.emit("task_start", TaskStart(id=task_id))

        with self._lock:
            self._running.add(task_id)

    def finish(self, task_id: str, result: "Any") -> None:
        self._ensure_unclassified(task_id)
        logger.debug("Task '%s' finished.", task_id)

        self.emitter.emit("task_finish", TaskFinish(id=task_id, result=result))

        with self._lock:
            self._running.discard(task_id)
            self._finished[task_id] = result

    def error(self, task_id: str, cause: "Any") -> None:
        self._ensure_unclassified(task_id)

        error = (
            cause
            if isinstance(cause, BaseException)
            else TaskFailedError(task_id, cause)
        )
        logger.warning("Task '%s' raised %r.", task_id, error)

        self.emitter.emit("task_throw", TaskThrow(id=task_id, error=error))

        with self._lock:
            self._running.discard(task_id)
            self._errored[task_id] = error

    def skip(
        self,
        task_id: str,
        errored_dependencies: "Sequence[str]",
        skipped_dependencies: "Sequence[str]",
    ) -> None:
        self._ensure_unclassified(task_id)

        errored, skipped = tuple(errored_dependencies), tuple(skipped_dependencies)
        logger.debug(
            "Task '%s' skipped (errored dependencies: %s, skipped dependencies: %s).",
            task_id,
            errored,
            skipped,
        )

        self.emitter.emit(
            "task_skip",
            TaskSkip(
                id=task_id,
                errored_dependencies=errored,
                skipped_dependencies=skipped,
            ),
        )

        with self._lock:
            self._skipped[task_id] = (errored, skipped)

    def get_summary(self) -> WorkflowSummary:
        with self._lock:
            return WorkflowSummary(
                tasks_finished=tuple(self._finished),
                tasks_errored=tuple(self._errored),
                tasks_skipped=tuple(self._skipped),
            )
