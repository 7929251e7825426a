from dataclasses import dataclass
from typing import TYPE_CHECKING, Generic, Literal, TypeVar, get_args, overload

from .exceptions import UnknownEventError

if TYPE_CHECKING:  # pragma: no cover
    from collections.abc import Callable
    from typing import Any

    Listener = Callable[[Any], None]

T = TypeVar("T")

EventName = Literal[
    "workflow_start",
    "task_start",
    "task_finish",
    "task_throw",
    "task_skip",
    "workflow_finish",
]
EVENT_NAMES: tuple[EventName, ...] = get_args(EventName)


@dataclass(frozen=True, kw_only=True, slots=True)
class WorkflowStart(Generic[T]):
    """Emitted once, before the first task of a run is attempted."""

    context: T
    task_order: tuple[str, ...]


@dataclass(frozen=True, kw_only=True, slots=True)
class TaskStart:
    """Emitted when a task body is about to run. Never emitted for skipped tasks."""

    id: str


@dataclass(frozen=True, kw_only=True, slots=True)
class TaskFinish(Generic[T]):
    """Emitted when a task body returns."""

    id: str
    result: T


@dataclass(frozen=True, kw_only=True, slots=True)
class TaskThrow:
    """Emitted when a task body raises."""

    id: str
    error: BaseException


@dataclass(frozen=True, kw_only=True, slots=True)
class TaskSkip:
    """
    Emitted instead of running a task when any of its dependencies errored or was
    itself skipped.
    """

    id: str
    errored_dependencies: tuple[str, ...]
    skipped_dependencies: tuple[str, ...]


@dataclass(frozen=True, kw_only=True, slots=True)
class WorkflowSummary:
    """
    Terminal classification of every attempted task. Emitted once as the payload of
    `workflow_finish` and returned from `Workflow.run`.
    """

    tasks_finished: tuple[str, ...] = ()
    tasks_errored: tuple[str, ...] = ()
    tasks_skipped: tuple[str, ...] = ()

    @property
    def succeeded(self) -> bool:
        return not self.tasks_errored and not self.tasks_skipped


EVENT_PAYLOADS: dict[EventName, type] = {
    "workflow_start": WorkflowStart,
    "task_start": TaskStart,
    "task_finish": TaskFinish,
    "task_throw": TaskThrow,
    "task_skip": TaskSkip,
    "workflow_finish": WorkflowSummary,
}


class EventEmitter:
    """
    Synchronous publish/subscribe for workflow lifecycle events. Listeners are called
    in registration order from within `emit`; exceptions they raise propagate to the
    caller of `emit`.
    """

    def __init__(self) -> None:
        self._listeners: dict[EventName, list["Listener"]] = {
            name: [] for name in EVENT_NAMES
        }

    def _listeners_for(self, name: str) -> list["Listener"]:
        try:
            return self._listeners[name]
        except KeyError:
            raise UnknownEventError(name) from None

    @overload
    def on(
        self, name: EventName, listener: None = None
    ) -> "Callable[[Listener], Listener]": ...

    @overload
    def on(self, name: EventName, listener: "Listener") -> "Listener": ...

    def on(self, name, listener=None):
        """
        Subscribe `listener` to `name`. Without a listener, returns a decorator.

        ```python
        @workflow.emitter.on("task_finish")
        def _log_finish(event: TaskFinish) -> None: ...
        ```
        """
        listeners = self._listeners_for(name)

        if listener is None:

            def _register(fn: "Listener") -> "Listener":
                listeners.append(fn)
                return fn

            return _register

        listeners.append(listener)
        return listener

    def off(self, name: EventName, listener: "Listener") -> None:
        listeners = self._listeners_for(name)

        if listener in listeners:
            listeners.remove(listener)

    def emit(self, name: EventName, payload: "Any") -> None:
        listeners = self._listeners_for(name)

        if not isinstance(payload, expected := EVENT_PAYLOADS[name]):
            raise TypeError(
                f"Event '{name}' expects a {expected.__name__} payload, got"
                f" {type(payload).__name__}."
            )

        # copy so listeners may unsubscribe while being notified
        for listener in tuple(listeners):
            listener(payload)
