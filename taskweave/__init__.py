from fast_depends import Depends

from .config import Config
from .events import (
    EventEmitter,
    TaskFinish,
    TaskSkip,
    TaskStart,
    TaskThrow,
    WorkflowStart,
    WorkflowSummary,
)
from .executor import ConcurrentExecutor, Executor, SerialExecutor, StagedExecutor
from .task import Task, TaskRunContext
from .tracker import TaskState, TaskTracker
from .workflow import Workflow, WorkflowBuilder

__all__ = [
    "Config",
    "ConcurrentExecutor",
    "Depends",
    "EventEmitter",
    "Executor",
    "SerialExecutor",
    "StagedExecutor",
    "Task",
    "TaskFinish",
    "TaskRunContext",
    "TaskSkip",
    "TaskStart",
    "TaskState",
    "TaskThrow",
    "TaskTracker",
    "Workflow",
    "WorkflowBuilder",
    "WorkflowStart",
    "WorkflowSummary",
]
