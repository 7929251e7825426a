from typing import TYPE_CHECKING

from .base import Executor
from .concurrent import ConcurrentExecutor
from .serial import SerialExecutor
from .staged import StagedExecutor, compute_stages

if TYPE_CHECKING:  # pragma: no cover
    from taskweave.config import ExecutorName


def get_executor(name: "ExecutorName", limit: int | None = None) -> Executor:
    if name == "serial":
        return SerialExecutor()
    elif name == "concurrent":
        return ConcurrentExecutor(limit=limit)
    elif name == "staged":
        return StagedExecutor(limit=limit)

    raise ValueError(f"Unknown executor '{name}'.")


__all__ = [
    "ConcurrentExecutor",
    "Executor",
    "SerialExecutor",
    "StagedExecutor",
    "compute_stages",
    "get_executor",
]
