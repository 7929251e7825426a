from typing import Annotated, Literal

from annotated_types import Ge
from pydantic import PositiveInt
from pydantic_settings import BaseSettings, SettingsConfigDict

ExecutorName = Literal["serial", "concurrent", "staged"]


class Config(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="TASKWEAVE_")

    default_executor: ExecutorName = "serial"
    """Executor bound by `WorkflowBuilder.build` when none is given explicitly."""

    concurrency_limit: Annotated[int, Ge(1)] | None = None
    """ Max task bodies running at once for the default executor. Unbounded if unset."""

    run_sync_in_thread: bool = True
    """ Run synchronous task functions in a worker thread instead of on the loop."""

    async_backend: str = "asyncio"
    """ Backend used by `Workflow.__call__` when invoked outside an event loop."""

    thread_limit: PositiveInt | None = None
    """ Max worker threads for synchronous task functions. Uses anyio's default if unset."""
