import pytest
from pydantic import ValidationError

from taskweave import (
    ConcurrentExecutor,
    SerialExecutor,
    StagedExecutor,
    Task,
    TaskSkip,
    WorkflowBuilder,
)
from taskweave.executor import compute_stages, get_executor

from .workflow_tasks import ALL_TASKS, Timeline, bad_foo, bar, baz


def _diamond(timeline: Timeline, delay: float = 0.05) -> WorkflowBuilder:
    """a <- b, a <- c, (b, c) <- d, plus an unrelated slow task e."""
    builder = WorkflowBuilder()
    builder.add_tasks(
        Task(id="a", run=timeline.sleeper("a", delay)),
        Task(id="b", dependencies=["a"], run=timeline.sleeper("b", delay * 2)),
        Task(id="c", dependencies=["a"], run=timeline.sleeper("c", delay * 2)),
        Task(id="d", dependencies=["b", "c"], run=timeline.sleeper("d", delay)),
        Task(id="e", run=timeline.sleeper("e", delay * 6)),
    )
    return builder


@pytest.mark.anyio
@pytest.mark.parametrize(
    "executor",
    (SerialExecutor(), ConcurrentExecutor(), StagedExecutor(limit=2)),
    ids=("serial", "concurrent", "staged"),
)
async def test_dependencies_finish_before_dependents_start(executor):
    timeline = Timeline()
    workflow = _diamond(timeline).build(executor=executor)

    summary = await workflow.run()

    assert set(summary.tasks_finished) == {"a", "b", "c", "d", "e"}
    for task_id in workflow.task_order:
        for dep in workflow.tasks[task_id].dependencies:
            assert timeline.started[task_id] >= timeline.finished[dep]


@pytest.mark.anyio
async def test_concurrent_runs_independent_branches_together():
    timeline = Timeline()
    workflow = _diamond(timeline).build_concurrent()

    await workflow.run()

    # siblings overlap
    assert timeline.started["c"] < timeline.finished["b"]
    assert timeline.started["b"] < timeline.finished["c"]
    # d only waits for its own dependencies, not for the slow unrelated task
    assert timeline.started["d"] < timeline.finished["e"]
    assert timeline.max_active >= 2


@pytest.mark.anyio
async def test_concurrent_completion_order_follows_duration():
    timeline = Timeline()
    builder = WorkflowBuilder()
    builder.add_tasks(
        Task(id="slow", run=timeline.sleeper("slow", 0.2)),
        Task(id="fast", run=timeline.sleeper("fast", 0.01)),
    )

    finished = []
    serial = builder.build_serial()
    serial.emitter.on("task_finish", lambda event: finished.append(event.id))
    await serial.run()
    assert finished == ["slow", "fast"]

    finished.clear()
    concurrent = builder.build_concurrent()
    concurrent.emitter.on("task_finish", lambda event: finished.append(event.id))
    summary = await concurrent.run()
    assert finished == ["fast", "slow"]
    assert summary.tasks_finished == ("fast", "slow")


@pytest.mark.anyio
@pytest.mark.parametrize("build", ("build_concurrent", "build_staged"))
async def test_limit_caps_running_bodies(build):
    timeline = Timeline()
    builder = WorkflowBuilder()
    builder.add_tasks(
        *(Task(id=f"t{i}", run=timeline.sleeper(f"t{i}", 0.02)) for i in range(6))
    )

    summary = await getattr(builder, build)(limit=2).run()

    assert len(summary.tasks_finished) == 6
    assert timeline.max_active == 2


@pytest.mark.anyio
async def test_limit_of_one_with_dependencies():
    timeline = Timeline()
    workflow = _diamond(timeline, delay=0.01).build_concurrent(limit=1)

    summary = await workflow.run()

    assert len(summary.tasks_finished) == 5
    assert timeline.max_active == 1


@pytest.mark.anyio
@pytest.mark.parametrize(
    "executor",
    (SerialExecutor(), ConcurrentExecutor(limit=3), StagedExecutor()),
    ids=("serial", "concurrent", "staged"),
)
async def test_skip_cascade(executor):
    builder = WorkflowBuilder()
    builder.add_tasks(
        bad_foo,
        bar,
        baz,
        Task(id="left", dependencies=["foo"], run=lambda ctx: None),
        Task(id="join", dependencies=["left", "baz"], run=lambda ctx: None),
    )
    workflow = builder.build(executor=executor)

    skips = {}
    workflow.emitter.on("task_skip", lambda event: skips.__setitem__(event.id, event))

    summary = await workflow.run({"hello": "world"})

    assert summary.tasks_errored == ("foo",)
    assert summary.tasks_finished == ()
    assert set(summary.tasks_skipped) == {"bar", "baz", "left", "join"}
    assert skips["bar"] == TaskSkip(
        id="bar", errored_dependencies=("foo",), skipped_dependencies=()
    )
    assert skips["join"] == TaskSkip(
        id="join", errored_dependencies=(), skipped_dependencies=("left", "baz")
    )


@pytest.mark.anyio
async def test_staged_waits_for_whole_stage():
    timeline = Timeline()
    workflow = _diamond(timeline).build_staged()

    await workflow.run()

    # b and c are at height 1, so they wait for e at height 0 too
    assert timeline.started["b"] >= timeline.finished["e"]
    assert timeline.started["c"] >= timeline.finished["e"]
    assert timeline.started["e"] < timeline.finished["a"]


def test_compute_stages():
    workflow = _diamond(Timeline()).build()

    assert workflow.task_order == ("a", "b", "c", "d", "e")
    assert compute_stages(workflow.task_order, workflow.tasks) == [
        ["a", "e"],
        ["b", "c"],
        ["d"],
    ]


def test_compute_stages_tasks_without_dependencies_are_height_zero():
    builder = WorkflowBuilder()
    builder.add_tasks(*ALL_TASKS)
    workflow = builder.build()

    assert compute_stages(workflow.task_order, workflow.tasks) == [
        ["foo"],
        ["bar"],
        ["baz"],
    ]


@pytest.mark.parametrize("executor_cls", (ConcurrentExecutor, StagedExecutor))
@pytest.mark.parametrize("limit", (0, -1))
def test_invalid_limit(executor_cls, limit):
    with pytest.raises(ValidationError):
        executor_cls(limit=limit)


def test_get_executor():
    assert isinstance(get_executor("serial"), SerialExecutor)

    concurrent = get_executor("concurrent", 4)
    assert isinstance(concurrent, ConcurrentExecutor)
    assert concurrent.limit == 4

    staged = get_executor("staged")
    assert isinstance(staged, StagedExecutor)
    assert staged.limit is None

    with pytest.raises(ValueError, match="parallel"):
        get_executor("parallel")
