import pytest

from taskweave import WorkflowBuilder

from .workflow_tasks import EventRecorder


@pytest.fixture(
    params=[
        pytest.param(("asyncio", {"use_uvloop": False}), id="asyncio"),
        pytest.param(
            ("trio", {"restrict_keyboard_interrupt_to_checkpoints": True}), id="trio"
        ),
    ],
    scope="session",
)
def anyio_backend(request):
    return request.param


@pytest.fixture
def builder():
    return WorkflowBuilder()


@pytest.fixture
def record():
    """Attach an `EventRecorder` to a workflow's emitter."""
    return EventRecorder.attach
