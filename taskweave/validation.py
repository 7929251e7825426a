from typing import TYPE_CHECKING

from .exceptions import CyclicGraphError, UnregisteredDependencyError
from .graph import Digraph
from .topology import Topology

if TYPE_CHECKING:  # pragma: no cover
    from collections.abc import Iterable, Mapping

    from .task import Task


def validate_task_graph(
    tasks: "Mapping[str, Task]", selection: "Iterable[str] | None" = None
) -> Topology:
    """
    Validate the dependency graph of `tasks` and compute the order needed to run
    `selection` (every task if omitted) along with its transitive dependencies.
    """
    digraph = Digraph()

    for task in tasks.values():
        digraph.add_node(task.id)

        # missing dependencies are added implicitly, so registration order is irrelevant
        for dep in task.dependencies:
            digraph.add_edge(task.id, dep)

    if digraph.has_cycle():
        raise CyclicGraphError(digraph.cycles())

    order = tuple(digraph.topological_sort(selection))

    # only the selected subgraph needs to be fully registered
    for task_id in order:
        if task_id not in tasks:
            raise UnregisteredDependencyError(task_id)

    return Topology(digraph=digraph, order=order)
