"""
Directed graph over task ids. Edges point from a task to each of its dependencies.
"""

from typing import TYPE_CHECKING

import networkx as nx

if TYPE_CHECKING:  # pragma: no cover
    from collections.abc import Iterable, Iterator


class Digraph:
    def __init__(self) -> None:
        # node and successor insertion order is preserved by networkx, which keeps
        # topological orders deterministic
        self._digraph = nx.DiGraph()

    def __contains__(self, node: object) -> bool:
        return node in self._digraph

    def __iter__(self) -> "Iterator[str]":
        return iter(self._digraph)

    def __len__(self) -> int:
        return len(self._digraph)

    def add_node(self, node: str) -> None:
        if node not in self._digraph:
            self._digraph.add_node(node)

    def add_edge(self, from_node: str, to_node: str) -> None:
        """Record `to_node` as a dependency of `from_node`, creating either if missing."""
        self._digraph.add_edge(from_node, to_node)

    def dependencies(self, node: str) -> list[str]:
        if node not in self._digraph:
            return []

        return list(self._digraph.successors(node))

    def has_cycle(self) -> bool:
        return not nx.is_directed_acyclic_graph(self._digraph)

    def topological_sort(self, selected: "Iterable[str] | None" = None) -> list[str]:
        """
        Depth-first post-order from `selected` (every node by default), so each node
        follows all of its transitive dependencies.

        Cycles are not detected here. The traversal always terminates, but on a cyclic
        graph the result is not a valid topological order; check `has_cycle` first.
        """
        visited: set[str] = set()
        order: list[str] = []

        for root in self._digraph if selected is None else selected:
            if root in visited:
                continue

            visited.add(root)
            stack = [(root, iter(self.dependencies(root)))]

            while stack:
                node, neighbors = stack[-1]

                for neighbor in neighbors:
                    if neighbor not in visited:
                        visited.add(neighbor)
                        stack.append((neighbor, iter(self.dependencies(neighbor))))
                        break
                else:
                    stack.pop()
                    order.append(node)

        return order

    def cycles(self) -> list[tuple[str, ...]]:
        return sorted(
            (tuple(cycle) for cycle in nx.simple_cycles(self._digraph)), key=len
        )

    def subgraph(self, nodes: "Iterable[str]") -> nx.DiGraph:
        return self._digraph.subgraph(node for node in nodes if node in self._digraph)
