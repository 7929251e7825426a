from typing import TYPE_CHECKING

from networkx import generate_network_text

if TYPE_CHECKING:  # pragma: no cover
    from .graph import Digraph


class Topology:
    def __init__(self, *, digraph: "Digraph", order: tuple[str, ...]) -> None:
        self.digraph = digraph
        self.order = order

    def __len__(self) -> int:
        return len(self.order)

    def __str__(self) -> str:
        return "\n".join(
            generate_network_text(
                self.digraph.subgraph(self.order), vertical_chains=True
            )
        )
