import numpy as np
from dataclasses import dataclass, field
from typing import Dict, Optional, Tuple


@dataclass(slots=True)
class Node:
    """A mesh vertex."""
    id: int
    x: float
    y: float
    tag: Optional[str] = None


@dataclass(slots=True)
class Edge:
    gid: int
    nodes: Tuple[int, int]      # endpoints, CCW with respect to the left element
    left: Optional[int]         # owning element
    right: Optional[int]        # neighbour across the edge, None on the global boundary
    normal: np.ndarray          # unit normal out of the left element
    tag: str = ""
    lid: Optional[int] = None   # local edge index within the left element

    @property
    def on_boundary(self) -> bool:
        return self.right is None

    def length(self, nodes_xy) -> float:
        a, b = self.nodes
        return float(np.hypot(*(nodes_xy[b] - nodes_xy[a])))


@dataclass(slots=True)
class Element:
    id: int
    nodes: Tuple[int, ...]                 # geometry nodes, element-local order
    corner_nodes: Tuple[int, ...] = ()     # CCW corners
    edges: Tuple[int, ...] = ()            # local edge -> global edge id
    neighbors: Dict[int, Optional[int]] = field(default_factory=dict)   # local edge -> element
    element_type: str = "quad"
    poly_order: int = 1
    tag: str = ""

    def local_edge(self, edge_id: int) -> int:
        """Local index of global edge ``edge_id`` in this element."""
        try:
            return self.edges.index(edge_id)
        except ValueError:
            raise KeyError(f"Edge {edge_id} is not an edge of element {self.id}.") from None
