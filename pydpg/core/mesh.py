import numpy as np
from typing import Callable, Dict, List, Sequence, Tuple

from pydpg.core.topology import Edge, Node, Element


# local corners spanned by each local edge, counter-clockwise
LOCAL_EDGES = {
    'tri':  ((0, 1), (1, 2), (2, 0)),
    'quad': ((0, 1), (1, 2), (2, 3), (3, 0)),
}


class Mesh:
    """
    2-D mesh of triangles or quadrilaterals with edge topology.

    Each unique edge stores the element on its left (the first element that
    references it, for which the edge runs counter-clockwise) and, for interior
    edges, the element on its right.  ``Edge.normal`` points out of the left
    element; edges without a right element form the global boundary.

    Parameters
    ----------
    nodes
        Sequence of :class:`~pydpg.core.topology.Node`.
    element_connectivity
        (n_elem, n_nodes_per_elem) geometry nodes of every element; quads are
        stored lexicographically (eta outer, xi inner).
    edges_connectivity
        Optional (n_edges, 2) corner pairs, kept for reference only.
    elements_corner_nodes
        (n_elem, 3|4) counter-clockwise corners; derived for first-order meshes.
    """

    def __init__(self, nodes: Sequence[Node], element_connectivity, edges_connectivity=None,
                 elements_corner_nodes=None, *, element_type: str = 'tri', poly_order: int = 1):
        if element_type not in LOCAL_EDGES:
            raise KeyError(f"Unsupported element_type '{element_type}'")
        self.element_type = element_type
        self.poly_order = int(poly_order)
        self.spatial_dim = 2
        self.edges_connectivity = edges_connectivity

        self.nodes_list: List[Node] = list(nodes)
        self.nodes = np.array([n.id for n in self.nodes_list])
        self.nodes_x_y_pos = np.array([[n.x, n.y] for n in self.nodes_list], dtype=float)
        self.elements_connectivity = np.asarray(element_connectivity, dtype=int)
        self.n_elements = len(self.elements_connectivity)
        if elements_corner_nodes is None:
            elements_corner_nodes = self._first_order_corners()
        self.corner_connectivity = np.asarray(elements_corner_nodes, dtype=int)

        self.elements_list: List[Element] = [self._make_element(eid) for eid in range(self.n_elements)]
        self.edges_list: List[Edge] = []
        self._edge_by_key: Dict[Tuple[int, int], Edge] = {}
        self._neighbors: List[List[int]] = [[] for _ in range(self.n_elements)]
        self._connect_edges()

    # ------------------------------------------------------------------
    def _first_order_corners(self) -> np.ndarray:
        if self.poly_order != 1:
            raise ValueError("elements_corner_nodes is required for higher-order meshes.")
        if self.element_type == 'quad':
            # lexicographic (bl, br, tl, tr) -> CCW (bl, br, tr, tl)
            return self.elements_connectivity[:, [0, 1, 3, 2]]
        return self.elements_connectivity[:, :3]

    def _make_element(self, eid: int) -> Element:
        corners = self.corner_connectivity[eid]
        return Element(id=eid,
                       nodes=tuple(int(n) for n in self.elements_connectivity[eid]),
                       corner_nodes=tuple(int(n) for n in corners),
                       element_type=self.element_type,
                       poly_order=self.poly_order)

    def _connect_edges(self):
        local_edges = LOCAL_EDGES[self.element_type]

        # every element visits its edges CCW; the first visitor becomes the left element
        for elem in self.elements_list:
            gids = []
            for lid, (a, b) in enumerate(local_edges):
                vA, vB = elem.corner_nodes[a], elem.corner_nodes[b]
                key = (min(vA, vB), max(vA, vB))
                edge = self._edge_by_key.get(key)
                if edge is None:
                    edge = Edge(gid=len(self.edges_list), nodes=(vA, vB), left=elem.id, right=None,
                                normal=self._unit_normal(vA, vB), lid=lid)
                    self.edges_list.append(edge)
                    self._edge_by_key[key] = edge
                elif edge.right is None and edge.left != elem.id:
                    edge.right = elem.id
                    self._neighbors[edge.left].append(elem.id)
                    self._neighbors[elem.id].append(edge.left)
                else:
                    raise ValueError(f"Edge {key} is shared by more than two elements.")
                gids.append(edge.gid)
            elem.edges = tuple(gids)

        for elem in self.elements_list:
            for lid, gid in enumerate(elem.edges):
                edge = self.edges_list[gid]
                elem.neighbors[lid] = edge.right if edge.left == elem.id else edge.left

    def _unit_normal(self, vA: int, vB: int) -> np.ndarray:
        """Right-hand normal of the directed edge vA -> vB (outward for a CCW element)."""
        tx, ty = self.nodes_x_y_pos[vB] - self.nodes_x_y_pos[vA]
        length = np.hypot(tx, ty)
        if length < 1e-14:
            raise ValueError(f"Degenerate edge between nodes {vA} and {vB}.")
        return np.array([ty, -tx]) / length

    # ------------------------------------------------------------------
    def neighbors(self) -> List[List[int]]:
        return self._neighbors

    def edge(self, edge_id: int) -> Edge:
        if not 0 <= edge_id < len(self.edges_list):
            raise IndexError(f"Edge ID {edge_id} out of range.")
        return self.edges_list[edge_id]

    def is_boundary_edge(self, edge_id: int) -> bool:
        return self.edge(edge_id).on_boundary

    def boundary_edges(self) -> List[int]:
        return [e.gid for e in self.edges_list if e.on_boundary]

    def edge_orientation(self, elem_id: int, local_edge: int) -> float:
        """+1 if ``elem_id`` is the left element of its local edge, else -1."""
        edge = self.edges_list[self.elements_list[elem_id].edges[local_edge]]
        return 1.0 if edge.left == elem_id else -1.0

    def tag_boundary_edges(self, tag_functions: Dict[str, Callable[[float, float], bool]]):
        """Tag boundary edges with the first predicate that accepts their midpoint."""
        for gid in self.boundary_edges():
            edge = self.edges_list[gid]
            mx, my = self.nodes_x_y_pos[list(edge.nodes)].mean(axis=0)
            edge.tag = next((name for name, pred in tag_functions.items() if pred(mx, my)), edge.tag)

    def areas(self) -> np.ndarray:
        """Shoelace area of every element's corner polygon."""
        xy = self.nodes_x_y_pos[self.corner_connectivity]          # (n_elem, n_corners, 2)
        x, y = xy[..., 0], xy[..., 1]
        return 0.5 * np.abs(np.sum(x * np.roll(y, -1, axis=1) - y * np.roll(x, -1, axis=1), axis=1))

    def __repr__(self):
        return (f"<Mesh n_nodes={len(self.nodes_list)}, n_elems={self.n_elements}, "
                f"n_edges={len(self.edges_list)}, elem_type='{self.element_type}', "
                f"poly_order={self.poly_order}>")
