"""pydpg.utils.meshgen
Structured mesh generators for quick tests.
"""
from typing import List, Optional, Tuple

import numba
import numpy as np

from pydpg.core.topology import Node

__all__ = ["structured_quad", "structured_triangles"]


def _node_objects(coords: np.ndarray) -> List[Node]:
    return [Node(id=i, x=float(c[0]), y=float(c[1])) for i, c in enumerate(coords)]


def _unique_edges(all_edges: np.ndarray) -> np.ndarray:
    if all_edges.shape[0] == 0:
        return np.empty((0, 2), dtype=np.int64)
    return np.unique(np.sort(all_edges, axis=1), axis=0)


def structured_quad(Lx: float, Ly: float, *, nx: int, ny: int, poly_order: int = 1,
                    offset: Optional[Tuple[float, float]] = None):
    """
    Structured Qn quadrilateral mesh of [0,Lx]x[0,Ly].
    Returns node objects, element connectivity (lexicographic, eta outer),
    edge connectivity and the CCW corner nodes of each element.
    """
    if poly_order < 1:
        raise ValueError("Polynomial order must be a positive integer.")
    if nx < 1 or ny < 1:
        raise ValueError("nx and ny must be positive.")
    nodes_coords, elements, all_edges, corners = _structured_qn_numba(
        float(Lx), float(Ly), int(nx), int(ny), int(poly_order))
    if offset is not None:
        nodes_coords = nodes_coords + np.asarray(offset, dtype=np.float64)
    return _node_objects(nodes_coords), elements, _unique_edges(all_edges), corners


@numba.njit(parallel=True, cache=True)
def _structured_qn_numba(Lx, Ly, nx, ny, order):
    num_global_nodes_x = order * nx + 1
    num_global_nodes_y = order * ny + 1
    nodes_coords = np.zeros((num_global_nodes_x * num_global_nodes_y, 2), dtype=np.float64)
    x_coords = np.linspace(0.0, Lx, num_global_nodes_x)
    y_coords = np.linspace(0.0, Ly, num_global_nodes_y)

    for j_glob in numba.prange(num_global_nodes_y):
        for i_glob in range(num_global_nodes_x):
            node_id = j_glob * num_global_nodes_x + i_glob
            nodes_coords[node_id, 0] = x_coords[i_glob]
            nodes_coords[node_id, 1] = y_coords[j_glob]

    num_elements = nx * ny
    n1d = order + 1
    elements = np.empty((num_elements, n1d * n1d), dtype=np.int64)
    elements_corner_nodes = np.empty((num_elements, 4), dtype=np.int64)
    all_edges = np.empty((num_elements * 4, 2), dtype=np.int64)

    for el_idx in numba.prange(num_elements):
        el_j = el_idx // nx
        el_i = el_idx % nx
        start_ix, start_iy = order * el_i, order * el_j

        local_node_idx = 0
        for local_ny in range(n1d):
            for local_nx in range(n1d):
                elements[el_idx, local_node_idx] = (start_iy + local_ny) * num_global_nodes_x + start_ix + local_nx
                local_node_idx += 1

        bl = start_iy * num_global_nodes_x + start_ix
        br = bl + order
        tl = (start_iy + order) * num_global_nodes_x + start_ix
        tr = tl + order
        elements_corner_nodes[el_idx, 0] = bl
        elements_corner_nodes[el_idx, 1] = br
        elements_corner_nodes[el_idx, 2] = tr
        elements_corner_nodes[el_idx, 3] = tl
        for k in range(4):
            all_edges[4 * el_idx + k, 0] = elements_corner_nodes[el_idx, k]
            all_edges[4 * el_idx + k, 1] = elements_corner_nodes[el_idx, (k + 1) % 4]

    return nodes_coords, elements, all_edges, elements_corner_nodes


def structured_triangles(Lx: float, Ly: float, *, nx_quads: int, ny_quads: int,
                         offset: Optional[Tuple[float, float]] = None):
    """
    P1 triangle mesh: every cell of an nx_quads x ny_quads grid is split along
    its bl-tr diagonal into two CCW triangles.
    """
    if nx_quads < 1 or ny_quads < 1:
        raise ValueError("nx_quads and ny_quads must be positive.")
    xs = np.linspace(0.0, Lx, nx_quads + 1)
    ys = np.linspace(0.0, Ly, ny_quads + 1)
    X, Y = np.meshgrid(xs, ys)
    coords = np.column_stack([X.ravel(), Y.ravel()])
    if offset is not None:
        coords = coords + np.asarray(offset, dtype=np.float64)
    nxn = nx_quads + 1
    elements = []
    for j in range(ny_quads):
        for i in range(nx_quads):
            bl = j * nxn + i
            br, tl, tr = bl + 1, bl + nxn, bl + nxn + 1
            elements.append((bl, br, tr))
            elements.append((bl, tr, tl))
    elements = np.array(elements, dtype=np.int64)
    all_edges = np.concatenate([elements[:, [0, 1]], elements[:, [1, 2]], elements[:, [2, 0]]])
    return _node_objects(coords), elements, _unique_edges(all_edges), elements.copy()
