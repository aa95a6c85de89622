# conftest.py
import numpy as np
import pytest

from pydpg.core import Mesh, Node
from pydpg.utils.meshgen import structured_quad


def make_mesh(coords, elements, element_type='tri', poly_order=1):
    nodes = [Node(i, float(x), float(y)) for i, (x, y) in enumerate(coords)]
    return Mesh(nodes, np.asarray(elements), element_type=element_type, poly_order=poly_order)


@pytest.fixture
def unit_square_quad():
    """One Q1 element on [0,1]^2, nodes stored lexicographically."""
    nodes, elems, edges, corners = structured_quad(1.0, 1.0, nx=1, ny=1, poly_order=1)
    return Mesh(nodes, elems, edges, corners, element_type='quad', poly_order=1)


@pytest.fixture
def unit_triangle():
    """The reference triangle (0,0)-(1,0)-(0,1)."""
    return make_mesh([(0, 0), (1, 0), (0, 1)], [[0, 1, 2]])


@pytest.fixture
def four_triangles():
    """Unit square split into four triangles around its centre; every
    element has exactly one facet on the global boundary."""
    coords = [(0, 0), (1, 0), (1, 1), (0, 1), (0.5, 0.5)]
    return make_mesh(coords, [[0, 1, 4], [1, 2, 4], [2, 3, 4], [3, 0, 4]])


@pytest.fixture
def quad_grid():
    nodes, elems, edges, corners = structured_quad(2.0, 1.0, nx=2, ny=2, poly_order=1)
    return Mesh(nodes, elems, edges, corners, element_type='quad', poly_order=1)


@pytest.fixture
def mesh_factory():
    return make_mesh
