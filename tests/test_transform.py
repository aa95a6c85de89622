import numpy as np
import pytest

from pydpg.fem.transform import (x_mapping, det_jacobian, jacobian, inv_jac_T, jacobian_1d,
                                 ElementTransformation, FacetTransformation)


def test_reference_to_global_mapping(mesh_factory):
    mesh = mesh_factory([(0, 0), (2, 0), (0, 1)], [[0, 1, 2]])
    x = x_mapping(mesh, 0, (1/3, 1/3))
    assert np.allclose(x, [2/3, 1/3])
    # detJ is twice the area on triangles
    assert np.isclose(det_jacobian(mesh, 0, (0.2, 0.2)), 2 * mesh.areas()[0])
    assert np.allclose(jacobian(mesh, 0, (0.2, 0.2)), [[2.0, 0.0], [0.0, 1.0]])
    assert np.allclose(inv_jac_T(mesh, 0, (0.2, 0.2)), [[0.5, 0.0], [0.0, 1.0]])


def test_volume_points_measure(quad_grid, four_triangles):
    for mesh in (quad_grid, four_triangles):
        for eid in range(mesh.n_elements):
            pts = ElementTransformation(mesh, eid).volume_points(2)
            assert np.isclose(sum(p.weight for p in pts), mesh.areas()[eid])


def test_quad_facet_normals_and_lengths(unit_square_quad):
    trafo = ElementTransformation(unit_square_quad, 0)
    expected = [(0, -1), (1, 0), (0, 1), (-1, 0)]     # bottom, right, top, left
    for k, n in enumerate(expected):
        pts = trafo.facet_points(k, 3)
        assert np.isclose(sum(p.weight for p in pts), 1.0)
        for p in pts:
            assert np.allclose(p.normal, n)
            assert p.facet == k
    assert np.isclose(jacobian_1d(unit_square_quad, 0, (0.0, -1.0), 0), 0.5)


def test_triangle_hypotenuse(unit_triangle):
    trafo = ElementTransformation(unit_triangle, 0)
    pts = trafo.facet_points(1, 2)
    assert np.isclose(sum(p.weight for p in pts), np.sqrt(2.0))
    for p in pts:
        assert np.isclose(p.x.sum(), 1.0)
        assert np.allclose(p.normal, np.array([1.0, 1.0]) / np.sqrt(2.0))


def test_boundary_facets(four_triangles, quad_grid):
    for eid in range(4):
        assert ElementTransformation(four_triangles, eid).boundary_facets() == [0]
    assert ElementTransformation(quad_grid, 0).boundary_facets() == [0, 3]


def test_clockwise_element_is_rejected(mesh_factory):
    mesh = mesh_factory([(0, 0), (0, 1), (1, 0)], [[0, 1, 2]])
    with pytest.raises(ValueError):
        ElementTransformation(mesh, 0).volume_points(1)


def test_facet_transformation(quad_grid):
    gid = quad_grid.boundary_edges()[0]
    ft = FacetTransformation(quad_grid, gid)
    edge = quad_grid.edge(gid)
    assert ft.dim_element == 1 and ft.dim_space == 2
    assert ft.volume.elem_id == edge.left
    pts = ft.facet_points(2)
    assert np.isclose(sum(p.weight for p in pts), edge.length(quad_grid.nodes_x_y_pos))
    for p in pts:
        assert np.allclose(p.normal, edge.normal)
    interior = next(e.gid for e in quad_grid.edges_list if e.right is not None)
    with pytest.raises(ValueError):
        FacetTransformation(quad_grid, interior)
