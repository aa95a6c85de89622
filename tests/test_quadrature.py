import numpy as np
import pytest
from pydpg.integration import quadrature as q


def integrate_ref_tri(func, order):
    pts, wts = q.volume('tri', order)
    fvals = np.array([func(xy) for xy in pts])
    return (fvals * wts).sum()


def test_constant_volume():
    for et in ('tri', 'quad'):
        pts, wts = q.volume(et, 3)
        exact = 0.5 if et == 'tri' else 4.0
        assert np.isclose(wts.sum(), exact, rtol=1e-12)


def test_linear_exact_tri():
    # ∫_T ξ dA over the reference triangle = 1/6
    assert np.isclose(integrate_ref_tri(lambda xy: xy[0], order=2), 1/6, rtol=1e-12)


def test_quadratic_exact_tri():
    # ∫_T ξ η dA = 1/24
    assert np.isclose(integrate_ref_tri(lambda xy: xy[0] * xy[1], order=3), 1/24, rtol=1e-12)


def test_edge_rule_parameter_lengths():
    _, wq = q.edge('quad', 0, 3)
    _, wt = q.edge('tri', 1, 3)
    assert np.isclose(wq.sum(), 2.0)       # t in [-1, 1]
    assert np.isclose(wt.sum(), 1.0)       # t in [0, 1]


@pytest.mark.parametrize("et", ['tri', 'quad'])
def test_edge_points_lie_on_edges(et):
    from pydpg.fem.reference import REFERENCE_VERTICES
    verts = REFERENCE_VERTICES[et]
    n = q.n_edges(et)
    for k in range(n):
        a, b = verts[k], verts[(k + 1) % n]
        pts, _ = q.edge(et, k, 4)
        d = b - a
        cross = (pts[:, 0] - a[0]) * d[1] - (pts[:, 1] - a[1]) * d[0]
        assert np.allclose(cross, 0.0)
        # the tangent runs from vertex k to vertex k+1
        t = q.edge_tangent(et, k)
        assert np.isclose(t[0] * d[1] - t[1] * d[0], 0.0)
        assert t @ d > 0


def test_line_quadrature_length():
    pts, wts = q.line_quadrature([0.0, 0.0], [3.0, 4.0], order=2)
    assert np.isclose(wts.sum(), 5.0)
    assert np.isclose((wts * pts[:, 0]).sum(), 5.0 * 1.5)


def test_invalid_rules():
    with pytest.raises(ValueError):
        q.gauss_legendre(0)
    with pytest.raises(KeyError):
        q.volume('hex', 2)
    with pytest.raises(IndexError):
        q.edge('tri', 3, 2)
