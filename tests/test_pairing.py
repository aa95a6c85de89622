import numpy as np
import pytest
import sympy as sp

from pydpg.coefficients import Analytic, Constant, x, y
from pydpg.errors import UnsupportedSpaceError
from pydpg.fem import H1, L2, HDiv, CompoundSpace
from pydpg.fem.reference import get_reference
from pydpg.fem.transform import ElementTransformation
from pydpg.integration import quadrature
from pydpg.integrators import PairingIntegrator


def test_gradgrad_unit_square_golden(unit_square_quad):
    mesh = unit_square_quad
    X = CompoundSpace([H1(mesh, 1), H1(mesh, 1)])
    integ = PairingIntegrator('GradGrad', 1, 1, 1.0)
    K = integ.calc_element_matrix(X, ElementTransformation(mesh, 0))
    K_ref = np.array([[4, -1, -1, -2],
                      [-1, 4, -2, -1],
                      [-1, -2, 4, -1],
                      [-2, -1, -1, 4]]) / 6.0
    expected = np.zeros((8, 8))
    expected[:4, :4] = K_ref
    assert K.dtype == np.float64
    assert np.allclose(K, expected)


def test_eyeeye_reduces_to_mass_matrix(unit_triangle):
    X = CompoundSpace([H1(unit_triangle, 1)])
    M = PairingIntegrator('EyeEye', 1, 1, 1.0).calc_element_matrix(
        X, ElementTransformation(unit_triangle, 0))
    assert np.allclose(M, np.array([[2, 1, 1], [1, 2, 1], [1, 1, 2]]) / 24.0)

    # independent direct quadrature on the reference triangle
    ref = get_reference('tri', 1)
    pts, wts = quadrature.volume('tri', 4)
    M_direct = sum(w * np.outer(ref.shape(a, b), ref.shape(a, b)) for (a, b), w in zip(pts, wts))
    assert np.allclose(M, M_direct)


@pytest.mark.parametrize("name", ['GradGrad', 'EyeEye', 'TraceTrace'])
@pytest.mark.parametrize("k,m", [(1, 1), (2, 2), (1, 2), (2, 1)])
def test_symmetry_law(quad_grid, name, k, m):
    X = CompoundSpace([H1(quad_grid, 1), L2(quad_grid, 1)])
    integ = PairingIntegrator(name, k, m, Analytic(1 + x * y))
    assert integ.is_symmetric
    for eid in range(quad_grid.n_elements):
        A = integ.calc_element_matrix(X, ElementTransformation(quad_grid, eid))
        assert np.allclose(A, A.T)
        assert np.abs(A).max() > 0


def test_symmetry_law_flux_trace(four_triangles):
    X = CompoundSpace([HDiv(four_triangles), L2(four_triangles, 1)])
    integ = PairingIntegrator('FluxTrace', 1, 2, 2.5)
    for eid in range(four_triangles.n_elements):
        A = integ.calc_element_matrix(X, ElementTransformation(four_triangles, eid))
        assert np.allclose(A, A.T)
        assert np.allclose(A[:3, :3], 0.0) and np.allclose(A[3:, 3:], 0.0)


def test_flux_operator_needs_flux_space(four_triangles):
    X = CompoundSpace([HDiv(four_triangles), L2(four_triangles, 1)])
    integ = PairingIntegrator('FluxTrace', 2, 1, 1.0)
    with pytest.raises(UnsupportedSpaceError):
        integ.calc_element_matrix(X, ElementTransformation(four_triangles, 0))


def _direct_gradgrad_block(space_u, space_v, trafo, coeff, order):
    B = 0
    for mip in trafo.volume_points(order):
        gu = space_u.dshape(trafo, mip)
        gv = space_v.dshape(trafo, mip)
        B = B + mip.weight * coeff.evaluate(mip.x) * (gv @ gu.T)
    return B


def test_hermitian_law(quad_grid):
    a = Analytic(1 + x + sp.I * y)
    X = CompoundSpace([H1(quad_grid, 1), L2(quad_grid, 1)])
    trafo = ElementTransformation(quad_grid, 3)
    integ = PairingIntegrator('GradGrad', 1, 2, a)
    assert not integ.is_symmetric
    A = integ.calc_element_matrix(X, trafo)
    assert A.dtype == np.complex128
    B = _direct_gradgrad_block(X.component(0), X.component(1), trafo, a, 3)
    r1, r2 = X.ranges
    assert np.allclose(A[r2, r1], B)
    assert np.allclose(A[r1, r2], B.conj().T)
    assert np.allclose(A[r1, r1], 0.0) and np.allclose(A[r2, r2], 0.0)
    assert np.allclose(A, A.conj().T)


def test_complex_diagonal_block_is_not_symmetrized(quad_grid):
    a = Constant(2 + 1j)
    X = CompoundSpace([H1(quad_grid, 1)])
    trafo = ElementTransformation(quad_grid, 0)
    A = PairingIntegrator('EyeEye', 1, 1, a).calc_element_matrix(X, trafo)
    A_real = PairingIntegrator('EyeEye', 1, 1, 1.0).calc_element_matrix(X, trafo)
    assert np.allclose(A, (2 + 1j) * A_real)


def test_real_and_complex_paths_agree(quad_grid):
    X = CompoundSpace([H1(quad_grid, 1), L2(quad_grid, 1)])
    integ = PairingIntegrator('GradGrad', 2, 1, Analytic(2 + x))
    trafo = ElementTransformation(quad_grid, 1)
    Ar = integ.calc_element_matrix_real(X, trafo)
    Ac = integ.calc_element_matrix_complex(X, trafo)
    assert Ar.dtype == np.float64 and Ac.dtype == np.complex128
    assert np.allclose(Ac.real, Ar) and np.allclose(Ac.imag, 0.0)


def test_complex_coefficient_rejects_real_buffer(quad_grid):
    X = CompoundSpace([H1(quad_grid, 1)])
    integ = PairingIntegrator('EyeEye', 1, 1, 1j)
    trafo = ElementTransformation(quad_grid, 0)
    with pytest.raises(TypeError):
        integ.calc_element_matrix_real(X, trafo)
    with pytest.raises(TypeError):
        integ.calc_element_matrix(X, trafo, out=np.zeros((4, 4)))


def test_output_buffer_is_reset(unit_square_quad):
    X = CompoundSpace([H1(unit_square_quad, 1)])
    trafo = ElementTransformation(unit_square_quad, 0)
    integ = PairingIntegrator('GradGrad', 1, 1, 1.0)
    buf = np.ones((4, 4))
    out = integ.calc_element_matrix(X, trafo, out=buf)
    assert out is buf
    assert np.allclose(out, integ.calc_element_matrix(X, trafo))
    with pytest.raises(ValueError):
        integ.calc_element_matrix(X, trafo, out=np.zeros((3, 3)))


def test_quad_order_override(unit_square_quad):
    X = CompoundSpace([H1(unit_square_quad, 1)])
    trafo = ElementTransformation(unit_square_quad, 0)
    A = PairingIntegrator('EyeEye', 1, 1, 1.0, quad_order=2).calc_element_matrix(X, trafo)
    B = PairingIntegrator('EyeEye', 1, 1, 1.0, quad_order=5).calc_element_matrix(X, trafo)
    assert np.allclose(A, B)
    assert np.isclose(A.sum(), 1.0)


def test_dimension_bookkeeping():
    vol = PairingIntegrator('GradGrad', 1, 1, 1.0)
    facets = PairingIntegrator('TraceTrace', 1, 1, 1.0)
    bnd = PairingIntegrator('FluxFluxBoundary', 1, 1, 1.0)
    robin = PairingIntegrator('RobinVolume', 1, 1, 1.0)
    assert (vol.dim_element, vol.vb, vol.boundary_form) == (2, 'vol', False)
    assert (facets.dim_element, facets.vb) == (2, 'vol')
    assert (bnd.dim_element, bnd.vb, bnd.boundary_form) == (1, 'bnd', True)
    assert (robin.dim_element, robin.vb) == (2, 'vol')
    assert all(i.dim_space == 2 for i in (vol, facets, bnd, robin))
