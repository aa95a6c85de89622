import numpy as np
import scipy.sparse as sp

from pydpg.assembly import assemble_matrix, assemble_vector
from pydpg.core import DofHandler
from pydpg.fem import H1, L2, CompoundSpace
from pydpg.integrators import NeumannVolume, PairingIntegrator, parse_form_line


def test_stiffness_and_mass(quad_grid):
    dh = DofHandler(CompoundSpace([H1(quad_grid, 1)]))
    K = assemble_matrix(dh, [PairingIntegrator('GradGrad', 1, 1, 1.0)])
    M = assemble_matrix(dh, [PairingIntegrator('EyeEye', 1, 1, 1.0)])
    assert sp.issparse(K) and K.format == "csr"
    assert np.allclose(K @ np.ones(dh.total_dofs), 0.0)
    assert np.allclose((K - K.T).toarray(), 0.0)
    assert np.isclose(M.sum(), 2.0)


def test_mixed_form_from_lines(quad_grid):
    dh = DofHandler(CompoundSpace([H1(quad_grid, 1), L2(quad_grid, 0)]))
    lines = ["GradGrad 1 1 1", "EyeEye 1 2 2", "TraceTraceBoundary 1 1 1"]
    A = assemble_matrix(dh, [parse_form_line(l) for l in lines])
    assert A.shape == (dh.total_dofs, dh.total_dofs)
    assert np.allclose((A - A.T).toarray(), 0.0)
    u = dh.component_range(0)
    p = dh.component_range(1)
    # ∫ 2 * 1 * 1 over the domain
    assert np.isclose(A[p, u].sum(), 4.0)
    # GradGrad annihilates constants; the boundary mass sums to the perimeter
    assert np.isclose(A[u, u].sum(), 6.0)


def test_complex_assembly(quad_grid):
    dh = DofHandler(CompoundSpace([H1(quad_grid, 1)]))
    A = assemble_matrix(dh, [PairingIntegrator('EyeEye', 1, 1, 1j)])
    assert A.dtype == np.complex128
    assert np.isclose(A.sum(), 2j)


def test_boundary_load(quad_grid):
    dh = DofHandler(CompoundSpace([H1(quad_grid, 1)]))
    F = assemble_vector(dh, [NeumannVolume(1, 1.0, 0.0, 0.0)])
    assert np.isclose(F.sum(), 6.0)
    F = assemble_vector(dh, [NeumannVolume(1, 0.0, 1.0, 0.0)])
    # ∫ n_x ds vanishes on a closed boundary
    assert np.isclose(F.sum(), 0.0)
