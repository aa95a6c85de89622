from functools import lru_cache
from itertools import product

import numpy as np
import sympy as sp

xi, eta = sp.symbols("xi eta")


def _lagrange_1d(var, n: int):
    """Symbolic 1-D Lagrange polynomials on n+1 equispaced points of [-1, 1]."""
    pts = [sp.Rational(2 * i, n) - 1 for i in range(n + 1)]
    basis = []
    for i, p in enumerate(pts):
        others = pts[:i] + pts[i + 1:]
        basis.append(sp.prod([(var - q) / (p - q) for q in others]))
    return pts, basis


@lru_cache(maxsize=None)
def quad_qn(n: int, max_deriv_order: int = 1):
    """
    Tensor-product Lagrange Q_n on [-1,1]^2.

    Returns ``(nodes, shape_lambda, deriv_lambdas)`` with basis k attached to
    node k; nodes are stacked eta outer, xi inner (k = j*(n+1) + i), which is
    also the element-local ordering of quadrilateral connectivity.
    """
    if n < 1:
        raise ValueError("Polynomial order n must be positive for Q_n.")
    pts, Lx = _lagrange_1d(xi, n)
    _, Ly = _lagrange_1d(eta, n)
    basis = [sp.expand(Ly[j] * Lx[i]) for j, i in product(range(n + 1), repeat=2)]

    shape_lambda = sp.lambdify((xi, eta), sp.Matrix(basis), "numpy")
    deriv_lambdas = {}
    for a_xi in range(max_deriv_order + 1):
        for a_eta in range(max_deriv_order + 1 - a_xi):
            d = [sp.diff(phi, xi, a_xi, eta, a_eta) for phi in basis]
            deriv_lambdas[(a_xi, a_eta)] = sp.lambdify((xi, eta), sp.Matrix(d), "numpy")

    nodes = np.array([[float(pts[i]), float(pts[j])] for j, i in product(range(n + 1), repeat=2)])
    return nodes, shape_lambda, deriv_lambdas
