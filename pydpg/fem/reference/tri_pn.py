from functools import lru_cache

import numpy as np
import sympy as sp

xi, eta = sp.symbols("xi eta")


def _silvester(lam, k: int, n: int):
    """Silvester's polynomial: vanishes on lam = m/n for m < k, equals 1 at lam = k/n."""
    return sp.prod([(n * lam - m) / (m + 1) for m in range(k)])


@lru_cache(maxsize=None)
def tri_pn(n: int, max_deriv_order: int = 1):
    """
    Lagrange P_n on the reference triangle (0,0)-(1,0)-(0,1).

    Nodes are the lattice points (i/n, j/n), i + j <= n, stacked row by row
    (j outer, i inner); P_0 has a single node at the centroid.

    Returns ``(nodes, shape_lambda, deriv_lambdas)`` where ``deriv_lambdas``
    maps multi-indices (a_xi, a_eta) with a_xi + a_eta <= max_deriv_order to
    lambdified derivative vectors.
    """
    if n < 0:
        raise ValueError("Polynomial order n must be non-negative.")
    if n == 0:
        nodes = [(sp.Rational(1, 3), sp.Rational(1, 3))]
        basis = [sp.Integer(1)]
    else:
        lam0 = 1 - xi - eta
        nodes, basis = [], []
        for j in range(n + 1):
            for i in range(n + 1 - j):
                nodes.append((sp.Rational(i, n), sp.Rational(j, n)))
                basis.append(sp.expand(_silvester(xi, i, n) * _silvester(eta, j, n)
                                       * _silvester(lam0, n - i - j, n)))

    shape_lambda = sp.lambdify((xi, eta), sp.Matrix(basis), "numpy")
    deriv_lambdas = {}
    for a_xi in range(max_deriv_order + 1):
        for a_eta in range(max_deriv_order + 1 - a_xi):
            d = [sp.diff(phi, xi, a_xi, eta, a_eta) for phi in basis]
            deriv_lambdas[(a_xi, a_eta)] = sp.lambdify((xi, eta), sp.Matrix(d), "numpy")

    return np.array(nodes, dtype=float), shape_lambda, deriv_lambdas
